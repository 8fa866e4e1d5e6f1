import pytest

import label_sheet_composer.geometry


geometry = label_sheet_composer.geometry


#============================================
def build_cell(width: float = 189.0, height: float = 72.0) -> geometry.Cell:
	"""
	Build a cell at a fixed page position.
	"""
	return geometry.Cell(page_index=0, row=0, col=0, x=13.5, y_bottom=684.0, width=width, height=height)


#============================================
def test_image_keeps_configured_size() -> None:
	"""
	A QR that fits the cell height is used at exactly its configured size.
	"""
	cell = build_cell()
	region = geometry.split_cell(cell, image_size=61.2, inner_pad=4.32, gap=18.0, image_anchor="CENTER")
	image = region.image_region
	assert image.width == pytest.approx(61.2)
	assert image.height == pytest.approx(61.2)
	assert image.x == pytest.approx(13.5 + 189.0 - 4.32 - 61.2)
	assert image.y == pytest.approx(684.0 + (72.0 - 61.2) / 2.0)


#============================================
def test_image_clamped_to_cell_height() -> None:
	"""
	An oversized image shrinks only to the padded cell height.
	"""
	cell = build_cell(width=126.0, height=48.0)
	region = geometry.split_cell(cell, image_size=126.0, inner_pad=3.6, gap=3.6)
	assert region.image_region.width == pytest.approx(48.0 - 7.2)
	assert region.image_region.height == pytest.approx(48.0 - 7.2)


#============================================
@pytest.mark.parametrize(
	"anchor, expected_y",
	[
		("CENTER", 684.0 + (72.0 - 40.0) / 2.0),
		("TOP", 684.0 + 72.0 - 4.0 - 40.0),
		("BOTTOM", 684.0 + 4.0),
	],
)
def test_image_anchor(anchor: str, expected_y: float) -> None:
	cell = build_cell()
	region = geometry.split_cell(cell, image_size=40.0, inner_pad=4.0, gap=10.0, image_anchor=anchor)
	assert region.image_region.y == pytest.approx(expected_y)


#============================================
def test_text_region_left_of_image() -> None:
	"""
	Text starts at the padding edge and stops one gap before the image.
	"""
	cell = build_cell()
	region = geometry.split_cell(cell, image_size=40.0, inner_pad=4.0, gap=10.0)
	text = region.text_region
	image = region.image_region
	assert text.x == pytest.approx(cell.x + 4.0)
	assert text.y == pytest.approx(cell.y_bottom + 4.0)
	assert text.height == pytest.approx(72.0 - 8.0)
	assert text.x + text.width == pytest.approx(image.x - 10.0)
	assert not text.is_degenerate


#============================================
def test_text_region_degenerate_when_image_fills_cell() -> None:
	"""
	A narrow cell leaves no text width; this is not an error.
	"""
	cell = build_cell(width=50.0, height=72.0)
	region = geometry.split_cell(cell, image_size=40.0, inner_pad=4.0, gap=10.0)
	assert region.text_region.width == 0.0
	assert region.text_region.is_degenerate
