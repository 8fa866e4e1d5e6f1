import dataclasses

import pytest

import label_sheet_composer.config
import label_sheet_composer.geometry


config = label_sheet_composer.config
geometry = label_sheet_composer.geometry


#============================================
def build_8460_sheet() -> config.Sheet:
	"""
	Build the Avery 8460 sheet with explicit gaps.
	"""
	return config.Sheet(
		page_width=612.0,
		page_height=792.0,
		margin_left=13.5,
		margin_right=13.5,
		margin_top=36.0,
		margin_bottom=36.0,
		columns=3,
		rows=10,
		col_gap=9.0,
		row_gap=0.0,
		label_width=189.0,
		label_height=72.0,
	)


#============================================
def test_scenario_a_page_breaks() -> None:
	"""
	35 labels on a 3x10 sheet use two pages and wrap to row 0 on page 2.
	"""
	sheet = build_8460_sheet()
	cells = [geometry.cell_for(index, sheet) for index in range(35)]
	assert geometry.page_count(35, sheet) == 2
	assert sum(1 for cell in cells if cell.page_index == 0) == 30
	second_page = [cell for cell in cells if cell.page_index == 1]
	assert len(second_page) == 5
	assert {cell.row for cell in second_page} == {0, 1}

	last_first_page = geometry.cell_for(29, sheet)
	assert (last_first_page.page_index, last_first_page.row, last_first_page.col) == (0, 9, 2)
	first_second_page = geometry.cell_for(30, sheet)
	assert (first_second_page.page_index, first_second_page.row, first_second_page.col) == (1, 0, 0)


#============================================
def test_cell_coordinates() -> None:
	"""
	Check absolute positions for the first cell and a later one.
	"""
	sheet = build_8460_sheet()
	first = geometry.cell_for(0, sheet)
	assert first.x == pytest.approx(13.5)
	assert first.y_bottom == pytest.approx(792.0 - 36.0 - 72.0)
	cell = geometry.cell_for(5, sheet)
	assert (cell.row, cell.col) == (1, 2)
	assert cell.x == pytest.approx(13.5 + 2 * (189.0 + 9.0))
	assert cell.y_bottom == pytest.approx(792.0 - 36.0 - 72.0 - 72.0)


#============================================
def test_grid_position_in_range() -> None:
	"""
	Rows and columns stay in range and pages follow the floor formula.
	"""
	sheet = build_8460_sheet()
	per_page = sheet.rows * sheet.columns
	for index in range(0, 1000, 7):
		cell = geometry.cell_for(index, sheet)
		assert 0 <= cell.col < sheet.columns
		assert 0 <= cell.row < sheet.rows
		assert cell.page_index == index // per_page


#============================================
def test_negative_index_rejected() -> None:
	sheet = build_8460_sheet()
	with pytest.raises(ValueError):
		geometry.cell_for(-1, sheet)


#============================================
@pytest.mark.parametrize("preset", sorted(config.SHEET_PRESETS))
def test_preset_cells_within_page(preset: str) -> None:
	"""
	Ensure all label slots of every preset are on-page and non-overlapping.
	"""
	sheet, _layout = config.build_preset(preset)
	epsilon = 0.001
	for index in range(sheet.labels_per_page):
		cell = geometry.cell_for(index, sheet)
		assert -epsilon <= cell.x
		assert cell.x + cell.width <= sheet.page_width + epsilon
		assert -epsilon <= cell.y_bottom
		assert cell.y_bottom + cell.height <= sheet.page_height + epsilon

	for col in range(sheet.columns - 1):
		left_cell = geometry.cell_for(col, sheet)
		right_cell = geometry.cell_for(col + 1, sheet)
		assert right_cell.x >= left_cell.x + left_cell.width - epsilon
	for row in range(sheet.rows - 1):
		upper = geometry.cell_for(row * sheet.columns, sheet)
		lower = geometry.cell_for((row + 1) * sheet.columns, sheet)
		assert lower.y_bottom + lower.height <= upper.y_bottom + epsilon


#============================================
def test_from_margins_derives_gaps() -> None:
	"""
	Gaps come from the margins, matching the hand-entered 8460 sheet.
	"""
	sheet, _layout = config.build_preset("avery_8460")
	expected = build_8460_sheet()
	assert sheet.col_gap == pytest.approx(expected.col_gap)
	assert sheet.row_gap == pytest.approx(expected.row_gap)
	assert sheet.labels_per_page == 30


#============================================
def test_inconsistent_sheet_fails_fast() -> None:
	"""
	Margins that do not add up to the page are rejected at construction.
	"""
	with pytest.raises(config.SheetConfigError):
		config.Sheet(
			page_width=612.0,
			page_height=792.0,
			margin_left=13.5,
			margin_right=13.5,
			margin_top=36.0,
			margin_bottom=36.0,
			columns=3,
			rows=10,
			col_gap=12.0,
			row_gap=0.0,
			label_width=189.0,
			label_height=72.0,
		)


#============================================
def test_negative_gap_fails_fast() -> None:
	"""
	Labels that cannot fit between the margins produce a negative gap.
	"""
	with pytest.raises(config.SheetConfigError):
		config.Sheet.from_margins(
			page_width=612.0,
			page_height=792.0,
			columns=4,
			rows=15,
			label_width=126.0,
			label_height=48.0,
			margin_left=22.14,
			margin_right=22.14,
			margin_top=36.36,
			margin_bottom=36.36,
		)


#============================================
def test_zero_grid_fails_fast() -> None:
	with pytest.raises(config.SheetConfigError):
		config.Sheet.from_margins(612.0, 792.0, 0, 10, 189.0, 72.0, 13.5, 13.5, 36.0, 36.0)


#============================================
def test_unknown_preset() -> None:
	with pytest.raises(config.SheetConfigError):
		config.build_preset("avery_0000")


#============================================
def test_layout_config_validation() -> None:
	"""
	Layout settings that would break the fitting loop are rejected.
	"""
	_sheet, layout = config.build_preset("avery_8460")
	with pytest.raises(config.SheetConfigError):
		dataclasses.replace(layout, min_font_size=20.0)
	with pytest.raises(config.SheetConfigError):
		dataclasses.replace(layout, font_size_step=0.0)
	with pytest.raises(config.SheetConfigError):
		dataclasses.replace(layout, max_lines=0)
	with pytest.raises(config.SheetConfigError):
		dataclasses.replace(layout, image_anchor="MIDDLE")
	with pytest.raises(config.SheetConfigError):
		dataclasses.replace(layout, text_align_horizontal="RIGHT")
