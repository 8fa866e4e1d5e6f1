import dataclasses

import pytest

import label_sheet_composer.compose
import label_sheet_composer.config
import label_sheet_composer.records


compose = label_sheet_composer.compose
config = label_sheet_composer.config
LabelRecord = label_sheet_composer.records.LabelRecord
ImagePayload = label_sheet_composer.records.ImagePayload

QR = ImagePayload(data=b"qr-code-bytes", mime_kind="png")
BAD = ImagePayload(data=b"bad-bytes", mime_kind="png")


#============================================
def test_thirty_five_records_two_pages(fixed_font, counting_embedder) -> None:
	"""
	Records fill page 1 then continue on page 2, in order.
	"""
	sheet, layout = config.build_preset("avery_8460")
	records = [LabelRecord(name=f"ITEM {index}") for index in range(35)]
	composed = compose.compose_labels(records, sheet, layout, fixed_font, counting_embedder)
	assert composed.page_count == 2
	assert [label.index for label in composed.labels] == list(range(35))
	assert sum(1 for label in composed.labels if label.page_index == 0) == 30
	page_indexes = [page_index for page_index, _instruction in composed.instructions()]
	assert page_indexes == sorted(page_indexes)
	assert counting_embedder.calls == []


#============================================
def test_text_and_image_per_label(fixed_font, counting_embedder) -> None:
	"""
	A named record with an image gets text runs plus one image placement.
	"""
	sheet, layout = config.build_preset("avery_8460")
	composed = compose.compose_labels(
		[LabelRecord(name="HOUSE CHIPS", image=QR)], sheet, layout, fixed_font, counting_embedder,
	)
	label = composed.labels[0]
	assert len(label.text_instructions) == 1
	assert label.text_instructions[0].text == "HOUSE CHIPS"
	assert label.text_instructions[0].font_name == layout.font_name
	image = label.image_instruction
	assert image is not None
	assert image.handle == "handle-1"
	assert image.width == pytest.approx(layout.image_size)
	assert image.x == pytest.approx(label.region.image_region.x)
	text_right = label.region.text_region.x + label.region.text_region.width
	assert text_right <= image.x - layout.text_image_gap + 1e-9


#============================================
def test_image_only_record(fixed_font, counting_embedder) -> None:
	"""
	Empty text with an image yields zero text runs and one image.
	"""
	sheet, layout = config.build_preset("avery_8460")
	composed = compose.compose_labels([LabelRecord(name="", image=QR)], sheet, layout, fixed_font, counting_embedder)
	label = composed.labels[0]
	assert label.text_instructions == []
	assert label.text_block is None
	assert label.image_instruction is not None
	assert label.instructions() == [label.image_instruction]


#============================================
def test_bad_image_keeps_text(fixed_font, counting_embedder) -> None:
	"""
	An undecodable payload drops only the image for that record.
	"""
	sheet, layout = config.build_preset("avery_8460")
	records = [
		LabelRecord(name="FRESH FRUIT", image=BAD),
		LabelRecord(name="FRESH FRUIT"),
		LabelRecord(name="DESSERT TRAY", image=QR),
	]
	composed = compose.compose_labels(records, sheet, layout, fixed_font, counting_embedder)
	broken, plain, good = composed.labels
	assert broken.image_instruction is None
	assert broken.image_error == "not an image"
	assert [run.text for run in broken.text_instructions] == ["FRESH FRUIT"]
	assert broken.text_instructions[0].font_size == plain.text_instructions[0].font_size
	assert good.image_instruction is not None
	assert composed.skipped_images == 1


#============================================
def test_repeated_payload_embedded_once(fixed_font, counting_embedder) -> None:
	"""
	Identical payloads share one embed call, good or bad.
	"""
	sheet, layout = config.build_preset("avery_5195")
	records = []
	for index in range(20):
		records.append(LabelRecord(name=f"TRAY {index}", image=QR))
		records.append(LabelRecord(name=f"BOX {index}", image=BAD))
	composed = compose.compose_labels(records, sheet, layout, fixed_font, counting_embedder)
	assert counting_embedder.calls == [(QR.data, "png"), (BAD.data, "png")]
	handles = {label.image_instruction.handle for label in composed.labels if label.image_instruction}
	assert handles == {"handle-1"}
	assert composed.skipped_images == 20


#============================================
def test_degenerate_text_region_omits_text(fixed_font, counting_embedder) -> None:
	"""
	When the image leaves no room, the text is silently skipped.
	"""
	sheet, layout = config.build_preset("avery_8460")
	wide_image = dataclasses.replace(layout, image_size=500.0, text_image_gap=200.0)
	composed = compose.compose_labels(
		[LabelRecord(name="SOUP", image=QR)], sheet, wide_image, fixed_font, counting_embedder,
	)
	label = composed.labels[0]
	assert label.region.text_region.is_degenerate
	assert label.text_instructions == []
	assert label.image_instruction is not None


#============================================
def test_overflow_counted(fixed_font, counting_embedder) -> None:
	"""
	Text that cannot fit at the minimum size is truncated and counted.
	"""
	sheet, layout = config.build_preset("avery_8460")
	tight = dataclasses.replace(layout, start_font_size=14.0, min_font_size=13.0, max_lines=1)
	name = "REALLY LONG INGREDIENT NAME THAT DOES NOT FIT"
	composed = compose.compose_labels([LabelRecord(name=name)], sheet, tight, fixed_font, counting_embedder)
	label = composed.labels[0]
	assert label.text_block.overflowed
	assert len(label.text_instructions) == 1
	assert composed.overflowed_labels == 1


#============================================
def test_no_records(fixed_font, counting_embedder) -> None:
	sheet, layout = config.build_preset("avery_8460")
	composed = compose.compose_labels([], sheet, layout, fixed_font, counting_embedder)
	assert composed.page_count == 0
	assert list(composed.instructions()) == []


#============================================
def test_price_line_under_name(fixed_font, counting_embedder) -> None:
	"""
	The price prints as the last line, one line height under the name.
	"""
	sheet, layout = config.build_preset("avery_8460")
	record = LabelRecord(name="HOUSE CHIPS", image=QR, price_text="1.25/oz")
	composed = compose.compose_labels([record], sheet, layout, fixed_font, counting_embedder)
	label = composed.labels[0]
	name_run, price_run = label.text_instructions
	assert name_run.text == "HOUSE CHIPS"
	assert price_run.text == "1.25/oz"
	assert price_run.font_size == name_run.font_size
	assert name_run.y - price_run.y == pytest.approx(label.text_block.line_height)
	assert not label.text_block.overflowed


#============================================
def test_background_covers_cell(fixed_font, counting_embedder) -> None:
	"""
	A background is placed over the whole cell and listed before the text.
	"""
	sheet, layout = config.build_preset("qr_pid_6up")
	background = ImagePayload(data=b"background-bytes", mime_kind="png")
	records = [LabelRecord(name=f"TRAY {index}", image=QR, background=background) for index in range(3)]
	composed = compose.compose_labels(records, sheet, layout, fixed_font, counting_embedder)
	label = composed.labels[1]
	first = label.instructions()[0]
	assert first is label.background_instruction
	assert (first.x, first.y) == (label.cell.x, label.cell.y_bottom)
	assert (first.width, first.height) == (label.cell.width, label.cell.height)
	assert label.instructions()[-1] is label.image_instruction
	# one embed for the QR and one for the shared background
	assert len(counting_embedder.calls) == 2


#============================================
def test_bad_background_keeps_label(fixed_font, counting_embedder) -> None:
	sheet, layout = config.build_preset("avery_8460")
	background = ImagePayload(data=b"bad-background", mime_kind="png")
	composed = compose.compose_labels(
		[LabelRecord(name="SOUP", image=QR, background=background)],
		sheet,
		layout,
		fixed_font,
		counting_embedder,
	)
	label = composed.labels[0]
	assert label.background_instruction is None
	assert label.background_error == "not an image"
	assert label.image_instruction is not None
	assert [run.text for run in label.text_instructions] == ["SOUP"]
	assert composed.skipped_backgrounds == 1
	assert composed.skipped_images == 0
