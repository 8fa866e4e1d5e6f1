"""
CLI entry points for label sheet generation.
"""

# Standard Library
import argparse
import dataclasses
import json
import pathlib
import time

# local repo modules
import label_sheet_composer as lsc
import label_sheet_composer.compose
import label_sheet_composer.config
import label_sheet_composer.records
import label_sheet_composer.render


LayoutConfig = lsc.config.LayoutConfig
LabelRecord = lsc.records.LabelRecord

SHEET_PRESETS = lsc.config.SHEET_PRESETS
DEFAULT_PRESET = lsc.config.DEFAULT_PRESET
DEFAULT_CASE = lsc.config.DEFAULT_CASE
DEFAULT_OUTPUT_PREFIX = lsc.config.DEFAULT_OUTPUT_PREFIX
CASE_POLICIES = lsc.config.CASE_POLICIES
IMAGE_ANCHORS = lsc.config.IMAGE_ANCHORS
TEXT_ALIGNS_HORIZONTAL = lsc.config.TEXT_ALIGNS_HORIZONTAL
TEXT_ALIGNS_VERTICAL = lsc.config.TEXT_ALIGNS_VERTICAL


#============================================
def build_layout(args: argparse.Namespace, layout: LayoutConfig) -> LayoutConfig:
	"""
	Apply CLI overrides to a preset layout.

	Args:
		args: Parsed argparse namespace.
		layout: Preset layout.

	Returns:
		LayoutConfig.
	"""
	overrides = {}
	if args.text_align is not None:
		overrides["text_align_horizontal"] = args.text_align
	if args.text_valign is not None:
		overrides["text_align_vertical"] = args.text_valign
	if args.image_anchor is not None:
		overrides["image_anchor"] = args.image_anchor
	if args.font_size is not None:
		overrides["start_font_size"] = args.font_size
	if args.min_font_size is not None:
		overrides["min_font_size"] = args.min_font_size
	if args.max_lines is not None:
		overrides["max_lines"] = args.max_lines
	if args.font_name is not None:
		overrides["font_name"] = args.font_name
	if not overrides:
		return layout
	return dataclasses.replace(layout, **overrides)


#============================================
def load_records(args: argparse.Namespace) -> list[LabelRecord]:
	"""
	Read label records from the input file.

	Args:
		args: Parsed argparse namespace.

	Returns:
		Label records with the job-wide price line and background applied.
	"""
	input_path = pathlib.Path(args.input_path)
	text = input_path.read_text(encoding="utf-8")
	payload = {}
	if args.menu:
		records = lsc.records.parse_menu_lines(text, args.exclude, args.case)
	else:
		payload = json.loads(text)
		if isinstance(payload, dict) and isinstance(payload.get("orderData"), dict):
			payload = payload["orderData"]
		records = lsc.records.records_from_payload(payload, args.exclude, args.case)
		if not isinstance(payload, dict):
			payload = {}

	price_text = lsc.records.price_text_from_payload(payload, args.price_per_oz)
	if args.background_path:
		background = lsc.records.load_image_file(pathlib.Path(args.background_path))
	else:
		background = lsc.records.background_from_payload(payload)
	return lsc.records.apply_label_extras(records, price_text, background)


#============================================
def parse_args() -> argparse.Namespace:
	"""
	Parse command line arguments.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Render label records onto pre-cut label sheets.")
	parser.add_argument("input_path", help="JSON payload with items/images, or menu text with --menu.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=None, help="Output PDF path.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")
	output_group.add_argument("-t", "--title", dest="title", default=None, help="PDF document title.")

	layout_group = parser.add_argument_group("Layout")
	layout_group.add_argument(
		"-s", "--sheet", dest="sheet", choices=sorted(SHEET_PRESETS), default=DEFAULT_PRESET,
		help="Label sheet preset.",
	)
	layout_group.add_argument("--case", dest="case", choices=CASE_POLICIES, default=DEFAULT_CASE, help="Name case policy.")
	layout_group.add_argument("--text-align", dest="text_align", choices=TEXT_ALIGNS_HORIZONTAL, default=None, help="Horizontal text alignment.")
	layout_group.add_argument("--text-valign", dest="text_valign", choices=TEXT_ALIGNS_VERTICAL, default=None, help="Vertical text alignment.")
	layout_group.add_argument("--image-anchor", dest="image_anchor", choices=IMAGE_ANCHORS, default=None, help="Vertical image anchor.")
	layout_group.add_argument("--font-size", dest="font_size", type=float, default=None, help="Starting font size.")
	layout_group.add_argument("--min-font-size", dest="min_font_size", type=float, default=None, help="Minimum font size.")
	layout_group.add_argument("--max-lines", dest="max_lines", type=int, default=None, help="Maximum text lines per label.")
	layout_group.add_argument("--font-name", dest="font_name", default=None, help="Font name (standard PDF font or --font-file name).")
	layout_group.add_argument("--font-file", dest="font_file", default=None, help="TrueType font file to register as --font-name.")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument("-d", "--draw-outlines", dest="draw_outlines", action="store_true", help="Draw label outlines.")
	behavior_group.add_argument("-D", "--no-draw-outlines", dest="draw_outlines", action="store_false", help="Disable label outlines.")
	behavior_group.add_argument("-c", "--calibration", dest="calibration", action="store_true", help="Add a calibration page.")
	behavior_group.add_argument("-C", "--no-calibration", dest="calibration", action="store_false", help="Disable calibration page.")
	behavior_group.add_argument("--menu", dest="menu", action="store_true", help="Read input as menu text, one item per line.")
	behavior_group.add_argument(
		"-x", "--exclude", dest="exclude", action="append", default=[],
		help="Skip menu lines containing this text (repeatable).",
	)

	content_group = parser.add_argument_group("Content")
	content_group.add_argument(
		"-p", "--price-per-oz", dest="price_per_oz", default=None,
		help="Price per ounce printed under every name, e.g. 1.25.",
	)
	content_group.add_argument(
		"-b", "--background", dest="background_path", default=None,
		help="PNG or JPEG drawn under every label, stretched to the cell.",
	)

	limit_group = parser.add_argument_group("Limits")
	limit_group.add_argument("-l", "--max-labels", dest="max_labels", type=int, default=None, help="Limit number of labels.")

	parser.set_defaults(
		draw_outlines=False,
		calibration=False,
		menu=False,
	)

	args = parser.parse_args()
	if args.font_file and not args.font_name:
		parser.error("--font-file requires --font-name")
	return args


#============================================
def run_pipeline(args: argparse.Namespace) -> None:
	"""
	Run the full pipeline from input records to PDF.

	Args:
		args: Parsed argparse namespace.
	"""
	sheet, preset_layout = lsc.config.build_preset(args.sheet)
	try:
		layout = build_layout(args, preset_layout)
	except lsc.config.SheetConfigError as error:
		print(f"Invalid layout options: {error}")
		raise SystemExit(1)

	output_path_value = args.output_path
	if output_path_value is None:
		output_path_value = lsc.render.build_output_filename(DEFAULT_OUTPUT_PREFIX)
	output_path = pathlib.Path(output_path_value)

	print("Label sheet pipeline")
	print(f"Sheet: {args.sheet} ({sheet.columns}x{sheet.rows}, {sheet.labels_per_page} per page)")
	print(f"Output PDF: {output_path}")
	if args.manifest_path:
		print(f"Manifest: {args.manifest_path}")
	print(f"Case: {args.case}")
	print(f"Text align: {layout.text_align_horizontal}/{layout.text_align_vertical}")
	print(f"Image anchor: {layout.image_anchor}")
	print(f"Draw outlines: {args.draw_outlines}")
	print(f"Calibration: {args.calibration}")
	if args.max_labels is not None:
		print(f"Max labels: {args.max_labels}")

	try:
		if args.font_file:
			lsc.render.register_ttf_font(layout.font_name, pathlib.Path(args.font_file))
			print(f"Font registered: {layout.font_name} ({args.font_file})")
		font = lsc.render.ReportlabFont(layout.font_name)
	except lsc.config.SheetConfigError as error:
		print(f"Invalid font options: {error}")
		raise SystemExit(1)

	start_time = time.perf_counter()
	try:
		records = load_records(args)
	except (OSError, ValueError) as error:
		print(f"Could not read input {args.input_path}: {error}")
		raise SystemExit(1)
	if args.max_labels is not None:
		records = records[:args.max_labels]
	if not records:
		print("No valid rows provided.")
		raise SystemExit(1)
	print(f"Records loaded: {len(records)}")

	compose_start = time.perf_counter()
	embedder = lsc.render.ReportlabImageEmbedder()
	composed = lsc.compose.compose_labels(records, sheet, layout, font, embedder)
	compose_end = time.perf_counter()
	print(f"Labels composed: {len(composed.labels)} on {composed.page_count} pages")

	render_start = time.perf_counter()
	result = lsc.render.render_sheet_pdf(
		composed,
		sheet,
		output_path,
		draw_outlines=args.draw_outlines,
		calibration=args.calibration,
		title=args.title,
		show_progress=True,
	)
	render_end = time.perf_counter()
	print(f"Pages written: {result.pages}")

	for label in composed.labels:
		if label.image_error is not None:
			print(f"Image skipped for label {label.index + 1}: {label.image_error}")
	if result.overflowed_labels > 0:
		print(f"Min font size overflow: {result.overflowed_labels} labels truncated")
	if result.skipped_images > 0:
		print(f"Skipped image summary: {result.skipped_images} labels")
	if result.skipped_backgrounds > 0:
		print(f"Skipped background summary: {result.skipped_backgrounds} labels")

	if args.manifest_path:
		lsc.render.write_manifest(
			pathlib.Path(args.manifest_path),
			output_path,
			result,
			sheet,
			layout,
			preset=args.sheet,
		)
		print(f"Manifest written: {args.manifest_path}")

	total_time = time.perf_counter() - start_time
	print(
		"Timing: compose={:.2f}s render={:.2f}s total={:.2f}s".format(
			compose_end - compose_start,
			render_end - render_start,
			total_time,
		)
	)


#============================================
def main() -> None:
	"""
	Main entry point.
	"""
	args = parse_args()
	run_pipeline(args)
