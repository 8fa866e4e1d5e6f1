"""
PDF output: font and image capabilities, page drawing, and assembly.
"""

# Standard Library
import datetime
import io
import json
import pathlib

# PIP3 modules
import PIL.Image
import pypdf
import reportlab.lib.utils
import reportlab.pdfbase.pdfmetrics
import reportlab.pdfbase.ttfonts
import reportlab.pdfgen.canvas

# local repo modules
import label_sheet_composer as lsc
import label_sheet_composer.compose
import label_sheet_composer.config
import label_sheet_composer.geometry


Sheet = lsc.config.Sheet
LayoutConfig = lsc.config.LayoutConfig
SheetResult = lsc.config.SheetResult
ComposedSheet = lsc.compose.ComposedSheet
TextInstruction = lsc.compose.TextInstruction
ImageInstruction = lsc.compose.ImageInstruction
ImageEmbedError = lsc.compose.ImageEmbedError
SheetConfigError = lsc.config.SheetConfigError

POINTS_PER_INCH = lsc.config.POINTS_PER_INCH
DEFAULT_FONT = lsc.config.DEFAULT_FONT
PROGRESS_BAR_WIDTH = lsc.config.PROGRESS_BAR_WIDTH
PROGRESS_UPDATE_EVERY = lsc.config.PROGRESS_UPDATE_EVERY

# declared kind -> Pillow format name
SUPPORTED_IMAGE_KINDS = {
	"png": "PNG",
	"jpeg": "JPEG",
}


class ReportlabFont:
	"""
	Text measurement backed by ReportLab font metrics.

	The font is resolved up front, so an unknown name fails before layout.
	"""

	def __init__(self, font_name: str = DEFAULT_FONT) -> None:
		try:
			reportlab.pdfbase.pdfmetrics.getFont(font_name)
		except KeyError as error:
			raise SheetConfigError(
				f"unknown font {font_name!r}; use a standard PDF font or pass a TrueType font file"
			) from error
		self.font_name = font_name

	def width_of_text_at_size(self, text: str, size: float) -> float:
		return reportlab.pdfbase.pdfmetrics.stringWidth(text, self.font_name, size)


class ReportlabImageEmbedder:
	"""
	Decode PNG and JPEG payloads into ReportLab image readers.
	"""

	def embed(self, data: bytes, mime_kind: str) -> reportlab.lib.utils.ImageReader:
		expected_format = SUPPORTED_IMAGE_KINDS.get(mime_kind.lower())
		if expected_format is None:
			raise ImageEmbedError(f"unsupported image kind: {mime_kind}")
		if not data:
			raise ImageEmbedError("empty image payload")
		try:
			image = PIL.Image.open(io.BytesIO(data))
			image.load()
		except (PIL.UnidentifiedImageError, OSError, ValueError) as error:
			raise ImageEmbedError(f"could not decode {mime_kind} image: {error}") from error
		if image.format != expected_format:
			raise ImageEmbedError(f"payload is {image.format}, expected {expected_format}")
		return reportlab.lib.utils.ImageReader(image)


#============================================
def register_ttf_font(font_name: str, font_path: pathlib.Path) -> str:
	"""
	Register a TrueType font with ReportLab.

	Args:
		font_name: Name to register under.
		font_path: Path to the .ttf file.

	Returns:
		Registered font name.

	Raises:
		SheetConfigError: The file is missing or is not a TrueType font.
	"""
	try:
		font = reportlab.pdfbase.ttfonts.TTFont(font_name, str(font_path))
	except reportlab.pdfbase.ttfonts.TTFError as error:
		raise SheetConfigError(f"could not load font file {font_path}: {error}") from error
	reportlab.pdfbase.pdfmetrics.registerFont(font)
	return font_name


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")


#============================================
def draw_label_outlines(pdf: reportlab.pdfgen.canvas.Canvas, sheet: Sheet) -> None:
	"""
	Draw label outlines on the current page.

	Args:
		pdf: ReportLab canvas.
		sheet: Sheet geometry.
	"""
	pdf.setLineWidth(0.3)
	pdf.setStrokeColorRGB(0.7, 0.7, 0.7)
	for index in range(sheet.labels_per_page):
		cell = lsc.geometry.cell_for(index, sheet)
		pdf.rect(cell.x, cell.y_bottom, cell.width, cell.height, stroke=1, fill=0)


#============================================
def draw_calibration_page(pdf: reportlab.pdfgen.canvas.Canvas, sheet: Sheet) -> None:
	"""
	Draw every cell, corner crosshairs and a 1 inch ruler mark.

	Args:
		pdf: ReportLab canvas.
		sheet: Sheet geometry.
	"""
	pdf.setLineWidth(0.3)
	pdf.setStrokeColorRGB(0.6, 0.6, 0.6)
	for index in range(sheet.labels_per_page):
		cell = lsc.geometry.cell_for(index, sheet)
		pdf.rect(cell.x, cell.y_bottom, cell.width, cell.height, stroke=1, fill=0)

	pdf.setLineWidth(0.6)
	pdf.setStrokeColorRGB(0.0, 0.0, 0.0)
	corner_indexes = {
		0,
		sheet.columns - 1,
		sheet.labels_per_page - sheet.columns,
		sheet.labels_per_page - 1,
	}
	for index in sorted(corner_indexes):
		cell = lsc.geometry.cell_for(index, sheet)
		center_x = cell.x + cell.width / 2.0
		center_y = cell.y_bottom + cell.height / 2.0
		size = 6.0
		pdf.line(center_x - size, center_y, center_x + size, center_y)
		pdf.line(center_x, center_y - size, center_x, center_y + size)

	ruler_x = sheet.margin_left
	ruler_y = sheet.page_height - sheet.margin_top + 10.0
	pdf.line(ruler_x, ruler_y, ruler_x + POINTS_PER_INCH, ruler_y)
	pdf.setFont("Helvetica", 8)
	pdf.drawString(ruler_x, ruler_y + 4.0, "1 in")


#============================================
def build_outline_overlay(sheet: Sheet) -> pypdf.PageObject:
	"""
	Build a PDF overlay page with label outlines.

	Args:
		sheet: Sheet geometry.

	Returns:
		PDF page object.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(sheet.page_width, sheet.page_height))
	draw_label_outlines(pdf, sheet)
	pdf.save()
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	return reader.pages[0]


#============================================
def build_calibration_page(sheet: Sheet) -> pypdf.PageObject:
	"""
	Build a calibration page PDF.

	Args:
		sheet: Sheet geometry.

	Returns:
		PDF page object.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(sheet.page_width, sheet.page_height))
	draw_calibration_page(pdf, sheet)
	pdf.save()
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	return reader.pages[0]


#============================================
def draw_text_instruction(pdf: reportlab.pdfgen.canvas.Canvas, instruction: TextInstruction) -> None:
	"""
	Draw one positioned text run.

	Args:
		pdf: ReportLab canvas.
		instruction: Text instruction with a baseline position.
	"""
	pdf.setFont(instruction.font_name, instruction.font_size)
	pdf.setFillColorRGB(0.0, 0.0, 0.0)
	pdf.drawString(instruction.x, instruction.y, instruction.text)


#============================================
def draw_image_instruction(pdf: reportlab.pdfgen.canvas.Canvas, instruction: ImageInstruction) -> None:
	"""
	Draw one placed image.

	Args:
		pdf: ReportLab canvas.
		instruction: Image instruction holding an ImageReader handle.
	"""
	pdf.drawImage(
		instruction.handle,
		instruction.x,
		instruction.y,
		width=instruction.width,
		height=instruction.height,
		mask=None,
		preserveAspectRatio=False,
		anchor="sw",
	)


#============================================
def render_label_pages(
	composed: ComposedSheet,
	sheet: Sheet,
	show_progress: bool = False,
) -> bytes:
	"""
	Draw composed labels page by page into an in-memory PDF.

	Args:
		composed: Composed sheet.
		sheet: Sheet geometry.
		show_progress: Print a progress bar.

	Returns:
		PDF bytes with composed.page_count pages.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(sheet.page_width, sheet.page_height))
	total = len(composed.labels)
	current_page = 0
	if show_progress and total > 0:
		print_progress("Labels", 0, total)
	for count, label in enumerate(composed.labels, start=1):
		if label.page_index > current_page:
			pdf.showPage()
			current_page = label.page_index
		if label.background_instruction is not None:
			draw_image_instruction(pdf, label.background_instruction)
		for instruction in label.text_instructions:
			draw_text_instruction(pdf, instruction)
		if label.image_instruction is not None:
			draw_image_instruction(pdf, label.image_instruction)
		if show_progress and (count % PROGRESS_UPDATE_EVERY == 0 or count == total):
			print_progress("Labels", count, total)
	if show_progress and total > 0:
		print()
	pdf.showPage()
	pdf.save()
	return buffer.getvalue()


#============================================
def render_sheet_pdf(
	composed: ComposedSheet,
	sheet: Sheet,
	output_path: pathlib.Path,
	draw_outlines: bool = False,
	calibration: bool = False,
	title: str | None = None,
	show_progress: bool = False,
) -> SheetResult:
	"""
	Write the composed labels to a PDF file.

	Args:
		composed: Composed sheet.
		sheet: Sheet geometry.
		output_path: Output PDF path.
		draw_outlines: Draw grey label outlines under the labels.
		calibration: Add a calibration page first.
		title: Optional document title.
		show_progress: Print a progress bar.

	Returns:
		SheetResult.
	"""
	writer = pypdf.PdfWriter()
	if calibration:
		writer.add_page(build_calibration_page(sheet))

	if composed.page_count > 0:
		content = render_label_pages(composed, sheet, show_progress=show_progress)
		reader = pypdf.PdfReader(io.BytesIO(content))
		outline_page = None
		if draw_outlines:
			outline_page = build_outline_overlay(sheet)
		for content_page in reader.pages:
			if outline_page is None:
				writer.add_page(content_page)
				continue
			page = pypdf.PageObject.create_blank_page(
				width=sheet.page_width,
				height=sheet.page_height,
			)
			page.merge_page(outline_page)
			page.merge_page(content_page)
			writer.add_page(page)

	if title:
		writer.add_metadata({"/Title": title})
	writer.write(str(output_path))

	pages = composed.page_count
	if calibration:
		pages += 1
	return SheetResult(
		total_labels=len(composed.labels),
		pages=pages,
		labels_per_page=sheet.labels_per_page,
		overflowed_labels=composed.overflowed_labels,
		skipped_images=composed.skipped_images,
		calibration=calibration,
		skipped_backgrounds=composed.skipped_backgrounds,
	)


#============================================
def build_output_filename(prefix: str, now: datetime.datetime | None = None) -> str:
	"""
	Build a timestamped PDF filename.

	Args:
		prefix: Filename prefix.
		now: Timestamp, defaults to the current local time.

	Returns:
		Name like "labels_2024-07-10_12-45-00.pdf".
	"""
	if now is None:
		now = datetime.datetime.now()
	return f"{prefix}_{now.strftime('%Y-%m-%d_%H-%M-%S')}.pdf"


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	output_path: pathlib.Path,
	result: SheetResult,
	sheet: Sheet,
	layout: LayoutConfig,
	preset: str | None = None,
) -> None:
	"""
	Write a manifest JSON file.

	Args:
		manifest_path: Output path.
		output_path: PDF path the manifest describes.
		result: Sheet result.
		sheet: Sheet geometry.
		layout: Layout configuration.
		preset: Preset name, if one was used.
	"""
	data = {
		"output": str(output_path),
		"preset": preset,
		"total_labels": result.total_labels,
		"pages": result.pages,
		"labels_per_page": result.labels_per_page,
		"overflowed_labels": result.overflowed_labels,
		"skipped_images": result.skipped_images,
		"skipped_backgrounds": result.skipped_backgrounds,
		"calibration": result.calibration,
		"sheet": {
			"page_width": sheet.page_width,
			"page_height": sheet.page_height,
			"columns": sheet.columns,
			"rows": sheet.rows,
			"label_width": sheet.label_width,
			"label_height": sheet.label_height,
			"margin_left": sheet.margin_left,
			"margin_right": sheet.margin_right,
			"margin_top": sheet.margin_top,
			"margin_bottom": sheet.margin_bottom,
			"col_gap": sheet.col_gap,
			"row_gap": sheet.row_gap,
		},
		"layout": {
			"inner_pad": layout.inner_pad,
			"text_image_gap": layout.text_image_gap,
			"image_size": layout.image_size,
			"image_anchor": layout.image_anchor,
			"start_font_size": layout.start_font_size,
			"min_font_size": layout.min_font_size,
			"font_size_step": layout.font_size_step,
			"max_lines": layout.max_lines,
			"line_height_mult": layout.line_height_mult,
			"text_align_horizontal": layout.text_align_horizontal,
			"text_align_vertical": layout.text_align_vertical,
			"font_name": layout.font_name,
		},
	}
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)
