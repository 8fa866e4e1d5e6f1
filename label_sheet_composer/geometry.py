"""
Sheet geometry: label index to cell, and cell to text/image regions.
"""

# Standard Library
import dataclasses

# local repo modules
import label_sheet_composer as lsc
import label_sheet_composer.config


Sheet = lsc.config.Sheet


@dataclasses.dataclass(frozen=True)
class Rect:
	x: float
	y: float
	width: float
	height: float

	@property
	def is_degenerate(self) -> bool:
		return self.width <= 0 or self.height <= 0


@dataclasses.dataclass(frozen=True)
class Cell:
	page_index: int
	row: int
	col: int
	x: float
	y_bottom: float
	width: float
	height: float


@dataclasses.dataclass(frozen=True)
class ContentRegion:
	text_region: Rect
	image_region: Rect


#============================================
def compute_align_offset(available: float, scaled: float, align: str) -> float:
	"""
	Compute an alignment offset.

	Args:
		available: Available dimension.
		scaled: Placed dimension.
		align: Alignment string.

	Returns:
		Offset in points.
	"""
	normalized = align.strip().upper()
	if normalized in ("LEFT", "BOTTOM"):
		return 0.0
	if normalized in ("RIGHT", "TOP"):
		return max(0.0, available - scaled)
	return max(0.0, (available - scaled) / 2.0)


#============================================
def cell_for(index: int, sheet: Sheet) -> Cell:
	"""
	Locate the cell for a 0-based label index.

	Rows fill left to right, then top to bottom; a new page starts
	every rows * columns labels. Coordinates use a bottom-left origin.

	Args:
		index: Label index across the whole job.
		sheet: Sheet geometry.

	Returns:
		Cell with page, grid position and absolute rectangle.
	"""
	if index < 0:
		raise ValueError(f"label index must not be negative, got {index}")
	per_page = sheet.labels_per_page
	page_index = index // per_page
	index_on_page = index % per_page
	row = index_on_page // sheet.columns
	col = index_on_page % sheet.columns
	x = sheet.margin_left + col * (sheet.label_width + sheet.col_gap)
	y_top = sheet.page_height - sheet.margin_top - row * (sheet.label_height + sheet.row_gap)
	return Cell(
		page_index=page_index,
		row=row,
		col=col,
		x=x,
		y_bottom=y_top - sheet.label_height,
		width=sheet.label_width,
		height=sheet.label_height,
	)


#============================================
def page_count(total_labels: int, sheet: Sheet) -> int:
	"""
	Number of pages needed for a label count.

	Args:
		total_labels: Label count.
		sheet: Sheet geometry.

	Returns:
		Page count.
	"""
	if total_labels <= 0:
		return 0
	return cell_for(total_labels - 1, sheet).page_index + 1


#============================================
def split_cell(
	cell: Cell,
	image_size: float,
	inner_pad: float,
	gap: float,
	image_anchor: str = "CENTER",
) -> ContentRegion:
	"""
	Carve a cell into a text region and a right-anchored square image region.

	The image keeps its configured size unless the cell is too short to
	hold it; the text takes whatever is left of the image minus the gap.

	Args:
		cell: Label cell.
		image_size: Configured image side length.
		inner_pad: Padding inside the cell edge.
		gap: Space between the text region and the image.
		image_anchor: CENTER, TOP or BOTTOM.

	Returns:
		ContentRegion.
	"""
	available_height = max(0.0, cell.height - 2.0 * inner_pad)
	side = max(0.0, min(image_size, available_height))
	image_x = cell.x + cell.width - inner_pad - side
	image_y = cell.y_bottom + inner_pad + compute_align_offset(available_height, side, image_anchor)
	image_region = Rect(image_x, image_y, side, side)

	text_x = cell.x + inner_pad
	text_region = Rect(
		text_x,
		cell.y_bottom + inner_pad,
		max(0.0, (image_x - gap) - text_x),
		available_height,
	)
	return ContentRegion(text_region=text_region, image_region=image_region)
