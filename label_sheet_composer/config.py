"""
Shared configuration, sheet geometry data, and presets.
"""

# Standard Library
import dataclasses


POINTS_PER_INCH = 72.0
LETTER_WIDTH = 8.5 * POINTS_PER_INCH
LETTER_HEIGHT = 11.0 * POINTS_PER_INCH

# page equations are checked to this tolerance in points
GEOMETRY_TOLERANCE = 0.01

DEFAULT_FONT = "Helvetica-Bold"
DEFAULT_FONT_SIZE_STEP = 0.5
# slack when snapping a font size onto the step grid
FONT_SIZE_EPSILON = 1e-9
DEFAULT_LINE_HEIGHT_MULT = 1.15
DEFAULT_CASE = "UPPER"
DEFAULT_PRESET = "avery_8460"
DEFAULT_OUTPUT_PREFIX = "labels"
PRICE_UNIT = "oz"
PROGRESS_BAR_WIDTH = 20
PROGRESS_UPDATE_EVERY = 10

IMAGE_ANCHORS = ("CENTER", "TOP", "BOTTOM")
TEXT_ALIGNS_HORIZONTAL = ("LEFT", "CENTER")
TEXT_ALIGNS_VERTICAL = ("CENTER", "TOP")
CASE_POLICIES = ("UPPER", "LOWER", "NONE")


class SheetConfigError(ValueError):
	"""
	Raised when sheet or layout configuration is inconsistent.
	"""


#============================================
def inches_to_points(value: float) -> float:
	"""
	Convert inches to points.

	Args:
		value: Inches value.

	Returns:
		Points value.
	"""
	return value * POINTS_PER_INCH


#============================================
def derive_gap(span: float, margin_a: float, margin_b: float, count: int, size: float) -> float:
	"""
	Derive the gap between repeated labels from the page span and margins.

	Args:
		span: Page width or height.
		margin_a: Leading margin.
		margin_b: Trailing margin.
		count: Label count along the axis.
		size: Label size along the axis.

	Returns:
		Gap in points, 0.0 for a single label.
	"""
	if count <= 1:
		return 0.0
	return (span - margin_a - margin_b - count * size) / (count - 1)


@dataclasses.dataclass(frozen=True)
class Sheet:
	page_width: float
	page_height: float
	margin_left: float
	margin_right: float
	margin_top: float
	margin_bottom: float
	columns: int
	rows: int
	col_gap: float
	row_gap: float
	label_width: float
	label_height: float

	def __post_init__(self) -> None:
		if self.columns <= 0 or self.rows <= 0:
			raise SheetConfigError(f"grid must be positive, got {self.columns}x{self.rows}")
		if self.page_width <= 0 or self.page_height <= 0:
			raise SheetConfigError("page size must be positive")
		if self.label_width <= 0 or self.label_height <= 0:
			raise SheetConfigError("label size must be positive")
		margins = (self.margin_left, self.margin_right, self.margin_top, self.margin_bottom)
		if min(margins) < 0:
			raise SheetConfigError(f"margins must not be negative, got {margins}")
		if self.col_gap < -GEOMETRY_TOLERANCE or self.row_gap < -GEOMETRY_TOLERANCE:
			raise SheetConfigError(
				f"gaps must not be negative, got col_gap={self.col_gap:.3f} row_gap={self.row_gap:.3f}"
			)
		used_width = (
			self.margin_left
			+ self.columns * self.label_width
			+ (self.columns - 1) * self.col_gap
			+ self.margin_right
		)
		if abs(used_width - self.page_width) > GEOMETRY_TOLERANCE:
			raise SheetConfigError(
				f"columns span {used_width:.3f}pt but page width is {self.page_width:.3f}pt"
			)
		used_height = (
			self.margin_top
			+ self.rows * self.label_height
			+ (self.rows - 1) * self.row_gap
			+ self.margin_bottom
		)
		if abs(used_height - self.page_height) > GEOMETRY_TOLERANCE:
			raise SheetConfigError(
				f"rows span {used_height:.3f}pt but page height is {self.page_height:.3f}pt"
			)

	@property
	def labels_per_page(self) -> int:
		return self.columns * self.rows

	@classmethod
	def from_margins(
		cls,
		page_width: float,
		page_height: float,
		columns: int,
		rows: int,
		label_width: float,
		label_height: float,
		margin_left: float,
		margin_right: float,
		margin_top: float,
		margin_bottom: float,
	) -> "Sheet":
		"""
		Build a sheet whose gaps are derived from the four margins.

		Returns:
			Sheet instance.
		"""
		col_gap = derive_gap(page_width, margin_left, margin_right, columns, label_width)
		row_gap = derive_gap(page_height, margin_top, margin_bottom, rows, label_height)
		return cls(
			page_width=page_width,
			page_height=page_height,
			margin_left=margin_left,
			margin_right=margin_right,
			margin_top=margin_top,
			margin_bottom=margin_bottom,
			columns=columns,
			rows=rows,
			col_gap=col_gap,
			row_gap=row_gap,
			label_width=label_width,
			label_height=label_height,
		)


@dataclasses.dataclass(frozen=True)
class LayoutConfig:
	inner_pad: float
	text_image_gap: float
	image_size: float
	image_anchor: str
	start_font_size: float
	min_font_size: float
	max_lines: int
	line_height_mult: float = DEFAULT_LINE_HEIGHT_MULT
	font_size_step: float = DEFAULT_FONT_SIZE_STEP
	text_align_horizontal: str = "LEFT"
	text_align_vertical: str = "CENTER"
	font_name: str = DEFAULT_FONT

	def __post_init__(self) -> None:
		if self.inner_pad < 0 or self.text_image_gap < 0 or self.image_size < 0:
			raise SheetConfigError("padding, gap and image size must not be negative")
		if self.min_font_size <= 0:
			raise SheetConfigError(f"minimum font size must be positive, got {self.min_font_size}")
		if self.min_font_size > self.start_font_size:
			raise SheetConfigError(
				f"minimum font size {self.min_font_size} exceeds start size {self.start_font_size}"
			)
		if self.font_size_step <= 0:
			raise SheetConfigError(f"font size step must be positive, got {self.font_size_step}")
		if self.max_lines < 1:
			raise SheetConfigError(f"max lines must be at least 1, got {self.max_lines}")
		if self.line_height_mult <= 0:
			raise SheetConfigError("line height multiplier must be positive")
		if self.image_anchor.upper() not in IMAGE_ANCHORS:
			raise SheetConfigError(f"unknown image anchor: {self.image_anchor}")
		if self.text_align_horizontal.upper() not in TEXT_ALIGNS_HORIZONTAL:
			raise SheetConfigError(f"unknown horizontal text alignment: {self.text_align_horizontal}")
		if self.text_align_vertical.upper() not in TEXT_ALIGNS_VERTICAL:
			raise SheetConfigError(f"unknown vertical text alignment: {self.text_align_vertical}")


@dataclasses.dataclass
class SheetResult:
	total_labels: int
	pages: int
	labels_per_page: int
	overflowed_labels: int
	skipped_images: int
	calibration: bool
	skipped_backgrounds: int = 0


#============================================
def build_avery_8460() -> tuple[Sheet, LayoutConfig]:
	"""
	Avery 8460: 1" x 2-5/8" address labels, 3 across by 10 down.

	Returns:
		Tuple of (Sheet, LayoutConfig).
	"""
	sheet = Sheet.from_margins(
		page_width=LETTER_WIDTH,
		page_height=LETTER_HEIGHT,
		columns=3,
		rows=10,
		label_width=inches_to_points(2.625),
		label_height=inches_to_points(1.0),
		margin_left=inches_to_points(0.1875),
		margin_right=inches_to_points(0.1875),
		margin_top=inches_to_points(0.5),
		margin_bottom=inches_to_points(0.5),
	)
	layout = LayoutConfig(
		inner_pad=inches_to_points(0.06),
		text_image_gap=inches_to_points(0.25),
		image_size=inches_to_points(0.85),
		image_anchor="CENTER",
		start_font_size=14.0,
		min_font_size=7.0,
		max_lines=2,
		line_height_mult=1.15,
		text_align_horizontal="LEFT",
		text_align_vertical="CENTER",
	)
	return (sheet, layout)


#============================================
def build_avery_5195() -> tuple[Sheet, LayoutConfig]:
	"""
	Avery 5195 / 88695: 1-3/4" x 2/3" return address labels, 4 across by 15 down.

	Returns:
		Tuple of (Sheet, LayoutConfig).
	"""
	sheet = Sheet.from_margins(
		page_width=LETTER_WIDTH,
		page_height=LETTER_HEIGHT,
		columns=4,
		rows=15,
		label_width=inches_to_points(1.75),
		label_height=inches_to_points(2.0 / 3.0),
		margin_left=inches_to_points(0.3075),
		margin_right=inches_to_points(0.3075),
		margin_top=inches_to_points(0.5),
		margin_bottom=inches_to_points(0.5),
	)
	inner_pad = inches_to_points(0.05)
	layout = LayoutConfig(
		inner_pad=inner_pad,
		text_image_gap=inner_pad,
		# clamped to the cell height by the region splitter
		image_size=inches_to_points(1.75),
		image_anchor="CENTER",
		start_font_size=9.0,
		min_font_size=7.0,
		max_lines=4,
		line_height_mult=1.15,
		text_align_horizontal="CENTER",
		text_align_vertical="CENTER",
	)
	return (sheet, layout)


#============================================
def build_qr_pid_6up() -> tuple[Sheet, LayoutConfig]:
	"""
	Six 3" x 3" product ID cards per page with a 1" QR code.

	Returns:
		Tuple of (Sheet, LayoutConfig).
	"""
	sheet = Sheet(
		page_width=LETTER_WIDTH,
		page_height=LETTER_HEIGHT,
		margin_left=inches_to_points(1.0),
		margin_right=inches_to_points(1.0),
		margin_top=inches_to_points(0.5),
		margin_bottom=inches_to_points(0.5),
		columns=2,
		rows=3,
		col_gap=inches_to_points(0.5),
		row_gap=inches_to_points(0.5),
		label_width=inches_to_points(3.0),
		label_height=inches_to_points(3.0),
	)
	layout = LayoutConfig(
		inner_pad=inches_to_points(0.25),
		text_image_gap=inches_to_points(0.25),
		image_size=inches_to_points(1.0),
		image_anchor="CENTER",
		start_font_size=14.0,
		min_font_size=8.0,
		max_lines=6,
		line_height_mult=1.12,
		text_align_horizontal="LEFT",
		text_align_vertical="CENTER",
	)
	return (sheet, layout)


SHEET_PRESETS = {
	"avery_8460": build_avery_8460,
	"avery_5195": build_avery_5195,
	"qr_pid_6up": build_qr_pid_6up,
}


#============================================
def build_preset(name: str) -> tuple[Sheet, LayoutConfig]:
	"""
	Build the sheet and layout for a named preset.

	Args:
		name: Preset name from SHEET_PRESETS.

	Returns:
		Tuple of (Sheet, LayoutConfig).
	"""
	builder = SHEET_PRESETS.get(name)
	if builder is None:
		known = ", ".join(sorted(SHEET_PRESETS))
		raise SheetConfigError(f"unknown sheet preset {name!r} (known: {known})")
	return builder()
