"""
Label sheet composer: records in, positioned draw instructions out.
"""

# Standard Library
import dataclasses

# local repo modules
import label_sheet_composer as lsc
import label_sheet_composer.config
import label_sheet_composer.geometry
import label_sheet_composer.records
import label_sheet_composer.text_fit


Sheet = lsc.config.Sheet
LayoutConfig = lsc.config.LayoutConfig
Cell = lsc.geometry.Cell
ContentRegion = lsc.geometry.ContentRegion
LabelRecord = lsc.records.LabelRecord
ImagePayload = lsc.records.ImagePayload
FittedTextBlock = lsc.text_fit.FittedTextBlock


class ImageEmbedError(Exception):
	"""
	Raised by an image embedder when a payload cannot be used.
	"""


@dataclasses.dataclass(frozen=True)
class TextInstruction:
	text: str
	x: float
	y: float
	font_size: float
	font_name: str


@dataclasses.dataclass(frozen=True)
class ImageInstruction:
	handle: object
	x: float
	y: float
	width: float
	height: float


@dataclasses.dataclass
class LabelResult:
	index: int
	cell: Cell
	region: ContentRegion
	text_block: FittedTextBlock | None
	text_instructions: list[TextInstruction]
	image_instruction: ImageInstruction | None
	image_error: str | None = None
	background_instruction: ImageInstruction | None = None
	background_error: str | None = None

	@property
	def page_index(self) -> int:
		return self.cell.page_index

	def instructions(self) -> list:
		items: list = []
		# background first so it sits under the text and image
		if self.background_instruction is not None:
			items.append(self.background_instruction)
		items.extend(self.text_instructions)
		if self.image_instruction is not None:
			items.append(self.image_instruction)
		return items


@dataclasses.dataclass
class ComposedSheet:
	labels: list[LabelResult]
	page_count: int

	def instructions(self):
		"""
		Yield (page_index, instruction) pairs in label order.
		"""
		for label in self.labels:
			for instruction in label.instructions():
				yield (label.page_index, instruction)

	@property
	def overflowed_labels(self) -> int:
		return sum(
			1 for label in self.labels
			if label.text_block is not None and label.text_block.overflowed
		)

	@property
	def skipped_images(self) -> int:
		return sum(1 for label in self.labels if label.image_error is not None)

	@property
	def skipped_backgrounds(self) -> int:
		return sum(1 for label in self.labels if label.background_error is not None)


class ImageCache:
	"""
	Embed each distinct image payload once per job.

	Failures are cached as well, so a bad payload shared by many labels
	is only tried once.
	"""

	def __init__(self, embedder) -> None:
		self.embedder = embedder
		self._entries: dict[tuple[str, bytes], tuple[object | None, str | None]] = {}

	def get(self, payload: ImagePayload) -> tuple[object | None, str | None]:
		"""
		Return (handle, None) on success or (None, error message) on failure.
		"""
		key = (payload.mime_kind, payload.data)
		if key not in self._entries:
			try:
				handle = self.embedder.embed(payload.data, payload.mime_kind)
				self._entries[key] = (handle, None)
			except ImageEmbedError as error:
				self._entries[key] = (None, str(error) or "image could not be embedded")
		return self._entries[key]


#============================================
def compose_label(
	index: int,
	record: LabelRecord,
	sheet: Sheet,
	layout: LayoutConfig,
	font,
	image_cache: ImageCache,
) -> LabelResult:
	"""
	Lay out one record in its cell.

	Args:
		index: Label index across the job.
		record: Label record.
		sheet: Sheet geometry.
		layout: Layout configuration.
		font: Font measurement capability.
		image_cache: Shared image cache.

	Returns:
		LabelResult.
	"""
	cell = lsc.geometry.cell_for(index, sheet)
	region = lsc.geometry.split_cell(
		cell,
		layout.image_size,
		layout.inner_pad,
		layout.text_image_gap,
		layout.image_anchor,
	)

	text_block = None
	text_instructions: list[TextInstruction] = []
	if record.name and not region.text_region.is_degenerate:
		text_block = lsc.text_fit.fit_text(
			record.name,
			region.text_region,
			font,
			layout.start_font_size,
			layout.min_font_size,
			layout.max_lines,
			layout.line_height_mult,
			layout.font_size_step,
			trailer_line=record.price_text,
		)
		placed = lsc.text_fit.place_text_lines(
			text_block,
			region.text_region,
			font,
			layout.text_align_horizontal,
			layout.text_align_vertical,
		)
		for line, text_x, baseline_y in placed:
			text_instructions.append(
				TextInstruction(
					text=line,
					x=text_x,
					y=baseline_y,
					font_size=text_block.font_size,
					font_name=layout.font_name,
				)
			)

	image_instruction = None
	image_error = None
	if record.image is not None:
		if region.image_region.is_degenerate:
			image_error = "no room for image in cell"
		else:
			handle, image_error = image_cache.get(record.image)
			if handle is not None:
				image_region = region.image_region
				image_instruction = ImageInstruction(
					handle=handle,
					x=image_region.x,
					y=image_region.y,
					width=image_region.width,
					height=image_region.height,
				)

	background_instruction = None
	background_error = None
	if record.background is not None:
		handle, background_error = image_cache.get(record.background)
		if handle is not None:
			background_instruction = ImageInstruction(
				handle=handle,
				x=cell.x,
				y=cell.y_bottom,
				width=cell.width,
				height=cell.height,
			)

	return LabelResult(
		index=index,
		cell=cell,
		region=region,
		text_block=text_block,
		text_instructions=text_instructions,
		image_instruction=image_instruction,
		image_error=image_error,
		background_instruction=background_instruction,
		background_error=background_error,
	)


#============================================
def compose_labels(
	records: list[LabelRecord],
	sheet: Sheet,
	layout: LayoutConfig,
	font,
	embedder,
) -> ComposedSheet:
	"""
	Lay out every record across as many pages as needed.

	Args:
		records: Label records in print order.
		sheet: Sheet geometry.
		layout: Layout configuration.
		font: Font measurement capability.
		embedder: Object with embed(data, mime_kind) raising ImageEmbedError.

	Returns:
		ComposedSheet.
	"""
	image_cache = ImageCache(embedder)
	labels: list[LabelResult] = []
	pages = 0
	for index, record in enumerate(records):
		label = compose_label(index, record, sheet, layout, font, image_cache)
		# page_index never decreases with index, so pages are only appended
		pages = max(pages, label.page_index + 1)
		labels.append(label)
	return ComposedSheet(labels=labels, page_count=pages)
