"""
Auto-fit text engine: greedy word wrap with stepwise font shrinking.

The font is any object exposing width_of_text_at_size(text, size),
so the engine can run against ReportLab metrics or a fake font in tests.
"""

# Standard Library
import dataclasses
import math

# local repo modules
import label_sheet_composer as lsc
import label_sheet_composer.config
import label_sheet_composer.geometry


Rect = lsc.geometry.Rect
DEFAULT_FONT_SIZE_STEP = lsc.config.DEFAULT_FONT_SIZE_STEP
FONT_SIZE_EPSILON = lsc.config.FONT_SIZE_EPSILON


@dataclasses.dataclass(frozen=True)
class FittedTextBlock:
	lines: tuple[str, ...]
	font_size: float
	line_height: float
	overflowed: bool = False

	@property
	def block_height(self) -> float:
		return len(self.lines) * self.line_height


#============================================
def hard_break_word(word: str, max_width: float, font, size: float) -> list[str]:
	"""
	Break a token that is wider than the line into character runs.

	Args:
		word: Token without whitespace.
		max_width: Maximum line width.
		font: Font measurement capability.
		size: Font size.

	Returns:
		Pieces in order; only the last piece may be shorter than a full line.
	"""
	pieces: list[str] = []
	current = ""
	for char in word:
		candidate = current + char
		if font.width_of_text_at_size(candidate, size) <= max_width or not current:
			# a lone character always stays, even when it cannot fit
			current = candidate
			continue
		pieces.append(current)
		current = char
	if current:
		pieces.append(current)
	return pieces


#============================================
def wrap_text(text: str, max_width: float, font, size: float) -> list[str]:
	"""
	Wrap text greedily to a maximum width.

	Args:
		text: Input text.
		max_width: Maximum line width in points.
		font: Font measurement capability.
		size: Font size.

	Returns:
		Wrapped lines.
	"""
	lines: list[str] = []
	current = ""
	for word in text.split():
		candidate = word if not current else f"{current} {word}"
		if font.width_of_text_at_size(candidate, size) <= max_width:
			current = candidate
			continue
		if current:
			lines.append(current)
		if font.width_of_text_at_size(word, size) > max_width:
			pieces = hard_break_word(word, max_width, font, size)
			lines.extend(pieces[:-1])
			current = pieces[-1]
		else:
			current = word
	if current:
		lines.append(current)
	return lines


#============================================
def snap_font_size(size: float, size_step: float) -> float:
	"""
	Round a font size down onto the size_step grid.

	Args:
		size: Font size.
		size_step: Grid spacing.

	Returns:
		Largest multiple of size_step not above size.
	"""
	return math.floor(size / size_step + FONT_SIZE_EPSILON) * size_step


#============================================
def fit_text(
	text: str,
	region: Rect,
	font,
	start_size: float,
	min_size: float,
	max_lines: int,
	line_height_mult: float,
	size_step: float = DEFAULT_FONT_SIZE_STEP,
	trailer_line: str = "",
) -> FittedTextBlock:
	"""
	Find the largest font size whose wrapped lines fit the region.

	Candidate sizes are the multiples of size_step at or below start_size,
	then min_size, so a smaller start size never picks a larger font.
	When nothing fits at min_size the lines are cut to max_lines and the
	block is marked overflowed; it may then be taller than the region.

	A trailer line (for example a price) is kept whole, never wrapped, and
	counts against both max_lines and the region height.

	Args:
		text: Input text.
		region: Text region.
		font: Font measurement capability.
		start_size: Largest size to try.
		min_size: Smallest allowed size.
		max_lines: Maximum number of lines, trailer included.
		line_height_mult: Line height as a multiple of the font size.
		size_step: Shrink step.
		trailer_line: Optional extra last line.

	Returns:
		FittedTextBlock.
	"""
	trailer_count = 1 if trailer_line else 0

	def fits(size: float, lines: list[str]) -> bool:
		total = len(lines) + trailer_count
		if total > max_lines:
			return False
		if trailer_line and font.width_of_text_at_size(trailer_line, size) > region.width:
			return False
		return total * size * line_height_mult <= region.height

	size = max(min_size, snap_font_size(start_size, size_step))
	lines = wrap_text(text, region.width, font, size)
	while not fits(size, lines) and size > min_size:
		size = max(min_size, size - size_step)
		lines = wrap_text(text, region.width, font, size)

	overflowed = not fits(size, lines)
	if overflowed:
		lines = lines[:max(1, max_lines - trailer_count)]
	if trailer_line:
		lines = lines + [trailer_line]
	return FittedTextBlock(
		lines=tuple(lines),
		font_size=size,
		line_height=size * line_height_mult,
		overflowed=overflowed,
	)


#============================================
def place_text_lines(
	block: FittedTextBlock,
	region: Rect,
	font,
	align_horizontal: str = "LEFT",
	align_vertical: str = "CENTER",
) -> list[tuple[str, float, float]]:
	"""
	Position fitted lines by baseline inside the text region.

	Args:
		block: Fitted text block.
		region: Text region.
		font: Font measurement capability.
		align_horizontal: LEFT or CENTER.
		align_vertical: CENTER or TOP.

	Returns:
		List of (line, x, baseline_y), top line first.
	"""
	if not block.lines:
		return []
	count = len(block.lines)
	if align_vertical.upper() == "TOP":
		first_baseline = region.y + region.height - block.font_size
	else:
		last_baseline = region.y + (region.height - block.block_height) / 2.0
		first_baseline = last_baseline + (count - 1) * block.line_height

	placed: list[tuple[str, float, float]] = []
	for index, line in enumerate(block.lines):
		if align_horizontal.upper() == "CENTER":
			line_width = font.width_of_text_at_size(line, block.font_size)
			text_x = region.x + (region.width - line_width) / 2.0
		else:
			text_x = region.x
		placed.append((line, text_x, first_baseline - index * block.line_height))
	return placed
