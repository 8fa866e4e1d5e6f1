"""
Label records and input normalization.
"""

# Standard Library
import base64
import binascii
import dataclasses
import math
import pathlib
import re

# local repo modules
import label_sheet_composer as lsc
import label_sheet_composer.config


CASE_POLICIES = lsc.config.CASE_POLICIES
DEFAULT_CASE = lsc.config.DEFAULT_CASE
PRICE_UNIT = lsc.config.PRICE_UNIT

DATA_URL_PATTERN = re.compile(r"^data:image/([a-z0-9.+-]+);base64,(.*)$", re.IGNORECASE | re.DOTALL)
LEADING_QUANTITY_PATTERN = re.compile(r"^\s*\d+\s*(?:x|×)?\s*", re.IGNORECASE)
TRAILING_QUANTITY_PATTERN = re.compile(r"\(\s*x\s*\d+\s*\)\s*$", re.IGNORECASE)
TRAILING_COUNT_PATTERN = re.compile(r"\b(x\s*\d+)\)?\s*$", re.IGNORECASE)
BARE_COUNT_PATTERN = re.compile(r"^\d+\s*(?:x|×)?\s*$", re.IGNORECASE)
SECTION_HEADER_PATTERN = re.compile(r"^(a\s+la\s+carte|beverages|desserts?)(\s+items)?\s*:?\s*$", re.IGNORECASE)
PRICE_UNIT_SUFFIX_PATTERN = re.compile(r"/oz$", re.IGNORECASE)
PRICE_JUNK_PATTERN = re.compile(r"[^0-9.]")

# file suffix -> declared image kind
IMAGE_SUFFIX_KINDS = {
	".png": "png",
	".jpg": "jpeg",
	".jpeg": "jpeg",
}


@dataclasses.dataclass(frozen=True)
class ImagePayload:
	data: bytes
	mime_kind: str


@dataclasses.dataclass(frozen=True)
class LabelRecord:
	name: str
	image: ImagePayload | None = None
	price_text: str = ""
	background: ImagePayload | None = None

	@property
	def is_empty(self) -> bool:
		return not self.name and self.image is None


#============================================
def normalize_case(text: str, case: str = DEFAULT_CASE) -> str:
	"""
	Apply a case policy to label text.

	Args:
		text: Input text.
		case: UPPER, LOWER or NONE.

	Returns:
		Case-normalized text.
	"""
	policy = case.upper()
	if policy not in CASE_POLICIES:
		raise ValueError(f"unknown case policy: {case}")
	if policy == "UPPER":
		return text.upper()
	if policy == "LOWER":
		return text.lower()
	return text


#============================================
def decode_data_url(value: str) -> ImagePayload | None:
	"""
	Decode a base64 image data URL.

	Undecodable base64 gives an empty payload rather than None so the
	record keeps its image slot and the embedder can reject it.

	Args:
		value: String like "data:image/png;base64,AAAA".

	Returns:
		ImagePayload, or None when the value is not an image data URL.
	"""
	if not value:
		return None
	match = DATA_URL_PATTERN.match(value.strip())
	if match is None:
		return None
	mime_kind = match.group(1).lower()
	if mime_kind == "jpg":
		mime_kind = "jpeg"
	try:
		data = base64.b64decode(match.group(2))
	except binascii.Error:
		data = b""
	return ImagePayload(data=data, mime_kind=mime_kind)


#============================================
def resolve_item_image(item: dict, images: list) -> str:
	"""
	Pick the data URL for an item, either shared by index or inline.

	Args:
		item: Input item mapping.
		images: Shared data URL list referenced by qrRef.

	Returns:
		Data URL string, possibly empty.
	"""
	ref = item.get("qrRef")
	if isinstance(ref, int) and not isinstance(ref, bool) and 0 <= ref < len(images):
		shared = images[ref]
		if shared:
			return str(shared)
	inline = item.get("qrDataUrl") or ""
	return str(inline)


#============================================
def normalize_items(
	items: list,
	images: list | None = None,
	case: str = DEFAULT_CASE,
) -> list[LabelRecord]:
	"""
	Turn raw input items into label records.

	Args:
		items: Mappings with "name" and an optional "qrRef" or "qrDataUrl".
		images: Shared data URLs for qrRef lookups.
		case: Case policy for names.

	Returns:
		Records, skipping rows with neither a name nor an image.
	"""
	shared_images = images or []
	records: list[LabelRecord] = []
	for item in items:
		if not isinstance(item, dict):
			continue
		name = normalize_case(str(item.get("name") or "").strip(), case)
		image = decode_data_url(resolve_item_image(item, shared_images))
		record = LabelRecord(name=name, image=image)
		if record.is_empty:
			continue
		records.append(record)
	return records


#============================================
def strip_quantity(text: str) -> str:
	"""
	Remove order quantities such as "12 x " or a trailing "(x 12)".

	Args:
		text: Menu line.

	Returns:
		Line without quantity markers.
	"""
	result = TRAILING_QUANTITY_PATTERN.sub("", str(text))
	result = LEADING_QUANTITY_PATTERN.sub("", result, count=1)
	return result.strip()


#============================================
def should_exclude(text: str, exclude: list[str] | None = None) -> bool:
	"""
	Decide whether a menu line is a header, a count, or excluded by the user.

	Args:
		text: Menu line.
		exclude: Lowercase substrings to drop.

	Returns:
		True when the line should not become a label.
	"""
	lowered = str(text).lower().strip()
	if not lowered:
		return True
	if TRAILING_COUNT_PATTERN.search(lowered):
		return True
	if BARE_COUNT_PATTERN.match(lowered):
		return True
	if SECTION_HEADER_PATTERN.match(lowered):
		return True
	for keyword in exclude or []:
		keyword = keyword.lower().strip()
		if keyword and keyword in lowered:
			return True
	return False


#============================================
def parse_menu_lines(
	menu_text: str,
	exclude: list[str] | None = None,
	case: str = DEFAULT_CASE,
) -> list[LabelRecord]:
	"""
	Build text-only records from a block of menu lines.

	Args:
		menu_text: Newline separated menu items.
		exclude: Substrings to drop.
		case: Case policy for names.

	Returns:
		Records in input order.
	"""
	records: list[LabelRecord] = []
	for raw_line in menu_text.splitlines():
		name = strip_quantity(raw_line)
		if should_exclude(name, exclude):
			continue
		records.append(LabelRecord(name=normalize_case(name, case)))
	return records


#============================================
def normalize_line_items(
	line_items: list,
	exclude: list[str] | None = None,
	case: str = DEFAULT_CASE,
) -> list[LabelRecord]:
	"""
	Build text-only records from structured order lines.

	Args:
		line_items: Mappings with an "item" field, e.g. {"item": "8 x House Chips"}.
		exclude: Substrings to drop.
		case: Case policy for names.

	Returns:
		Records in input order.
	"""
	records: list[LabelRecord] = []
	for line_item in line_items:
		if not isinstance(line_item, dict):
			continue
		name = strip_quantity(line_item.get("item") or "")
		if should_exclude(name, exclude):
			continue
		records.append(LabelRecord(name=normalize_case(name, case)))
	return records


#============================================
def records_from_payload(
	payload,
	exclude: list[str] | None = None,
	case: str = DEFAULT_CASE,
) -> list[LabelRecord]:
	"""
	Pick the record source from a decoded JSON payload.

	A bare list is an items list. In a mapping the first non-empty source
	wins: "items" (with shared "images"), then "lineItems", then the
	"menuItems" text block.

	Args:
		payload: Decoded JSON value.
		exclude: Substrings to drop from order lines.
		case: Case policy for names.

	Returns:
		Label records, empty when nothing usable is present.
	"""
	if isinstance(payload, list):
		return normalize_items(payload, None, case)
	if not isinstance(payload, dict):
		return []
	items = payload.get("items")
	if isinstance(items, list) and items:
		images = payload.get("images")
		if not isinstance(images, list):
			images = []
		return normalize_items(items, images, case)
	line_items = payload.get("lineItems")
	if isinstance(line_items, list) and line_items:
		return normalize_line_items(line_items, exclude, case)
	menu_text = payload.get("menuItems")
	if isinstance(menu_text, str):
		return parse_menu_lines(menu_text, exclude, case)
	return []


#============================================
def to_bool(value, default: bool = False) -> bool:
	"""
	Read a JSON flag that may arrive as a bool or a "true"/"false" string.
	"""
	if isinstance(value, bool):
		return value
	if isinstance(value, str):
		return value.strip().lower() == "true"
	return default


#============================================
def parse_price_per_oz(raw) -> float | None:
	"""
	Parse a loosely typed price such as "$1,25 /oz" or 0.99.

	Whitespace is dropped, a comma counts as the decimal point, a trailing
	"/oz" and any other non-numeric characters are removed, and extra
	decimal points after the first are discarded.

	Args:
		raw: Price value from the payload or the command line.

	Returns:
		Price as a float, or None when nothing numeric remains.
	"""
	if raw is None or isinstance(raw, bool):
		return None
	text = "".join(str(raw).split()).replace(",", ".")
	text = PRICE_UNIT_SUFFIX_PATTERN.sub("", text)
	text = PRICE_JUNK_PATTERN.sub("", text)
	parts = text.split(".")
	if len(parts) > 2:
		text = parts[0] + "." + "".join(parts[1:])
	if text in ("", "."):
		return None
	value = float(text)
	if not math.isfinite(value):
		return None
	return value


#============================================
def format_price(value: float, unit: str = PRICE_UNIT) -> str:
	return f"{value:.2f}/{unit}"


#============================================
def price_text_from_payload(payload: dict, override=None) -> str:
	"""
	Build the price line shared by every label in a job.

	Args:
		payload: Decoded JSON mapping with "pricePerOz" and "enablePrice".
		override: Price from the command line; wins over the payload.

	Returns:
		Text like "1.25/oz", or "" when no price should print.
	"""
	if override is not None:
		value = parse_price_per_oz(override)
	elif to_bool(payload.get("enablePrice"), True):
		value = parse_price_per_oz(payload.get("pricePerOz"))
	else:
		value = None
	if value is None:
		return ""
	return format_price(value)


#============================================
def background_from_payload(payload: dict) -> ImagePayload | None:
	"""
	Decode the optional full-cell background graphic.

	Args:
		payload: Decoded JSON mapping with "background" (a data URL) and
			an optional "enableBackground" flag, on by default.

	Returns:
		ImagePayload, or None.
	"""
	if not to_bool(payload.get("enableBackground"), True):
		return None
	value = payload.get("background")
	if not isinstance(value, str):
		return None
	return decode_data_url(value)


#============================================
def load_image_file(image_path: pathlib.Path) -> ImagePayload:
	"""
	Read an image file into a payload, taking the kind from the suffix.

	Args:
		image_path: PNG or JPEG file.

	Returns:
		ImagePayload; unknown suffixes keep their name so the embedder rejects them.
	"""
	suffix = image_path.suffix.lower()
	mime_kind = IMAGE_SUFFIX_KINDS.get(suffix, suffix.lstrip("."))
	return ImagePayload(data=image_path.read_bytes(), mime_kind=mime_kind)


#============================================
def apply_label_extras(
	records: list[LabelRecord],
	price_text: str = "",
	background: ImagePayload | None = None,
) -> list[LabelRecord]:
	"""
	Give every record the job-wide price line and background.

	Values already set on a record are kept.

	Args:
		records: Label records.
		price_text: Price line, "" for none.
		background: Background payload, None for none.

	Returns:
		New list of records.
	"""
	if not price_text and background is None:
		return list(records)
	result: list[LabelRecord] = []
	for record in records:
		updates = {}
		if price_text and not record.price_text:
			updates["price_text"] = price_text
		if background is not None and record.background is None:
			updates["background"] = background
		result.append(dataclasses.replace(record, **updates) if updates else record)
	return result
