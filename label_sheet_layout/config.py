"""
Shared configuration and constants.
"""

import dataclasses


POINTS_PER_INCH = 72.0
PIXELS_PER_INCH = 96.0
CM_PER_INCH = 2.54

# fixed target output format (A4, 21.0 x 29.7 cm)
FIXED_OUTPUT_WIDTH = 21.0 / CM_PER_INCH
FIXED_OUTPUT_HEIGHT = 29.7 / CM_PER_INCH
FIXED_OUTPUT_EPSILON = 0.001

LETTER_WIDTH = 8.5
LETTER_HEIGHT = 11.0

MIN_PAGE_COUNT = 1
MAX_PAGE_COUNT = 100
MIN_GRID_SIZE = 1
MIN_LABEL_SIZE = 0.01

GEOMETRY_TOLERANCE = 1e-9
DEVICE_TOLERANCE = 1e-6

DEFAULT_TEMPLATE_ID = "lsa-65"
CUSTOM_TEMPLATE_ID = "custom"
CUSTOM_TEMPLATE_NAME = "Custom Template"
DEFAULT_TEMPLATES_FILE = "custom_templates.json"

DEFAULT_FONT_REGULAR = "Helvetica"
DEFAULT_FONT_BOLD = "Helvetica-Bold"
DEFAULT_CODE_FONT_SIZE = 6.0
DEFAULT_DESCRIPTION_FONT_SIZE = 5.5
DEFAULT_LABEL_INSET = 0.04
OUTLINE_LINE_WIDTH = 0.3
CALIBRATION_MARK_SIZE = 6.0
PROGRESS_BAR_WIDTH = 20
PROGRESS_UPDATE_EVERY = 5
DEFAULT_PRICE_FONT_SIZE = 8.0

ENCODING_CODE128 = "code128"
ENCODING_EAN13 = "ean13"
ENCODINGS = (ENCODING_CODE128, ENCODING_EAN13)
DEFAULT_ENCODING = ENCODING_CODE128

# label field boxes as fractions of the label (x, y from the top, width, height)
FIELD_LAYOUT = {
	"price": (0.05, 0.03, 0.9, 0.12),
	"code": (0.1, 0.18, 0.8, 0.08),
	"barcode": (0.08, 0.27, 0.84, 0.38),
	"line1": (0.06, 0.7, 0.88, 0.12),
	"line2": (0.06, 0.82, 0.88, 0.12),
}

PREVIEW_BACKGROUND = (255, 255, 255)
PREVIEW_LABEL_FILL = (243, 244, 246)
PREVIEW_LABEL_OUTLINE = (107, 114, 128)
PREVIEW_PLACEHOLDER_OUTLINE = (209, 213, 219)
PREVIEW_TEXT_COLOR = (17, 24, 39)


@dataclasses.dataclass
class RenderConfig:
	draw_outlines: bool
	calibration: bool
	draw_barcodes: bool
	normalize_text: bool
	inset: float = DEFAULT_LABEL_INSET
	code_font_size: float = DEFAULT_CODE_FONT_SIZE
	description_font_size: float = DEFAULT_DESCRIPTION_FONT_SIZE
	price_font_size: float = DEFAULT_PRICE_FONT_SIZE
	encoding: str = DEFAULT_ENCODING


@dataclasses.dataclass
class RenderResult:
	pages: int
	populated_labels: int
	placeholder_labels: int
	slots_per_page: int
	grid_slots: int
	invalid_barcodes: int = 0


#============================================
def cm_to_inches(value: float) -> float:
	"""
	Convert centimeters to inches.

	Args:
		value: Centimeters value.

	Returns:
		Inches value.
	"""
	return value / CM_PER_INCH


#============================================
def inches_to_cm(value: float) -> float:
	"""
	Convert inches to centimeters.
	"""
	return value * CM_PER_INCH


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
def inches_to_pixels(value: float) -> float:
	"""
	Convert inches to preview pixels.

	Args:
		value: Inches value.

	Returns:
		Device-independent pixel value at 96 px per inch.
	"""
	return value * PIXELS_PER_INCH
