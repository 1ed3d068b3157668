"""
Device units, slot styling rules and the PDF print surface.
"""

# Standard Library
import dataclasses
import io
import json
import pathlib

# PIP3 modules
import pypdf
import reportlab.graphics.barcode.code128
import reportlab.graphics.barcode.eanbc
import reportlab.graphics.renderPDF
import reportlab.graphics.shapes
import reportlab.pdfbase.pdfmetrics
import reportlab.pdfgen.canvas

# local repo modules
import label_sheet_layout as lsl
import label_sheet_layout.config
import label_sheet_layout.layout
import label_sheet_layout.paginate
import label_sheet_layout.products
import label_sheet_layout.slots
import label_sheet_layout.templates


LabelTemplate = lsl.templates.LabelTemplate
LabelSlot = lsl.layout.LabelSlot
Page = lsl.paginate.Page
LayoutResult = lsl.paginate.LayoutResult
RenderConfig = lsl.config.RenderConfig
RenderResult = lsl.config.RenderResult

PIXELS_PER_INCH = lsl.config.PIXELS_PER_INCH
DEVICE_TOLERANCE = lsl.config.DEVICE_TOLERANCE
DEFAULT_FONT_REGULAR = lsl.config.DEFAULT_FONT_REGULAR
DEFAULT_FONT_BOLD = lsl.config.DEFAULT_FONT_BOLD
FIELD_LAYOUT = lsl.config.FIELD_LAYOUT
ENCODING_CODE128 = lsl.config.ENCODING_CODE128
ENCODING_EAN13 = lsl.config.ENCODING_EAN13
OUTLINE_LINE_WIDTH = lsl.config.OUTLINE_LINE_WIDTH
CALIBRATION_MARK_SIZE = lsl.config.CALIBRATION_MARK_SIZE
PROGRESS_BAR_WIDTH = lsl.config.PROGRESS_BAR_WIDTH
PROGRESS_UPDATE_EVERY = lsl.config.PROGRESS_UPDATE_EVERY
POINTS_PER_INCH = lsl.config.POINTS_PER_INCH
inches_to_points = lsl.config.inches_to_points

MIN_FONT_SIZE = 3.0


@dataclasses.dataclass(frozen=True)
class Rect:
	left: float
	top: float
	width: float
	height: float

	def scaled(self, factor: float) -> "Rect":
		return Rect(
			left=self.left * factor,
			top=self.top * factor,
			width=self.width * factor,
			height=self.height * factor,
		)


@dataclasses.dataclass(frozen=True)
class DeviceSlot:
	slot_id: str
	pixel_rect: Rect
	inch_rect: Rect


@dataclasses.dataclass(frozen=True)
class DeviceEntry:
	index: int
	slot_id: str
	pixel_rect: Rect
	inch_rect: Rect
	product: object | None


@dataclasses.dataclass(frozen=True)
class DevicePage:
	index: int
	entries: tuple[DeviceEntry, ...]


#============================================
def to_device_units(slot: LabelSlot) -> DeviceSlot:
	"""
	Express one slot in preview pixels and print inches.

	Args:
		slot: Slot geometry in inches.

	Returns:
		DeviceSlot; pixel_rect is inch_rect at 96 px per inch.
	"""
	inch_rect = Rect(left=slot.left, top=slot.top, width=slot.width, height=slot.height)
	return DeviceSlot(
		slot_id=lsl.slots.make_slot_id(slot.row, slot.col),
		pixel_rect=inch_rect.scaled(PIXELS_PER_INCH),
		inch_rect=inch_rect,
	)


#============================================
def rects_agree(pixel_rect: Rect, inch_rect: Rect, tolerance: float = DEVICE_TOLERANCE) -> bool:
	"""
	Check that a pixel rectangle describes the same area as an inch rectangle.
	"""
	pairs = (
		(pixel_rect.left, inch_rect.left),
		(pixel_rect.top, inch_rect.top),
		(pixel_rect.width, inch_rect.width),
		(pixel_rect.height, inch_rect.height),
	)
	return all(abs(pixels / PIXELS_PER_INCH - inches) <= tolerance for pixels, inches in pairs)


#============================================
def build_device_pages(pages: list[Page]) -> list[DevicePage]:
	"""
	Mirror laid out pages in device units.

	Args:
		pages: Pages from the paginator.

	Returns:
		List of DevicePage with pixel and inch rectangles per slot.
	"""
	device_pages: list[DevicePage] = []
	for page in pages:
		entries: list[DeviceEntry] = []
		for entry in page.entries:
			device_slot = to_device_units(entry.position)
			entries.append(
				DeviceEntry(
					index=entry.index,
					slot_id=device_slot.slot_id,
					pixel_rect=device_slot.pixel_rect,
					inch_rect=device_slot.inch_rect,
					product=entry.product,
				)
			)
		device_pages.append(DevicePage(index=page.index, entries=tuple(entries)))
	return device_pages


#============================================
def build_slot_css(template: LabelTemplate) -> tuple[str, str]:
	"""
	Build one positioning rule per physical slot.

	Rules bind to the slot id class, so they hold for every page and product.

	Args:
		template: Label template.

	Returns:
		Tuple of (screen_css in px, print_css in inches).
	"""
	usable, _warnings = lsl.templates.sanitize_template(template)
	screen_rules: list[str] = []
	print_rules: list[str] = []
	for row, col in lsl.slots.enumerate_slots(usable):
		slot = lsl.layout.compute_slot_position(usable, row, col)
		device_slot = to_device_units(slot)
		selector = f".label-cell-{device_slot.slot_id}"
		px = device_slot.pixel_rect
		inch = device_slot.inch_rect
		screen_rules.append(
			f"{selector} {{ position: absolute !important; left: {px.left}px !important; "
			f"top: {px.top}px !important; width: {px.width}px !important; "
			f"height: {px.height}px !important; }}"
		)
		print_rules.append(
			f"{selector} {{ position: absolute !important; left: {inch.left}in !important; "
			f"top: {inch.top}in !important; width: {inch.width}in !important; "
			f"height: {inch.height}in !important; }}"
		)
	return ("\n".join(screen_rules), "\n".join(print_rules))


#============================================
def build_page_css(template: LabelTemplate) -> str:
	"""
	Build the print page rule sized to the template page with no margins.
	"""
	return (
		"@page {\n"
		f"  size: {template.page_width}in {template.page_height}in;\n"
		"  margin: 0;\n"
		"}"
	)


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
def page_size_points(template: LabelTemplate) -> tuple[float, float]:
	return (inches_to_points(template.page_width), inches_to_points(template.page_height))


#============================================
def rect_to_pdf_box(rect: Rect, page_height: float) -> tuple[float, float, float, float]:
	"""
	Convert a top-left inch rectangle to a bottom-left PDF point box.

	Args:
		rect: Rectangle in inches from the page top-left.
		page_height: Page height in points.

	Returns:
		Tuple of (x, y, width, height) in points.
	"""
	x = inches_to_points(rect.left)
	y = page_height - inches_to_points(rect.top + rect.height)
	return (x, y, inches_to_points(rect.width), inches_to_points(rect.height))


#============================================
def fit_text(text: str, font_name: str, font_size: float, max_width: float) -> tuple[str, float]:
	"""
	Shrink and then truncate text until it fits a width.

	Args:
		text: Text to fit.
		font_name: PDF font name.
		font_size: Preferred font size.
		max_width: Available width in points.

	Returns:
		Tuple of (text, font size).
	"""
	size = font_size
	while size > MIN_FONT_SIZE:
		if reportlab.pdfbase.pdfmetrics.stringWidth(text, font_name, size) <= max_width:
			return (text, size)
		size -= 0.5
	size = MIN_FONT_SIZE
	while text and reportlab.pdfbase.pdfmetrics.stringWidth(text, font_name, size) > max_width:
		text = text[:-1]
	return (text, size)


#============================================
def field_rect(rect: Rect, field: str) -> Rect:
	"""
	Place one label field inside a label rectangle.

	Args:
		rect: Label rectangle in inches.
		field: FIELD_LAYOUT key.

	Returns:
		Field rectangle in inches.
	"""
	x, y, width, height = FIELD_LAYOUT[field]
	return Rect(
		left=rect.left + x * rect.width,
		top=rect.top + y * rect.height,
		width=width * rect.width,
		height=height * rect.height,
	)


#============================================
def draw_field_text(
	pdf: reportlab.pdfgen.canvas.Canvas,
	text: str,
	font_name: str,
	font_size: float,
	box: tuple[float, float, float, float],
) -> None:
	"""
	Draw one line of text centered in a field box.

	Args:
		pdf: ReportLab canvas.
		text: Text to draw.
		font_name: PDF font name.
		font_size: Preferred font size, capped at the box height.
		box: Field box (x, y, width, height) in points.
	"""
	x, y, width, height = box
	if not text or width <= 0 or height <= 0:
		return
	text, size = fit_text(text, font_name, min(font_size, height), width)
	if not text:
		return
	pdf.setFont(font_name, size)
	baseline = y + (height - size * 0.7) / 2.0
	pdf.drawCentredString(x + width / 2.0, baseline, text)


#============================================
def draw_code128(
	pdf: reportlab.pdfgen.canvas.Canvas,
	code: str,
	x: float,
	y: float,
	width: float,
	height: float,
) -> None:
	barcode = reportlab.graphics.barcode.code128.Code128(
		code,
		barHeight=height,
		barWidth=1.0,
		quiet=0,
	)
	if barcode.width <= 0:
		return
	pdf.saveState()
	pdf.translate(x, y)
	pdf.scale(width / barcode.width, 1.0)
	barcode.drawOn(pdf, 0, 0)
	pdf.restoreState()


#============================================
def draw_ean13(
	pdf: reportlab.pdfgen.canvas.Canvas,
	code: str,
	x: float,
	y: float,
	width: float,
	height: float,
) -> None:
	# the widget appends its own check digit to the first 12 digits
	widget = reportlab.graphics.barcode.eanbc.Ean13BarcodeWidget(code[:12])
	widget.humanReadable = 0
	widget.quiet = 0
	widget.barWidth = widget.barWidth * width / widget.width
	widget.barHeight = height
	drawing = reportlab.graphics.shapes.Drawing(width, height)
	drawing.add(widget)
	reportlab.graphics.renderPDF.draw(drawing, pdf, x, y)


#============================================
def draw_barcode(
	pdf: reportlab.pdfgen.canvas.Canvas,
	code: str,
	x: float,
	y: float,
	width: float,
	height: float,
	encoding: str = ENCODING_CODE128,
) -> bool:
	"""
	Draw a barcode symbol stretched to a box.

	Args:
		pdf: ReportLab canvas.
		code: Barcode value.
		x: Box left in points.
		y: Box bottom in points.
		width: Box width in points.
		height: Box height in points.
		encoding: ENCODING_CODE128 or ENCODING_EAN13.

	Returns:
		False when the code cannot be encoded and nothing was drawn.
	"""
	if encoding == ENCODING_EAN13:
		if not lsl.products.is_valid_ean13(code):
			return False
		draw_ean13(pdf, code, x, y, width, height)
		return True
	if encoding != ENCODING_CODE128:
		raise ValueError(f"Unknown barcode encoding: {encoding}")
	draw_code128(pdf, code, x, y, width, height)
	return True


#============================================
def draw_product_label(
	pdf: reportlab.pdfgen.canvas.Canvas,
	rect: Rect,
	product: object,
	page_height: float,
	config: RenderConfig,
) -> bool:
	"""
	Draw one populated label: price, code, barcode, brand and description.

	Fields sit in the FIELD_LAYOUT boxes inside the inset label area.

	Args:
		pdf: ReportLab canvas.
		rect: Slot rectangle in inches.
		product: Product record.
		page_height: Page height in points.
		config: Render configuration.

	Returns:
		False when the barcode could not be encoded.
	"""
	inner = Rect(
		left=rect.left + config.inset,
		top=rect.top + config.inset,
		width=rect.width - 2.0 * config.inset,
		height=rect.height - 2.0 * config.inset,
	)
	if inner.width <= 0 or inner.height <= 0:
		return True

	code = lsl.products.product_code(product)
	fields = {
		"price": lsl.products.product_price(product),
		"line1": lsl.products.product_brand(product),
		"line2": lsl.products.product_description(product),
	}
	if config.normalize_text:
		code = lsl.products.normalize_text(code)
		fields = {key: lsl.products.normalize_text(value) for key, value in fields.items()}

	boxes = {field: rect_to_pdf_box(field_rect(inner, field), page_height) for field in FIELD_LAYOUT}

	pdf.setFillColorRGB(0.0, 0.0, 0.0)
	draw_field_text(pdf, fields["price"], DEFAULT_FONT_BOLD, config.price_font_size, boxes["price"])
	draw_field_text(pdf, code, DEFAULT_FONT_REGULAR, config.code_font_size, boxes["code"])
	draw_field_text(pdf, fields["line1"], DEFAULT_FONT_BOLD, config.description_font_size, boxes["line1"])
	draw_field_text(pdf, fields["line2"], DEFAULT_FONT_REGULAR, config.description_font_size, boxes["line2"])

	if not code or not config.draw_barcodes:
		return True
	x, y, width, height = boxes["barcode"]
	if width <= 0 or height <= 0:
		return True
	return draw_barcode(pdf, code, x, y, width, height, config.encoding)


#============================================
def draw_label_outlines(
	pdf: reportlab.pdfgen.canvas.Canvas,
	template: LabelTemplate,
	gray: float = 0.7,
) -> None:
	"""
	Draw every slot outline of the template grid on the current page.

	Args:
		pdf: ReportLab canvas.
		template: Label template.
		gray: Stroke gray level.
	"""
	_page_width, page_height = page_size_points(template)
	pdf.setLineWidth(OUTLINE_LINE_WIDTH)
	pdf.setStrokeColorRGB(gray, gray, gray)
	for slot in lsl.layout.compute_grid_positions(template):
		rect = to_device_units(slot).inch_rect
		x, y, width, height = rect_to_pdf_box(rect, page_height)
		pdf.rect(x, y, width, height, stroke=1, fill=0)


#============================================
def draw_calibration_page(pdf: reportlab.pdfgen.canvas.Canvas, template: LabelTemplate) -> None:
	"""
	Draw slot outlines, corner crosshairs and a 1 inch ruler mark.

	Args:
		pdf: ReportLab canvas.
		template: Label template.
	"""
	_page_width, page_height = page_size_points(template)
	draw_label_outlines(pdf, template, gray=0.6)

	pdf.setLineWidth(0.6)
	pdf.setStrokeColorRGB(0.0, 0.0, 0.0)
	row_samples = sorted({0, template.rows - 1})
	col_samples = sorted({0, template.columns - 1})
	for row in row_samples:
		for col in col_samples:
			slot = lsl.layout.compute_slot_position(template, row, col)
			x, y, width, height = rect_to_pdf_box(to_device_units(slot).inch_rect, page_height)
			center_x = x + width / 2.0
			center_y = y + height / 2.0
			size = CALIBRATION_MARK_SIZE
			pdf.line(center_x - size, center_y, center_x + size, center_y)
			pdf.line(center_x, center_y - size, center_x, center_y + size)

	first_slot = lsl.layout.compute_slot_position(template, 0, 0)
	ruler_x = inches_to_points(first_slot.left)
	ruler_y = min(page_height - 12.0, page_height - inches_to_points(first_slot.top) + 4.0)
	pdf.line(ruler_x, ruler_y, ruler_x + POINTS_PER_INCH, ruler_y)
	pdf.setFillColorRGB(0.0, 0.0, 0.0)
	pdf.setFont(DEFAULT_FONT_REGULAR, 8)
	pdf.drawString(ruler_x, ruler_y + 2.0, "1 in")


#============================================
def build_outline_overlay(template: LabelTemplate) -> pypdf.PageObject:
	"""
	Build a PDF overlay page with label outlines.

	Args:
		template: Label template.

	Returns:
		PDF page object.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=page_size_points(template))
	draw_label_outlines(pdf, template)
	pdf.save()
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	return reader.pages[0]


#============================================
def build_calibration_page(template: LabelTemplate) -> pypdf.PageObject:
	"""
	Build a calibration page PDF.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=page_size_points(template))
	draw_calibration_page(pdf, template)
	pdf.save()
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	return reader.pages[0]


#============================================
def render_label_pages(
	template: LabelTemplate,
	pages: list[Page],
	config: RenderConfig,
	verbose: bool = False,
) -> tuple[io.BytesIO, int]:
	"""
	Draw the populated slots of every page into an in-memory PDF.

	Args:
		template: Sanitized label template.
		pages: Laid out pages.
		config: Render configuration.
		verbose: Print a progress bar.

	Returns:
		Tuple of (buffer holding one PDF page per layout page, count of
		labels whose barcode could not be encoded).
	"""
	buffer = io.BytesIO()
	page_width, page_height = page_size_points(template)
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(page_width, page_height))
	device_pages = build_device_pages(pages)
	total = len(device_pages)
	invalid_barcodes = 0
	for number, device_page in enumerate(device_pages, start=1):
		for entry in device_page.entries:
			if entry.product is None:
				continue
			if not draw_product_label(pdf, entry.inch_rect, entry.product, page_height, config):
				invalid_barcodes += 1
		pdf.showPage()
		if verbose and (number % PROGRESS_UPDATE_EVERY == 0 or number == total):
			print_progress("Pages", number, total)
	if verbose and total > 0:
		print()
	pdf.save()
	buffer.seek(0)
	return (buffer, invalid_barcodes)


#============================================
def render_pages_to_pdf(
	template: LabelTemplate,
	pages: list[Page],
	output_path: pathlib.Path,
	config: RenderConfig,
	verbose: bool = False,
) -> RenderResult:
	"""
	Write laid out pages to a print-ready PDF sized to the template page.

	Args:
		template: Sanitized label template.
		pages: Laid out pages, placeholders stay blank.
		output_path: Output PDF path.
		config: Render configuration.
		verbose: Print a progress bar.

	Returns:
		RenderResult.
	"""
	writer = pypdf.PdfWriter()
	if config.calibration:
		writer.add_page(build_calibration_page(template))

	outline_page = None
	if config.draw_outlines:
		outline_page = build_outline_overlay(template)

	invalid_barcodes = 0
	if pages:
		buffer, invalid_barcodes = render_label_pages(template, pages, config, verbose)
		reader = pypdf.PdfReader(buffer)
		for label_page in reader.pages:
			if outline_page is not None:
				label_page.merge_page(outline_page)
			writer.add_page(label_page)

	with output_path.open("wb") as handle:
		writer.write(handle)

	populated = sum(page.populated_count for page in pages)
	placeholders = sum(page.placeholder_count for page in pages)
	slots_per_page = 0
	if pages:
		slots_per_page = pages[0].populated_count
	page_total = len(pages)
	if config.calibration:
		page_total += 1
	return RenderResult(
		pages=page_total,
		populated_labels=populated,
		placeholder_labels=placeholders,
		slots_per_page=slots_per_page,
		grid_slots=template.rows * template.columns,
		invalid_barcodes=invalid_barcodes,
	)


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	layout: LayoutResult,
	result: RenderResult,
	config: RenderConfig,
) -> None:
	"""
	Write a manifest JSON file.

	Args:
		manifest_path: Output path.
		layout: Layout result that was rendered.
		result: Render result.
		config: Render configuration.
	"""
	template = layout.template
	data = {
		"template": lsl.templates.template_to_dict(template),
		"plan": {
			"selected_products": len(layout.plan.selected_products),
			"slots_per_page": layout.plan.slots_per_page,
			"page_count": layout.plan.page_count,
			"total_slots": layout.plan.total_slots,
			"pages_needed": lsl.paginate.count_pages_needed(
				len(layout.plan.selected_products),
				layout.plan.slots_per_page,
			),
		},
		"output": {
			"pages": result.pages,
			"populated_labels": result.populated_labels,
			"placeholder_labels": result.placeholder_labels,
			"grid_slots": result.grid_slots,
			"invalid_barcodes": result.invalid_barcodes,
		},
		"render": {
			"draw_outlines": config.draw_outlines,
			"calibration": config.calibration,
			"draw_barcodes": config.draw_barcodes,
			"encoding": config.encoding,
			"normalize_text": config.normalize_text,
			"inset": config.inset,
		},
		"warnings": list(layout.warnings),
	}
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)
