"""
Raster preview of laid out pages in device-independent pixels.
"""

# Standard Library
import pathlib

# PIP3 modules
import PIL.Image
import PIL.ImageDraw
import PIL.ImageFont

# local repo modules
import label_sheet_layout as lsl
import label_sheet_layout.config
import label_sheet_layout.products
import label_sheet_layout.render
import label_sheet_layout.templates


LabelTemplate = lsl.templates.LabelTemplate
DevicePage = lsl.render.DevicePage
Rect = lsl.render.Rect
RenderConfig = lsl.config.RenderConfig

inches_to_pixels = lsl.config.inches_to_pixels
PREVIEW_BACKGROUND = lsl.config.PREVIEW_BACKGROUND
PREVIEW_LABEL_FILL = lsl.config.PREVIEW_LABEL_FILL
PREVIEW_LABEL_OUTLINE = lsl.config.PREVIEW_LABEL_OUTLINE
PREVIEW_PLACEHOLDER_OUTLINE = lsl.config.PREVIEW_PLACEHOLDER_OUTLINE
PREVIEW_TEXT_COLOR = lsl.config.PREVIEW_TEXT_COLOR


#============================================
def pixel_box(rect: Rect) -> tuple[int, int, int, int]:
	"""
	Round a pixel rectangle to an inclusive PIL box.

	Args:
		rect: Rectangle in pixels.

	Returns:
		Tuple of (x0, y0, x1, y1).
	"""
	x0 = int(round(rect.left))
	y0 = int(round(rect.top))
	x1 = max(x0, int(round(rect.left + rect.width)) - 1)
	y1 = max(y0, int(round(rect.top + rect.height)) - 1)
	return (x0, y0, x1, y1)


#============================================
def render_preview_image(
	template: LabelTemplate,
	device_page: DevicePage,
	config: RenderConfig,
) -> PIL.Image.Image:
	"""
	Draw one page preview from its pixel rectangles.

	Args:
		template: Sanitized label template.
		device_page: Page in device units.
		config: Render configuration.

	Returns:
		RGB image at 96 px per inch.
	"""
	width = int(round(inches_to_pixels(template.page_width)))
	height = int(round(inches_to_pixels(template.page_height)))
	image = PIL.Image.new("RGB", (width, height), PREVIEW_BACKGROUND)
	draw = PIL.ImageDraw.Draw(image)
	font = PIL.ImageFont.load_default()

	for entry in device_page.entries:
		box = pixel_box(entry.pixel_rect)
		if entry.product is None:
			if config.draw_outlines:
				draw.rectangle(box, outline=PREVIEW_PLACEHOLDER_OUTLINE)
			continue
		draw.rectangle(box, fill=PREVIEW_LABEL_FILL, outline=PREVIEW_LABEL_OUTLINE)
		code = lsl.products.product_code(entry.product)
		if config.normalize_text:
			code = lsl.products.normalize_text(code)
		if code:
			draw.text((box[0] + 2, box[1] + 2), code, fill=PREVIEW_TEXT_COLOR, font=font)
	return image


#============================================
def write_preview_images(
	template: LabelTemplate,
	device_pages: list[DevicePage],
	output_dir: pathlib.Path,
	config: RenderConfig,
) -> list[pathlib.Path]:
	"""
	Save one PNG preview per page.

	Args:
		template: Sanitized label template.
		device_pages: Pages in device units.
		output_dir: Output directory, created when missing.
		config: Render configuration.

	Returns:
		Written image paths.
	"""
	output_dir.mkdir(parents=True, exist_ok=True)
	paths: list[pathlib.Path] = []
	for device_page in device_pages:
		image = render_preview_image(template, device_page, config)
		path = output_dir / f"page_{device_page.index + 1:03d}.png"
		image.save(path)
		paths.append(path)
	return paths
