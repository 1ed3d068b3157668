import pathlib

import fitz
import PIL.Image

import label_sheet_layout.config
import label_sheet_layout.paginate
import label_sheet_layout.render
import label_sheet_layout.templates


DPI = 150
INK_THRESHOLD = 200
INK_RATIO_MIN = 0.02


#============================================
def _render_pdf_first_page(path: pathlib.Path) -> PIL.Image.Image:
	"""
	Render the first page of a PDF to an image.

	Args:
		path: PDF path.

	Returns:
		PIL image.
	"""
	document = fitz.open(path)
	page = document[0]
	scale = DPI / 72.0
	matrix = fitz.Matrix(scale, scale)
	pixmap = page.get_pixmap(matrix=matrix, alpha=False)
	image = PIL.Image.frombytes("RGB", [pixmap.width, pixmap.height], pixmap.samples)
	document.close()
	return image


#============================================
def _count_ink_ratio(gray: PIL.Image.Image, threshold: int) -> float:
	"""
	Compute the ink ratio for a grayscale region.

	Args:
		gray: Grayscale image region.
		threshold: Pixel intensity threshold.

	Returns:
		Ink ratio.
	"""
	pixels = list(gray.getdata())
	if not pixels:
		return 0.0
	ink = sum(1 for value in pixels if value < threshold)
	return ink / len(pixels)


#============================================
def _slot_crop(gray: PIL.Image.Image, entry: label_sheet_layout.paginate.PageEntry) -> PIL.Image.Image:
	slot = entry.position
	x0 = int(round(slot.left * DPI))
	y0 = int(round(slot.top * DPI))
	x1 = int(round((slot.left + slot.width) * DPI))
	y1 = int(round((slot.top + slot.height) * DPI))
	return gray.crop((x0, y0, x1, y1))


#============================================
def test_rendered_page_ink_stays_in_slots(tmp_path: pathlib.Path) -> None:
	"""
	Smoke test that populated slots carry ink and empty slots stay blank.
	"""
	template = label_sheet_layout.templates.TemplateCatalog().get("lsa-65")
	products = [{"code": "6001234567890", "description": "Tower W225"}]
	layout = label_sheet_layout.paginate.build_pages(template, products, 1, 1)
	config = label_sheet_layout.config.RenderConfig(
		draw_outlines=False,
		calibration=False,
		draw_barcodes=True,
		normalize_text=True,
	)
	output_pdf = tmp_path / "smoke.pdf"
	label_sheet_layout.render.render_pages_to_pdf(layout.template, layout.pages, output_pdf, config)

	image = _render_pdf_first_page(output_pdf)
	gray = image.convert("L")
	expected_width = int(round(layout.template.page_width * DPI))
	assert abs(image.width - expected_width) <= 1

	entries = layout.pages[0].entries
	populated = _count_ink_ratio(_slot_crop(gray, entries[0]), INK_THRESHOLD)
	assert populated > INK_RATIO_MIN

	for entry in entries[1:]:
		ratio = _count_ink_ratio(_slot_crop(gray, entry), INK_THRESHOLD)
		assert ratio == 0.0, f"ink in empty slot {entry.slot_id}"

	corner = gray.crop((0, 0, 20, 20))
	assert _count_ink_ratio(corner, INK_THRESHOLD) == 0.0
