import pytest

import label_sheet_layout.config
import label_sheet_layout.layout
import label_sheet_layout.paginate
import label_sheet_layout.render
import label_sheet_layout.templates


CATALOG = label_sheet_layout.templates.TemplateCatalog()


#============================================
@pytest.mark.parametrize("template", CATALOG.templates(), ids=lambda template: template.id)
def test_pixel_and_inch_rects_agree(template: label_sheet_layout.templates.LabelTemplate) -> None:
	"""
	Both device representations describe the same physical area.
	"""
	for slot in label_sheet_layout.layout.compute_grid_positions(template):
		device_slot = label_sheet_layout.render.to_device_units(slot)
		assert label_sheet_layout.render.rects_agree(device_slot.pixel_rect, device_slot.inch_rect)
		assert device_slot.inch_rect.left == slot.left
		assert device_slot.inch_rect.width == slot.width
		assert device_slot.pixel_rect.top == pytest.approx(slot.top * 96.0)
		assert device_slot.slot_id == f"{slot.row}-{slot.col}"


#============================================
def test_rects_agree_rejects_mismatch() -> None:
	inch_rect = label_sheet_layout.render.Rect(left=1.0, top=1.0, width=2.0, height=1.0)
	pixel_rect = label_sheet_layout.render.Rect(left=96.0, top=96.0, width=192.0, height=97.0)
	assert not label_sheet_layout.render.rects_agree(pixel_rect, inch_rect)
	assert label_sheet_layout.render.rects_agree(inch_rect.scaled(96.0), inch_rect)


#============================================
def test_device_pages_mirror_layout() -> None:
	template = CATALOG.get("lsa-65")
	layout = label_sheet_layout.paginate.build_pages(template, ["a", "b"], 4, 2)
	device_pages = label_sheet_layout.render.build_device_pages(layout.pages)
	assert len(device_pages) == 2
	for device_page, page in zip(device_pages, layout.pages):
		assert device_page.index == page.index
		assert len(device_page.entries) == len(page.entries)
		for device_entry, entry in zip(device_page.entries, page.entries):
			assert device_entry.slot_id == entry.slot_id
			assert device_entry.product == entry.product
			assert device_entry.inch_rect.top == entry.position.top
	assert [entry.product for entry in device_pages[1].entries[:5]] == ["a", "b", "a", "b", None]


#============================================
def test_slot_css_has_one_rule_per_slot() -> None:
	template = CATALOG.get("2-4-6-10-18-32-45")
	screen_css, print_css = label_sheet_layout.render.build_slot_css(template)
	screen_rules = screen_css.splitlines()
	print_rules = print_css.splitlines()
	assert len(screen_rules) == 45
	assert len(print_rules) == 45
	assert screen_rules[0].startswith(".label-cell-0-0 {")
	assert print_rules[-1].startswith(".label-cell-8-4 {")
	for rule in screen_rules:
		assert "px !important" in rule
		assert "in !important" not in rule
	for rule in print_rules:
		assert "in !important" in rule
		assert "position: absolute !important" in rule


#============================================
def test_slot_css_values_match_geometry() -> None:
	template = CATALOG.get("custom")
	screen_css, print_css = label_sheet_layout.render.build_slot_css(template)
	slot = label_sheet_layout.layout.compute_slot_position(template, 1, 1)
	print_rule = print_css.splitlines()[3]
	screen_rule = screen_css.splitlines()[3]
	assert print_rule.startswith(".label-cell-1-1 ")
	assert f"left: {slot.left}in" in print_rule
	assert f"height: {slot.height}in" in print_rule
	assert f"top: {slot.top * 96.0}px" in screen_rule


#============================================
def test_page_css_uses_template_size() -> None:
	template = CATALOG.get("custom")
	page_css = label_sheet_layout.render.build_page_css(template)
	assert "size: 8.5in 11.0in;" in page_css
	assert "margin: 0;" in page_css


#============================================
def test_rect_to_pdf_box_flips_y() -> None:
	rect = label_sheet_layout.render.Rect(left=1.0, top=0.5, width=2.0, height=1.0)
	page_height = 11.0 * label_sheet_layout.config.POINTS_PER_INCH
	x, y, width, height = label_sheet_layout.render.rect_to_pdf_box(rect, page_height)
	assert x == pytest.approx(72.0)
	assert y == pytest.approx(792.0 - 108.0)
	assert width == pytest.approx(144.0)
	assert height == pytest.approx(72.0)


#============================================
def test_fit_text_shrinks_then_truncates() -> None:
	text, size = label_sheet_layout.render.fit_text("6001234567890", "Helvetica", 6.0, 1000.0)
	assert (text, size) == ("6001234567890", 6.0)
	text, size = label_sheet_layout.render.fit_text("6001234567890", "Helvetica", 6.0, 10.0)
	assert size == label_sheet_layout.render.MIN_FONT_SIZE
	assert len(text) < len("6001234567890")
