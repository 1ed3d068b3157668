import json
import pathlib

import pypdf
import pytest

import label_sheet_layout.config
import label_sheet_layout.paginate
import label_sheet_layout.render
import label_sheet_layout.templates


CATALOG = label_sheet_layout.templates.TemplateCatalog()
PRODUCTS = [
	{"code": "6001234567890", "description": "Tower W225 bracket"},
	{"code": "6009876543210", "description": "Shelf pin 5 mm"},
]


#============================================
def make_config(**overrides) -> label_sheet_layout.config.RenderConfig:
	values = {
		"draw_outlines": False,
		"calibration": False,
		"draw_barcodes": True,
		"normalize_text": True,
	}
	values.update(overrides)
	return label_sheet_layout.config.RenderConfig(**values)


#============================================
def render(tmp_path: pathlib.Path, template_id: str, config, slots_per_page=None, page_count=None):
	template = CATALOG.get(template_id)
	layout = label_sheet_layout.paginate.build_pages(template, PRODUCTS, slots_per_page, page_count)
	output_pdf = tmp_path / "labels.pdf"
	result = label_sheet_layout.render.render_pages_to_pdf(
		layout.template,
		layout.pages,
		output_pdf,
		config,
	)
	return layout, result, output_pdf


#============================================
def test_pdf_pages_match_layout(tmp_path: pathlib.Path) -> None:
	layout, result, output_pdf = render(tmp_path, "lsa-65", make_config(), 10, 3)
	reader = pypdf.PdfReader(str(output_pdf))
	assert len(reader.pages) == 3
	assert result.pages == 3
	assert result.populated_labels == 30
	assert result.placeholder_labels == 3 * 55
	assert result.slots_per_page == 10
	assert result.grid_slots == 65
	assert len(layout.pages) == 3


#============================================
def test_pdf_page_size_matches_template(tmp_path: pathlib.Path) -> None:
	_layout, _result, output_pdf = render(tmp_path, "lsa-65", make_config())
	reader = pypdf.PdfReader(str(output_pdf))
	box = reader.pages[0].mediabox
	assert float(box.width) == pytest.approx(595.28, abs=0.01)
	assert float(box.height) == pytest.approx(841.89, abs=0.01)


#============================================
def test_pdf_contains_product_codes(tmp_path: pathlib.Path) -> None:
	_layout, _result, output_pdf = render(tmp_path, "custom", make_config(draw_barcodes=False), 2, 1)
	reader = pypdf.PdfReader(str(output_pdf))
	text = reader.pages[0].extract_text()
	assert "6001234567890" in text
	assert "6009876543210" in text


#============================================
def test_calibration_adds_leading_page(tmp_path: pathlib.Path) -> None:
	config = make_config(calibration=True, draw_outlines=True)
	_layout, result, output_pdf = render(tmp_path, "2-4-6-10-18-32-45", config, None, 2)
	reader = pypdf.PdfReader(str(output_pdf))
	assert len(reader.pages) == 3
	assert result.pages == 3
	assert "1 in" in reader.pages[0].extract_text()


#============================================
def test_empty_layout_writes_placeholder_page(tmp_path: pathlib.Path) -> None:
	template = CATALOG.get("lsa-65")
	page = label_sheet_layout.paginate.build_placeholder_page(template)
	output_pdf = tmp_path / "empty.pdf"
	result = label_sheet_layout.render.render_pages_to_pdf(
		template,
		[page],
		output_pdf,
		make_config(draw_outlines=True),
	)
	assert len(pypdf.PdfReader(str(output_pdf)).pages) == 1
	assert result.populated_labels == 0
	assert result.placeholder_labels == 65


#============================================
def test_manifest_records_plan(tmp_path: pathlib.Path) -> None:
	config = make_config()
	layout, result, _output_pdf = render(tmp_path, "lsa-65", config, 10, 3)
	manifest_path = tmp_path / "labels.json"
	label_sheet_layout.render.write_manifest(manifest_path, layout, result, config)
	data = json.loads(manifest_path.read_text(encoding="utf-8"))
	assert data["template"]["id"] == "lsa-65"
	assert data["plan"]["selected_products"] == 2
	assert data["plan"]["slots_per_page"] == 10
	assert data["plan"]["page_count"] == 3
	assert data["plan"]["total_slots"] == 30
	assert data["plan"]["pages_needed"] == 1
	assert data["output"]["pages"] == 3
	assert data["output"]["populated_labels"] == 30
	assert data["render"]["draw_barcodes"] is True
	assert data["warnings"] == []


#============================================
def test_label_fields_in_pdf_text(tmp_path: pathlib.Path) -> None:
	template = CATALOG.get("custom")
	products = [{"code": "111222", "Brand": "delish", "Description": "Rusks", "Price": "65"}]
	layout = label_sheet_layout.paginate.build_pages(template, products, 1, 1)
	output_pdf = tmp_path / "fields.pdf"
	label_sheet_layout.render.render_pages_to_pdf(layout.template, layout.pages, output_pdf, make_config())
	text = pypdf.PdfReader(str(output_pdf)).pages[0].extract_text()
	for expected in ("R 65.00", "111222", "delish", "Rusks"):
		assert expected in text


#============================================
def test_ean13_encoding_counts_invalid_codes(tmp_path: pathlib.Path) -> None:
	template = CATALOG.get("lsa-65")
	products = [{"code": "4006381333931"}, {"code": "6001234567890"}]
	layout = label_sheet_layout.paginate.build_pages(template, products, 4, 1)
	output_pdf = tmp_path / "ean.pdf"
	config = make_config(encoding=label_sheet_layout.config.ENCODING_EAN13)
	result = label_sheet_layout.render.render_pages_to_pdf(layout.template, layout.pages, output_pdf, config)
	assert len(pypdf.PdfReader(str(output_pdf)).pages) == 1
	assert result.populated_labels == 4
	assert result.invalid_barcodes == 2

	code128 = label_sheet_layout.render.render_pages_to_pdf(
		layout.template,
		layout.pages,
		tmp_path / "code128.pdf",
		make_config(),
	)
	assert code128.invalid_barcodes == 0


#============================================
def test_unknown_encoding_rejected(tmp_path: pathlib.Path) -> None:
	with pytest.raises(ValueError):
		render(tmp_path, "lsa-65", make_config(encoding="qr"))
