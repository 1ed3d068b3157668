import pytest

import label_sheet_layout.slots
import label_sheet_layout.templates


CATALOG = label_sheet_layout.templates.TemplateCatalog()


#============================================
@pytest.mark.parametrize("template", CATALOG.templates(), ids=lambda template: template.id)
@pytest.mark.parametrize("requested", [None, 0, 1, 7, 44, 45, 65, 66, 1000])
def test_enumerated_count(template: label_sheet_layout.templates.LabelTemplate, requested: int | None) -> None:
	"""
	The slot count is the request capped at the grid size.
	"""
	grid_size = template.rows * template.columns
	positions = label_sheet_layout.slots.enumerate_slots(template, requested)
	expected = grid_size if requested is None else min(requested, grid_size)
	assert len(positions) == expected


#============================================
@pytest.mark.parametrize("template", CATALOG.templates(), ids=lambda template: template.id)
def test_row_major_order(template: label_sheet_layout.templates.LabelTemplate) -> None:
	"""
	Linear indexes increase strictly across the enumerated slots.
	"""
	positions = label_sheet_layout.slots.enumerate_slots(template)
	indexes = [
		label_sheet_layout.slots.slot_index(template, row, col)
		for row, col in positions
	]
	assert indexes == list(range(template.rows * template.columns))
	for (row_a, col_a), (row_b, col_b) in zip(positions, positions[1:]):
		assert row_a * template.columns + col_a < row_b * template.columns + col_b


#============================================
def test_partial_request_fills_top_row_first() -> None:
	template = CATALOG.get("lsa-65")
	positions = label_sheet_layout.slots.enumerate_slots(template, 7)
	assert positions == [(0, 0), (0, 1), (0, 2), (0, 3), (0, 4), (1, 0), (1, 1)]


#============================================
def test_zero_and_negative_requests_are_empty() -> None:
	template = CATALOG.get("lsa-65")
	assert label_sheet_layout.slots.enumerate_slots(template, 0) == []
	assert label_sheet_layout.slots.enumerate_slots(template, -3) == []


#============================================
def test_slot_id_format() -> None:
	assert label_sheet_layout.slots.make_slot_id(12, 4) == "12-4"
	assert label_sheet_layout.slots.make_slot_id(0, 0) == "0-0"
