"""
Slot enumeration and slot identifiers.
"""

# local repo modules
import label_sheet_layout as lsl
import label_sheet_layout.templates


LabelTemplate = lsl.templates.LabelTemplate


#============================================
def enumerate_slots(
	template: LabelTemplate,
	requested_count: int | None = None,
) -> list[tuple[int, int]]:
	"""
	List the slots to populate in row-major order.

	Row 0 is filled left to right first, then row 1, and so on. This order
	is the read and print order of labels on a sheet.

	Args:
		template: Label template.
		requested_count: Number of slots wanted, None for the full grid.

	Returns:
		List of (row, col) tuples.
	"""
	grid_size = template.rows * template.columns
	if requested_count is None:
		requested_count = grid_size
	count = min(requested_count, grid_size)
	positions: list[tuple[int, int]] = []
	for row in range(template.rows):
		for col in range(template.columns):
			if len(positions) >= count:
				return positions
			positions.append((row, col))
	return positions


#============================================
def slot_index(template: LabelTemplate, row: int, col: int) -> int:
	"""
	Compute the linear row-major index of a slot.
	"""
	return row * template.columns + col


#============================================
def make_slot_id(row: int, col: int) -> str:
	"""
	Build the page-independent identifier of a physical slot.

	Args:
		row: Row index.
		col: Column index.

	Returns:
		Identifier of the form "{row}-{col}".
	"""
	return f"{row}-{col}"
