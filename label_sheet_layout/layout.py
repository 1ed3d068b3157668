"""
Slot geometry for label sheet templates.

All values are inches measured from the top-left corner of the page. Row 0 is
the physical top row and column 0 the physical left column.
"""

# Standard Library
import dataclasses

# local repo modules
import label_sheet_layout as lsl
import label_sheet_layout.config
import label_sheet_layout.templates


LabelTemplate = lsl.templates.LabelTemplate

FIXED_OUTPUT_WIDTH = lsl.config.FIXED_OUTPUT_WIDTH
FIXED_OUTPUT_HEIGHT = lsl.config.FIXED_OUTPUT_HEIGHT
FIXED_OUTPUT_EPSILON = lsl.config.FIXED_OUTPUT_EPSILON


@dataclasses.dataclass(frozen=True)
class LabelSlot:
	row: int
	col: int
	left: float
	top: float
	width: float
	height: float


@dataclasses.dataclass(frozen=True)
class AxisTransform:
	scale: float
	offset: float


#============================================
def has_pitch(template: LabelTemplate) -> bool:
	"""
	Check whether a template positions labels by pitch.

	Args:
		template: Label template.

	Returns:
		True when both pitch values are set and non-zero.
	"""
	return bool(template.horizontal_pitch) and bool(template.vertical_pitch)


#============================================
def is_fixed_output_page(template: LabelTemplate) -> bool:
	"""
	Check whether the template page matches the fixed output format.

	Args:
		template: Label template.

	Returns:
		True when both page dimensions match within FIXED_OUTPUT_EPSILON.
	"""
	width_match = abs(template.page_width - FIXED_OUTPUT_WIDTH) < FIXED_OUTPUT_EPSILON
	height_match = abs(template.page_height - FIXED_OUTPUT_HEIGHT) < FIXED_OUTPUT_EPSILON
	return width_match and height_match


#============================================
def compute_grid_footprint(template: LabelTemplate) -> tuple[float, float]:
	"""
	Compute the unscaled pitch grid size.

	Args:
		template: Label template with pitch values.

	Returns:
		Tuple of (grid_width, grid_height) in inches.
	"""
	grid_width = (template.columns - 1) * template.horizontal_pitch + template.label_width
	grid_height = (template.rows - 1) * template.vertical_pitch + template.label_height
	return (grid_width, grid_height)


#============================================
def compute_axis_transform(
	target: float,
	footprint: float,
	margin: float,
) -> AxisTransform:
	"""
	Stretch one grid axis to fill the drawable target length.

	Args:
		target: Drawable length between the margins.
		footprint: Unscaled grid length.
		margin: Leading margin on this axis.

	Returns:
		AxisTransform with scale and origin offset. A non-positive
		footprint keeps scale 1 and centers the grid in the target.
	"""
	scale = 1.0
	if footprint > 0:
		scale = target / footprint
	offset = margin
	residual = target - footprint * scale
	if residual > 0:
		offset += residual / 2.0
	return AxisTransform(scale=scale, offset=offset)


#============================================
def compute_fixed_output_transform(
	template: LabelTemplate,
) -> tuple[AxisTransform, AxisTransform]:
	"""
	Compute independent horizontal and vertical transforms for the fixed output format.

	The two axes scale separately so the grid lands exactly on the declared
	margins of the fixed output page, even though the label aspect ratio is
	not preserved.

	Args:
		template: Pitch template whose page matches the fixed output format.

	Returns:
		Tuple of (x_transform, y_transform).
	"""
	grid_width, grid_height = compute_grid_footprint(template)
	target_width = FIXED_OUTPUT_WIDTH - template.margin_left - template.margin_right
	target_height = FIXED_OUTPUT_HEIGHT - template.margin_top - template.margin_bottom
	x_transform = compute_axis_transform(target_width, grid_width, template.margin_left)
	y_transform = compute_axis_transform(target_height, grid_height, template.margin_top)
	return (x_transform, y_transform)


#============================================
def compute_pitch_position(template: LabelTemplate, row: int, col: int) -> LabelSlot:
	"""
	Position a slot on a pitch grid, scaled when the page is the fixed output format.
	"""
	x_transform = AxisTransform(scale=1.0, offset=0.0)
	y_transform = AxisTransform(scale=1.0, offset=0.0)
	if is_fixed_output_page(template):
		x_transform, y_transform = compute_fixed_output_transform(template)

	left = x_transform.offset + col * template.horizontal_pitch * x_transform.scale
	top = y_transform.offset + row * template.vertical_pitch * y_transform.scale
	return LabelSlot(
		row=row,
		col=col,
		left=left,
		top=top,
		width=template.label_width * x_transform.scale,
		height=template.label_height * y_transform.scale,
	)


#============================================
def compute_gap_position(template: LabelTemplate, row: int, col: int) -> LabelSlot:
	"""
	Position a slot by spreading the grid evenly between the page margins.

	Labels that do not fit the available area are shrunk, and the result is
	clamped to stay on the page.

	Args:
		template: Label template without pitch values.
		row: Row index.
		col: Column index.

	Returns:
		LabelSlot in inches.
	"""
	available_width = template.page_width - template.margin_left - template.margin_right
	available_height = template.page_height - template.margin_top - template.margin_bottom

	label_area_width = available_width - template.gap_horizontal * (template.columns - 1)
	label_area_height = available_height - template.gap_vertical * (template.rows - 1)

	label_width = max(0.0, min(template.label_width, label_area_width / template.columns))
	label_height = max(0.0, min(template.label_height, label_area_height / template.rows))

	spacing_x = 0.0
	if template.columns > 1:
		spacing_x = (available_width - label_width * template.columns) / (template.columns - 1)
	spacing_y = 0.0
	if template.rows > 1:
		spacing_y = (available_height - label_height * template.rows) / (template.rows - 1)

	raw_left = template.margin_left + col * (label_width + spacing_x)
	raw_top = template.margin_top + row * (label_height + spacing_y)

	left = max(0.0, min(raw_left, template.page_width - label_width))
	top = max(0.0, min(raw_top, template.page_height - label_height))
	width = min(label_width, template.page_width - raw_left - template.margin_right)
	height = min(label_height, template.page_height - raw_top - template.margin_bottom)
	width = max(0.0, min(width, template.page_width - left))
	height = max(0.0, min(height, template.page_height - top))
	return LabelSlot(row=row, col=col, left=left, top=top, width=width, height=height)


#============================================
def compute_slot_position(template: LabelTemplate, row: int, col: int) -> LabelSlot:
	"""
	Compute the on-page geometry of one slot.

	Args:
		template: Label template.
		row: Row index, 0 is the top row.
		col: Column index, 0 is the left column.

	Returns:
		LabelSlot in inches.
	"""
	if not 0 <= row < template.rows:
		raise ValueError(f"Row {row} outside template grid with {template.rows} rows")
	if not 0 <= col < template.columns:
		raise ValueError(f"Column {col} outside template grid with {template.columns} columns")
	if has_pitch(template):
		return compute_pitch_position(template, row, col)
	return compute_gap_position(template, row, col)


#============================================
def compute_grid_positions(template: LabelTemplate) -> list[LabelSlot]:
	"""
	Compute every slot of the template grid in row-major order.
	"""
	slots: list[LabelSlot] = []
	for row in range(template.rows):
		for col in range(template.columns):
			slots.append(compute_slot_position(template, row, col))
	return slots
