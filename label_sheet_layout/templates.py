"""
Label sheet templates, the template catalog and the custom template builder.
"""

# Standard Library
import dataclasses
import json
import pathlib
import re
import time

# local repo modules
import label_sheet_layout as lsl
import label_sheet_layout.config


FIXED_OUTPUT_WIDTH = lsl.config.FIXED_OUTPUT_WIDTH
FIXED_OUTPUT_HEIGHT = lsl.config.FIXED_OUTPUT_HEIGHT
LETTER_WIDTH = lsl.config.LETTER_WIDTH
LETTER_HEIGHT = lsl.config.LETTER_HEIGHT
MIN_GRID_SIZE = lsl.config.MIN_GRID_SIZE
MIN_LABEL_SIZE = lsl.config.MIN_LABEL_SIZE
CUSTOM_TEMPLATE_ID = lsl.config.CUSTOM_TEMPLATE_ID
CUSTOM_TEMPLATE_NAME = lsl.config.CUSTOM_TEMPLATE_NAME
cm_to_inches = lsl.config.cm_to_inches

# 2166 x 1201 twips, taken from the physical 65 up sheet
LSA_LABEL_WIDTH = 1.5034722222
LSA_LABEL_HEIGHT = 0.8340277778


@dataclasses.dataclass(frozen=True)
class LabelTemplate:
	id: str
	name: str
	description: str
	columns: int
	rows: int
	label_width: float
	label_height: float
	page_width: float
	page_height: float
	margin_top: float
	margin_bottom: float
	margin_left: float
	margin_right: float
	gap_horizontal: float
	gap_vertical: float
	horizontal_pitch: float | None = None
	vertical_pitch: float | None = None

	@property
	def grid_size(self) -> int:
		return self.columns * self.rows


@dataclasses.dataclass
class CustomTemplateConfig:
	"""
	User-entered custom template values, all lengths in centimeters.
	"""
	label_name: str = ""
	top_margin: float = 1.67
	side_margin: float = 0.56
	vertical_pitch: float = 1.26
	horizontal_pitch: float = 5.08
	page_width: float = 21.0
	page_height: float = 29.7
	label_width: float = 4.6
	label_height: float = 1.11
	number_across: int = 4
	number_down: int = 21


BUILTIN_TEMPLATES = (
	LabelTemplate(
		id="lsa-65",
		name="65 UP Label Template",
		description="13 rows x 5 columns (65 labels per page) - Matches physical label sheet pitches",
		columns=5,
		rows=13,
		label_width=LSA_LABEL_WIDTH,
		label_height=LSA_LABEL_HEIGHT,
		page_width=FIXED_OUTPUT_WIDTH,
		page_height=FIXED_OUTPUT_HEIGHT,
		margin_top=0.52,
		margin_bottom=0.37,
		margin_left=0.45,
		margin_right=0.27,
		gap_horizontal=0.0,
		gap_vertical=0.0,
		horizontal_pitch=LSA_LABEL_WIDTH,
		vertical_pitch=LSA_LABEL_HEIGHT,
	),
	LabelTemplate(
		id="2-4-6-10-18-32-45",
		name="2,4,6,10,18,32,45 Label Template",
		description="9 rows x 5 columns (45 labels per page) - Flexible template supporting various label counts",
		columns=5,
		rows=9,
		label_width=LSA_LABEL_WIDTH,
		label_height=LSA_LABEL_HEIGHT,
		page_width=FIXED_OUTPUT_WIDTH,
		page_height=FIXED_OUTPUT_HEIGHT,
		margin_top=0.52,
		margin_bottom=0.37,
		margin_left=0.45,
		margin_right=0.27,
		gap_horizontal=0.0,
		gap_vertical=0.0,
		horizontal_pitch=LSA_LABEL_WIDTH,
		vertical_pitch=LSA_LABEL_HEIGHT,
	),
	LabelTemplate(
		id=CUSTOM_TEMPLATE_ID,
		name=CUSTOM_TEMPLATE_NAME,
		description="Customizable grid layout",
		columns=2,
		rows=5,
		label_width=4.0,
		label_height=2.0,
		page_width=LETTER_WIDTH,
		page_height=LETTER_HEIGHT,
		margin_top=0.5,
		margin_bottom=0.5,
		margin_left=0.5,
		margin_right=0.5,
		gap_horizontal=0.125,
		gap_vertical=0.125,
	),
)


class TemplateCatalog:
	"""
	Named label templates: the built-ins followed by user templates.

	User templates are append-only; layout code only ever reads the catalog.
	"""

	def __init__(self, user_templates: list[LabelTemplate] | None = None) -> None:
		self._templates: list[LabelTemplate] = list(BUILTIN_TEMPLATES)
		self.warnings: list[str] = []
		for template in user_templates or []:
			self.add(template)

	def get(self, template_id: str) -> LabelTemplate:
		for template in self._templates:
			if template.id == template_id:
				return template
		raise KeyError(f"Unknown label template: {template_id}")

	def templates(self) -> list[LabelTemplate]:
		return list(self._templates)

	def user_templates(self) -> list[LabelTemplate]:
		return self._templates[len(BUILTIN_TEMPLATES):]

	def add(self, template: LabelTemplate) -> None:
		if any(existing.id == template.id for existing in self._templates):
			raise ValueError(f"Duplicate label template id: {template.id}")
		self._templates.append(template)

	def __contains__(self, template_id: str) -> bool:
		return any(template.id == template_id for template in self._templates)

	def __len__(self) -> int:
		return len(self._templates)


#============================================
def template_to_dict(template: LabelTemplate) -> dict:
	"""
	Convert a template to a JSON-friendly dict.

	Args:
		template: LabelTemplate.

	Returns:
		Dict keyed by field name.
	"""
	return dataclasses.asdict(template)


#============================================
def template_from_dict(data: dict) -> LabelTemplate:
	"""
	Build a template from a stored dict.

	Args:
		data: Dict keyed by field name. Unknown keys are ignored.

	Returns:
		LabelTemplate.
	"""
	names = {field.name for field in dataclasses.fields(LabelTemplate)}
	values = {key: value for key, value in data.items() if key in names}
	return LabelTemplate(**values)


#============================================
def load_custom_templates(path: pathlib.Path) -> list[LabelTemplate]:
	"""
	Load saved custom templates.

	Args:
		path: JSON store path.

	Returns:
		List of templates, empty when the store does not exist yet.
	"""
	if not path.exists():
		return []
	with path.open("r", encoding="utf-8") as handle:
		data = json.load(handle)
	return [template_from_dict(entry) for entry in data]


#============================================
def save_custom_templates(path: pathlib.Path, templates: list[LabelTemplate]) -> None:
	"""
	Persist custom templates to the JSON store.

	Args:
		path: JSON store path.
		templates: Templates to write.
	"""
	data = [template_to_dict(template) for template in templates]
	with path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2)


#============================================
def load_catalog(path: pathlib.Path | None = None) -> TemplateCatalog:
	"""
	Build a catalog from the built-ins plus the saved custom templates.

	Saved templates whose id is already taken are skipped and noted in
	catalog.warnings.

	Args:
		path: Optional JSON store path.

	Returns:
		TemplateCatalog.
	"""
	catalog = TemplateCatalog()
	if path is None:
		return catalog
	for template in load_custom_templates(path):
		if template.id in catalog:
			catalog.warnings.append(
				f"Skipped saved template {template.id} in {path}: id already in use"
			)
			continue
		catalog.add(template)
	return catalog


#============================================
def slugify_name(name: str) -> str:
	"""
	Lowercase a template name and replace whitespace runs with dashes.

	Args:
		name: Template name.

	Returns:
		Slug string.
	"""
	return re.sub(r"\s+", "-", name.lower())


#============================================
def current_timestamp_ms() -> int:
	return int(time.time() * 1000)


#============================================
def make_custom_template_id(name: str, timestamp_ms: int) -> str:
	"""
	Generate the persisted id for a named custom template.

	Args:
		name: Template name.
		timestamp_ms: Milliseconds since the epoch.

	Returns:
		Id of the form custom-{slug}-{timestamp}.
	"""
	return f"custom-{slugify_name(name)}-{timestamp_ms}"


#============================================
def build_custom_template(
	config: CustomTemplateConfig,
	template_id: str | None = None,
) -> LabelTemplate:
	"""
	Build an inch-based template from centimeter values.

	The top margin is used for the bottom as well and the side margin for
	both sides. Gaps are derived from the pitches and never go negative.

	Args:
		config: Custom template values in centimeters.
		template_id: Optional id, defaults to custom-{timestamp}.

	Returns:
		LabelTemplate.
	"""
	label_width = cm_to_inches(config.label_width)
	label_height = cm_to_inches(config.label_height)
	horizontal_pitch = cm_to_inches(config.horizontal_pitch)
	vertical_pitch = cm_to_inches(config.vertical_pitch)
	top_margin = cm_to_inches(config.top_margin)
	side_margin = cm_to_inches(config.side_margin)

	if template_id is None:
		template_id = f"custom-{current_timestamp_ms()}"
	name = config.label_name.strip() or CUSTOM_TEMPLATE_NAME
	labels = config.number_down * config.number_across
	description = (
		f"{config.number_down} rows x {config.number_across} columns "
		f"({labels} labels per page) - Custom template"
	)
	return LabelTemplate(
		id=template_id,
		name=name,
		description=description,
		columns=config.number_across,
		rows=config.number_down,
		label_width=label_width,
		label_height=label_height,
		page_width=cm_to_inches(config.page_width),
		page_height=cm_to_inches(config.page_height),
		margin_top=top_margin,
		margin_bottom=top_margin,
		margin_left=side_margin,
		margin_right=side_margin,
		gap_horizontal=max(0.0, horizontal_pitch - label_width),
		gap_vertical=max(0.0, vertical_pitch - label_height),
		horizontal_pitch=horizontal_pitch,
		vertical_pitch=vertical_pitch,
	)


#============================================
def save_custom_template(
	catalog: TemplateCatalog,
	config: CustomTemplateConfig,
	path: pathlib.Path,
	timestamp_ms: int | None = None,
) -> LabelTemplate:
	"""
	Add a named custom template to the catalog and persist the user templates.

	Args:
		catalog: Template catalog to append to.
		config: Custom template values in centimeters.
		path: JSON store path.
		timestamp_ms: Optional id timestamp, defaults to now.

	Returns:
		The saved template.
	"""
	name = config.label_name.strip()
	if not name:
		raise ValueError("Custom template needs a label name before it can be saved")
	if timestamp_ms is None:
		timestamp_ms = current_timestamp_ms()
	template_id = make_custom_template_id(name, timestamp_ms)
	template = build_custom_template(config, template_id)
	catalog.add(template)
	save_custom_templates(path, catalog.user_templates())
	return template


#============================================
def sanitize_template(template: LabelTemplate) -> tuple[LabelTemplate, list[str]]:
	"""
	Clamp malformed template values so layout can always proceed.

	Args:
		template: Template to check.

	Returns:
		Tuple of (usable template, warning messages).
	"""
	warnings: list[str] = []
	changes: dict[str, object] = {}

	if template.rows < MIN_GRID_SIZE:
		warnings.append(
			f"Template {template.id}: rows={template.rows} clamped to {MIN_GRID_SIZE}"
		)
		changes["rows"] = MIN_GRID_SIZE
	if template.columns < MIN_GRID_SIZE:
		warnings.append(
			f"Template {template.id}: columns={template.columns} clamped to {MIN_GRID_SIZE}"
		)
		changes["columns"] = MIN_GRID_SIZE

	label_width = template.label_width
	if label_width < MIN_LABEL_SIZE:
		warnings.append(
			f"Template {template.id}: label width {label_width:.4f}in clamped to {MIN_LABEL_SIZE}in"
		)
		label_width = MIN_LABEL_SIZE
		changes["label_width"] = label_width
	label_height = template.label_height
	if label_height < MIN_LABEL_SIZE:
		warnings.append(
			f"Template {template.id}: label height {label_height:.4f}in clamped to {MIN_LABEL_SIZE}in"
		)
		label_height = MIN_LABEL_SIZE
		changes["label_height"] = label_height

	if template.horizontal_pitch and template.vertical_pitch:
		if template.horizontal_pitch < label_width:
			warnings.append(
				f"Template {template.id}: horizontal pitch {template.horizontal_pitch:.4f}in "
				f"is smaller than label width {label_width:.4f}in; using label width"
			)
			changes["horizontal_pitch"] = label_width
		if template.vertical_pitch < label_height:
			warnings.append(
				f"Template {template.id}: vertical pitch {template.vertical_pitch:.4f}in "
				f"is smaller than label height {label_height:.4f}in; using label height"
			)
			changes["vertical_pitch"] = label_height

	if not changes:
		return (template, warnings)
	return (dataclasses.replace(template, **changes), warnings)
