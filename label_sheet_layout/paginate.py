"""
Cyclic product assignment and pagination onto label sheets.
"""

# Standard Library
import dataclasses
import functools

# local repo modules
import label_sheet_layout as lsl
import label_sheet_layout.config
import label_sheet_layout.layout
import label_sheet_layout.slots
import label_sheet_layout.templates


LabelTemplate = lsl.templates.LabelTemplate
LabelSlot = lsl.layout.LabelSlot

MIN_PAGE_COUNT = lsl.config.MIN_PAGE_COUNT
MAX_PAGE_COUNT = lsl.config.MAX_PAGE_COUNT
PLAN_CACHE_SIZE = 64


@dataclasses.dataclass(frozen=True)
class AssignmentPlan:
	selected_products: tuple
	slots_per_page: int
	page_count: int
	assignment: tuple

	@property
	def total_slots(self) -> int:
		return self.page_count * self.slots_per_page


@dataclasses.dataclass(frozen=True)
class PageEntry:
	index: int
	slot_id: str
	position: LabelSlot
	product: object | None

	@property
	def is_placeholder(self) -> bool:
		return self.product is None


@dataclasses.dataclass(frozen=True)
class Page:
	index: int
	entries: tuple[PageEntry, ...]

	@property
	def populated_count(self) -> int:
		return sum(1 for entry in self.entries if not entry.is_placeholder)

	@property
	def placeholder_count(self) -> int:
		return len(self.entries) - self.populated_count


@dataclasses.dataclass(frozen=True)
class LayoutPlan:
	template: LabelTemplate
	plan: AssignmentPlan
	pages: tuple[Page, ...]
	warnings: tuple[str, ...]


@dataclasses.dataclass
class LayoutResult:
	template: LabelTemplate
	plan: AssignmentPlan
	pages: list[Page]
	warnings: list[str]


#============================================
def clamp_slots_per_page(template: LabelTemplate, value: int | None) -> int:
	"""
	Clamp the requested labels per page to the template grid.

	Args:
		template: Label template.
		value: Requested labels per page, None for the full grid.

	Returns:
		Value in [0, rows * columns].
	"""
	grid_size = template.rows * template.columns
	if value is None:
		return grid_size
	return max(0, min(value, grid_size))


#============================================
def clamp_page_count(value: int | None) -> int:
	"""
	Clamp the requested page count.

	Args:
		value: Requested pages, None for one page.

	Returns:
		Value in [MIN_PAGE_COUNT, MAX_PAGE_COUNT].
	"""
	if value is None:
		return MIN_PAGE_COUNT
	return max(MIN_PAGE_COUNT, min(value, MAX_PAGE_COUNT))


#============================================
def assign_products(products: tuple | list, total_slots: int) -> tuple:
	"""
	Fill a sequence of slots by cycling through the products.

	Args:
		products: Ordered product selection.
		total_slots: Number of slots to fill.

	Returns:
		Tuple where entry i is products[i % len(products)].
	"""
	if not products or total_slots <= 0:
		return ()
	count = len(products)
	return tuple(products[index % count] for index in range(total_slots))


#============================================
def count_pages_needed(product_count: int, slots_per_page: int) -> int:
	"""
	Pages needed to print every product once, without duplication.
	"""
	if slots_per_page <= 0:
		return 0
	return (product_count + slots_per_page - 1) // slots_per_page


#============================================
def build_page(
	template: LabelTemplate,
	page_index: int,
	products: tuple,
) -> Page:
	"""
	Lay out one page over the full template grid.

	Args:
		template: Sanitized label template.
		page_index: Page number, 0 based.
		products: Products for the first len(products) slots of the page.

	Returns:
		Page with one entry per physical slot; slots past the products are placeholders.
	"""
	entries: list[PageEntry] = []
	positions = lsl.slots.enumerate_slots(template)
	for index, (row, col) in enumerate(positions):
		product = None
		if index < len(products):
			product = products[index]
		entries.append(
			PageEntry(
				index=index,
				slot_id=lsl.slots.make_slot_id(row, col),
				position=lsl.layout.compute_slot_position(template, row, col),
				product=product,
			)
		)
	return Page(index=page_index, entries=tuple(entries))


#============================================
@functools.lru_cache(maxsize=PLAN_CACHE_SIZE)
def build_layout_plan(
	template: LabelTemplate,
	slots_per_page: int | None,
	page_count: int | None,
	product_keys: tuple,
) -> LayoutPlan:
	"""
	Build the full page layout for a product selection.

	The result only depends on the arguments, so it is cached. Page
	entries carry product keys; callers map them back to product records.

	Args:
		template: Label template, sanitized before use.
		slots_per_page: Labels to populate per page, None for the full grid.
		page_count: Pages to produce, None for one.
		product_keys: Ordered, hashable product keys.

	Returns:
		LayoutPlan with the plan, pages and warnings.
	"""
	usable, warnings = lsl.templates.sanitize_template(template)
	per_page = clamp_slots_per_page(usable, slots_per_page)
	pages_wanted = clamp_page_count(page_count)
	assignment = assign_products(product_keys, pages_wanted * per_page)
	plan = AssignmentPlan(
		selected_products=product_keys,
		slots_per_page=per_page,
		page_count=pages_wanted,
		assignment=assignment,
	)

	pages: list[Page] = []
	if assignment:
		for page_index in range(pages_wanted):
			start = page_index * per_page
			page_products = assignment[start:start + per_page]
			pages.append(build_page(usable, page_index, page_products))

	return LayoutPlan(
		template=usable,
		plan=plan,
		pages=tuple(pages),
		warnings=tuple(warnings),
	)


#============================================
def resolve_page(page: Page, products: list) -> Page:
	entries = tuple(
		dataclasses.replace(
			entry,
			product=None if entry.product is None else products[entry.product],
		)
		for entry in page.entries
	)
	return Page(index=page.index, entries=entries)


#============================================
def build_pages(
	template: LabelTemplate,
	products: list,
	slots_per_page: int | None = None,
	page_count: int | None = None,
) -> LayoutResult:
	"""
	Assign products to label slots across one or more pages.

	Products are opaque; only their order matters. When there are fewer
	products than slots the selection repeats to fill the sheet.

	Args:
		template: Label template.
		products: Ordered product selection, any objects.
		slots_per_page: Labels to populate per page, None for the full grid.
		page_count: Pages to produce, None for one.

	Returns:
		LayoutResult with pages holding the caller's product objects.
	"""
	products = list(products)
	keys = tuple(range(len(products)))
	layout_plan = build_layout_plan(template, slots_per_page, page_count, keys)

	plan = dataclasses.replace(
		layout_plan.plan,
		selected_products=tuple(products),
		assignment=tuple(products[key] for key in layout_plan.plan.assignment),
	)
	pages = [resolve_page(page, products) for page in layout_plan.pages]
	return LayoutResult(
		template=layout_plan.template,
		plan=plan,
		pages=pages,
		warnings=list(layout_plan.warnings),
	)


#============================================
def build_placeholder_page(template: LabelTemplate) -> Page:
	"""
	Build a single page of empty slots for previewing a template layout.
	"""
	usable, _warnings = lsl.templates.sanitize_template(template)
	return build_page(usable, 0, ())
