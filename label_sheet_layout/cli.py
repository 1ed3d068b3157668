"""
CLI entry points for rendering label sheets.
"""

# Standard Library
import argparse
import pathlib
import time

# local repo modules
import label_sheet_layout as lsl
import label_sheet_layout.config
import label_sheet_layout.paginate
import label_sheet_layout.preview
import label_sheet_layout.products
import label_sheet_layout.render
import label_sheet_layout.templates


RenderConfig = lsl.config.RenderConfig
CustomTemplateConfig = lsl.templates.CustomTemplateConfig
LabelTemplate = lsl.templates.LabelTemplate
TemplateCatalog = lsl.templates.TemplateCatalog

DEFAULT_TEMPLATE_ID = lsl.config.DEFAULT_TEMPLATE_ID
DEFAULT_TEMPLATES_FILE = lsl.config.DEFAULT_TEMPLATES_FILE
DEFAULT_ENCODING = lsl.config.DEFAULT_ENCODING
ENCODINGS = lsl.config.ENCODINGS
MAX_PAGE_COUNT = lsl.config.MAX_PAGE_COUNT


#============================================
def build_render_config(args: argparse.Namespace) -> RenderConfig:
	"""
	Build render config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		RenderConfig.
	"""
	return RenderConfig(
		draw_outlines=args.draw_outlines,
		calibration=args.calibration,
		draw_barcodes=args.draw_barcodes,
		normalize_text=args.normalize_text,
		encoding=args.encoding,
	)


#============================================
def build_custom_config(args: argparse.Namespace) -> CustomTemplateConfig:
	"""
	Build custom template values (centimeters) from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		CustomTemplateConfig.
	"""
	return CustomTemplateConfig(
		label_name=args.label_name,
		top_margin=args.top_margin,
		side_margin=args.side_margin,
		vertical_pitch=args.vertical_pitch,
		horizontal_pitch=args.horizontal_pitch,
		page_width=args.page_width,
		page_height=args.page_height,
		label_width=args.label_width,
		label_height=args.label_height,
		number_across=args.number_across,
		number_down=args.number_down,
	)


#============================================
def parse_selection_arg(value: str) -> list[int]:
	"""
	Argparse type for --select.
	"""
	try:
		return lsl.products.parse_selection(value)
	except ValueError as error:
		raise argparse.ArgumentTypeError(str(error)) from error


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Optional argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	defaults = CustomTemplateConfig()
	parser = argparse.ArgumentParser(description="Lay out product barcodes on printable label sheets.")

	template_group = parser.add_argument_group("Template")
	template_group.add_argument("-t", "--template", dest="template_id", default=DEFAULT_TEMPLATE_ID, help="Label template id.")
	template_group.add_argument("--templates-file", dest="templates_file", default=DEFAULT_TEMPLATES_FILE, help="Saved custom templates JSON.")
	template_group.add_argument("--list-templates", dest="list_templates", action="store_true", help="List templates and exit.")

	custom_group = parser.add_argument_group("Custom template (cm)")
	custom_group.add_argument("--custom", dest="custom", action="store_true", help="Use a custom template built from the values below.")
	custom_group.add_argument("--label-name", dest="label_name", default=defaults.label_name, help="Custom template name.")
	custom_group.add_argument("--top-margin", dest="top_margin", type=float, default=defaults.top_margin, help="Top and bottom margin.")
	custom_group.add_argument("--side-margin", dest="side_margin", type=float, default=defaults.side_margin, help="Left and right margin.")
	custom_group.add_argument("--vertical-pitch", dest="vertical_pitch", type=float, default=defaults.vertical_pitch, help="Vertical pitch.")
	custom_group.add_argument("--horizontal-pitch", dest="horizontal_pitch", type=float, default=defaults.horizontal_pitch, help="Horizontal pitch.")
	custom_group.add_argument("--page-width", dest="page_width", type=float, default=defaults.page_width, help="Page width.")
	custom_group.add_argument("--page-height", dest="page_height", type=float, default=defaults.page_height, help="Page height.")
	custom_group.add_argument("--label-width", dest="label_width", type=float, default=defaults.label_width, help="Label width.")
	custom_group.add_argument("--label-height", dest="label_height", type=float, default=defaults.label_height, help="Label height.")
	custom_group.add_argument("--across", dest="number_across", type=int, default=defaults.number_across, help="Labels across.")
	custom_group.add_argument("--down", dest="number_down", type=int, default=defaults.number_down, help="Labels down.")
	custom_group.add_argument("--save-template", dest="save_template", action="store_true", help="Save the custom template under its name.")

	input_group = parser.add_argument_group("Products")
	input_group.add_argument("-i", "--products", dest="products_path", default=None, help="CSV file or text file with one barcode per line.")
	input_group.add_argument("-b", "--barcode", dest="barcodes", action="append", default=[], help="Barcode value, repeatable.")
	input_group.add_argument("--select", dest="selection", type=parse_selection_arg, default=None, help="Rows to print, 1 based, e.g. 1,3,5-9. Defaults to all rows.")

	plan_group = parser.add_argument_group("Plan")
	plan_group.add_argument("-s", "--slots-per-page", dest="slots_per_page", type=int, default=None, help="Labels per page, defaults to the full grid.")
	plan_group.add_argument("-g", "--page-count", dest="page_count", type=int, default=None, help=f"Pages to print (1-{MAX_PAGE_COUNT}).")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=None, help="Output PDF path.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")
	output_group.add_argument("--preview-dir", dest="preview_dir", default=None, help="Write PNG previews to this directory.")
	output_group.add_argument("--css", dest="css_path", default=None, help="Write slot positioning CSS to this path.")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument("-d", "--draw-outlines", dest="draw_outlines", action="store_true", help="Draw label outlines.")
	behavior_group.add_argument("-D", "--no-draw-outlines", dest="draw_outlines", action="store_false", help="Disable label outlines.")
	behavior_group.add_argument("-c", "--calibration", dest="calibration", action="store_true", help="Add a calibration page.")
	behavior_group.add_argument("-C", "--no-calibration", dest="calibration", action="store_false", help="Disable calibration page.")
	behavior_group.add_argument("-n", "--normalize-text", dest="normalize_text", action="store_true", help="Normalize text to ASCII.")
	behavior_group.add_argument("-N", "--no-normalize-text", dest="normalize_text", action="store_false", help="Preserve original text.")
	behavior_group.add_argument("--no-barcodes", dest="draw_barcodes", action="store_false", help="Print codes as text only.")
	behavior_group.add_argument("-e", "--encoding", dest="encoding", choices=ENCODINGS, default=DEFAULT_ENCODING, help="Barcode symbology.")

	parser.set_defaults(
		draw_outlines=False,
		calibration=False,
		normalize_text=True,
		draw_barcodes=True,
	)

	args = parser.parse_args(argv)
	if not args.list_templates and not args.output_path:
		parser.error("the following arguments are required: -o/--output")
	if args.save_template and not args.custom:
		parser.error("--save-template requires --custom")
	return args


#============================================
def resolve_template(args: argparse.Namespace, catalog: TemplateCatalog) -> LabelTemplate:
	"""
	Pick the template for this run, building or saving a custom one when asked.

	Args:
		args: Parsed argparse namespace.
		catalog: Template catalog.

	Returns:
		LabelTemplate.
	"""
	if not args.custom:
		return catalog.get(args.template_id)
	custom_config = build_custom_config(args)
	if not args.save_template:
		return lsl.templates.build_custom_template(custom_config)
	templates_path = pathlib.Path(args.templates_file)
	template = lsl.templates.save_custom_template(catalog, custom_config, templates_path)
	print(f"Template saved: {template.id} ({templates_path})")
	return template


#============================================
def collect_products(args: argparse.Namespace) -> list[dict]:
	"""
	Gather products from the products file and barcode arguments.

	With --select only the chosen rows are kept, in list order.
	"""
	products: list[dict] = []
	if args.products_path:
		products.extend(lsl.products.load_products(pathlib.Path(args.products_path)))
	products.extend(lsl.products.parse_barcode_lines("\n".join(args.barcodes)))
	if args.selection is not None:
		products = lsl.products.select_products(products, args.selection)
	return products


#============================================
def print_templates(catalog: TemplateCatalog) -> None:
	for template in catalog.templates():
		print(f"{template.id}\t{template.rows}x{template.columns}\t{template.name}")


#============================================
def run_pipeline(args: argparse.Namespace) -> None:
	"""
	Run the full pipeline from product list to printable sheets.

	Args:
		args: Parsed argparse namespace.
	"""
	catalog = lsl.templates.load_catalog(pathlib.Path(args.templates_file))
	for warning in catalog.warnings:
		print(f"Warning: {warning}")
	if args.list_templates:
		print_templates(catalog)
		return

	print("Label sheet pipeline")
	print(f"Output PDF: {args.output_path}")
	if args.manifest_path:
		print(f"Manifest: {args.manifest_path}")
	print(f"Draw outlines: {args.draw_outlines}")
	print(f"Calibration: {args.calibration}")
	print(f"Normalize text: {args.normalize_text}")
	print(f"Encoding: {args.encoding}")

	start_time = time.perf_counter()
	template = resolve_template(args, catalog)
	print(f"Template: {template.id} ({template.rows} rows x {template.columns} columns)")

	products = collect_products(args)
	print(f"Products selected: {len(products)}")

	layout_start = time.perf_counter()
	layout = lsl.paginate.build_pages(template, products, args.slots_per_page, args.page_count)
	layout_end = time.perf_counter()
	for warning in layout.warnings:
		print(f"Warning: {warning}")
	print(f"Labels per page: {layout.plan.slots_per_page} of {layout.template.grid_size}")
	print(f"Pages requested: {layout.plan.page_count}")
	pages_needed = lsl.paginate.count_pages_needed(len(products), layout.plan.slots_per_page)
	print(f"Pages needed without duplication: {pages_needed}")

	pages = layout.pages
	if not pages:
		print("No labels to place; writing an empty template preview page")
		pages = [lsl.paginate.build_placeholder_page(layout.template)]

	render_config = build_render_config(args)
	output_path = pathlib.Path(args.output_path)
	render_start = time.perf_counter()
	result = lsl.render.render_pages_to_pdf(
		layout.template,
		pages,
		output_path,
		render_config,
		verbose=True,
	)
	render_end = time.perf_counter()
	print(f"Pages written: {result.pages}")
	print(f"Labels printed: {result.populated_labels}")
	print(f"Empty slots: {result.placeholder_labels}")
	if result.invalid_barcodes:
		print(f"Warning: {result.invalid_barcodes} labels printed without a barcode (not valid {render_config.encoding})")

	if args.preview_dir:
		device_pages = lsl.render.build_device_pages(pages)
		preview_paths = lsl.preview.write_preview_images(
			layout.template,
			device_pages,
			pathlib.Path(args.preview_dir),
			render_config,
		)
		print(f"Previews written: {len(preview_paths)}")

	if args.css_path:
		screen_css, print_css = lsl.render.build_slot_css(layout.template)
		page_css = lsl.render.build_page_css(layout.template)
		css_text = f"{screen_css}\n@media print {{\n{page_css}\n{print_css}\n}}\n"
		pathlib.Path(args.css_path).write_text(css_text, encoding="utf-8")
		print(f"CSS written: {args.css_path}")

	manifest_path = args.manifest_path
	if manifest_path is None:
		manifest_path = f"{output_path}.json"
	lsl.render.write_manifest(pathlib.Path(manifest_path), layout, result, render_config)

	total_time = time.perf_counter() - start_time
	print(
		"Timing: layout={:.2f}s render={:.2f}s total={:.2f}s".format(
			layout_end - layout_start,
			render_end - render_start,
			total_time,
		)
	)
	print(f"Manifest written: {manifest_path}")


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	run_pipeline(args)
