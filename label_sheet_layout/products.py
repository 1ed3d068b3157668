"""
Product list loading and label text accessors.

Products are plain dicts. Layout code never looks inside them; only the
renderers read the code and description fields.
"""

# Standard Library
import csv
import pathlib
import re
import unicodedata


CODE_KEYS = ("code", "Code", "Barcode Numbers")
DESCRIPTION_KEYS = ("description", "Description")
PRICE_KEYS = ("price", "Price", "PRICE", "Price (R)", "Unit Price", "Selling Price")
BRAND_KEYS = ("brand", "Brand", "BRAND")
CURRENCY_PREFIX = "R"


#============================================
def normalize_text(value: str) -> str:
	"""
	Normalize label text to ASCII for PDF fonts.

	Args:
		value: Input text.

	Returns:
		Normalized text.
	"""
	if not value:
		return value
	replacements = {
		"\u00d7": "x",
		"\u00f7": "/",
		"\u00bd": "1/2",
		"\u00bc": "1/4",
		"\u00be": "3/4",
		"\u00b0": "deg",
		"\u2122": "TM",
		"\u00ae": "R",
		"\u00a0": " ",
		"\u2013": "-",
		"\u2014": "-",
	}
	for old, new in replacements.items():
		value = value.replace(old, new)
	value = unicodedata.normalize("NFKD", value)
	value = value.encode("ascii", "ignore").decode("ascii")
	return value


#============================================
def first_field(product: object, keys: tuple[str, ...]) -> str:
	if not isinstance(product, dict):
		return ""
	for key in keys:
		value = product.get(key)
		if value is None:
			continue
		text = str(value).strip()
		if text:
			return text
	return ""


#============================================
def product_code(product: object) -> str:
	"""
	Get the barcode value of a product.

	Args:
		product: Product record; non-dict products are used as the code.

	Returns:
		Code string, empty when the product has none.
	"""
	if product is not None and not isinstance(product, dict):
		return str(product).strip()
	return first_field(product, CODE_KEYS)


#============================================
def product_description(product: object) -> str:
	return first_field(product, DESCRIPTION_KEYS)


#============================================
def product_brand(product: object) -> str:
	return first_field(product, BRAND_KEYS)


#============================================
def format_price(value: str) -> str:
	"""
	Format a price as "R 65.00".

	Args:
		value: Raw price text such as "65", "R65" or "R 1,250.5".

	Returns:
		Formatted price, or the trimmed input when it holds no number.
	"""
	text = value.strip()
	if not text:
		return ""
	number_text = re.sub(r"[^\d.]", "", text)
	try:
		amount = float(number_text)
	except ValueError:
		return text
	return f"{CURRENCY_PREFIX} {amount:.2f}"


#============================================
def product_price(product: object) -> str:
	"""
	Get the formatted selling price of a product.

	Args:
		product: Product record.

	Returns:
		Price string, empty when the product has none.
	"""
	return format_price(first_field(product, PRICE_KEYS))


#============================================
def is_valid_ean13(code: str) -> bool:
	"""
	Check for exactly 13 digits with a correct check digit.

	Args:
		code: Barcode value.

	Returns:
		True when the code is a valid EAN-13 number.
	"""
	if not re.fullmatch(r"[0-9]{13}", code):
		return False
	digits = [int(char) for char in code]
	total = sum(digits[0:12:2]) + 3 * sum(digits[1:12:2])
	return (10 - total % 10) % 10 == digits[12]


#============================================
def parse_barcode_lines(text: str) -> list[dict]:
	"""
	Turn pasted barcode numbers into products, one per non-empty line.

	Args:
		text: Raw text.

	Returns:
		List of product dicts with a code field.
	"""
	products: list[dict] = []
	for line in text.splitlines():
		code = line.strip()
		if code:
			products.append({"code": code})
	return products


#============================================
def read_csv_products(path: pathlib.Path) -> list[dict]:
	"""
	Read products from a CSV file with a header row.

	Rows without a code or description are skipped.

	Args:
		path: CSV path.

	Returns:
		List of product dicts keyed by trimmed header names.
	"""
	products: list[dict] = []
	with path.open("r", encoding="utf-8-sig", newline="") as handle:
		reader = csv.DictReader(handle)
		for row in reader:
			product = {
				key.strip(): (value or "").strip()
				for key, value in row.items()
				if key and key.strip()
			}
			if product_code(product) or product_description(product):
				products.append(product)
	return products


#============================================
def load_products(path: pathlib.Path) -> list[dict]:
	"""
	Load a product list from disk.

	Args:
		path: A .csv file, or a text file with one barcode per line.

	Returns:
		Ordered list of product dicts.
	"""
	if path.suffix.lower() == ".csv":
		return read_csv_products(path)
	text = path.read_text(encoding="utf-8")
	return parse_barcode_lines(text)


#============================================
def parse_selection(text: str) -> list[int]:
	"""
	Parse a row selection such as "1,3,5-9".

	Rows are 1 based as listed to the user.

	Args:
		text: Comma separated row numbers and inclusive ranges.

	Returns:
		Sorted, de-duplicated 0 based indexes.
	"""
	indexes: set[int] = set()
	for token in text.split(","):
		token = token.strip()
		if not token:
			continue
		match = re.fullmatch(r"([0-9]+)\s*(?:-\s*([0-9]+))?", token)
		if match is None:
			raise ValueError(f"Invalid row selection: {token!r}")
		start = int(match.group(1))
		stop = start
		if match.group(2) is not None:
			stop = int(match.group(2))
		if start < 1 or stop < start:
			raise ValueError(f"Invalid row range: {token!r}")
		indexes.update(range(start - 1, stop))
	if not indexes:
		raise ValueError("Empty row selection")
	return sorted(indexes)


#============================================
def select_products(products: list, indexes: list[int]) -> list:
	"""
	Keep the selected products in list order.

	Args:
		products: All loaded products.
		indexes: 0 based indexes from parse_selection.

	Returns:
		Selected products.
	"""
	missing = [index + 1 for index in indexes if index >= len(products)]
	if missing:
		raise ValueError(
			f"Selected rows {missing} are past the {len(products)} loaded products"
		)
	return [products[index] for index in indexes]
