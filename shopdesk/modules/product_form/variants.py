"""
Product Variants
================

Two mutually exclusive shapes share the product's `variants` array:

- AttributeVariant: options keyed by colour/size/title/image.
- BundleVariant: a price tier keyed by purchase quantity ("Bundle of 2").

On the wire both are plain dicts; these classes decode/encode them at the
form boundary so the rest of the editor works with an explicit `kind`.
"""

import math

BUNDLE_TAGS = ('MOST_POPULAR', 'BEST_VALUE')
BULK_VARIANT_TYPE = 'bulk_bundles'


def to_number(value):
    """Coerce form input to a number; None when it is not numeric.

    Blank strings and None count as 0, integral floats come back as int so
    they serialize as "2" rather than "2.0".
    """
    if isinstance(value, bool):
        return int(value)
    if value is None:
        return 0
    if isinstance(value, (int, float)):
        number = value
    else:
        text = str(value).strip()
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return None
    if isinstance(number, float):
        if math.isnan(number) or math.isinf(number):
            return None
        if number.is_integer():
            return int(number)
    return number


def _is_blank(value):
    return value is None or value == '' or value is False


def _has_bundle_qty(options):
    qty = options.get('bundleQty')
    if qty is None or qty is False or qty == '':
        return False
    return True


class AttributeVariant:
    kind = 'attribute'

    def __init__(self, options=None, price=None, mrp=None, stock=0, sku=None):
        self.options = dict(options or {})
        self.price = price
        self.mrp = mrp
        self.stock = stock
        self.sku = sku

    @classmethod
    def from_dict(cls, data):
        return cls(
            options=data.get('options') or {},
            price=data.get('price'),
            mrp=data.get('mrp'),
            stock=data.get('stock', 0),
            sku=data.get('sku'),
        )

    def to_dict(self):
        data = {
            'options': {k: v for k, v in self.options.items() if v is not None},
            'price': self.price,
            'mrp': self.mrp,
            'stock': self.stock,
        }
        if self.sku:
            data['sku'] = self.sku
        return data

    def __eq__(self, other):
        return isinstance(other, AttributeVariant) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"AttributeVariant({self.to_dict()!r})"


class BundleVariant:
    kind = 'bundle'

    def __init__(self, bundle_qty, price, mrp=None, stock=0, tag=None, title=None):
        self.bundle_qty = bundle_qty
        self.price = price
        self.mrp = mrp if mrp is not None else price
        self.stock = stock
        self.tag = tag
        self.title = title

    @classmethod
    def from_dict(cls, data):
        options = data.get('options') or {}
        return cls(
            bundle_qty=to_number(options.get('bundleQty')),
            price=data.get('price'),
            mrp=data.get('mrp'),
            stock=data.get('stock', 0),
            tag=data.get('tag') or options.get('tag'),
            title=options.get('title'),
        )

    def to_dict(self):
        options = {'bundleQty': self.bundle_qty}
        if self.title:
            options['title'] = self.title
        if self.tag:
            options['tag'] = self.tag
        return {
            'options': options,
            'price': self.price,
            'mrp': self.mrp,
            'stock': self.stock,
        }

    def __eq__(self, other):
        return isinstance(other, BundleVariant) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"BundleVariant({self.to_dict()!r})"


def is_bundle_array(variants):
    """Bundle-style iff non-empty and every entry has a bundleQty and no colour/size."""
    if not variants:
        return False
    for variant in variants:
        if isinstance(variant, BundleVariant):
            continue
        if isinstance(variant, AttributeVariant):
            options = variant.options
        else:
            options = (variant or {}).get('options')
        if not options or not _has_bundle_qty(options):
            return False
        if options.get('color') or options.get('size'):
            return False
    return True


def decode_variants(raw_variants):
    """Wire dicts -> typed variants, classified as a whole array"""
    raw_variants = raw_variants if isinstance(raw_variants, list) else []
    if is_bundle_array(raw_variants):
        return [BundleVariant.from_dict(v) for v in raw_variants]
    return [AttributeVariant.from_dict(v or {}) for v in raw_variants]


def encode_variants(variants):
    return [v.to_dict() if hasattr(v, 'to_dict') else dict(v) for v in variants]


# ===== Bundle editor rows =====

def default_bundle_title(qty):
    return 'Buy 1' if qty == 1 else f'Bundle of {qty}'


def default_bundle_rows():
    return [
        {'title': 'Buy 1', 'qty': 1, 'price': '', 'mrp': '', 'stock': 0, 'tag': ''},
        {'title': 'Bundle of 2', 'qty': 2, 'price': '', 'mrp': '', 'stock': 0, 'tag': 'MOST_POPULAR'},
        {'title': 'Bundle of 3', 'qty': 3, 'price': '', 'mrp': '', 'stock': 0, 'tag': ''},
    ]


def bundle_rows_from_variants(raw_variants):
    """Project a stored bundle array into editable rows, sorted by quantity"""
    rows = []
    for v in raw_variants:
        options = v.get('options') or {}
        qty = to_number(options.get('bundleQty')) or 1
        price = v.get('price')
        mrp = v.get('mrp')
        if mrp is None:
            mrp = price
        rows.append({
            'title': options.get('title') or default_bundle_title(qty),
            'qty': qty,
            'price': price if price is not None else '',
            'mrp': mrp if mrp is not None else '',
            'stock': v.get('stock') if v.get('stock') is not None else 0,
            'tag': v.get('tag') or options.get('tag') or '',
        })
    rows.sort(key=lambda r: r['qty'])
    return rows


def project_bundle_rows(rows):
    """Editable rows -> BundleVariants; rows without a positive qty and price are dropped."""
    projected = []
    for row in rows:
        qty = to_number(row.get('qty'))
        price = to_number(row.get('price'))
        if qty is None or qty <= 0 or price is None or price <= 0:
            continue
        mrp_input = row.get('mrp')
        mrp = price if _is_blank(mrp_input) or mrp_input == 0 else to_number(mrp_input)
        projected.append(BundleVariant(
            bundle_qty=qty,
            price=price,
            mrp=mrp,
            stock=to_number(row.get('stock') or 0) or 0,
            tag=row.get('tag') or None,
            title=row.get('title') or None,
        ))
    return projected
