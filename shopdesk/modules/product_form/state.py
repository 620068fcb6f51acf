"""
Product Form State
==================

The editor's working copy of a product lives in one ProductFormState.
Every edit goes through a reducer function below that returns a new state
and leaves its input untouched, so hydration and the cross-field rules
(slug follows name, bundle vs attribute variants) can be tested without a UI.

Reducers only ever replace containers, never mutate them, which is why a
shallow copy of the state is enough to keep the previous state intact.
"""

import copy

from .slug import slugify
from .variants import (
    AttributeVariant,
    BUNDLE_TAGS,
    BundleVariant,
    bundle_rows_from_variants,
    decode_variants,
    default_bundle_rows,
    is_bundle_array,
)

IMAGE_SLOTS = tuple(str(i) for i in range(1, 9))
MAX_FBT_PRODUCTS = 4
FBT_SEARCH_LIMIT = 5

BADGES = (
    'Price Lower Than Usual',
    'Hot Deal',
    'Best Seller',
    'New Arrival',
    'Limited Stock',
    'Free Shipping',
)
ASPECT_RATIOS = ('1:1', '4:5', '3:4', '16:9')
COLOR_OPTIONS = ('Red', 'Blue', 'Green', 'Black', 'White', 'Yellow', 'Purple')
SIZE_OPTIONS = ('S', 'M', 'L', 'XL', 'XXL')

# Fields editable through set_field; the rest have dedicated reducers
EDITABLE_FIELDS = (
    'name', 'brand', 'shortDescription', 'description', 'mrp', 'price', 'sku',
    'stockQuantity', 'colors', 'sizes', 'fastDelivery', 'allowReturn', 'allowReplacement',
)


class FormValidationError(ValueError):
    """An edit or submission the form refuses; the message is shown to the user"""


class ImageUpload:
    """A newly selected file waiting to be sent with the product"""

    def __init__(self, fileobj, filename, content_type=None):
        self.fileobj = fileobj
        self.filename = filename
        self.content_type = content_type

    def as_part(self):
        if self.content_type:
            return (self.filename, self.fileobj, self.content_type)
        return (self.filename, self.fileobj)

    def __repr__(self):
        return f"ImageUpload({self.filename!r})"


def default_info():
    return {
        'name': '',
        'slug': '',
        'brand': '',
        'shortDescription': '',
        'description': '',
        'mrp': '',
        'price': '',
        'sku': '',
        'stockQuantity': 0,
        'colors': [],
        'sizes': [],
        'fastDelivery': False,
        'allowReturn': True,
        'allowReplacement': True,
        'reviews': [],
        'badges': [],
        'imageAspectRatio': '1:1',
        'category': '',
        'tags': [],
    }


def empty_review():
    return {'name': '', 'rating': 5, 'comment': '', 'image': None}


class ProductFormState:
    """All editable slices of the product form"""

    def __init__(self):
        self.product_id = None
        self.is_initialized = False
        self.info = default_info()
        self.selected_categories = []
        self.images = {slot: None for slot in IMAGE_SLOTS}
        self.has_variants = False
        self.variants = []
        self.bulk_enabled = False
        self.bulk_rows = default_bundle_rows()
        self.review_input = empty_review()
        self.enable_fbt = False
        self.fbt_products = []
        self.fbt_bundle_price = ''
        self.fbt_bundle_discount = ''

    @property
    def is_editing(self):
        return self.product_id is not None

    def __repr__(self):
        return f"<ProductFormState product_id={self.product_id!r} name={self.info.get('name')!r}>"


def _replace(state, **changes):
    new = copy.copy(state)
    for key, value in changes.items():
        setattr(new, key, value)
    return new


def _with_info(state, **fields):
    info = dict(state.info)
    info.update(fields)
    return _replace(state, info=info)


def _category_id(category):
    if isinstance(category, dict):
        return category.get('_id')
    return category or None


# ===== Lifecycle =====

def initial_state():
    return ProductFormState()


def hydrate(state, product):
    """Load a product into the form, once per product identity.

    Re-hydrating the identity that is already loaded keeps the user's edits;
    a different identity (or a new-product form) starts from scratch.
    """
    product_id = product.get('_id') if product else None
    if state.is_initialized and state.product_id == product_id:
        return state

    new = initial_state()
    new.is_initialized = True
    if not product:
        return new

    attributes = product.get('attributes') or {}
    allow_return = product.get('allowReturn')
    allow_replacement = product.get('allowReplacement')

    tags = []
    for tag in product.get('tags') or []:
        if tag and tag not in tags:
            tags.append(tag)

    new.product_id = product_id
    new.info = {
        'name': product.get('name') or '',
        'slug': product.get('slug') or '',
        'brand': product.get('brand') or attributes.get('brand') or '',
        'shortDescription': product.get('shortDescription') or '',
        'description': product.get('description') or '',
        'mrp': product.get('mrp') or '',
        'price': product.get('price') or '',
        'sku': product.get('sku') or '',
        'stockQuantity': product.get('stockQuantity') or 0,
        'colors': list(product.get('colors') or []),
        'sizes': list(product.get('sizes') or []),
        'fastDelivery': bool(product.get('fastDelivery')),
        'allowReturn': allow_return if allow_return is not None else True,
        'allowReplacement': allow_replacement if allow_replacement is not None else True,
        'reviews': list(product.get('reviews') or []),
        'badges': list(attributes.get('badges') or []),
        'imageAspectRatio': product.get('imageAspectRatio') or '1:1',
        'category': _category_id(product.get('category')) or '',
        'tags': tags,
    }

    categories = product.get('categories')
    if isinstance(categories, list) and categories:
        new.selected_categories = list(categories)
    else:
        legacy = _category_id(product.get('category'))
        new.selected_categories = [legacy] if legacy else []

    raw_variants = product.get('variants') if isinstance(product.get('variants'), list) else []
    new.has_variants = bool(product.get('hasVariants'))
    new.variants = decode_variants(raw_variants)
    if is_bundle_array(raw_variants):
        new.bulk_enabled = True
        new.bulk_rows = bundle_rows_from_variants(raw_variants)

    images = {slot: None for slot in IMAGE_SLOTS}
    for slot, url in zip(IMAGE_SLOTS, product.get('images') or []):
        images[slot] = url
    new.images = images
    return new


def close(state):
    """Closing the editing surface re-arms hydration for the next open"""
    return _replace(state, is_initialized=False)


# ===== Base fields =====

def set_field(state, name, value):
    if name == 'slug':
        raise FormValidationError('Slug is generated from the product name')
    if name not in EDITABLE_FIELDS:
        raise ValueError(f'Unknown product field: {name}')
    if name == 'name':
        return _with_info(state, name=value, slug=slugify(value))
    if name in ('colors', 'sizes'):
        value = list(value or [])
    return _with_info(state, **{name: value})


def set_aspect_ratio(state, ratio):
    if ratio not in ASPECT_RATIOS:
        raise FormValidationError(f'Unsupported aspect ratio: {ratio}')
    return _with_info(state, imageAspectRatio=ratio)


def toggle_badge(state, badge):
    if badge not in BADGES:
        raise FormValidationError(f'Unknown badge: {badge}')
    badges = state.info['badges']
    if badge in badges:
        return _with_info(state, badges=[b for b in badges if b != badge])
    return _with_info(state, badges=badges + [badge])


def add_tag(state, tag):
    """Append a trimmed tag; blanks and duplicates are ignored"""
    tag = (tag or '').strip()
    if not tag or tag in state.info['tags']:
        return state
    return _with_info(state, tags=state.info['tags'] + [tag])


def remove_tag(state, index):
    tags = [t for i, t in enumerate(state.info['tags']) if i != index]
    return _with_info(state, tags=tags)


# ===== Categories =====

def toggle_category(state, category_id):
    if category_id in state.selected_categories:
        return remove_category(state, category_id)
    return _replace(state, selected_categories=state.selected_categories + [category_id])


def remove_category(state, category_id):
    return _replace(state, selected_categories=[c for c in state.selected_categories if c != category_id])


# ===== Reviews =====

def set_review_input(state, **changes):
    review = dict(state.review_input)
    review.update(changes)
    return _replace(state, review_input=review)


def add_review(state):
    review = state.review_input
    if not review.get('name') or not review.get('comment'):
        raise FormValidationError('Please fill all review fields')
    return _replace(
        _with_info(state, reviews=state.info['reviews'] + [dict(review)]),
        review_input=empty_review(),
    )


def remove_review(state, index):
    reviews = [r for i, r in enumerate(state.info['reviews']) if i != index]
    return _with_info(state, reviews=reviews)


# ===== Images =====

def _check_slot(slot):
    slot = str(slot)
    if slot not in IMAGE_SLOTS:
        raise ValueError(f'Invalid image slot: {slot}')
    return slot


def set_image(state, slot, image):
    """Fill a slot with an ImageUpload or a hosted URL"""
    slot = _check_slot(slot)
    images = dict(state.images)
    images[slot] = image
    return _replace(state, images=images)


def clear_image(state, slot):
    return set_image(state, slot, None)


def filled_images(state):
    """Non-empty slot values in slot order"""
    return [state.images[slot] for slot in IMAGE_SLOTS if state.images.get(slot)]


def persisted_image_urls(state):
    return [img for img in filled_images(state) if isinstance(img, str)]


# ===== Variants =====

def set_has_variants(state, flag):
    return _replace(state, has_variants=bool(flag))


def add_variant(state, variant=None):
    variant = variant or AttributeVariant(options={}, price=0, mrp=0, stock=0, sku='')
    return _replace(state, variants=state.variants + [variant])


def update_variant(state, index, options=None, **fields):
    current = state.variants[index]
    if isinstance(current, BundleVariant):
        # Bundle rows stay editable as plain rows once bundle mode is off
        current = AttributeVariant.from_dict(current.to_dict())
    merged_options = dict(current.options)
    merged_options.update(options or {})
    updated = AttributeVariant(
        options=merged_options,
        price=fields.get('price', current.price),
        mrp=fields.get('mrp', current.mrp),
        stock=fields.get('stock', current.stock),
        sku=fields.get('sku', current.sku),
    )
    variants = list(state.variants)
    variants[index] = updated
    return _replace(state, variants=variants)


def remove_variant(state, index):
    return _replace(state, variants=[v for i, v in enumerate(state.variants) if i != index])


def set_bulk_enabled(state, enabled):
    enabled = bool(enabled)
    has_variants = state.has_variants or enabled
    return _replace(state, bulk_enabled=enabled, has_variants=has_variants)


def update_bulk_row(state, index, **changes):
    tag = changes.get('tag')
    if tag and tag not in BUNDLE_TAGS:
        raise FormValidationError(f'Unknown bundle tag: {tag}')
    rows = list(state.bulk_rows)
    row = dict(rows[index])
    row.update(changes)
    rows[index] = row
    return _replace(state, bulk_rows=rows)


def add_bulk_row(state):
    row = {'title': '', 'qty': 1, 'price': '', 'mrp': '', 'stock': 0, 'tag': ''}
    return _replace(state, bulk_rows=state.bulk_rows + [row])


def remove_bulk_row(state, index):
    return _replace(state, bulk_rows=[r for i, r in enumerate(state.bulk_rows) if i != index])


# ===== Frequently bought together =====

def set_fbt_enabled(state, enabled):
    return _replace(state, enable_fbt=bool(enabled))


def set_fbt_prices(state, bundle_price=None, bundle_discount=None):
    changes = {}
    if bundle_price is not None:
        changes['fbt_bundle_price'] = bundle_price
    if bundle_discount is not None:
        changes['fbt_bundle_discount'] = bundle_discount
    return _replace(state, **changes)


def add_fbt_product(state, product):
    product_id = product.get('_id')
    if len(state.fbt_products) >= MAX_FBT_PRODUCTS:
        raise FormValidationError(f'Maximum {MAX_FBT_PRODUCTS} products allowed')
    if state.product_id is not None and product_id == state.product_id:
        raise FormValidationError('A product cannot be bought together with itself')
    if any(p.get('_id') == product_id for p in state.fbt_products):
        raise FormValidationError('Product already selected')
    return _replace(state, fbt_products=state.fbt_products + [product])


def remove_fbt_product(state, product_id):
    return _replace(state, fbt_products=[p for p in state.fbt_products if p.get('_id') != product_id])


def load_fbt_config(state, config):
    """Apply the FBT sub-resource fetched for the product being edited"""
    config = config or {}
    bundle_price = config.get('bundlePrice')
    bundle_discount = config.get('bundleDiscount')
    return _replace(
        state,
        enable_fbt=bool(config.get('enableFBT')),
        fbt_products=list(config.get('products') or [])[:MAX_FBT_PRODUCTS],
        fbt_bundle_price=bundle_price if bundle_price else '',
        fbt_bundle_discount=bundle_discount if bundle_discount else '',
    )


def fbt_candidates(state, products, query):
    """Products matching the search text by name or SKU, first 5"""
    query = (query or '').strip().lower()
    if not query:
        return []
    selected = {p.get('_id') for p in state.fbt_products}
    matches = []
    for p in products:
        if p.get('_id') == state.product_id or p.get('_id') in selected:
            continue
        name = (p.get('name') or '').lower()
        sku = (p.get('sku') or '').lower()
        if query in name or query in sku:
            matches.append(p)
        if len(matches) >= FBT_SEARCH_LIMIT:
            break
    return matches
