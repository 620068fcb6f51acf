"""
Product form parsing for the store API.

Turns the multipart body the product editor sends into column values.
"""

import json
import logging

from ...core.storage import save_upload
from ..product_form.slug import slugify
from .models import ASPECT_RATIOS

logger = logging.getLogger(__name__)

MAX_IMAGES = 8


class ProductFormError(ValueError):
    """Request body the API refuses; returned to the client as a 400"""


def _json_field(form, key, default):
    raw = form.get(key)
    if raw is None or raw == '':
        return default
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        raise ProductFormError(f'Invalid JSON in field: {key}')
    if not isinstance(value, type(default)):
        raise ProductFormError(f'Field {key} has the wrong shape')
    return value


def _bool_field(form, key, default):
    raw = form.get(key)
    if raw is None or raw == '':
        return default
    return str(raw).lower() in ('true', '1', 'on', 'yes')


def _number_field(form, key, required=False):
    raw = (form.get(key) or '').strip()
    if not raw:
        if required:
            raise ProductFormError(f'{key} is required')
        return None
    try:
        return float(raw)
    except ValueError:
        raise ProductFormError(f'{key} must be a number')


def _int_field(form, key, default=0):
    raw = (form.get(key) or '').strip()
    if not raw:
        return default
    try:
        return int(float(raw))
    except ValueError:
        raise ProductFormError(f'{key} must be a whole number')


def _dedupe(values):
    seen = []
    for value in values:
        value = str(value).strip()
        if value and value not in seen:
            seen.append(value)
    return seen


def collect_images(form, files):
    """Kept URLs and new uploads under the repeated `images` field, in slot order.

    `imageOrder` is a JSON list of "url"/"file" markers, one per slot; without
    it kept URLs come first and uploads after them.
    """
    urls = [u for u in form.getlist('images') if u]
    uploads = [f for f in files.getlist('images') if f and f.filename]

    order = _json_field(form, 'imageOrder', [])
    if order:
        if (any(kind not in ('url', 'file') for kind in order)
                or order.count('url') != len(urls)
                or order.count('file') != len(uploads)):
            raise ProductFormError('imageOrder does not match the images sent')
    else:
        order = ['url'] * len(urls) + ['file'] * len(uploads)

    if len(order) > MAX_IMAGES:
        raise ProductFormError(f'A product can have at most {MAX_IMAGES} images')

    kept = iter(urls)
    new = iter(uploads)
    images = []
    for kind in order:
        if kind == 'url':
            images.append(next(kept))
        else:
            images.append(save_upload(next(new), 'products'))
    return images


def parse_product_form(form, files, creating):
    """Column values from a multipart product form.

    On create, name/price/mrp and at least one image are required. On update
    only the fields present in the form are returned.
    """
    values = {}

    name = (form.get('name') or '').strip()
    if creating and not name:
        raise ProductFormError('Product name is required')
    if name:
        values['name'] = name
        values['slug'] = (form.get('slug') or '').strip() or slugify(name)

    for key, column in (('price', 'price'), ('mrp', 'mrp')):
        number = _number_field(form, key, required=creating)
        if number is not None:
            if number < 0:
                raise ProductFormError(f'{key} cannot be negative')
            values[column] = number

    text_fields = (
        ('description', 'description'),
        ('shortDescription', 'short_description'),
        ('sku', 'sku'),
    )
    for key, column in text_fields:
        if key in form:
            values[column] = form.get(key) or ''

    if 'stockQuantity' in form:
        values['stock_quantity'] = max(_int_field(form, 'stockQuantity'), 0)

    for key, column, default in (
        ('fastDelivery', 'fast_delivery', False),
        ('allowReturn', 'allow_return', True),
        ('allowReplacement', 'allow_replacement', True),
    ):
        if key in form:
            values[column] = _bool_field(form, key, default)

    if 'imageAspectRatio' in form:
        ratio = form.get('imageAspectRatio') or '1:1'
        if ratio not in ASPECT_RATIOS:
            raise ProductFormError(f'Unsupported image aspect ratio: {ratio}')
        values['image_aspect_ratio'] = ratio

    for key in ('colors', 'sizes'):
        if key in form:
            values[key] = _json_field(form, key, [])
    if 'tags' in form:
        values['tags'] = _dedupe(_json_field(form, 'tags', []))
    if 'categories' in form:
        values['categories'] = _dedupe(_json_field(form, 'categories', []))

    if 'attributes' in form:
        attributes = _json_field(form, 'attributes', {})
        if 'brand' in form and not attributes.get('brand'):
            attributes['brand'] = form.get('brand')
        values['attributes'] = attributes

    if 'reviews' in form:
        reviews = _json_field(form, 'reviews', [])
        if not all(isinstance(review, dict) for review in reviews):
            raise ProductFormError('Each review must be an object')
        for index, review in enumerate(reviews):
            upload = files.get(f'reviewImages_{index}')
            if upload and upload.filename:
                review['image'] = save_upload(upload, 'reviews')
        values['reviews'] = reviews

    if 'hasVariants' in form:
        has_variants = _bool_field(form, 'hasVariants', False)
        values['has_variants'] = has_variants
        values['variants'] = _json_field(form, 'variants', []) if has_variants else []

    if creating or 'images' in form or 'images' in files:
        images = collect_images(form, files)
        if creating and not images:
            raise ProductFormError('Please upload at least one product image')
        values['images'] = images

    return values
