"""
Product Submission
==================

Reduces a ProductFormState to the two requests a save consists of:

1. the multipart product payload (POST to create, PUT to update)
2. the JSON patch of the product's frequently-bought-together config

save_product() issues them in that order. The second write is best effort:
its failure is recorded on the SaveOutcome instead of undoing the first.
"""

import json
import logging

from ...core.logging_service import db_log
from ..store_client.client import StoreApiError
from .state import FormValidationError, IMAGE_SLOTS, ImageUpload
from .variants import BULK_VARIANT_TYPE, encode_variants, project_bundle_rows, to_number

logger = logging.getLogger(__name__)

JSON_FIELDS = ('colors', 'sizes', 'tags', 'badges')


class MultipartPayload:
    """Ordered multipart fields; values are strings or (filename, fileobj[, content_type]) parts"""

    def __init__(self):
        self.fields = []

    def append(self, name, value):
        self.fields.append((name, value))

    def set(self, name, value):
        """Replace every existing `name` field with a single value at the first position"""
        replaced = False
        kept = []
        for key, existing in self.fields:
            if key == name:
                if not replaced:
                    kept.append((name, value))
                    replaced = True
                continue
            kept.append((key, existing))
        if not replaced:
            kept.append((name, value))
        self.fields = kept

    def get(self, name, default=None):
        for key, value in self.fields:
            if key == name:
                return value
        return default

    def get_all(self, name):
        return [value for key, value in self.fields if key == name]

    def names(self):
        return [key for key, _ in self.fields]

    def __contains__(self, name):
        return any(key == name for key, _ in self.fields)

    def to_requests_files(self):
        """Field list for `requests` that keeps plain values and files in one ordered body"""
        parts = []
        for name, value in self.fields:
            if isinstance(value, tuple):
                parts.append((name, value))
            else:
                parts.append((name, (None, value)))
        return parts


def _form_value(value):
    """Stringify a scalar the way a browser form would"""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)


def _is_blank(value):
    return value is None or value == '' or value == 0


def _clean_reviews(reviews):
    return [{'name': r.get('name'), 'rating': r.get('rating'), 'comment': r.get('comment')} for r in reviews]


def effective_variants(state):
    """The variant array and hasVariants flag a submission would send"""
    if state.bulk_enabled:
        projected = project_bundle_rows(state.bulk_rows)
        return projected, len(projected) > 0
    return list(state.variants), state.has_variants


def build_product_payload(state, product_id=None):
    """Serialize the form into the multipart product payload.

    Raises FormValidationError before anything is built when no image slot is filled.
    """
    if not any(state.images.get(slot) for slot in IMAGE_SLOTS):
        raise FormValidationError('Please upload at least one product image')

    payload = MultipartPayload()
    info = state.info

    for key, value in info.items():
        if key in JSON_FIELDS:
            payload.append(key, json.dumps(list(value or [])))
        elif key == 'reviews':
            payload.append('reviews', json.dumps(_clean_reviews(value or [])))
        elif key == 'slug':
            payload.append('slug', (value or '').strip())
        elif key == 'category':
            # Legacy single category is read on hydrate but never written
            continue
        else:
            payload.append(key, _form_value(value))

    payload.append('categories', json.dumps(list(state.selected_categories)))

    attributes = {
        'brand': info.get('brand'),
        'shortDescription': info.get('shortDescription'),
        'badges': list(info.get('badges') or []),
    }
    if state.bulk_enabled:
        attributes['variantType'] = BULK_VARIANT_TYPE
    payload.append('attributes', json.dumps(attributes))

    variants, has_variants = effective_variants(state)
    if state.bulk_enabled and variants:
        if _is_blank(info.get('price')) or _is_blank(info.get('mrp')):
            payload.set('price', _form_value(variants[0].price))
            payload.set('mrp', _form_value(variants[0].mrp))

    payload.append('hasVariants', _form_value(has_variants))
    if has_variants:
        payload.append('variants', json.dumps(encode_variants(variants)))

    image_order = []
    for slot in IMAGE_SLOTS:
        image = state.images.get(slot)
        if isinstance(image, ImageUpload):
            payload.append('images', image.as_part())
            image_order.append('file')
        elif isinstance(image, str) and image:
            payload.append('images', image)
            image_order.append('url')
    # Multipart parsers split files from plain values; this keeps the slot order
    payload.append('imageOrder', json.dumps(image_order))

    for index, review in enumerate(info.get('reviews') or []):
        image = review.get('image')
        if isinstance(image, ImageUpload):
            payload.append(f'reviewImages_{index}', image.as_part())

    if product_id:
        payload.append('productId', product_id)

    return payload


def _optional_float(value):
    if value is None or value == '':
        return None
    number = to_number(value)
    return float(number) if number is not None else None


def build_fbt_payload(state):
    """JSON body for the FBT patch; a disabled config clears ids and prices"""
    enabled = bool(state.enable_fbt)
    return {
        'enableFBT': enabled,
        'fbtProductIds': [p.get('_id') for p in state.fbt_products] if enabled else [],
        'fbtBundlePrice': _optional_float(state.fbt_bundle_price) if enabled else None,
        'fbtBundleDiscount': _optional_float(state.fbt_bundle_discount) if enabled else None,
    }


class PhaseResult:
    OK = 'ok'
    SKIPPED = 'skipped'
    FAILED = 'failed'

    def __init__(self, status, error=None, data=None):
        self.status = status
        self.error = error
        self.data = data

    @property
    def ok(self):
        return self.status == self.OK

    def __repr__(self):
        return f"PhaseResult({self.status!r}, error={self.error!r})"


class SaveOutcome:
    """What happened to each write of a two-phase product save"""

    def __init__(self, product_phase, fbt_phase, product=None, message=None):
        self.product_phase = product_phase
        self.fbt_phase = fbt_phase
        self.product = product
        self.message = message

    @property
    def partial(self):
        """Product persisted but its cross-sell config was not"""
        return self.product_phase.ok and self.fbt_phase.status == PhaseResult.FAILED

    def __repr__(self):
        return f"SaveOutcome(product={self.product_phase!r}, fbt={self.fbt_phase!r})"


def save_product(client, state, product_id=None):
    """Persist the product, then its FBT config.

    Raises FormValidationError (nothing sent) or StoreApiError (product write
    rejected). An FBT failure is logged and reported on the outcome only.
    """
    payload = build_product_payload(state, product_id)
    if product_id:
        data = client.update_product(payload)
    else:
        data = client.create_product(payload)

    saved = data.get('product') or data.get('updatedProduct')
    product_phase = PhaseResult(PhaseResult.OK, data=data)

    saved_id = saved.get('_id') if isinstance(saved, dict) else None
    if not saved_id:
        logger.warning("Product saved but response carried no id; FBT config not written")
        fbt_phase = PhaseResult(PhaseResult.SKIPPED)
        return SaveOutcome(product_phase, fbt_phase, product=saved, message=data.get('message'))

    fbt_payload = build_fbt_payload(state)
    try:
        fbt_data = client.patch_fbt(saved_id, fbt_payload)
        fbt_phase = PhaseResult(PhaseResult.OK, data=fbt_data)
    except StoreApiError as e:
        logger.error(f"Error saving FBT config for {saved_id}: {e.message}")
        db_log('error', 'product_form', f'FBT config save failed for {saved_id}', {'error': e.message})
        fbt_phase = PhaseResult(PhaseResult.FAILED, error=e.message)

    return SaveOutcome(product_phase, fbt_phase, product=saved, message=data.get('message'))
