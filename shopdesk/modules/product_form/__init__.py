"""
Product Form Module
===================

Editable product state and its submission to the store API.

Provides:
- Slug derivation from the product name
- Attribute and bundle (quantity-tier) variants
- Pure reducers over a single ProductFormState
- Multipart product payload + FBT patch, saved as two sequential writes
- ProductEditor controller wiring it all to the API client
"""

from .editor import ProductEditor
from .slug import slugify
from .state import FormValidationError, ImageUpload, ProductFormState
from .submission import SaveOutcome, build_fbt_payload, build_product_payload, save_product
from .variants import AttributeVariant, BundleVariant, is_bundle_array

__all__ = [
    'ProductEditor', 'slugify', 'FormValidationError', 'ImageUpload', 'ProductFormState',
    'SaveOutcome', 'build_fbt_payload', 'build_product_payload', 'save_product',
    'AttributeVariant', 'BundleVariant', 'is_bundle_array',
]
