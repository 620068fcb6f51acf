"""
Catalog API Module
==================

Store backend consumed by the product editor and product list.

Provides:
- /api/store/product            - list (GET), create (POST), update (PUT), delete (DELETE)
- /api/store/categories         - category list
- /api/store/stock-toggle       - flip inStock
- /api/store/fast-delivery-toggle - flip fastDelivery
- /api/store/upload-image       - single file upload, returns its URL
- /api/products                 - public in-stock listing
- /api/products/<id>/fbt        - frequently-bought-together config (GET/PATCH)

Writes require `Authorization: Bearer <STORE_API_TOKEN>`.
"""

from flask import Blueprint

store_bp = Blueprint(
    'store',
    __name__,
    url_prefix='/api/store'
)

products_public_bp = Blueprint(
    'products_public',
    __name__,
    url_prefix='/api/products'
)

from . import routes

__all__ = ['store_bp', 'products_public_bp']
