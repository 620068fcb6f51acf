"""
Product List Manager
====================

Backs the manage-products page: loads the store's products and category
names, applies single-row mutations once the server confirms them, and
opens the editor for a row.
"""

import logging
from datetime import datetime

from ...core.config import get_config
from ...core.logging_service import db_log
from ...core.notifications import Notifier
from ..product_form.editor import ProductEditor
from ..store_client.client import StoreApiError
from .display import category_labels, description_excerpt, format_amount

logger = logging.getLogger(__name__)

DELETE_CONFIRMATION = 'Are you sure you want to delete this product?'


def _created_at(product):
    value = product.get('createdAt')
    if not value:
        return datetime.min
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00')).replace(tzinfo=None)
    except ValueError:
        return datetime.min


class ProductListManager:
    """State and actions of the manage-products table"""

    def __init__(self, client, notifier=None, confirm=None, refresh_catalog=None, navigate=None):
        self.client = client
        self.notifier = notifier or Notifier()
        self.confirm = confirm or (lambda message: True)
        self.refresh_catalog = refresh_catalog
        self.navigate = navigate

        self.loading = True
        self.products = []
        self.category_map = {}
        self.editor = None

    # ===== Loading =====

    def load(self):
        self.fetch_products()
        self.fetch_categories()
        return self.products

    def fetch_products(self):
        try:
            products = self.client.list_store_products()
            self.products = sorted(products, key=_created_at, reverse=True)
        except StoreApiError as e:
            self.notifier.error(e.message)
        finally:
            self.loading = False
        return self.products

    def fetch_categories(self):
        """Category id -> name; on failure ids are displayed as-is"""
        try:
            categories = self.client.list_categories()
            self.category_map = {c.get('_id'): c.get('name') for c in categories if c.get('_id')}
        except StoreApiError as e:
            logger.error(f"Error fetching categories: {e.message}")
        return self.category_map

    def _flip(self, product_id, field, default):
        updated = []
        for product in self.products:
            if product.get('_id') == product_id:
                product = dict(product)
                product[field] = not product.get(field, default)
            updated.append(product)
        self.products = updated

    # ===== Row actions =====

    def toggle_stock(self, product_id):
        try:
            data = self.client.toggle_stock(product_id)
        except StoreApiError as e:
            self.notifier.error(e.message)
            return False
        self._flip(product_id, 'inStock', True)
        self.notifier.success(data.get('message') or 'Stock updated')
        return True

    def toggle_fast_delivery(self, product_id):
        try:
            data = self.client.toggle_fast_delivery(product_id)
        except StoreApiError as e:
            self.notifier.error(e.message)
            return False
        self._flip(product_id, 'fastDelivery', False)
        self.notifier.success(data.get('message') or 'Fast delivery updated')
        return True

    def delete(self, product_id):
        if not self.confirm(DELETE_CONFIRMATION):
            return False
        try:
            self.client.delete_product(product_id)
        except StoreApiError as e:
            self.notifier.error(e.message)
            return False
        self.products = [p for p in self.products if p.get('_id') != product_id]
        db_log('info', 'product_list', f'Product {product_id} deleted')
        self.notifier.success('Product deleted successfully')
        return True

    # ===== Editing =====

    def open_edit(self, product):
        self.editor = ProductEditor(
            self.client,
            notifier=self.notifier,
            product=product,
            on_submit_success=self.handle_update_success,
            on_close=self.close_edit,
            navigate=self.navigate,
        )
        self.editor.open()
        return self.editor

    def close_edit(self):
        self.editor = None

    def handle_update_success(self, updated_product):
        if updated_product:
            updated_id = updated_product.get('_id')
            self.products = [updated_product if p.get('_id') == updated_id else p for p in self.products]
        self.close_edit()
        if self.refresh_catalog:
            self.refresh_catalog()

    # ===== Display =====

    def rows(self):
        currency = get_config('CURRENCY_SYMBOL', '₹')
        rows = []
        for product in self.products:
            images = product.get('images') or []
            rows.append({
                'id': product.get('_id'),
                'name': product.get('name'),
                'image': images[0] if images else None,
                'sku': product.get('sku') or '-',
                'categories': category_labels(product, self.category_map),
                'tags': list(product.get('tags') or []),
                'description': description_excerpt(product.get('description')),
                'mrp': format_amount(product.get('mrp'), currency),
                'price': format_amount(product.get('price'), currency),
                'fast_delivery': bool(product.get('fastDelivery')),
                'in_stock': bool(product.get('inStock', True)),
            })
        return rows
