"""
ShopDesk Modules
================

- catalog:       Flask blueprints serving the store API
- store_client:  REST client for that API
- product_form:  product editor state, submission and controller
- product_list:  manage-products table and row actions
"""

__all__ = ['catalog', 'store_client', 'product_form', 'product_list']
