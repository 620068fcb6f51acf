"""
Product List Module
===================

Manage-products table: product collection, category names, stock and
fast-delivery toggles, delete, and edit via the product editor.
"""

from .manager import ProductListManager

__all__ = ['ProductListManager']
