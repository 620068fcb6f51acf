"""
Store API Client
================

REST client for the store backend: products, categories, FBT config,
stock/fast-delivery toggles and media uploads. Mutating calls carry a
bearer token obtained from a caller-supplied token provider.
"""

from .client import StoreApiClient, StoreApiError

__all__ = ['StoreApiClient', 'StoreApiError']
