# shopdesk/modules/store_client/client.py
import logging
from typing import Any, Callable, Dict, List, Optional

import requests

from ...core.config import get_config

logger = logging.getLogger(__name__)


class StoreApiError(Exception):
    """A rejected store API request; `message` is what the server said, verbatim"""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class StoreApiClient:
    """Client for the store REST API used by the product editor and list"""

    def __init__(self, base_url: str = None, token_provider: Callable[[], str] = None,
                 session: requests.Session = None, timeout: int = None):
        self.base_url = (base_url or get_config('STORE_API_BASE_URL', '')).rstrip('/')
        self.token_provider = token_provider
        self.session = session or requests.Session()
        self.timeout = timeout or int(get_config('STORE_API_TIMEOUT', 30))

    def _auth_headers(self) -> Dict[str, str]:
        if not self.token_provider:
            raise StoreApiError('No credential available for this request')
        return {'Authorization': f'Bearer {self.token_provider()}'}

    def _request(self, method: str, path: str, auth: bool = True, **kwargs) -> Dict[str, Any]:
        """Issue a request and return the decoded JSON body"""
        headers = kwargs.pop('headers', {})
        if auth:
            headers.update(self._auth_headers())

        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise StoreApiError(str(e)) from e

        try:
            data = resp.json() if resp.content else {}
        except ValueError:
            data = {}

        if resp.status_code >= 400:
            message = data.get('error') if isinstance(data, dict) else None
            if not message:
                message = f"Request failed with status code {resp.status_code}"
            logger.warning(f"{method} {path} returned {resp.status_code}: {message}")
            raise StoreApiError(message, status_code=resp.status_code, payload=data)

        return data

    # ===== Lookups =====

    def list_categories(self) -> List[Dict[str, Any]]:
        data = self._request('GET', '/api/store/categories', auth=False)
        return data.get('categories') or []

    def list_products(self) -> List[Dict[str, Any]]:
        """Public product listing (used for FBT candidate search)"""
        data = self._request('GET', '/api/products', auth=False)
        return data.get('products') or []

    def list_store_products(self) -> List[Dict[str, Any]]:
        data = self._request('GET', '/api/store/product')
        return data.get('products') or []

    # ===== Product writes =====

    def create_product(self, payload) -> Dict[str, Any]:
        """POST a multipart product payload (see product_form.submission)"""
        return self._request('POST', '/api/store/product', files=payload.to_requests_files())

    def update_product(self, payload) -> Dict[str, Any]:
        """PUT a multipart product payload; the payload carries productId"""
        return self._request('PUT', '/api/store/product', files=payload.to_requests_files())

    def update_product_images(self, product_id: str, images: List[str]) -> Dict[str, Any]:
        """Replace only the stored image list of a product"""
        return self._request('PUT', '/api/store/product', json={'productId': product_id, 'images': images})

    def delete_product(self, product_id: str) -> Dict[str, Any]:
        return self._request('DELETE', '/api/store/product', params={'productId': product_id})

    def toggle_stock(self, product_id: str) -> Dict[str, Any]:
        return self._request('POST', '/api/store/stock-toggle', json={'productId': product_id})

    def toggle_fast_delivery(self, product_id: str) -> Dict[str, Any]:
        return self._request('POST', '/api/store/fast-delivery-toggle', json={'productId': product_id})

    # ===== Frequently bought together =====

    def get_fbt(self, product_id: str) -> Dict[str, Any]:
        return self._request('GET', f'/api/products/{product_id}/fbt', auth=False)

    def patch_fbt(self, product_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('PATCH', f'/api/products/{product_id}/fbt', json=payload)

    # ===== Media =====

    def upload_image(self, fileobj, filename: str, content_type: str = None) -> str:
        """Upload a single image or video file and return its hosted URL"""
        part = (filename, fileobj, content_type) if content_type else (filename, fileobj)
        data = self._request('POST', '/api/store/upload-image', files=[('image', part)])
        url = data.get('url')
        if not url:
            raise StoreApiError('Upload succeeded but no URL was returned', payload=data)
        return url
