"""
Product Editor
==============

Controller behind the create/edit product form. Holds the current
ProductFormState, talks to the store API and reports outcomes through a
Notifier. Rendering is left to whatever UI drives it.
"""

import html
import logging
import os

from ...core.config import get_config
from ...core.logging_service import db_log
from ...core.notifications import Notifier
from ..store_client.client import StoreApiError
from . import state as form_state
from .state import FormValidationError, fbt_candidates, persisted_image_urls
from .submission import save_product

logger = logging.getLogger(__name__)

MANAGE_PRODUCTS_PATH = '/store/manage-product'


def _file_size(fileobj):
    try:
        return os.fstat(fileobj.fileno()).st_size
    except (AttributeError, OSError, ValueError):
        pass
    try:
        position = fileobj.tell()
        fileobj.seek(0, os.SEEK_END)
        size = fileobj.tell()
        fileobj.seek(position)
        return size
    except (AttributeError, OSError):
        return None


class ProductEditor:
    """Create/edit session for one product"""

    def __init__(self, client, notifier=None, product=None,
                 on_submit_success=None, on_close=None, navigate=None):
        self.client = client
        self.notifier = notifier or Notifier()
        self.product = product
        self.on_submit_success = on_submit_success
        self.on_close = on_close
        self.navigate = navigate

        self.state = form_state.initial_state()
        self.loading = False
        self.loading_fbt = False
        self.categories = []
        self.available_products = []

    @property
    def product_id(self):
        return self.product.get('_id') if self.product else None

    # ===== Loading =====

    def open(self):
        """Fetch lookups, hydrate from the product and load its FBT config"""
        self.load_categories()
        self.load_fbt_candidates()
        self.state = form_state.hydrate(self.state, self.product)
        if self.product_id:
            self.load_fbt_config()
        return self.state

    def set_product(self, product):
        """Point the editor at another product (or the same one again)"""
        self.product = product
        previous = self.state.product_id
        self.state = form_state.hydrate(self.state, product)
        if self.product_id and self.product_id != previous:
            self.load_fbt_config()
        return self.state

    def load_categories(self):
        try:
            self.categories = self.client.list_categories()
        except StoreApiError as e:
            logger.error(f"Failed to fetch categories: {e.message}")
            self.categories = []
        return self.categories

    def load_fbt_candidates(self):
        try:
            self.available_products = self.client.list_products()
        except StoreApiError as e:
            logger.warning(f"Could not fetch products for FBT (this is optional): {e.message}")
            self.available_products = []
        return self.available_products

    def load_fbt_config(self):
        self.loading_fbt = True
        try:
            config = self.client.get_fbt(self.product_id)
            self.state = form_state.load_fbt_config(self.state, config)
        except StoreApiError as e:
            logger.error(f"Error fetching FBT config for {self.product_id}: {e.message}")
        finally:
            self.loading_fbt = False

    # ===== Editing =====

    def dispatch(self, reducer, *args, **kwargs):
        """Apply a state reducer; rejected edits are reported and change nothing"""
        try:
            self.state = reducer(self.state, *args, **kwargs)
            return True
        except FormValidationError as e:
            self.notifier.error(str(e))
            return False

    def add_review(self):
        if self.dispatch(form_state.add_review):
            self.notifier.success('Review added')
            return True
        return False

    def search_fbt(self, query):
        return fbt_candidates(self.state, self.available_products, query)

    def close(self):
        self.state = form_state.close(self.state)
        if self.on_close:
            self.on_close()

    # ===== Independent writes =====

    def delete_image(self, slot):
        """Clear a slot; a persisted product gets its reduced image list saved right away"""
        self.state = form_state.clear_image(self.state, slot)
        if not self.product_id:
            return True

        images = persisted_image_urls(self.state)
        try:
            self.client.update_product_images(self.product_id, images)
            self.notifier.success('Image deleted and saved!')
            return True
        except StoreApiError as e:
            logger.error(f"Failed to delete image for {self.product_id}: {e.message}")
            self.notifier.error('Failed to delete image on server')
            return False

    def upload_inline_media(self, fileobj, filename, kind='image', content_type=None):
        """Upload an image or video for the description and append it to the HTML"""
        if kind not in ('image', 'video'):
            raise ValueError(f'Unsupported media kind: {kind}')

        label = 'Image' if kind == 'image' else 'Video'
        if kind == 'video':
            max_bytes = int(get_config('MAX_VIDEO_UPLOAD_BYTES', 50 * 1024 * 1024))
            size = _file_size(fileobj)
            if size is not None and size > max_bytes:
                self.notifier.error(f'Video file too large (max {max_bytes // (1024 * 1024)}MB)')
                return None
            self.notifier.loading('Uploading video...')

        try:
            url = self.client.upload_image(fileobj, filename, content_type)
        except StoreApiError as e:
            logger.error(f"{label} upload failed: {e.message}")
            self.notifier.dismiss()
            self.notifier.error(f'Failed to upload {kind}')
            return None

        src = html.escape(url, quote=True)
        if kind == 'image':
            snippet = f'<img src="{src}">'
        else:
            snippet = f'<video src="{src}" controls="true" width="100%"></video>'
        description = (self.state.info.get('description') or '') + snippet
        self.state = form_state.set_field(self.state, 'description', description)

        self.notifier.dismiss()
        self.notifier.success(f'{label} uploaded!')
        return url

    # ===== Submit =====

    def submit(self):
        """Run the two-phase save. Returns the SaveOutcome, or None when nothing was saved."""
        if self.loading:
            return None

        outcome = None
        try:
            self.loading = True
            outcome = save_product(self.client, self.state, self.product_id)
        except FormValidationError as e:
            self.notifier.error(str(e))
            return None
        except StoreApiError as e:
            db_log('warning', 'product_form', 'Product save rejected', {'error': e.message, 'status': e.status_code})
            self.notifier.error(e.message)
            return None
        finally:
            self.loading = False

        if outcome.message:
            self.notifier.success(outcome.message)
        if outcome.fbt_phase.ok:
            self.notifier.success('FBT configuration saved!')
        elif outcome.partial:
            self.notifier.error('Product saved but FBT config failed')

        if self.on_submit_success:
            self.on_submit_success(outcome.product)
        self.close()
        if self.navigate:
            self.navigate(MANAGE_PRODUCTS_PATH)
        return outcome
