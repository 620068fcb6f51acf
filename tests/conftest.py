"""
Shared fixtures for the ShopDesk test suite.
"""

import io
import os
import shutil
import tempfile
from unittest.mock import MagicMock

import pytest
from flask import Flask

from shopdesk import ShopDesk
from shopdesk.core.notifications import Notifier

API_TOKEN = "test-store-token"


@pytest.fixture
def tmp_upload_dir():
    """Temporary upload folder, cleaned up after."""
    d = tempfile.mkdtemp(prefix="shopdesk-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def app(tmp_upload_dir):
    """Flask app with ShopDesk initialised on a throwaway sqlite file."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///" + os.path.join(tmp_upload_dir, "catalog.db")
    app.config["UPLOAD_FOLDER"] = tmp_upload_dir
    app.config["STORE_API_TOKEN"] = API_TOKEN
    app.config["STORE_ID"] = "store-1"
    ShopDesk(app)
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {API_TOKEN}"}


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def api():
    """Stand-in for StoreApiClient; every call succeeds unless told otherwise."""
    api = MagicMock()
    api.list_categories.return_value = [{"_id": "c1", "name": "Shirts"}]
    api.list_products.return_value = []
    api.get_fbt.return_value = {"enableFBT": False, "products": []}
    api.patch_fbt.return_value = {"success": True}
    return api


def png(name="photo.png"):
    return io.BytesIO(b"\x89PNG\r\n\x1a\nfake"), name


def to_test_client_data(payload):
    """MultipartPayload -> data dict the Flask test client understands."""
    data = {}
    for name, value in payload.fields:
        if isinstance(value, tuple):
            filename, fileobj = value[0], value[1]
            value = (fileobj, filename)
        data.setdefault(name, []).append(value)
    return data
