import os
import uuid
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def new_object_id():
    """24-char hex identity, same width as the ids the storefront already links to"""
    return uuid.uuid4().hex[:24]


def _ensure_sqlite_dir(uri):
    """Create the directory holding a file-backed sqlite database"""
    if not uri or not uri.startswith('sqlite:///'):
        return
    path = uri[len('sqlite:///'):]
    db_dir = os.path.dirname(path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)


def init_database(app):
    """Bind the SQLAlchemy instance to the app and create missing tables"""
    uri = app.config.get('SQLALCHEMY_DATABASE_URI')
    _ensure_sqlite_dir(uri)

    db.init_app(app)

    # Import models so their tables are registered on the metadata
    from ..modules.catalog import models  # noqa: F401
    from . import logging_service  # noqa: F401

    with app.app_context():
        db.create_all()
