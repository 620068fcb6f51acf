"""
ShopDesk - Merchant Product Admin
=================================

Product editing for a store admin:
- Product editor with attribute and quantity-bundle variants
- Frequently-bought-together cross-sell configuration
- Manage-products list with stock / fast-delivery toggles
- Flask store API backed by Flask-SQLAlchemy

Usage:
    from flask import Flask
    from shopdesk import ShopDesk

    app = Flask(__name__)
    ShopDesk(app)
"""

import os

__version__ = '0.1.0'

from .core.config import Config
from .core.database import init_database

DEFAULT_MODULES = ['catalog']


class ShopDesk:
    """Flask extension: configures the app, creates tables and registers blueprints"""

    def __init__(self, app=None, config=None):
        self._config = config or {}
        self._registered = []
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self._apply_config_defaults(app)
        init_database(app)
        self._register_blueprints(app)

        app.extensions['shopdesk'] = self

        @app.context_processor
        def inject_shopdesk():
            return {
                'shopdesk_config': dict(self._config),
                'currency_symbol': app.config['CURRENCY_SYMBOL'],
            }

    def _apply_config_defaults(self, app):
        """Fill app.config from the Config class without overriding the host app"""
        app.config.setdefault('SQLALCHEMY_DATABASE_URI', Config.DATABASE_URL)
        app.config.setdefault('SQLALCHEMY_TRACK_MODIFICATIONS', False)
        app.config.setdefault('UPLOAD_FOLDER', Config.UPLOAD_FOLDER)
        app.config.setdefault('STORE_API_TOKEN', Config.STORE_API_TOKEN)
        app.config.setdefault('STORE_ID', Config.STORE_ID)
        app.config.setdefault('CURRENCY_SYMBOL', Config.CURRENCY_SYMBOL)
        app.config.setdefault('MAX_VIDEO_UPLOAD_BYTES', Config.MAX_VIDEO_UPLOAD_BYTES)
        if Config.SECRET_KEY:
            app.config.setdefault('SECRET_KEY', Config.SECRET_KEY)

        for key, value in (self._config.get('settings') or {}).items():
            app.config[key] = value

        os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    def _register_blueprints(self, app):
        modules = self._config.get('modules', DEFAULT_MODULES)
        if 'catalog' in modules:
            from .modules.catalog import store_bp, products_public_bp
            app.register_blueprint(store_bp)
            app.register_blueprint(products_public_bp)
            self._registered.append('catalog')

    def get_registered_modules(self):
        return list(self._registered)


__all__ = ['ShopDesk', 'Config', '__version__']
