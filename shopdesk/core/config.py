import os
from dotenv import load_dotenv

load_dotenv(override=True)


class Config:
    """
    Base configuration for ShopDesk.
    Projects should provide credentials and paths via environment variables.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'uploads'))

    # Database
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///' + os.path.join(DB_DIR, 'catalog.db'))

    # Store API (consumed by the product editor and list)
    STORE_API_BASE_URL = os.getenv('STORE_API_BASE_URL', 'http://localhost:5000')
    STORE_API_TOKEN = os.getenv('STORE_API_TOKEN')
    STORE_API_TIMEOUT = int(os.getenv('STORE_API_TIMEOUT', '30'))
    STORE_ID = os.getenv('STORE_ID', 'default')

    # Origins allowed to read the public product endpoints
    CORS_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGINS', '*').split(',') if o.strip()]

    # Display
    CURRENCY_SYMBOL = os.getenv('CURRENCY_SYMBOL', '₹')

    # Description editor uploads
    MAX_VIDEO_UPLOAD_BYTES = int(os.getenv('MAX_VIDEO_UPLOAD_BYTES', str(50 * 1024 * 1024)))


def get_config(key, default=None):
    """Get config value: app.config > Config class > env var."""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val is not None:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val is not None:
        return val
    return os.getenv(key, default)
