"""
Storage Utility
===============

File uploads for product images, review images and description media.
Files land under UPLOAD_FOLDER and are served back by the catalog blueprint.
"""

import os
import uuid
from werkzeug.utils import secure_filename
from .config import get_config

ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp', 'avif', 'mp4', 'webm', 'mov'}


class UploadRejected(ValueError):
    """Raised when an uploaded file cannot be stored"""


def _extension(filename):
    return filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''


def upload_folder():
    return get_config('UPLOAD_FOLDER')


def save_upload(file_storage, subfolder):
    """Store an uploaded file.

    Args:
        file_storage: werkzeug FileStorage from request.files.
        subfolder: Subfolder name (e.g. "products", "reviews", "editor").

    Returns:
        Public URL path like "/api/store/uploads/products/abc123.jpg".
    """
    if file_storage is None or not file_storage.filename:
        raise UploadRejected('No file provided')

    ext = _extension(secure_filename(file_storage.filename))
    if ext not in ALLOWED_EXTENSIONS:
        raise UploadRejected(f'Unsupported file type: {ext or "unknown"}')

    filename = f"{uuid.uuid4().hex}.{ext}"
    target_dir = os.path.join(upload_folder(), subfolder)
    os.makedirs(target_dir, exist_ok=True)
    file_storage.save(os.path.join(target_dir, filename))

    return f"/api/store/uploads/{subfolder}/{filename}"
