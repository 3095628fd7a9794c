"""
Image storage on the local filesystem.

Uploaded files land in ``UPLOAD_FOLDER`` as ``<epoch-ms>-<secure name>``
and are served back under ``/uploads/<filename>``.
"""
import logging
import os
import time
from typing import Optional

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from cafepos.exceptions import ValidationError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = '/uploads'


class StorageService:
    """
    Local image storage.

    Usage:
        storage = StorageService()
        url = storage.save_image(request.files['image'])
    """

    def __init__(self, upload_folder: Optional[str] = None, allowed_extensions=None):
        self.upload_folder = upload_folder or current_app.config['UPLOAD_FOLDER']
        self.allowed_extensions = allowed_extensions or current_app.config['ALLOWED_EXTENSIONS']
        os.makedirs(self.upload_folder, exist_ok=True)

    def _extension(self, filename: str) -> str:
        return filename.rsplit('.', 1)[1].lower() if '.' in filename else ''

    def is_allowed(self, filename: str) -> bool:
        return self._extension(filename) in self.allowed_extensions

    def save_image(self, file: Optional[FileStorage]) -> str:
        """
        Store an uploaded image.

        Returns:
            Public URL path of the stored file

        Raises:
            ValidationError: no file, or an extension that is not allowed
        """
        if file is None or not file.filename:
            raise ValidationError('No file uploaded')

        original = secure_filename(file.filename)
        if not original or not self.is_allowed(original):
            raise ValidationError(
                f"File type not allowed. Use: {', '.join(sorted(self.allowed_extensions))}"
            )

        filename = f"{int(time.time() * 1000)}-{original}"
        path = os.path.join(self.upload_folder, filename)
        file.save(path)

        logger.info(f"[STORAGE] Stored upload {filename}")
        return f"{PUBLIC_PREFIX}/{filename}"
