# /lms/services/storage_service.py

"""
Blob storage for uploaded files (course materials and profile pictures).

Files are written under `UPLOAD_DIR/<folder>/` with a random name and served
back by the static mount at `FILES_URL_PREFIX`. The rest of the application
only ever sees the returned URL.
"""

import logging
import shutil
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from lms.core.config import settings
from lms.core.errors import DependencyFailedError, ValidationFailedError

logger = logging.getLogger(__name__)


def _extension_of(filename: str) -> str:
    ext = Path(filename or "").suffix.lower()
    if ext not in settings.ALLOWED_EXTENSIONS:
        allowed = ", ".join(settings.ALLOWED_EXTENSIONS)
        raise ValidationFailedError(f"Unsupported file type '{ext or filename}'. Allowed: {allowed}")
    return ext


def store(file: UploadFile, folder: str) -> str:
    """Persists an upload and returns its public URL."""
    ext = _extension_of(file.filename)
    stored_name = f"{uuid.uuid4().hex}{ext}"
    target_dir = Path(settings.UPLOAD_DIR) / folder
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        with open(target_dir / stored_name, "wb") as out:
            shutil.copyfileobj(file.file, out)
    except OSError as e:
        logger.error(f"Could not store upload '{file.filename}': {e}")
        raise DependencyFailedError("File storage is unavailable") from e

    url = f"{settings.FILES_URL_PREFIX}/{folder}/{stored_name}"
    logger.info(f"Stored upload '{file.filename}' at {url}")
    return url


def discard(url: Optional[str]) -> None:
    """Removes a stored upload whose owning record was never committed."""
    prefix = f"{settings.FILES_URL_PREFIX}/"
    if not url or not url.startswith(prefix):
        return
    path = Path(settings.UPLOAD_DIR) / url[len(prefix):]
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove orphaned upload {path}: {e}")
        return
    logger.info(f"Removed orphaned upload {url}")
