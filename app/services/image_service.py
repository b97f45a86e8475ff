# app/services/image_service.py
import logging
import os
from typing import Iterable

from app.core.errors import FileTooLargeError, InvalidFileTypeError
from app.core.storage import ImageStore, generate_filename
from app.schemas.upload import ImageUpload

logger = logging.getLogger(__name__)


# --- Image config ---

EXTENSION_CONTENT_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}


def _normalize_content_type(content_type: str) -> str:
    # "image/png; charset=binary" -> "image/png"
    return content_type.split(";", 1)[0].strip().lower()


def validate_image(
    size: int,
    content_type: str,
    filename: str,
    *,
    max_bytes: int,
    allowed_types: Iterable[str],
) -> str:
    """
    Check an upload before anything is sent to storage.

    The declared content type is client-supplied, so the filename
    extension must independently map to an allowed type as well.

    Returns:
        The canonical extension without dot (e.g. "png").

    Raises:
        FileTooLargeError: size above max_bytes.
        InvalidFileTypeError: content type or extension not allowed.
    """
    if size > max_bytes:
        raise FileTooLargeError(f"Image too large (max {max_bytes} bytes)")

    allowed = {_normalize_content_type(t) for t in allowed_types}

    if _normalize_content_type(content_type) not in allowed:
        raise InvalidFileTypeError(f"Unsupported image type: {content_type!r}")

    ext = os.path.splitext(filename)[1].lower()
    canonical = EXTENSION_CONTENT_TYPES.get(ext)
    if canonical is None or canonical not in allowed:
        raise InvalidFileTypeError(f"Unsupported image extension: {ext or filename!r}")

    return ext.lstrip(".")


class ImageService:
    """
    Product image lifecycle: validate, upload, delete.

    Storage failures propagate as ImageStoreError; callers decide
    whether a failed delete is fatal or best-effort.
    """

    def __init__(self, store: ImageStore, max_bytes: int, allowed_types: Iterable[str]):
        self.store = store
        self.max_bytes = max_bytes
        self.allowed_types = list(allowed_types)

    def validate(self, upload: ImageUpload) -> str:
        return validate_image(
            upload.size,
            upload.content_type,
            upload.filename,
            max_bytes=self.max_bytes,
            allowed_types=self.allowed_types,
        )

    def upload(self, upload: ImageUpload) -> str:
        """
        Validate then upload to a random object name.

        Returns:
            Public URL of the stored image.
        """
        ext = self.validate(upload)
        return self.store.upload(
            upload.data,
            generate_filename(ext),
            _normalize_content_type(upload.content_type),
        )

    def delete(self, url: str | None) -> None:
        """No-op for an empty URL."""
        if not url:
            return
        self.store.delete(url)
