# app/core/storage.py
import logging
import uuid

from supabase import Client

from app.core.errors import ImageStoreError

logger = logging.getLogger(__name__)


def generate_filename(ext: str) -> str:
    """
    Generate a random filename using UUID4.

    Args:
        ext: File extension without dot (e.g. "png", "jpg")

    Returns:
        A filename like "<uuid4>.png"
    """
    return f"{uuid.uuid4()}.{ext}"


class ImageStore:
    """
    Supabase Storage gateway for product images.

    Objects live under `products/<uuid>.<ext>` in a single public bucket.
    Every failure is re-raised as ImageStoreError so callers only
    deal with the catalog error taxonomy.
    """

    def __init__(self, client: Client, bucket: str):
        self.client = client
        self.bucket = bucket

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def upload(self, data: bytes, filename: str, content_type: str) -> str:
        """
        Upload raw bytes and return the object's public URL.

        Args:
            data: File content in bytes.
            filename: Object name inside the `products/` folder.
            content_type: Stored as the object's Content-Type.

        Raises:
            ImageStoreError: if the upload fails.
        """
        path = f"products/{filename}"
        try:
            self._bucket().upload(
                path,
                data,
                {"content-type": content_type, "upsert": "false"},
            )
            url = self._bucket().get_public_url(path)
        except Exception as exc:
            raise ImageStoreError(f"failed to upload {path}: {exc}") from exc

        logger.info("Uploaded image %s", path)
        return url

    def delete(self, url: str) -> None:
        """
        Delete an object by its public URL.

        Raises:
            ImageStoreError: if the URL does not point into this bucket
                or the storage call fails.
        """
        path = self.extract_path(url)
        if path is None:
            raise ImageStoreError(f"URL does not belong to bucket {self.bucket!r}: {url}")

        try:
            self._bucket().remove([path])
        except Exception as exc:
            raise ImageStoreError(f"failed to delete {path}: {exc}") from exc

        logger.info("Deleted image %s", path)

    def extract_path(self, url: str) -> str | None:
        """
        Given a public URL, extract the object path relative to the bucket.

        Example:
            https://<proj>.supabase.co/storage/v1/object/public/products/products/a.png
            -> 'products/a.png'
        """
        marker = f"/storage/v1/object/public/{self.bucket}/"
        idx = url.find(marker)
        if idx == -1:
            return None
        path = url[idx + len(marker):].split("?", 1)[0]
        return path or None
