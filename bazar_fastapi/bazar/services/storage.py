"""
Object storage for product images.

``bucket`` arguments are logical folders ("images") inside the project's
Firebase Storage bucket, so object names look like ``images/ab12cd-1700000000.jpg``.
The bucket is expected to be publicly readable; URLs are not signed.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from google.api_core.exceptions import GoogleAPIError

from ..errors import StoreError, StoreWriteError
from .firebase import ensure_bucket

logger = logging.getLogger(__name__)


class ObjectStorage(Protocol):
    def upload(self, bucket: str, path: str, blob: bytes, content_type: Optional[str] = None) -> str: ...

    def get_public_url(self, bucket: str, path: str) -> str: ...

    def remove(self, bucket: str, paths: List[str]) -> None: ...


def path_from_url(bucket: str, url: str) -> Optional[str]:
    """Object path of a public URL we produced, or None for foreign URLs."""
    marker = f"/{bucket}/"
    if marker not in url:
        return None
    return url.rsplit(marker, 1)[1] or None


class FirebaseStorage:
    def _bucket(self):
        try:
            return ensure_bucket()
        except ValueError as e:
            # no storageBucket configured
            raise StoreError(f"image storage not configured: {e}") from e

    def upload(self, bucket, path, blob, content_type=None):
        try:
            self._bucket().blob(f"{bucket}/{path}").upload_from_string(
                blob, content_type=content_type or "application/octet-stream"
            )
        except GoogleAPIError as e:
            logger.error("upload of %s/%s failed: %s", bucket, path, e)
            raise StoreWriteError(f"image upload failed: {e}") from e
        return path

    def get_public_url(self, bucket, path):
        return self._bucket().blob(f"{bucket}/{path}").public_url

    def remove(self, bucket, paths):
        if not paths:
            return
        names = [f"{bucket}/{p}" for p in paths]
        try:
            # missing objects are fine
            self._bucket().delete_blobs(names, on_error=lambda blob: None)
        except GoogleAPIError as e:
            raise StoreWriteError(f"image removal failed: {e}") from e
