"""
In-memory object URLs for viewer-local binary data.

Each viewer owns one store. ``create_object_url`` hands out ``blob:<id>``
references that stay readable until revoked.
"""

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)

BLOB_SCHEME = 'blob:'


@dataclass(frozen=True)
class Blob:
    content_type: str
    data: bytes
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


def is_blob_url(url: Optional[str]) -> bool:
    return bool(url) and url.startswith(BLOB_SCHEME)


def blob_id(url: str) -> str:
    """Strip the scheme from an object URL."""
    if not is_blob_url(url):
        raise ValueError(f"Not an object URL: {url}")
    return url[len(BLOB_SCHEME):]


class BlobStore:
    """Thread-safe registry of object URLs."""

    def __init__(self):
        self._blobs: Dict[str, Blob] = {}
        self._lock = threading.Lock()

    def create_object_url(self, data: bytes, content_type: str,
                          filename: Optional[str] = None) -> str:
        key = uuid.uuid4().hex
        with self._lock:
            self._blobs[key] = Blob(content_type or 'application/octet-stream', data, filename)
        logger.debug(f"Created object URL blob:{key} ({len(data)} bytes, {content_type})")
        return BLOB_SCHEME + key

    def revoke_object_url(self, url: str) -> bool:
        """Release an object URL. Returns False when it was already gone."""
        try:
            key = blob_id(url)
        except ValueError:
            return False
        with self._lock:
            removed = self._blobs.pop(key, None)
        if removed is not None:
            logger.debug(f"Revoked object URL {url}")
        return removed is not None

    def get(self, url: str) -> Optional[Blob]:
        try:
            key = blob_id(url)
        except ValueError:
            return None
        with self._lock:
            return self._blobs.get(key)

    def clear(self) -> None:
        with self._lock:
            self._blobs.clear()

    def __contains__(self, url: str) -> bool:
        return self.get(url) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._blobs)
