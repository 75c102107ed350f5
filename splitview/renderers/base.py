"""
Base renderer class for splitview.

Provides the interface every render strategy implements plus the per-cycle
context that tracks the object URLs a render creates.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import List, Optional

import chardet

from ..blobstore import BlobStore
from ..config import ViewerConfig
from ..fetcher import FetchResult
from ..state import RenderState

logger = logging.getLogger(__name__)

MIN_DETECTION_CONFIDENCE = 0.7

_CHARSET_RE = re.compile(r'charset\s*=\s*["\']?([\w.:-]+)', re.IGNORECASE)


class RenderContext:
    """
    Object URL bookkeeping for one fetch-and-render cycle.

    The viewer revokes ``created_urls`` when the cycle's state is superseded
    or discarded.
    """

    def __init__(self, blobs: BlobStore):
        self.blobs = blobs
        self.created_urls: List[str] = []

    def object_url(self, result: FetchResult, content_type: Optional[str] = None) -> str:
        url = self.blobs.create_object_url(result.data, content_type or result.content_type)
        self.created_urls.append(url)
        return url

    def revoke_all(self) -> None:
        for url in self.created_urls:
            self.blobs.revoke_object_url(url)
        self.created_urls = []


class BaseRenderer(ABC):
    """
    Abstract base class for all render strategies.

    Args:
        config: Viewer configuration (optional)
    """

    def __init__(self, config: Optional[ViewerConfig] = None):
        self.config = config or ViewerConfig()

    @abstractmethod
    def render(self, result: FetchResult, context: RenderContext) -> RenderState:
        """
        Turn fetched bytes into a displayable state.

        Raises:
            ParseError: If the content is empty or malformed
            UnsupportedFormatError: If the content cannot be shown inline
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(config={self.config})"


def charset_of(content_type: Optional[str]) -> Optional[str]:
    """Extract the charset parameter from a content type."""
    if not content_type:
        return None
    match = _CHARSET_RE.search(content_type)
    return match.group(1) if match else None


def detect_encoding(data: bytes, default: str = 'utf-8') -> str:
    """Guess the encoding of undeclared text with chardet."""
    result = chardet.detect(data[:10000])
    encoding = result.get('encoding') or default
    confidence = result.get('confidence') or 0
    logger.debug(f"Detected encoding: {encoding} (confidence: {confidence:.2f})")
    if confidence > MIN_DETECTION_CONFIDENCE:
        return encoding
    logger.warning(f"Low confidence encoding detection ({confidence:.2f}), using {default}")
    return default


def decode_text(data: bytes, content_type: Optional[str] = None) -> str:
    """
    Decode bytes to text.

    The declared charset wins; without one, UTF-8 is tried first and chardet
    picks the encoding when that fails. Undecodable bytes are replaced rather
    than raising.
    """
    encoding = charset_of(content_type)
    if encoding is None:
        try:
            return data.decode('utf-8-sig')
        except UnicodeDecodeError:
            encoding = detect_encoding(data)

    if encoding.lower().replace('_', '-') in ('utf-8', 'utf8'):
        encoding = 'utf-8-sig'
    try:
        return data.decode(encoding, errors='replace')
    except LookupError:
        logger.warning(f"Unknown charset {encoding!r}, decoding as UTF-8")
        return data.decode('utf-8-sig', errors='replace')
