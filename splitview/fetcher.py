"""
Byte fetching for viewer instances.

Blob references are read from the viewer's store; everything else goes
through a proxy client so the origin's CORS rules and formats are normalised
before rendering.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import requests

from .blobstore import BlobStore, is_blob_url
from .config import ViewerConfig
from .errors import NetworkError, ViewerError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = 'application/octet-stream'


@dataclass(frozen=True)
class FetchResult:
    """
    Raw bytes plus the content type they were served with.

    ``degraded`` marks results from the download-only fallback, whose type and
    status could not be checked.
    """

    url: str
    content_type: str
    data: bytes
    degraded: bool = False


class HttpProxyClient:
    """Fetches through a remote ``GET /proxy?url=`` endpoint."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None,
                 timeout: float = 30.0):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def get(self, url: str) -> FetchResult:
        proxy_url = f"{self.base_url}/proxy"
        logger.info(f"Fetching {url} through proxy {proxy_url}")
        try:
            response = self.session.get(proxy_url, params={'url': url}, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(f"Proxy fetch failed: {e}", url, e)

        if not response.ok:
            message = f"Proxy fetch failed: {response.status_code} - {response.reason}"
            detail = _error_detail(response)
            if detail:
                message = f"{message} ({detail})"
            raise NetworkError(message, url, status=response.status_code)

        content_type = response.headers.get('Content-Type') or DEFAULT_CONTENT_TYPE
        return FetchResult(url, content_type, response.content)


class LocalProxyClient:
    """Calls an in-process ProxyService instead of going over HTTP."""

    def __init__(self, proxy_service):
        self.proxy_service = proxy_service

    def get(self, url: str) -> FetchResult:
        proxied = self.proxy_service.fetch(url)
        return FetchResult(url, proxied.content_type, proxied.read())


def _error_detail(response) -> Optional[str]:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        return payload.get('error')
    return None


class Fetcher:
    """
    Resolves a URL or blob reference to a FetchResult.

    Args:
        proxy: Client with a ``get(url) -> FetchResult`` method
        blobs: The owning viewer's blob store
        config: Viewer configuration
        session: HTTP session for the direct download-only fallback
    """

    def __init__(self, proxy, blobs: BlobStore, config: Optional[ViewerConfig] = None,
                 session: Optional[requests.Session] = None):
        self.proxy = proxy
        self.blobs = blobs
        self.config = config or ViewerConfig()
        self.session = session or requests.Session()

    def fetch(self, url: str) -> FetchResult:
        """
        Fetch bytes and content type.

        Raises:
            ViewerError: If no URL was given
            NetworkError: If the blob is gone or the proxy fetch failed
        """
        if not url:
            raise ViewerError('No URL or link provided')

        if is_blob_url(url):
            logger.debug(f"Reading blob URL: {url}")
            blob = self.blobs.get(url)
            if blob is None:
                raise NetworkError('Blob fetch failed: 404 - Not Found', url, status=404)
            return FetchResult(url, blob.content_type, blob.data)

        return self.proxy.get(url)

    def fetch_fallback(self, url: str) -> Optional[FetchResult]:
        """
        Download-only fallback after a failed fetch or render.

        Never raises; returns None when nothing could be obtained.
        """
        if not url:
            return None

        if is_blob_url(url):
            blob = self.blobs.get(url)
            if blob is None:
                logger.error(f"Blob fallback failed, {url} no longer exists")
                return None
            return FetchResult(url, DEFAULT_CONTENT_TYPE, blob.data, degraded=True)

        if urlparse(url).scheme not in ('http', 'https'):
            return None

        try:
            response = self.session.get(
                url,
                headers={'User-Agent': self.config.user_agent},
                timeout=self.config.fetch_timeout,
            )
            data = response.content
        except requests.RequestException as e:
            logger.error(f"HTTP fallback error for {url}: {e}")
            return None
        return FetchResult(url, DEFAULT_CONTENT_TYPE, data, degraded=True)
