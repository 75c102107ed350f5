"""
Same-origin proxy service.

Fetches third-party resources for the viewer, pre-renders HTML through the
browser pool, converts Word documents to HTML and streams everything else
through unchanged.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional
from urllib.parse import urlparse

import requests

from .config import ViewerConfig
from .converters import docx_to_html
from .detector import DOCX_MIME
from .errors import InvalidURLError, NetworkError, ViewerError

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPE = 'text/html; charset=utf-8'
CHUNK_SIZE = 64 * 1024


@dataclass
class ProxiedResponse:
    """Content type plus a body iterable; ``close`` releases the upstream connection."""

    content_type: str
    body: Iterable[bytes]
    close: Callable[[], None] = field(default=lambda: None)

    def read(self) -> bytes:
        try:
            return b''.join(self.body)
        finally:
            self.close()


def validate_url(url: Optional[str]) -> str:
    """
    Check a proxy target URL.

    Raises:
        InvalidURLError: For a missing, malformed or non-HTTP(S) URL
    """
    if not url:
        raise InvalidURLError('URL parameter is required')

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise InvalidURLError('Invalid URL format', url, e)

    if not parsed.scheme:
        raise InvalidURLError('Invalid URL format', url)
    if parsed.scheme.lower() not in ('http', 'https'):
        raise InvalidURLError('Only HTTP/HTTPS URLs are allowed', url)
    if not parsed.netloc:
        raise InvalidURLError('Invalid URL format', url)
    return url


class ProxyService:
    """
    Upstream fetcher behind ``GET /proxy``.

    Args:
        browser_pool: Object with ``render(url) -> str`` for HTML pages
        config: Viewer configuration (timeout and User-Agent)
        session: requests session used for upstream calls
    """

    def __init__(self, browser_pool, config: Optional[ViewerConfig] = None,
                 session: Optional[requests.Session] = None):
        self.browser_pool = browser_pool
        self.config = config or ViewerConfig()
        self.session = session or requests.Session()

    def fetch(self, url: str) -> ProxiedResponse:
        """
        Fetch ``url`` and normalise it for the viewer.

        Raises:
            InvalidURLError: If the URL is rejected
            NetworkError: If the upstream fetch fails or is non-2xx
            RenderTimeoutError: If headless rendering runs out of time
        """
        validate_url(url)
        logger.info(f"Proxy GET request for URL: {url}")

        try:
            response = self.session.get(
                url,
                headers={'User-Agent': self.config.user_agent},
                timeout=self.config.fetch_timeout,
                stream=True,
            )
        except requests.RequestException as e:
            raise NetworkError(f"Failed to fetch URL: {e}", url, e)

        if not response.ok:
            response.close()
            raise NetworkError(f"Failed to fetch URL: {response.reason}", url,
                               status=response.status_code)

        content_type = response.headers.get('Content-Type') or 'application/octet-stream'
        logger.info(f"Content-Type: {content_type}")
        lowered = content_type.lower()

        if 'text/html' in lowered:
            response.close()
            html_content = self.browser_pool.render(url)
            return ProxiedResponse(HTML_CONTENT_TYPE, [html_content.encode('utf-8')])

        if DOCX_MIME in lowered:
            try:
                data = response.content
            except requests.RequestException as e:
                raise NetworkError(f"Failed to fetch URL: {e}", url, e)
            finally:
                response.close()
            html_content = docx_to_html(data, url)
            return ProxiedResponse(HTML_CONTENT_TYPE, [html_content.encode('utf-8')])

        return ProxiedResponse(content_type, _stream(response, url), response.close)


def _stream(response, url: str) -> Iterable[bytes]:
    try:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if chunk:
                yield chunk
    except requests.RequestException as e:
        logger.error(f"Upstream stream for {url} broke off: {e}")
        raise ViewerError(f"Upstream stream interrupted: {e}", url, e)
    finally:
        response.close()
