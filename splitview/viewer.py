"""
Viewer instance: one fetch-and-render cycle at a time.

Every ``load`` starts a new cycle with a higher sequence number. Only the
newest cycle may publish its state; results of older cycles that finish late
are dropped and their object URLs revoked.
"""

import logging
import threading
import uuid
from typing import Any, Optional

from .blobstore import BlobStore
from .bridge import parse_message
from .config import ViewerConfig
from .detector import select_renderer
from .errors import ParseError, UnsupportedFormatError, ViewerError
from .fetcher import FetchResult, Fetcher
from .renderers import RenderContext, get_renderer
from .renderers.embed import DownloadRenderer
from .state import Error, Loading, RenderState, Table

logger = logging.getLogger(__name__)


class Viewer:
    """
    Holds the displayed state of one view.

    Args:
        proxy: Proxy client used by the fetcher (``get(url) -> FetchResult``)
        config: Viewer configuration
        viewer_id: Identifier used by the server to address this instance
        session: HTTP session for the direct download fallback
    """

    def __init__(self, proxy, config: Optional[ViewerConfig] = None,
                 viewer_id: Optional[str] = None, session=None):
        self.config = config or ViewerConfig()
        self.viewer_id = viewer_id or uuid.uuid4().hex
        self.blobs = BlobStore()
        self.fetcher = Fetcher(proxy, self.blobs, self.config, session=session)

        self._lock = threading.Lock()
        self._cycle = 0
        self._url: Optional[str] = None
        self._state: RenderState = Loading()
        self._context: Optional[RenderContext] = None
        self._owned_source: Optional[str] = None
        self._closed = False

    @property
    def state(self) -> RenderState:
        with self._lock:
            return self._state

    @property
    def url(self) -> Optional[str]:
        with self._lock:
            return self._url

    @property
    def cycle(self) -> int:
        with self._lock:
            return self._cycle

    def load(self, url: str) -> RenderState:
        """Fetch and render ``url``; returns the state this cycle produced."""
        token = self.begin_cycle(url)
        context = RenderContext(self.blobs)
        state = self._run_cycle(url, context)
        self.commit(token, state, context)
        return state

    def reload(self) -> RenderState:
        """User-initiated retry of the current URL."""
        url = self.url
        logger.info(f"Viewer {self.viewer_id} reloading {url}")
        return self.load(url)

    def select_sheet(self, sheet_name: str) -> RenderState:
        """
        Switch the active sheet of a table state. No fetch happens.

        Raises:
            ValueError: If the current state is not a table
            KeyError: If the sheet does not exist
        """
        with self._lock:
            if not isinstance(self._state, Table):
                raise ValueError(f"Current state is {self._state.kind}, not a table")
            self._state = self._state.select(sheet_name)
            return self._state

    def handle_message(self, payload: Any) -> Optional[RenderState]:
        """Host-side handler for bridge messages; link clicks load the new URL."""
        message = parse_message(payload)
        if message is None:
            return None
        logger.info(f"Viewer {self.viewer_id} following link click to {message.url}")
        return self.load(message.url)

    def open_upload(self, data: bytes, content_type: str,
                    filename: Optional[str] = None) -> RenderState:
        """Store an uploaded file as a viewer-owned blob and display it."""
        source = self.blobs.create_object_url(data, content_type, filename)
        state = self.load(source)
        with self._lock:
            if self._url == source:
                self._owned_source = source
            else:
                self.blobs.revoke_object_url(source)
        return state

    def close(self) -> None:
        """Tear down: revoke every object URL and forget the state."""
        with self._lock:
            self._closed = True
            self._cycle += 1
            self._context = None
            self._owned_source = None
            self._state = Loading()
        self.blobs.clear()
        logger.debug(f"Viewer {self.viewer_id} closed")

    def begin_cycle(self, url: str) -> int:
        """Start a new cycle: reset the display and return its token."""
        with self._lock:
            self._cycle += 1
            if self._owned_source and self._owned_source != url:
                self.blobs.revoke_object_url(self._owned_source)
                self._owned_source = None
            self._url = url
            self._state = Loading()
            logger.info(f"Viewer {self.viewer_id} cycle {self._cycle}: fetching {url}")
            return self._cycle

    def commit(self, token: int, state: RenderState, context: RenderContext) -> bool:
        """Publish a cycle's state unless a newer cycle has started."""
        with self._lock:
            if token != self._cycle or self._closed:
                logger.info(f"Viewer {self.viewer_id} discarding stale result of cycle {token}")
                context.revoke_all()
                return False
            if self._context is not None:
                self._context.revoke_all()
            self._context = context
            self._state = state
            return True

    def _run_cycle(self, url: str, context: RenderContext) -> RenderState:
        if not url:
            return Error('No URL or link provided')

        try:
            result = self.fetcher.fetch(url)
        except ViewerError as e:
            logger.error(f"Fetch error for {url}: {e.message}")
            return self._error_state(self._network_message(e), url, context)

        try:
            return self._render(result, context)
        except UnsupportedFormatError as e:
            logger.warning(f"Unsupported format for {url}: {e.message}")
            return DownloadRenderer(self.config).render(result, context)
        except ParseError as e:
            logger.warning(f"Parse error for {url}: {e.message}")
            return self._error_state(e.message, url, context, result)
        except ViewerError as e:
            logger.error(f"Render error for {url}: {e.message}")
            return self._error_state(self._network_message(e), url, context, result)

    def _render(self, result: FetchResult, context: RenderContext) -> RenderState:
        kind = select_renderer(result.content_type)
        logger.info(f"Handling content type {result.content_type!r} as {kind.value}")
        return get_renderer(kind, self.config).render(result, context)

    def _network_message(self, error: ViewerError) -> str:
        return (f"Failed to load content: {error.message}. "
                f"Ensure the proxy server is running at {self.config.proxy_base_url}.")

    def _error_state(self, message: str, url: str, context: RenderContext,
                     result: Optional[FetchResult] = None) -> Error:
        if result is None:
            result = self.fetcher.fetch_fallback(url)
        fallback_url = None
        if result is not None and result.data:
            fallback_url = context.object_url(result, 'application/octet-stream')
        return Error(message, fallback_url)

    def __repr__(self) -> str:
        return f"Viewer(id={self.viewer_id!r}, url={self._url!r}, state={self._state.kind})"
