"""
Headless browser pool for pre-rendering JavaScript-heavy pages.

Playwright's sync API is bound to the thread that started it, so each worker
thread owns one Chromium instance, launched on first use and reused for every
later render on that thread. The number of workers caps concurrency.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError, wait
from typing import Any, Callable, List, Optional, Tuple

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from .config import BrowserConfig
from .errors import RenderTimeoutError, ViewerError

logger = logging.getLogger(__name__)

LOAD_COMPLETE_CHECK = 'window.performance && window.performance.timing.loadEventEnd > 0'
BROWSER_ARGS = ['--no-sandbox', '--disable-setuid-sandbox']

# (playwright handle with .stop(), browser with .new_context() and .close())
Launcher = Callable[[float], Tuple[Any, Any]]


def launch_chromium(timeout: float) -> Tuple[Any, Any]:
    """Start Playwright and a headless Chromium on the calling thread."""
    playwright = sync_playwright().start()
    try:
        browser = playwright.chromium.launch(headless=True, args=BROWSER_ARGS,
                                             timeout=timeout * 1000)
    except Exception:
        playwright.stop()
        raise
    return playwright, browser


class BrowserPool:
    """
    Renders pages to post-JavaScript HTML with bounded concurrency.

    Args:
        config: Pool size and timeout budget
        launcher: Callable starting a browser on the current thread
    """

    def __init__(self, config: Optional[BrowserConfig] = None,
                 launcher: Optional[Launcher] = None):
        self.config = config or BrowserConfig()
        self.launcher = launcher or launch_chromium
        self._executor = ThreadPoolExecutor(max_workers=self.config.pool_size,
                                            thread_name_prefix='splitview-browser')
        self._local = threading.local()
        self._lock = threading.Lock()
        self._launched: List[Any] = []
        self._closed = False

    @property
    def launch_count(self) -> int:
        with self._lock:
            return len(self._launched)

    def render(self, url: str) -> str:
        """
        Load ``url`` in a pooled browser and return the rendered HTML.

        Raises:
            RenderTimeoutError: If launch, navigation, load completion or the
                wait for a free worker exceeds its budget
            ViewerError: For any other browser failure
        """
        with self._lock:
            if self._closed:
                raise ViewerError('Headless browser pool is closed', url)
            future = self._executor.submit(self._render_on_worker, url)

        try:
            return future.result(timeout=self.config.total_timeout)
        except FutureTimeoutError:
            future.cancel()
            raise RenderTimeoutError(
                f"Headless rendering timed out after {self.config.total_timeout:g}s", url)

    def _browser(self):
        browser = getattr(self._local, 'browser', None)
        if browser is not None and browser.is_connected():
            return browser

        if browser is not None:
            logger.warning("Headless browser disconnected, relaunching")
            self._release_browser()

        logger.info(f"Launching headless browser on {threading.current_thread().name}")
        playwright, browser = self.launcher(self.config.launch_timeout)
        self._local.playwright = playwright
        self._local.browser = browser
        with self._lock:
            self._launched.append(browser)
        return browser

    def _render_on_worker(self, url: str) -> str:
        try:
            browser = self._browser()
            context = browser.new_context(user_agent=self.config.user_agent)
            try:
                page = context.new_page()
                page.goto(url, wait_until='networkidle',
                          timeout=self.config.navigation_timeout * 1000)
                page.wait_for_function(LOAD_COMPLETE_CHECK,
                                       timeout=self.config.load_timeout * 1000)
                content = page.content()
            finally:
                context.close()
        except PlaywrightTimeoutError as e:
            raise RenderTimeoutError(f"Headless rendering timed out: {e}", url, e)
        except PlaywrightError as e:
            raise ViewerError(f"Headless browser error: {e}", url, e)

        logger.info(f"Rendered {url} to {len(content)} characters")
        return content

    def _release_browser(self) -> None:
        browser = getattr(self._local, 'browser', None)
        playwright = getattr(self._local, 'playwright', None)
        self._local.browser = None
        self._local.playwright = None
        try:
            if browser is not None:
                browser.close()
        except PlaywrightError as e:
            logger.warning(f"Error closing browser: {e}")
        finally:
            if playwright is not None:
                playwright.stop()

    def _shutdown_worker(self, barrier: threading.Barrier) -> None:
        # Hold every worker thread so each one closes its own browser.
        try:
            barrier.wait(timeout=5)
        except threading.BrokenBarrierError:
            pass
        self._release_browser()

    def close(self) -> None:
        """Close every pooled browser and stop the workers."""
        with self._lock:
            if self._closed:
                return
            self._closed = True

        size = self.config.pool_size
        barrier = threading.Barrier(size)
        futures = [self._executor.submit(self._shutdown_worker, barrier) for _ in range(size)]
        wait(futures, timeout=10)
        self._executor.shutdown(wait=False, cancel_futures=True)
        logger.info("Headless browser pool closed")

    def __enter__(self) -> 'BrowserPool':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
