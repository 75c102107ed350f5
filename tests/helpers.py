"""Fakes and document builders shared by the test suite."""

from __future__ import annotations

import io
import threading
from typing import Callable, Dict, List, Optional, Union

import requests
from docx import Document
from openpyxl import Workbook

from splitview.errors import NetworkError
from splitview.fetcher import FetchResult

OLE_HEADER = b'\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1'


def make_xlsx(sheets: Dict[str, List[list]], merges: Optional[Dict[str, List[str]]] = None) -> bytes:
    workbook = Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        worksheet = workbook.create_sheet(title=name)
        for row in rows:
            worksheet.append(row)
        for cell_range in (merges or {}).get(name, []):
            worksheet.merge_cells(cell_range)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def make_docx(paragraphs: List[str], heading: Optional[str] = None) -> bytes:
    document = Document()
    if heading:
        document.add_heading(heading, level=1)
    for text in paragraphs:
        document.add_paragraph(text)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


class FakeResponse:
    def __init__(self, content: bytes = b'', status_code: int = 200,
                 headers: Optional[dict] = None, reason: str = 'OK',
                 json_data=None):
        self.content = content
        self.status_code = status_code
        self.headers = headers or {}
        self.reason = reason
        self._json = json_data
        self.closed = False

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError('No JSON body')
        return self._json

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start:start + chunk_size]

    def close(self):
        self.closed = True


Handler = Union[FakeResponse, Exception, Callable[[], FakeResponse]]


class FakeSession:
    """requests.Session stand-in keyed by target URL (the ``url`` param for proxy calls)."""

    def __init__(self, responses: Optional[Dict[str, Handler]] = None):
        self.responses: Dict[str, Handler] = dict(responses or {})
        self.calls: List[dict] = []

    def get(self, url, params=None, headers=None, timeout=None, stream=False):
        target = params['url'] if params and 'url' in params else url
        self.calls.append({'url': url, 'target': target, 'params': params,
                           'headers': headers, 'timeout': timeout, 'stream': stream})
        handler = self.responses.get(target)
        if handler is None:
            raise requests.ConnectionError(f'Connection refused: {target}')
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler()
        return handler


class FakeProxy:
    """Proxy client returning canned FetchResults; records every URL requested."""

    def __init__(self, results: Optional[Dict[str, Union[FetchResult, Exception]]] = None):
        self.results = dict(results or {})
        self.calls: List[str] = []
        self.gates: Dict[str, threading.Event] = {}
        self.started: Dict[str, threading.Event] = {}

    def add(self, url: str, content_type: str, data: bytes) -> None:
        self.results[url] = FetchResult(url, content_type, data)

    def hold(self, url: str) -> threading.Event:
        """Block fetches of ``url`` until the returned event is set."""
        self.gates[url] = threading.Event()
        self.started[url] = threading.Event()
        return self.gates[url]

    def get(self, url: str) -> FetchResult:
        self.calls.append(url)
        if url in self.gates:
            self.started[url].set()
            self.gates[url].wait(timeout=5)
        result = self.results.get(url)
        if result is None:
            raise NetworkError('Proxy fetch failed: 502 - Bad Gateway', url, status=502)
        if isinstance(result, Exception):
            raise result
        return result


class FakeBrowserPool:
    """Replaces the headless browser pool in proxy and route tests."""

    def __init__(self, pages: Optional[Dict[str, Union[str, Exception]]] = None):
        self.pages = dict(pages or {})
        self.rendered: List[str] = []
        self.closed = False

    def render(self, url: str) -> str:
        self.rendered.append(url)
        page = self.pages.get(url, '<html><body><p>Rendered</p></body></html>')
        if isinstance(page, Exception):
            raise page
        return page

    def close(self):
        self.closed = True


class FakePage:
    def __init__(self, behaviour: Dict[str, object]):
        self.behaviour = behaviour
        self.url = None

    def goto(self, url, wait_until=None, timeout=None):
        self.url = url
        self.behaviour.setdefault('gotos', []).append((url, wait_until, timeout))
        delay = self.behaviour.get('delay')
        if delay:
            threading.Event().wait(delay)
        error = self.behaviour.get('goto_error')
        if error is not None:
            raise error

    def wait_for_function(self, expression, timeout=None):
        self.behaviour.setdefault('waits', []).append((expression, timeout))

    def content(self):
        return f'<html><body>rendered {self.url}</body></html>'


class FakeContext:
    def __init__(self, behaviour):
        self.behaviour = behaviour
        self.closed = False

    def new_page(self):
        return FakePage(self.behaviour)

    def close(self):
        self.closed = True
        self.behaviour['contexts_closed'] = self.behaviour.get('contexts_closed', 0) + 1


class FakeBrowser:
    def __init__(self, behaviour):
        self.behaviour = behaviour
        self.connected = True
        self.closed = False
        self.user_agents: List[str] = []

    def is_connected(self):
        return self.connected

    def new_context(self, user_agent=None):
        self.user_agents.append(user_agent)
        return FakeContext(self.behaviour)

    def close(self):
        self.closed = True
        self.connected = False


class FakePlaywright:
    def __init__(self):
        self.stopped = False

    def stop(self):
        self.stopped = True


class FakeLauncher:
    def __init__(self):
        self.behaviour: Dict[str, object] = {}
        self.browsers: List[FakeBrowser] = []
        self.playwrights: List[FakePlaywright] = []
        self.threads: List[str] = []

    def __call__(self, timeout):
        self.threads.append(threading.current_thread().name)
        playwright, browser = FakePlaywright(), FakeBrowser(self.behaviour)
        self.playwrights.append(playwright)
        self.browsers.append(browser)
        return playwright, browser
