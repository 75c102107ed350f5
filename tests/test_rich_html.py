from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from splitview.blobstore import BlobStore
from splitview.config import ViewerConfig
from splitview.converters import docx_to_html, sanitize_html
from splitview.detector import DOCX_MIME
from splitview.errors import ParseError, UnsupportedFormatError
from splitview.fetcher import FetchResult
from splitview.renderers import RenderContext
from splitview.renderers.rich_html import RichHTMLRenderer
from tests.helpers import OLE_HEADER

PAGE_URL = "https://example.com/docs/page.html"


def _render(data: bytes, content_type: str = "text/html; charset=utf-8",
            url: str = PAGE_URL, config: ViewerConfig = None):
    result = FetchResult(url, content_type, data)
    return RichHTMLRenderer(config).render(result, RenderContext(BlobStore()))


def test_docx_is_converted_from_the_body(docx_bytes) -> None:
    state = _render(docx_bytes, DOCX_MIME, url="blob:abc")

    soup = BeautifulSoup(state.html, "html.parser")
    assert soup.find("h1").get_text() == "Report"
    assert [p.get_text() for p in soup.find_all("p")] == ["Hello world", "Second paragraph"]


def test_legacy_word_documents_are_unsupported() -> None:
    with pytest.raises(UnsupportedFormatError) as excinfo:
        _render(OLE_HEADER + b"\x00" * 64, "application/msword")
    assert excinfo.value.content_type == "application/msword"


def test_broken_docx_is_a_parse_error() -> None:
    with pytest.raises(ParseError, match="Failed to convert Word document"):
        docx_to_html(b"PK\x03\x04 definitely not a docx")


def test_scripts_and_handlers_are_removed() -> None:
    html = (
        "<html><head><title>t</title><script>steal()</script></head>"
        "<body><p onclick=\"steal()\">Text</p><script>alert(1)</script>"
        "<iframe src=\"https://evil.example\"></iframe></body></html>"
    )
    state = _render(html.encode())

    assert "steal" not in state.html
    assert "alert" not in state.html
    assert "iframe" not in state.html
    assert "<p>Text</p>" in state.html


def test_relative_links_are_resolved_against_the_page() -> None:
    state = _render(b'<p><a href="other.html">next</a> <a href="#top">top</a>'
                    b' <img src="/img/logo.png" alt="logo"></p>')

    soup = BeautifulSoup(state.html, "html.parser")
    links = [a["href"] for a in soup.find_all("a")]
    assert links == ["https://example.com/docs/other.html", "#top"]
    assert soup.find("img")["src"] == "https://example.com/img/logo.png"


def test_data_uris_only_survive_on_images() -> None:
    cleaned = sanitize_html(
        '<img src="data:image/png;base64,AAAA" alt="x">'
        '<a href="data:text/html;base64,PHNjcmlwdD4=">bad</a>'
        '<a href="javascript:alert(1)">worse</a>'
    )

    soup = BeautifulSoup(cleaned, "html.parser")
    assert soup.find("img")["src"] == "data:image/png;base64,AAAA"
    assert all(not a.get("href") for a in soup.find_all("a"))


def test_sanitising_can_be_disabled() -> None:
    state = _render(b'<p style="color: red">x</p>', config=ViewerConfig(sanitize_html=False))
    assert 'style="color: red"' in state.html


def test_declared_charset_is_honoured() -> None:
    state = _render("<p>Tiếng Việt</p>".encode("utf-16"), "text/html; charset=utf-16")
    assert "Tiếng Việt" in state.html


def test_empty_documents_are_parse_errors() -> None:
    with pytest.raises(ParseError, match="No content found in the document"):
        _render(b"<html><head><script>x()</script></head><body>  </body></html>")
