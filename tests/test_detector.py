from __future__ import annotations

import pytest

from splitview.detector import (
    DOCX_MIME,
    PPTX_MIME,
    XLSX_MIME,
    RenderKind,
    is_renderable,
    looks_like_ole,
    looks_like_zip,
    select_renderer,
)
from tests.helpers import OLE_HEADER


@pytest.mark.parametrize(
    "content_type, expected",
    [
        ("application/pdf", RenderKind.PDF),
        ("image/png", RenderKind.IMAGE),
        ("IMAGE/JPEG", RenderKind.IMAGE),
        (XLSX_MIME, RenderKind.SPREADSHEET),
        ("application/vnd.ms-excel", RenderKind.SPREADSHEET),
        ("text/csv; charset=utf-8", RenderKind.CSV),
        ("application/msword", RenderKind.RICH_HTML),
        (DOCX_MIME, RenderKind.RICH_HTML),
        ("text/html; charset=utf-8", RenderKind.RICH_HTML),
        ("application/vnd.ms-powerpoint", RenderKind.PRESENTATION),
        (PPTX_MIME, RenderKind.PRESENTATION),
        ("application/zip", RenderKind.DOWNLOAD),
        ("text/plain", RenderKind.DOWNLOAD),
    ],
)
def test_select_renderer(content_type: str, expected: RenderKind) -> None:
    assert select_renderer(content_type) is expected


@pytest.mark.parametrize("content_type", [None, ""])
def test_missing_content_type_offers_download(content_type) -> None:
    assert select_renderer(content_type) is RenderKind.DOWNLOAD


def test_image_wins_over_anything_but_pdf() -> None:
    assert select_renderer("text/html; profile=image/svg") is RenderKind.IMAGE
    assert select_renderer("text/csv, image/png") is RenderKind.IMAGE
    assert select_renderer("application/pdf, image/png") is RenderKind.PDF


def test_download_kinds_are_not_inline() -> None:
    assert is_renderable(RenderKind.CSV)
    assert not is_renderable(RenderKind.PRESENTATION)
    assert not is_renderable(RenderKind.DOWNLOAD)


def test_container_sniffing() -> None:
    assert looks_like_zip(b"PK\x03\x04rest")
    assert not looks_like_zip(b"a,b,c")
    assert looks_like_ole(OLE_HEADER + b"\x00" * 16)
    assert not looks_like_ole(b"PK\x03\x04")
