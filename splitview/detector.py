"""
Content-type dispatch for splitview.

Maps a declared MIME type to the renderer that can display it. Matching is
substring based, so parameters such as ``; charset=utf-8`` and vendor
suffixes do not get in the way.
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


class RenderKind(str, Enum):
    PDF = 'pdf'
    IMAGE = 'image'
    SPREADSHEET = 'spreadsheet'
    CSV = 'csv'
    RICH_HTML = 'html'
    PRESENTATION = 'presentation'
    DOWNLOAD = 'download'


DOCX_MIME = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
XLSX_MIME = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
PPTX_MIME = 'application/vnd.openxmlformats-officedocument.presentationml.presentation'

# Checked top to bottom; the first matching row wins.
MIME_DISPATCH_TABLE: List[Tuple[RenderKind, Tuple[str, ...]]] = [
    (RenderKind.PDF, ('application/pdf',)),
    (RenderKind.IMAGE, ('image/',)),
    (RenderKind.SPREADSHEET, (XLSX_MIME, 'application/vnd.ms-excel')),
    (RenderKind.CSV, ('text/csv',)),
    (RenderKind.RICH_HTML, ('application/msword', DOCX_MIME, 'text/html')),
    (RenderKind.PRESENTATION, ('application/vnd.ms-powerpoint', PPTX_MIME)),
]

INLINE_KINDS = frozenset({
    RenderKind.PDF, RenderKind.IMAGE, RenderKind.SPREADSHEET,
    RenderKind.CSV, RenderKind.RICH_HTML,
})


def select_renderer(content_type: Optional[str]) -> RenderKind:
    """
    Select the render strategy for a content type.

    Args:
        content_type: Declared MIME type, possibly with parameters

    Returns:
        RenderKind of the first matching dispatch row, DOWNLOAD otherwise
    """
    if not content_type:
        return RenderKind.DOWNLOAD

    lowered = content_type.lower()
    for kind, needles in MIME_DISPATCH_TABLE:
        if any(needle in lowered for needle in needles):
            logger.debug(f"Content type {content_type!r} dispatched to {kind.value}")
            return kind

    logger.debug(f"No renderer for {content_type!r}, offering download")
    return RenderKind.DOWNLOAD


def is_renderable(kind: RenderKind) -> bool:
    """True when the kind displays inline rather than as a download link."""
    return kind in INLINE_KINDS


def looks_like_zip(data: bytes) -> bool:
    """OOXML containers (docx, xlsx, pptx) are zip files."""
    return data[:4] == b'PK\x03\x04'


def looks_like_ole(data: bytes) -> bool:
    """Legacy Office formats (doc, xls, ppt) use the OLE2 compound file header."""
    return data[:8] == b'\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1'
