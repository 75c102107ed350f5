"""
Render states for a viewer instance.

A viewer shows exactly one of these at a time. They are immutable; a new
fetch or a sheet switch replaces the state object instead of mutating it.
"""

import re
from dataclasses import dataclass, field, replace
from typing import ClassVar, Dict, List, Optional, Union


def sheet_dom_id(sheet_name: str) -> str:
    """DOM id used for a sheet's table element."""
    return 'sheet-' + re.sub(r'[^a-zA-Z0-9]', '_', sheet_name)


@dataclass(frozen=True)
class Loading:
    kind: ClassVar[str] = 'loading'


@dataclass(frozen=True)
class Error:
    """Error banner. ``fallback_url`` is a download link when one could be obtained."""

    message: str
    fallback_url: Optional[str] = None
    kind: ClassVar[str] = 'error'


@dataclass(frozen=True)
class Table:
    """One or more sheets of HTML tables; only ``active_sheet`` is displayed."""

    sheets: Dict[str, str] = field(default_factory=dict)
    active_sheet: Optional[str] = None
    kind: ClassVar[str] = 'table'

    @property
    def sheet_names(self) -> List[str]:
        return list(self.sheets)

    @property
    def active_html(self) -> str:
        return self.sheets.get(self.active_sheet, '')

    @property
    def active_dom_id(self) -> str:
        return sheet_dom_id(self.active_sheet or '')

    def select(self, sheet_name: str) -> 'Table':
        """Return a copy with another active sheet."""
        if sheet_name not in self.sheets:
            raise KeyError(f"Unknown sheet: {sheet_name}")
        return replace(self, active_sheet=sheet_name)


@dataclass(frozen=True)
class RichHTML:
    html: str
    kind: ClassVar[str] = 'html'


@dataclass(frozen=True)
class Embed:
    """Inline PDF (``embed_kind='pdf'``) or image (``embed_kind='image'``)."""

    embed_kind: str
    url: str
    kind: ClassVar[str] = 'embed'


@dataclass(frozen=True)
class Download:
    url: str
    message: str = 'This file type is not directly renderable. Please download to view.'
    kind: ClassVar[str] = 'download'


RenderState = Union[Loading, Error, Table, RichHTML, Embed, Download]


def describe(state: RenderState) -> Dict[str, object]:
    """Plain-dict summary of a state, used by the CLI and JSON endpoints."""
    summary: Dict[str, object] = {'kind': state.kind}
    if isinstance(state, Error):
        summary.update(message=state.message, fallback_url=state.fallback_url)
    elif isinstance(state, Table):
        summary.update(sheets=state.sheet_names, active_sheet=state.active_sheet)
    elif isinstance(state, RichHTML):
        summary.update(length=len(state.html))
    elif isinstance(state, Embed):
        summary.update(embed_kind=state.embed_kind, url=state.url)
    elif isinstance(state, Download):
        summary.update(url=state.url, message=state.message)
    return summary
