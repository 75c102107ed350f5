"""
Renderer factory and registry for splitview.

Provides a unified interface to get the renderer for any render kind
selected by the dispatcher.
"""

import logging
from typing import Dict, List, Optional, Type

from ..config import ViewerConfig
from ..detector import RenderKind
from .base import BaseRenderer, RenderContext, decode_text
from .embed import DownloadRenderer, ImageRenderer, PDFRenderer, PresentationRenderer
from .rich_html import RichHTMLRenderer
from .table import CSVRenderer, SpreadsheetRenderer

logger = logging.getLogger(__name__)

# Registry of available renderers
RENDERER_REGISTRY: Dict[RenderKind, Type[BaseRenderer]] = {
    RenderKind.PDF: PDFRenderer,
    RenderKind.IMAGE: ImageRenderer,
    RenderKind.SPREADSHEET: SpreadsheetRenderer,
    RenderKind.CSV: CSVRenderer,
    RenderKind.RICH_HTML: RichHTMLRenderer,
    RenderKind.PRESENTATION: PresentationRenderer,
    RenderKind.DOWNLOAD: DownloadRenderer,
}


def get_renderer(kind: RenderKind, config: Optional[ViewerConfig] = None) -> BaseRenderer:
    """
    Get the renderer for a render kind.

    Args:
        kind: Kind chosen by ``select_renderer``
        config: Optional viewer configuration

    Returns:
        Renderer instance; unknown kinds get the download renderer
    """
    renderer_class = RENDERER_REGISTRY.get(kind)
    if renderer_class is None:
        logger.warning(f"No renderer registered for {kind}, using download renderer")
        renderer_class = DownloadRenderer

    logger.debug(f"Using {renderer_class.__name__} for render kind: {kind}")
    return renderer_class(config)


def register_renderer(kind: RenderKind, renderer_class: Type[BaseRenderer]) -> None:
    """
    Register a renderer for a render kind.

    Args:
        kind: Render kind to handle
        renderer_class: Renderer class that inherits from BaseRenderer
    """
    if not issubclass(renderer_class, BaseRenderer):
        raise ValueError("Renderer class must inherit from BaseRenderer")

    RENDERER_REGISTRY[kind] = renderer_class
    logger.info(f"Registered renderer {renderer_class.__name__} for render kind: {kind}")


def get_supported_kinds() -> List[str]:
    return [kind.value for kind in RENDERER_REGISTRY]


__all__ = [
    'BaseRenderer',
    'RenderContext',
    'decode_text',
    'get_renderer',
    'register_renderer',
    'get_supported_kinds',
    'RENDERER_REGISTRY',
]
