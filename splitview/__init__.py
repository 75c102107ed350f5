"""
splitview - document viewer pipeline

Fetches remote or uploaded documents through a same-origin proxy, picks a
renderer from the content type and turns the bytes into something a browser
frame can display.
"""

__version__ = "1.0.0"

from .config import Config, get_config
from .detector import RenderKind, select_renderer
from .errors import (
    InvalidURLError,
    NetworkError,
    ParseError,
    RenderTimeoutError,
    UnsupportedFormatError,
    ViewerError,
)
from .fetcher import FetchResult, Fetcher, HttpProxyClient, LocalProxyClient
from .renderers import get_renderer
from .viewer import Viewer

__all__ = [
    "Config",
    "get_config",
    "RenderKind",
    "select_renderer",
    "get_renderer",
    "FetchResult",
    "Fetcher",
    "HttpProxyClient",
    "LocalProxyClient",
    "Viewer",
    "ViewerError",
    "NetworkError",
    "UnsupportedFormatError",
    "ParseError",
    "RenderTimeoutError",
    "InvalidURLError",
]
