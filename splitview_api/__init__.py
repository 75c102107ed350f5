"""
splitview proxy server: Flask application hosting the proxy, upload and viewer endpoints
"""

from .app import create_app
from .config import Config, config
from .registry import ViewerRegistry

__all__ = ['create_app', 'Config', 'config', 'ViewerRegistry']
