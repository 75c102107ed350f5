#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
splitview proxy server - Flask Application
Main entry point for the proxy, upload and viewer endpoints.
"""

import atexit
import os
from typing import Optional

from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from splitview.browser import BrowserPool
from splitview.fetcher import LocalProxyClient
from splitview.proxy import ProxyService
from splitview.viewer import Viewer

from .config import Config, config
from .registry import ViewerRegistry
from .routes import register_routes


def create_app(settings: Optional[type] = None, browser_pool=None, session=None) -> Flask:
    """
    Create and configure Flask application

    Args:
        settings: Config class to use (defaults to :class:`Config`)
        browser_pool: Renderer for HTML pages; a :class:`BrowserPool` is started when omitted
        session: requests session shared by the proxy and the download fallback
    """
    settings = settings or Config
    logger = settings.setup_logging()

    app = Flask(__name__)
    app.config.update({
        'MAX_CONTENT_LENGTH': settings.max_upload_bytes(),
        'TESTING': settings.TESTING,
    })

    # Enable ProxyFix for reverse proxy deployment
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=1)

    CORS(app, origins=settings.ALLOWED_ORIGINS, supports_credentials=True)

    if browser_pool is None:
        browser_pool = BrowserPool(settings.browser_config())
        atexit.register(browser_pool.close)

    viewer_config = settings.viewer_config()
    proxy_service = ProxyService(browser_pool, viewer_config, session=session)

    def new_viewer() -> Viewer:
        return Viewer(LocalProxyClient(proxy_service), viewer_config, session=session)

    registry = ViewerRegistry(new_viewer, settings.MAX_VIEWERS)
    atexit.register(registry.close_all)

    app.extensions['splitview'] = {
        'settings': settings,
        'browser_pool': browser_pool,
        'proxy_service': proxy_service,
        'registry': registry,
    }

    register_routes(app, settings, proxy_service, registry)

    if not settings.STATIC_BUILD_DIR.exists():
        logger.warning(f"Static build not found at {settings.STATIC_BUILD_DIR}; only API routes are served")

    logger.info("splitview proxy server created successfully")
    return app


def print_startup_info():
    """Print startup information"""
    browser = config.browser_config()
    print("splitview proxy server")
    print("=" * 50)
    print(f"API Server: http://localhost:{config.API_PORT}")
    print(f"Public URL: {config.PUBLIC_URL}")
    print(f"Static build: {config.STATIC_BUILD_DIR}")
    print(f"Browser pool: {browser.pool_size} worker(s)")
    print(f"Max upload: {config.MAX_UPLOAD_MB}MB")
    print("=" * 50)


def main():
    """Main application entry point"""
    print_startup_info()

    # Disable Flask's automatic .env loading; splitview.config already loaded it
    os.environ['FLASK_SKIP_DOTENV'] = '1'

    app = create_app()

    use_reloader = config.DEBUG and os.environ.get('FLASK_ENV') == 'development'
    app.run(
        host=config.API_HOST,
        port=config.API_PORT,
        debug=config.DEBUG,
        use_reloader=use_reloader,
        threaded=True
    )


if __name__ == '__main__':
    main()
