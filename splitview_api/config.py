#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration module for the splitview proxy server
Centralized configuration management
"""

import os
import logging
from pathlib import Path
from typing import Dict, Any
from logging.handlers import RotatingFileHandler

from splitview.config import BrowserConfig, ViewerConfig, _env_bool, get_config


class Config:
    """Main configuration class"""

    # Project Configuration
    PROJECT_ROOT = Path(__file__).resolve().parents[1]

    # Flask Configuration
    DEBUG = _env_bool('FLASK_DEBUG', False)
    TESTING = False

    # API Configuration
    API_HOST = os.environ.get('API_HOST', '0.0.0.0')
    API_PORT = int(os.environ.get('PORT', os.environ.get('API_PORT', '5001')))
    PUBLIC_URL = os.environ.get('PUBLIC_URL', f'http://localhost:{API_PORT}')

    # Front-end build served at / when present
    STATIC_BUILD_DIR = Path(os.environ.get(
        'STATIC_BUILD_DIR', str(PROJECT_ROOT / 'build')))

    # Upload Configuration
    MAX_UPLOAD_MB = int(os.environ.get('MAX_UPLOAD_MB', '20'))
    ALLOWED_UPLOAD_TYPES = {
        'application/pdf',
        'text/csv',
        'application/vnd.ms-excel',
        'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        'application/msword',
        'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
        'application/vnd.ms-powerpoint',
        'application/vnd.openxmlformats-officedocument.presentationml.presentation',
        'image/jpeg',
        'image/png',
    }

    # CORS Configuration; entries with regex characters are matched as patterns
    ALLOWED_ORIGINS = [
        'http://localhost:3000',
        'http://localhost:3001',
        'http://localhost:5173',
        r'https://.*\.vercel\.app',
    ] + [o.strip() for o in os.environ.get('EXTRA_ALLOWED_ORIGINS', '').split(',') if o.strip()]

    # Viewer instances kept in memory
    MAX_VIEWERS = int(os.environ.get('MAX_VIEWERS', '64'))

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    LOG_DIR = PROJECT_ROOT / 'logs'
    LOG_FILE = LOG_DIR / 'splitview_api.log'
    LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
    LOG_TO_FILE = _env_bool('LOG_TO_FILE', True)

    @classmethod
    def max_upload_bytes(cls) -> int:
        return cls.MAX_UPLOAD_MB * 1024 * 1024

    @classmethod
    def viewer_config(cls) -> ViewerConfig:
        """Viewer settings; the proxy guidance points at this server."""
        base = get_config().viewer
        return ViewerConfig(
            proxy_base_url=cls.PUBLIC_URL,
            fetch_timeout=base.fetch_timeout,
            sanitize_html=base.sanitize_html,
            max_csv_rows=base.max_csv_rows,
            user_agent=base.user_agent,
        )

    @classmethod
    def browser_config(cls) -> BrowserConfig:
        return get_config().browser

    @classmethod
    def setup_logging(cls):
        """Setup logging configuration with rotation"""
        root = logging.getLogger()
        for h in list(root.handlers):
            root.removeHandler(h)

        handlers = [logging.StreamHandler()]
        if cls.LOG_TO_FILE:
            cls.LOG_DIR.mkdir(parents=True, exist_ok=True)
            handlers.append(RotatingFileHandler(
                cls.LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding='utf-8'
            ))

        logging.basicConfig(
            level=getattr(logging, cls.LOG_LEVEL, logging.INFO),
            format=cls.LOG_FORMAT,
            handlers=handlers
        )

        # Quiet chatty libraries
        for lib in ['werkzeug', 'urllib3', 'requests', 'playwright', 'asyncio']:
            logging.getLogger(lib).setLevel(logging.WARNING)

        return logging.getLogger(__name__)

    @classmethod
    def get_config_dict(cls) -> Dict[str, Any]:
        """Get configuration as dictionary (safe to expose through the API)"""
        browser = cls.browser_config()
        return {
            'public_url': cls.PUBLIC_URL,
            'max_upload_mb': cls.MAX_UPLOAD_MB,
            'allowed_upload_types': sorted(cls.ALLOWED_UPLOAD_TYPES),
            'max_viewers': cls.MAX_VIEWERS,
            'browser_pool_size': browser.pool_size,
            'browser_timeouts': {
                'launch': browser.launch_timeout,
                'navigation': browser.navigation_timeout,
                'load': browser.load_timeout,
            },
            'debug': cls.DEBUG,
        }

    @classmethod
    def allowed_upload(cls, mimetype: str) -> bool:
        return mimetype in cls.ALLOWED_UPLOAD_TYPES


# Global config instance
config = Config()
