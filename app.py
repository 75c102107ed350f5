#!/usr/bin/env python3
"""
Entry point for deployment platforms
Platforms look for the Flask app at the repository root: ``from app import app``
"""

from splitview_api.app import create_app, main

app = create_app()

if __name__ == '__main__':
    main()
