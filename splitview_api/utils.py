#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Helpers for the proxy server routes
"""

import secrets
from typing import Any, Dict, Optional
from urllib.parse import quote


def format_file_size(size_bytes: int) -> str:
    """Format file size in human readable format"""
    if size_bytes == 0:
        return "0 B"

    size_names = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    size_float = float(size_bytes)
    while size_float >= 1024 and i < len(size_names) - 1:
        size_float /= 1024.0
        i += 1

    return f"{size_float:.1f} {size_names[i]}"


def upload_mimetype(file) -> str:
    """Declared MIME type of an uploaded file, without parameters."""
    mimetype = getattr(file, 'mimetype', None) or file.content_type or ''
    return mimetype.split(';', 1)[0].strip().lower()


def validate_upload(file, max_size_mb: int, allowed_types: set) -> Dict[str, Any]:
    """
    Validate an uploaded file against the size limit and MIME allow-list.

    Returns:
        Dict with ``valid`` and either ``error`` (plus ``max_size_mb`` when the
        file is too large) or the file's size and type
    """
    if not file or not file.filename:
        return {'valid': False, 'error': 'No file uploaded'}

    mimetype = upload_mimetype(file)
    if mimetype not in allowed_types:
        return {'valid': False, 'error': f'Unsupported file type: {mimetype or "unknown"}'}

    file.seek(0, 2)
    file_size = file.tell()
    file.seek(0)

    if file_size > max_size_mb * 1024 * 1024:
        return {
            'valid': False,
            'error': 'File too large',
            'max_size_mb': max_size_mb
        }

    return {
        'valid': True,
        'mimetype': mimetype,
        'file_size': file_size,
        'file_size_formatted': format_file_size(file_size)
    }


def content_disposition(disposition: str, filename: Optional[str] = None) -> str:
    """``inline``/``attachment`` header value with an RFC 5987 encoded filename."""
    if not filename:
        return disposition
    return f"{disposition}; filename*=UTF-8''{quote(filename)}"


def make_nonce() -> str:
    """Per-response nonce for inline scripts allowed by the CSP."""
    return secrets.token_urlsafe(16)
