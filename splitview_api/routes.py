#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Routes module for the splitview proxy server
API endpoints and route handlers
"""

import datetime
import logging
from io import BytesIO
from typing import Union

from flask import Flask, Response, abort, jsonify, redirect, render_template, request, send_file, url_for
from werkzeug.exceptions import InternalServerError, RequestEntityTooLarge

from splitview import __version__
from splitview.blobstore import BLOB_SCHEME, blob_id, is_blob_url
from splitview.bridge import bridge_script
from splitview.converters import docx_to_html
from splitview.detector import DOCX_MIME, select_renderer
from splitview.errors import InvalidURLError, ViewerError
from splitview.proxy import HTML_CONTENT_TYPE, ProxyService
from splitview.renderers import get_supported_kinds
from splitview.state import describe
from splitview.viewer import Viewer

from .registry import ViewerRegistry
from .utils import content_disposition, make_nonce, validate_upload

logger = logging.getLogger(__name__)

CONTENT_CONTAINER_ID = 'splitview-content'


def _csp(nonce: str) -> str:
    return (
        "default-src 'self'; "
        f"script-src 'nonce-{nonce}'; "
        f"style-src 'self' 'nonce-{nonce}'; "
        "img-src 'self' data: http: https:; "
        "object-src 'self'; "
        "base-uri 'none'; "
        "form-action 'self'"
    )


def _wants_json() -> bool:
    return request.is_json or request.accept_mimetypes.best == 'application/json'


def register_routes(app: Flask, settings, proxy_service: ProxyService, registry: ViewerRegistry):
    """Register all routes with the Flask app"""

    def viewer_or_404(viewer_id: str) -> Viewer:
        viewer = registry.get(viewer_id)
        if viewer is None:
            logger.warning(f"Unknown viewer {viewer_id}")
            response = jsonify({'error': 'Viewer not found'})
            response.status_code = 404
            abort(response)
        return viewer

    def blob_href(viewer: Viewer, url: str, download: bool = False) -> str:
        if not is_blob_url(url):
            return url
        params = {'download': 1} if download else {}
        return url_for('viewer_blob', viewer_id=viewer.viewer_id, blob_key=blob_id(url), **params)

    def render_viewer(viewer: Viewer) -> Response:
        state = viewer.state
        nonce = make_nonce()
        html = render_template(
            'viewer.html',
            viewer=viewer,
            state=state,
            nonce=nonce,
            container_id=CONTENT_CONTAINER_ID,
            bridge=bridge_script(CONTENT_CONTAINER_ID),
            blob_href=lambda url, download=False: blob_href(viewer, url, download),
        )
        response = Response(html, content_type=HTML_CONTENT_TYPE)
        response.headers['Content-Security-Policy'] = _csp(nonce)
        response.headers['X-Viewer-Id'] = viewer.viewer_id
        return response

    def after_action(viewer: Viewer) -> Union[Response, tuple]:
        if _wants_json():
            return jsonify({'viewer': viewer.viewer_id, 'state': describe(viewer.state)})
        return redirect(url_for('viewer_page', viewer_id=viewer.viewer_id), code=303)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_413(e):  # type: ignore
        return jsonify({'error': 'File too large', 'max_size_mb': settings.MAX_UPLOAD_MB}), 413

    @app.errorhandler(InternalServerError)
    def handle_500(e):  # type: ignore
        logger.error(f"Unhandled error: {getattr(e, 'original_exception', e)}")
        return jsonify({'error': 'Internal server error'}), 500

    @app.route('/api/health', methods=['GET'])
    def health() -> Union[Response, tuple]:
        """Health check endpoint with system information"""
        try:
            return jsonify({
                'status': 'healthy',
                'version': __version__,
                'timestamp': datetime.datetime.now().isoformat(),
                'viewers': len(registry),
                'config': settings.get_config_dict()
            })
        except Exception as e:
            logger.exception("Health check failed")
            return jsonify({'status': 'error', 'error': str(e)}), 500

    @app.route('/api/supported-formats', methods=['GET'])
    def supported_formats() -> Response:
        """Get supported upload types and the renderer each one gets"""
        return jsonify({
            'formats': {mime: select_renderer(mime).value for mime in sorted(settings.ALLOWED_UPLOAD_TYPES)},
            'render_kinds': get_supported_kinds(),
            'max_size_mb': settings.MAX_UPLOAD_MB
        })

    @app.route('/proxy', methods=['GET'])
    def proxy() -> Union[Response, tuple]:
        """Fetch a third-party URL on the viewer's behalf"""
        url = request.args.get('url')
        try:
            proxied = proxy_service.fetch(url)
        except InvalidURLError as e:
            logger.warning(f"Rejected proxy URL {url!r}: {e.message}")
            return jsonify({'error': e.message}), 400
        except ViewerError as e:
            logger.exception(f"Error fetching URL {url}")
            return jsonify({'error': f'Error fetching URL: {e.message}'}), 500

        response = Response(proxied.body, content_type=proxied.content_type)
        response.headers['Content-Disposition'] = 'inline'
        response.call_on_close(proxied.close)
        return response

    @app.route('/upload', methods=['POST'])
    def upload() -> Union[Response, tuple]:
        """Echo an uploaded file back, converting Word documents to HTML"""
        file = request.files.get('file')
        logger.info(f"Upload request: {file.filename if file else None}")

        validation = validate_upload(file, settings.MAX_UPLOAD_MB, settings.ALLOWED_UPLOAD_TYPES)
        if not validation['valid']:
            logger.warning(f"Upload rejected: {validation['error']}")
            body = {k: v for k, v in validation.items() if k != 'valid'}
            return jsonify(body), 413 if 'max_size_mb' in validation else 400

        mimetype = validation['mimetype']
        data = file.read()
        logger.info(f"Processing upload {file.filename} ({validation['file_size_formatted']}, {mimetype})")

        if mimetype == DOCX_MIME:
            try:
                body = docx_to_html(data, file.filename).encode('utf-8')
            except ViewerError as e:
                logger.exception(f"Failed to convert {file.filename}")
                return jsonify({'error': f'Error processing file: {e.message}'}), 500
            content_type = HTML_CONTENT_TYPE
        else:
            body = data
            content_type = mimetype

        response = Response(body, content_type=content_type)
        response.headers['Content-Disposition'] = content_disposition('inline', file.filename)
        return response

    @app.route('/view', methods=['GET'])
    def view() -> Response:
        """Run the pipeline for ``url`` and return the viewer page"""
        viewer = registry.get_or_create(request.args.get('viewer'))
        url = request.args.get('url')
        if url is not None or viewer.url is None:
            viewer.load(url or '')
        if _wants_json():
            return jsonify({'viewer': viewer.viewer_id, 'state': describe(viewer.state)})
        return render_viewer(viewer)

    @app.route('/view/<viewer_id>', methods=['GET'])
    def viewer_page(viewer_id: str) -> Response:
        return render_viewer(viewer_or_404(viewer_id))

    @app.route('/view/<viewer_id>', methods=['DELETE'])
    def delete_viewer(viewer_id: str) -> Union[Response, tuple]:
        if not registry.remove(viewer_id):
            return jsonify({'error': 'Viewer not found'}), 404
        logger.info(f"Viewer {viewer_id} deleted")
        return jsonify({'success': True, 'viewer': viewer_id})

    @app.route('/view/<viewer_id>/state', methods=['GET'])
    def viewer_state(viewer_id: str) -> Response:
        viewer = viewer_or_404(viewer_id)
        return jsonify({
            'viewer': viewer.viewer_id,
            'url': viewer.url,
            'cycle': viewer.cycle,
            'state': describe(viewer.state)
        })

    @app.route('/view/<viewer_id>/reload', methods=['POST'])
    def reload_viewer(viewer_id: str) -> Union[Response, tuple]:
        viewer = viewer_or_404(viewer_id)
        viewer.reload()
        return after_action(viewer)

    @app.route('/view/<viewer_id>/sheet', methods=['POST'])
    def select_sheet(viewer_id: str) -> Union[Response, tuple]:
        viewer = viewer_or_404(viewer_id)
        payload = request.get_json(silent=True) or request.form
        sheet = payload.get('sheet')
        try:
            viewer.select_sheet(sheet)
        except KeyError:
            return jsonify({'error': f'Unknown sheet: {sheet}'}), 400
        except ValueError as e:
            return jsonify({'error': str(e)}), 409
        return after_action(viewer)

    @app.route('/view/<viewer_id>/message', methods=['POST'])
    def viewer_message(viewer_id: str) -> Union[Response, tuple]:
        """Deliver a bridge message (link click) to the viewer"""
        viewer = viewer_or_404(viewer_id)
        state = viewer.handle_message(request.get_json(silent=True))
        if state is None:
            return jsonify({'error': 'Unsupported message'}), 400
        return jsonify({'viewer': viewer.viewer_id, 'state': describe(state)})

    @app.route('/view/<viewer_id>/open', methods=['POST'])
    def open_upload(viewer_id: str) -> Union[Response, tuple]:
        """Open an uploaded file in a viewer (a new one when the id is unknown)"""
        file = request.files.get('file')
        validation = validate_upload(file, settings.MAX_UPLOAD_MB, settings.ALLOWED_UPLOAD_TYPES)
        if not validation['valid']:
            body = {k: v for k, v in validation.items() if k != 'valid'}
            return jsonify(body), 413 if 'max_size_mb' in validation else 400

        viewer = registry.get_or_create(viewer_id)
        viewer.open_upload(file.read(), validation['mimetype'], file.filename)
        return after_action(viewer)

    @app.route('/view/<viewer_id>/blob/<blob_key>', methods=['GET'])
    def viewer_blob(viewer_id: str, blob_key: str) -> Union[Response, tuple]:
        """Serve the content behind one of the viewer's object URLs"""
        viewer = viewer_or_404(viewer_id)
        blob = viewer.blobs.get(BLOB_SCHEME + blob_key)
        if blob is None:
            return jsonify({'error': 'Object URL revoked or unknown'}), 404

        as_attachment = request.args.get('download') in ('1', 'true', 'yes')
        response = send_file(
            BytesIO(blob.data),
            mimetype=blob.content_type,
            as_attachment=as_attachment,
            download_name=blob.filename or blob_key,
        )
        response.headers['Cache-Control'] = 'no-store'
        return response

    @app.route('/', defaults={'path': ''}, methods=['GET'])
    @app.route('/<path:path>', methods=['GET'])
    def serve_frontend(path: str) -> Union[Response, tuple]:
        """Serve the front-end build with SPA fallback"""
        root = settings.STATIC_BUILD_DIR.resolve()
        target = (root / path).resolve()
        if root not in target.parents and target != root:
            return jsonify({'error': 'Forbidden'}), 403
        if target.is_file():
            resp = send_file(str(target))
            resp.headers['Cache-Control'] = 'public, max-age=300'
            return resp
        index_path = root / 'index.html'
        if index_path.is_file():
            resp = send_file(str(index_path))
            resp.headers['Cache-Control'] = 'public, max-age=60'
            return resp
        return jsonify({'error': 'Frontend not found'}), 404

    # Route handlers are reached through Flask's decorators
    _ = (handle_413, handle_500, health, supported_formats, proxy, upload, view, viewer_page,
         delete_viewer, viewer_state, reload_viewer, select_sheet, viewer_message, open_upload,
         viewer_blob, serve_frontend)
