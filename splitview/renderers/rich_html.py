"""
Rich HTML rendering for Word documents and HTML pages.
"""

import logging

from ..bridge import absolutize_links
from ..converters import docx_to_html, sanitize_html
from ..detector import looks_like_ole, looks_like_zip
from ..errors import ParseError, UnsupportedFormatError
from ..fetcher import FetchResult
from ..state import RichHTML
from .base import BaseRenderer, RenderContext, decode_text

logger = logging.getLogger(__name__)


class RichHTMLRenderer(BaseRenderer):
    """
    Displays converted or served HTML.

    The proxy normally converts .docx before it gets here; uploads read from a
    blob arrive as raw OOXML and are converted on the spot.
    """

    def render(self, result: FetchResult, context: RenderContext) -> RichHTML:
        data = result.data
        if looks_like_zip(data):
            html_content = docx_to_html(data, result.url)
        elif looks_like_ole(data):
            raise UnsupportedFormatError(
                'Legacy Word documents cannot be rendered directly. Please download to view.',
                result.url, content_type=result.content_type)
        else:
            html_content = decode_text(data, result.content_type)

        html_content = absolutize_links(html_content, result.url)
        if self.config.sanitize_html:
            html_content = sanitize_html(html_content)

        if not html_content.strip():
            raise ParseError('No content found in the document', result.url)

        logger.info(f"Rendered {len(html_content)} characters of HTML from {result.url}")
        return RichHTML(html_content)
