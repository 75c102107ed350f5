"""
Document conversion and HTML sanitising.

Word documents are converted with mammoth; untrusted HTML is cleaned with
BeautifulSoup (drop active elements) and bleach (allow-list) before it is
injected into a viewer page.
"""

import io
import logging
from typing import Optional

import bleach
import mammoth
from bs4 import BeautifulSoup

from .errors import ParseError

logger = logging.getLogger(__name__)

# Elements removed together with their content before allow-listing.
DROPPED_ELEMENTS = ['script', 'style', 'noscript', 'iframe', 'object', 'embed',
                    'head', 'template', 'frame', 'frameset']

ALLOWED_TAGS = {
    'a', 'abbr', 'b', 'blockquote', 'br', 'caption', 'cite', 'code', 'col',
    'colgroup', 'dd', 'del', 'div', 'dl', 'dt', 'em', 'figcaption', 'figure',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'hr', 'i', 'img', 'ins', 'li', 'mark',
    'ol', 'p', 'pre', 's', 'small', 'span', 'strong', 'sub', 'sup', 'table',
    'tbody', 'td', 'tfoot', 'th', 'thead', 'tr', 'u', 'ul',
}

ALLOWED_ATTRIBUTES = {
    'a': {'href', 'title', 'name'},
    'img': {'src', 'alt', 'title', 'width', 'height'},
    'td': {'colspan', 'rowspan'},
    'th': {'colspan', 'rowspan', 'scope'},
    'col': {'span'},
    'colgroup': {'span'},
    '*': {'class', 'id', 'title'},
}

ALLOWED_PROTOCOLS = {'http', 'https', 'mailto', 'data'}


def _allow_attribute(tag: str, name: str, value: str) -> bool:
    if name in ('href', 'src') and value.strip().lower().startswith('data:'):
        # mammoth inlines pictures as data URIs; nothing else may use data:
        return tag == 'img' and name == 'src' and value.strip().lower().startswith('data:image/')
    return name in ALLOWED_ATTRIBUTES.get(tag, ()) or name in ALLOWED_ATTRIBUTES['*']


def docx_to_html(data: bytes, source: Optional[str] = None) -> str:
    """
    Convert a Word (OOXML) document to HTML.

    Args:
        data: Raw .docx bytes
        source: URL or filename, for error messages

    Returns:
        HTML fragment of the document body

    Raises:
        ParseError: If mammoth cannot read the document
    """
    try:
        result = mammoth.convert_to_html(io.BytesIO(data))
    except Exception as e:
        raise ParseError(f"Failed to convert Word document: {e}", source, e)

    for message in result.messages:
        logger.warning(f"Mammoth conversion message: {message}")

    logger.info(f"Converted Word document to {len(result.value)} characters of HTML")
    return result.value


def strip_active_content(html_content: str) -> BeautifulSoup:
    """Parse HTML and remove elements that carry scripts or page chrome."""
    soup = BeautifulSoup(html_content or '', 'html.parser')
    for tag in soup(DROPPED_ELEMENTS):
        tag.decompose()
    return soup


def sanitize_html(html_content: str) -> str:
    """Reduce untrusted HTML to the allow-listed tags, attributes and protocols."""
    soup = strip_active_content(html_content)
    body = soup.body or soup
    fragment = body.decode_contents() if body is not soup else str(soup)
    return bleach.clean(
        fragment,
        tags=ALLOWED_TAGS,
        attributes=_allow_attribute,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )
