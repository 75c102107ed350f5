"""
Interaction bridge between rendered content and the host page.

Link clicks inside rendered HTML are not followed in place; they are posted
to the parent browsing context as ``{type: 'linkClick', url}`` so the host
can feed the URL back into the fetch pipeline.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

LINK_CLICK = 'linkClick'

# Attributes that hold a URL worth resolving against the source page.
LINK_ATTRIBUTES = {'a': 'href', 'img': 'src'}


@dataclass(frozen=True)
class LinkClickMessage:
    url: str

    def to_payload(self) -> Dict[str, str]:
        return {'type': LINK_CLICK, 'url': self.url}


def parse_message(payload: Any) -> Optional[LinkClickMessage]:
    """Validate a cross-context message; None unless it is an http(s) link click."""
    if not isinstance(payload, dict) or payload.get('type') != LINK_CLICK:
        return None
    url = payload.get('url')
    if not isinstance(url, str) or urlparse(url).scheme not in ('http', 'https'):
        logger.warning(f"Ignoring link click with unusable URL: {url!r}")
        return None
    return LinkClickMessage(url)


def absolutize_links(html_content: str, base_url: Optional[str]) -> str:
    """Resolve relative href/src values against the page the HTML came from."""
    if not base_url or urlparse(base_url).scheme not in ('http', 'https'):
        return html_content

    soup = BeautifulSoup(html_content, 'html.parser')
    for tag_name, attribute in LINK_ATTRIBUTES.items():
        for tag in soup.find_all(tag_name):
            value = tag.get(attribute)
            if not value or value.startswith('#'):
                continue
            tag[attribute] = urljoin(base_url, value)
    return str(soup)


_BRIDGE_TEMPLATE = """(function () {
  var container = document.getElementById(%(container)s);
  if (!container) { return; }
  function onClick(event) {
    var link = event.target.closest ? event.target.closest('a') : null;
    if (!link || !link.href || !container.contains(link)) { return; }
    event.preventDefault();
    window.parent.postMessage({type: %(kind)s, url: link.href}, %(origin)s);
  }
  container.addEventListener('click', onClick, true);
  window.addEventListener('pagehide', function () {
    container.removeEventListener('click', onClick, true);
  });
})();"""


def bridge_script(container_id: str, target_origin: str = '*') -> str:
    """JavaScript that forwards link clicks in ``container_id`` to the parent window."""
    return _BRIDGE_TEMPLATE % {
        'container': json.dumps(container_id),
        'kind': json.dumps(LINK_CLICK),
        'origin': json.dumps(target_origin),
    }
