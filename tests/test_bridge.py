from __future__ import annotations

import pytest

from splitview.bridge import LINK_CLICK, LinkClickMessage, absolutize_links, bridge_script, parse_message


def test_link_click_payload_shape() -> None:
    assert LinkClickMessage("https://example.com/a").to_payload() == {
        "type": "linkClick",
        "url": "https://example.com/a",
    }


def test_parse_message_accepts_http_link_clicks() -> None:
    message = parse_message({"type": LINK_CLICK, "url": "https://example.com/next"})
    assert message == LinkClickMessage("https://example.com/next")


@pytest.mark.parametrize(
    "payload",
    [
        None,
        "linkClick",
        {"type": "resize", "url": "https://example.com"},
        {"type": LINK_CLICK},
        {"type": LINK_CLICK, "url": 42},
        {"type": LINK_CLICK, "url": "javascript:alert(1)"},
        {"type": LINK_CLICK, "url": "/relative/path"},
    ],
)
def test_parse_message_ignores_everything_else(payload) -> None:
    assert parse_message(payload) is None


def test_absolutize_links_needs_an_http_base() -> None:
    html = '<a href="next.html">n</a>'
    assert absolutize_links(html, None) == html
    assert absolutize_links(html, "blob:1234") == html
    assert 'href="https://example.com/next.html"' in absolutize_links(html, "https://example.com/index.html")


def test_absolutize_links_keeps_absolute_urls() -> None:
    html = '<a href="https://other.example/x">x</a>'
    assert 'href="https://other.example/x"' in absolutize_links(html, "https://example.com/")


def test_bridge_script_targets_container_and_posts_to_parent() -> None:
    script = bridge_script("content-1", target_origin="https://host.example")

    assert 'document.getElementById("content-1")' in script
    assert "window.parent.postMessage({type: \"linkClick\", url: link.href}, \"https://host.example\")" in script
    assert "preventDefault" in script
    assert "removeEventListener" in script
