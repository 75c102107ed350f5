from __future__ import annotations

import pytest

from splitview.config import BrowserConfig, ViewerConfig
from tests.helpers import (
    FakeBrowserPool,
    FakeLauncher,
    FakeProxy,
    FakeSession,
    make_docx,
    make_xlsx,
)


@pytest.fixture
def xlsx_bytes() -> bytes:
    return make_xlsx({
        'Alpha': [['Name', 'Score'], ['Ann', 3.0], ['Bob', 4.5]],
        'Beta': [['City'], ['Hanoi']],
        'Gamma': [['Empty']],
    })


@pytest.fixture
def docx_bytes() -> bytes:
    return make_docx(['Hello world', 'Second paragraph'], heading='Report')


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def fake_proxy() -> FakeProxy:
    return FakeProxy()


@pytest.fixture
def fake_browser_pool() -> FakeBrowserPool:
    return FakeBrowserPool()


@pytest.fixture
def fake_launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def browser_config() -> BrowserConfig:
    return BrowserConfig(pool_size=1, launch_timeout=1.0, navigation_timeout=1.0, load_timeout=1.0)


@pytest.fixture
def viewer_config() -> ViewerConfig:
    return ViewerConfig(proxy_base_url='http://localhost:5001', fetch_timeout=5.0)
