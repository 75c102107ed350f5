"""
Configuration management for splitview using dataclasses.

Values come from environment variables (optionally loaded from a .env file)
and are validated when the dataclasses are built.
"""

import os
import logging
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Desktop Chrome UA; some origins refuse unknown clients.
DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'
)


def _env_bool(name: str, default: bool) -> bool:
    val = os.environ.get(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


@dataclass
class BrowserConfig:
    """Headless browser pool settings. Timeouts are in seconds."""

    pool_size: int = 2
    launch_timeout: float = 60.0
    navigation_timeout: float = 60.0
    load_timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        if not (1 <= self.pool_size <= 16):
            raise ValueError('Browser pool size must be between 1 and 16')
        for name in ('launch_timeout', 'navigation_timeout', 'load_timeout'):
            if getattr(self, name) <= 0:
                raise ValueError(f'{name} must be positive')

    @property
    def total_timeout(self) -> float:
        """Upper bound for one render including launch."""
        return self.launch_timeout + self.navigation_timeout + self.load_timeout


@dataclass
class ViewerConfig:
    """Fetch and render settings for viewer instances."""

    proxy_base_url: str = "http://localhost:5001"
    fetch_timeout: float = 30.0
    sanitize_html: bool = True
    max_csv_rows: int = 0  # 0 means unbounded
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        self.proxy_base_url = self.proxy_base_url.rstrip('/')
        if self.fetch_timeout <= 0:
            raise ValueError('Fetch timeout must be positive')
        if self.max_csv_rows < 0:
            raise ValueError('max_csv_rows must be >= 0')


@dataclass
class Config:
    """Main configuration class combining all sub-configurations."""

    viewer: ViewerConfig = field(default_factory=ViewerConfig)
    browser: BrowserConfig = field(default_factory=BrowserConfig)

    @classmethod
    def from_env(cls) -> 'Config':
        """Create configuration from environment variables."""
        return cls(
            viewer=ViewerConfig(
                proxy_base_url=os.getenv('SPLITVIEW_PROXY_URL', 'http://localhost:5001'),
                fetch_timeout=float(os.getenv('SPLITVIEW_FETCH_TIMEOUT', '30')),
                sanitize_html=_env_bool('SPLITVIEW_SANITIZE_HTML', True),
                max_csv_rows=int(os.getenv('SPLITVIEW_MAX_CSV_ROWS', '0')),
                user_agent=os.getenv('SPLITVIEW_USER_AGENT', DEFAULT_USER_AGENT),
            ),
            browser=BrowserConfig(
                pool_size=int(os.getenv('BROWSER_POOL_SIZE', '2')),
                launch_timeout=float(os.getenv('BROWSER_LAUNCH_TIMEOUT', '60')),
                navigation_timeout=float(os.getenv('BROWSER_NAVIGATION_TIMEOUT', '60')),
                load_timeout=float(os.getenv('BROWSER_LOAD_TIMEOUT', '30')),
                user_agent=os.getenv('SPLITVIEW_USER_AGENT', DEFAULT_USER_AGENT),
            ),
        )


_config = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def set_config(config: Config) -> None:
    """Replace the global configuration instance."""
    global _config
    _config = config
