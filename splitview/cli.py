"""
Command-line interface for splitview.

Runs the fetch-and-render pipeline for one URL or local file and reports
what the viewer would display.
"""

import argparse
import json
import logging
import mimetypes
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from .browser import BrowserPool
from .config import get_config
from .detector import DOCX_MIME, PPTX_MIME, XLSX_MIME
from .fetcher import HttpProxyClient, LocalProxyClient
from .proxy import ProxyService
from .state import Download, Embed, Error, RenderState, RichHTML, Table, describe
from .viewer import Viewer

logger = logging.getLogger(__name__)

# Not every platform's mime.types knows the OOXML extensions.
OFFICE_TYPES = {
    '.xlsx': XLSX_MIME,
    '.docx': DOCX_MIME,
    '.pptx': PPTX_MIME,
    '.xls': 'application/vnd.ms-excel',
    '.doc': 'application/msword',
    '.ppt': 'application/vnd.ms-powerpoint',
}


def setup_logging(level: str = 'INFO', format_type: str = 'text') -> None:
    """Setup logging configuration."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type.lower() == 'json':
        class JSONFormatter(logging.Formatter):
            def format(self, record):
                log_entry = {
                    'timestamp': self.formatTime(record),
                    'level': record.levelname,
                    'logger': record.name,
                    'message': record.getMessage(),
                }
                if record.exc_info:
                    log_entry['exception'] = self.formatException(record.exc_info)
                return json.dumps(log_entry)

        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.addHandler(handler)


def guess_content_type(path: Path) -> str:
    office_type = OFFICE_TYPES.get(path.suffix.lower())
    if office_type:
        return office_type
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type or 'application/octet-stream'


def inspect_target(viewer: Viewer, target: str, sheet: Optional[str] = None) -> RenderState:
    """
    Load a URL or local file into ``viewer``.

    Args:
        viewer: Viewer instance to drive
        target: http(s) URL, blob reference or local file path
        sheet: Sheet to activate when the result is a table

    Returns:
        The viewer's resulting state
    """
    path = Path(target)
    if '://' not in target and path.is_file():
        logger.info(f"Opening local file {path}")
        state = viewer.open_upload(path.read_bytes(), guess_content_type(path), path.name)
    else:
        state = viewer.load(target)

    if sheet is not None:
        state = viewer.select_sheet(sheet)
    return state


def write_output(viewer: Viewer, state: RenderState, output: Path) -> bool:
    """Write the displayable part of ``state``; returns False when there is none."""
    if isinstance(state, Table):
        output.write_text(state.active_html, encoding='utf-8')
    elif isinstance(state, RichHTML):
        output.write_text(state.html, encoding='utf-8')
    elif isinstance(state, (Embed, Download)):
        blob = viewer.blobs.get(state.url)
        if blob is None:
            return False
        output.write_bytes(blob.data)
    else:
        return False
    return True


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        description='splitview - fetch a document through the proxy and report how it renders',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Inspect a remote spreadsheet through a running proxy
  python -m splitview --input https://example.com/report.xlsx --proxy http://localhost:5001

  # Render a local CSV and write the table fragment
  python -m splitview --input data.csv --output table.html

  # Render a page without a proxy server, using a local headless browser
  python -m splitview --input https://example.com --local
        """
    )

    parser.add_argument(
        '--input', '-i',
        required=True,
        help='URL or path to a local file'
    )

    parser.add_argument(
        '--output', '-o',
        help='Write the rendered fragment (or raw bytes for embeds/downloads) here'
    )

    parser.add_argument(
        '--sheet',
        help='Sheet to activate for spreadsheets'
    )

    parser.add_argument(
        '--proxy',
        help='Proxy base URL (default: SPLITVIEW_PROXY_URL or http://localhost:5001)'
    )

    parser.add_argument(
        '--local',
        action='store_true',
        help='Run the proxy in-process instead of calling a proxy server'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='WARNING',
        help='Logging level (default: WARNING)'
    )

    parser.add_argument(
        '--log-format',
        choices=['text', 'json'],
        default='text',
        help='Log format (default: text)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    log_level = 'DEBUG' if args.verbose else args.log_level
    setup_logging(log_level, args.log_format)

    config = get_config()
    viewer_config = config.viewer
    if args.proxy:
        viewer_config = replace(viewer_config, proxy_base_url=args.proxy.rstrip('/'))

    pool = None
    try:
        if args.local:
            pool = BrowserPool(config.browser)
            proxy = LocalProxyClient(ProxyService(pool, viewer_config))
        else:
            proxy = HttpProxyClient(viewer_config.proxy_base_url, timeout=viewer_config.fetch_timeout)

        viewer = Viewer(proxy, viewer_config)
        try:
            state = inspect_target(viewer, args.input, args.sheet)
        except (KeyError, ValueError) as e:
            logger.error(f"Cannot select sheet {args.sheet!r}: {e}")
            return 1

        print(json.dumps(describe(state), indent=2, ensure_ascii=False))

        if args.output:
            if write_output(viewer, state, Path(args.output)):
                print(f"[OK] Wrote {args.output}")
            else:
                logger.warning("Nothing to write for this state")

        return 1 if isinstance(state, Error) else 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    finally:
        if pool is not None:
            pool.close()


if __name__ == '__main__':
    sys.exit(main())
