"""
splitview CLI Entry Point

Usage:
    python -m splitview --input https://example.com/report.xlsx
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
