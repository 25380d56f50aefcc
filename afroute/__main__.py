"""afroute CLI entry point: python -m afroute"""

from __future__ import annotations

import sys

from afroute.cli import main

if __name__ == "__main__":
    sys.exit(main())
