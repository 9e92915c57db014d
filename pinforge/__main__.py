"""
PinForge — entry point.

Usage:
    python -m pinforge allocate project.json --out build/
    python -m pinforge list sensors
    python -m pinforge serve --port 3000
"""

import sys

from pinforge.cli import main


if __name__ == "__main__":
    sys.exit(main())
