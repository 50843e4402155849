"""Entry point for running patchbridge as a module.

Usage:
    python -m patchbridge diff OLD NEW
"""

import sys

from patchbridge.cli import main

if __name__ == "__main__":
    sys.exit(main())
