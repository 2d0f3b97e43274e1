#!/usr/bin/env python3
"""
Packcheck - checkout entrypoint.

Runs the CLI without installing the package.

Usage:
    python packcheck.py validate
    python packcheck.py validate MyGame.uproject ./out [Android|Linux]
    python packcheck.py serve
    python packcheck.py --version
"""

import sys
from pathlib import Path

# =============================================================================
# Path Setup
# =============================================================================

# Ensure we can import from backend
PACKCHECK_ROOT = Path(__file__).parent.resolve()
BACKEND_DIR = PACKCHECK_ROOT / "backend"

if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from cli import main

if __name__ == "__main__":
    main()
