# -*- coding: utf-8 -*-
"""
scripts/build_font_database.py

Builds the reference font catalog used by FontAlike.

Downloads one file per Google Fonts family, extracts its feature vector with
the same code the matcher uses, and writes the compact JSON catalog to the
application data directory. Interrupted runs resume from the progress file.

Usage:
    GOOGLE_FONTS_API_KEY=your_key python scripts/build_font_database.py
    python scripts/build_font_database.py --api-key your_key --delay 0.2
"""

import sys
from pathlib import Path

# --- Path Setup ---
# Allow running from a source checkout without installing the package.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if SRC_DIR.is_dir() and str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from fontalike.core.catalog_builder import main  # noqa: E402


if __name__ == "__main__":
    sys.exit(main())
