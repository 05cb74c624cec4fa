# -*- coding: utf-8 -*-
"""
The Utilities Package for FontAlike.

Helpers that support the core pipeline without being part of it.

Modules:
- font_fetcher: Downloads query fonts over HTTP(S) and decodes data: URLs.
"""

from .font_fetcher import fetch_font_bytes

__all__ = [
    "fetch_font_bytes",
]
