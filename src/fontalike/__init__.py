"""
FontAlike Application Package.

This package finds free, visually similar alternatives for commercial or
otherwise unavailable fonts. It contains the binary font decoder, the feature
extractor, the reference catalog and the matching cascade, plus the service
and command line that tie them together.
"""

__version__ = "0.1.0"

from .app import MatchRequest, MatchService
from .core.font_catalog import FontCatalog, FontCategory, FontRecord
from .core.font_matcher import FontMatcher, MatchMethod, MatchReport, MatchResult

# Define the public API of the package for 'from fontalike import *'
__all__ = [
    "FontCatalog",
    "FontCategory",
    "FontMatcher",
    "FontRecord",
    "MatchMethod",
    "MatchReport",
    "MatchRequest",
    "MatchResult",
    "MatchService",
]
