# -*- coding: utf-8 -*-
"""
The Core Processing Package for FontAlike.

This package encapsulates the matching pipeline, from raw font bytes to a
ranked list of free alternatives:
- `font_decoder`: Parses TTF/OTF/WOFF/WOFF2 buffers with fontTools.
- `feature_extractor`: Reduces a decoded font to its 15-dimension feature vector.
- `similarity`: Weighted distance, similarity percentage, nearest neighbours.
- `font_catalog`: Loads and shares the reference catalog.
- `name_overrides`: Curated alternatives for well-known commercial families.
- `font_matcher`: The matching cascade.
- `catalog_builder`: Offline construction of the catalog.
"""

from .feature_extractor import FEATURE_NAMES, extract_features, extract_features_from_bytes
from .font_catalog import CatalogStore, FontCatalog, FontCategory, FontRecord, load_catalog
from .font_decoder import DecodedFont, decode_font
from .font_matcher import FontMatcher, MatchMethod, MatchReport, MatchResult
from .similarity import FEATURE_WEIGHTS, feature_distance, find_similar

__all__ = [
    "CatalogStore",
    "DecodedFont",
    "FEATURE_NAMES",
    "FEATURE_WEIGHTS",
    "FontCatalog",
    "FontCategory",
    "FontMatcher",
    "FontRecord",
    "MatchMethod",
    "MatchReport",
    "MatchResult",
    "decode_font",
    "extract_features",
    "extract_features_from_bytes",
    "feature_distance",
    "find_similar",
    "load_catalog",
]
