# -*- coding: utf-8 -*-
"""
src/fontalike/core/name_overrides.py

Hand-picked free alternatives for iconic commercial typefaces. For these
families a curated list beats anything the feature vectors can produce, so
the matcher consults this table before touching the catalog.
"""

import re
from typing import Dict, List, NamedTuple, Optional

from .font_catalog import normalize_family


class OverrideAlternative(NamedTuple):
    family: str
    reason: str


NAME_OVERRIDES: Dict[str, List[OverrideAlternative]] = {
    "helvetica": [
        OverrideAlternative("Inter", "Modern Helvetica successor for screens"),
        OverrideAlternative("Roboto", "Neutral grotesque, very close letterforms"),
        OverrideAlternative("Source Sans 3", "Clean neutral sans by Adobe"),
        OverrideAlternative("Public Sans", "Open-source Helvetica alternative"),
        OverrideAlternative("DM Sans", "Clean geometric-humanist hybrid"),
    ],
    "helvetica neue": [
        OverrideAlternative("Inter", "Modern Helvetica successor with optical sizing"),
        OverrideAlternative("DM Sans", "Slightly geometric, very clean"),
        OverrideAlternative("Public Sans", "Open-source Helvetica Neue alternative"),
        OverrideAlternative("Roboto", "Neutral grotesque, similar proportions"),
        OverrideAlternative("Source Sans 3", "Highly readable neutral sans"),
    ],
    "sf pro": [
        OverrideAlternative("Inter", "Closest free match, designed for UI like SF Pro"),
        OverrideAlternative("DM Sans", "Clean geometric with similar x-height"),
        OverrideAlternative("Plus Jakarta Sans", "Modern geometric display sans"),
        OverrideAlternative("Albert Sans", "Geometric with similar rounded terminals"),
        OverrideAlternative("Public Sans", "Neutral UI-focused sans"),
    ],
    "proxima nova": [
        OverrideAlternative("Montserrat", "Known free Proxima Nova alternative"),
        OverrideAlternative("Nunito Sans", "Similar proportions and x-height"),
        OverrideAlternative("Poppins", "Geometric with similar character"),
        OverrideAlternative("Raleway", "Similar geometric weight range"),
        OverrideAlternative("Work Sans", "Grotesque-geometric hybrid"),
    ],
    "gotham": [
        OverrideAlternative("Montserrat", "Made as a free Gotham alternative"),
        OverrideAlternative("Raleway", "Similar geometric proportions"),
        OverrideAlternative("Poppins", "Geometric with similar boldness"),
        OverrideAlternative("Work Sans", "Wide geometric grotesque"),
        OverrideAlternative("Plus Jakarta Sans", "Modern geometric sans"),
    ],
    "futura": [
        OverrideAlternative("Jost", "Directly inspired by Futura's geometry"),
        OverrideAlternative("Poppins", "Geometric with similar round shapes"),
        OverrideAlternative("Nunito", "Rounded geometric like Futura"),
        OverrideAlternative("Quicksand", "Geometric rounded sans"),
        OverrideAlternative("Montserrat", "Geometric with similar uppercase"),
    ],
    "avenir": [
        OverrideAlternative("Nunito Sans", "Very close match in feel and proportions"),
        OverrideAlternative("Nunito", "Rounded geometric like Avenir"),
        OverrideAlternative("Poppins", "Geometric with matching warmth"),
        OverrideAlternative("Outfit", "Modern geometric, similar feel"),
        OverrideAlternative("Montserrat", "Geometric with similar weight range"),
    ],
    "circular": [
        OverrideAlternative("DM Sans", "Very similar geometric proportions"),
        OverrideAlternative("Plus Jakarta Sans", "Modern geometric, similar feel"),
        OverrideAlternative("Albert Sans", "Geometric with similar roundness"),
        OverrideAlternative("Outfit", "Clean geometric, similar character"),
        OverrideAlternative("Inter", "Modern alternative, similar weight"),
    ],
    "garamond": [
        OverrideAlternative("EB Garamond", "Direct open-source Garamond revival"),
        OverrideAlternative("Cormorant Garamond", "Display-oriented Garamond"),
        OverrideAlternative("Crimson Pro", "Old-style with similar elegance"),
        OverrideAlternative("Libre Baskerville", "Classic book serif"),
        OverrideAlternative("Lora", "Contemporary old-style serif"),
    ],
    "bodoni": [
        OverrideAlternative("Playfair Display", "High-contrast display like Bodoni"),
        OverrideAlternative("Libre Bodoni", "Direct open-source Bodoni"),
        OverrideAlternative("Cormorant", "High-contrast elegant serif"),
        OverrideAlternative("DM Serif Display", "Modern high-contrast serif"),
        OverrideAlternative("Abril Fatface", "Bold Bodoni-style display"),
    ],
}

# Trailing tokens that mark a variant of a family rather than a different one
SUFFIX_TOKENS = (
    "pro", "text", "display", "round", "rounded", "neue", "next", "pt", "lt",
    "std", "mt", "regular", "bold", "light", "medium", "book", "condensed",
    "narrow", "wide", "extended", "variable", "vf", "web", "sc", "caption",
    "subhead", "headline", "title", "poster", "black", "heavy", "ultra", "thin",
    "hairline", "extra", "semi",
)
_SUFFIX_RE = re.compile(r"\s+(?:" + "|".join(SUFFIX_TOKENS) + r")$")


def find_name_override(
    family: str,
    overrides: Optional[Dict[str, List[OverrideAlternative]]] = None,
) -> Optional[List[OverrideAlternative]]:
    """
    Looks up curated alternatives for a declared family name.

    Tries, in order: the exact normalized name; the name with trailing
    variant tokens stripped one at a time ("Helvetica Neue LT Pro" ->
    "helvetica neue lt" -> "helvetica neue"); prefix containment in either
    direction, longest key first; and finally a first-word match when the
    first word is longer than three characters.

    Returns:
        Optional[List[OverrideAlternative]]: A copy of the curated list, or
                                             None when nothing applies.
    """
    table = NAME_OVERRIDES if overrides is None else overrides
    normalized = normalize_family(family)
    if not normalized:
        return None

    if normalized in table:
        return list(table[normalized])

    stripped = normalized
    while True:
        shorter = _SUFFIX_RE.sub("", stripped).strip()
        if shorter == stripped or not shorter:
            break
        stripped = shorter
        if stripped in table:
            return list(table[stripped])

    for key in sorted(table, key=len, reverse=True):
        if normalized.startswith(key) or key.startswith(normalized):
            return list(table[key])

    first_word = normalized.split(" ")[0]
    if len(first_word) > 3:
        for key in table:
            if key == first_word or key.split(" ")[0] == first_word:
                return list(table[key])

    return None
