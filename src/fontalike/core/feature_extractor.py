# -*- coding: utf-8 -*-
"""
src/fontalike/core/feature_extractor.py

Defines the logic for turning a decoded font into a fixed-length feature
vector. The same function is used by the matcher (for the query font) and by
the catalog builder (for every reference font), so the two always agree on
the meaning and order of each dimension.

The vector has 15 entries, each clamped to a documented range:

 0. weight_class      usWeightClass / 900
 1. width_class       (usWidthClass - 1) / 8
 2. x_height_ratio    x-height / unitsPerEm
 3. cap_height_ratio  cap height / unitsPerEm
 4. ascender_ratio    ascender / unitsPerEm (0-1.5)
 5. descender_ratio   |descender| / unitsPerEm (0-0.5)
 6. avg_width_ratio   average character width / unitsPerEm (0-2)
 7. serif_score       serif evidence from the outlines of I, l and T
 8. contrast_ratio    thick/thin stroke imbalance measured on 'o'
 9. roundness         curve commands / drawing commands
10. is_monospace      0 or 1
11. italic_angle      |italicAngle| / 45
12. panose_serif      PANOSE serif style / 15
13. panose_weight     PANOSE weight / 15
14. complexity        average path commands per glyph / 80

The glyph heuristics are tuned by inspection. They are adjustable constants,
not a guaranteed-correct classifier.
"""

import logging
import math
from typing import Dict, List, NamedTuple, Optional

import numpy as np

from .font_decoder import DecodedFont, decode_font

logger = logging.getLogger(__name__)

# --- Vector layout ---
FEATURE_NAMES = (
    "weight_class",
    "width_class",
    "x_height_ratio",
    "cap_height_ratio",
    "ascender_ratio",
    "descender_ratio",
    "avg_width_ratio",
    "serif_score",
    "contrast_ratio",
    "roundness",
    "is_monospace",
    "italic_angle",
    "panose_serif",
    "panose_weight",
    "complexity",
)
FEATURE_COUNT = len(FEATURE_NAMES)

# (low, high) clamp bounds, in FEATURE_NAMES order
FEATURE_RANGES = (
    (0.0, 1.0),
    (0.0, 1.0),
    (0.0, 1.0),
    (0.0, 1.0),
    (0.0, 1.5),
    (0.0, 0.5),
    (0.0, 2.0),
    (0.0, 1.0),
    (0.0, 1.0),
    (0.0, 1.0),
    (0.0, 1.0),
    (0.0, 1.0),
    (0.0, 1.0),
    (0.0, 1.0),
    (0.0, 1.0),
)

# --- Glyph sampling ---
SERIF_TEST_CHARS = "IlT"
GENERAL_TEST_CHARS = "HoeaABCDnpqr0123"
AVG_WIDTH_CHARS = "abcdefghijklmnopqrstuvwxyz"
PATH_SAMPLE_SIZE = 72

# --- Fallback constants ---
DEFAULT_X_HEIGHT = 0.48
DEFAULT_CAP_HEIGHT = 0.70
DEFAULT_CONTRAST = 0.3
DEFAULT_ROUNDNESS = 0.5
DEFAULT_AVG_COMMANDS = 20.0
COMPLEXITY_SCALE = 80.0
PANOSE_PROPORTION_MONOSPACED = 9

CURVE_COMMANDS = ("C", "Q")
LINE_COMMANDS = ("L",)


class GlyphAnalysis(NamedTuple):
    serif_score: float
    contrast_ratio: float
    roundness: float
    complexity: float
    is_monospace: bool


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _serif_points(char: str, command_count: int) -> int:
    """
    Signed serif evidence for one probe glyph. A serif 'I' carries roughly
    12-30 commands while a sans 'I' has 4-8.
    """
    if char == "I":
        if command_count > 12:
            return 3
        if command_count <= 6:
            return -3
        return -1
    if char == "l":
        if command_count > 10:
            return 2
        if command_count <= 6:
            return -2
        return 0
    if char == "T":
        if command_count > 16:
            return 1
        if command_count <= 8:
            return -1
    return 0


def _glyph_top_ratio(font: DecodedFont, char: str, default: float) -> float:
    """Measures yMax of a glyph's bounding box relative to the em."""
    try:
        glyph = font.glyph_for_char(char)
        if glyph is not None:
            bounds = glyph.bounds()
            if bounds is not None and bounds[3] > 0:
                return clamp(bounds[3] / font.units_per_em, 0.0, 1.0)
    except Exception as e:
        logger.debug(f"Could not measure glyph '{char}': {e}")
    return default


def estimate_x_height(font: DecodedFont) -> float:
    return _glyph_top_ratio(font, "x", DEFAULT_X_HEIGHT)


def estimate_cap_height(font: DecodedFont) -> float:
    return _glyph_top_ratio(font, "H", DEFAULT_CAP_HEIGHT)


def estimate_avg_width(font: DecodedFont) -> float:
    """
    Average advance width of the lowercase Latin letters, in font units.

    Returns half the em when none of the letters resolve.
    """
    widths: List[int] = []
    for char in AVG_WIDTH_CHARS:
        try:
            glyph = font.glyph_for_char(char)
        except Exception as e:
            logger.debug(f"Could not resolve glyph '{char}': {e}")
            continue
        if glyph is not None and glyph.advance_width:
            widths.append(glyph.advance_width)
    if not widths:
        return font.units_per_em * 0.5
    return sum(widths) / len(widths)


def estimate_contrast(font: DecodedFont) -> float:
    """
    Approximates stroke contrast from the outline of 'o'.

    Segments that are mostly vertical and mostly horizontal are summed
    separately; a high-contrast face (Bodoni) ends up far from balance, a
    monoline face (Futura) close to it.
    """
    try:
        glyph = font.glyph_for_char("o")
        if glyph is None:
            return DEFAULT_CONTRAST
        commands = glyph.get_path(font.units_per_em)
    except Exception as e:
        logger.debug(f"Could not read outline of 'o': {e}")
        return DEFAULT_CONTRAST

    vertical = 0.0
    horizontal = 0.0
    for prev, curr in zip(commands, commands[1:]):
        if prev.x is None or curr.x is None or prev.y is None or curr.y is None:
            continue
        dx = abs(curr.x - prev.x)
        dy = abs(curr.y - prev.y)
        if dy > dx * 2:
            vertical += dy
        if dx > dy * 2:
            horizontal += dx

    if vertical + horizontal == 0:
        return DEFAULT_CONTRAST
    return clamp(abs(vertical - horizontal) / (vertical + horizontal), 0.0, 1.0)


def analyze_glyphs(font: DecodedFont) -> GlyphAnalysis:
    """
    Samples a fixed character set and derives the outline-based features.

    Args:
        font (DecodedFont): The decoded font.

    Returns:
        GlyphAnalysis: Normalized serif score, contrast, roundness and
                       complexity, plus the width-uniformity monospace signal.
    """
    widths: List[int] = []
    total_curves = 0
    total_lines = 0
    total_commands = 0
    glyph_count = 0
    serif_score = 0

    for char in SERIF_TEST_CHARS + GENERAL_TEST_CHARS:
        try:
            glyph = font.glyph_for_char(char)
            if glyph is None:
                continue
            commands = glyph.get_path(PATH_SAMPLE_SIZE)
        except Exception as e:
            logger.debug(f"Skipping glyph '{char}': {e}")
            continue

        command_count = len(commands)
        if command_count == 0:
            continue

        glyph_count += 1
        total_commands += command_count
        for command in commands:
            if command.type in CURVE_COMMANDS:
                total_curves += 1
            elif command.type in LINE_COMMANDS:
                total_lines += 1

        if glyph.advance_width:
            widths.append(glyph.advance_width)

        if char in SERIF_TEST_CHARS:
            serif_score += _serif_points(char, command_count)

    # The raw score spans roughly -8 to +6
    normalized_serif = clamp((serif_score + 8) / 14, 0.0, 1.0)

    draw_commands = total_curves + total_lines
    roundness = total_curves / draw_commands if draw_commands > 0 else DEFAULT_ROUNDNESS

    avg_commands = total_commands / glyph_count if glyph_count > 0 else DEFAULT_AVG_COMMANDS
    complexity = clamp(avg_commands / COMPLEXITY_SCALE, 0.0, 1.0)

    is_monospace = len(widths) >= 3 and len(set(widths)) <= 2

    return GlyphAnalysis(
        serif_score=normalized_serif,
        contrast_ratio=estimate_contrast(font),
        roundness=roundness,
        complexity=complexity,
        is_monospace=is_monospace,
    )


def _finite_clamped(values: List[float]) -> np.ndarray:
    vector = np.empty(FEATURE_COUNT, dtype=np.float64)
    for i, (value, (low, high)) in enumerate(zip(values, FEATURE_RANGES)):
        value = float(value)
        if not math.isfinite(value):
            value = low
        vector[i] = clamp(value, low, high)
    return vector


def extract_features(font: DecodedFont) -> np.ndarray:
    """
    Computes the 15-dimension feature vector of a decoded font.

    Missing metrics never block extraction: x-height, cap height and average
    width fall back to measured glyphs and then to constants.

    Args:
        font (DecodedFont): A successfully decoded font.

    Returns:
        np.ndarray: float64 array of length FEATURE_COUNT.
    """
    os2 = font.os2
    post = font.post
    upm = float(font.units_per_em)

    weight_class = (getattr(os2, "usWeightClass", 0) or 400) / 900
    width_class = ((getattr(os2, "usWidthClass", 0) or 5) - 1) / 8

    sx_height = getattr(os2, "sxHeight", 0) or 0
    s_cap_height = getattr(os2, "sCapHeight", 0) or 0
    x_height_ratio = sx_height / upm if sx_height > 0 else estimate_x_height(font)
    cap_height_ratio = s_cap_height / upm if s_cap_height > 0 else estimate_cap_height(font)

    ascender = getattr(os2, "sTypoAscender", 0) or font.ascender or upm * 0.8
    descender = getattr(os2, "sTypoDescender", 0) or font.descender or upm * -0.2
    avg_width = getattr(os2, "xAvgCharWidth", 0) or estimate_avg_width(font)

    glyphs = analyze_glyphs(font)

    panose = getattr(os2, "panose", None)
    panose_serif = getattr(panose, "bSerifStyle", 0) or 0
    panose_weight = getattr(panose, "bWeight", 0) or 0
    panose_monospace = getattr(panose, "bProportion", 0) == PANOSE_PROPORTION_MONOSPACED
    fixed_pitch = bool(getattr(post, "isFixedPitch", 0))
    is_monospace = 1.0 if (fixed_pitch or panose_monospace or glyphs.is_monospace) else 0.0

    italic_angle = abs(float(getattr(post, "italicAngle", 0) or 0)) / 45

    return _finite_clamped([
        weight_class,
        width_class,
        x_height_ratio,
        cap_height_ratio,
        ascender / upm,
        abs(descender) / upm,
        avg_width / upm,
        glyphs.serif_score,
        glyphs.contrast_ratio,
        glyphs.roundness,
        is_monospace,
        italic_angle,
        panose_serif / 15,
        panose_weight / 15,
        glyphs.complexity,
    ])


def extract_features_from_bytes(data: bytes) -> Optional[np.ndarray]:
    """Decodes a font buffer and extracts its features; None if undecodable."""
    font = decode_font(data)
    if font is None:
        return None
    return extract_features(font)


def describe_features(vector: np.ndarray) -> Dict[str, float]:
    """Maps each feature name to its value rounded to 3 decimals."""
    return {name: round(float(value), 3) for name, value in zip(FEATURE_NAMES, vector)}


if __name__ == '__main__':
    import sys

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    if len(sys.argv) != 2:
        print("Usage: python -m fontalike.core.feature_extractor FONT_FILE")
        sys.exit(1)

    with open(sys.argv[1], "rb") as f:
        features = extract_features_from_bytes(f.read())
    if features is None:
        print("Could not decode font.")
        sys.exit(1)
    for name, value in describe_features(features).items():
        print(f"  {name:<18} {value:.3f}")
