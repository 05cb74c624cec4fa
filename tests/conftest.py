import json
import math
import os
import tempfile
from io import BytesIO
from typing import Dict, Iterable, List, Optional, Tuple

# Keep config.ini and catalogs out of the real user directory. Must run
# before fontalike is imported anywhere.
os.environ.setdefault("FONTALIKE_HOME", tempfile.mkdtemp(prefix="fontalike-test-"))

import numpy as np  # noqa: E402
import pytest  # noqa: E402
from fontTools.fontBuilder import FontBuilder  # noqa: E402
from fontTools.pens.ttGlyphPen import TTGlyphPen  # noqa: E402
from fontTools.ttLib.tables.O_S_2f_2 import Panose  # noqa: E402

from fontalike.core.feature_extractor import FEATURE_COUNT, FEATURE_NAMES  # noqa: E402
from fontalike.core.font_catalog import FontCatalog, FontCategory, FontRecord  # noqa: E402

UNITS_PER_EM = 1000
DEFAULT_CHARS = "IlTHoeaABCDnpqrx0123" + "bcdfghijkmstuvwyz"
SERIF_POLYGONS = {"I": 12, "l": 12, "T": 16}


def glyph_name(char: str) -> str:
    return f"uni{ord(char):04X}"


def rect_glyph(x0: int, y0: int, x1: int, y1: int):
    """A single rectangular contour of four on-curve points."""
    pen = TTGlyphPen(None)
    pen.moveTo((x0, y0))
    pen.lineTo((x1, y0))
    pen.lineTo((x1, y1))
    pen.lineTo((x0, y1))
    pen.closePath()
    return pen.glyph()


def polygon_glyph(points: int, height: int = 700):
    """A closed polygon with the given number of on-curve points."""
    pen = TTGlyphPen(None)
    ring = [
        (round(250 + 200 * math.cos(2 * math.pi * k / points)),
         round(height / 2 + height / 2 * math.sin(2 * math.pi * k / points)))
        for k in range(points)
    ]
    pen.moveTo(ring[0])
    for point in ring[1:]:
        pen.lineTo(point)
    pen.closePath()
    return pen.glyph()


def glyph_height(char: str) -> int:
    if char == "x":
        return 500
    if char == "H":
        return 700
    return 600


def build_font(
    family: str = "Test Sans",
    chars: str = DEFAULT_CHARS,
    serif: bool = False,
    monospace: bool = False,
    weight: int = 400,
    italic_angle: float = 0.0,
    panose: Optional[Dict[str, int]] = None,
    x_avg_char_width: int = 500,
    flavor: Optional[str] = None,
    polygons: Optional[Dict[str, int]] = None,
) -> bytes:
    """
    Builds a small TrueType font in memory.

    Every glyph is a rectangle except 'o' (a 400x400 square) and, for serif
    fonts, I/l/T, which become 12/12/16-point polygons. `polygons` maps
    further characters to a point count. Advance widths vary per character
    unless monospace is set.
    """
    names = [glyph_name(c) for c in chars]
    point_counts = dict(SERIF_POLYGONS) if serif else {}
    point_counts.update(polygons or {})
    glyphs = {".notdef": rect_glyph(50, 0, 450, 700)}
    metrics = {".notdef": (500, 50)}
    for char, name in zip(chars, names):
        if char in point_counts:
            glyphs[name] = polygon_glyph(point_counts[char])
        elif char == "o":
            glyphs[name] = rect_glyph(50, 0, 450, 400)
        else:
            glyphs[name] = rect_glyph(50, 0, 450, glyph_height(char))
        advance = 600 if monospace else 400 + (ord(char) % 7) * 40
        metrics[name] = (advance, 50)

    fb = FontBuilder(UNITS_PER_EM, isTTF=True)
    fb.setupGlyphOrder([".notdef"] + names)
    fb.setupCharacterMap({ord(c): n for c, n in zip(chars, names)})
    fb.setupGlyf(glyphs)
    fb.setupHorizontalMetrics(metrics)
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable({"familyName": family, "styleName": "Regular"})

    panose_table = Panose()
    for key, value in (panose or {}).items():
        setattr(panose_table, key, value)
    fb.setupOS2(
        sTypoAscender=800,
        sTypoDescender=-200,
        usWinAscent=800,
        usWinDescent=200,
        usWeightClass=weight,
        xAvgCharWidth=x_avg_char_width,
        panose=panose_table,
    )
    fb.setupPost(isFixedPitch=0, italicAngle=italic_angle)

    if flavor:
        fb.font.flavor = flavor
    buf = BytesIO()
    fb.save(buf)
    return buf.getvalue()


def make_vector(**values: float) -> np.ndarray:
    """A feature vector of zeros with selected entries set by name."""
    vector = np.zeros(FEATURE_COUNT, dtype=np.float64)
    for name, value in values.items():
        vector[FEATURE_NAMES.index(name)] = value
    return vector


def make_record(family: str, category: FontCategory = FontCategory.SANS_SERIF,
                features: Optional[np.ndarray] = None) -> FontRecord:
    vector = make_vector() if features is None else features
    return FontRecord.from_dict({
        "family": family,
        "category": category.value,
        "features": [float(v) for v in vector],
    })


def make_catalog(entries: Iterable[Tuple[str, FontCategory, np.ndarray]]) -> FontCatalog:
    return FontCatalog(make_record(f, c, v) for f, c, v in entries)


@pytest.fixture
def sans_font_bytes() -> bytes:
    return build_font()


@pytest.fixture
def serif_font_bytes() -> bytes:
    return build_font(family="Test Serif", serif=True)


@pytest.fixture
def mono_font_bytes() -> bytes:
    return build_font(family="Test Mono", monospace=True)


@pytest.fixture
def sample_catalog() -> FontCatalog:
    return make_catalog([
        ("Roboto", FontCategory.SANS_SERIF, make_vector(weight_class=0.44, serif_score=0.1)),
        ("Lora", FontCategory.SERIF, make_vector(weight_class=0.44, serif_score=0.9)),
        ("Fira Code", FontCategory.MONOSPACE, make_vector(weight_class=0.44, is_monospace=1.0)),
        ("Open Sans", FontCategory.SANS_SERIF, make_vector(weight_class=0.45, serif_score=0.15)),
        ("Pacifico", FontCategory.HANDWRITING, make_vector(weight_class=0.44, complexity=0.9)),
        ("Inter", FontCategory.SANS_SERIF, make_vector(weight_class=0.44, serif_score=0.12)),
    ])


@pytest.fixture
def write_catalog(tmp_path):
    """Writes records to a catalog file and returns its path."""
    def _write(payload, name: str = "font-features.json"):
        path = tmp_path / name
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f)
        return path

    return _write


def vector_list(vector: np.ndarray) -> List[float]:
    return [float(v) for v in vector]
