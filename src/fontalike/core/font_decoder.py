# -*- coding: utf-8 -*-
"""
src/fontalike/core/font_decoder.py

Turns a raw font buffer into a structural font object.

WOFF2 containers (magic 'wOF2') are decompressed to a plain sfnt stream with
fontTools' woff2 module before parsing; everything else (TTF, OTF/CFF, WOFF1)
is handed straight to fontTools.ttLib.TTFont. All binary-format risk stays in
this module: a buffer that cannot be decoded yields None, never an exception.
"""

import io
import logging
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from fontTools.pens.basePen import BasePen
from fontTools.pens.boundsPen import BoundsPen
from fontTools.ttLib import TTFont
from fontTools.ttLib import woff2

logger = logging.getLogger(__name__)

WOFF2_MAGIC = b"wOF2"
DEFAULT_UNITS_PER_EM = 1000


class PathCommand(NamedTuple):
    """One drawing instruction of a glyph outline. 'Z' carries no point."""
    type: str
    x: Optional[float]
    y: Optional[float]


class _CommandPen(BasePen):
    """
    Records an outline as a flat list of M/L/C/Q/Z commands.

    BasePen decomposes components through the glyph set and splits TrueType
    splines with implied on-curve points into one segment per call. The
    straight segment that closes a contour is implied by closePath, so it is
    emitted explicitly as an 'L' back to the contour's start.
    """

    def __init__(self, glyph_set, scale: float):
        super().__init__(glyph_set)
        self.scale = scale
        self.commands: List[PathCommand] = []
        self._start: Optional[Tuple[float, float]] = None
        self._last: Optional[Tuple[float, float]] = None

    def _point(self, kind: str, pt: Tuple[float, float]):
        self._last = tuple(pt)
        self.commands.append(PathCommand(kind, pt[0] * self.scale, pt[1] * self.scale))

    def _moveTo(self, pt):
        self._start = tuple(pt)
        self._point("M", pt)

    def _lineTo(self, pt):
        self._point("L", pt)

    def _curveToOne(self, pt1, pt2, pt3):
        self._point("C", pt3)

    def _qCurveToOne(self, pt1, pt2):
        self._point("Q", pt2)

    def _closePath(self):
        if self._start is not None and self._last != self._start:
            self._point("L", self._start)
        self.commands.append(PathCommand("Z", None, None))
        self._start = self._last = None

    def _endPath(self):
        self.commands.append(PathCommand("Z", None, None))
        self._start = self._last = None


class Glyph:
    """A single glyph resolved from a character."""

    def __init__(self, font: "DecodedFont", name: str, advance_width: int):
        self._font = font
        self.name = name
        self.advance_width = advance_width

    def get_path(self, size: float) -> List[PathCommand]:
        """
        Returns the glyph's drawing commands scaled to the given font size.

        Args:
            size (float): Nominal size; coordinates are multiplied by
                          size / units_per_em.

        Returns:
            List[PathCommand]: The commands in drawing order.
        """
        pen = _CommandPen(self._font.glyph_set, size / self._font.units_per_em)
        self._font.glyph_set[self.name].draw(pen)
        return pen.commands

    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """(xMin, yMin, xMax, yMax) in font units, or None for an empty glyph."""
        pen = BoundsPen(self._font.glyph_set)
        self._font.glyph_set[self.name].draw(pen)
        return pen.bounds


class DecodedFont:
    """
    Read-only view over a parsed TTFont exposing the tables and glyph lookup
    the feature extractor needs.
    """

    def __init__(self, ttfont: TTFont):
        self.ttfont = ttfont
        self.head = _optional_table(ttfont, "head")
        self.hhea = _optional_table(ttfont, "hhea")
        self.os2 = _optional_table(ttfont, "OS/2")
        self.post = _optional_table(ttfont, "post")

        upm = getattr(self.head, "unitsPerEm", 0) or 0
        self.units_per_em = int(upm) if upm > 0 else DEFAULT_UNITS_PER_EM

        self.cmap: Dict[int, str] = ttfont.getBestCmap() or {}
        self.glyph_set = ttfont.getGlyphSet()
        hmtx = _optional_table(ttfont, "hmtx")
        self._metrics: Dict[str, Tuple[int, int]] = dict(hmtx.metrics) if hmtx is not None else {}

    @property
    def ascender(self) -> int:
        return int(getattr(self.hhea, "ascent", 0) or 0)

    @property
    def descender(self) -> int:
        return int(getattr(self.hhea, "descent", 0) or 0)

    @property
    def family_name(self) -> Optional[str]:
        """Typographic family (name ID 16) or legacy family (name ID 1)."""
        name_table = _optional_table(self.ttfont, "name")
        if name_table is None:
            return None
        return name_table.getDebugName(16) or name_table.getDebugName(1)

    def glyph_for_char(self, char: str) -> Optional[Glyph]:
        """
        Looks up the glyph mapped to a character.

        Returns:
            Optional[Glyph]: None when the character is unmapped, maps to
                             glyph index 0 (.notdef) or has no outline data.
        """
        name = self.cmap.get(ord(char))
        if not name or name not in self.glyph_set:
            return None
        if self.ttfont.getGlyphID(name) == 0:
            return None
        advance_width = self._metrics.get(name, (0, 0))[0]
        return Glyph(self, name, advance_width)


def _optional_table(ttfont: TTFont, tag: str) -> Optional[Any]:
    """Returns a decompiled table, or None if the font does not carry it."""
    if tag not in ttfont:
        return None
    return ttfont[tag]


def is_woff2(data: bytes) -> bool:
    """Checks for the 4-byte WOFF2 signature."""
    return data[:4] == WOFF2_MAGIC


def _decompress_woff2(data: bytes) -> bytes:
    """Decompresses a WOFF2 container to an sfnt byte string (needs brotli)."""
    output = io.BytesIO()
    woff2.decompress(io.BytesIO(data), output)
    return output.getvalue()


def decode_font(data: bytes) -> Optional[DecodedFont]:
    """
    Decodes a font buffer into a DecodedFont.

    Args:
        data (bytes): Raw bytes of a TTF, OTF, WOFF or WOFF2 file.

    Returns:
        Optional[DecodedFont]: The decoded font, or None if the buffer is
                               empty, corrupt or in an unsupported container.
    """
    if not data:
        logger.warning("Cannot decode font: empty buffer.")
        return None
    try:
        if is_woff2(data):
            data = _decompress_woff2(data)
            logger.debug(f"Decompressed WOFF2 container to {len(data)} bytes.")
        ttfont = TTFont(io.BytesIO(data), recalcBBoxes=False, recalcTimestamp=False)
        # Tables load lazily; reading them here keeps parse errors inside the decoder.
        return DecodedFont(ttfont)
    except Exception as e:
        logger.warning(f"Font parse error: {e}")
        return None
