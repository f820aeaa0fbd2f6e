"""
Font assembly with fontTools FontBuilder and per-format serialization.
"""

from __future__ import annotations

import io
import logging
import re
from typing import Dict, List, Mapping, Tuple

from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen
from fontTools.ttLib import TTFont

from .glyphs import BuiltGlyph
from .options import FontType

logger = logging.getLogger(__name__)

# fontTools flavor per output format
_FLAVORS = {
    FontType.TTF: None,
    FontType.WOFF: "woff",
    FontType.WOFF2: "woff2",
}


def _ps_name(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9-]", "", name.replace(" ", "-"))[:63] or "icons"


def build_font(
    family: str,
    glyphs: List[BuiltGlyph],
    codepoints: Mapping[str, int],
    font_height: int,
    descent: int,
) -> TTFont:
    """Build a TrueType font holding one glyph per icon."""
    order = [".notdef"] + [g.name for g in glyphs]
    glyf: Dict[str, object] = {".notdef": TTGlyphPen(None).glyph()}
    hmtx: Dict[str, Tuple[int, int]] = {".notdef": (font_height, 0)}
    cmap: Dict[int, str] = {}
    for g in glyphs:
        glyf[g.name] = g.glyph
        hmtx[g.name] = (g.advance, g.lsb)
        cmap[codepoints[g.name]] = g.name

    ascent = font_height - descent
    fb = FontBuilder(font_height, isTTF=True)
    fb.setupGlyphOrder(order)
    fb.setupCharacterMap(cmap)
    fb.setupGlyf(glyf)
    fb.setupHorizontalMetrics(hmtx)
    fb.setupHorizontalHeader(ascent=ascent, descent=-descent)
    fb.setupNameTable({
        "familyName": family,
        "styleName": "Regular",
        "fullName": f"{family} Regular",
        "psName": _ps_name(f"{family}-Regular"),
        "version": "Version 1.0",
    })
    fb.setupOS2(
        sTypoAscender=ascent,
        sTypoDescender=-descent,
        sTypoLineGap=0,
        usWinAscent=ascent,
        usWinDescent=descent,
        usWeightClass=400,
        usWidthClass=5,
    )
    fb.setupPost()
    fb.setupMaxp()
    return fb.font


def serialize(font: TTFont, font_type: FontType) -> bytes:
    """Return the font as bytes in the requested container format."""
    buf = io.BytesIO()
    previous = font.flavor
    try:
        font.flavor = _FLAVORS[font_type]
        font.save(buf)
    finally:
        font.flavor = previous
    logger.debug(f"serialized {font_type.value}: {buf.tell()} bytes")
    return buf.getvalue()
