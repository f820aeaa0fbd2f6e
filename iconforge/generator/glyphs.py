"""
SVG icon loading and outline conversion.

Each ``*.svg`` under the input directory becomes one glyph. The viewBox is
scaled so its height equals the font height, y is flipped to font space, and
cubic curves are converted to TrueType quadratics.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

from fontTools.pens.cu2quPen import Cu2QuPen
from fontTools.pens.transformPen import TransformPen
from fontTools.pens.ttGlyphPen import TTGlyphPen
from fontTools.svgLib import SVGPath

logger = logging.getLogger(__name__)

# Max approximation error (font units) for cubic -> quadratic conversion
CU2QU_MAX_ERR = 1.0

_NUM = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


@dataclass
class IconSource:
    name: str
    path: Path


@dataclass
class BuiltGlyph:
    name: str
    glyph: object
    advance: int
    lsb: int


def glyph_name_for(svg_path: Path, input_dir: Path) -> str:
    """Relative path without suffix, directory separators joined with '-'."""
    rel = svg_path.relative_to(input_dir).with_suffix("")
    return "-".join(rel.parts)


def collect_icons(input_dir: Path) -> List[IconSource]:
    input_dir = Path(input_dir)
    if not input_dir.is_dir():
        raise FileNotFoundError(f"Input directory not found: {input_dir}")
    files = sorted(p for p in input_dir.rglob("*") if p.is_file() and p.suffix.lower() == ".svg")
    if not files:
        raise ValueError(f"No SVG icons found in {input_dir}")

    seen: Dict[str, Path] = {}
    icons: List[IconSource] = []
    for f in files:
        name = glyph_name_for(f, input_dir)
        if name in seen:
            raise ValueError(f"Duplicate glyph name '{name}': {seen[name]} and {f}")
        seen[name] = f
        icons.append(IconSource(name=name, path=f))
    return icons


def _length(value: str) -> float:
    m = _NUM.search(value or "")
    return float(m.group(0)) if m else 0.0


def read_viewbox(svg_data: bytes, fallback: float) -> Tuple[float, float, float, float]:
    """Return (min_x, min_y, width, height) from viewBox, else width/height attributes."""
    root = ET.fromstring(svg_data)
    vb = root.get("viewBox")
    if vb:
        nums = [float(x) for x in _NUM.findall(vb)]
        if len(nums) == 4 and nums[2] > 0 and nums[3] > 0:
            return nums[0], nums[1], nums[2], nums[3]
    w = _length(root.get("width", ""))
    h = _length(root.get("height", ""))
    if w > 0 and h > 0:
        return 0.0, 0.0, w, h
    return 0.0, 0.0, fallback, fallback


def build_glyph(icon: IconSource, font_height: int, descent: int) -> BuiltGlyph:
    svg_data = icon.path.read_bytes()
    min_x, min_y, vb_w, vb_h = read_viewbox(svg_data, float(font_height))
    scale = font_height / vb_h
    # svg (y down) -> font (y up), viewBox bottom sits at -descent
    transform = (scale, 0, 0, -scale, -min_x * scale, (min_y + vb_h) * scale - descent)

    tt_pen = TTGlyphPen(None)
    pen = TransformPen(Cu2QuPen(tt_pen, CU2QU_MAX_ERR, reverse_direction=True), transform)
    SVGPath.fromstring(svg_data).draw(pen)
    glyph = tt_pen.glyph()

    coords = getattr(glyph, "coordinates", None) or []
    lsb = min((int(round(x)) for x, _ in coords), default=0)
    advance = int(round(vb_w * scale))
    logger.debug(f"glyph {icon.name}: advance={advance} contours={getattr(glyph, 'numberOfContours', 0)}")
    return BuiltGlyph(name=icon.name, glyph=glyph, advance=advance, lsb=lsb)
