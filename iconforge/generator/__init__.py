"""
Icon font generator: a directory of SVG icons in, fonts plus web assets out.

The worker process calls ``generate_fonts(options, True)``; it is an ordinary
library entry point and can be used directly as well.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

from .assets import render_assets
from .codepoints import assign_codepoints
from .fonts import build_font, serialize
from .glyphs import build_glyph, collect_icons
from .options import AssetType, FontType, GeneratorOptions

logger = logging.getLogger(__name__)


@dataclass
class WriteResult:
    write_path: str
    content: Union[bytes, str]


@dataclass
class GenerateResult:
    options: Dict[str, Any]
    write_results: List[WriteResult] = field(default_factory=list)
    codepoints: Dict[str, int] = field(default_factory=dict)


def generate_fonts(options: Mapping[str, Any], return_glyphs: bool = False) -> GenerateResult:
    """Build fonts and assets from ``options`` and write them to ``outputDir``.

    Args:
        options: wire-style options (camelCase keys); unknown keys are ignored
        return_glyphs: include the glyph name -> codepoint map in the result

    Returns:
        GenerateResult with the normalized options, one WriteResult per file
        written (content kept in memory), and codepoints if requested.
    """
    opts = GeneratorOptions.model_validate(dict(options))
    icons = collect_icons(opts.input_dir)
    logger.info(f"Building '{opts.name}' from {len(icons)} icons in {opts.input_dir}")

    codepoints = assign_codepoints([i.name for i in icons], opts.codepoints, opts.start_codepoint)
    ordered = dict(sorted(codepoints.items(), key=lambda kv: kv[1]))
    glyphs = [build_glyph(i, opts.font_height, opts.descent) for i in icons]
    font = build_font(opts.name, glyphs, codepoints, opts.font_height, opts.descent)

    out_dir = Path(opts.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    results: List[WriteResult] = []

    for ft in opts.font_types:
        data = serialize(font, ft)
        results.append(_write(out_dir / f"{opts.name}.{ft.value}", data))

    for at, text in render_assets(opts, ordered).items():
        results.append(_write(out_dir / f"{opts.name}.{at.value}", text))

    return GenerateResult(
        options=opts.to_wire(),
        write_results=results,
        codepoints=ordered if return_glyphs else {},
    )


def _write(path: Path, content: Union[bytes, str]) -> WriteResult:
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    logger.info(f"Wrote {path}")
    return WriteResult(write_path=str(path), content=content)


__all__ = [
    "AssetType",
    "FontType",
    "GeneratorOptions",
    "GenerateResult",
    "WriteResult",
    "generate_fonts",
]
