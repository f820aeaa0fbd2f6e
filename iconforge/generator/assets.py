"""
Asset rendering: stylesheets, HTML preview, JSON map and TypeScript bindings.

Templates use ``{key}`` placeholders replaced by plain string substitution.
"""

from __future__ import annotations

import html
import json
import logging
import re
from typing import Any, Dict, List, Mapping

from .options import AssetType, FontType, GeneratorOptions

logger = logging.getLogger(__name__)

_CSS_FORMATS = {
    FontType.WOFF2: "woff2",
    FontType.WOFF: "woff",
    FontType.TTF: "truetype",
}

FONT_FACE_TEMPLATE = """@font-face {
    font-family: "{name}";
    src: {sources};
}
"""

CSS_BASE_TEMPLATE = """{tag}[class^="{prefix}-"]:before, {tag}[class*=" {prefix}-"]:before {
    font-family: {name} !important;
    font-style: normal;
    font-weight: normal !important;
    font-variant: normal;
    text-transform: none;
    line-height: 1;
    -webkit-font-smoothing: antialiased;
    -moz-osx-font-smoothing: grayscale;
}
"""

HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>{name}</title>
    <link rel="stylesheet" type="text/css" href="{name}.css" />
    <style>
        body { font-family: sans-serif; margin: 0; padding: 10px 20px; }
        .preview { display: inline-block; width: 120px; margin: 10px; text-align: center; }
        .preview .inner { font-size: 32px; line-height: 48px; }
        .preview .label { font-size: 12px; color: #555; word-break: break-all; }
    </style>
</head>
<body>
    <h1>{name}</h1>
{items}
</body>
</html>
"""

HTML_ITEM_TEMPLATE = """    <div class="preview">
        <span class="inner"><{tag} class="{prefix} {prefix}-{glyph}"></{tag}></span>
        <div class="label">{glyph}</div>
    </div>"""


_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def substitute(template: str, substitutions: Mapping[str, Any]) -> str:
    # Single pass: substituted values are never expanded again
    def repl(m: "re.Match[str]") -> str:
        key = m.group(1)
        return str(substitutions[key]) if key in substitutions else m.group(0)

    return _PLACEHOLDER.sub(repl, template)


def _fonts_base(opts: GeneratorOptions) -> str:
    url = opts.fonts_url if opts.fonts_url is not None else "."
    return url.rstrip("/")


def _font_sources(opts: GeneratorOptions) -> str:
    base = _fonts_base(opts)
    parts = []
    for ft in opts.font_types:
        parts.append(f'url("{base}/{opts.name}.{ft.value}") format("{_CSS_FORMATS[ft]}")')
    return ",\n         ".join(parts)


def _css_escape(cp: int) -> str:
    return "\\" + format(cp, "x")


def _ts_ident(name: str) -> str:
    words = [w for w in re.split(r"[^A-Za-z0-9]+", name) if w]
    ident = "".join(w[:1].upper() + w[1:] for w in words) or "Icon"
    return ident if not ident[0].isdigit() else f"_{ident}"


def render_css(opts: GeneratorOptions, codepoints: Mapping[str, int]) -> str:
    subs = {"name": opts.name, "prefix": opts.prefix, "tag": opts.tag}
    out = [substitute(FONT_FACE_TEMPLATE, {**subs, "sources": _font_sources(opts)})]
    out.append(substitute(CSS_BASE_TEMPLATE, subs))
    for glyph, cp in codepoints.items():
        out.append(f'.{opts.prefix}-{glyph}:before {{\n    content: "{_css_escape(cp)}";\n}}\n')
    return "\n".join(out)


def render_scss(opts: GeneratorOptions, codepoints: Mapping[str, int]) -> str:
    var = re.sub(r"[^A-Za-z0-9_-]", "-", opts.name)
    lines = [f'${var}-font: "{opts.name}";', "", f"${var}-map: ("]
    entries = [f'    "{glyph}": "{_css_escape(cp)}",' for glyph, cp in codepoints.items()]
    lines.extend(entries)
    lines.append(");")
    lines.append("")
    lines.append(render_css(opts, codepoints))
    return "\n".join(lines)


def render_html(opts: GeneratorOptions, codepoints: Mapping[str, int]) -> str:
    items = [
        substitute(HTML_ITEM_TEMPLATE, {"tag": opts.tag, "prefix": opts.prefix, "glyph": html.escape(g)})
        for g in codepoints
    ]
    return substitute(HTML_TEMPLATE, {"name": html.escape(opts.name), "items": "\n".join(items)})


def render_json(opts: GeneratorOptions, codepoints: Mapping[str, int]) -> str:
    return json.dumps(dict(codepoints), indent=2) + "\n"


def render_ts(opts: GeneratorOptions, codepoints: Mapping[str, int]) -> str:
    enum_name = _ts_ident(opts.name)
    lines: List[str] = [f"export enum {enum_name} {{"]
    for glyph in codepoints:
        lines.append(f'  {_ts_ident(glyph)} = "{glyph}",')
    lines.append("}")
    lines.append("")
    lines.append(f"export const {enum_name[0].lower()}{enum_name[1:]}Codepoints: Record<{enum_name}, number> = {{")
    for glyph, cp in codepoints.items():
        lines.append(f"  [{enum_name}.{_ts_ident(glyph)}]: {cp},")
    lines.append("};")
    return "\n".join(lines) + "\n"


_RENDERERS = {
    AssetType.CSS: render_css,
    AssetType.SCSS: render_scss,
    AssetType.HTML: render_html,
    AssetType.JSON: render_json,
    AssetType.TS: render_ts,
}


def render_asset(asset_type: AssetType, opts: GeneratorOptions, codepoints: Mapping[str, int]) -> str:
    return _RENDERERS[asset_type](opts, codepoints)


def render_assets(opts: GeneratorOptions, codepoints: Mapping[str, int]) -> Dict[AssetType, str]:
    out: Dict[AssetType, str] = {}
    for at in opts.asset_types:
        out[at] = render_asset(at, opts, codepoints)
        logger.debug(f"rendered {at.value} asset ({len(out[at])} chars)")
    return out
