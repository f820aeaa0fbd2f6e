import io
import json
import os

import pytest

pytest.importorskip("fontTools")

from fontTools.ttLib import TTFont

from iconforge.generator import generate_fonts
from iconforge.generator.assets import render_css, render_html, render_ts, substitute
from iconforge.generator.codepoints import assign_codepoints
from iconforge.generator.glyphs import collect_icons, glyph_name_for, read_viewbox
from iconforge.generator.options import AssetType, FontType, GeneratorOptions


def _opts(tmp_path, **kw):
    base = {"inputDir": str(tmp_path), "outputDir": str(tmp_path / "out")}
    base.update(kw)
    return GeneratorOptions.model_validate(base)


def test_collect_icons_names_and_order(icon_dir):
    icons = collect_icons(icon_dir)
    assert [i.name for i in icons] == ["arrows-left", "circle", "square"]
    assert glyph_name_for(icon_dir / "arrows" / "left.svg", icon_dir) == "arrows-left"


def test_collect_icons_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        collect_icons(tmp_path / "missing")
    with pytest.raises(ValueError):
        collect_icons(tmp_path)


def test_read_viewbox():
    assert read_viewbox(b'<svg viewBox="0 -2 24 20"/>', 1000.0) == (0.0, -2.0, 24.0, 20.0)
    assert read_viewbox(b'<svg width="32px" height="16"/>', 1000.0) == (0.0, 0.0, 32.0, 16.0)
    assert read_viewbox(b"<svg/>", 512.0) == (0.0, 0.0, 512.0, 512.0)


def test_assign_codepoints():
    cps = assign_codepoints(["b", "a", "c"], {"c": 0xF101}, 0xF101)
    assert cps == {"a": 0xF102, "b": 0xF103, "c": 0xF101}
    with pytest.raises(ValueError):
        assign_codepoints(["a", "b"], {"a": 0xE000, "b": 0xE000}, 0xF101)


def test_options_defaults_and_validation(tmp_path):
    o = _opts(tmp_path, name="", fontTypes=None, codepoints={"x": "0xE001"})
    assert o.name == "icons"
    assert o.font_types == [FontType.WOFF2, FontType.WOFF]
    assert AssetType.CSS in o.asset_types
    assert o.codepoints == {"x": 0xE001}
    with pytest.raises(Exception, match="Unsupported font type: otf"):
        _opts(tmp_path, fontTypes=["otf"])


def test_generate_ttf_and_woff(icon_dir, tmp_path):
    out = (tmp_path / "build").resolve()
    res = generate_fonts({
        "inputDir": str(icon_dir),
        "outputDir": str(out),
        "name": "demo",
        "fontTypes": ["ttf", "woff"],
        "assetTypes": ["css", "json", "ts", "html", "scss"],
        "codepoints": {"square": 0xE000},
        "configPath": "/ignored.json",
    }, True)

    assert res.codepoints == {"square": 0xE000, "arrows-left": 0xF101, "circle": 0xF102}
    paths = [r.write_path for r in res.write_results]
    assert paths == [str(out / f"demo.{ext}") for ext in ("ttf", "woff", "css", "json", "ts", "html", "scss")]
    for r in res.write_results:
        assert os.path.exists(r.write_path)

    font = TTFont(io.BytesIO(res.write_results[0].content))
    cmap = font.getBestCmap()
    assert cmap[0xF101] == "arrows-left"
    assert cmap[0xE000] == "square"
    assert font.getGlyphOrder()[0] == ".notdef"
    assert font["hmtx"]["square"][0] == 1000
    assert font["glyf"]["circle"].numberOfContours >= 1

    woff = TTFont(io.BytesIO(res.write_results[1].content))
    assert woff.flavor == "woff"

    assert json.loads((out / "demo.json").read_text()) == {"square": 57344, "arrows-left": 61697, "circle": 61698}
    assert res.options["name"] == "demo"
    assert res.options["fontTypes"] == ["ttf", "woff"]


def test_codepoints_omitted_without_return_glyphs(icon_dir, tmp_path):
    res = generate_fonts({"inputDir": str(icon_dir), "outputDir": str(tmp_path / "o"), "fontTypes": ["ttf"], "assetTypes": []})
    assert res.codepoints == {}
    assert len(res.write_results) == 1


def test_woff2(icon_dir, tmp_path):
    pytest.importorskip("brotli")
    res = generate_fonts({"inputDir": str(icon_dir), "outputDir": str(tmp_path / "o"), "fontTypes": ["woff2"], "assetTypes": []})
    assert res.write_results[0].content[:4] == b"wOF2"


def test_css_rendering(tmp_path):
    o = _opts(tmp_path, name="demo", prefix="dm", tag="span", fontTypes=["woff2", "ttf"], fontsUrl="/static/")
    css = render_css(o, {"home": 0xF101})
    assert 'url("/static/demo.woff2") format("woff2")' in css
    assert 'url("/static/demo.ttf") format("truetype")' in css
    assert 'span[class^="dm-"]:before' in css
    assert '.dm-home:before {\n    content: "\\f101";\n}' in css


def test_css_fonts_url_defaults_to_relative(tmp_path):
    css = render_css(_opts(tmp_path, fontTypes=["woff"]), {})
    assert 'url("./icons.woff")' in css


def test_ts_rendering(tmp_path):
    ts = render_ts(_opts(tmp_path, name="my-icons"), {"arrows-left": 0xF101})
    assert "export enum MyIcons {" in ts
    assert '  ArrowsLeft = "arrows-left",' in ts
    assert "[MyIcons.ArrowsLeft]: 61697," in ts


def test_substitute():
    assert substitute("{a}-{b}-{a}", {"a": 1, "b": "x"}) == "1-x-1"
    assert substitute("{missing}", {}) == "{missing}"


def test_substitute_does_not_expand_values():
    assert substitute("{a}|{b}", {"a": "{b}", "b": "x"}) == "{b}|x"


def test_user_text_with_placeholders_is_literal(tmp_path):
    o = _opts(tmp_path, name="{items}", prefix="{tag}", tag="i")
    page = render_html(o, {"home": 0xF101})
    assert "<title>{items}</title>" in page
    assert page.count('<div class="preview">') == 1
    assert 'class="{tag} {tag}-home"' in page
    css = render_css(o, {})
    assert 'font-family: "{items}";' in css
    assert 'i[class^="{tag}-"]:before' in css
