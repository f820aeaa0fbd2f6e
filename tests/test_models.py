import json

import pytest

from iconforge.core.models import RunFailure, RunRequest, RunSuccess, failure, parse_result


def test_run_request_roundtrip():
    req = RunRequest.model_validate({
        "inputDir": "/in",
        "outputDir": "/out",
        "name": "glyphs",
        "fontTypes": ["woff2", "ttf"],
        "assetTypes": ["css"],
        "prefix": "gl",
        "tag": "span",
        "fontsUrl": "/static/fonts",
        "configPath": "/cfg/iconforge.json",
    })
    raw = json.loads(req.to_json())
    req2 = RunRequest.model_validate(raw)
    assert req2 == req
    assert raw["fontTypes"] == ["woff2", "ttf"]
    assert raw["inputDir"] == "/in"


def test_run_request_drops_empty_optionals():
    req = RunRequest.model_validate({
        "inputDir": "/in", "outputDir": "/out",
        "name": "", "fontTypes": [], "assetTypes": None, "prefix": None,
    })
    assert req.to_wire() == {"inputDir": "/in", "outputDir": "/out"}


def test_run_request_coerces_tags_to_strings():
    req = RunRequest.model_validate({"inputDir": "/in", "outputDir": "/out", "fontTypes": [1, "woff"], "name": 7})
    assert req.font_types == ["1", "woff"]
    assert req.name == "7"


def test_run_request_is_frozen():
    req = RunRequest(inputDir="/in", outputDir="/out")
    with pytest.raises(Exception):
        req.name = "other"


def test_run_request_rejects_bad_values():
    with pytest.raises(Exception):
        RunRequest.model_validate({"inputDir": "/in"})
    with pytest.raises(Exception):
        RunRequest.model_validate({"inputDir": "  ", "outputDir": "/out"})
    with pytest.raises(Exception):
        RunRequest.model_validate({"inputDir": ["/in"], "outputDir": "/out"})


def test_run_request_drops_non_list_tags():
    req = RunRequest.model_validate({"inputDir": "/in", "outputDir": "/out", "fontTypes": "woff", "assetTypes": {"css": 1}})
    assert req.font_types is None
    assert req.asset_types is None
    assert req.to_wire() == {"inputDir": "/in", "outputDir": "/out"}


def test_parse_result_variants():
    ok = parse_result({
        "ok": True,
        "data": {
            "options": {"name": "icons"},
            "writeResults": [{"writePath": "/out/icons.woff", "bytes": 12}, {"writePath": "/out/x", "bytes": None}],
            "codepoints": {"home": 61697},
        },
    })
    assert isinstance(ok, RunSuccess)
    assert ok.data.write_results[0].bytes == 12
    assert ok.data.write_results[1].bytes is None
    assert ok.data.codepoints == {"home": 61697}

    bad = parse_result({"ok": False, "error": "Runner failed (exit 1).", "stderr": "x"})
    assert isinstance(bad, RunFailure)
    assert bad.stderr == "x"


def test_failure_helper():
    assert failure("boom") == {"ok": False, "error": "boom"}
    assert failure("boom", stderr="") == {"ok": False, "error": "boom", "stderr": ""}
