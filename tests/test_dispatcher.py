import math

import pytest

from iconforge.core.dispatcher import (
    DialogProvider,
    HostCommands,
    WindowHandle,
    clamp_window_size,
    normalize_request,
)
from iconforge.core.errors import ValidationError
from iconforge.core.models import RunRequest


class StubBridge:
    def __init__(self):
        self.calls = []

    async def run(self, request):
        self.calls.append(request)
        return {"ok": True, "data": {"options": request.to_wire(), "writeResults": [], "codepoints": {}}}


class FakeDialogs(DialogProvider):
    def __init__(self, answer=None):
        self.answer = answer
        self.seen = []

    def open_directory(self, title):
        self.seen.append(("dir", title, None))
        return self.answer

    def open_file(self, title, filters):
        self.seen.append(("file", title, filters))
        return self.answer


class FakeWindow(WindowHandle):
    def __init__(self, size=(800, 600), visible=False):
        self.size = size
        self.visible = visible
        self.set_calls = []

    def get_content_size(self):
        return self.size

    def set_content_size(self, width, height):
        self.set_calls.append((width, height))
        self.size = (width, height)

    def is_visible(self):
        return self.visible

    def show(self):
        self.visible = True


@pytest.mark.parametrize("opts,msg", [
    (None, "inputDir is required"),
    ({}, "inputDir is required"),
    ({"inputDir": "", "outputDir": "/out"}, "inputDir is required"),
    ({"inputDir": "/in"}, "outputDir is required"),
    ({"inputDir": "/in", "outputDir": None}, "outputDir is required"),
])
def test_missing_dirs_short_circuit(opts, msg):
    bridge = StubBridge()
    host = HostCommands(bridge=bridge)
    assert host.run_font_build_sync(opts) == {"ok": False, "error": msg}
    assert bridge.calls == []


def test_invalid_options_rejected_without_spawn():
    bridge = StubBridge()
    host = HostCommands(bridge=bridge)
    res = host.run_font_build_sync({"inputDir": ["/in"], "outputDir": "/out"})
    assert res["ok"] is False
    assert res["error"].startswith("invalid options:")
    assert bridge.calls == []


def test_valid_request_is_normalized_and_forwarded():
    bridge = StubBridge()
    host = HostCommands(bridge=bridge)
    res = host.run_font_build_sync({
        "inputDir": "/in", "outputDir": "/out",
        "name": "", "fontTypes": ["woff2"], "assetTypes": [], "prefix": None,
        "unknownKey": 1,
    })
    assert res["ok"] is True
    (req,) = bridge.calls
    assert isinstance(req, RunRequest)
    assert req.to_wire() == {"inputDir": "/in", "outputDir": "/out", "fontTypes": ["woff2"]}


def test_non_list_font_types_fall_back_to_defaults():
    bridge = StubBridge()
    res = HostCommands(bridge=bridge).run_font_build_sync({"inputDir": "/in", "outputDir": "/out", "fontTypes": "woff"})
    assert res["ok"] is True
    assert "fontTypes" not in bridge.calls[0].to_wire()


def test_normalize_request_raises_validation_error():
    with pytest.raises(ValidationError):
        normalize_request({"outputDir": "/out"})
    assert normalize_request({"inputDir": "/in", "outputDir": "/out", "tag": "span"}).tag == "span"


@pytest.mark.parametrize("w,h,expected", [
    (1000, 700, (1000, 700)),
    (10, 10, (640, 520)),
    (5000, 5000, (1400, 1000)),
    (800.6, 600.4, (801, 600)),
    ("800", 600, (None, 600)),
    (None, 700, (None, 700)),
    (True, 700, (None, 700)),
    (math.inf, math.nan, (None, None)),
])
def test_clamp_window_size(w, h, expected):
    assert clamp_window_size(w, h) == expected


def test_window_resize_and_show():
    win = FakeWindow()
    host = HostCommands(bridge=StubBridge(), window=win)
    assert host.set_preferred_window_size(2000, 100) is True
    assert win.set_calls == [(1400, 520)]
    assert win.visible is True


def test_window_height_only_keeps_width():
    win = FakeWindow(size=(900, 600), visible=True)
    host = HostCommands(bridge=StubBridge(), window=win)
    assert host.set_preferred_window_size(None, 750) is True
    assert win.set_calls == [(900, 750)]


def test_window_width_only_is_ignored_but_shown():
    win = FakeWindow()
    host = HostCommands(bridge=StubBridge(), window=win)
    assert host.set_preferred_window_size(900, "tall") is True
    assert win.set_calls == []
    assert win.visible is True


def test_window_missing():
    assert HostCommands(bridge=StubBridge()).set_preferred_window_size(800, 600) is False


def test_dialogs_default_titles():
    dialogs = FakeDialogs(answer="/picked")
    host = HostCommands(bridge=StubBridge(), dialogs=dialogs)
    assert host.choose_directory() == "/picked"
    assert host.choose_file(filters=[{"name": "Config", "extensions": ["json", "py"]}]) == "/picked"
    assert host.choose_file("Pick config", filters="nope") == "/picked"
    assert dialogs.seen == [
        ("dir", "Select folder", None),
        ("file", "Select file", [{"name": "Config", "extensions": ["json", "py"]}]),
        ("file", "Pick config", None),
    ]


def test_dialog_cancel_returns_none():
    host = HostCommands(bridge=StubBridge(), dialogs=FakeDialogs(answer=None))
    assert host.choose_directory("Output") is None


def test_dialogs_required():
    with pytest.raises(RuntimeError):
        HostCommands(bridge=StubBridge()).choose_directory()
