import sys
import textwrap
from pathlib import Path

import pytest

from iconforge.core.configuration import HostSettings
from iconforge.core.runtime import RuntimePaths, detect_platform, resolve_runtime

REPO_ROOT = Path(__file__).resolve().parents[1]
FAKE_GENERATOR = Path(__file__).resolve().parent / "fixtures" / "fake_generator.py"


@pytest.fixture
def repo_paths() -> RuntimePaths:
    """Development paths pointing at this checkout's worker script."""
    return resolve_runtime(False, detect_platform(), app_root=REPO_ROOT, env={}, ambient_executable=sys.executable)


@pytest.fixture
def fake_settings() -> HostSettings:
    s = HostSettings()
    s.worker.generator = f"{FAKE_GENERATOR}:generate"
    return s


@pytest.fixture
def script_paths(tmp_path):
    """Return a factory writing a throwaway worker script and its RuntimePaths."""
    def make(body: str, name: str = "worker.py") -> RuntimePaths:
        script = tmp_path / name
        script.write_text(textwrap.dedent(body), encoding="utf-8")
        return RuntimePaths(sys.executable, str(script), str(tmp_path))
    return make


SQUARE_SVG = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24"><path d="M2 2h20v20H2z"/></svg>'
CIRCLE_SVG = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<svg xmlns="http://www.w3.org/2000/svg" width="24px" height="24px">'
    '<path d="M12 2C17.5 2 22 6.5 22 12S17.5 22 12 22 2 17.5 2 12 6.5 2 12 2z"/></svg>'
)


@pytest.fixture
def icon_dir(tmp_path) -> Path:
    d = tmp_path / "icons"
    (d / "arrows").mkdir(parents=True)
    (d / "square.svg").write_text(SQUARE_SVG, encoding="utf-8")
    (d / "circle.svg").write_text(CIRCLE_SVG, encoding="utf-8")
    (d / "arrows" / "left.svg").write_text(SQUARE_SVG, encoding="utf-8")
    (d / "notes.txt").write_text("not an icon", encoding="utf-8")
    return d
