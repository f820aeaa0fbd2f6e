"""
Runtime resolution: which interpreter runs the worker, and which worker script.

Packaged builds ship their own interpreter under the bundle resource
directory; development runs use the interpreter that launched the host so the
same worker script is exercised from the source tree.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from .errors import UnsupportedPlatformError

# Environment overrides
PYTHON_ENV = "ICONFORGE_PYTHON"
RESOURCES_ENV = "ICONFORGE_RESOURCES"

WORKER_RELPATH = Path("iconforge") / "worker" / "runner.py"


class Platform(Enum):
    WIN = "win"
    MAC = "mac"
    OTHER = "other"


@dataclass(frozen=True)
class RuntimePaths:
    executable_path: str
    worker_script_path: str
    working_directory: str


def detect_platform(name: Optional[str] = None) -> Platform:
    p = name if name is not None else sys.platform
    if p.startswith("win") or p == "cygwin":
        return Platform.WIN
    if p == "darwin":
        return Platform.MAC
    return Platform.OTHER


def is_packaged() -> bool:
    """True when running from a frozen bundle (PyInstaller and friends)."""
    return bool(getattr(sys, "frozen", False))


def default_app_root() -> Path:
    # app_root/iconforge/core/runtime.py -> app_root
    return Path(__file__).resolve().parents[2]


def default_resources_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if env is None else env
    override = env.get(RESOURCES_ENV)
    if override:
        return Path(override)
    meipass = getattr(sys, "_MEIPASS", None)
    if meipass:
        return Path(meipass)
    return Path(sys.executable).resolve().parent / "resources"


def bundled_executable(resources_dir: Path, platform: Platform) -> Path:
    if platform is Platform.WIN:
        return resources_dir / "python" / "python.exe"
    if platform is Platform.MAC:
        return resources_dir / "python" / "bin" / "python3"
    raise UnsupportedPlatformError(f"No bundled runtime for platform: {platform.value}")


def development_executable(
    platform: Platform,
    env: Mapping[str, str],
    ambient_executable: Optional[str],
) -> str:
    # Priority: explicit override -> interpreter running the host -> name lookup
    override = env.get(PYTHON_ENV)
    if override:
        return override
    if ambient_executable:
        return ambient_executable
    return "python" if platform is Platform.WIN else "python3"


def resolve_runtime(
    packaged: bool,
    platform: Platform,
    *,
    resources_dir: Optional[Path] = None,
    app_root: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    ambient_executable: Optional[str] = None,
) -> RuntimePaths:
    """Return the absolute paths needed to launch the worker.

    Pure path computation: nothing is checked on disk, a missing executable
    surfaces later as a spawn error.
    """
    env = os.environ if env is None else env
    if packaged:
        resources = Path(resources_dir) if resources_dir else default_resources_dir(env)
        exe = bundled_executable(resources, platform)
        app_dir = resources / "app"
        return RuntimePaths(
            executable_path=str(exe),
            worker_script_path=str(app_dir / WORKER_RELPATH),
            working_directory=str(app_dir),
        )

    root = Path(app_root) if app_root else default_app_root()
    exe_s = development_executable(
        platform,
        env,
        ambient_executable if ambient_executable is not None else sys.executable,
    )
    return RuntimePaths(
        executable_path=exe_s,
        worker_script_path=str(root / WORKER_RELPATH),
        working_directory=str(root),
    )
