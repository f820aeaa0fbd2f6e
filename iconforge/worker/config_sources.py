"""
Config sources for the worker's ``configPath`` option.

A config is a flat mapping merged under the request options. The source is
picked by file suffix: JSON and YAML are static data, anything else is loaded
as a Python module (only when module configs are allowed).
"""

from __future__ import annotations

import importlib.util
import json
import traceback
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, Optional

import yaml

from iconforge.core.errors import ConfigLoadError


class ConfigSource(ABC):
    def __init__(self, path: Path):
        self.path = Path(path)

    @abstractmethod
    def read(self) -> Any:
        """Return the raw config object."""
        raise NotImplementedError

    def load(self) -> Dict[str, Any]:
        try:
            obj = self.read()
        except ConfigLoadError:
            raise
        except Exception as exc:
            raise ConfigLoadError(
                f"Failed to load configPath: {self.path}\n{_format_exc(exc)}"
            ) from exc
        if obj is None:
            return {}
        if not isinstance(obj, dict):
            raise ConfigLoadError(
                f"Failed to load configPath: {self.path}\nconfig must be a mapping, got {type(obj).__name__}"
            )
        return obj


class JsonFileSource(ConfigSource):
    def read(self) -> Any:
        return json.loads(self.path.read_text(encoding="utf-8"))


class YamlFileSource(ConfigSource):
    def read(self) -> Any:
        return yaml.safe_load(self.path.read_text(encoding="utf-8"))


class ModuleSource(ConfigSource):
    """Python module config: its ``default`` attribute, or its public globals."""

    def read(self) -> Any:
        mod = load_module_from_path(self.path)
        if hasattr(mod, "default"):
            return mod.default
        return {
            k: v for k, v in vars(mod).items()
            if not k.startswith("_") and not isinstance(v, ModuleType)
        }


def load_module_from_path(path: Path) -> ModuleType:
    """Import a Python source file under a private module name."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"No such file: {path}")
    name = f"_iconforge_cfg_{path.stem}_{uuid.uuid4().hex[:8]}"
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import {path}")
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


def config_source_for(path: Path, *, allow_modules: bool = True) -> ConfigSource:
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".json":
        return JsonFileSource(p)
    if suffix in (".yaml", ".yml"):
        return YamlFileSource(p)
    if not allow_modules:
        raise ConfigLoadError(
            f"Failed to load configPath: {p}\nmodule configs are disabled; use a .json or .yaml file"
        )
    return ModuleSource(p)


def load_user_config(config_path: Optional[str], *, allow_modules: bool = True) -> Optional[Dict[str, Any]]:
    """Load ``configPath`` if given; relative paths resolve against the worker cwd."""
    if not config_path:
        return None
    abs_path = Path(config_path).resolve()
    return config_source_for(abs_path, allow_modules=allow_modules).load()


def _format_exc(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip()
