"""
Host settings for iconforge.

Settings live in an optional YAML file (``ICONFORGE_CONFIG`` or an explicit
path) with four sections: runtime, bridge, worker, logging. Missing sections
and keys fall back to the defaults below.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ValidationError

logger = logging.getLogger(__name__)

CONFIG_ENV = "ICONFORGE_CONFIG"

# Host variables forwarded to the worker; anything else is dropped.
DEFAULT_ENV_ALLOWLIST: List[str] = [
    "PATH",
    "HOME",
    "USERPROFILE",
    "SYSTEMROOT",
    "SYSTEMDRIVE",
    "TEMP",
    "TMP",
    "TMPDIR",
    "LANG",
    "LC_ALL",
    "LC_CTYPE",
    "ICONFORGE_GENERATOR",
    "ICONFORGE_ALLOW_MODULE_CONFIG",
    "ICONFORGE_LOG_LEVEL",
]

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _level(value: Any, where: str) -> str:
    v = str(value).upper()
    if v not in _LEVELS:
        raise ValidationError(f"{where} must be one of {', '.join(_LEVELS)}: {value}")
    return v


@dataclass
class RuntimeSettings:
    """Where the worker interpreter and script come from."""
    packaged: Optional[bool] = None
    executable: Optional[str] = None
    resources_dir: Optional[str] = None
    app_root: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RuntimeSettings':
        packaged = data.get('packaged')
        if packaged is not None and not isinstance(packaged, bool):
            raise ValidationError(f"runtime.packaged must be a boolean: {packaged!r}")
        return cls(
            packaged=packaged,
            executable=data.get('executable'),
            resources_dir=data.get('resources_dir'),
            app_root=data.get('app_root'),
        )


@dataclass
class BridgeSettings:
    """Launcher behaviour."""
    timeout_sec: Optional[float] = None
    env_allowlist: List[str] = field(default_factory=lambda: list(DEFAULT_ENV_ALLOWLIST))
    extra_env: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BridgeSettings':
        timeout = data.get('timeout_sec')
        if timeout is not None:
            try:
                timeout = float(timeout)
            except (TypeError, ValueError):
                raise ValidationError(f"bridge.timeout_sec must be a number: {timeout!r}")
            if timeout <= 0:
                raise ValidationError("bridge.timeout_sec must be positive")
        allow = data.get('env_allowlist')
        extra = data.get('extra_env') or {}
        if not isinstance(extra, dict):
            raise ValidationError("bridge.extra_env must be a mapping")
        return cls(
            timeout_sec=timeout,
            env_allowlist=[str(x) for x in allow] if allow is not None else list(DEFAULT_ENV_ALLOWLIST),
            extra_env={str(k): str(v) for k, v in extra.items()},
        )


@dataclass
class WorkerSettings:
    """Settings forwarded to the worker through its environment."""
    generator: Optional[str] = None
    allow_module_configs: bool = True
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WorkerSettings':
        return cls(
            generator=data.get('generator'),
            allow_module_configs=bool(data.get('allow_module_configs', True)),
            log_level=_level(data.get('log_level', "WARNING"), "worker.log_level"),
        )


@dataclass
class LoggingSettings:
    level: str = "INFO"
    file: Optional[str] = None
    console_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LoggingSettings':
        return cls(
            level=_level(data.get('level', "INFO"), "logging.level"),
            file=data.get('file'),
            console_level=_level(data.get('console_level', "WARNING"), "logging.console_level"),
        )


@dataclass
class HostSettings:
    """Complete host configuration."""
    runtime: RuntimeSettings = field(default_factory=RuntimeSettings)
    bridge: BridgeSettings = field(default_factory=BridgeSettings)
    worker: WorkerSettings = field(default_factory=WorkerSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    source: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[Path] = None) -> 'HostSettings':
        return cls(
            runtime=RuntimeSettings.from_dict(_section(data, 'runtime')),
            bridge=BridgeSettings.from_dict(_section(data, 'bridge')),
            worker=WorkerSettings.from_dict(_section(data, 'worker')),
            logging=LoggingSettings.from_dict(_section(data, 'logging')),
            source=source,
        )

    def worker_env(self) -> Dict[str, str]:
        """Variables the launcher sets for the worker on top of the allowlist."""
        env: Dict[str, str] = {
            "ICONFORGE_ALLOW_MODULE_CONFIG": "1" if self.worker.allow_module_configs else "0",
            "ICONFORGE_LOG_LEVEL": self.worker.log_level,
        }
        if self.worker.generator:
            env["ICONFORGE_GENERATOR"] = self.worker.generator
        env.update(self.bridge.extra_env)
        return env


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    sec = data.get(name)
    if sec is None:
        return {}
    if not isinstance(sec, dict):
        raise ValidationError(f"'{name}' section must be a mapping")
    return sec


class ConfigurationLoader:
    """YAML settings file loader and validator."""

    KNOWN_SECTIONS = ('runtime', 'bridge', 'worker', 'logging')

    def __init__(self, config_path: Path):
        self.config_path = Path(config_path)

    def load(self) -> HostSettings:
        logger.info(f"Loading settings from {self.config_path}")
        if not self.config_path.exists():
            raise ValidationError(f"Settings file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f) or {}

        if not isinstance(raw, dict):
            raise ValidationError(f"Settings file must contain a mapping: {self.config_path}")

        for key in raw:
            if key not in self.KNOWN_SECTIONS:
                logger.warning(f"Ignoring unknown settings section '{key}' in {self.config_path}")

        return HostSettings.from_dict(raw, source=self.config_path)


def load_settings(path: Optional[Path] = None) -> HostSettings:
    """Load settings from ``path``, else ``ICONFORGE_CONFIG``, else defaults."""
    if path is None:
        env_path = os.environ.get(CONFIG_ENV)
        if env_path:
            path = Path(env_path)
    if path is None:
        return HostSettings()
    return ConfigurationLoader(path).load()
