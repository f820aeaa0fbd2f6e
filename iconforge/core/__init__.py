"""
Host-side modules: runtime resolution, sidecar bridge, protocol, and command dispatch.
"""

from .bridge import SidecarBridge, build_child_env
from .configuration import HostSettings, ConfigurationLoader, load_settings
from .dispatcher import HostCommands, normalize_request, clamp_window_size
from .errors import (
    IconforgeError, ValidationError, SpawnError, ProtocolError,
    ConfigLoadError, GenerationError, UnsupportedPlatformError, RunTimeoutError,
)
from .models import RunRequest, RunSuccess, RunFailure, parse_result
from .protocol import extract_response
from .runtime import Platform, RuntimePaths, detect_platform, resolve_runtime

__all__ = [
    "SidecarBridge",
    "build_child_env",
    "HostSettings",
    "ConfigurationLoader",
    "load_settings",
    "HostCommands",
    "normalize_request",
    "clamp_window_size",
    "IconforgeError",
    "ValidationError",
    "SpawnError",
    "ProtocolError",
    "ConfigLoadError",
    "GenerationError",
    "UnsupportedPlatformError",
    "RunTimeoutError",
    "RunRequest",
    "RunSuccess",
    "RunFailure",
    "parse_result",
    "extract_response",
    "Platform",
    "RuntimePaths",
    "detect_platform",
    "resolve_runtime",
]
