"""
Error taxonomy for the sidecar bridge.

Every failure, whatever its origin, is normalized to the same wire shape
``{"ok": False, "error": str, "stderr"?: str}`` before it reaches a caller.
The categories below only exist so that code on either side of the process
boundary can raise and log something specific; callers branch on ``ok``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Categories of failures a run can end with."""
    VALIDATION = "validation"
    SPAWN = "spawn"
    PROTOCOL = "protocol"
    CONFIG_LOAD = "config_load"
    GENERATION = "generation"
    PLATFORM = "platform"
    TIMEOUT = "timeout"


class IconforgeError(Exception):
    """Base class for all iconforge errors."""

    category: ErrorCategory = ErrorCategory.PROTOCOL

    def __init__(self, message: str, *, stderr: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stderr = stderr

    def to_result(self) -> Dict[str, Any]:
        """Return the ``Fail`` wire dict for this error."""
        out: Dict[str, Any] = {"ok": False, "error": self.message}
        if self.stderr is not None:
            out["stderr"] = self.stderr
        return out


class ValidationError(IconforgeError):
    """A request or a settings file is missing required fields or has bad values."""
    category = ErrorCategory.VALIDATION


class SpawnError(IconforgeError):
    """The worker process could not be created."""
    category = ErrorCategory.SPAWN


class ProtocolError(IconforgeError):
    """The worker output did not end in a JSON object with a boolean ``ok``."""
    category = ErrorCategory.PROTOCOL


class ConfigLoadError(IconforgeError):
    """A ``configPath`` file or module could not be loaded."""
    category = ErrorCategory.CONFIG_LOAD


class GenerationError(IconforgeError):
    """The font generator raised."""
    category = ErrorCategory.GENERATION


class UnsupportedPlatformError(IconforgeError):
    """No bundled runtime exists for the host platform."""
    category = ErrorCategory.PLATFORM


class RunTimeoutError(IconforgeError):
    """The worker did not exit within the configured timeout."""
    category = ErrorCategory.TIMEOUT
