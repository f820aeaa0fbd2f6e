"""
Host command surface consumed by a UI layer.

The UI asks for four things: pick a folder, pick a file, resize the window,
and run a font build. Dialogs and windows are collaborators supplied by the
UI toolkit; the build is forwarded to the SidecarBridge after validation.
"""

from __future__ import annotations

import asyncio
import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from .bridge import SidecarBridge
from .errors import ValidationError
from .models import RunRequest

logger = logging.getLogger(__name__)

MIN_WIDTH, MAX_WIDTH = 640, 1400
MIN_HEIGHT, MAX_HEIGHT = 520, 1000


class DialogProvider(ABC):
    """Native file/folder pickers."""

    @abstractmethod
    def open_directory(self, title: str) -> Optional[str]:
        """Return the chosen directory, or None if cancelled."""
        raise NotImplementedError

    @abstractmethod
    def open_file(self, title: str, filters: Optional[List[Dict[str, Any]]]) -> Optional[str]:
        """Return the chosen file, or None if cancelled."""
        raise NotImplementedError


class WindowHandle(ABC):
    @abstractmethod
    def get_content_size(self) -> Tuple[int, int]:
        raise NotImplementedError

    @abstractmethod
    def set_content_size(self, width: int, height: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def is_visible(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def show(self) -> None:
        raise NotImplementedError


class TkDialogProvider(DialogProvider):
    """Dialogs backed by tkinter's file dialogs."""

    def _root(self):
        import tkinter

        root = tkinter.Tk()
        root.withdraw()
        return root

    def open_directory(self, title: str) -> Optional[str]:
        from tkinter import filedialog

        root = self._root()
        try:
            path = filedialog.askdirectory(title=title, mustexist=False, parent=root)
        finally:
            root.destroy()
        return path or None

    def open_file(self, title: str, filters: Optional[List[Dict[str, Any]]]) -> Optional[str]:
        from tkinter import filedialog

        filetypes = []
        for f in filters or []:
            exts = " ".join(f"*.{e}" for e in f.get("extensions") or [])
            filetypes.append((str(f.get("name") or "Files"), exts or "*"))
        root = self._root()
        try:
            path = filedialog.askopenfilename(title=title, filetypes=filetypes or [("All files", "*")], parent=root)
        finally:
            root.destroy()
        return path or None


def _finite_number(v: Any) -> Optional[float]:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    if not math.isfinite(v):
        return None
    return float(v)


def clamp_window_size(width: Any, height: Any) -> Tuple[Optional[int], Optional[int]]:
    """Clamp a requested content size; non-numeric or non-finite values become None."""
    w = _finite_number(width)
    h = _finite_number(height)
    safe_w = round(max(MIN_WIDTH, min(MAX_WIDTH, w))) if w is not None else None
    safe_h = round(max(MIN_HEIGHT, min(MAX_HEIGHT, h))) if h is not None else None
    return safe_w, safe_h


def normalize_request(opts: Optional[Mapping[str, Any]]) -> RunRequest:
    """Validate caller options and coerce them into a RunRequest.

    Empty optional values are dropped so the worker applies its defaults;
    tag lists are coerced to lists of strings.
    """
    opts = dict(opts or {})
    if not opts.get("inputDir"):
        raise ValidationError("inputDir is required")
    if not opts.get("outputDir"):
        raise ValidationError("outputDir is required")
    try:
        return RunRequest.model_validate(opts)
    except PydanticValidationError as exc:
        errs = "; ".join(f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors())
        raise ValidationError(f"invalid options: {errs}") from exc


class HostCommands:
    """Facade over dialogs, window sizing, and the sidecar bridge."""

    def __init__(
        self,
        bridge: Optional[SidecarBridge] = None,
        dialogs: Optional[DialogProvider] = None,
        window: Optional[WindowHandle] = None,
    ):
        self.bridge = bridge or SidecarBridge()
        self.dialogs = dialogs
        self.window = window

    def choose_directory(self, title: Optional[str] = None) -> Optional[str]:
        if self.dialogs is None:
            raise RuntimeError("no dialog provider configured")
        return self.dialogs.open_directory(title or "Select folder")

    def choose_file(self, title: Optional[str] = None, filters: Optional[Sequence[Dict[str, Any]]] = None) -> Optional[str]:
        if self.dialogs is None:
            raise RuntimeError("no dialog provider configured")
        flt = list(filters) if isinstance(filters, (list, tuple)) else None
        return self.dialogs.open_file(title or "Select file", flt)

    def set_preferred_window_size(self, width: Any = None, height: Any = None) -> bool:
        win = self.window
        if win is None:
            return False
        safe_w, safe_h = clamp_window_size(width, height)
        if safe_w is not None and safe_h is not None:
            win.set_content_size(safe_w, safe_h)
        elif safe_h is not None:
            current_w, _ = win.get_content_size()
            win.set_content_size(current_w, safe_h)
        if not win.is_visible():
            win.show()
        return True

    async def run_font_build(self, opts: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Validate options and run one build; never raises."""
        try:
            request = normalize_request(opts)
        except ValidationError as exc:
            logger.warning("rejected build request: %s", exc)
            return {"ok": False, "error": exc.message}
        return await self.bridge.run(request)

    def run_font_build_sync(self, opts: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        return asyncio.run(self.run_font_build(opts))
