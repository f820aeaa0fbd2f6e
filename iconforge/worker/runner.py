"""
Worker: read one JSON request on stdin, build the fonts, print one JSON result line.

Launched by iconforge.core.bridge as ``<python> runner.py`` with stdin/stdout/stderr
piped. stdout carries nothing but the final result line; diagnostics go to
stderr. Exit status is 0 on success and 1 on failure.
"""

from __future__ import annotations

import importlib
import json
import logging
import os
import sys
import traceback
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, TextIO

from iconforge.core.errors import ConfigLoadError, GenerationError, ValidationError
from iconforge.core.protocol import encode_result_line
from iconforge.utils.logging_config import setup_logging
from iconforge.worker.config_sources import load_module_from_path, load_user_config

logger = logging.getLogger("iconforge.worker")

GENERATOR_ENV = "ICONFORGE_GENERATOR"
ALLOW_MODULE_ENV = "ICONFORGE_ALLOW_MODULE_CONFIG"
LOG_LEVEL_ENV = "ICONFORGE_LOG_LEVEL"
DEFAULT_GENERATOR = "iconforge.generator:generate_fonts"


def read_input(stream: TextIO) -> str:
    return stream.read()


def parse_input(raw: str) -> Dict[str, Any]:
    if not raw or not raw.strip():
        return {}
    opts = json.loads(raw)
    if not isinstance(opts, dict):
        raise ValidationError(f"request must be a JSON object, got {type(opts).__name__}")
    return opts


def merge_options(user_config: Optional[Dict[str, Any]], opts: Dict[str, Any]) -> Dict[str, Any]:
    # Shallow: request fields replace config fields wholesale
    return {**(user_config or {}), **opts}


def resolve_generator(entry: Optional[str] = None) -> Callable[..., Any]:
    """Resolve ``module:attr`` (or ``/path/to/file.py:attr``) to a callable."""
    entry = entry or DEFAULT_GENERATOR
    target, sep, attr = entry.rpartition(":")
    if not sep or not target or not attr:
        raise GenerationError(f"invalid generator entry point: {entry!r}")
    if target.endswith(".py"):
        mod = load_module_from_path(Path(target))
    else:
        mod = importlib.import_module(target)
    fn = getattr(mod, attr, None)
    if not callable(fn):
        raise GenerationError(f"generator entry point is not callable: {entry}")
    return fn


def byte_length(content: Any) -> Optional[int]:
    if isinstance(content, (bytes, bytearray)):
        return len(content)
    if isinstance(content, memoryview):
        return content.nbytes
    if isinstance(content, str):
        return len(content.encode("utf-8"))
    return None


def _field(obj: Any, *names: str) -> Any:
    for n in names:
        if isinstance(obj, dict):
            if n in obj:
                return obj[n]
        elif hasattr(obj, n):
            return getattr(obj, n)
    return None


def slim_write_results(write_results: Optional[Iterable[Any]]) -> List[Dict[str, Any]]:
    """Replace file contents with their size; keep the destination path."""
    out: List[Dict[str, Any]] = []
    for r in write_results or []:
        path = _field(r, "writePath", "write_path")
        out.append({
            "writePath": str(path) if path is not None else None,
            "bytes": byte_length(_field(r, "content")),
        })
    return out


def shape_result(results: Any) -> Dict[str, Any]:
    return {
        "ok": True,
        "data": {
            "options": _field(results, "options"),
            "writeResults": slim_write_results(_field(results, "writeResults", "write_results")),
            "codepoints": _field(results, "codepoints"),
        },
    }


def _env_flag(name: str, default: bool = True) -> bool:
    v = os.environ.get(name)
    if v is None:
        return default
    return v not in ("0", "false", "False", "no", "NO", "")


def execute(raw: str) -> Dict[str, Any]:
    opts = parse_input(raw)
    logger.debug("request keys: %s", sorted(opts))

    user_config = load_user_config(
        opts.get("configPath"),
        allow_modules=_env_flag(ALLOW_MODULE_ENV),
    )
    merged = merge_options(user_config, opts)

    generate = resolve_generator(os.environ.get(GENERATOR_ENV))
    try:
        results = generate(merged, True)
    except Exception as exc:
        raise GenerationError(str(exc)) from exc
    logger.info("generation finished")
    return shape_result(results)


def main(stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> int:
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    code = 0
    try:
        out = execute(read_input(stdin))
        line = encode_result_line(out)
    except Exception as exc:  # noqa: BLE001
        logger.error("worker failed: %s", exc)
        out = {"ok": False, "error": _error_text(exc)}
        line = encode_result_line(out)
        code = 1
    stdout.write(line)
    stdout.flush()
    return code


def _error_text(exc: BaseException) -> str:
    cause = exc.__cause__
    if isinstance(exc, GenerationError) and cause is not None:
        return "".join(traceback.format_exception(type(cause), cause, cause.__traceback__)).rstrip()
    if isinstance(exc, ConfigLoadError):
        return exc.message
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip() or str(exc)


if __name__ == "__main__":  # pragma: no cover
    setup_logging(
        level=os.environ.get(LOG_LEVEL_ENV, "WARNING"),
        log_file=None,
        console_level=os.environ.get(LOG_LEVEL_ENV, "WARNING"),
        stream=sys.stderr,
        file_logging=False,
    )
    sys.exit(main())
