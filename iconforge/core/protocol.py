"""
Sidecar wire protocol: one JSON request on stdin, one JSON result line on stdout.

The worker may print unrelated diagnostics before its result, so only the
last non-empty stdout line is trusted. Anything that is not a JSON object
with a boolean ``ok`` is treated as a failed run.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

from .errors import ProtocolError

logger = logging.getLogger(__name__)


def encode_request(request: Mapping[str, Any]) -> bytes:
    """Serialize a request dict as the single UTF-8 JSON document sent to the worker."""
    return json.dumps(dict(request or {})).encode("utf-8")


def encode_result_line(result: Mapping[str, Any]) -> str:
    """Serialize a result as the worker's final output line (ASCII, non-ASCII escaped)."""
    return json.dumps(dict(result)) + "\n"


def last_nonempty_line(text: str) -> Optional[str]:
    # "\n" only; str.splitlines also breaks on U+2028 and friends
    for line in reversed((text or "").split("\n")):
        if line.strip():
            return line.strip()
    return None


def runner_failure(stdout_text: str, stderr_text: str, exit_code: Optional[int]) -> Dict[str, Any]:
    err = ProtocolError(
        f"Runner failed (exit {exit_code}).",
        stderr=f"{stderr_text or ''}\n{stdout_text or ''}".strip(),
    )
    return err.to_result()


def extract_response(stdout_text: str, stderr_text: str, exit_code: Optional[int]) -> Dict[str, Any]:
    """Recover the run result from accumulated worker output.

    Returns the parsed final line verbatim when it is a JSON object carrying
    a boolean ``ok``; otherwise a synthetic failure with all captured text.
    """
    line = last_nonempty_line(stdout_text)
    parsed: Any = None
    if line:
        try:
            parsed = json.loads(line)
        except ValueError:
            logger.debug("final stdout line is not JSON: %.200s", line)
            parsed = None
    if isinstance(parsed, dict) and isinstance(parsed.get("ok"), bool):
        return parsed
    logger.warning("worker produced no valid result line (exit %s)", exit_code)
    return runner_failure(stdout_text, stderr_text, exit_code)
