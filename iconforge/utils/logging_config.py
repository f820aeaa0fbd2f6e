"""
Logging configuration for iconforge (host and worker).
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional, TextIO

LOG_PATH = Path("iconforge_data") / "iconforge.log"


class _FastFileHandler(logging.FileHandler):
    """File handler that can fsync on flush for live tailing."""

    def __init__(self, filename, mode="a", encoding="utf-8", delay=False, *, fsync=False):
        super().__init__(filename, mode=mode, encoding=encoding, delay=delay)
        self._fsync = bool(fsync)

    def flush(self):
        super().flush()
        if self._fsync and self.stream and hasattr(self.stream, "fileno"):
            try:
                os.fsync(self.stream.fileno())
            except OSError:
                pass


def _env_flag(name: str) -> bool:
    v = os.environ.get(name)
    if v is None:
        return False
    return v not in ("0", "false", "False", "no", "NO", "")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    console_level: Optional[str] = None,
    stream: Optional[TextIO] = None,
    file_logging: bool = True,
) -> logging.Logger:
    """
    Setup logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path (default iconforge_data/iconforge.log)
        format_string: Custom format string
        console_level: Console handler level (default WARNING)
        stream: Console stream (default stdout). The worker passes stderr so its
            stdout only carries the result line.
        file_logging: Disable to skip the file handler entirely

    Returns:
        Configured logger
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    # Clear existing handlers
    for h in list(root.handlers):
        root.removeHandler(h)

    if file_logging:
        log_path = LOG_PATH if log_file is None else Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = _FastFileHandler(log_path, fsync=_env_flag("ICONFORGE_LOG_FSYNC"))
        fh.setFormatter(logging.Formatter(format_string))
        fh.setLevel(getattr(logging, level.upper()))
        root.addHandler(fh)

    ch = logging.StreamHandler(stream if stream is not None else sys.stdout)
    ch_level = console_level or "WARNING"
    ch.setLevel(getattr(logging, ch_level.upper()))
    ch.setFormatter(logging.Formatter(format_string))
    root.addHandler(ch)

    return logging.getLogger("iconforge")
