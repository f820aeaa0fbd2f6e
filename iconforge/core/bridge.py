"""
Sidecar bridge: launch the worker, exchange one request/response, return a result.

Inputs:
- a request dict (already validated by the dispatcher)
- HostSettings (runtime overrides, env allowlist, timeout)

Behavior:
- Resolve interpreter + worker script for this host
- Spawn the worker with piped stdio and an explicit environment
- Write the request JSON to stdin and close it
- Accumulate stdout/stderr until exit, then extract the result line

``run`` never raises: every failure comes back as ``{"ok": False, ...}``.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .configuration import HostSettings
from .errors import IconforgeError, RunTimeoutError, SpawnError, ValidationError
from .models import RunRequest, failure
from .protocol import encode_request, extract_response
from .runtime import RuntimePaths, detect_platform, is_packaged, resolve_runtime

logger = logging.getLogger(__name__)

_READ_CHUNK = 64 * 1024


@dataclass
class ProcessOutcome:
    """Output accumulated for a single run; discarded once extracted."""
    stdout: bytearray = field(default_factory=bytearray)
    stderr: bytearray = field(default_factory=bytearray)
    exit_code: Optional[int] = None
    timed_out: bool = False

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")


def build_child_env(
    paths: RuntimePaths,
    allowlist,
    extra: Optional[Mapping[str, str]] = None,
    host_env: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Construct the worker environment from an enumerated allowlist.

    Only listed host variables are forwarded; ``extra`` is layered on top and
    the interpreter settings the protocol depends on are always set last.
    """
    host_env = os.environ if host_env is None else host_env
    env: Dict[str, str] = {}
    for name in allowlist or []:
        val = host_env.get(name)
        if val is not None:
            env[name] = val
    env.update({str(k): str(v) for k, v in (extra or {}).items()})
    env["PYTHONPATH"] = paths.working_directory
    env["PYTHONIOENCODING"] = "utf-8"
    env["PYTHONUNBUFFERED"] = "1"
    return env


class SidecarBridge:
    """Host-side launcher for the isolated worker process.

    Public API:
      - SidecarBridge(settings: HostSettings|None = None, paths: RuntimePaths|None = None)
      - await run(request) -> dict
      - run_sync(request) -> dict
      - resolve_paths() -> RuntimePaths

    Calls on one instance are serialized; each call owns a fresh process and
    fresh buffers.
    """

    def __init__(self, settings: Optional[HostSettings] = None, paths: Optional[RuntimePaths] = None):
        self.settings = settings or HostSettings()
        self._paths = paths
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    def _loop_lock(self) -> asyncio.Lock:
        # asyncio.Lock binds to one loop; run_sync starts a new loop per call
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    def resolve_paths(self) -> RuntimePaths:
        if self._paths is not None:
            return self._paths
        rt = self.settings.runtime
        packaged = is_packaged() if rt.packaged is None else rt.packaged
        paths = resolve_runtime(
            packaged,
            detect_platform(),
            resources_dir=Path(rt.resources_dir) if rt.resources_dir else None,
            app_root=Path(rt.app_root) if rt.app_root else None,
        )
        if rt.executable:
            paths = RuntimePaths(rt.executable, paths.worker_script_path, paths.working_directory)
        return paths

    async def run(self, request: Any) -> Dict[str, Any]:
        """Run one build in a fresh worker and return its result dict."""
        try:
            async with self._loop_lock():
                return await self._run_once(_request_dict(request))
        except IconforgeError as exc:
            logger.error("run failed [%s]: %s", exc.category.value, exc)
            return exc.to_result()
        except Exception as exc:  # noqa: BLE001
            logger.exception("unexpected bridge error")
            return failure(repr(exc), stderr="")

    def run_sync(self, request: Any) -> Dict[str, Any]:
        return asyncio.run(self.run(request))

    async def _run_once(self, request: Dict[str, Any]) -> Dict[str, Any]:
        paths = self.resolve_paths()
        env = build_child_env(paths, self.settings.bridge.env_allowlist, self.settings.worker_env())
        outcome = ProcessOutcome()
        try:
            payload = encode_request(request)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"request is not JSON-serializable: {exc}") from exc

        logger.info(f"Launching worker: {paths.executable_path} {paths.worker_script_path}")
        logger.debug(f"Worker cwd={paths.working_directory} env keys={sorted(env)}")
        try:
            proc = await asyncio.create_subprocess_exec(
                paths.executable_path,
                paths.worker_script_path,
                cwd=paths.working_directory,
                env=env,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.error(f"Worker spawn failed: {exc}")
            return SpawnError(str(exc), stderr=outcome.stderr_text).to_result()

        pumps = asyncio.gather(
            _pump(proc.stdout, outcome.stdout),
            _pump(proc.stderr, outcome.stderr),
        )
        timeout = self.settings.bridge.timeout_sec
        try:
            await _feed_stdin(proc, payload)
            try:
                await asyncio.wait_for(_wait_all(proc, pumps), timeout=timeout)
            except asyncio.TimeoutError:
                outcome.timed_out = True
                logger.error(f"Worker pid={proc.pid} exceeded {timeout}s; killing")
                _kill(proc)
                await _wait_all(proc, pumps)
        except BaseException:
            # Never leave a worker or its pumps behind
            _kill(proc)
            await _wait_all(proc, pumps)
            raise

        outcome.exit_code = proc.returncode
        logger.info(f"Worker exited rc={outcome.exit_code}")

        if outcome.timed_out:
            stderr = f"{outcome.stderr_text}\n{outcome.stdout_text}".strip()
            return RunTimeoutError(f"Runner timed out after {timeout:g}s.", stderr=stderr).to_result()
        return extract_response(outcome.stdout_text, outcome.stderr_text, outcome.exit_code)


def _request_dict(request: Any) -> Dict[str, Any]:
    if isinstance(request, RunRequest):
        return request.to_wire()
    return dict(request or {})


async def _pump(stream: Optional[asyncio.StreamReader], buf: bytearray) -> None:
    if stream is None:
        return
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            return
        buf.extend(chunk)


async def _feed_stdin(proc: asyncio.subprocess.Process, payload: bytes) -> None:
    if proc.stdin is None:
        return
    try:
        proc.stdin.write(payload)
        await proc.stdin.drain()
    except (BrokenPipeError, ConnectionResetError) as exc:
        # Worker exited before reading; its exit status tells the story
        logger.debug(f"Worker closed stdin early: {exc}")
    finally:
        try:
            proc.stdin.close()
        except (BrokenPipeError, ConnectionResetError):
            pass


async def _wait_all(proc: asyncio.subprocess.Process, pumps: "asyncio.Future[Any]") -> None:
    # Exit is only reported once both streams have hit EOF
    await asyncio.shield(pumps)
    await proc.wait()


def _kill(proc: asyncio.subprocess.Process) -> None:
    try:
        proc.kill()
    except ProcessLookupError:
        pass
