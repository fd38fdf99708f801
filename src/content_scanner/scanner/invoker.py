"""Scanner invoker: run the configured scan command against a file."""

from __future__ import annotations

import asyncio
import logging
import shlex
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import psutil

from content_scanner.errors import ScanInvocationError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

# Scanner output kept in the verdict info when a file is not clean
_OUTPUT_TAIL = 500


@dataclass(frozen=True)
class ScanOutcome:
    """Raw result of one scan command execution."""

    clean: bool
    info: str
    exit_code: int


class ScannerInvoker:
    """Runs ``<script> <file>`` and maps the exit code to a verdict.

    Exit code 0 means clean; anything else means the file is not clean.
    """

    def __init__(self, script: str, timeout: float = 120.0) -> None:
        self._argv = shlex.split(script)
        if not self._argv:
            raise ScanInvocationError("Scan command is empty")
        self._timeout = timeout

    async def run(self, file_path: str | Path) -> ScanOutcome:
        argv = [*self._argv, str(file_path)]
        logger.info("Running command %s", shlex.join(argv))

        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except (FileNotFoundError, PermissionError) as exc:
            logger.error("Unable to execute scan command %s: %s", argv[0], exc)
            raise ScanInvocationError("Unable to execute scan command") from exc

        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), self._timeout)
        except asyncio.TimeoutError as exc:
            logger.error(
                "Scan command timed out after %.1fs (PID %d)", self._timeout, proc.pid
            )
            _kill_tree(proc.pid)
            await proc.wait()
            raise UpstreamUnavailableError("Scan timed out") from exc
        except asyncio.CancelledError:
            # The working directory is removed once this returns
            logger.warning("Scan cancelled, killing PID %d", proc.pid)
            _kill_tree(proc.pid)
            await proc.wait()
            raise

        exit_code = proc.returncode
        output = stdout.decode("utf-8", errors="replace").strip()
        clean = exit_code == 0
        if clean:
            info = f"File clean at {datetime.now(timezone.utc).isoformat(timespec='seconds')}"
        elif output:
            info = f"File is not clean: {output[-_OUTPUT_TAIL:]}"
        else:
            info = "File is not clean"
        return ScanOutcome(clean=clean, info=info, exit_code=exit_code)


def _kill_tree(pid: int) -> None:
    """Kill a process and every descendant it spawned."""
    try:
        parent = psutil.Process(pid)
        procs = parent.children(recursive=True) + [parent]
    except psutil.NoSuchProcess:
        return

    for p in procs:
        try:
            p.kill()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
