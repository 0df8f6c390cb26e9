"""Bounded execution of the external transcoding tool."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from ..config import MIB
from .transcode_errors import OutputOverflowError, ProcessExecutionError, ProcessTimeoutError

logger = logging.getLogger(__name__)

READ_CHUNK_BYTES = 64 * 1024


@dataclass(frozen=True, slots=True)
class ProcessResult:
    argv: tuple[str, ...]
    returncode: int
    output: bytes


@dataclass(slots=True)
class ProcessRunner:
    """Run a command with a wall-clock deadline and a bounded output buffer.

    stdout and stderr are merged into one buffer. On timeout, overflow or
    caller cancellation the process is killed and reaped in the background;
    the caller never waits for it to exit.
    """

    max_output_bytes: int = 50 * MIB
    read_chunk_bytes: int = READ_CHUNK_BYTES
    _reapers: set[asyncio.Task[int]] = field(default_factory=set, repr=False)

    async def run(self, argv: Sequence[str], timeout_seconds: float) -> ProcessResult:
        command = tuple(argv)
        program = command[0]
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as exc:
            logger.error(
                "transcode.process.launch_failed",
                extra={"program": program},
                exc_info=exc,
            )
            raise ProcessExecutionError(f"failed to launch {program}") from exc

        try:
            output = await asyncio.wait_for(self._collect(process), timeout=timeout_seconds)
        except asyncio.TimeoutError as exc:
            self._terminate(process)
            logger.warning(
                "transcode.process.timeout",
                extra={"program": program, "timeout_seconds": timeout_seconds, "pid": process.pid},
            )
            raise ProcessTimeoutError(program, timeout_seconds) from exc
        except OutputOverflowError:
            self._terminate(process)
            logger.error(
                "transcode.process.output_overflow",
                extra={"program": program, "limit_bytes": self.max_output_bytes},
            )
            raise
        except asyncio.CancelledError:
            self._terminate(process)
            logger.info("transcode.process.cancelled", extra={"program": program, "pid": process.pid})
            raise

        returncode = process.returncode if process.returncode is not None else -1
        if returncode != 0:
            error = ProcessExecutionError(
                f"{program} exited with code {returncode}",
                returncode=returncode,
                output=output,
            )
            logger.error(
                "transcode.process.failed",
                extra={"program": program, "returncode": returncode, "output": error.output_tail()},
            )
            raise error
        return ProcessResult(argv=command, returncode=returncode, output=output)

    async def _collect(self, process: asyncio.subprocess.Process) -> bytes:
        stream = process.stdout
        if stream is None:
            raise RuntimeError("process stdout is not piped")
        buffer = bytearray()
        while True:
            chunk = await stream.read(self.read_chunk_bytes)
            if not chunk:
                break
            buffer.extend(chunk)
            if len(buffer) > self.max_output_bytes:
                raise OutputOverflowError(len(buffer), self.max_output_bytes)
        await process.wait()
        return bytes(buffer)

    def _terminate(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
        reaper = asyncio.ensure_future(process.wait())
        self._reapers.add(reaper)
        reaper.add_done_callback(self._reapers.discard)


__all__ = ["ProcessResult", "ProcessRunner", "READ_CHUNK_BYTES"]
