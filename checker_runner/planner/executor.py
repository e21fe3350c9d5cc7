"""Process executor for running the compiler.

This module runs the planned command, streaming its merged output into the
log while it runs.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Protocol

from checker_runner.core.exceptions import CheckerExecutionError
from checker_runner.core.logger.logger import get_logger

logger = get_logger(__name__)

ERROR_MARKER = "error:"

# Diagnostics can echo very long source lines
STREAM_LIMIT = 1024 * 1024


@dataclass
class ProcessResult:
    """Captured outcome of one compiler process.

    Attributes:
        return_code: Exit code of the process.
        lines: Every output line, stdout and stderr merged.
        error_lines: Lines carrying the error marker.
        duration_seconds: Wall-clock run time.
    """

    return_code: int
    lines: list[str] = field(default_factory=list)
    error_lines: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.return_code == 0

    @property
    def output(self) -> str:
        return "\n".join(self.lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "return_code": self.return_code,
            "line_count": len(self.lines),
            "error_count": len(self.error_lines),
            "duration_seconds": self.duration_seconds,
        }


class CommandExecutor(Protocol):
    """Anything able to run an argument list."""

    async def execute(self, arguments: list[str]) -> ProcessResult: ...


class ProcessExecutor:
    """Runs a command as a child process and relays its output line by line."""

    def __init__(self, timeout: int | None = None) -> None:
        """Initialize the executor.

        Args:
            timeout: Maximum run time in seconds, None for no limit.
        """
        self.timeout = timeout

    async def execute(self, arguments: list[str]) -> ProcessResult:
        """Run the command to completion.

        Args:
            arguments: Executable followed by its arguments.

        Returns:
            ProcessResult with exit code and captured output.

        Raises:
            CheckerExecutionError: If the process cannot be started or times out.
        """
        start_time = time.time()
        try:
            process = await asyncio.create_subprocess_exec(
                *arguments,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                limit=STREAM_LIMIT,
            )
        except OSError as e:
            raise CheckerExecutionError(
                f"Could not start {arguments[0]}: {e}",
                command=arguments[0],
            ) from e

        result = ProcessResult(return_code=-1)
        try:
            await asyncio.wait_for(self._drain(process, result), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise CheckerExecutionError(
                f"Command timed out after {self.timeout} seconds",
                command=arguments[0],
            ) from e

        result.duration_seconds = time.time() - start_time
        return result

    async def _drain(self, process: asyncio.subprocess.Process, result: ProcessResult) -> None:
        # Read everything before waiting so the child never blocks on a full pipe
        assert process.stdout is not None
        pending = bytearray()
        while True:
            try:
                pending += await process.stdout.readuntil(b"\n")
            except asyncio.LimitOverrunError as e:
                # Line longer than the buffer limit, keep reading it in pieces
                pending += await process.stdout.readexactly(e.consumed)
                continue
            except asyncio.IncompleteReadError as e:
                pending += e.partial
                if pending:
                    self._record(bytes(pending), result)
                break
            self._record(bytes(pending), result)
            pending.clear()
        result.return_code = await process.wait()

    def _record(self, raw: bytes, result: ProcessResult) -> None:
        line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
        result.lines.append(line)
        if ERROR_MARKER in line:
            result.error_lines.append(line)
            logger.error(line)
        else:
            logger.info(line)
