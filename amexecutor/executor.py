"""Timeout-bounded execution of handler commands.

Commands are started directly, never through a shell, so the arguments
reach the program exactly as tokenized.  Standard output and standard error
are merged into a single buffer.
"""

import asyncio
import logging
import os
import signal
import time
from contextlib import AsyncExitStack
from dataclasses import dataclass

from amexecutor.exceptions import CommandExitError, CommandStartError, CommandTimeoutError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    """Combined output of a finished command."""

    output: bytes = b""
    skipped: bool = False


class CommandExecutor:
    """Runs commands with a deadline.

    Args:
        timeout: Seconds a command may run before it is killed.
        debug: When set, commands are logged but never started.
        max_concurrent: Upper bound on commands running at the same time
            across all requests, ``0`` for no bound.
    """

    def __init__(self, timeout: float, debug: bool = False, max_concurrent: int = 0):
        self.timeout = timeout
        self.debug = debug
        self._limiter = asyncio.Semaphore(max_concurrent) if max_concurrent > 0 else None

    async def execute(self, path: str, args: list[str]) -> ExecutionResult:
        """Run *path* with *args* and return its combined output.

        Raises:
            CommandStartError: If the process could not be started.
            CommandTimeoutError: If the process outlived the timeout.  It has
                been killed and its output is discarded.
            CommandExitError: If the process exited with a non-zero status.
        """
        if self.debug:
            logger.info(f"DEBUG: Not executing command \"{path}\" with args {args!r}")
            return ExecutionResult(skipped=True)

        async with AsyncExitStack() as stack:
            if self._limiter is not None:
                await stack.enter_async_context(self._limiter)
            return await self._run(path, args)

    async def _run(self, path: str, args: list[str]) -> ExecutionResult:
        start = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                path,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                start_new_session=True,
            )
        except (OSError, ValueError) as e:
            logger.warning(f"Command \"{path}\" args {args!r} failed to start: {e}")
            raise CommandStartError(path, args, e) from e

        try:
            output, _ = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            await self._kill(proc)
            elapsed = time.monotonic() - start
            logger.warning(
                f"Command \"{path}\" args {args!r} timed out after {elapsed:.1f} seconds and was killed"
            )
            raise CommandTimeoutError(path, args, self.timeout) from None

        elapsed = time.monotonic() - start
        if proc.returncode != 0:
            logger.warning(
                f"Command \"{path}\" args {args!r} failed in {elapsed:.1f} seconds: "
                f"exit status {proc.returncode}"
            )
            raise CommandExitError(path, args, proc.returncode, output)

        logger.info(f"Command \"{path}\" args {args!r} ran successfully in {elapsed:.1f} seconds")
        return ExecutionResult(output=output)

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        # The command runs in its own session; kill the whole group so
        # children of the command do not keep the output pipe open.
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass  # already exited
        except OSError:
            proc.kill()
        await proc.wait()
