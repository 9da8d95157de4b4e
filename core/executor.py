"""Process executor: spawn one whitelisted command and capture its output."""

from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecSuccess:
    """Exit code 0. In combined mode ``stdout`` holds both streams and
    ``raw`` keeps their undecoded bytes."""

    stdout: str
    stderr: str = ""
    raw: bytes = b""
    ok = True


@dataclass(frozen=True)
class ExecFailure:
    """Spawn error, non-zero exit, timeout or cancellation."""

    reason: str
    returncode: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    ok = False


ExecOutcome = Union[ExecSuccess, ExecFailure]


class CommandExecutor:
    """Run commands without a shell, with a caller-supplied environment only.

    ``env`` is the complete child environment: an empty mapping really means
    an empty environment, the host's variables are never inherited.
    """

    def __init__(self, timeout_seconds: Optional[float] = None, verbose: bool = False):
        self.timeout_seconds = float(timeout_seconds) if timeout_seconds else None
        self.verbose = bool(verbose)

    @staticmethod
    def _exc_text(err: BaseException) -> str:
        text = str(err or "").strip()
        if text:
            return text
        return err.__class__.__name__

    @staticmethod
    def _decode(data: Optional[bytes]) -> str:
        return (data or b"").decode("utf-8", errors="replace")

    @staticmethod
    def _exit_reason(returncode: int) -> str:
        if returncode < 0:
            try:
                return f"signal: {signal.Signals(-returncode).name}"
            except ValueError:
                return f"signal: {-returncode}"
        return f"exit status {returncode}"

    async def _spawn(
        self,
        command: str,
        args: List[str],
        env: Mapping[str, str],
        combined: bool,
    ) -> asyncio.subprocess.Process:
        return await asyncio.create_subprocess_exec(
            command,
            *args,
            env=dict(env),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT if combined else asyncio.subprocess.PIPE,
        )

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()

    async def _communicate(
        self,
        process: asyncio.subprocess.Process,
        cancel_event: Optional[asyncio.Event],
    ) -> Tuple[Optional[Tuple[bytes, bytes]], str]:
        """Wait for output; returns (output, "") or (None, stop_reason)."""
        comm = asyncio.ensure_future(process.communicate())
        cancel_wait = asyncio.ensure_future(cancel_event.wait()) if cancel_event is not None else None
        waiters = {comm} if cancel_wait is None else {comm, cancel_wait}
        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self.timeout_seconds,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            if cancel_wait is not None:
                cancel_wait.cancel()
            if not comm.done():
                comm.cancel()

        if comm in done:
            return comm.result(), ""
        if cancel_wait is not None and cancel_wait in done:
            return None, "cancelled"
        return None, f"timed out after {self.timeout_seconds:g}s"

    async def run(
        self,
        command: str,
        args: List[str],
        env: Optional[Mapping[str, str]] = None,
        *,
        combined: bool = False,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ExecOutcome:
        """Run *command* with *args* and report how it went.

        Cancelling the awaiting task (client gone, server stopping) or setting
        *cancel_event* kills the child before this returns.
        """
        logger.info("running %s: args=%r", command, args)
        try:
            process = await self._spawn(command, args, env or {}, combined)
        except (OSError, ValueError) as e:
            reason = self._exc_text(e)
            logger.error("run %r failed: args=%r error=%r", command, args, reason)
            return ExecFailure(reason=reason)

        try:
            output, stop_reason = await self._communicate(process, cancel_event)
        finally:
            if process.returncode is None:
                await self._kill(process)
                logger.info("killed %s (pid=%s)", command, process.pid)

        if output is None:
            logger.error("run %r failed: args=%r error=%r", command, args, stop_reason)
            return ExecFailure(
                reason=stop_reason,
                returncode=process.returncode,
                timed_out=stop_reason.startswith("timed out"),
            )

        stdout, stderr = self._decode(output[0]), self._decode(output[1])
        if process.returncode != 0:
            reason = self._exit_reason(process.returncode)
            logger.error("run %r failed: args=%r error=%r", command, args, reason)
            if self.verbose:
                logger.info("run %r output: stdout=%r stderr=%r", command, stdout, stderr)
            return ExecFailure(reason=reason, returncode=process.returncode, stdout=stdout, stderr=stderr)

        if self.verbose:
            logger.info("run %s success: args=%r, stdout=%r, stderr=%r", command, args, stdout, stderr)
        return ExecSuccess(stdout=stdout, stderr=stderr, raw=output[0] or b"")
