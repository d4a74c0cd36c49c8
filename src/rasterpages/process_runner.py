"""External command execution with a hard timeout and streaming output sanitization."""

from __future__ import annotations

import os
import shlex
import signal
import subprocess  # noqa: S404
import threading
import time
from typing import TYPE_CHECKING

from rasterpages.exceptions import ExtractionFailedError, ExtractionTimeoutError
from rasterpages.logging import get_logger
from rasterpages.typing.enums import ProcessOutcome
from rasterpages.typing.models import ProcessResult

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence

    from rasterpages.settings import Settings

    KillStrategy = Callable[[subprocess.Popen[str]], None]

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 300.0
DEFAULT_MAX_OUTPUT_LINES = 10_000
_READ_CHUNK_CHARS = 64 * 1024
_REAP_POLL_MIN_SECONDS = 0.001
_REAP_POLL_MAX_SECONDS = 0.05


class OutputSanitizer:
    """Streaming filter that drops empty lines and collapses consecutive duplicates.

    Lines are fed one at a time while the child process is still writing, so a
    tool looping on the same warning only ever costs a single retained line.
    """

    def __init__(self, max_lines: int | None = DEFAULT_MAX_OUTPUT_LINES) -> None:
        self._max_lines = max_lines
        self._lines: list[str] = []
        self._last: str | None = None
        self._omitted = 0

    def feed(self, line: str) -> None:
        """Consume one raw output line.

        Args:
            line (str): Raw line, with or without its trailing newline.
        """
        text = line.rstrip("\r\n")
        if not text or text == self._last:
            return
        self._last = text
        if self._max_lines is not None and len(self._lines) >= self._max_lines:
            self._omitted += 1
            return
        self._lines.append(text)

    @property
    def omitted(self) -> int:
        """Return how many distinct lines were dropped past `max_lines`."""
        return self._omitted

    @property
    def text(self) -> str:
        """Return the sanitized output."""
        if not self._omitted:
            return "\n".join(self._lines)
        return "\n".join([*self._lines, f"... {self._omitted} lines omitted"])


def sanitize_output(lines: Iterable[str], *, max_lines: int | None = None) -> str:
    """Sanitize an iterable of output lines.

    Args:
        lines (Iterable[str]): Raw lines.
        max_lines (int | None): Optional cap on retained distinct lines.

    Returns:
        str: Output without empty lines or consecutive duplicates.
    """
    sanitizer = OutputSanitizer(max_lines=max_lines)
    for line in lines:
        sanitizer.feed(line)
    return sanitizer.text


def _kill_process_group(process: subprocess.Popen[str]) -> None:
    """Send SIGKILL to the whole process group of a child started in its own session."""
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        # Group already gone.
        return


def _kill_process(process: subprocess.Popen[str]) -> None:
    """Forcibly terminate a single child process."""
    try:
        process.kill()
    except ProcessLookupError:
        return


def select_kill_strategy() -> tuple[KillStrategy, bool]:
    """Select the kill-capable mechanism available on this host.

    Returns:
        tuple[KillStrategy, bool]: The kill function, and whether children must
        be started in a new session for it to reach the whole process tree.
    """
    if os.name == "posix" and hasattr(os, "killpg"):
        return _kill_process_group, True
    return _kill_process, False


class DeadlineGuard:
    """Serialize the deadline kill against reaping the child.

    Once the child has been reaped its pid may be reused, so a deadline firing
    after that point must not signal anything.
    """

    def __init__(self, process: subprocess.Popen[str], kill: KillStrategy) -> None:
        self._process = process
        self._kill = kill
        self._lock = threading.Lock()
        self._reaped = False
        self.expired = False

    def expire(self) -> None:
        """Kill the child at its deadline unless it has already been reaped."""
        with self._lock:
            if self._reaped:
                return
            self.expired = True
            self._kill(self._process)

    def reap(self) -> int:
        """Wait for the child to exit and collect its exit code.

        Returns:
            int: Exit code of the child.
        """
        delay = _REAP_POLL_MIN_SECONDS
        while True:
            with self._lock:
                exit_code = self._process.poll()
                if exit_code is not None:
                    self._reaped = True
                    return exit_code
            time.sleep(delay)
            delay = min(delay * 2, _REAP_POLL_MAX_SECONDS)

    def finish(self) -> None:
        """Kill and reap the child if it is still running."""
        with self._lock:
            if not self._reaped and self._process.poll() is None:
                self._kill(self._process)
                self._process.wait()
            self._reaped = True


class ProcessRunner:
    """Run external commands under a wall-clock deadline."""

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_output_lines: int | None = DEFAULT_MAX_OUTPUT_LINES,
    ) -> None:
        if timeout_seconds <= 0:
            message = f"timeout_seconds must be positive, got {timeout_seconds}"
            raise ValueError(message)
        self.timeout_seconds = timeout_seconds
        self.max_output_lines = max_output_lines
        self._kill, self._new_session = select_kill_strategy()

    @classmethod
    def from_settings(cls, settings: Settings) -> ProcessRunner:
        """Build a runner configured from settings.

        Args:
            settings (Settings): Runtime settings.

        Returns:
            ProcessRunner: Configured runner.
        """
        return cls(timeout_seconds=settings.command_timeout, max_output_lines=settings.max_output_lines)

    def execute(
        self,
        command: Sequence[str],
        env: Mapping[str, str] | None = None,
        timeout_seconds: float | None = None,
    ) -> ProcessResult:
        """Run a command and classify how it finished, without raising.

        Args:
            command (Sequence[str]): Argument vector; no shell is involved.
            env (Mapping[str, str] | None): Extra variables merged over the current environment.
            timeout_seconds (float | None): Deadline override for this call.

        Returns:
            ProcessResult: Outcome, exit code and sanitized combined output.
        """
        argv = tuple(str(part) for part in command)
        deadline = timeout_seconds if timeout_seconds is not None else self.timeout_seconds
        sanitizer = OutputSanitizer(max_lines=self.max_output_lines)
        logger.debug("Running command", extra={"command": shlex.join(argv), "timeout_seconds": deadline})

        started = time.monotonic()
        try:
            process = subprocess.Popen(  # noqa: S603
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                env={**os.environ, **(env or {})},
                text=True,
                encoding="utf-8",
                errors="replace",
                start_new_session=self._new_session,
            )
        except OSError as exc:
            return ProcessResult(
                command=argv,
                outcome=ProcessOutcome.FAILED,
                exit_code=None,
                output=str(exc),
                duration_seconds=time.monotonic() - started,
                timeout_seconds=deadline,
            )

        guard = DeadlineGuard(process, self._kill)
        timer = threading.Timer(deadline, guard.expire)
        timer.daemon = True
        timer.start()
        try:
            stdout = process.stdout
            if stdout is not None:
                with stdout:
                    for chunk in iter(lambda: stdout.readline(_READ_CHUNK_CHARS), ""):
                        sanitizer.feed(chunk)
            exit_code = guard.reap()
        finally:
            timer.cancel()
            guard.finish()

        if exit_code == 0:
            outcome = ProcessOutcome.SUCCESS
        elif guard.expired:
            outcome = ProcessOutcome.TIMEOUT
        else:
            outcome = ProcessOutcome.FAILED

        return ProcessResult(
            command=argv,
            outcome=outcome,
            exit_code=exit_code,
            output=sanitizer.text,
            duration_seconds=time.monotonic() - started,
            timeout_seconds=deadline,
        )

    def run(
        self,
        command: Sequence[str],
        env: Mapping[str, str] | None = None,
        timeout_seconds: float | None = None,
    ) -> str:
        """Run a command and return its sanitized output.

        Args:
            command (Sequence[str]): Argument vector; no shell is involved.
            env (Mapping[str, str] | None): Extra variables merged over the current environment.
            timeout_seconds (float | None): Deadline override for this call.

        Raises:
            ExtractionTimeoutError: If the command was killed at its deadline.
            ExtractionFailedError: If the command exited non-zero or could not start.

        Returns:
            str: Sanitized combined stdout/stderr.
        """
        result = self.execute(command, env=env, timeout_seconds=timeout_seconds)
        if result.outcome == ProcessOutcome.TIMEOUT:
            logger.warning(
                "Command timed out",
                extra={"command": shlex.join(result.command), "timeout_seconds": result.timeout_seconds},
            )
            raise ExtractionTimeoutError(
                timeout_seconds=result.timeout_seconds or self.timeout_seconds,
                output=result.output,
                command=result.command,
            )
        if result.outcome == ProcessOutcome.FAILED:
            logger.warning(
                "Command failed",
                extra={"command": shlex.join(result.command), "exit_code": result.exit_code, "output": result.output},
            )
            raise ExtractionFailedError(output=result.output, exit_code=result.exit_code, command=result.command)

        logger.debug(
            "Command succeeded",
            extra={"command": result.command[0], "duration_seconds": round(result.duration_seconds, 3)},
        )
        return result.output
