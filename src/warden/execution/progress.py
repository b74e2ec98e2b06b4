"""Progress reporting for long-running agent executions.

Two presentation modes:
- Interactive: a rich spinner while the request is in flight.
- Quiet: no spinner, only the final message. Used for parallel agents,
  clean-output agents, and when the loader is disabled for CI or log
  capture. With the loader disabled a ``Heartbeat`` prints periodic
  "still running" lines at execution checkpoints instead.
"""

from __future__ import annotations

import time
from typing import Protocol

from rich.console import Console
from rich.markup import escape
from rich.status import Status

from warden.core.constants import HEARTBEAT_INTERVAL_SECONDS
from warden.core.logging import get_logger
from warden.execution.timing import Timer

_logger = get_logger("progress")


class ProgressReporter(Protocol):
    """Lifecycle of an execution's on-screen progress."""

    def start(self) -> None: ...

    def finish(self, message: str) -> None:
        """Stop progress display and print a completion message."""
        ...

    def stop(self) -> None:
        """Stop progress display without printing anything."""
        ...


class SpinnerProgressReporter:
    """Interactive spinner backed by ``Console.status``."""

    def __init__(self, description: str, console: Console) -> None:
        self.description = description
        self.console = console
        self._status: Status | None = None

    def start(self) -> None:
        if self._status is None:
            self._status = self.console.status(f"[bold blue]{escape(self.description)}...")
            self._status.start()

    def finish(self, message: str) -> None:
        self.stop()
        self.console.print(message)

    def stop(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None


class QuietProgressReporter:
    """No spinner; prints only the completion message."""

    def __init__(self, description: str, console: Console) -> None:
        self.description = description
        self.console = console

    def start(self) -> None:
        _logger.debug("progress_started", description=self.description)

    def finish(self, message: str) -> None:
        self.console.print(message)

    def stop(self) -> None:
        pass


def create_progress_reporter(
    description: str,
    use_clean_output: bool,
    disable_loader: bool,
    console: Console | None = None,
) -> ProgressReporter:
    """Pick the reporter for an execution.

    Args:
        description: Agent description shown next to the spinner.
        use_clean_output: Execution context asked for minimal output.
        disable_loader: Loader explicitly disabled via ExecutorOptions.
        console: Console to draw on; a fresh one when omitted.
    """
    console = console or Console()
    if use_clean_output or disable_loader or not console.is_terminal:
        return QuietProgressReporter(description, console)
    return SpinnerProgressReporter(description, console)


class Heartbeat:
    """Rate-limited "still running" line for executions without a spinner.

    ``tick()`` is called at execution checkpoints and prints at most once
    per interval; nothing runs in the background.
    """

    def __init__(
        self,
        description: str,
        timer: Timer,
        console: Console,
        interval_seconds: float = HEARTBEAT_INTERVAL_SECONDS,
    ) -> None:
        self.description = description
        self.timer = timer
        self.console = console
        self.interval_seconds = interval_seconds
        self._last_beat = time.monotonic()

    def tick(self) -> bool:
        """Print a heartbeat if the interval has elapsed.

        Returns:
            True if a line was printed.
        """
        now = time.monotonic()
        if now - self._last_beat < self.interval_seconds:
            return False
        self._last_beat = now
        elapsed = int(self.timer.elapsed_seconds)
        self.console.print(f"[dim][{elapsed}s] {escape(self.description)} running...[/dim]")
        _logger.info("heartbeat", description=self.description, elapsed_seconds=elapsed)
        return True


__all__ = [
    "Heartbeat",
    "ProgressReporter",
    "QuietProgressReporter",
    "SpinnerProgressReporter",
    "create_progress_reporter",
]
