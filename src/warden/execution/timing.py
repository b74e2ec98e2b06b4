"""Wall-clock timing for agent executions."""

from __future__ import annotations

import re
import time
from datetime import datetime

from warden.utils.time import utc_now


def timer_name_for(description: str) -> str:
    """Derive a timer name like ``agent-recon-analysis`` from a description."""
    return "agent-" + re.sub(r"\s+", "-", description.strip().lower())


class Timer:
    """Measures the duration of one execution.

    ``start_time`` is a monotonic reading for duration math; ``started_at``
    is the UTC wall-clock start for logs and audit records.

    Attributes:
        name: Label used in log events.
        start_time: ``time.monotonic()`` at construction.
        started_at: UTC datetime at construction.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.start_time = time.monotonic()
        self.started_at: datetime = utc_now()
        self._duration_ms: float | None = None

    @property
    def elapsed_ms(self) -> float:
        """Milliseconds since start, or the final duration once stopped."""
        if self._duration_ms is not None:
            return self._duration_ms
        return max(0.0, (time.monotonic() - self.start_time) * 1000)

    @property
    def elapsed_seconds(self) -> float:
        return self.elapsed_ms / 1000

    @property
    def stopped(self) -> bool:
        return self._duration_ms is not None

    def stop(self) -> float:
        """Stop the timer and return the duration in milliseconds.

        Calling stop() again returns the same duration.
        """
        if self._duration_ms is None:
            self._duration_ms = max(0.0, (time.monotonic() - self.start_time) * 1000)
        return self._duration_ms


__all__ = ["Timer", "timer_name_for"]
