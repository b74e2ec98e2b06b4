"""Tests for Timer, progress reporters and Heartbeat."""

import io
from datetime import UTC
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

from warden.execution.progress import (
    Heartbeat,
    QuietProgressReporter,
    SpinnerProgressReporter,
    create_progress_reporter,
)
from warden.execution.timing import Timer, timer_name_for


def _console(terminal: bool = False) -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, force_terminal=terminal, width=120), buffer


class TestTimer:
    """Tests for Timer."""

    def test_duration_in_milliseconds(self) -> None:
        with patch("warden.execution.timing.time") as mock_time:
            mock_time.monotonic.side_effect = [100.0, 101.5]
            timer = Timer("agent-recon")
            assert timer.stop() == pytest.approx(1500.0)

    def test_stop_is_idempotent(self) -> None:
        with patch("warden.execution.timing.time") as mock_time:
            mock_time.monotonic.side_effect = [10.0, 10.25, 99.0]
            timer = Timer("agent-recon")
            first = timer.stop()
            assert timer.stop() == first
            assert timer.elapsed_ms == first
            assert timer.stopped is True

    def test_never_negative(self) -> None:
        with patch("warden.execution.timing.time") as mock_time:
            mock_time.monotonic.side_effect = [50.0, 49.0]
            assert Timer("x").stop() == 0.0

    def test_started_at_is_utc(self) -> None:
        timer = Timer("x")
        assert timer.started_at.tzinfo is UTC
        assert timer.name == "x"
        assert timer.stopped is False

    def test_elapsed_while_running(self) -> None:
        timer = Timer("x")
        assert timer.elapsed_ms >= 0.0
        assert timer.elapsed_seconds == pytest.approx(timer.elapsed_ms / 1000, abs=0.05)

    @pytest.mark.parametrize(
        "description, expected",
        [
            ("LLM analysis", "agent-llm-analysis"),
            ("Injection vuln agent", "agent-injection-vuln-agent"),
            ("  Recon   agent ", "agent-recon-agent"),
        ],
    )
    def test_timer_name_for(self, description: str, expected: str) -> None:
        assert timer_name_for(description) == expected


class TestCreateProgressReporter:
    """Tests for reporter selection."""

    def test_interactive_terminal_gets_spinner(self) -> None:
        console, _ = _console(terminal=True)
        reporter = create_progress_reporter("Recon", False, False, console)
        assert isinstance(reporter, SpinnerProgressReporter)

    def test_clean_output_is_quiet(self) -> None:
        console, _ = _console(terminal=True)
        reporter = create_progress_reporter("Recon agent", True, False, console)
        assert isinstance(reporter, QuietProgressReporter)

    def test_disabled_loader_is_quiet(self) -> None:
        console, _ = _console(terminal=True)
        reporter = create_progress_reporter("Recon", False, True, console)
        assert isinstance(reporter, QuietProgressReporter)

    def test_non_terminal_is_quiet(self) -> None:
        console, _ = _console(terminal=False)
        reporter = create_progress_reporter("Recon", False, False, console)
        assert isinstance(reporter, QuietProgressReporter)


class TestReporters:
    def test_quiet_prints_only_finish_message(self) -> None:
        console, buffer = _console()
        reporter = QuietProgressReporter("Recon", console)
        reporter.start()
        reporter.finish("all done")
        assert buffer.getvalue() == "all done\n"

    def test_quiet_stop_prints_nothing(self) -> None:
        console, buffer = _console()
        reporter = QuietProgressReporter("Recon", console)
        reporter.start()
        reporter.stop()
        assert buffer.getvalue() == ""

    def test_spinner_finish(self) -> None:
        console, buffer = _console(terminal=True)
        reporter = SpinnerProgressReporter("Recon", console)
        reporter.start()
        reporter.finish("all done")
        assert "all done" in buffer.getvalue()
        assert reporter._status is None

    def test_spinner_stop_is_idempotent(self) -> None:
        console, _ = _console(terminal=True)
        reporter = SpinnerProgressReporter("Recon", console)
        reporter.stop()
        reporter.start()
        reporter.stop()
        reporter.stop()
        assert reporter._status is None


class TestHeartbeat:
    """Tests for Heartbeat."""

    def test_prints_after_interval(self) -> None:
        console, buffer = _console()
        timer = MagicMock(elapsed_seconds=31.7)
        with patch("warden.execution.progress.time") as mock_time:
            mock_time.monotonic.side_effect = [0.0, 10.0, 31.0, 40.0]
            heartbeat = Heartbeat("Recon agent", timer, console, interval_seconds=30.0)
            assert heartbeat.tick() is False
            assert heartbeat.tick() is True
            assert heartbeat.tick() is False

        assert buffer.getvalue() == "[31s] Recon agent running...\n"

    def test_zero_interval_always_prints(self) -> None:
        console, buffer = _console()
        heartbeat = Heartbeat("Recon", MagicMock(elapsed_seconds=0.0), console, interval_seconds=0.0)
        assert heartbeat.tick() is True
        assert heartbeat.tick() is True
        assert buffer.getvalue().count("running...") == 2
