"""Tests for the ProgressIndicator lifecycle."""

from __future__ import annotations

import io
import threading

import pytest
from rich.console import Console

from versiontracker.progress import (
    INFO,
    TITLE,
    NullProgressDisplay,
    ProgressIndicator,
    RichProgressDisplay,
)


class RecordingDisplay:
    """Display that records every call."""

    def __init__(self) -> None:
        self.shown: list[tuple[str, str, float]] = []
        self.cleared = 0
        self.ticked = threading.Event()

    def show(self, title: str, info: str, progress: float) -> None:
        self.shown.append((title, info, progress))
        if len(self.shown) > 1:
            self.ticked.set()

    def clear(self) -> None:
        self.cleared += 1


@pytest.fixture
def display() -> RecordingDisplay:
    return RecordingDisplay()


class TestStartStop:
    """Tests for idempotent start/stop."""

    def test_start_shows_indicator(self, display: RecordingDisplay) -> None:
        indicator = ProgressIndicator(display, interval=60)
        indicator.start()
        try:
            assert indicator.is_active
            assert display.shown == [(TITLE, INFO, pytest.approx(0.1))]
        finally:
            indicator.stop()

    def test_repeated_start_registers_one_handler(self, display: RecordingDisplay) -> None:
        indicator = ProgressIndicator(display, interval=60)
        indicator.start()
        indicator.start()
        indicator.start()
        try:
            assert indicator.handler_count == 1
            assert len(display.shown) == 1
        finally:
            indicator.stop()
        assert indicator.handler_count == 0

    def test_stop_clears_display(self, display: RecordingDisplay) -> None:
        indicator = ProgressIndicator(display, interval=60)
        indicator.start()
        indicator.stop()
        assert not indicator.is_active
        assert display.cleared == 1

    def test_stop_when_idle_is_noop(self, display: RecordingDisplay) -> None:
        indicator = ProgressIndicator(display)
        indicator.stop()
        indicator.stop()
        assert display.cleared == 0

    def test_restart_after_stop(self, display: RecordingDisplay) -> None:
        indicator = ProgressIndicator(display, interval=60)
        indicator.start()
        indicator.stop()
        indicator.start()
        try:
            assert indicator.handler_count == 1
        finally:
            indicator.stop()
        assert display.cleared == 2


class TestRunning:
    """Tests for the context manager."""

    def test_stops_on_normal_exit(self, display: RecordingDisplay) -> None:
        indicator = ProgressIndicator(display, interval=60)
        with indicator.running():
            assert indicator.is_active
        assert not indicator.is_active
        assert indicator.handler_count == 0

    def test_stops_when_block_raises(self, display: RecordingDisplay) -> None:
        indicator = ProgressIndicator(display, interval=60)
        with pytest.raises(RuntimeError):
            with indicator.running():
                raise RuntimeError("export failed")
        assert not indicator.is_active
        assert indicator.handler_count == 0
        assert display.cleared == 1


class TestTick:
    """Tests for the periodic tick."""

    def test_tick_advances_and_wraps(self, display: RecordingDisplay) -> None:
        indicator = ProgressIndicator(display)
        indicator.progress = 0.1
        for _ in range(9):
            indicator.tick()
        assert indicator.progress == pytest.approx(1.0)
        indicator.tick()
        assert indicator.progress == 0.0

    def test_ticker_thread_ticks(self, display: RecordingDisplay) -> None:
        indicator = ProgressIndicator(display, interval=0.01)
        with indicator.running():
            assert display.ticked.wait(5)
        assert display.shown[1][2] == pytest.approx(0.2)

    def test_null_display(self) -> None:
        indicator = ProgressIndicator(NullProgressDisplay(), interval=0.01)
        with indicator.running():
            indicator.tick()
        assert not indicator.is_active


class TestRichProgressDisplay:
    """Tests for the rich-backed display."""

    def test_show_updates_one_task_until_cleared(self) -> None:
        display = RichProgressDisplay(Console(file=io.StringIO(), force_terminal=False))
        display.show(TITLE, INFO, 0.1)
        display.show(TITLE, INFO, 0.5)
        assert display._progress is not None
        tasks = display._progress.tasks
        assert len(tasks) == 1
        assert tasks[0].completed == pytest.approx(0.5)
        display.clear()
        assert display._progress is None
        display.clear()
