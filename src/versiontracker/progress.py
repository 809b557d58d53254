"""Cosmetic progress indicator shown while an export runs.

The indicator is indeterminate: it does not know how far the export has
got. A single background ticker advances a bar by 10% every ``interval``
seconds and wraps around to 0 once it passes 100%.

``start()`` and ``stop()`` are idempotent. A guard flag ensures repeated
``start()`` calls register exactly one ticker until a matching ``stop()``;
``stop()`` on an idle indicator does nothing. ``running()`` wraps a block
so the indicator is stopped on every exit path, including exceptions.
Rendering is delegated to a ``ProgressDisplay`` (``rich`` by default).
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn

TITLE = "VersionTracker is working"
INFO = "Please wait..."

DEFAULT_INTERVAL: float = 0.1
_STEP = 0.1


class ProgressDisplay(Protocol):
    """Surface the indicator renders to."""

    def show(self, title: str, info: str, progress: float) -> None: ...

    def clear(self) -> None: ...


class RichProgressDisplay:
    """Render the indicator as a transient ``rich`` progress bar on stderr."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def show(self, title: str, info: str, progress: float) -> None:
        if self._progress is None:
            self._progress = Progress(
                SpinnerColumn(),
                TextColumn("[bold]{task.description}"),
                BarColumn(),
                console=self._console,
                transient=True,
            )
            self._progress.start()
            self._task = self._progress.add_task(f"{title} - {info}", total=1.0)
        if self._task is not None:
            self._progress.update(self._task, completed=progress, description=f"{title} - {info}")

    def clear(self) -> None:
        if self._progress is not None:
            self._progress.stop()
        self._progress = None
        self._task = None


class NullProgressDisplay:
    """Display that renders nothing (non-interactive use)."""

    def show(self, title: str, info: str, progress: float) -> None:
        pass

    def clear(self) -> None:
        pass


class ProgressIndicator:
    """Indeterminate progress indicator with an idempotent start/stop.

    Args:
        display: Where to render. Defaults to ``RichProgressDisplay``.
        interval: Seconds between ticks.
    """

    def __init__(
        self, display: ProgressDisplay | None = None, interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self.display: ProgressDisplay = display if display is not None else RichProgressDisplay()
        self.interval = interval
        self.progress = 0.0
        self._lock = threading.Lock()
        self._active = False
        self._stop_event: threading.Event | None = None
        self._ticker: threading.Thread | None = None

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def handler_count(self) -> int:
        """Number of registered tick handlers (0 or 1)."""
        return 0 if self._ticker is None else 1

    def start(self) -> None:
        """Show the indicator and register the periodic tick, once."""
        with self._lock:
            if self._active:
                return
            self._active = True
            self.progress = _STEP
            self._stop_event = threading.Event()
            self._ticker = threading.Thread(
                target=self._run, args=(self._stop_event,),
                name="progress-ticker", daemon=True,
            )
            self.display.show(TITLE, INFO, self.progress)
            self._ticker.start()

    def stop(self) -> None:
        """Unregister the tick and clear the display. Safe to call repeatedly."""
        with self._lock:
            if not self._active:
                return
            self._active = False
            ticker, stop_event = self._ticker, self._stop_event
            self._ticker = None
            self._stop_event = None
        if stop_event is not None:
            stop_event.set()
        if ticker is not None and ticker is not threading.current_thread():
            ticker.join()
        self.display.clear()

    @contextmanager
    def running(self) -> Iterator[ProgressIndicator]:
        """Show the indicator for the duration of a block."""
        self.start()
        try:
            yield self
        finally:
            self.stop()

    def tick(self) -> None:
        """Advance the bar by one step, wrapping to 0 past 100%."""
        self.progress += _STEP
        if self.progress > 1.0:
            self.progress = 0.0
        self.display.show(TITLE, INFO, self.progress)

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            self.tick()
