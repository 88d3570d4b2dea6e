"""
rppg/scheduler.py — Cooperative tick scheduling
================================================
The pipeline advances one tick at a time: each tick reads a frame, updates
the window, recomputes the reading and then re-submits itself.  Where the
next tick runs is up to the scheduler:

* `ManualScheduler`   — runs the pending tick when the owner calls
                        `run_pending()` (tests, HTTP push sessions).
* `IntervalScheduler` — blocking loop in the calling thread, pacing ticks
                        at a fixed interval (CLI / webcam use).

At most one tick is pending at a time.  Every submission carries a
`CancellationToken`; once the token is cancelled its pending tick is
dropped and later submissions are ignored.  A tick that is already running
always completes.
"""

import threading
import time
from collections.abc import Callable

from utils.logger import get_logger

logger = get_logger("rppg.scheduler")

Tick = Callable[[], None]


class CancellationToken:
    """One-shot stop signal shared between a pipeline run and its scheduler."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class TickScheduler:
    """Holds the single pending tick; subclasses decide when it runs."""

    def __init__(self):
        self._pending: tuple[Tick, CancellationToken] | None = None

    def submit(self, tick: Tick, token: CancellationToken) -> None:
        if token.cancelled:
            return
        self._pending = (tick, token)

    @property
    def has_pending(self) -> bool:
        return self._pending is not None and not self._pending[1].cancelled

    def run_pending(self) -> bool:
        """Run the pending tick, if any.  Returns True when a tick ran."""
        pending, self._pending = self._pending, None
        if pending is None:
            return False
        tick, token = pending
        if token.cancelled:
            return False
        tick()
        return True


class ManualScheduler(TickScheduler):
    def run(self, max_ticks: int) -> int:
        """Run up to `max_ticks` consecutive ticks; returns how many ran."""
        ran = 0
        while ran < max_ticks and self.run_pending():
            ran += 1
        return ran


class IntervalScheduler(TickScheduler):
    """
    Parameters
    ----------
    interval_s : float   Minimum time between tick starts (1 / fps).
    """

    def __init__(self, interval_s: float):
        super().__init__()
        self._interval = interval_s

    def run_until(self, deadline: float | None = None) -> int:
        """
        Run ticks until none is pending, the token is cancelled, or
        `time.monotonic()` passes `deadline`.
        """
        ran = 0
        while self.has_pending:
            if deadline is not None and time.monotonic() >= deadline:
                break
            started = time.monotonic()
            self.run_pending()
            ran += 1
            # Sleep off whatever is left of this tick's slot
            remaining = self._interval - (time.monotonic() - started)
            if remaining > 0:
                time.sleep(remaining)
        logger.debug("Interval scheduler stopped after %d ticks.", ran)
        return ran
