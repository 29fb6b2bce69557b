"""Foreground learning time tracking.

A ``LearningTimeTracker`` lives for one learning session. It counts wall-clock
time only while the session is visible, and periodically hands whole minutes
to a persistence callback while keeping the sub-minute remainder. The host
(a WebSocket connection, a page, a CLI session) drives it with visibility
events and tears it down when the session ends.

Lifecycle::

    UNINITIALIZED --start()--> VISIBLE | HIDDEN
    VISIBLE --on_hidden()--> HIDDEN --on_visible()--> VISIBLE
    VISIBLE | HIDDEN --teardown()--> TERMINATED

All state changes run on one event loop. The only await point is the
persistence callback, so a flush holds ``_lock`` across it and ticks that fire
meanwhile are dropped.
"""

import asyncio
import contextlib
import time
from collections.abc import Awaitable, Callable
from enum import Enum

from skillbridge.core.config import get_settings
from skillbridge.core.exceptions import PersistenceError
from skillbridge.core.logging import get_logger

logger = get_logger(__name__)

MS_PER_MINUTE = 60_000

PersistCallback = Callable[[str, int], Awaitable[None]]
Clock = Callable[[], int]


def monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


class TrackerState(str, Enum):
    """Session state of a tracker."""

    UNINITIALIZED = "uninitialized"
    VISIBLE = "visible"
    HIDDEN = "hidden"
    TERMINATED = "terminated"


class VisibilityGate:
    """Binary visible/hidden switch mirroring the host's visibility.

    ``host_visible=None`` means the host cannot report visibility; the gate
    then stays open (counts as visible), over-counting rather than losing time.
    """

    def __init__(self, host_visible: bool | None = None) -> None:
        self._visible = True if host_visible is None else host_visible

    def is_visible(self) -> bool:
        return self._visible

    def on_became_hidden(self) -> bool:
        """Flip to hidden. Returns False if already hidden."""
        changed = self._visible
        self._visible = False
        return changed

    def on_became_visible(self) -> bool:
        """Flip to visible. Returns False if already visible."""
        changed = not self._visible
        self._visible = True
        return changed


class LearningTimeTracker:
    """Accumulates visible time for one user session and flushes whole minutes."""

    def __init__(
        self,
        user_id: str,
        persist: PersistCallback,
        *,
        gate: VisibilityGate | None = None,
        interval_seconds: float | None = None,
        clock: Clock = monotonic_ms,
    ) -> None:
        if interval_seconds is None:
            interval_seconds = get_settings().LEARNING_TIME_SAVE_INTERVAL_SECONDS
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.user_id = user_id
        self.gate = gate or VisibilityGate()
        self.interval_seconds = interval_seconds
        self._persist = persist
        self._clock = clock

        self.state = TrackerState.UNINITIALIZED
        self.start_time = 0
        self.accumulated_ms = 0
        # Running totals, for logging and tests
        self.folded_ms = 0
        self.persisted_minutes = 0

        self._lock = asyncio.Lock()
        self._ticker: asyncio.Task[None] | None = None

    @property
    def is_visible(self) -> bool:
        return self.gate.is_visible()

    @property
    def is_running(self) -> bool:
        return self.state in (TrackerState.VISIBLE, TrackerState.HIDDEN)

    @property
    def flush_pending(self) -> bool:
        """Whether a persistence call is in flight."""
        return self._lock.locked()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, *, run_ticker: bool = True) -> None:
        """Begin the session and, unless disabled, the periodic flush ticker.

        ``run_ticker=False`` leaves flushing to explicit ``tick()`` calls.
        """
        if self.state is not TrackerState.UNINITIALIZED:
            raise RuntimeError(f"Tracker already started (state={self.state.value})")

        self.start_time = self._clock()
        self.accumulated_ms = 0
        self.state = TrackerState.VISIBLE if self.gate.is_visible() else TrackerState.HIDDEN

        if run_ticker:
            self._ticker = asyncio.create_task(
                self._run_ticker(), name=f"learning-time-ticker:{self.user_id}"
            )
            self._ticker.add_done_callback(self._on_ticker_done)

        logger.info(
            "Learning session started",
            user_id=self.user_id,
            state=self.state.value,
            interval_seconds=self.interval_seconds,
        )

    async def teardown(self) -> None:
        """End the session: cancel the ticker, then flush once more.

        Safe to call more than once and never raises; later calls are no-ops.
        Waits for an in-flight flush before running the final one. A second
        call that arrives while the first is still flushing waits for it and
        returns without flushing again.
        """
        if self.state is TrackerState.TERMINATED:
            return
        if self.state is TrackerState.UNINITIALIZED:
            self.state = TrackerState.TERMINATED
            return

        async with self._lock:
            if self.state is TrackerState.TERMINATED:
                return
            ticker, self._ticker = self._ticker, None
            if ticker is not None:
                # The ticker never waits on the lock, so it is asleep here
                ticker.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await ticker

            try:
                await self._flush()
            except Exception:
                logger.exception(
                    "Final learning time flush failed",
                    user_id=self.user_id,
                    accumulated_ms=self.accumulated_ms,
                )
            finally:
                self.state = TrackerState.TERMINATED

        logger.info(
            "Learning session ended",
            user_id=self.user_id,
            persisted_minutes=self.persisted_minutes,
            unsaved_ms=self.accumulated_ms,
        )

    async def __aenter__(self) -> "LearningTimeTracker":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.teardown()

    # ------------------------------------------------------------------
    # Visibility events
    # ------------------------------------------------------------------

    def on_hidden(self) -> None:
        """Host became hidden: fold the visible interval, then pause."""
        if not self.is_running:
            return
        self._fold(self._clock())
        self.gate.on_became_hidden()
        self.state = TrackerState.HIDDEN

    def on_visible(self) -> None:
        """Host became visible: restart the interval; hidden time is not counted.

        Ignored when already visible, so a repeated event does not drop the
        running interval.
        """
        # Only a hidden -> visible transition resets start_time; a duplicate
        # visible event keeps the interval already being counted.
        if not self.is_running or self.gate.is_visible():
            return
        self.start_time = self._clock()
        self.gate.on_became_visible()
        self.state = TrackerState.VISIBLE

    def set_visible(self, visible: bool) -> None:
        if visible:
            self.on_visible()
        else:
            self.on_hidden()

    # ------------------------------------------------------------------
    # Flushing
    # ------------------------------------------------------------------

    async def tick(self) -> int:
        """Fold elapsed visible time and persist any whole minutes.

        Returns the number of minutes persisted. A tick that arrives while a
        previous flush is still awaiting persistence is dropped.
        """
        if not self.is_running:
            return 0
        if self._lock.locked():
            logger.debug("Flush in flight, tick dropped", user_id=self.user_id)
            return 0
        async with self._lock:
            return await self._flush()

    def _fold(self, now: int) -> None:
        if self.gate.is_visible():
            elapsed = max(0, now - self.start_time)
            self.accumulated_ms += elapsed
            self.folded_ms += elapsed
        self.start_time = now

    async def _flush(self) -> int:
        self._fold(self._clock())

        minutes = self.accumulated_ms // MS_PER_MINUTE
        if minutes <= 0:
            return 0

        try:
            await self._persist(self.user_id, minutes)
        except PersistenceError as e:
            # Keep the total; the next tick retries it
            logger.warning(
                "Failed to save learning time",
                user_id=self.user_id,
                minutes=minutes,
                accumulated_ms=self.accumulated_ms,
                error=str(e),
            )
            return 0

        # Subtract rather than take the modulo: a hidden event may have
        # folded more time in while the callback was pending.
        self.accumulated_ms -= minutes * MS_PER_MINUTE
        self.persisted_minutes += minutes
        logger.info(
            "Learning time saved",
            user_id=self.user_id,
            minutes=minutes,
            remainder_ms=self.accumulated_ms,
        )
        return minutes

    async def _run_ticker(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.tick()
            except Exception:
                logger.exception("Learning time tick failed", user_id=self.user_id)

    def _on_ticker_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Learning time ticker stopped", user_id=self.user_id, error=str(exc))
