"""
Countdown timer for the phase currently being cooked.

The timer owns at most one background tick thread. Pausing only flips the
running flag; the thread keeps ticking (and ignoring ticks) until close() is
called, so resuming never drifts by recreating the tick source.
"""
import logging
import threading
from typing import Callable, Optional

from cookplan.config import settings

logger = logging.getLogger(__name__)


class PhaseTimer:
    """Thread-safe countdown with an optional background tick source."""

    def __init__(
        self,
        seconds: int = 0,
        on_expire: Optional[Callable[[], None]] = None,
        tick_interval: Optional[float] = None,
    ):
        """
        Initialize the timer (not running, no tick source yet).

        Args:
            seconds: Initial remaining seconds.
            on_expire: Called once when the countdown reaches zero.
            tick_interval: Seconds between background ticks. Defaults to config.
        """
        self._lock = threading.Lock()
        self._remaining = max(0, int(seconds))
        self._running = False
        self._on_expire = on_expire
        self._interval = tick_interval or settings.timer_tick_seconds
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def remaining_seconds(self) -> int:
        with self._lock:
            return self._remaining

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    @property
    def is_open(self) -> bool:
        """Whether a background tick source is active."""
        return self._thread is not None and self._thread.is_alive()

    def reset(self, seconds: int) -> None:
        """Reinitialize the countdown; the timer is left paused."""
        with self._lock:
            self._remaining = max(0, int(seconds))
            self._running = False

    def start(self) -> None:
        """Resume counting down. No-op once the countdown has expired."""
        with self._lock:
            if self._remaining > 0:
                self._running = True

    def pause(self) -> None:
        with self._lock:
            self._running = False

    def tick(self) -> None:
        """Advance the countdown by one second if running."""
        expired = False
        with self._lock:
            if not self._running:
                return
            self._remaining = max(0, self._remaining - 1)
            if self._remaining == 0:
                self._running = False
                expired = True

        # Outside the lock so the callback may read the timer
        if expired and self._on_expire is not None:
            self._on_expire()

    def open(self) -> None:
        """Start the background tick thread. A second call is a no-op."""
        if self.is_open:
            return

        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._run,
            args=(stop_event,),
            name="phase-timer",
            daemon=True,
        )
        self._thread.start()
        logger.debug(f"Phase timer tick source started ({self._interval}s interval)")

    def close(self) -> None:
        """Stop the background tick thread and wait for it to exit."""
        with self._lock:
            self._running = False

        if self._stop_event is not None:
            self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=max(1.0, self._interval * 2))
        self._thread = None
        self._stop_event = None

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._interval):
            self.tick()

    def __enter__(self) -> "PhaseTimer":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
