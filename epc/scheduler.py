"""Background producer merging key input and a fixed tick into one queue.

A single daemon thread alternates between a bounded input poll and tick
emission. Both event kinds land on one unbounded FIFO, so the consumer sees
them in exactly the order they were produced.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from queue import Queue

from .events import QUIT, TICK, InputEvent, InputFailure, KeyEvent

logger = logging.getLogger(__name__)

TICK_SECONDS = 0.010
STOP_JOIN_SECONDS = 0.5

KeyPoller = Callable[[float], KeyEvent | None]


class InputTickScheduler:
    """Run the input/tick producer and expose its events to one consumer.

    ``poll_key(timeout_seconds)`` must return a ``KeyEvent`` or ``None`` on
    timeout, and raise ``EOFError`` when input is exhausted. Stopping is
    cooperative: ``stop()`` sets an event the worker checks between polls.
    """

    def __init__(
        self,
        poll_key: KeyPoller,
        tick_seconds: float = TICK_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if tick_seconds <= 0:
            raise ValueError("tick interval must be positive")
        self._poll_key = poll_key
        self._tick_seconds = tick_seconds
        self._clock = clock
        self._events: Queue[InputEvent] = Queue()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("scheduler already started")
        self._thread = threading.Thread(
            target=self._worker,
            name="epc-input-tick",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: float = STOP_JOIN_SECONDS) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.debug("input poller still blocked after %.2fs", timeout)

    def get(self, timeout: float | None = None) -> InputEvent:
        """Block until the next event; raises ``queue.Empty`` on timeout."""
        return self._events.get(timeout=timeout)

    def _worker(self) -> None:
        next_tick = self._clock() + self._tick_seconds
        while not self._stop.is_set():
            wait = max(0.0, next_tick - self._clock())
            try:
                event = self._poll_key(wait)
            except EOFError:
                logger.debug("input closed, requesting quit")
                self._events.put(QUIT)
                return
            except Exception as exc:
                logger.debug("input poller failed: %r", exc)
                self._events.put(InputFailure(exc))
                return
            if event is not None:
                self._events.put(event)
            now = self._clock()
            if now >= next_tick:
                self._events.put(TICK)
                next_tick += self._tick_seconds
                if next_tick <= now:
                    # Fell behind; realign instead of emitting a burst.
                    next_tick = now + self._tick_seconds

    def __enter__(self) -> InputTickScheduler:
        self.start()
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.stop()


__all__ = ["InputTickScheduler", "KeyPoller", "TICK_SECONDS"]
