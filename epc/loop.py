"""Foreground event loop.

Blocks on the scheduler queue, applies each event to the session, and
redraws when the session is dirty or the terminal was resized. Terminal
teardown and scheduler shutdown happen on every exit path.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from .dispatch import handle_event
from .scheduler import InputTickScheduler
from .session import Session
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def run_main_loop(
    session: Session,
    terminal: TerminalController,
    events: InputTickScheduler,
    draw: Callable[[Session, int, int], None],
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Run until a quit command or an error.

    ``draw(session, columns, lines)`` is called before blocking whenever the
    session is dirty. Errors propagate after the terminal is restored.
    """
    last_size: tuple[int, int] | None = None
    with terminal.raw_mode(), events:
        while True:
            columns, lines = terminal.size()
            if (columns, lines) != last_size:
                last_size = (columns, lines)
                session.dirty = True
            if session.dirty:
                draw(session, columns, lines)
                session.dirty = False
            event = events.get()
            if handle_event(session, event, clock()):
                logger.debug("quit requested in %s", session.view)
                break


__all__ = ["run_main_loop"]
