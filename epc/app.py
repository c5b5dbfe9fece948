"""Runtime composition: builds the session and runs the reader loop."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from .config import ReaderSettings, load_history, load_positions, save_reading_state
from .errors import EpcError, classify_error
from .events import KeyEvent
from .input import read_key
from .loop import run_main_loop
from .render import RenderDriver
from .scheduler import InputTickScheduler
from .session import Session
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def build_session(
    paths: Sequence[Path],
    settings: ReaderSettings,
    start_in_library: bool = True,
) -> Session:
    """Create a session seeded from persisted history and positions."""
    return Session.create(
        [path.resolve() for path in paths],
        settings=settings,
        history=load_history(),
        saved_positions=load_positions(),
        start_in_library=start_in_library,
    )


def run_reader(
    paths: Sequence[Path],
    settings: ReaderSettings,
    start_in_library: bool = True,
) -> None:
    """Run an interactive session over ``paths``.

    Reading state is saved on every exit path. Failures surface as
    ``EpcError`` after the terminal has been restored.
    """
    session = build_session(paths, settings, start_in_library)
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()

    def poll_key(timeout_seconds: float) -> KeyEvent | None:
        return read_key(stdin_fd, timeout_ms=timeout_seconds * 1000.0)

    renderer = RenderDriver(style=settings.style)

    def draw(current: Session, columns: int, lines: int) -> None:
        renderer.draw(current, stdout_fd, columns, lines)

    logger.debug("starting session with %d document(s)", len(session.registry))
    try:
        terminal = TerminalController(stdin_fd, stdout_fd)
        scheduler = InputTickScheduler(poll_key, tick_seconds=settings.tick_seconds)
        run_main_loop(session, terminal, scheduler, draw)
    except EpcError:
        raise
    except Exception as exc:
        raise classify_error(exc) from exc
    finally:
        save_reading_state(session.store.history(), session.positions_by_path())


__all__ = ["build_session", "run_reader"]
