"""Terminal control for the reading session.

Owns raw-mode lifecycle, alternate-screen switching, and cursor visibility.
The terminal is entered once per process and always restored on the way out.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty

from .errors import EpcError, EpcIOError

WINDOW_TITLE = "epc"


class TerminalController:
    def __init__(self, stdin_fd: int, stdout_fd: int, title: str = WINDOW_TITLE) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self.title = title
        try:
            self._saved_tty_state = termios.tcgetattr(stdin_fd)
        except termios.error as exc:
            raise EpcIOError(f"cannot read terminal attributes: {exc}", cause=exc) from exc
        self._raw = False
        self._entered = False

    @property
    def active(self) -> bool:
        return self._raw

    def size(self) -> os.terminal_size:
        return shutil.get_terminal_size((80, 24))

    def enable_tui_mode(self) -> None:
        if self._entered:
            raise EpcError("terminal session already started")
        self._entered = True
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        self._raw = True
        # Set title, enable line wrap, enter alternate screen, and hide cursor.
        title = self.title.encode("utf-8", errors="replace")
        os.write(self.stdout_fd, b"\x1b]0;" + title + b"\x07\x1b[?7h\x1b[?1049h\x1b[?25l")

    def disable_tui_mode(self) -> None:
        if not self._raw:
            return
        self._raw = False
        try:
            # Show cursor and restore the main screen buffer.
            os.write(self.stdout_fd, b"\x1b[?25h\x1b[?1049l")
        finally:
            termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    @contextlib.contextmanager
    def raw_mode(self):
        """Bracket a session with enter/exit; a second session raises up front."""
        if self._entered:
            raise EpcError("terminal session already started")
        try:
            self.enable_tui_mode()
            yield self
        finally:
            self.disable_tui_mode()


__all__ = ["TerminalController", "WINDOW_TITLE"]
