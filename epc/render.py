"""Render driver: turns the session into full terminal frames.

The core hands over the whole session; this module decides what each view
looks like and writes one composed ANSI frame per redraw.
"""

from __future__ import annotations

import os
import re
import unicodedata
from pathlib import Path

from .errors import EpcIOError
from .highlight import DEFAULT_STYLE, colorize_lines
from .session import PROMPT_LIBRARY, Session
from .views import ViewKind

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8
REVERSE = "\033[7m"
RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
HELP_HINT = "Tab next │ p prev │ s settings │ q quit"


def char_display_width(ch: str, col: int) -> int:
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    col = 0
    for ch in ANSI_ESCAPE_RE.sub("", text):
        col += char_display_width(ch, col)
    return col


def clip_line(text: str, max_cols: int) -> str:
    """Trim a styled line to ``max_cols`` display columns, keeping escapes."""
    if max_cols <= 0 or not text:
        return ""
    out: list[str] = []
    col = 0
    i = 0
    while i < len(text):
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        width = char_display_width(ch, col)
        if col + width > max_cols:
            break
        out.append(" " * width if ch == "\t" else ch)
        col += width
        i += 1
    return "".join(out)


def selected_with_ansi(text: str) -> str:
    """Reverse-video a line without letting its internal resets end the highlight."""
    return REVERSE + text.replace(RESET, RESET + REVERSE) + RESET


def _finish(line: str) -> str:
    return line + RESET if "\033" in line else line


def write_frame(lines: list[str], fd: int) -> None:
    payload = "\033[H\033[J" + "\r\n".join(lines)
    os.write(fd, payload.encode("utf-8", errors="replace"))


class RenderDriver:
    """Build frames for every view; colorized document text is cached per slot."""

    def __init__(self, style: str = DEFAULT_STYLE) -> None:
        self.style = style
        self._colorized: dict[int, list[str]] = {}

    def draw(self, session: Session, fd: int, width: int, height: int) -> None:
        write_frame(self.render(session, width, height), fd)

    def render(self, session: Session, width: int, height: int) -> list[str]:
        """Return exactly ``height`` rows: tab bar, body, status line."""
        width = max(1, width)
        rows = max(1, height - 2)
        if session.view.kind is ViewKind.NONE:
            return [""] * max(1, height)
        self._drop_closed(session)
        body = self._body(session, width, rows)
        body = [_finish(clip_line(line, width)) for line in body[:rows]]
        body.extend([""] * (rows - len(body)))
        return [self.tab_bar(session, width), *body, self.status_line(session, width)]

    def _drop_closed(self, session: Session) -> None:
        """Forget colorized text for slots that are no longer open."""
        for slot in [slot for slot in self._colorized if slot not in session.registry]:
            del self._colorized[slot]

    def tab_bar(self, session: Session, width: int) -> str:
        view = session.view
        tabs: list[tuple[str, bool]] = [("Library", view.kind is ViewKind.LIBRARY)]
        for document in session.registry:
            tabs.append((document.title, view.is_document and view.slot == document.slot))
        tabs.append(("Settings", view.kind is ViewKind.SETTINGS))
        tabs.append(("Browse", view.kind is ViewKind.BROWSE))
        parts = [f"{REVERSE}{BOLD} {label} {RESET}" if active else f" {label} " for label, active in tabs]
        return _finish(clip_line("│".join(parts), width))

    def status_line(self, session: Session, width: int) -> str:
        prompt = session.prompt
        if prompt is not None:
            prefix = "/" if prompt.mode == PROMPT_LIBRARY else "find: "
            left = f"{prefix}{prompt.query}"
        elif session.status_message:
            left = session.status_message
        elif session.view.is_document and session.view.slot is not None:
            slot = session.view.slot
            document = session.registry.get(slot)
            total = len(session.registry.lines(slot))
            left = f"{document.path} ({session.store.position_of(slot) + 1}/{total})"
        else:
            left = str(session.view)
        gap = width - display_width(left) - display_width(HELP_HINT)
        text = f"{left}{' ' * gap}{HELP_HINT}" if gap >= 1 else left
        text = clip_line(text, width)
        return f"{REVERSE}{text}{' ' * max(0, width - display_width(text))}{RESET}"

    def _body(self, session: Session, width: int, rows: int) -> list[str]:
        kind = session.view.kind
        if kind is ViewKind.LIBRARY:
            return self._library(session, rows)
        if kind is ViewKind.DOCUMENT:
            return self._document(session, rows)
        if kind is ViewKind.SETTINGS:
            return self._settings(session)
        if kind is ViewKind.BROWSE:
            return self._browse(session.browse_root, rows)
        return []

    def _library(self, session: Session, rows: int) -> list[str]:
        entries = session.library_entries()
        if not entries:
            if session.prompt is not None:
                return [f"{DIM}No history entries match.{RESET}"]
            return [f"{DIM}Library is empty. Open a book with: epc -F book.epub{RESET}"]
        selected = session.library_selected
        positions = session.store.positions()
        start = max(0, min(selected - rows // 2, len(entries) - rows))
        out: list[str] = []
        for idx in range(start, min(len(entries), start + rows)):
            path = entries[idx]
            document = session.registry.find(path)
            marker = "●" if document is not None else " "
            line = f"{marker} {path}"
            if document is not None:
                line += f"{DIM}  line {positions.get(document.slot, 0) + 1}{RESET}"
            out.append(selected_with_ansi(line) if idx == selected else line)
        return out

    def _document(self, session: Session, rows: int) -> list[str]:
        slot = session.view.slot
        if slot is None:
            return []
        lines = self._colorized.get(slot)
        if lines is None:
            document = session.registry.get(slot)
            lines = colorize_lines(session.registry.text(slot), document.path, self.style)
            self._colorized[slot] = lines
        offset = session.store.position_of(slot)
        return lines[offset : offset + rows]

    def _settings(self, session: Session) -> list[str]:
        settings = session.settings
        return [
            f"{BOLD}Settings{RESET}",
            "",
            f"Style            {self.style}",
            f"Tick interval    {settings.tick_ms} ms",
            f"State file       {settings.state_path}",
            f"Debug log        {settings.log_path if settings.debug else 'off'}",
            f"Open documents   {len(session.registry)}",
            f"History entries  {len(session.store.history())}",
        ]

    def _browse(self, root: Path, rows: int) -> list[str]:
        try:
            children = sorted(root.iterdir(), key=lambda p: (not p.is_dir(), p.name.lower()))
        except OSError as exc:
            raise EpcIOError(f"cannot list {root}: {exc.strerror or exc}", cause=exc) from exc
        out = [f"{BOLD}{root}{RESET}"]
        for child in children[: max(0, rows - 1)]:
            if child.is_dir():
                out.append(f"  {child.name}/")
            elif child.suffix.lower() == ".epub":
                out.append(f"  {BOLD}{child.name}{RESET}")
            else:
                out.append(f"  {DIM}{child.name}{RESET}")
        return out


__all__ = ["RenderDriver", "clip_line", "display_width", "write_frame"]
