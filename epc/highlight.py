"""Document loading, sanitization, and Pygments colorizing.

Documents are read as plain text with a tolerant decoding order. Terminal
control bytes are escaped before anything reaches the screen.
"""

from __future__ import annotations

import re
from pathlib import Path

from pygments import highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

DEFAULT_STYLE = "monokai"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


def read_text(path: Path) -> str:
    """Decode a document, trying UTF-8, UTF-8 with BOM, then latin-1.

    ``OSError`` propagates; the registry wraps it.
    """
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def sanitize_terminal_text(source: str) -> str:
    """Replace control bytes with visible ``\\xNN`` escapes; carriage returns are dropped."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\t"}:
            out.append(ch)
            continue
        if ch == "\r":
            continue
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def is_known_style(style: str) -> bool:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return False
    return True


def _lexer_for(path: Path) -> Lexer:
    try:
        return get_lexer_for_filename(path.name, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return TextLexer(stripnl=False, ensurenl=False)


def colorize_lines(source: str, path: Path, style: str = DEFAULT_STYLE) -> list[str]:
    """Return ``source`` split into display lines with ANSI colors applied.

    The lexer is guessed from the file name; unknown types render as plain
    text. An unknown style name falls back to ``DEFAULT_STYLE``. The result
    always has one entry per source line.
    """
    text = sanitize_terminal_text(source)
    plain = text.split("\n")
    if not text:
        return plain
    if not is_known_style(style):
        style = DEFAULT_STYLE
    formatter = Terminal256Formatter(style=style)
    colored = highlight(text, _lexer_for(path), formatter).split("\n")
    if len(colored) != len(plain):
        return plain
    return colored


__all__ = [
    "DEFAULT_STYLE",
    "colorize_lines",
    "is_known_style",
    "read_text",
    "sanitize_terminal_text",
]
