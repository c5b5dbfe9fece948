"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into ``KeyEvent`` values.
Handles ESC-sequence timing, CSI modifier parameters, and control bytes.
"""

from __future__ import annotations

import os
import select

from .events import KeyEvent, Modifier, NO_MODIFIERS

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_SINGLE_BYTE_KEYS = {
    b"\t": "TAB",
    b"\r": "ENTER",
    b"\x7f": "BACKSPACE",
    b"\x08": "BACKSPACE",
}
_CSI_FINAL_KEYS = {
    "A": "UP",
    "B": "DOWN",
    "C": "RIGHT",
    "D": "LEFT",
    "H": "HOME",
    "F": "END",
}
_CSI_TILDE_KEYS = {
    "1": "HOME",
    "2": "INSERT",
    "3": "DELETE",
    "4": "END",
    "5": "PAGE_UP",
    "6": "PAGE_DOWN",
    "7": "HOME",
    "8": "END",
}
_MAX_SEQUENCE_BYTES = 16


def _read_ready_byte(fd: int, timeout_ms: float) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _modifiers_from_param(param: str) -> frozenset[Modifier]:
    """Decode an xterm modifier parameter (``1 + bitmask``)."""
    try:
        mask = int(param) - 1
    except ValueError:
        return NO_MODIFIERS
    mods: set[Modifier] = set()
    if mask & 1:
        mods.add(Modifier.SHIFT)
    if mask & 2:
        mods.add(Modifier.ALT)
    if mask & 4:
        mods.add(Modifier.CONTROL)
    return frozenset(mods)


def _decode_csi(fd: int) -> KeyEvent:
    payload: list[str] = []
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return KeyEvent("ESC")
        ch = part.decode("latin-1")
        if "\x40" <= ch <= "\x7e":
            break
        payload.append(ch)
        if len(payload) > _MAX_SEQUENCE_BYTES:
            return KeyEvent("ESC")

    params = "".join(payload).split(";")
    modifiers = _modifiers_from_param(params[1]) if len(params) > 1 else NO_MODIFIERS
    if ch == "Z":
        return KeyEvent("BACKTAB", frozenset({Modifier.SHIFT}))
    if ch == "~":
        name = _CSI_TILDE_KEYS.get(params[0])
        return KeyEvent(name, modifiers) if name else KeyEvent("ESC")
    name = _CSI_FINAL_KEYS.get(ch)
    if name is None:
        return KeyEvent("ESC")
    return KeyEvent(name, modifiers)


def _decode_utf8(fd: int, lead: bytes) -> str:
    first = lead[0]
    if first >= 0xF0:
        extra = 3
    elif first >= 0xE0:
        extra = 2
    elif first >= 0xC0:
        extra = 1
    else:
        extra = 0
    data = bytearray(lead)
    for _ in range(extra):
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            break
        data += part
    return data.decode("utf-8", errors="replace")


def read_key(fd: int, timeout_ms: float | None = None) -> KeyEvent | None:
    """Read and decode one key from ``fd``.

    Returns ``None`` when nothing arrives within ``timeout_ms``. Raises
    ``EOFError`` once the input stream is closed.
    """
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return None

        ch = os.read(fd, 1)
        if not ch:
            raise EOFError("input stream closed")

    named = _SINGLE_BYTE_KEYS.get(ch)
    if named is not None:
        return KeyEvent(named)
    code = ch[0]
    if code == 0:
        return KeyEvent(" ", frozenset({Modifier.CONTROL}))
    if code < 0x1B:
        # Ctrl+A .. Ctrl+Z arrive as 0x01 .. 0x1a.
        return KeyEvent(chr(0x60 + code), frozenset({Modifier.CONTROL}))
    if 0x1B < code < 0x20:
        return KeyEvent("UNKNOWN")

    if ch != b"\x1b":
        text = _decode_utf8(fd, ch) if code >= 0x80 else ch.decode("ascii")
        if len(text) == 1 and "A" <= text <= "Z":
            return KeyEvent(text.lower(), frozenset({Modifier.SHIFT}))
        return KeyEvent(text)

    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return KeyEvent("ESC")
    if seq == b"[":
        return _decode_csi(fd)
    if seq == b"O":
        final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return KeyEvent("ESC")
        name = _CSI_FINAL_KEYS.get(final.decode("latin-1"))
        return KeyEvent(name) if name else KeyEvent("ESC")
    _PENDING_BYTES.append(seq)
    return KeyEvent("ESC")


__all__ = ["ESC_SEQUENCE_TIMEOUT_MS", "read_key"]
