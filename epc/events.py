"""Events delivered from the background input poller to the foreground loop."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Modifier(Enum):
    CONTROL = "control"
    SHIFT = "shift"
    ALT = "alt"


NO_MODIFIERS: frozenset[Modifier] = frozenset()


@dataclass(frozen=True)
class KeyEvent:
    """One decoded key press.

    ``code`` is either a single printable character or a named key token
    such as ``"UP"``, ``"TAB"`` or ``"PAGE_DOWN"``.
    """

    code: str
    modifiers: frozenset[Modifier] = NO_MODIFIERS

    @property
    def is_char(self) -> bool:
        return len(self.code) == 1

    def has(self, modifier: Modifier) -> bool:
        return modifier in self.modifiers


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class InputFailure:
    """The input poller died; ``error`` is re-raised by the consumer."""

    error: BaseException


InputEvent = Union[KeyEvent, Tick, Quit, InputFailure]

TICK = Tick()
QUIT = Quit()


def key(code: str, *modifiers: Modifier) -> KeyEvent:
    return KeyEvent(code, frozenset(modifiers))


__all__ = [
    "InputEvent",
    "InputFailure",
    "KeyEvent",
    "Modifier",
    "NO_MODIFIERS",
    "QUIT",
    "Quit",
    "TICK",
    "Tick",
    "key",
]
