"""View state machine: tab cycling, direct jumps, and per-view movement.

Forward cycling walks Library -> each open document -> Library. Backward
cycling is deliberately not its mirror: from Library it surfaces Browse,
which then leads to the last open document. Document views only ever name
slots that are currently open.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Callable, Iterable
from enum import Enum

from .views import BROWSE, LIBRARY, SETTINGS, View, ViewKind

logger = logging.getLogger(__name__)


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


MoveHandler = Callable[[View, Direction], bool]


def ignore_move(view: View, direction: Direction) -> bool:
    """Default directional handler: leave every view untouched."""
    return False


class ViewStateMachine:
    """Owns the active ``View`` and the set of open document slots."""

    def __init__(self, slots: Iterable[int] = (), current: View | None = None) -> None:
        self._slots: tuple[int, ...] = tuple(sorted(set(slots)))
        self._move_handlers: dict[ViewKind, MoveHandler] = {}
        self.current = View(ViewKind.NONE)
        if current is not None:
            self._set(current)

    @property
    def slots(self) -> tuple[int, ...]:
        return self._slots

    @property
    def document_count(self) -> int:
        return len(self._slots)

    def sync_slots(self, slots: Iterable[int]) -> View:
        """Replace the open-slot set, leaving a document view whose slot closed."""
        self._slots = tuple(sorted(set(slots)))
        if self.current.is_document and self.current.slot not in self._slots:
            logger.debug("active %s closed, returning to library", self.current)
            self.current = LIBRARY
        return self.current

    def _set(self, view: View) -> View:
        if view.is_document and view.slot not in self._slots:
            raise ValueError(f"slot {view.slot} is not open")
        self.current = view
        return view

    def _forward(self, view: View) -> View:
        kind = view.kind
        if kind is ViewKind.LIBRARY:
            if not self._slots:
                return LIBRARY
            return View.document(self._slots[0])
        if kind is ViewKind.DOCUMENT:
            idx = bisect.bisect_right(self._slots, view.slot)
            if idx >= len(self._slots):
                return LIBRARY
            return View.document(self._slots[idx])
        if kind in (ViewKind.SETTINGS, ViewKind.BROWSE, ViewKind.NONE):
            return LIBRARY
        raise AssertionError(f"unhandled view kind {kind!r}")

    def _backward(self, view: View) -> View:
        kind = view.kind
        if kind is ViewKind.LIBRARY:
            return BROWSE
        if kind is ViewKind.DOCUMENT:
            idx = bisect.bisect_left(self._slots, view.slot)
            if idx == 0:
                return LIBRARY
            return View.document(self._slots[idx - 1])
        if kind is ViewKind.BROWSE:
            if not self._slots:
                return LIBRARY
            return View.document(self._slots[-1])
        if kind in (ViewKind.SETTINGS, ViewKind.NONE):
            return LIBRARY
        raise AssertionError(f"unhandled view kind {kind!r}")

    def advance(self) -> View:
        """Tab forward and return the new active view."""
        return self._set(self._forward(self.current))

    def retreat(self) -> View:
        """Tab backward and return the new active view."""
        return self._set(self._backward(self.current))

    def goto_library(self) -> View:
        return self._set(LIBRARY)

    def goto_settings(self) -> View:
        return self._set(SETTINGS)

    def goto_browse(self) -> View:
        return self._set(BROWSE)

    def goto_document(self, slot: int) -> View:
        """Activate the document in ``slot``; raises ``ValueError`` if it is not open."""
        return self._set(View.document(slot))

    def register_move_handler(self, kind: ViewKind, handler: MoveHandler) -> None:
        """Override directional movement for every view of ``kind``."""
        self._move_handlers[kind] = handler

    def directional_move(self, direction: Direction) -> bool:
        """Apply intra-view movement; returns whether anything changed.

        Views without a registered handler use ``ignore_move``.
        """
        handler = self._move_handlers.get(self.current.kind, ignore_move)
        return handler(self.current, direction)


__all__ = ["Direction", "MoveHandler", "ViewStateMachine", "ignore_move"]
