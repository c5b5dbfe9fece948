"""In-memory reading positions and library history."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class PositionStore:
    """Per-slot scroll offsets plus the append-only history of opened paths.

    Offsets are only accepted for slots registered with ``open_slot``; writes
    for any other slot are ignored. History keeps duplicates: reopening a
    path appends it again.
    """

    def __init__(self, history: Iterable[Path] = ()) -> None:
        self._history: list[Path] = [Path(path) for path in history]
        self._positions: dict[int, int] = {}
        self._open_slots: set[int] = set()

    def open_slot(self, slot: int, offset: int = 0) -> None:
        """Start tracking ``slot``, optionally seeding a restored offset."""
        self._open_slots.add(slot)
        self._positions[slot] = max(0, int(offset))

    def close_slot(self, slot: int) -> None:
        self._open_slots.discard(slot)
        self._positions.pop(slot, None)

    def record_position(self, slot: int, offset: int) -> bool:
        """Overwrite the offset for an open slot; return whether it was stored."""
        if slot not in self._open_slots:
            return False
        self._positions[slot] = max(0, int(offset))
        return True

    def position_of(self, slot: int) -> int:
        return self._positions.get(slot, 0)

    def positions(self) -> dict[int, int]:
        """Snapshot of offsets for every open slot."""
        return dict(self._positions)

    def append_history(self, path: Path) -> None:
        self._history.append(Path(path))

    def history(self) -> tuple[Path, ...]:
        return tuple(self._history)


__all__ = ["PositionStore"]
