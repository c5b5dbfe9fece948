"""Closed set of views the reader can show.

A ``View`` is a kind tag plus, for document views only, the slot index of
the open document it displays. Construction validates that pairing so a
document view without a slot (or a library view with one) cannot exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ViewKind(Enum):
    LIBRARY = "library"
    DOCUMENT = "document"
    SETTINGS = "settings"
    BROWSE = "browse"
    NONE = "none"


@dataclass(frozen=True)
class View:
    kind: ViewKind
    slot: int | None = None

    def __post_init__(self) -> None:
        if self.kind is ViewKind.DOCUMENT:
            if self.slot is None or self.slot < 0:
                raise ValueError(f"document view needs a non-negative slot, got {self.slot!r}")
        elif self.slot is not None:
            raise ValueError(f"{self.kind.value} view does not take a slot")

    @classmethod
    def document(cls, slot: int) -> View:
        return cls(ViewKind.DOCUMENT, slot)

    @property
    def is_document(self) -> bool:
        return self.kind is ViewKind.DOCUMENT

    def __str__(self) -> str:
        if self.kind is ViewKind.DOCUMENT:
            return f"Document({self.slot})"
        return self.kind.value.capitalize()


LIBRARY = View(ViewKind.LIBRARY)
SETTINGS = View(ViewKind.SETTINGS)
BROWSE = View(ViewKind.BROWSE)
NO_VIEW = View(ViewKind.NONE)

__all__ = ["View", "ViewKind", "LIBRARY", "SETTINGS", "BROWSE", "NO_VIEW"]
