"""Registry of documents open in the current session."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from .errors import EpcIOError
from .highlight import read_text, sanitize_terminal_text


@dataclass(frozen=True)
class Document:
    """An open text source and the slot it occupies for this session."""

    slot: int
    path: Path

    @property
    def title(self) -> str:
        return self.path.name or str(self.path)


class DocumentRegistry:
    """Ordered open documents keyed by stable slot indices.

    Slots are handed out from a monotonically increasing counter, so a slot
    is never reused within a session even after its document is closed.
    Document text is read lazily and cached per slot.
    """

    def __init__(self) -> None:
        self._documents: dict[int, Document] = {}
        self._lines: dict[int, list[str]] = {}
        self._next_slot = 0

    def open(self, path: Path) -> Document:
        document = Document(slot=self._next_slot, path=Path(path))
        self._next_slot += 1
        self._documents[document.slot] = document
        return document

    def close(self, slot: int) -> Document:
        document = self._documents.pop(slot)
        self._lines.pop(slot, None)
        return document

    def get(self, slot: int) -> Document:
        return self._documents[slot]

    def find(self, path: Path) -> Document | None:
        """Return the open document for ``path`` if there is one."""
        target = Path(path)
        for document in self._documents.values():
            if document.path == target:
                return document
        return None

    def slots(self) -> tuple[int, ...]:
        return tuple(sorted(self._documents))

    def documents(self) -> list[Document]:
        return [self._documents[slot] for slot in self.slots()]

    def text(self, slot: int) -> str:
        return "\n".join(self.lines(slot))

    def lines(self, slot: int) -> list[str]:
        """Return the sanitized lines of an open document, reading it once.

        Raises ``EpcIOError`` when the file cannot be read.
        """
        cached = self._lines.get(slot)
        if cached is not None:
            return cached
        document = self._documents[slot]
        try:
            source = read_text(document.path)
        except OSError as exc:
            raise EpcIOError(f"cannot read {document.path}: {exc.strerror or exc}", cause=exc) from exc
        lines = sanitize_terminal_text(source).split("\n")
        if len(lines) > 1 and lines[-1] == "":
            lines.pop()
        self._lines[slot] = lines
        return lines

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self.documents())

    def __contains__(self, slot: object) -> bool:
        return slot in self._documents


__all__ = ["Document", "DocumentRegistry"]
