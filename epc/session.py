"""Single owned session state shared by the dispatcher and the renderer.

Bundles the document registry, position store, and view state machine, and
implements the per-view behaviors the state machine delegates: library
selection, document scrolling, library search, and find-on-page.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .config import ReaderSettings
from .documents import Document, DocumentRegistry
from .navigation import Direction, ViewStateMachine
from .store import PositionStore
from .views import View, ViewKind

logger = logging.getLogger(__name__)

STATUS_MESSAGE_SECONDS = 2.0
PROMPT_LIBRARY = "library"
PROMPT_PAGE = "page"


@dataclass
class Prompt:
    """Open search/find prompt. ``origin`` is the offset to restore on cancel."""

    mode: str
    query: str = ""
    origin: int = 0


@dataclass
class Session:
    registry: DocumentRegistry
    store: PositionStore
    machine: ViewStateMachine
    settings: ReaderSettings = field(default_factory=ReaderSettings)
    browse_root: Path = field(default_factory=Path.cwd)
    saved_positions: dict[Path, int] = field(default_factory=dict)
    library_selected: int = 0
    prompt: Prompt | None = None
    status_message: str = ""
    status_message_until: float = 0.0
    now: float = 0.0
    dirty: bool = True

    @classmethod
    def create(
        cls,
        paths: Iterable[Path] = (),
        *,
        settings: ReaderSettings | None = None,
        history: Iterable[Path] = (),
        saved_positions: Mapping[Path, int] | None = None,
        start_in_library: bool = True,
        browse_root: Path | None = None,
    ) -> Session:
        """Open ``paths`` in order and pick the starting view."""
        session = cls(
            registry=DocumentRegistry(),
            store=PositionStore(history),
            machine=ViewStateMachine(),
            settings=settings if settings is not None else ReaderSettings(),
            browse_root=browse_root if browse_root is not None else Path.cwd(),
            saved_positions=dict(saved_positions or {}),
        )
        session.machine.register_move_handler(ViewKind.LIBRARY, session.move_library_selection)
        session.machine.register_move_handler(ViewKind.DOCUMENT, session.scroll_document)
        opened = [session.open_path(path) for path in paths]
        if opened and not start_in_library:
            session.machine.goto_document(opened[0].slot)
        else:
            session.machine.goto_library()
        return session

    @property
    def view(self) -> View:
        return self.machine.current

    def open_path(self, path: Path) -> Document:
        """Open ``path`` into a fresh slot and append it to history."""
        document = self.registry.open(path)
        self.store.open_slot(document.slot, self.saved_positions.get(document.path, 0))
        self.store.append_history(document.path)
        self.machine.sync_slots(self.registry.slots())
        logger.debug("opened %s in slot %d", document.path, document.slot)
        self.dirty = True
        return document

    def close_document(self, slot: int) -> Document:
        self.saved_positions[self.registry.get(slot).path] = self.store.position_of(slot)
        document = self.registry.close(slot)
        self.store.close_slot(slot)
        self.machine.sync_slots(self.registry.slots())
        self.dirty = True
        return document

    def positions_by_path(self) -> dict[Path, int]:
        """Offsets keyed by path, for persisting across sessions."""
        positions = dict(self.saved_positions)
        for document in self.registry:
            positions[document.path] = self.store.position_of(document.slot)
        return positions

    def set_status(self, message: str, seconds: float = STATUS_MESSAGE_SECONDS) -> None:
        self.status_message = message
        self.status_message_until = self.now + seconds
        self.dirty = True

    def tick(self, now: float) -> bool:
        """Advance the session clock; returns whether a redraw is needed."""
        self.now = now
        if self.status_message and now >= self.status_message_until:
            self.status_message = ""
            self.status_message_until = 0.0
            self.dirty = True
        return self.dirty

    # Library

    def library_entries(self) -> list[Path]:
        """History entries, filtered by file name while a library search is open."""
        history = list(self.store.history())
        if self.prompt is None or self.prompt.mode != PROMPT_LIBRARY or not self.prompt.query:
            return history
        needle = self.prompt.query.casefold()
        return [path for path in history if needle in path.name.casefold()]

    def _clamp_library_selection(self) -> None:
        count = len(self.library_entries())
        self.library_selected = max(0, min(self.library_selected, count - 1))

    def move_library_selection(self, view: View, direction: Direction) -> bool:
        if direction not in (Direction.UP, Direction.DOWN):
            return False
        previous = self.library_selected
        self.library_selected += 1 if direction is Direction.DOWN else -1
        self._clamp_library_selection()
        return self.library_selected != previous

    def selected_entry(self) -> Path | None:
        entries = self.library_entries()
        if not entries:
            return None
        return entries[self.library_selected]

    def activate_selection(self) -> bool:
        """Open (or switch to) the history entry under the library cursor."""
        if self.view.kind is not ViewKind.LIBRARY:
            return False
        path = self.selected_entry()
        if path is None:
            return False
        return self.open_entry(path)

    def open_entry(self, path: Path) -> bool:
        """Switch to ``path`` if it is open, otherwise open it into a new slot."""
        document = self.registry.find(path)
        if document is None:
            if not path.is_file():
                self.set_status(f"Missing: {path}")
                return True
            document = self.open_path(path)
        self.machine.goto_document(document.slot)
        return True

    # Documents

    def max_offset(self, slot: int) -> int:
        return max(0, len(self.registry.lines(slot)) - 1)

    def scroll_document(self, view: View, direction: Direction) -> bool:
        if direction not in (Direction.UP, Direction.DOWN) or view.slot is None:
            return False
        current = self.store.position_of(view.slot)
        step = 1 if direction is Direction.DOWN else -1
        target = max(0, min(current + step, self.max_offset(view.slot)))
        if target == current:
            return False
        return self.store.record_position(view.slot, target)

    # Prompts

    def search_library(self) -> None:
        self.prompt = Prompt(mode=PROMPT_LIBRARY)
        self.library_selected = 0
        self.dirty = True

    def find_on_page(self) -> None:
        slot = self.view.slot
        if slot is None:
            return
        self.prompt = Prompt(mode=PROMPT_PAGE, origin=self.store.position_of(slot))
        self.dirty = True

    def input_char(self, ch: str) -> bool:
        """Feed one typed character to the open prompt; a no-op without one."""
        if self.prompt is None:
            return False
        self.set_query(self.prompt.query + ch)
        return True

    def set_query(self, query: str) -> None:
        prompt = self.prompt
        if prompt is None:
            return
        prompt.query = query
        self.dirty = True
        if prompt.mode == PROMPT_LIBRARY:
            self._clamp_library_selection()
        elif prompt.mode == PROMPT_PAGE and query:
            self._jump_to_match(query, prompt.origin)

    def _jump_to_match(self, query: str, start: int) -> bool:
        slot = self.view.slot
        if slot is None:
            return False
        lines = self.registry.lines(slot)
        needle = query.casefold()
        count = len(lines)
        for step in range(count):
            idx = (start + step) % count
            if needle in lines[idx].casefold():
                self.store.record_position(slot, idx)
                return True
        self.set_status(f"Not found: {query}")
        return False

    def accept_prompt(self) -> None:
        prompt = self.prompt
        selected = self.selected_entry() if self.view.kind is ViewKind.LIBRARY else None
        self.prompt = None
        self.dirty = True
        if prompt is not None and prompt.mode == PROMPT_LIBRARY:
            self.library_selected = 0
            if selected is not None:
                self.open_entry(selected)

    def cancel_prompt(self) -> None:
        prompt = self.prompt
        self.prompt = None
        self.dirty = True
        if prompt is not None and prompt.mode == PROMPT_PAGE and self.view.slot is not None:
            self.store.record_position(self.view.slot, prompt.origin)
        self._clamp_library_selection()


__all__ = ["PROMPT_LIBRARY", "PROMPT_PAGE", "Prompt", "Session"]
