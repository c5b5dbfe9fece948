"""Position store and document registry tests."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from epc.documents import DocumentRegistry
from epc.errors import EpcIOError
from epc.store import PositionStore


class PositionStoreTests(unittest.TestCase):
    def test_position_defaults_to_zero_and_records_overwrite(self) -> None:
        store = PositionStore()
        store.open_slot(0)
        self.assertEqual(store.position_of(0), 0)
        self.assertEqual(store.position_of(7), 0)
        self.assertTrue(store.record_position(0, 42))
        self.assertEqual(store.position_of(0), 42)
        store.record_position(0, 3)
        self.assertEqual(store.position_of(0), 3)

    def test_record_position_ignores_slots_that_are_not_open(self) -> None:
        store = PositionStore()
        self.assertFalse(store.record_position(4, 10))
        self.assertEqual(store.position_of(4), 0)
        store.open_slot(4)
        store.close_slot(4)
        self.assertFalse(store.record_position(4, 10))

    def test_positions_snapshot_covers_open_slots_only(self) -> None:
        store = PositionStore()
        store.open_slot(0, offset=3)
        store.open_slot(2, offset=9)
        store.close_slot(2)
        snapshot = store.positions()
        self.assertEqual(snapshot, {0: 3})
        snapshot[0] = 99
        self.assertEqual(store.position_of(0), 3)

    def test_negative_offsets_clamp_to_zero(self) -> None:
        store = PositionStore()
        store.open_slot(0, offset=-5)
        self.assertEqual(store.position_of(0), 0)
        store.record_position(0, -1)
        self.assertEqual(store.position_of(0), 0)

    def test_history_keeps_duplicates_in_order(self) -> None:
        store = PositionStore([Path("old.epub")])
        store.append_history(Path("book.epub"))
        store.append_history(Path("book.epub"))
        self.assertEqual(
            store.history(),
            (Path("old.epub"), Path("book.epub"), Path("book.epub")),
        )

    def test_history_snapshot_is_read_only(self) -> None:
        store = PositionStore()
        store.append_history(Path("a.epub"))
        snapshot = store.history()
        store.append_history(Path("b.epub"))
        self.assertEqual(snapshot, (Path("a.epub"),))


class DocumentRegistryTests(unittest.TestCase):
    def test_slots_are_stable_and_never_reused(self) -> None:
        registry = DocumentRegistry()
        first = registry.open(Path("a.epub"))
        second = registry.open(Path("b.epub"))
        registry.close(first.slot)
        third = registry.open(Path("a.epub"))
        self.assertEqual((first.slot, second.slot, third.slot), (0, 1, 2))
        self.assertEqual(registry.slots(), (1, 2))
        self.assertEqual(registry.find(Path("a.epub")), third)
        self.assertNotIn(0, registry)

    def test_lines_strip_trailing_newline_and_escape_controls(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "book.epub"
            path.write_text("one\ntwo\x07\n", encoding="utf-8")
            registry = DocumentRegistry()
            document = registry.open(path)
            self.assertEqual(registry.lines(document.slot), ["one", "two\\x07"])

    def test_unreadable_document_raises_io_error(self) -> None:
        registry = DocumentRegistry()
        document = registry.open(Path("/nonexistent/epc/book.epub"))
        with self.assertRaises(EpcIOError):
            registry.lines(document.slot)


if __name__ == "__main__":
    unittest.main()
