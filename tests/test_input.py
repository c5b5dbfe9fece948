"""Regression tests for raw-key decoding.

Covers ESC timing, CSI modifier parameters, and control/shift mapping.
"""

from __future__ import annotations

import os
import time
import unittest

from epc import input as input_mod
from epc.events import KeyEvent, Modifier, key


class ReadKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        input_mod._PENDING_BYTES.clear()

    def tearDown(self) -> None:
        input_mod._PENDING_BYTES.clear()

    def _decode(self, payload: bytes, count: int = 1) -> list[KeyEvent | None]:
        read_fd, write_fd = os.pipe()
        try:
            os.write(write_fd, payload)
            return [input_mod.read_key(read_fd, timeout_ms=20) for _ in range(count)]
        finally:
            os.close(read_fd)
            os.close(write_fd)

    def test_timeout_returns_none(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            self.assertIsNone(input_mod.read_key(read_fd, timeout_ms=5))
        finally:
            os.close(read_fd)
            os.close(write_fd)

    def test_closed_input_raises_eof(self) -> None:
        read_fd, write_fd = os.pipe()
        os.close(write_fd)
        try:
            with self.assertRaises(EOFError):
                input_mod.read_key(read_fd, timeout_ms=5)
        finally:
            os.close(read_fd)

    def test_single_escape_returns_esc_without_second_keypress(self) -> None:
        started = time.monotonic()
        (event,) = self._decode(b"\x1b")
        self.assertEqual(event, KeyEvent("ESC"))
        self.assertLess(time.monotonic() - started, 0.2)

    def test_escape_does_not_swallow_following_printable_key(self) -> None:
        self.assertEqual(self._decode(b"\x1bq", count=2), [KeyEvent("ESC"), KeyEvent("q")])

    def test_plain_and_named_keys(self) -> None:
        cases = {
            b"j": key("j"),
            b"\t": key("TAB"),
            b"\r": key("ENTER"),
            b"\x7f": key("BACKSPACE"),
            b"\x1b[A": key("UP"),
            b"\x1b[B": key("DOWN"),
            b"\x1b[H": key("HOME"),
            b"\x1b[1~": key("HOME"),
            b"\x1b[5~": key("PAGE_UP"),
            b"\x1b[6~": key("PAGE_DOWN"),
            b"\x1bOD": key("LEFT"),
        }
        for payload, expected in cases.items():
            with self.subTest(payload=payload):
                self.assertEqual(self._decode(payload), [expected])

    def test_control_bytes_map_to_control_letters(self) -> None:
        cases = {
            b"\x03": key("c", Modifier.CONTROL),
            b"\x06": key("f", Modifier.CONTROL),
            b"\n": key("j", Modifier.CONTROL),
            b"\x0b": key("k", Modifier.CONTROL),
        }
        for payload, expected in cases.items():
            with self.subTest(payload=payload):
                self.assertEqual(self._decode(payload), [expected])

    def test_uppercase_letters_carry_shift(self) -> None:
        self.assertEqual(self._decode(b"J"), [key("j", Modifier.SHIFT)])

    def test_csi_modifier_parameters(self) -> None:
        self.assertEqual(self._decode(b"\x1b[1;2B"), [key("DOWN", Modifier.SHIFT)])
        self.assertEqual(self._decode(b"\x1b[1;5A"), [key("UP", Modifier.CONTROL)])
        self.assertEqual(self._decode(b"\x1b[6;5~"), [key("PAGE_DOWN", Modifier.CONTROL)])
        self.assertEqual(self._decode(b"\x1b[Z"), [key("BACKTAB", Modifier.SHIFT)])

    def test_multibyte_utf8_character(self) -> None:
        self.assertEqual(self._decode("é".encode("utf-8")), [key("é")])


if __name__ == "__main__":
    unittest.main()
