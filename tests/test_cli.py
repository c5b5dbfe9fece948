"""CLI argument validation and hand-off tests.

Verifies which paths reach ``run_reader`` and how failures exit.
"""

from __future__ import annotations

import io
import os
import tempfile
import unittest
from contextlib import ExitStack
from pathlib import Path
from unittest import mock

from epc import cli
from epc.errors import EpcIOError


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self._stack = ExitStack()
        self._stack.enter_context(
            mock.patch.dict(
                os.environ,
                {"EPC_CONFIG": str(self.root / "epc.json"), "EPC_LOG": str(self.root / "epc.log")},
            )
        )
        self.stderr = self._stack.enter_context(mock.patch("sys.stderr", io.StringIO()))
        self._stack.enter_context(mock.patch("epc.cli.setup_logging"))
        fake_stdin = mock.Mock()
        fake_stdin.fileno.return_value = 0
        self._stack.enter_context(mock.patch("epc.cli.sys.stdin", fake_stdin))
        self.isatty = self._stack.enter_context(mock.patch("epc.cli.os.isatty", return_value=True))
        self.run_reader = self._stack.enter_context(mock.patch("epc.cli.run_reader"))

    def tearDown(self) -> None:
        self._stack.close()
        self._tmp.cleanup()

    def _book(self, name: str) -> Path:
        path = self.root / name
        path.write_text("text\n", encoding="utf-8")
        return path

    def test_files_are_handed_over_in_order_and_open_first_document(self) -> None:
        a, b = self._book("a.epub"), self._book("b.epub")
        cli.main(["-F", str(a), "--file", str(b)])

        self.run_reader.assert_called_once()
        paths, settings = self.run_reader.call_args.args
        self.assertEqual(paths, [a, b])
        self.assertFalse(settings.debug)
        self.assertFalse(self.run_reader.call_args.kwargs["start_in_library"])

    def test_library_selector_starts_in_library(self) -> None:
        a = self._book("a.epub")
        for command in ("library", "lib"):
            with self.subTest(command=command):
                self.run_reader.reset_mock()
                cli.main([command, "-F", str(a), "-D"])
                paths, settings = self.run_reader.call_args.args
                self.assertEqual(paths, [a])
                self.assertTrue(settings.debug)
                self.assertTrue(self.run_reader.call_args.kwargs["start_in_library"])

    def test_no_files_starts_in_library(self) -> None:
        cli.main([])
        self.assertEqual(self.run_reader.call_args.args[0], [])
        self.assertTrue(self.run_reader.call_args.kwargs["start_in_library"])

    def test_non_epub_file_is_rejected_before_reader_starts(self) -> None:
        text = self._book("notes.txt")
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["-F", str(text)])
        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("not an epub file", self.stderr.getvalue())
        self.run_reader.assert_not_called()

    def test_missing_epub_is_rejected(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["-F", str(self.root / "missing.epub")])
        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("no such epub file", self.stderr.getvalue())
        self.run_reader.assert_not_called()

    def test_unknown_style_is_rejected(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["--style", "no-such-style"])
        self.assertEqual(ctx.exception.code, 2)

    def test_help_exits_successfully(self) -> None:
        with mock.patch("sys.stdout", io.StringIO()) as stdout:
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["-H"])
        self.assertEqual(ctx.exception.code, 0)
        self.assertIn("--file", stdout.getvalue())

    def test_reader_errors_exit_with_diagnostic(self) -> None:
        self.run_reader.side_effect = EpcIOError("cannot read /x.epub")
        with self.assertRaises(SystemExit) as ctx:
            cli.main([])
        self.assertEqual(ctx.exception.code, "epc: cannot read /x.epub")

    def test_non_terminal_stdin_exits_before_reader(self) -> None:
        self.isatty.return_value = False
        with self.assertRaises(SystemExit) as ctx:
            cli.main([])
        self.assertIn("not a terminal", str(ctx.exception.code))
        self.run_reader.assert_not_called()


if __name__ == "__main__":
    unittest.main()
