from __future__ import annotations

import io
import logging
import logging.handlers
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from epc.logs import PACKAGE_LOGGER, setup_logging


class SetupLoggingTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.log_path = Path(self._tmp.name) / "logs" / "epc.log"

    def tearDown(self) -> None:
        setup_logging(False, self.log_path)
        self._tmp.cleanup()

    def test_quiet_mode_installs_only_a_null_handler(self) -> None:
        logger = setup_logging(False, self.log_path)
        self.assertEqual(logger.name, PACKAGE_LOGGER)
        self.assertEqual([type(h) for h in logger.handlers], [logging.NullHandler])
        self.assertFalse(logger.propagate)
        self.assertFalse(self.log_path.exists())

    def test_debug_mode_writes_child_records_to_rotating_file(self) -> None:
        logger = setup_logging(True, self.log_path)
        self.assertIsInstance(logger.handlers[0], logging.handlers.RotatingFileHandler)
        logging.getLogger("epc.navigation").debug("moved to %s", "Library")
        for handler in logger.handlers:
            handler.flush()
        text = self.log_path.read_text(encoding="utf-8")
        self.assertIn("debug logging enabled", text)
        self.assertIn("epc.navigation: moved to Library", text)

    def test_repeated_setup_replaces_handlers(self) -> None:
        setup_logging(True, self.log_path)
        logger = setup_logging(True, self.log_path)
        self.assertEqual(len(logger.handlers), 1)

    def test_unwritable_log_location_falls_back_to_null_handler(self) -> None:
        blocker = Path(self._tmp.name) / "blocker"
        blocker.write_text("", encoding="utf-8")
        stderr = io.StringIO()
        with mock.patch("sys.stderr", stderr):
            logger = setup_logging(True, blocker / "epc.log")
        self.assertEqual([type(h) for h in logger.handlers], [logging.NullHandler])
        self.assertIn("cannot open debug log", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
