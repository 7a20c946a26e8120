"""
Tests for application settings and logging setup.
"""

import os
import sys
import logging
import tempfile
import unittest
from pathlib import Path
from pydantic import ValidationError

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from threatboard.core.config import Settings
from threatboard.core.logging import setup_logging


class TestSettings(unittest.TestCase):
    """Tests for the Settings class."""

    def test_defaults(self):
        settings = Settings(_env_file=None)
        self.assertEqual(settings.WARNING_THRESHOLD, 50)
        self.assertEqual(settings.WARNING_MESSAGE, "High threat level detected!")
        self.assertEqual(settings.LOCATION_THREAT_LEVEL, 10)
        self.assertEqual(settings.FETCH_LATENCY_SECONDS, 2.0)

    def test_log_level_normalized(self):
        self.assertEqual(Settings(_env_file=None, LOG_LEVEL="debug").LOG_LEVEL, "DEBUG")

    def test_invalid_values(self):
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, LOG_LEVEL="LOUD")
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, FETCH_LATENCY_SECONDS=-1)
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, LOCATION_UPDATE_INTERVAL_SECONDS=0)
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, WARNING_MESSAGE="")


class TestSetupLogging(unittest.TestCase):
    """Tests for setup_logging."""

    def setUp(self):
        self.root = logging.getLogger()
        self.saved = (list(self.root.handlers), self.root.level)

    def tearDown(self):
        for handler in list(self.root.handlers):
            handler.close()
            self.root.removeHandler(handler)
        handlers, level = self.saved
        for handler in handlers:
            self.root.addHandler(handler)
        self.root.setLevel(level)

    def test_console_only(self):
        root = setup_logging(log_level="WARNING", log_dir="")
        self.assertEqual(root.level, logging.WARNING)
        self.assertEqual(len(root.handlers), 1)

    def test_file_handlers(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = setup_logging(log_level="DEBUG", log_dir=tmp)
            self.assertEqual(len(root.handlers), 3)
            logging.getLogger("threatboard").error("boom")
            for handler in root.handlers:
                handler.flush()
            self.assertIn("boom", (Path(tmp) / "error.log").read_text())
            for handler in list(root.handlers):
                handler.close()
                root.removeHandler(handler)


if __name__ == '__main__':
    unittest.main()
