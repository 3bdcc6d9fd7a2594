import logging
import os
import unittest
from unittest.mock import patch

from defaultanswer_agent.config import Settings
from defaultanswer_agent.log import ContextFormatter


class TestSettings(unittest.TestCase):
    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        settings = Settings.from_env()
        self.assertEqual(settings.timeout_s, 10.0)
        self.assertEqual(settings.max_redirects, 5)
        self.assertEqual(settings.max_body_bytes, 512 * 1024)
        self.assertEqual(settings.cors_origins, ["http://localhost:3000"])
        self.assertEqual(settings.history_backend, "")

    @patch.dict(
        os.environ,
        {
            "DEFAULTANSWER_TIMEOUT_S": "3.5",
            "DEFAULTANSWER_MAX_REDIRECTS": "2",
            "DEFAULTANSWER_MAX_BODY_KB": "64",
            "DEFAULTANSWER_CORS_ORIGINS": "https://a.example.com, https://b.example.com,",
            "DEFAULTANSWER_HISTORY_BACKEND": "Memory",
            "DEFAULTANSWER_LOG_LEVEL": "debug",
        },
        clear=True,
    )
    def test_overrides(self):
        settings = Settings.from_env()
        self.assertEqual(settings.timeout_s, 3.5)
        self.assertEqual(settings.max_redirects, 2)
        self.assertEqual(settings.max_body_bytes, 64 * 1024)
        self.assertEqual(settings.cors_origins, ["https://a.example.com", "https://b.example.com"])
        self.assertEqual(settings.history_backend, "memory")
        self.assertEqual(settings.log_level, "DEBUG")


class TestContextFormatter(unittest.TestCase):
    def test_line_shape(self):
        record = logging.LogRecord("defaultanswer_agent.fetcher", logging.WARNING, __file__, 1, "Fetch of %s failed", ("x",), None)
        line = ContextFormatter().format(record)
        self.assertTrue(line.startswith("[ "))
        self.assertTrue(line.endswith("] : WARNING : fetcher : Fetch of x failed"))


if __name__ == "__main__":
    unittest.main()
