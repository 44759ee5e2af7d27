import unittest
from pathlib import Path

from eventdesk.config import DEFAULT_API_URL, Settings, load_settings
from eventdesk.errors import ConfigError


class TestLoadSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        s = load_settings(env={}, dotenv=False)
        self.assertEqual(s.api_url, DEFAULT_API_URL)
        self.assertEqual(s.session_file, Path.home() / ".eventdesk" / "session.json")
        self.assertIsNone(s.timeout)
        self.assertEqual(s.log_level, "WARNING")

    def test_overrides(self) -> None:
        s = load_settings(
            env={
                "EVENTDESK_API_URL": "https://events.example.edu/api/",
                "EVENTDESK_SESSION_FILE": "/tmp/ed/session.json",
                "EVENTDESK_TIMEOUT": "12.5",
                "EVENTDESK_LOG_LEVEL": "debug",
            },
            dotenv=False,
        )
        self.assertEqual(s.api_url, "https://events.example.edu/api")
        self.assertEqual(s.session_file, Path("/tmp/ed/session.json"))
        self.assertEqual(s.timeout, 12.5)
        self.assertEqual(s.log_level, "DEBUG")

    def test_bad_timeout(self) -> None:
        with self.assertRaises(ConfigError):
            load_settings(env={"EVENTDESK_TIMEOUT": "soon"}, dotenv=False)

    def test_unknown_log_level(self) -> None:
        with self.assertRaises(ConfigError) as ctx:
            load_settings(env={"EVENTDESK_LOG_LEVEL": "verbose"}, dotenv=False)
        self.assertIn("EVENTDESK_LOG_LEVEL", str(ctx.exception))

    def test_known_log_levels(self) -> None:
        for raw in ("debug", " Info ", "ERROR", ""):
            level = load_settings(env={"EVENTDESK_LOG_LEVEL": raw}, dotenv=False).log_level
            self.assertEqual(level, raw.strip().upper() or "WARNING")

    def test_settings_default_session_file_is_in_home(self) -> None:
        path = Settings().session_file
        self.assertTrue(path.is_absolute())
        self.assertEqual(path, Path.home() / ".eventdesk" / "session.json")

    def test_zero_timeout_means_none(self) -> None:
        self.assertIsNone(load_settings(env={"EVENTDESK_TIMEOUT": "0"}, dotenv=False).timeout)


if __name__ == "__main__":
    unittest.main()
