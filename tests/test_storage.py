import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from app_state import App
from settings import MINUTE, ColorTheme, Settings
from storage import Storage, default_config_path, default_state_path


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class SettingsFileTests(unittest.TestCase):
    def test_missing_file_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            settings = Storage.load_settings(Path(temp_dir) / "config.toml")
        self.assertEqual(Settings(), settings)

    def test_save_then_load(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "nested" / "config.toml"
            original = Settings(pomodoro_duration=40 * MINUTE, theme=ColorTheme.SOLARIZED,
                                desktop_notifications=False)
            self.assertTrue(Storage.save_settings(original, path))
            text = path.read_text(encoding="utf-8")
            loaded = Storage.load_settings(path)
        self.assertIn("pomodoro_duration = 40", text)
        self.assertEqual(original, loaded)

    def test_hand_written_file_is_read(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "config.toml"
            _write_text(path, 'short_break_duration = 7\ntheme = "Nord"\n')
            settings = Storage.load_settings(path)
        self.assertEqual(7 * MINUTE, settings.short_break_duration)
        self.assertEqual(ColorTheme.NORD, settings.theme)

    def test_corrupt_or_invalid_file_falls_back_to_defaults(self) -> None:
        for content in ("pomodoro_duration = = 3", "pomodoro_duration = 0\n"):
            with self.subTest(content=content):
                with tempfile.TemporaryDirectory() as temp_dir:
                    path = Path(temp_dir) / "config.toml"
                    _write_text(path, content)
                    with self.assertLogs("storage", level="WARNING"):
                        settings = Storage.load_settings(path)
                self.assertEqual(Settings(), settings)


class StateFileTests(unittest.TestCase):
    def test_missing_file_gives_fresh_app(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            app = Storage.load_app(Settings(), Path(temp_dir) / "state.json")
        self.assertEqual([], app.tasks)

    def test_save_then_load_resumes_tasks(self) -> None:
        app = App()
        app.add_task("write")
        app.add_task("review")
        app.complete_toggle(1)
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "data" / "state.json"
            self.assertTrue(Storage.save_app(app, path))
            raw = json.loads(path.read_text(encoding="utf-8"))
            loaded = Storage.load_app(Settings(), path)
        self.assertEqual("write", raw["tasks"][0]["name"])
        self.assertEqual(app.to_snapshot(), loaded.to_snapshot())

    def test_corrupt_state_starts_fresh(self) -> None:
        for content in ("{not json", json.dumps({"tasks": "x"})):
            with self.subTest(content=content):
                with tempfile.TemporaryDirectory() as temp_dir:
                    path = Path(temp_dir) / "state.json"
                    _write_text(path, content)
                    with self.assertLogs("storage", level="WARNING"):
                        app = Storage.load_app(Settings(), path)
                self.assertEqual([], app.tasks)

    def test_loaded_app_uses_given_settings(self) -> None:
        settings = Settings(pomodoro_duration=30 * MINUTE)
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "state.json"
            Storage.save_app(App(), path)
            app = Storage.load_app(settings, path)
        self.assertIs(settings, app.settings)
        self.assertEqual(25 * MINUTE, app.time_remaining)

    def test_save_failure_is_reported_not_raised(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            blocker = Path(temp_dir) / "file"
            blocker.write_text("", encoding="utf-8")
            with self.assertLogs("storage", level="ERROR"):
                saved = Storage.save_app(App(), blocker / "state.json")
        self.assertFalse(saved)

    def test_interrupted_save_keeps_previous_state(self) -> None:
        app = App()
        app.add_task("keep me")

        def broken_dump(obj, f, **kwargs):
            f.write('{"tas')
            raise OSError("disk full")

        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "state.json"
            Storage.save_app(app, path)
            app.add_task("lost")
            with patch("storage.json.dump", side_effect=broken_dump):
                with self.assertLogs("storage", level="ERROR"):
                    saved = Storage.save_app(app, path)
            loaded = Storage.load_app(Settings(), path)
            leftovers = sorted(p.name for p in Path(temp_dir).iterdir())
        self.assertFalse(saved)
        self.assertEqual(["keep me"], [t.name for t in loaded.tasks])
        self.assertEqual(["state.json"], leftovers)


class DefaultPathTests(unittest.TestCase):
    def test_explicit_env_overrides(self) -> None:
        env = {"POMODORO_STATE_FILE": "/tmp/p/state.json", "POMODORO_CONFIG_FILE": "/tmp/p/c.toml"}
        with patch.dict(os.environ, env):
            self.assertEqual(Path("/tmp/p/state.json"), default_state_path())
            self.assertEqual(Path("/tmp/p/c.toml"), default_config_path())

    def test_xdg_directories(self) -> None:
        env = {
            "POMODORO_STATE_FILE": "",
            "POMODORO_CONFIG_FILE": "",
            "XDG_DATA_HOME": "/xdg/data",
            "XDG_CONFIG_HOME": "/xdg/config",
        }
        with patch.dict(os.environ, env):
            self.assertEqual(Path("/xdg/data/terminal-pomodoro/state.json"), default_state_path())
            self.assertEqual(Path("/xdg/config/terminal-pomodoro/config.toml"), default_config_path())


if __name__ == "__main__":
    unittest.main()
