import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from main import __version__, main
from settings import MINUTE, ColorTheme, Settings
from storage import Storage


class MainCommandTests(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()
        for target in ("main.setup_logging", "main.CLI"):
            patcher = patch(target)
            mock = patcher.start()
            self.addCleanup(patcher.stop)
            if target == "main.CLI":
                self.cli_class = mock

    def _invoke(self, temp_dir: str, *extra: str):
        args = [
            "--state-file", str(Path(temp_dir) / "state.json"),
            "--config-file", str(Path(temp_dir) / "config.toml"),
            *extra,
        ]
        return self.runner.invoke(main, args)

    def test_overrides_apply_on_top_of_saved_settings(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            Storage.save_settings(Settings(theme=ColorTheme.NORD), Path(temp_dir) / "config.toml")
            result = self._invoke(temp_dir, "-p", "50", "--short-break", "10")

        self.assertEqual(0, result.exit_code, result.output)
        app = self.cli_class.call_args.args[0]
        self.assertEqual(50 * MINUTE, app.settings.pomodoro_duration)
        self.assertEqual(10 * MINUTE, app.settings.short_break_duration)
        self.assertEqual(15 * MINUTE, app.settings.long_break_duration)
        self.assertEqual(ColorTheme.NORD, app.settings.theme)
        self.assertEqual(50 * MINUTE, app.time_remaining)
        self.cli_class.return_value.run.assert_called_once_with()

    def test_state_is_resumed_from_state_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            from app_state import App
            saved = App()
            saved.add_task("carry over")
            Storage.save_app(saved, Path(temp_dir) / "state.json")
            result = self._invoke(temp_dir)

        self.assertEqual(0, result.exit_code, result.output)
        app = self.cli_class.call_args.args[0]
        self.assertEqual(["carry over"], [t.name for t in app.tasks])

    def test_zero_minute_override_is_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            result = self._invoke(temp_dir, "-l", "0")
        self.assertEqual(2, result.exit_code)
        self.cli_class.assert_not_called()

    def test_version(self) -> None:
        result = self.runner.invoke(main, ["--version"])
        self.assertEqual(0, result.exit_code)
        self.assertIn(__version__, result.output)


if __name__ == "__main__":
    unittest.main()
