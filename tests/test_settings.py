import unittest

from models import Mode
from settings import (
    MINUTE,
    ColorTheme,
    SettingField,
    Settings,
    SettingsError,
    duration_for,
    settings_from_dict,
    settings_to_dict,
)


class DurationLookupTests(unittest.TestCase):
    def test_each_mode_reads_its_own_setting(self) -> None:
        settings = Settings(
            pomodoro_duration=50 * MINUTE,
            short_break_duration=10 * MINUTE,
            long_break_duration=30 * MINUTE,
        )
        self.assertEqual(50 * MINUTE, duration_for(Mode.POMODORO, settings))
        self.assertEqual(10 * MINUTE, duration_for(Mode.SHORT_BREAK, settings))
        self.assertEqual(30 * MINUTE, duration_for(Mode.LONG_BREAK, settings))

    def test_defaults(self) -> None:
        settings = Settings()
        self.assertEqual(25, settings.minutes(SettingField.POMODORO_DURATION))
        self.assertEqual(5, settings.minutes(SettingField.SHORT_BREAK_DURATION))
        self.assertEqual(15, settings.minutes(SettingField.LONG_BREAK_DURATION))
        self.assertEqual(ColorTheme.DEFAULT, settings.theme)
        self.assertTrue(settings.desktop_notifications)


class AdjustTests(unittest.TestCase):
    def test_duration_steps_by_one_minute(self) -> None:
        settings = Settings()
        settings.adjust(SettingField.LONG_BREAK_DURATION, increase=True)
        self.assertEqual(16 * MINUTE, settings.long_break_duration)
        settings.adjust(SettingField.LONG_BREAK_DURATION, increase=False)
        settings.adjust(SettingField.LONG_BREAK_DURATION, increase=False)
        self.assertEqual(14 * MINUTE, settings.long_break_duration)

    def test_theme_cycle_wraps(self) -> None:
        self.assertEqual(ColorTheme.DEFAULT, ColorTheme.NORD.cycled())
        self.assertEqual(ColorTheme.NORD, ColorTheme.DEFAULT.cycled(forward=False))
        order = [ColorTheme.DEFAULT]
        for _ in range(3):
            order.append(order[-1].cycled())
        self.assertEqual(
            [ColorTheme.DEFAULT, ColorTheme.DRACULA, ColorTheme.SOLARIZED, ColorTheme.NORD],
            order,
        )

    def test_display_values(self) -> None:
        settings = Settings(desktop_notifications=False)
        self.assertEqual("25 mins", settings.display_value(SettingField.POMODORO_DURATION))
        self.assertEqual("Default", settings.display_value(SettingField.THEME))
        self.assertEqual("Off", settings.display_value(SettingField.DESKTOP_NOTIFICATIONS))


class SettingsDictTests(unittest.TestCase):
    def test_persisted_form_uses_whole_minutes(self) -> None:
        data = settings_to_dict(Settings(theme=ColorTheme.NORD))
        self.assertEqual(
            {
                "pomodoro_duration": 25,
                "short_break_duration": 5,
                "long_break_duration": 15,
                "theme": "Nord",
                "desktop_notifications": True,
            },
            data,
        )
        self.assertEqual(Settings(theme=ColorTheme.NORD), settings_from_dict(data))

    def test_partial_mapping_fills_defaults(self) -> None:
        settings = settings_from_dict({"pomodoro_duration": 45})
        self.assertEqual(45 * MINUTE, settings.pomodoro_duration)
        self.assertEqual(5 * MINUTE, settings.short_break_duration)

    def test_invalid_values_raise(self) -> None:
        bad = [
            {"pomodoro_duration": 0},
            {"pomodoro_duration": 2.5},
            {"short_break_duration": True},
            {"long_break_duration": "15"},
            {"theme": "Neon"},
            {"desktop_notifications": "yes"},
        ]
        for data in bad:
            with self.subTest(data=data):
                with self.assertRaises(SettingsError):
                    settings_from_dict(data)

    def test_root_must_be_mapping(self) -> None:
        with self.assertRaises(SettingsError):
            settings_from_dict(["pomodoro_duration"])  # type: ignore[arg-type]

    def test_overrides_replace_only_given_durations(self) -> None:
        base = Settings(theme=ColorTheme.DRACULA)
        settings = base.with_overrides(pomodoro=50, long_break=20)
        self.assertEqual(50 * MINUTE, settings.pomodoro_duration)
        self.assertEqual(5 * MINUTE, settings.short_break_duration)
        self.assertEqual(20 * MINUTE, settings.long_break_duration)
        self.assertEqual(ColorTheme.DRACULA, settings.theme)
        self.assertEqual(25 * MINUTE, base.pomodoro_duration)


if __name__ == "__main__":
    unittest.main()
