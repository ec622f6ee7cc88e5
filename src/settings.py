"""User settings: session durations, colour theme and notifications.

Durations are held in seconds but always as whole minutes (minimum one
minute); the persisted form stores minutes. Loading/saving the TOML file
lives in storage.py; this module only converts to and from plain dicts.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from models import Mode

MINUTE = 60
MIN_DURATION_MINUTES = 1


class SettingsError(ValueError):
    """Raised when a settings mapping cannot be turned into Settings."""


class ColorTheme(str, Enum):
    DEFAULT = "Default"
    DRACULA = "Dracula"
    SOLARIZED = "Solarized"
    NORD = "Nord"

    def cycled(self, forward: bool = True) -> "ColorTheme":
        members = list(ColorTheme)
        step = 1 if forward else -1
        return members[(members.index(self) + step) % len(members)]


class SettingField(str, Enum):
    POMODORO_DURATION = "pomodoro_duration"
    SHORT_BREAK_DURATION = "short_break_duration"
    LONG_BREAK_DURATION = "long_break_duration"
    THEME = "theme"
    DESKTOP_NOTIFICATIONS = "desktop_notifications"


# Row order of the settings view.
SETTING_FIELDS: Tuple[SettingField, ...] = tuple(SettingField)

SETTING_LABELS: Dict[SettingField, str] = {
    SettingField.POMODORO_DURATION: "Pomodoro Duration",
    SettingField.SHORT_BREAK_DURATION: "Short Break",
    SettingField.LONG_BREAK_DURATION: "Long Break",
    SettingField.THEME: "Color Theme",
    SettingField.DESKTOP_NOTIFICATIONS: "Desktop Notifications",
}

_DURATION_FIELDS = (
    SettingField.POMODORO_DURATION,
    SettingField.SHORT_BREAK_DURATION,
    SettingField.LONG_BREAK_DURATION,
)


@dataclass
class Settings:
    pomodoro_duration: int = 25 * MINUTE
    short_break_duration: int = 5 * MINUTE
    long_break_duration: int = 15 * MINUTE
    theme: ColorTheme = ColorTheme.DEFAULT
    desktop_notifications: bool = True

    def minutes(self, field: SettingField) -> int:
        return getattr(self, field.value) // MINUTE

    def adjust(self, field: SettingField, increase: bool) -> None:
        """Step one setting: +/- one minute for durations, cycle or flip otherwise."""
        if field in _DURATION_FIELDS:
            delta = 1 if increase else -1
            new_minutes = max(MIN_DURATION_MINUTES, self.minutes(field) + delta)
            setattr(self, field.value, new_minutes * MINUTE)
        elif field is SettingField.THEME:
            self.theme = self.theme.cycled(forward=increase)
        elif field is SettingField.DESKTOP_NOTIFICATIONS:
            self.desktop_notifications = not self.desktop_notifications

    def display_value(self, field: SettingField) -> str:
        if field in _DURATION_FIELDS:
            return f"{self.minutes(field)} mins"
        if field is SettingField.THEME:
            return self.theme.value
        return "On" if self.desktop_notifications else "Off"

    def with_overrides(self, *, pomodoro: Optional[int] = None, short_break: Optional[int] = None,
                       long_break: Optional[int] = None) -> "Settings":
        """Return a copy with the given durations (in minutes) replaced."""
        data = settings_to_dict(self)
        if pomodoro is not None:
            data['pomodoro_duration'] = pomodoro
        if short_break is not None:
            data['short_break_duration'] = short_break
        if long_break is not None:
            data['long_break_duration'] = long_break
        return settings_from_dict(data)


def duration_for(mode: Mode, settings: Settings) -> int:
    """Seconds a session of `mode` lasts under `settings`."""
    if mode is Mode.POMODORO:
        return settings.pomodoro_duration
    if mode is Mode.SHORT_BREAK:
        return settings.short_break_duration
    return settings.long_break_duration


# -------------------- (de)serialization --------------------
def settings_to_dict(settings: Settings) -> Dict[str, Any]:
    return {
        'pomodoro_duration': settings.pomodoro_duration // MINUTE,
        'short_break_duration': settings.short_break_duration // MINUTE,
        'long_break_duration': settings.long_break_duration // MINUTE,
        'theme': settings.theme.value,
        'desktop_notifications': settings.desktop_notifications,
    }


def settings_from_dict(raw: Mapping[str, Any]) -> Settings:
    """Build Settings from a persisted mapping; missing keys take defaults."""
    if not isinstance(raw, Mapping):
        raise SettingsError("settings root must be a table")
    defaults = Settings()
    kwargs: Dict[str, Any] = {}
    for field in _DURATION_FIELDS:
        if field.value in raw:
            kwargs[field.value] = _as_minutes(raw[field.value], field.value) * MINUTE
        else:
            kwargs[field.value] = getattr(defaults, field.value)
    theme_raw = raw.get('theme', defaults.theme.value)
    try:
        kwargs['theme'] = ColorTheme(theme_raw)
    except ValueError as error:
        raise SettingsError(f"unknown theme: {theme_raw!r}") from error
    notifications = raw.get('desktop_notifications', defaults.desktop_notifications)
    if not isinstance(notifications, bool):
        raise SettingsError("desktop_notifications must be a boolean")
    kwargs['desktop_notifications'] = notifications
    return Settings(**kwargs)


def _as_minutes(value: Any, field: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise SettingsError(f"{field} must be a whole number of minutes")
    if value < MIN_DURATION_MINUTES:
        raise SettingsError(f"{field} must be at least {MIN_DURATION_MINUTES} minute")
    return value
