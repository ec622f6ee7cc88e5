"""Persistence helpers: app state snapshot (JSON) and settings (TOML).

Loading is best effort: a missing, unreadable or malformed file yields the
default App / Settings and a logged warning, never an exception. Saving
happens once, on exit.

Locations (first match wins):
    state:    POMODORO_STATE_FILE, $XDG_DATA_HOME/terminal-pomodoro/state.json
    settings: POMODORO_CONFIG_FILE, $XDG_CONFIG_HOME/terminal-pomodoro/config.toml
"""
import json
import logging
import os
import tomllib
from pathlib import Path
from typing import Optional

import tomli_w

from app_state import App, SnapshotError
from settings import Settings, SettingsError, settings_from_dict, settings_to_dict

logger = logging.getLogger(__name__)

APP_DIR_NAME = 'terminal-pomodoro'
STATE_FILE_NAME = 'state.json'
CONFIG_FILE_NAME = 'config.toml'


def _xdg_dir(env_name: str, fallback: str) -> Path:
    raw = os.environ.get(env_name, '').strip()
    base = Path(raw).expanduser() if raw else Path.home() / fallback
    return base / APP_DIR_NAME


def default_state_path() -> Path:
    override = os.environ.get('POMODORO_STATE_FILE', '').strip()
    if override:
        return Path(override).expanduser()
    return _xdg_dir('XDG_DATA_HOME', '.local/share') / STATE_FILE_NAME


def default_config_path() -> Path:
    override = os.environ.get('POMODORO_CONFIG_FILE', '').strip()
    if override:
        return Path(override).expanduser()
    return _xdg_dir('XDG_CONFIG_HOME', '.config') / CONFIG_FILE_NAME


class Storage:
    @staticmethod
    def load_settings(path: Optional[Path] = None) -> Settings:
        """Load settings TOML; missing or invalid file -> defaults."""
        path = path or default_config_path()
        if not path.exists():
            return Settings()
        try:
            with open(path, 'rb') as f:
                raw = tomllib.load(f)
            return settings_from_dict(raw)
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError, SettingsError) as error:
            logger.warning("Ignoring settings file %s: %s", path, error)
            return Settings()

    @staticmethod
    def save_settings(settings: Settings, path: Optional[Path] = None) -> bool:
        path = path or default_config_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'wb') as f:
                tomli_w.dump(settings_to_dict(settings), f)
        except OSError as error:
            logger.error("Could not save settings to %s: %s", path, error)
            return False
        return True

    @staticmethod
    def load_app(settings: Settings, path: Optional[Path] = None) -> App:
        """Resume the App from its snapshot; missing or corrupt file -> fresh App."""
        path = path or default_state_path()
        if not path.exists():
            return App(settings)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            app = App.from_snapshot(data, settings)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, SnapshotError) as error:
            logger.warning("Starting fresh, could not load state %s: %s", path, error)
            return App(settings)
        logger.info("Loaded %d tasks from %s", len(app.tasks), path)
        return app

    @staticmethod
    def save_app(app: App, path: Optional[Path] = None) -> bool:
        """Persist the snapshot (pretty-printed), replacing the old file only once fully written."""
        path = path or default_state_path()
        tmp_path = path.with_name(path.name + '.tmp')
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(app.to_snapshot(), f, indent=4)
            os.replace(tmp_path, path)
        except OSError as error:
            logger.error("Could not save state to %s: %s", path, error)
            if tmp_path.exists():
                tmp_path.unlink()
            return False
        return True
