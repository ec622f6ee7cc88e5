"""Interactive driver loop: draw, wait for a key (bounded), dispatch, tick.

Each view has its own key table; text entry (InputMode.EDITING) captures
every key until Enter or Esc. State and settings are saved once, on quit
or Ctrl-C.
"""
import logging
import os
import time
from pathlib import Path
from typing import Callable, Dict, Optional

from app_state import App
from models import InputMode, Mode, View
from notify import SessionNotifier
from render import render
from storage import Storage
import terminal

logger = logging.getLogger(__name__)

TICK_RATE = 0.25  # seconds

KeyTable = Dict[str, Callable[[App], None]]

GLOBAL_KEYS: KeyTable = {
    'o': App.open_settings,
    'q': App.quit,
}

VIEW_KEYS: Dict[View, KeyTable] = {
    View.TIMER: {
        ' ': App.toggle,
        'r': App.reset,
        'p': lambda app: app.set_mode(Mode.POMODORO),
        's': lambda app: app.set_mode(Mode.SHORT_BREAK),
        'l': lambda app: app.set_mode(Mode.LONG_BREAK),
        'tab': App.next_view,
    },
    View.TASK_LIST: {
        'tab': App.next_view,
        'n': App.start_editing,
        'j': App.next_active,
        'down': App.next_active,
        'k': App.previous_active,
        'up': App.previous_active,
        'J': App.move_down,
        'K': App.move_up,
        'enter': App.complete_toggle,
        ' ': App.start_active_task,
    },
    View.STATISTICS: {
        'tab': App.next_view,
        'j': App.next_completed,
        'down': App.next_completed,
        'k': App.previous_completed,
        'up': App.previous_completed,
        'd': App.delete_completed,
        'delete': App.delete_completed,
        'u': App.restore_completed,
        'enter': App.open_task_details,
    },
    View.SETTINGS: {
        'tab': App.close_overlay,
        'esc': App.close_overlay,
        'k': App.previous_setting,
        'up': App.previous_setting,
        'j': App.next_setting,
        'down': App.next_setting,
        'h': lambda app: app.modify_setting(increase=False),
        'left': lambda app: app.modify_setting(increase=False),
        'l': lambda app: app.modify_setting(increase=True),
        'right': lambda app: app.modify_setting(increase=True),
    },
    View.TASK_DETAILS: {
        'tab': App.close_overlay,
        'esc': App.close_overlay,
    },
}

EDITING_KEYS: KeyTable = {
    'enter': App.submit_input,
    'backspace': App.input_backspace,
    'esc': App.cancel_input,
}


def _truthy_env(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


def handle_key(app: App, key: str) -> None:
    """Apply one key press to the app; unknown keys are ignored."""
    if app.input_mode is InputMode.EDITING:
        action = EDITING_KEYS.get(key)
        if action is not None:
            action(app)
        elif len(key) == 1 and key.isprintable():
            app.input_char(key)
        return
    action = GLOBAL_KEYS.get(key) or VIEW_KEYS[app.current_view].get(key)
    if action is not None:
        action(app)


class CLI:
    def __init__(self, app: App, *, state_path: Optional[Path] = None,
                 config_path: Optional[Path] = None,
                 notifier: Optional[SessionNotifier] = None):
        self.app: App = app
        self.state_path = state_path
        self.config_path = config_path
        self.notifier = notifier or SessionNotifier()
        # Alt screen default ON; disable with POMODORO_ALT_SCREEN=0 (or false/no/off)
        self.alt_screen: bool = _truthy_env(os.getenv("POMODORO_ALT_SCREEN"), True)

    def run(self) -> None:
        """Main loop until the user quits; always saves on the way out."""
        exit_message: Optional[str] = None
        if self.alt_screen:
            terminal.enter_alt_screen()
        try:
            with terminal.cbreak():
                self._loop()
            exit_message = "Goodbye."
        except KeyboardInterrupt:
            exit_message = "Interrupted. Goodbye."
        finally:
            self.save()
            if self.alt_screen:
                terminal.leave_alt_screen()
            if exit_message:
                print(exit_message)

    def _loop(self) -> None:
        last_tick = time.monotonic()
        while not self.app.should_quit:
            self._draw()
            timeout = TICK_RATE - (time.monotonic() - last_tick)
            key = terminal.read_key(timeout)
            if key is not None:
                handle_key(self.app, key)
            now = time.monotonic()
            if now - last_tick >= TICK_RATE:
                self.advance(now - last_tick)
                last_tick = now

    def advance(self, elapsed: float) -> None:
        event = self.app.tick(elapsed)
        if event is not None:
            self.notifier.session_finished(event, self.app.settings)

    def _draw(self) -> None:
        terminal.clear_screen()
        print('\n'.join(render(self.app)), end='', flush=True)

    def save(self) -> None:
        Storage.save_app(self.app, self.state_path)
        Storage.save_settings(self.app.settings, self.config_path)
        logger.info("State saved (%d tasks)", len(self.app.tasks))
