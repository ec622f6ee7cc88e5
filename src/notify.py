"""Side effects for finished sessions: terminal bell, sound, desktop notification.

All helpers are best effort. A missing player or notifier binary is
logged at DEBUG and otherwise ignored.
"""
import logging
import platform
import subprocess
import sys
from typing import Callable, List, Optional, Sequence, TextIO

from app_state import SessionFinished
from models import Mode
from settings import Settings

logger = logging.getLogger(__name__)

IS_MAC = platform.system() == "Darwin"

LINUX_SOUNDS = {
    Mode.POMODORO: "/usr/share/sounds/freedesktop/stereo/complete.oga",
    Mode.SHORT_BREAK: "/usr/share/sounds/freedesktop/stereo/bell.oga",
    Mode.LONG_BREAK: "/usr/share/sounds/freedesktop/stereo/bell.oga",
}
MAC_SOUNDS = {
    Mode.POMODORO: "Glass",
    Mode.SHORT_BREAK: "Blow",
    Mode.LONG_BREAK: "Blow",
}


def notification_text(event: SessionFinished) -> tuple[str, str]:
    return f"{event.finished.label} Finished!", f"Time for your {event.next.label}."


class SessionNotifier:
    def __init__(self, stream: TextIO = sys.stdout,
                 spawn: Optional[Callable[[Sequence[str]], object]] = None):
        self.stream = stream
        self.spawn = spawn or _spawn

    def session_finished(self, event: SessionFinished, settings: Settings) -> None:
        self.ring(event.finished)
        if settings.desktop_notifications:
            summary, body = notification_text(event)
            self.desktop(summary, body)

    def ring(self, finished: Mode) -> None:
        self.stream.write('\a')
        self.stream.flush()
        if IS_MAC:
            self._try([["afplay", f"/System/Library/Sounds/{MAC_SOUNDS[finished]}.aiff"]])
        else:
            sound = LINUX_SOUNDS[finished]
            self._try([
                ["paplay", sound],
                ["canberra-gtk-play", "--file", sound],
            ])

    def desktop(self, summary: str, body: str) -> None:
        if IS_MAC:
            script = f'display notification "{body}" with title "{summary}"'
            self._try([["osascript", "-e", script]])
        else:
            self._try([["notify-send", "--icon=dialog-information", summary, body]])

    def _try(self, commands: List[List[str]]) -> bool:
        for cmd in commands:
            try:
                self.spawn(cmd)
                return True
            except OSError as error:
                logger.debug("%s unavailable: %s", cmd[0], error)
        return False


def _spawn(cmd: Sequence[str]) -> subprocess.Popen:
    return subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
