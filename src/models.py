"""Data models for the terminal Pomodoro application.

Exposes the Task dataclass and the small value enums shared by the state
machine, the renderer and persistence. Enum values double as persisted
keys, so they are kept short and stable.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Mode(str, Enum):
    POMODORO = "pomodoro"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def label(self) -> str:
        return MODE_LABELS[self]


MODE_LABELS = {
    Mode.POMODORO: "Pomodoro",
    Mode.SHORT_BREAK: "Short Break",
    Mode.LONG_BREAK: "Long Break",
}


class TimerState(str, Enum):
    PAUSED = "paused"
    RUNNING = "running"


class View(str, Enum):
    TIMER = "timer"
    TASK_LIST = "task_list"
    STATISTICS = "statistics"
    SETTINGS = "settings"
    TASK_DETAILS = "task_details"


class InputMode(str, Enum):
    NORMAL = "normal"
    EDITING = "editing"


@dataclass
class Task:
    """A single unit of work tracked against Pomodoro sessions.

    Fields:
        name: Display name, never empty (stripped on creation).
        completed: Whether the task is done.
        pomodoro_count: Pomodoros finished while this task was active.
        time_focused: Seconds accrued while active and the timer ran.
        created_at: ISO timestamp set once at construction.
        completed_at: ISO timestamp when completed (None otherwise).
    """
    name: str
    completed: bool = False
    pomodoro_count: int = 0
    time_focused: float = 0.0
    created_at: Optional[str] = None
    completed_at: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = datetime.now().isoformat()

    def mark_completed(self) -> None:
        self.completed = True
        self.completed_at = datetime.now().isoformat()

    def mark_uncompleted(self) -> None:
        self.completed = False
        self.completed_at = None

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"Task(name={self.name}, completed={self.completed}, pomodoros={self.pomodoro_count})"
