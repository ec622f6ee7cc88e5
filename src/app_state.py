"""Application state machine: timer engine, task registry and selection.

The App is mutated only by the single driver loop (see cli.py). Every
public operation either applies fully or is a silent no-op; nothing here
raises for bad user input, so callers can assert "state unchanged" instead
of catching errors.

Selection policy: after any mutation that can invalidate the active task
(completion, restore, deletion, loading a snapshot) the active index is
re-derived at once. A completed active task hands over to the next
uncompleted task in list order (wrapping), or to None when none is left.

Time accrual policy: a running tick adds its full elapsed time to the
active task, including the tick that crosses a session boundary.
"""
from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from models import InputMode, Mode, Task, TimerState, View
from settings import SETTING_FIELDS, SettingField, Settings, duration_for

logger = logging.getLogger(__name__)

SESSIONS_PER_LONG_BREAK = 4
# Tab order; Settings and TaskDetails are overlays reached by other keys.
VIEW_CYCLE = (View.TIMER, View.TASK_LIST, View.STATISTICS)


class SnapshotError(ValueError):
    """Raised when a persisted snapshot is structurally unusable."""


@dataclass(frozen=True)
class SessionFinished:
    """Returned by App.tick when a session ran out."""
    finished: Mode
    next: Mode


class App:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings: Settings = settings or Settings()
        self.mode: Mode = Mode.POMODORO
        self.state: TimerState = TimerState.PAUSED
        self.time_remaining: float = float(duration_for(self.mode, self.settings))
        self.sessions_completed_total: int = 0
        self.tasks: List[Task] = []
        self.active_task_index: Optional[int] = None
        self.completed_selection_index: Optional[int] = None
        self.current_view: View = View.TASK_LIST
        self.previous_view: View = View.TASK_LIST
        self.settings_selection: int = 0
        # transient, never persisted
        self.input_mode: InputMode = InputMode.NORMAL
        self.current_input: str = ''
        self.should_quit: bool = False

    # -------------------- queries --------------------
    @property
    def active_task(self) -> Optional[Task]:
        if self.active_task_index is None:
            return None
        if 0 <= self.active_task_index < len(self.tasks):
            return self.tasks[self.active_task_index]
        return None

    @property
    def is_running(self) -> bool:
        return self.state is TimerState.RUNNING

    @property
    def total_time_focused(self) -> float:
        return sum(t.time_focused for t in self.tasks)

    @property
    def session_duration(self) -> int:
        return duration_for(self.mode, self.settings)

    def uncompleted_indices(self) -> List[int]:
        return [i for i, t in enumerate(self.tasks) if not t.completed]

    def completed_indices(self) -> List[int]:
        return [i for i, t in enumerate(self.tasks) if t.completed]

    def completed_tasks(self) -> List[Task]:
        return [t for t in self.tasks if t.completed]

    @property
    def selected_completed_task(self) -> Optional[Task]:
        completed = self.completed_tasks()
        idx = self.completed_selection_index
        if idx is None or not 0 <= idx < len(completed):
            return None
        return completed[idx]

    def _has_runnable_task(self) -> bool:
        task = self.active_task
        return task is not None and not task.completed

    # -------------------- timer engine --------------------
    def toggle(self) -> None:
        """Start/pause the countdown; ignored without an uncompleted active task."""
        if not self._has_runnable_task():
            return
        if self.state is TimerState.PAUSED:
            self.state = TimerState.RUNNING
        else:
            self.state = TimerState.PAUSED

    def reset(self) -> None:
        self.state = TimerState.PAUSED
        self.time_remaining = float(self.session_duration)

    def set_mode(self, mode: Mode) -> None:
        self.mode = mode
        self.reset()

    def start_active_task(self) -> None:
        if not self._has_runnable_task():
            return
        self.state = TimerState.RUNNING
        self.current_view = View.TIMER

    def tick(self, elapsed: float) -> Optional[SessionFinished]:
        """Advance a running countdown by `elapsed` seconds.

        Returns a SessionFinished event when this tick used up the session;
        the caller owns any sound/notification side effect.
        """
        if self.state is not TimerState.RUNNING:
            return None
        elapsed = max(0.0, float(elapsed))
        task = self.active_task
        if task is not None:
            task.time_focused += elapsed
        if elapsed < self.time_remaining:
            self.time_remaining -= elapsed
            return None
        self.time_remaining = 0.0
        finished = self.advance_mode()
        return SessionFinished(finished=finished, next=self.mode)

    def advance_mode(self) -> Mode:
        """Move to the next session in the cycle; returns the mode that ended."""
        finished = self.mode
        if finished is Mode.POMODORO:
            self.sessions_completed_total += 1
            task = self.active_task
            if task is not None:
                task.pomodoro_count += 1
            if self.sessions_completed_total % SESSIONS_PER_LONG_BREAK == 0:
                self.mode = Mode.LONG_BREAK
            else:
                self.mode = Mode.SHORT_BREAK
        else:
            self.mode = Mode.POMODORO
        self.reset()
        if self._has_runnable_task():
            self.state = TimerState.RUNNING
        logger.info(
            "%s finished; next %s (sessions completed: %d)",
            finished.label, self.mode.label, self.sessions_completed_total,
        )
        return finished

    # -------------------- task registry --------------------
    def add_task(self, name: str) -> None:
        name = name.strip()
        if not name:
            return
        self.tasks.append(Task(name=name))
        if len(self.tasks) == 1:
            self.active_task_index = 0
        logger.debug("Task added: %s", name)

    def complete_toggle(self, index: Optional[int] = None) -> None:
        """Flip completion of the task at `index` (default: the active task)."""
        if index is None:
            index = self.active_task_index
        if index is None or not 0 <= index < len(self.tasks):
            return
        task = self.tasks[index]
        if task.completed:
            task.mark_uncompleted()
            logger.debug("Task restored: %s", task.name)
        else:
            task.mark_completed()
            self.reset()
            logger.info("Task completed: %s (%d pomodoros)", task.name, task.pomodoro_count)
        self._revalidate_selection()

    def next_active(self) -> None:
        self._step_active(1)

    def previous_active(self) -> None:
        self._step_active(-1)

    def _step_active(self, step: int) -> None:
        candidates = self.uncompleted_indices()
        if not candidates:
            self.active_task_index = None
            return
        if self.active_task_index not in candidates:
            self.active_task_index = candidates[0]
            return
        pos = candidates.index(self.active_task_index)
        self.active_task_index = candidates[(pos + step) % len(candidates)]

    def move_up(self, index: Optional[int] = None) -> None:
        if index is None:
            index = self.active_task_index
        if index is None or not 0 < index < len(self.tasks):
            return
        self._swap(index, index - 1)

    def move_down(self, index: Optional[int] = None) -> None:
        if index is None:
            index = self.active_task_index
        if index is None or not 0 <= index < len(self.tasks) - 1:
            return
        self._swap(index, index + 1)

    def _swap(self, a: int, b: int) -> None:
        self.tasks[a], self.tasks[b] = self.tasks[b], self.tasks[a]
        if self.active_task_index == a:
            self.active_task_index = b
        elif self.active_task_index == b:
            self.active_task_index = a

    def delete_completed(self, selected_index: Optional[int] = None) -> None:
        """Delete the task at `selected_index` of the completed view (default: cursor)."""
        if selected_index is None:
            selected_index = self.completed_selection_index
        if selected_index is None:
            return
        completed = self.completed_indices()
        if not 0 <= selected_index < len(completed):
            return
        removed_at = completed[selected_index]
        removed = self.tasks.pop(removed_at)
        if self.active_task_index is not None and self.active_task_index > removed_at:
            self.active_task_index -= 1
        self.completed_selection_index = None
        logger.debug("Completed task deleted: %s", removed.name)

    def restore_completed(self) -> None:
        """Mark the task under the completed cursor as not done."""
        completed = self.completed_indices()
        idx = self.completed_selection_index
        if idx is None or not 0 <= idx < len(completed):
            return
        self.complete_toggle(completed[idx])

    def next_completed(self) -> None:
        count = len(self.completed_indices())
        if count == 0:
            return
        if self.completed_selection_index is None:
            self.completed_selection_index = 0
        else:
            self.completed_selection_index = (self.completed_selection_index + 1) % count

    def previous_completed(self) -> None:
        count = len(self.completed_indices())
        if count == 0:
            return
        if self.completed_selection_index in (None, 0):
            self.completed_selection_index = count - 1
        else:
            self.completed_selection_index -= 1

    def _revalidate_selection(self) -> None:
        """Re-derive active index and completed cursor after task mutations."""
        idx = self.active_task_index
        if idx is not None and not 0 <= idx < len(self.tasks):
            idx = None
            self.active_task_index = None
        if idx is not None and self.tasks[idx].completed:
            after = [i for i in self.uncompleted_indices() if i > idx]
            before = [i for i in self.uncompleted_indices() if i < idx]
            following = after + before
            self.active_task_index = following[0] if following else None
        count = len(self.completed_indices())
        cursor = self.completed_selection_index
        if count == 0:
            self.completed_selection_index = None
        elif cursor is not None and not 0 <= cursor < count:
            self.completed_selection_index = count - 1

    # -------------------- settings --------------------
    @property
    def selected_setting(self) -> SettingField:
        return SETTING_FIELDS[self.settings_selection % len(SETTING_FIELDS)]

    def next_setting(self) -> None:
        self.settings_selection = (self.settings_selection + 1) % len(SETTING_FIELDS)

    def previous_setting(self) -> None:
        self.settings_selection = (self.settings_selection - 1) % len(SETTING_FIELDS)

    def modify_setting(self, field: Optional[SettingField] = None, increase: bool = True) -> None:
        """Adjust one setting; a paused countdown picks up the new duration at once."""
        if field is None:
            field = self.selected_setting
        self.settings.adjust(field, increase)
        logger.debug("Setting %s -> %s", field.value, self.settings.display_value(field))
        if self.state is TimerState.PAUSED:
            self.reset()

    # -------------------- views & text input --------------------
    def next_view(self) -> None:
        if self.current_view in VIEW_CYCLE:
            pos = VIEW_CYCLE.index(self.current_view)
            self.current_view = VIEW_CYCLE[(pos + 1) % len(VIEW_CYCLE)]
        else:
            self.close_overlay()

    def open_settings(self) -> None:
        if self.current_view is View.SETTINGS:
            return
        self.previous_view = self.current_view
        self.current_view = View.SETTINGS

    def open_task_details(self) -> None:
        if self.selected_completed_task is None:
            return
        self.previous_view = self.current_view
        self.current_view = View.TASK_DETAILS

    def close_overlay(self) -> None:
        if self.current_view not in (View.SETTINGS, View.TASK_DETAILS):
            return
        target = self.previous_view
        if target in (View.SETTINGS, View.TASK_DETAILS):
            target = View.TIMER
        self.current_view = target

    def start_editing(self) -> None:
        self.input_mode = InputMode.EDITING

    def input_char(self, ch: str) -> None:
        if self.input_mode is InputMode.EDITING:
            self.current_input += ch

    def input_backspace(self) -> None:
        self.current_input = self.current_input[:-1]

    def cancel_input(self) -> None:
        self.input_mode = InputMode.NORMAL
        self.current_input = ''

    def submit_input(self) -> None:
        self.add_task(self.current_input)
        self.cancel_input()

    def quit(self) -> None:
        self.should_quit = True

    # -------------------- snapshot --------------------
    def to_snapshot(self) -> Dict[str, Any]:
        return {
            'mode': self.mode.value,
            'state': self.state.value,
            'time_remaining': self.time_remaining,
            'sessions_completed_total': self.sessions_completed_total,
            'tasks': [
                {
                    'name': t.name,
                    'completed': t.completed,
                    'pomodoro_count': t.pomodoro_count,
                    'time_focused': t.time_focused,
                    'created_at': t.created_at,
                    'completed_at': t.completed_at,
                }
                for t in self.tasks
            ],
            'active_task_index': self.active_task_index,
            'completed_selection_index': self.completed_selection_index,
            'current_view': self.current_view.value,
            'settings_selection': self.settings_selection,
        }

    @classmethod
    def from_snapshot(cls, data: Mapping[str, Any], settings: Optional[Settings] = None) -> "App":
        """Rebuild an App from to_snapshot() output.

        The timer always comes back paused. Missing keys take defaults;
        wrongly typed values raise SnapshotError.
        """
        if not isinstance(data, Mapping):
            raise SnapshotError("snapshot root must be an object")
        app = cls(settings)
        try:
            app.mode = Mode(data.get('mode', Mode.POMODORO.value))
            app.current_view = View(data.get('current_view', View.TASK_LIST.value))
        except ValueError as error:
            raise SnapshotError(str(error)) from error
        if app.current_view in (View.SETTINGS, View.TASK_DETAILS):
            app.current_view = View.TIMER
        app.previous_view = app.current_view
        app.sessions_completed_total = _non_negative_int(data, 'sessions_completed_total', 0)
        app.settings_selection = _non_negative_int(data, 'settings_selection', 0) % len(SETTING_FIELDS)
        raw_tasks = data.get('tasks', [])
        if not isinstance(raw_tasks, list):
            raise SnapshotError("tasks must be a list")
        app.tasks = [_task_from_dict(raw) for raw in raw_tasks]

        duration = float(app.session_duration)
        remaining = _finite_number(data, 'time_remaining', duration)
        app.time_remaining = min(max(0.0, remaining), duration)
        app.state = TimerState.PAUSED

        app.active_task_index = _optional_index(data, 'active_task_index')
        app.completed_selection_index = _optional_index(data, 'completed_selection_index')
        app._revalidate_selection()
        return app


def _non_negative_int(data: Mapping[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise SnapshotError(f"{key} must be a non-negative integer")
    return value


def _optional_index(data: Mapping[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise SnapshotError(f"{key} must be an integer or null")
    return value if value >= 0 else None


def _finite_number(data: Mapping[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise SnapshotError(f"{key} must be a finite number")
    return float(value)


def _timestamp(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise SnapshotError(f"{key} must be an ISO timestamp string or null")
    return value


def _task_from_dict(raw: Any) -> Task:
    if not isinstance(raw, Mapping):
        raise SnapshotError("task entries must be objects")
    name = raw.get('name')
    if not isinstance(name, str) or not name.strip():
        raise SnapshotError("task name must be a non-empty string")
    completed = raw.get('completed', False)
    if not isinstance(completed, bool):
        raise SnapshotError("completed must be true or false")
    task = Task(
        name=name,
        completed=completed,
        pomodoro_count=_non_negative_int(raw, 'pomodoro_count', 0),
        time_focused=max(0.0, _finite_number(raw, 'time_focused', 0.0)),
        created_at=_timestamp(raw, 'created_at'),
        completed_at=_timestamp(raw, 'completed_at') if completed else None,
    )
    if task.completed and not task.completed_at:
        task.completed_at = task.created_at
    return task
