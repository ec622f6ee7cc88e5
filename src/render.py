"""Rendering: turns App state into lines of (colored) text, one view at a time.

Nothing here mutates the App. The CLI clears the screen and prints the
lines returned by render() every frame.
"""
from datetime import datetime
from typing import Callable, Dict, List, Optional
import re, shutil

from app_state import App
from models import InputMode, Task, View
from settings import SETTING_FIELDS, SETTING_LABELS
from theme import BOLD, DIM, ITALIC, Palette, color, palette_for

ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")
WIDE_LAYOUT = 80
BAR_MAX = 50
NAME_COL = 40

DIGITS: Dict[str, List[str]] = {
    '0': ["███", "█ █", "█ █", "█ █", "███"],
    '1': [" █ ", "██ ", " █ ", " █ ", "███"],
    '2': ["███", "  █", "███", "█  ", "███"],
    '3': ["███", "  █", "███", "  █", "███"],
    '4': ["█ █", "█ █", "███", "  █", "  █"],
    '5': ["███", "█  ", "███", "  █", "███"],
    '6': ["███", "█  ", "███", "█ █", "███"],
    '7': ["███", "  █", "  █", "  █", "  █"],
    '8': ["███", "█ █", "███", "█ █", "███"],
    '9': ["███", "█ █", "███", "  █", "███"],
    ':': ["   ", " █ ", "   ", " █ ", "   "],
}
DIGIT_ROWS = 5

HELP = {
    View.TIMER: (" [Tab] Tasks | [o] Options | [Space] Start/Pause | [r] Reset | [p/s/l] Change Mode | [q] Quit ",
                 " [Tab] [o] [Spc] [r] [p/s/l] [q] "),
    View.TASK_LIST: (" [Tab] Stats | [Space] Start | [j/k] Navigate | [J/K] Move | [n] New | [Enter] Complete | [q] Quit ",
                     " [Tab] [Spc] [j/k] [J/K] [n] [Ent] [q] "),
    View.STATISTICS: (" [Tab] Timer | [j/k] Navigate | [Enter] Details | [u] Restore | [d] Delete | [q] Quit ",
                      " [Tab] [j/k] [Ent] [u] [d] [q] "),
    View.SETTINGS: (" [j/k] Navigate | [h/l] Change | [Tab] Back ",
                    " [j/k] [h/l] [Tab] "),
    View.TASK_DETAILS: (" [Esc/Tab] Back | [q] Quit ",
                        " [Esc] [q] "),
}
EDITING_HELP = " [Enter] Submit | [Esc] Cancel "


# -------------------- formatting helpers --------------------
def visible_len(s: str) -> int:
    return len(ANSI_RE.sub('', s))


def center(line: str, width: int) -> str:
    pad = (width - visible_len(line)) // 2
    return ' ' * pad + line if pad > 0 else line


def clock_text(seconds: float) -> str:
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"


def format_focused(seconds: float) -> str:
    total = max(0, int(seconds))
    return f"{total // 3600}h {(total % 3600) // 60}m"


def format_timestamp(value: Optional[str]) -> str:
    if not value:
        return '-'
    try:
        return datetime.fromisoformat(value).strftime('%Y-%m-%d %H:%M')
    except ValueError:
        return value.split('T')[0]


def big_text(text: str) -> List[str]:
    rows = [''] * DIGIT_ROWS
    for ch in text:
        art = DIGITS.get(ch, ['   '] * DIGIT_ROWS)
        for i in range(DIGIT_ROWS):
            rows[i] += art[i] + ' '
    return [r.rstrip() for r in rows]


def progress_bar(ratio: float, width: int) -> str:
    ratio = min(1.0, max(0.0, ratio))
    filled = int(round(ratio * width))
    return '█' * filled + '·' * (width - filled)


def _help_line(app: App, palette: Palette, width: int) -> str:
    if app.input_mode is InputMode.EDITING:
        text = EDITING_HELP
    else:
        wide, narrow = HELP[app.current_view]
        text = wide if width > WIDE_LAYOUT else narrow
    return center(color(text, palette.help_text), width)


def _title(text: str, palette: Palette, width: int) -> List[str]:
    return [center(color(text, palette.accent, BOLD), width), '']


# -------------------- views --------------------
def _timer_view(app: App, palette: Palette, width: int) -> List[str]:
    accent = palette.mode_color(app.mode)
    lines = _title(" Pomodoro Timer ", palette, width)
    lines.append(center(color(app.mode.label, accent, BOLD), width))
    lines.append('')
    lines.extend(center(color(row, accent), width) for row in big_text(clock_text(app.time_remaining)))
    lines.append('')
    task = app.active_task
    task_name = task.name if task is not None else "No active task"
    lines.append(center(color(task_name, accent, ITALIC), width))
    if app.is_running:
        lines.append(center(color("▶ Running", palette.running), width))
    else:
        lines.append(center(color("⏸ Paused", palette.paused), width))
    duration = app.session_duration
    ratio = (duration - app.time_remaining) / duration if duration > 0 else 1.0
    bar_width = max(10, min(BAR_MAX, width - 8))
    lines.append(center(color(progress_bar(ratio, bar_width), accent), width))
    lines.append(center(color(f"Total Sessions: {app.sessions_completed_total}", palette.help_text), width))
    return lines


def _task_list_view(app: App, palette: Palette, width: int) -> List[str]:
    lines = _title("Tasks", palette, width)
    lines.append(color("Active Tasks", palette.accent, BOLD))
    indices = app.uncompleted_indices()
    if not indices:
        lines.append(color("  (no open tasks, press n to add one)", DIM))
    for i in indices:
        task = app.tasks[i]
        is_active = i == app.active_task_index
        marker = '>> ' if is_active else '   '
        running = '▶ ' if is_active and app.is_running else '  '
        text = f"{marker}[ ] {running}{task.name}"
        if is_active and app.is_running:
            lines.append(color(text, palette.pomodoro, BOLD))
        elif is_active:
            lines.append(color(text, palette.base, BOLD))
        else:
            lines.append(color(text, palette.base))
    lines.append('')
    if app.input_mode is InputMode.EDITING:
        lines.append(color(f"New Task: {app.current_input}_", palette.paused))
    else:
        lines.append(color("New Task:", DIM))
    return lines


def _statistics_view(app: App, palette: Palette, width: int) -> List[str]:
    lines = _title("Statistics", palette, width)
    lines.append(center(f"Total Pomodoros: {app.sessions_completed_total}", width))
    lines.append(center(f"Total Time Focused: {format_focused(app.total_time_focused)}", width))
    lines.append('')
    lines.append(color("Completed & Archived Tasks", palette.accent, BOLD))
    completed = app.completed_tasks()
    if not completed:
        lines.append(color("  (nothing completed yet)", DIM))
    for pos, task in enumerate(completed):
        selected = pos == app.completed_selection_index
        marker = '>> ' if selected else '   '
        text = f"{marker}{task.name:<{NAME_COL}} | {task.pomodoro_count} pomodoros"
        lines.append(color(text, palette.base, BOLD) if selected else color(text, palette.base))
    return lines


def _settings_view(app: App, palette: Palette, width: int) -> List[str]:
    lines = _title(" ⚙ SETTINGS ", palette, width)
    label_width = max(len(label) for label in SETTING_LABELS.values())
    for pos, field in enumerate(SETTING_FIELDS):
        selected = pos == app.settings_selection
        marker = '>> ' if selected else '   '
        text = f"{marker}{SETTING_LABELS[field]:<{label_width}}   < {app.settings.display_value(field)} >"
        lines.append(color(text, palette.accent, BOLD) if selected else color(text, palette.base))
    return lines


def _task_details_view(app: App, palette: Palette, width: int) -> List[str]:
    lines = _title("Task Details", palette, width)
    task: Optional[Task] = app.selected_completed_task
    if task is None:
        lines.append(color("  (no task selected)", DIM))
        return lines
    rows = [
        ("Name", task.name),
        ("Status", "Completed" if task.completed else "Open"),
        ("Pomodoros", str(task.pomodoro_count)),
        ("Time Focused", format_focused(task.time_focused)),
        ("Created", format_timestamp(task.created_at)),
        ("Completed", format_timestamp(task.completed_at)),
    ]
    for label, value in rows:
        lines.append(color(f"  {label:<14}", palette.help_text) + color(value, palette.base))
    return lines


VIEW_RENDERERS: Dict[View, Callable[[App, Palette, int], List[str]]] = {
    View.TIMER: _timer_view,
    View.TASK_LIST: _task_list_view,
    View.STATISTICS: _statistics_view,
    View.SETTINGS: _settings_view,
    View.TASK_DETAILS: _task_details_view,
}


def render(app: App, width: Optional[int] = None) -> List[str]:
    """Lines for the current view, help footer included."""
    if width is None:
        width = shutil.get_terminal_size((100, 30)).columns
    palette = palette_for(app.settings.theme)
    lines = VIEW_RENDERERS[app.current_view](app, palette, width)
    lines.append('')
    lines.append(_help_line(app, palette, width))
    return lines
