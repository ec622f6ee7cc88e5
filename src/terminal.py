"""Terminal control: cbreak mode, alternate screen and timed key reads.

read_key() is the only place the driver loop blocks, and it always returns
within `timeout` seconds so the timer keeps ticking without input.
Key names: printable characters as themselves, plus 'up', 'down', 'left',
'right', 'tab', 'enter', 'backspace', 'esc', 'delete'.
"""
import os
import select
import sys
import termios
import tty
from contextlib import contextmanager
from typing import Iterator, Optional, TextIO

ESCAPE_SEQUENCES = {
    '\x1b[A': 'up',
    '\x1b[B': 'down',
    '\x1b[C': 'right',
    '\x1b[D': 'left',
    '\x1bOA': 'up',
    '\x1bOB': 'down',
    '\x1bOC': 'right',
    '\x1bOD': 'left',
    '\x1b[3~': 'delete',
}
CONTROL_KEYS = {
    '\t': 'tab',
    '\r': 'enter',
    '\n': 'enter',
    '\x7f': 'backspace',
    '\x08': 'backspace',
    '\x1b': 'esc',
}


def clear_screen() -> None:
    # ESC[3J (scrollback), ESC[H (home), ESC[2J (screen), ESC[H (home)
    print("\033[3J\033[H\033[2J\033[H", end="", flush=True)


def enter_alt_screen() -> None:
    print("\033[?1049h\033[?25l", end="", flush=True)


def leave_alt_screen() -> None:
    print("\033[?25h\033[?1049l", end="", flush=True)


@contextmanager
def cbreak(stream: TextIO = sys.stdin) -> Iterator[None]:
    """Unbuffered, no-echo input for the duration of the block; Ctrl-C still works."""
    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def decode_key(chunk: str) -> Optional[str]:
    if not chunk:
        return None
    if chunk in ESCAPE_SEQUENCES:
        return ESCAPE_SEQUENCES[chunk]
    if chunk in CONTROL_KEYS:
        return CONTROL_KEYS[chunk]
    if chunk.startswith('\x1b'):
        return None  # unsupported escape sequence
    return chunk[0]


def read_key(timeout: float, stream: TextIO = sys.stdin) -> Optional[str]:
    """Wait up to `timeout` seconds for one key press."""
    fd = stream.fileno()
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout))
    if not ready:
        return None
    chunk = os.read(fd, 32).decode('utf-8', errors='ignore')
    return decode_key(chunk)
