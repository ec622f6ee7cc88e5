"""Color & style helpers.

Decisions:
- One Palette per ColorTheme setting (Default, Dracula, Solarized, Nord).
- Truecolor preferred; falls back to 256-color cube if unsupported.
- Disables automatically when not a TTY unless FORCE_COLOR=1.
- Honors NO_COLOR for complete disable.
"""
from __future__ import annotations
import os, sys
from dataclasses import dataclass

from models import Mode
from settings import ColorTheme

_FORCE = os.environ.get("FORCE_COLOR", "").lower() in {"1", "true", "yes", "on"}
_NO_COLOR = os.environ.get("NO_COLOR") is not None
_ENABLE = (_FORCE or sys.stdout.isatty()) and not _NO_COLOR
_COLORTERM = os.environ.get("COLORTERM", "").lower()
_USE_TRUECOLOR = _ENABLE and any(tok in _COLORTERM for tok in ("truecolor", "24bit"))

def _code(part: str) -> str:
    """Generate ANSI escape code for a given style part."""
    return f"\033[{part}m" if _ENABLE else ''

def _hex_to_rgb(hex_code: str) -> tuple[int,int,int]:
    """Convert a hex color code to an RGB tuple."""
    h = hex_code.lstrip('#')
    return int(h[0:2],16), int(h[2:4],16), int(h[4:6],16)

def _fg_truecolor(r: int, g: int, b: int) -> str:
    return f"\033[38;2;{r};{g};{b}m"

def _fg_256(r: int, g: int, b: int) -> str:
    """Approximate RGB to xterm 256-color cube."""
    def to_6(x: int) -> int:
        return int(round(x / 255 * 5))
    r6, g6, b6 = to_6(r), to_6(g), to_6(b)
    idx = 16 + 36 * r6 + 6 * g6 + b6
    return f"\033[38;5;{idx}m"

def _from_hex(hex_code: str) -> str:
    """Convert a hex color code to an ANSI foreground sequence."""
    if not _ENABLE:
        return ''
    r, g, b = _hex_to_rgb(hex_code)
    if _USE_TRUECOLOR:
        return _fg_truecolor(r, g, b)
    return _fg_256(r, g, b)

RESET = _code('0')
BOLD = _code('1')
DIM = _code('2')
ITALIC = _code('3')


@dataclass(frozen=True)
class Palette:
    """ANSI foreground sequences for one theme."""
    name: str
    pomodoro: str
    short_break: str
    long_break: str
    accent: str
    base: str
    running: str
    paused: str
    help_text: str

    def mode_color(self, mode: Mode) -> str:
        if mode is Mode.POMODORO:
            return self.pomodoro
        if mode is Mode.SHORT_BREAK:
            return self.short_break
        return self.long_break


def _palette(name: str, *, pomodoro: str, short_break: str, long_break: str, accent: str,
             base: str, running: str, paused: str, help_text: str) -> Palette:
    return Palette(
        name=name,
        pomodoro=_from_hex(pomodoro),
        short_break=_from_hex(short_break),
        long_break=_from_hex(long_break),
        accent=_from_hex(accent),
        base=_from_hex(base),
        running=_from_hex(running),
        paused=_from_hex(paused),
        help_text=_from_hex(help_text),
    )


PALETTES = {
    ColorTheme.DEFAULT: _palette(
        "Default", pomodoro='#FF6B6B', short_break='#7CFC8A', long_break='#6CA6FF',
        accent='#FF77FF', base='#C0C0C0', running='#2ECC40', paused='#FFDC00',
        help_text='#707070'),
    ColorTheme.DRACULA: _palette(
        "Dracula", pomodoro='#FF5555', short_break='#50FA7B', long_break='#BD93F9',
        accent='#FF79C6', base='#F8F8F2', running='#50FA7B', paused='#FFB86C',
        help_text='#6272A4'),
    ColorTheme.SOLARIZED: _palette(
        "Solarized", pomodoro='#DC322F', short_break='#859900', long_break='#268BD2',
        accent='#D33682', base='#839496', running='#859900', paused='#B58900',
        help_text='#586E75'),
    ColorTheme.NORD: _palette(
        "Nord", pomodoro='#BF616A', short_break='#A3BE8C', long_break='#81A1C1',
        accent='#B48EAD', base='#D8DEE9', running='#A3BE8C', paused='#EBCB8B',
        help_text='#4C566A'),
}


def palette_for(theme: ColorTheme) -> Palette:
    return PALETTES[theme]


def color(text: str, *styles: str) -> str:
    """Apply ANSI styles to a given text."""
    if not _ENABLE:
        return text
    return ''.join(styles) + text + RESET

__all__ = [
    'color', 'RESET', 'BOLD', 'DIM', 'ITALIC', 'Palette', 'PALETTES', 'palette_for',
]
