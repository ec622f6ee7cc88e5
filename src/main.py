"""Main entry point for terminal Pomodoro.

Duration overrides given on the command line are applied to the loaded
settings before the App is built, and persist with them on exit.
"""
import logging
from pathlib import Path
from typing import Optional

import click

from cli import CLI
from storage import Storage, default_config_path, default_state_path

__version__ = "0.1.0"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(log_file: Path, verbose: bool = False) -> None:
    """Log to a file; the terminal belongs to the UI."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.FileHandler(log_file, encoding="utf-8")],
    )


_MINUTES = click.IntRange(min=1)
_FILE = click.Path(dir_okay=False, path_type=Path)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-p", "--pomodoro", type=_MINUTES, help="Pomodoro length in minutes.")
@click.option("-s", "--short-break", type=_MINUTES, help="Short break length in minutes.")
@click.option("-l", "--long-break", type=_MINUTES, help="Long break length in minutes.")
@click.option("--state-file", type=_FILE, help="Where tasks and timer state are kept.")
@click.option("--config-file", type=_FILE, help="Settings file (TOML).")
@click.option("--log-file", type=_FILE, help="Log file (default: next to the state file).")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
@click.version_option(__version__, prog_name="pomodoro")
def main(pomodoro: Optional[int], short_break: Optional[int], long_break: Optional[int],
         state_file: Optional[Path], config_file: Optional[Path], log_file: Optional[Path],
         verbose: bool) -> None:
    """Terminal Pomodoro timer with a task list and statistics."""
    state_path = state_file or default_state_path()
    config_path = config_file or default_config_path()
    setup_logging(log_file or state_path.with_name("pomodoro.log"), verbose)

    settings = Storage.load_settings(config_path).with_overrides(
        pomodoro=pomodoro, short_break=short_break, long_break=long_break,
    )
    app = Storage.load_app(settings, state_path)
    CLI(app, state_path=state_path, config_path=config_path).run()


if __name__ == "__main__":
    main()
