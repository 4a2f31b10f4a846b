"""Small helpers shared by the CLI commands."""

import subprocess
import sys

import click

from ..config import defaults


def log(message, level="INFO", verbose_only=False, verbose=False, file=sys.stdout):
    """
    Log a message with color-coded level prefix.

    Only meant for the command line side: inside the board app use the
    Textual logger so the screen is never written to directly.

    Args:
        message (str): The message to log.
        level (str): The log level (e.g., INFO, WARNING, ERROR).
        verbose_only (bool): Only log if verbose mode is enabled.
        verbose (bool): Whether verbose mode is enabled.
        file (file): The file to write to.
    """
    if verbose_only and not verbose:
        return

    color = defaults.LOG_LEVELS.get(level, "reset")
    prefix = f"[{level}] " if level else ""

    click.secho(f"{prefix}{message}", fg=color.lower(), err=file == sys.stderr)


def colorize(color, text):
    """Colorize text with Click's style function"""
    return click.style(text, fg=color.lower())


def get_pass_key(kind: str, entry: str) -> str | None:
    """Read a secret from ``pass`` or ``passage``."""
    cmd = [kind, "show", entry]
    try:
        return subprocess.check_output(cmd, text=True).strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        click.secho(f"Failed to retrieve secret {entry} with {kind}", fg="red", err=True)
        return None


def truncate(text: str | None, max_length: int) -> str:
    """Cut ``text`` to ``max_length`` characters, ending with an ellipsis."""
    if not text:
        return ""
    if max_length <= 3:
        return text[: max(max_length, 0)]
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."
