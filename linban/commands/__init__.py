"""linban CLI command group initialization."""

from . import board, link, teams
from .common import cli as cli

__all__ = ["board", "cli", "link", "teams"]
