"""Textual components of the board."""

from .app import BoardApp, BoardOptions, BoardStartupError, run_board, show_board
from .base import BaseModalScreen, ModeScreen
from .board import BoardView, IssueCard
from .detail import DetailView
from .graph import GraphCanvas, RelationshipGraphView
from .screens import (
    ChoiceScreen,
    CreateIssueScreen,
    FilterScreen,
    HelpScreen,
    RelationPromptScreen,
    TeamSelectScreen,
)
from .widgets import IdentifierInput, ReadlineInput

__all__ = [
    "BaseModalScreen",
    "BoardApp",
    "BoardOptions",
    "BoardStartupError",
    "BoardView",
    "ChoiceScreen",
    "CreateIssueScreen",
    "DetailView",
    "FilterScreen",
    "GraphCanvas",
    "HelpScreen",
    "IdentifierInput",
    "IssueCard",
    "ModeScreen",
    "ReadlineInput",
    "RelationPromptScreen",
    "RelationshipGraphView",
    "TeamSelectScreen",
    "run_board",
    "show_board",
]
