"""Input widgets with readline keybindings."""

import re

from textual.binding import Binding
from textual.widgets import Input

from ...api.queries import split_identifier


class ReadlineInput(Input):
    """Input widget with the common emacs/readline keybindings."""

    BINDINGS = [
        Binding("ctrl+a", "cursor_line_start", "Start of line", show=False),
        Binding("ctrl+e", "cursor_line_end", "End of line", show=False),
        Binding("ctrl+f", "cursor_char_right", "Forward char", show=False),
        Binding("ctrl+b", "cursor_char_left", "Backward char", show=False),
        Binding("ctrl+k", "kill_to_end", "Delete to end", show=False),
        Binding("ctrl+u", "kill_to_start", "Delete to start", show=False),
        Binding("ctrl+w", "kill_word_left", "Delete word left", show=False),
    ]

    def action_cursor_line_start(self) -> None:
        self.cursor_position = 0

    def action_cursor_line_end(self) -> None:
        self.cursor_position = len(self.value)

    def action_cursor_char_right(self) -> None:
        self.cursor_position = min(self.cursor_position + 1, len(self.value))

    def action_cursor_char_left(self) -> None:
        self.cursor_position = max(self.cursor_position - 1, 0)

    def action_kill_to_end(self) -> None:
        position = self.cursor_position
        self.value = self.value[:position]
        self.cursor_position = position

    def action_kill_to_start(self) -> None:
        self.value = self.value[self.cursor_position :]
        self.cursor_position = 0

    def action_kill_word_left(self) -> None:
        position = self.cursor_position
        before = self.value[:position]
        match = re.search(r"\S+\s*$", before)
        start = match.start() if match else 0
        self.value = self.value[:start] + self.value[position:]
        self.cursor_position = start


class IdentifierInput(ReadlineInput):
    """Input for a ``TEAM-123`` issue identifier, read back uppercased."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("restrict", r"[A-Za-z0-9_\-]*")
        kwargs.setdefault("placeholder", "e.g. ENG-123")
        super().__init__(*args, **kwargs)

    @property
    def identifier(self) -> str:
        return self.value.strip().upper()

    @property
    def is_identifier(self) -> bool:
        return split_identifier(self.value) is not None
