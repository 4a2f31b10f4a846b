"""Base classes for the board's modal screens."""

from textual.screen import ModalScreen


class BaseModalScreen(ModalScreen):
    """Modal screen opened on top of the board."""

    def __init__(self, parent):
        super().__init__()
        self._parent = parent
        self._popped = False

    def action_cancel(self) -> None:
        """Cancel and close the modal."""
        self.safe_pop_screen()

    def finish(self) -> None:
        """Close the modal after its input was accepted."""
        self.safe_pop_screen()

    def safe_pop_screen(self) -> bool:
        """Pop this screen once; returns False if it was already popped."""
        if not self._popped and self.is_mounted:
            self._popped = True
            self._parent.pop_screen()
            return True
        return False


class ModeScreen(BaseModalScreen):
    """Modal standing for a board view mode.

    Closing goes through the view-mode machine; the app pops the screen
    when the board returns to the kanban view.
    """

    def action_cancel(self) -> None:
        if not self._parent.modes.cancel():
            self.safe_pop_screen()

    def finish(self) -> None:
        if not self._parent.modes.confirm():
            self.safe_pop_screen()
