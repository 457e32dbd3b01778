"""Rename screen: modal for renaming a command."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label

_HINT = "Enter to save · Escape to cancel"


class RenameScreen(ModalScreen[str | None]):
    """Modal that lets the user rename a command.

    Dismisses with the new name on save, or None on cancel or when the name
    is unchanged.
    """

    BINDINGS = [
        Binding("escape", "cancel", show=False),
    ]

    def __init__(self, current_name: str, existing_names: set[str]) -> None:
        super().__init__()
        self._current_name = current_name
        self._existing_names = existing_names

    def compose(self) -> ComposeResult:
        with Vertical(id="rename-container"):
            yield Label("Rename command", id="rename-title")
            yield Input(value=self._current_name, id="rename-name")
            yield Label(_HINT, id="rename-hint")

    def on_mount(self) -> None:
        input_widget = self.query_one("#rename-name", Input)
        input_widget.focus()
        input_widget.cursor_position = len(self._current_name)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        new_name = event.value.strip()

        if not new_name:
            self._show_error("Name cannot be empty")
            return

        if new_name == self._current_name:
            self.dismiss(None)
            return

        if new_name in self._existing_names:
            self._show_error(f"Command '{new_name}' already exists")
            return

        self.dismiss(new_name)

    def _show_error(self, message: str) -> None:
        hint = self.query_one("#rename-hint", Label)
        hint.update(f"[red]{message}[/]")
        self.set_timer(2.0, lambda: hint.update(_HINT))

    def action_cancel(self) -> None:
        self.dismiss(None)
