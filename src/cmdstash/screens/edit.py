"""Edit screen: modal for changing a command's body."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Label, TextArea


class EditScreen(ModalScreen[str | None]):
    """Modal that lets the user edit the stored body of a command.

    The body is shown unexpanded so placeholders stay intact.  Dismisses
    with the new body on ``ctrl+s``, or None on cancel.
    """

    BINDINGS = [
        Binding("escape", "cancel", show=False),
        Binding("ctrl+s", "save", show=False, priority=True),
    ]

    def __init__(self, name: str, current_body: str) -> None:
        super().__init__()
        self._command_name = name
        self._current_body = current_body

    def compose(self) -> ComposeResult:
        with Vertical(id="edit-container"):
            yield Label(f"Edit  {self._command_name}", id="edit-title")
            yield TextArea(self._current_body, id="edit-body", show_line_numbers=False)
            yield Label("ctrl+s to save · Escape to cancel", id="edit-hint")

    def on_mount(self) -> None:
        self.query_one("#edit-body", TextArea).focus()

    def action_save(self) -> None:
        body = self.query_one("#edit-body", TextArea).text
        if not body.strip():
            self.query_one("#edit-hint", Label).update("[red]Command cannot be empty[/]")
            return
        self.dismiss(body)

    def action_cancel(self) -> None:
        self.dismiss(None)
