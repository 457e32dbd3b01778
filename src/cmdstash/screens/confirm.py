"""Delete confirmation modal showing the command that is about to go."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, Static

from cmdstash.models import Command

PREVIEW_LINES = 3


def body_preview(body: str, limit: int = PREVIEW_LINES) -> str:
    """Return the first ``limit`` lines of ``body``, with a marker if cut."""
    lines = body.rstrip("\n").splitlines()
    if len(lines) <= limit:
        return "\n".join(lines)
    hidden = len(lines) - limit
    return "\n".join(lines[:limit]) + f"\n… {hidden} more line{'s' if hidden > 1 else ''}"


class ConfirmScreen(ModalScreen[bool]):
    """Ask before deleting ``command`` from ``project``.

    Dismisses with True on y or Delete, False otherwise.  Keep is focused first.
    """

    BINDINGS = [
        Binding("escape", "cancel", show=False),
        Binding("y", "confirm", show=False),
        Binding("n", "cancel", show=False),
    ]

    def __init__(self, command: Command, project: str) -> None:
        super().__init__()
        self._command = command
        self.heading = f"Delete '{command.name}' from {project}?"

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-container"):
            yield Label(self.heading, id="confirm-message", markup=False)
            if self._command.tag:
                yield Label(f"tag: {self._command.tag}", id="confirm-tag", markup=False)
            yield Static(body_preview(self._command.body), id="confirm-body", markup=False)
            with Horizontal(id="confirm-buttons"):
                yield Button("Delete", variant="error", id="confirm-yes")
                yield Button("Keep", variant="primary", id="confirm-no")

    def on_mount(self) -> None:
        self.query_one("#confirm-no", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm-yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)
