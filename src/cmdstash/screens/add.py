"""Add screen: modal for saving a new command."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, TextArea

from cmdstash.models import Command


class AddScreen(ModalScreen[Command | None]):
    """Modal that lets the user add a command to the current project.

    Dismisses with a new Command on save, or None on cancel.
    Inline validation prevents duplicate or blank names and empty bodies.
    ``ctrl+s`` saves from anywhere in the modal.
    """

    BINDINGS = [
        Binding("escape", "cancel", show=False),
        Binding("ctrl+s", "save", show=False, priority=True),
    ]

    def __init__(self, existing_names: set[str]) -> None:
        super().__init__()
        self._existing_names = existing_names

    def compose(self) -> ComposeResult:
        with Vertical(id="add-container"):
            yield Label("Add command", id="add-title")
            yield Input(placeholder="name", id="add-name")
            yield Input(placeholder="tag (optional)", id="add-tag")
            yield Input(placeholder="working directory (optional)", id="add-cwd")
            yield TextArea(id="add-body", show_line_numbers=False)
            yield Label("", id="add-error")
            yield Label("ctrl+s to save · Tab to move · Escape to cancel", id="add-hint")
            with Horizontal(id="add-buttons"):
                yield Button("Save", variant="success", id="add-save")
                yield Button("Cancel", variant="primary", id="add-cancel")

    def on_mount(self) -> None:
        self.query_one("#add-name", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        following = {"add-name": "#add-tag", "add-tag": "#add-cwd", "add-cwd": "#add-body"}
        target = following.get(event.input.id or "")
        if target is not None:
            self.query_one(target).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "add-save":
            self._try_save()
        elif event.button.id == "add-cancel":
            self.dismiss(None)

    def action_save(self) -> None:
        self._try_save()

    def _try_save(self) -> None:
        name = self.query_one("#add-name", Input).value.strip()
        body = self.query_one("#add-body", TextArea).text
        error = self.query_one("#add-error", Label)

        if not name:
            error.update("Name cannot be blank")
            self.query_one("#add-name", Input).focus()
            return

        if name in self._existing_names:
            error.update(f"'{name}' already exists, use edit instead")
            self.query_one("#add-name", Input).focus()
            return

        if not body.strip():
            error.update("Command cannot be empty")
            self.query_one("#add-body", TextArea).focus()
            return

        cwd = self.query_one("#add-cwd", Input).value.strip()
        self.dismiss(
            Command(
                name=name,
                body=body,
                tag=self.query_one("#add-tag", Input).value.strip(),
                working_dir=cwd or None,
            )
        )

    def action_cancel(self) -> None:
        self.dismiss(None)
