"""Help overlay: where you are, then the key reference."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Static

from cmdstash.constants import HELP_TEXT


def context_summary(project: str | None, environment: str | None, environments: list[str]) -> str:
    if project is None:
        return "No active project (p picks one)"
    if not environments:
        return f"Project {project} · no environments"
    listed = ", ".join(f"[{name}]" if name == environment else name for name in environments)
    return f"Project {project} · environments: {listed}"


class HelpScreen(ModalScreen):
    """Key reference headed by the current project and its environments.

    Closed by escape, ?, q or a click.
    """

    BINDINGS = [
        Binding("escape", "dismiss", show=False),
        Binding("?", "dismiss", show=False),
        Binding("q", "dismiss", show=False),
    ]

    def __init__(
        self,
        project: str | None = None,
        environment: str | None = None,
        environments: list[str] | None = None,
    ) -> None:
        super().__init__()
        self.summary = context_summary(project, environment, environments or [])

    def compose(self) -> ComposeResult:
        with Vertical(id="help-container"):
            yield Static(self.summary, id="help-context", markup=False)
            yield Static(HELP_TEXT, id="help-text")

    def on_click(self) -> None:
        self.dismiss()
