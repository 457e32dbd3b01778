"""Project picker modal."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.screen import ModalScreen
from textual.widgets import ListItem, ListView, Static


class ProjectPickerScreen(ModalScreen[str | None]):
    """Modal that lists every project and returns the one selected.

    Each row shows the project name, its path when set, and how many
    commands it holds.  The active project is pre-highlighted.  Dismisses
    with the project name on Enter or None on Escape/q.
    """

    BINDINGS = [
        Binding("escape", "cancel", show=False),
        Binding("q", "cancel", show=False),
        Binding("j", "cursor_down", show=False),
        Binding("k", "cursor_up", show=False),
    ]

    DEFAULT_CSS = """
    ProjectPickerScreen {
        align: center middle;
    }
    """

    def __init__(self, projects: list[tuple[str, str | None, int]], current: str | None) -> None:
        super().__init__()
        self._projects = projects
        self._current = current

    def compose(self) -> ComposeResult:
        items: list[ListItem] = []
        for name, path, count in self._projects:
            is_current = name == self._current
            marker = "→" if is_current else " "
            label = f"  {marker} {name}  ({count})"
            if path:
                label += f"  {path}"
            classes = "picker-item picker-active" if is_current else "picker-item"
            items.append(ListItem(Static(label), classes=classes))

        yield Static("  Switch project", id="picker-title")
        yield ListView(*items, id="picker-list")
        yield Static("  Enter to select · Esc/q to cancel", id="picker-hint")

    def on_mount(self) -> None:
        list_view = self.query_one("#picker-list", ListView)
        names = [name for name, _, _ in self._projects]
        if self._current in names:
            list_view.index = names.index(self._current)
        list_view.focus()

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        index = event.list_view.index
        if index is not None:
            self.dismiss(self._projects[index][0])

    def action_cursor_down(self) -> None:
        self.query_one("#picker-list", ListView).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#picker-list", ListView).action_cursor_up()

    def action_cancel(self) -> None:
        self.dismiss(None)
