"""Command table widget."""

from rich.text import Text
from textual.binding import Binding
from textual.events import Click
from textual.message import Message
from textual.widgets import DataTable

from cmdstash.constants import TABLE_COLUMNS
from cmdstash.models import Command

_MORE_LINES = Text(" …", style="dim")


def _preview(body: str) -> str | Text:
    """Return the first line of ``body``, marked when more lines follow."""
    lines = body.strip().splitlines()
    if not lines:
        return ""
    if len(lines) == 1:
        return lines[0]
    return Text(lines[0]) + _MORE_LINES


class CommandTable(DataTable):
    """Scrollable table of commands with vim-style navigation.

    Rows are keyed by command name so the cursor can be restored after the
    table is reloaded.  Multi-line bodies show their first line followed by
    a dim ellipsis; the full body is shown in the detail pane.
    """

    class RowDoubleClicked(Message):
        """Posted when the user double-clicks a row."""

    BINDINGS = [
        Binding("j", "cursor_down", show=False),
        Binding("k", "cursor_up", show=False),
    ]

    def __init__(self, *, id: str | None = None, classes: str | None = None) -> None:
        super().__init__(id=id, classes=classes)
        self._commands: dict[str, Command] = {}

    def action_cursor_down(self) -> None:
        """Move down one row, wrapping from the last row to the first."""
        if self.row_count == 0:
            return
        if self.cursor_row == self.row_count - 1:
            self.move_cursor(row=0)
        else:
            super().action_cursor_down()

    def action_cursor_up(self) -> None:
        """Move up one row, wrapping from the first row to the last."""
        if self.row_count == 0:
            return
        if self.cursor_row == 0:
            self.move_cursor(row=self.row_count - 1)
        else:
            super().action_cursor_up()

    def on_mount(self) -> None:
        self.cursor_type = "row"
        self.zebra_stripes = True
        self.add_columns(*TABLE_COLUMNS)

    def load(self, commands: list[Command]) -> None:
        """Replace table contents, keeping the cursor on the same command if possible."""
        previous = self.selected_command()
        self.clear()
        self._commands = {c.name: c for c in commands}
        for i, cmd in enumerate(commands, start=1):
            tag = Text(cmd.tag, style="yellow") if cmd.tag else ""
            self.add_row(str(i), cmd.name, tag, _preview(cmd.body), key=cmd.name)
        if previous is not None and previous.name in self._commands:
            self.move_cursor(row=self.get_row_index(previous.name))

    def selected_command(self) -> Command | None:
        """Return the command on the highlighted row, or None when empty."""
        if self.row_count == 0:
            return None
        row_key, _ = self.coordinate_to_cell_key(self.cursor_coordinate)
        return self._commands.get(str(row_key.value))

    def on_click(self, event: Click) -> None:
        """Post RowDoubleClicked on a double-click (chain == 2)."""
        if event.chain == 2 and self.row_count > 0:
            self.post_message(CommandTable.RowDoubleClicked())
