"""Main view: search bar, command table, and detail pane."""

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Input, Static

from cmdstash.widgets.command_table import CommandTable


class MainView(Vertical):
    """Composes the search input, the command table, and the detail pane."""

    def compose(self) -> ComposeResult:
        yield Input(placeholder="Fuzzy search names and commands…", id="search")
        yield CommandTable(id="command-table")
        yield Static("", id="detail")
