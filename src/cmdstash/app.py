"""Terminal user interface for browsing and managing saved commands."""

from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Header, Input, Static

from cmdstash.config import ConfigError, load_theme, save_theme
from cmdstash.constants import APP_TITLE
from cmdstash.errors import CmdstashError
from cmdstash.models import Command, Explicit
from cmdstash.screens.add import AddScreen
from cmdstash.screens.confirm import ConfirmScreen
from cmdstash.screens.edit import EditScreen
from cmdstash.screens.help import HelpScreen
from cmdstash.screens.project_picker import ProjectPickerScreen
from cmdstash.screens.rename import RenameScreen
from cmdstash.store import CommandStore
from cmdstash.widgets.command_table import CommandTable
from cmdstash.widgets.context_bar import ContextBar
from cmdstash.widgets.main_view import MainView


def render_detail(command: Command | None) -> Text:
    """Render the detail pane for a command: name, tag, directory, full body."""
    if command is None:
        return Text("No command selected", style="dim")
    text = Text(command.name, style="bold cyan")
    if command.tag:
        text.append(f"  [{command.tag}]", style="bold yellow")
    if command.working_dir:
        text.append(f"  ({command.working_dir})", style="dim")
    text.append("\n\n")
    text.append(command.body.rstrip("\n"))
    return text


class CmdstashApp(App):
    """cmdstash: saved shell commands per project."""

    CSS_PATH = [
        "app.tcss",
        "widgets/context_bar.tcss",
        "widgets/main_view.tcss",
    ]
    TITLE = APP_TITLE

    current_project: reactive[str | None] = reactive(None, init=False)

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("?", "toggle_help", "Help"),
        Binding("/", "focus_search", "Search"),
        Binding("escape", "clear_search", show=False),
        Binding("g", "jump_top", show=False),
        Binding("G", "jump_bottom", show=False),
        Binding("y", "copy_command", "Copy"),
        Binding("i", "edit_command", "Edit"),
        Binding("r", "rename_command", "Rename"),
        Binding("o", "add_command", "Add"),
        Binding("d", "delete_command", "dd Delete"),
        Binding("p", "pick_project", "Project"),
        Binding("e", "cycle_env_next", "Env"),
        Binding("tab", "cycle_env_next", show=False),
    ]

    def __init__(self, store: CommandStore | None = None) -> None:
        super().__init__()
        self._store = store if store is not None else CommandStore.open()
        self._all_commands: list[Command] = []
        self._filter: str = ""
        self._g_pressed: bool = False
        self._d_pressed: bool = False

    def compose(self) -> ComposeResult:
        yield Header()
        yield ContextBar(id="context-bar")
        yield MainView(id="main")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#search", Input).display = False
        saved_theme = load_theme(self._store.home)
        if saved_theme:
            self.theme = saved_theme
        self._load_initial()

    @work
    async def _load_initial(self) -> None:
        self._reload()
        self._get_table().focus()

    def watch_theme(self, theme: str) -> None:
        """Persist theme changes whenever the theme is changed."""
        save_theme(self._store.home, theme)

    def watch_current_project(self, project: str | None) -> None:
        self._update_subtitle()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _reload(self) -> None:
        """Re-read the active project from the store and repopulate the UI."""
        try:
            project = self._store.active_project_name()
            if project is None:
                self._all_commands = []
            else:
                self._all_commands = self._store.list_commands(Explicit(project))
        except (CmdstashError, ConfigError) as exc:
            self.notify(f"Load failed: {exc}", severity="error", timeout=8)
            project = None
            self._all_commands = []
        self.current_project = project
        self._refresh_table()
        self._sync_context_bar()
        self._update_subtitle()

    @work(exclusive=True, group="context-bar")
    async def _sync_context_bar(self) -> None:
        project = self.current_project
        environments: list[str] = []
        active: str | None = None
        if project is not None:
            ref = Explicit(project)
            environments = [env.name for env in self._store.list_environments(ref)]
            active = self._store.get_active_environment(ref)
        await self.query_one("#context-bar", ContextBar).show(project, environments, active)

    def _update_subtitle(self) -> None:
        if self.current_project is None:
            self.sub_title = "no active project · press p to pick one"
            return
        active = self._store.get_active_environment(Explicit(self.current_project))
        count = len(self._all_commands)
        noun = "command" if count == 1 else "commands"
        self.sub_title = f"[{self.current_project} · {active or 'no env'}] · {count} {noun}"

    def _get_table(self) -> CommandTable:
        return self.query_one("#command-table", CommandTable)

    def _visible_commands(self) -> list[Command]:
        """Return the commands to show: all of them, or the fuzzy matches best first."""
        if not self._filter or self.current_project is None:
            return self._all_commands
        by_name = {c.name: c for c in self._all_commands}
        hits = self._store.search(self._filter, Explicit(self.current_project))
        return [by_name[h.command.name] for h in hits if h.command.name in by_name]

    def _refresh_table(self) -> None:
        table = self._get_table()
        table.load(self._visible_commands())
        self._show_detail(table.selected_command())

    def _show_detail(self, command: Command | None) -> None:
        self.query_one("#detail", Static).update(render_detail(command))

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self._show_detail(self._get_table().selected_command())

    def on_command_table_row_double_clicked(self, event: CommandTable.RowDoubleClicked) -> None:
        event.stop()
        self.action_edit_command()

    def on_context_bar_tab_clicked(self, event: ContextBar.TabClicked) -> None:
        event.stop()
        self._activate_environment(event.env)

    def on_context_bar_project_clicked(self, event: ContextBar.ProjectClicked) -> None:
        event.stop()
        self.action_pick_project()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _apply(self, description: str, mutation, *args) -> bool:
        """Run a store mutation, reporting failures as a notification.

        Returns True on success.  The UI is reloaded either way.
        """
        try:
            mutation(*args)
        except (CmdstashError, ConfigError) as exc:
            self.notify(f"{description} failed: {exc}", severity="error", timeout=8)
            self._reload()
            return False
        self._reload()
        return True

    def _require_project(self) -> str | None:
        if self.current_project is None:
            self.notify("No active project, press p to pick one", severity="warning", timeout=4)
        return self.current_project

    def _activate_environment(self, env: str) -> None:
        project = self._require_project()
        if project is None:
            return
        if self._apply("Switch environment", self._store.activate_environment, Explicit(project), env):
            self.notify(f"Environment: {env}", timeout=2)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def action_toggle_help(self) -> None:
        project = self.current_project
        environments: list[str] = []
        active: str | None = None
        if project is not None:
            ref = Explicit(project)
            environments = [env.name for env in self._store.list_environments(ref)]
            active = self._store.get_active_environment(ref)
        self.push_screen(HelpScreen(project, active, environments))

    def action_focus_search(self) -> None:
        """Show and focus the search bar."""
        search = self.query_one("#search", Input)
        search.display = True
        search.focus()

    def action_clear_search(self) -> None:
        """Clear active filter and hide the search bar."""
        search = self.query_one("#search", Input)
        if search.value:
            search.value = ""
            self._filter = ""
            self._refresh_table()
        search.display = False
        self._get_table().focus()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search":
            self._filter = event.value
            self._refresh_table()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "search":
            self._get_table().focus()

    def action_jump_top(self) -> None:
        """Vim-style gg: the first g arms a short timer, the second jumps to row 0."""
        if self._g_pressed:
            self._g_pressed = False
            self._get_table().move_cursor(row=0)
        else:
            self._g_pressed = True
            self.set_timer(0.5, self._reset_g)

    def _reset_g(self) -> None:
        self._g_pressed = False

    def action_jump_bottom(self) -> None:
        table = self._get_table()
        table.move_cursor(row=table.row_count - 1)

    def action_copy_command(self) -> None:
        """Copy the selected command's expanded body to the clipboard."""
        command = self._get_table().selected_command()
        if command is None:
            return
        self.copy_to_clipboard(command.body.strip())
        self.notify(f"Copied {command.name} to clipboard", timeout=2)

    def action_edit_command(self) -> None:
        """Edit the stored, unexpanded body of the selected command."""
        selected = self._get_table().selected_command()
        project = self.current_project
        if selected is None or project is None:
            return
        try:
            current = self._store.get_command(selected.name, Explicit(project)).body
        except CmdstashError as exc:
            self.notify(str(exc), severity="error", timeout=8)
            return

        def on_save(new_body: str | None) -> None:
            if new_body is not None and new_body != current:
                if self._apply("Edit", self._store.update_command_body, selected.name, new_body):
                    self.notify(f"Updated {selected.name}", timeout=2)
            self._get_table().focus()

        self.push_screen(EditScreen(selected.name, current), on_save)

    def action_rename_command(self) -> None:
        selected = self._get_table().selected_command()
        if selected is None:
            return
        existing = {c.name for c in self._all_commands}

        def on_rename(new_name: str | None) -> None:
            if new_name is not None:
                if self._apply("Rename", self._store.rename_command, selected.name, new_name):
                    self.notify(f"Renamed {selected.name} to {new_name}", timeout=2)
            self._get_table().focus()

        self.push_screen(RenameScreen(selected.name, existing), on_rename)

    def action_add_command(self) -> None:
        project = self._require_project()
        if project is None:
            return
        existing = {c.name for c in self._all_commands}

        def on_save(command: Command | None) -> None:
            if command is not None:
                if self._apply("Add", self._store.add_command, Explicit(project), command):
                    self.notify(f"Added {command.name}", timeout=2)
            self._get_table().focus()

        self.push_screen(AddScreen(existing), on_save)

    def action_delete_command(self) -> None:
        """Vim-style dd: delete the selected command on the second d press."""
        if not self._d_pressed:
            self._d_pressed = True
            self.set_timer(0.5, self._reset_d)
            return

        self._d_pressed = False
        selected = self._get_table().selected_command()
        project = self.current_project
        if selected is None or project is None:
            return

        def on_confirm(confirmed: bool | None) -> None:
            if confirmed:
                if self._apply("Delete", self._store.remove_command, selected.name, Explicit(project)):
                    self.notify(f"Deleted {selected.name}", timeout=2)
            self._get_table().focus()

        self.push_screen(ConfirmScreen(selected, project), on_confirm)

    def _reset_d(self) -> None:
        self._d_pressed = False

    def action_pick_project(self) -> None:
        """Open the project picker; the chosen project becomes active."""
        projects = [(p.name, p.path, len(p.commands)) for p in self._store.projects]
        if not projects:
            self.notify("No projects yet, create one with 'cmdstash project add'", timeout=4)
            return

        def on_pick(name: str | None) -> None:
            if name is not None and name != self.current_project:
                self._apply("Switch project", self._store.set_active_project, name)
            self._get_table().focus()

        self.push_screen(ProjectPickerScreen(projects, self.current_project), on_pick)

    def action_cycle_env_next(self) -> None:
        """Activate the next environment of the current project (wraps around)."""
        project = self._require_project()
        if project is None:
            return
        ref = Explicit(project)
        names = [env.name for env in self._store.list_environments(ref)]
        if not names:
            self.notify("No environments, add one with 'cmdstash env add'", timeout=4)
            return
        active = self._store.get_active_environment(ref)
        idx = names.index(active) + 1 if active in names else 0
        self._activate_environment(names[idx % len(names)])


def main() -> None:
    CmdstashApp().run()


if __name__ == "__main__":
    main()
