"""Headless TUI smoke tests covering critical user journeys."""

from pathlib import Path
from typing import cast

from textual.widgets import Input, TextArea

from cmdstash.app import CmdstashApp, render_detail
from cmdstash.models import Command, Explicit
from cmdstash.screens.add import AddScreen
from cmdstash.screens.confirm import ConfirmScreen, body_preview
from cmdstash.screens.edit import EditScreen
from cmdstash.screens.help import HelpScreen, context_summary
from cmdstash.screens.project_picker import ProjectPickerScreen
from cmdstash.screens.rename import RenameScreen
from cmdstash.store import CommandStore
from cmdstash.widgets.command_table import CommandTable


def _seed(home: Path) -> CommandStore:
    """Two projects; webapp is active with three commands and two environments."""
    store = CommandStore.open(home)
    store.create_project("infra")
    store.create_project("webapp")
    store.set_active_project("webapp")
    web = Explicit("webapp")
    store.add_command(web, Command(name="deploy", body="kubectl --context {{cluster}} apply", tag="release"))
    store.add_command(web, Command(name="test", body="pytest -q", tag="ci"))
    store.add_command(web, Command(name="lint", body="ruff check .\nruff format --check ."))
    store.add_command(Explicit("infra"), Command(name="reboot", body="sudo reboot"))
    for env, cluster in (("dev", "dev-eu"), ("prod", "prod-us")):
        store.add_environment(web, env)
        store.set_environment_values(web, env, {"cluster": cluster})
    store.activate_environment(web, "dev")
    return store


def _app(home: Path) -> CmdstashApp:
    return CmdstashApp(_seed(home))


async def wait_loaded(pilot) -> None:
    await pilot.app.workers.wait_for_complete()
    await pilot.pause()


def _table(pilot) -> CommandTable:
    return pilot.app.query_one("#command-table", CommandTable)


class TestMount:
    async def test_table_populated_on_mount(self, tmp_path: Path):
        """
        Given an active project with three commands
        When the UI mounts
        Then the table has three rows sorted by name
        """
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            table = _table(pilot)
            assert table.row_count == 3
            assert table.selected_command().name == "deploy"

    async def test_bodies_are_expanded_for_active_environment(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            assert _table(pilot).selected_command().body == "kubectl --context dev-eu apply"

    async def test_search_hidden_and_table_focused(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            assert pilot.app.query_one("#search", Input).display is False
            assert isinstance(pilot.app.focused, CommandTable)

    async def test_subtitle_names_project_and_environment(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            assert pilot.app.sub_title == "[webapp · dev] · 3 commands"

    async def test_no_active_project(self, tmp_path: Path):
        """
        Given a store without an active project
        When the UI mounts
        Then the table is empty and the subtitle says so
        """
        store = CommandStore.open(tmp_path)
        store.create_project("webapp")
        async with CmdstashApp(store).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            assert _table(pilot).row_count == 0
            assert "no active project" in pilot.app.sub_title


class TestNavigation:
    async def test_j_wraps_and_G_jumps(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            table = _table(pilot)
            await pilot.press("G")
            assert table.cursor_row == 2
            await pilot.press("j")
            assert table.cursor_row == 0

    async def test_gg_jumps_to_top(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("G", "g", "g")
            assert _table(pilot).cursor_row == 0

    async def test_detail_follows_cursor(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("j")
            selected = _table(pilot).selected_command()
            assert selected.name == "lint"
            assert "ruff format --check ." in render_detail(selected).plain


class TestSearch:
    async def test_slash_opens_search(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("/")
            assert pilot.app.query_one("#search", Input).display is True

    async def test_query_filters_rows(self, tmp_path: Path):
        """
        Given the search bar is open
        When the user types "pyt"
        Then only the test command remains
        """
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("/", "p", "y", "t")
            table = _table(pilot)
            assert table.row_count == 1
            assert table.selected_command().name == "test"

    async def test_search_is_limited_to_current_project(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("/", *"reboot")
            assert _table(pilot).row_count == 0

    async def test_escape_clears_search(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("/", "p", "y", "t", "escape")
            assert pilot.app.query_one("#search", Input).display is False
            assert _table(pilot).row_count == 3


class TestCommandActions:
    async def test_copy_uses_expanded_body(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("y")
            assert pilot.app.clipboard == "kubectl --context dev-eu apply"

    async def test_add(self, tmp_path: Path):
        """
        Given the app is loaded
        When the user presses o, fills the form and saves with ctrl+s
        Then the command is persisted and shown
        """
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("o")
            screen = pilot.app.screen
            assert isinstance(screen, AddScreen)
            screen.query_one("#add-name", Input).value = "build"
            screen.query_one("#add-tag", Input).value = "ci"
            screen.query_one("#add-body", TextArea).text = "make all"
            await pilot.press("ctrl+s")
            await wait_loaded(pilot)

            assert _table(pilot).row_count == 4
            assert CommandStore(tmp_path).get_command("build").tag == "ci"

    async def test_add_duplicate_is_blocked(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("o")
            screen = pilot.app.screen
            screen.query_one("#add-name", Input).value = "deploy"
            screen.query_one("#add-body", TextArea).text = "echo"
            await pilot.press("ctrl+s")
            assert isinstance(pilot.app.screen, AddScreen)

    async def test_edit_shows_stored_body_and_saves(self, tmp_path: Path):
        """
        Given the deploy command is selected
        When the user presses i
        Then the unexpanded body is offered, and ctrl+s saves the change
        """
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("i")
            screen = pilot.app.screen
            assert isinstance(screen, EditScreen)
            area = screen.query_one("#edit-body", TextArea)
            assert area.text == "kubectl --context {{cluster}} apply"
            area.text = "kubectl --context {{cluster}} apply -f k8s/"
            await pilot.press("ctrl+s")
            await wait_loaded(pilot)

            assert CommandStore(tmp_path).get_command("deploy").body.startswith(
                "kubectl --context {{cluster}} apply -f k8s/"
            )

    async def test_rename(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("r")
            screen = pilot.app.screen
            assert isinstance(screen, RenameScreen)
            screen.query_one("#rename-name", Input).value = "ship"
            await pilot.press("enter")
            await wait_loaded(pilot)
            assert CommandStore(tmp_path).suggest_command_names() == ["lint", "ship", "test"]

    async def test_dd_then_confirm_deletes(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("d", "d")
            screen = pilot.app.screen
            assert isinstance(screen, ConfirmScreen)
            assert screen.heading == "Delete 'deploy' from webapp?"
            await pilot.press("y")
            await wait_loaded(pilot)
            assert _table(pilot).row_count == 2
            assert "deploy" not in CommandStore(tmp_path).suggest_command_names()

    async def test_dd_then_cancel_keeps_command(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("d", "d", "n")
            await wait_loaded(pilot)
            assert _table(pilot).row_count == 3


class TestContext:
    async def test_e_cycles_environment(self, tmp_path: Path):
        """
        Given dev is the active environment
        When the user presses e
        Then prod becomes active, is persisted, and bodies re-expand
        """
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("e")
            await wait_loaded(pilot)
            assert CommandStore(tmp_path).get_active_environment() == "prod"
            assert _table(pilot).selected_command().body == "kubectl --context prod-us apply"

    async def test_e_wraps_around(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("e", "e")
            await wait_loaded(pilot)
            assert CommandStore(tmp_path).get_active_environment() == "dev"

    async def test_p_switches_active_project(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("p")
            assert isinstance(pilot.app.screen, ProjectPickerScreen)
            await pilot.press("k", "enter")
            await wait_loaded(pilot)

            app = cast(CmdstashApp, pilot.app)
            assert app.current_project == "infra"
            assert _table(pilot).selected_command().name == "reboot"
            assert CommandStore(tmp_path).active_project_name() == "infra"

    async def test_help(self, tmp_path: Path):
        async with _app(tmp_path).run_test(headless=True) as pilot:
            await wait_loaded(pilot)
            await pilot.press("?")
            screen = pilot.app.screen
            assert isinstance(screen, HelpScreen)
            assert screen.summary == "Project webapp · environments: [dev], prod"
            await pilot.press("escape")
            assert not isinstance(pilot.app.screen, HelpScreen)


class TestRenderDetail:
    def test_full_command(self):
        text = render_detail(Command(name="lint", body="ruff check .\n", tag="ci", working_dir="/srv"))
        assert text.plain == "lint  [ci]  (/srv)\n\nruff check ."

    def test_nothing_selected(self):
        assert render_detail(None).plain == "No command selected"


class TestBodyPreview:
    def test_short_body_shown_whole(self):
        assert body_preview("ruff check .\nruff format --check .\n") == "ruff check .\nruff format --check ."

    def test_long_body_cut_with_count(self):
        body = "\n".join(f"step {i}" for i in range(1, 6)) + "\n"
        assert body_preview(body) == "step 1\nstep 2\nstep 3\n… 2 more lines"

    def test_one_hidden_line_is_singular(self):
        assert body_preview("a\nb\nc\nd", limit=3) == "a\nb\nc\n… 1 more line"


class TestContextSummary:
    def test_marks_active_environment(self):
        assert context_summary("webapp", "prod", ["dev", "prod"]) == "Project webapp · environments: dev, [prod]"

    def test_project_without_environments(self):
        assert context_summary("infra", None, []) == "Project infra · no environments"

    def test_no_project(self):
        assert context_summary(None, None, []) == "No active project (p picks one)"
