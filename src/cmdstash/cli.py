"""Command-line interface for saving, listing, and running shell commands."""

import contextlib
import logging
import os
import tomllib
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import pyperclip
import tomli_w
import typer

from cmdstash import shell
from cmdstash.config import ConfigError, default_home
from cmdstash.constants import LOG_LEVEL_ENV_VAR
from cmdstash.errors import CmdstashError, CommandFailed, NoActiveProject
from cmdstash.models import Command, Explicit, project_ref
from cmdstash.store import CommandStore

app = typer.Typer(
    help="Save, organise, and run shell commands per project.",
    no_args_is_help=False,
)
project_app = typer.Typer(help="Manage projects", no_args_is_help=True)
env_app = typer.Typer(help="Manage project-specific environments", no_args_is_help=True)
app.add_typer(project_app, name="project")
app.add_typer(project_app, name="p", hidden=True)
app.add_typer(env_app, name="env")
app.add_typer(env_app, name="e", hidden=True)

logger = logging.getLogger(__name__)

_NO_ACTIVE_HINT = (
    "No project specified and no active project set. "
    "Use 'cmdstash project add' to create one or 'cmdstash project switch' to activate one."
)


@dataclass
class _State:
    home: Path | None = None


state = _State()


def _store() -> CommandStore:
    return CommandStore.open(state.home if state.home is not None else default_home())


@contextlib.contextmanager
def _reporting(action: str) -> Iterator[None]:
    """Turn core errors into a one-line message on stderr and exit status 1.

    A failed command run exits with the command's own status instead.
    """
    try:
        yield
    except CommandFailed as exc:
        typer.secho(f"Error: {action}: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(exc.exit_code) from exc
    except NoActiveProject as exc:
        typer.secho(f"Error: {action}: {_NO_ACTIVE_HINT}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
    except (CmdstashError, ConfigError, pyperclip.PyperclipException) as exc:
        logger.debug("%s", action, exc_info=True)
        typer.secho(f"Error: {action}: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc


def _fail(message: str) -> NoReturn:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


# ----------------------------------------------------------------------
# Shell completion
# ----------------------------------------------------------------------


def _complete(source: str, incomplete: str, project: str | None = None) -> list[str]:
    try:
        store = CommandStore(default_home())
        if source == "commands":
            names = store.suggest_command_names()
        elif source == "projects":
            names = store.suggest_projects()
        elif source == "tags":
            names = store.suggest_tags(project)
        else:
            names = store.suggest_environments(project)
    except (CmdstashError, ConfigError, OSError):
        return []
    return [n for n in names if n.startswith(incomplete)]


def complete_commands(incomplete: str) -> list[str]:
    return _complete("commands", incomplete)


def complete_projects(incomplete: str) -> list[str]:
    return _complete("projects", incomplete)


def complete_tags(incomplete: str) -> list[str]:
    return _complete("tags", incomplete)


def complete_environments(incomplete: str) -> list[str]:
    return _complete("environments", incomplete)


# Module-level defaults for Typer options
_PROJECT_HELP = "Target project (defaults to the active project)"
_ENV_HELP = "Environment used to expand {{placeholders}}"


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    ui: bool = typer.Option(False, "--ui", help="Launch the terminal user interface"),  # noqa: B008
    home: Path | None = typer.Option(  # noqa: B008
        None, "--home", help="Data directory (default: $CMDSTASH_HOME or ~/.cmdstash)"
    ),
    log_level: str = typer.Option(  # noqa: B008
        os.getenv(LOG_LEVEL_ENV_VAR, "WARNING"), "--log-level", help="Logging level"
    ),
) -> None:
    """Save, organise, and run shell commands per project."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    state.home = home
    if ui:
        from cmdstash.app import CmdstashApp

        with _reporting("Failed to start the UI"):
            CmdstashApp(_store()).run()
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command()
def init() -> None:
    """Initialize cmdstash and create a first project."""
    with _reporting("Failed to initialize"):
        store = _store()
    typer.echo(f"cmdstash initialized at {store.home}")
    name = typer.prompt("Enter a name for your first project", default="", show_default=False)
    name = name.strip()
    if not name:
        _fail("No project name entered")
    with _reporting(f"Failed to create project '{name}'"):
        store.create_project(name)
        store.set_active_project(name)
    typer.echo(f"Project '{name}' created and activated.")


@app.command()
def add(
    name: str = typer.Argument(..., help="Name for the command"),  # noqa: B008
    body: str | None = typer.Argument(  # noqa: B008
        None, help="The shell command to save (opens $EDITOR if omitted)"
    ),
    project: str | None = typer.Option(  # noqa: B008
        None, "--project", "-p", help=_PROJECT_HELP, autocompletion=complete_projects
    ),
    cwd: str | None = typer.Option(  # noqa: B008
        None, "--cwd", "-c", help="Working directory for the command"
    ),
    tag: str = typer.Option(  # noqa: B008
        "", "--tag", "-t", help="Tag for organizing commands", autocompletion=complete_tags
    ),
) -> None:
    """Add a new command."""
    with _reporting(f"Failed to add command '{name}'"):
        store = _store()
        if body is None:
            text = shell.edit_text("").strip()
            if not text:
                _fail("No command entered")
            body = text + "\n"
        target = store.add_command(
            project_ref(project), Command(name=name, body=body, working_dir=cwd, tag=tag)
        )
    typer.echo(f"Command '{name}' added to project '{target.name}'.")


def remove(
    name: str = typer.Argument(..., help="Name of the command to remove", autocompletion=complete_commands),  # noqa: B008
    project: str | None = typer.Option(  # noqa: B008
        None, "--project", "-p", help=_PROJECT_HELP, autocompletion=complete_projects
    ),
) -> None:
    """Remove a command."""
    with _reporting(f"Failed to remove command '{name}'"):
        _store().remove_command(name, project_ref(project))
    typer.echo(f"Command '{name}' removed.")


app.command("remove")(remove)
app.command("rm", hidden=True)(remove)


@app.command()
def edit(
    name: str = typer.Argument(..., help="Name of the command to edit", autocompletion=complete_commands),  # noqa: B008
) -> None:
    """Edit an existing command of the active project in $EDITOR."""
    with _reporting(f"Failed to update command '{name}'"):
        store = _store()
        current = store.get_command(name)
        new_body = shell.edit_text(current.body)
        if not new_body.strip():
            _fail("Command cannot be empty")
        store.update_command_body(name, new_body)
    typer.echo(f"Command '{name}' updated.")


@app.command()
def rename(
    old_name: str = typer.Argument(..., help="Current name of the command", autocompletion=complete_commands),  # noqa: B008
    new_name: str = typer.Argument(..., help="New name for the command"),  # noqa: B008
) -> None:
    """Rename a command of the active project."""
    with _reporting(f"Failed to rename command '{old_name}' to '{new_name}'"):
        _store().rename_command(old_name, new_name)
    typer.echo(f"Command '{old_name}' renamed to '{new_name}'.")


def _echo_body(body: str) -> None:
    for line in body.splitlines():
        typer.secho(line, fg=typer.colors.WHITE)


def _cwd_badge(command: Command) -> str:
    if command.working_dir is None:
        return ""
    return " " + typer.style(f"({command.working_dir})", fg=typer.colors.BRIGHT_BLACK)


def _echo_detail(command: Command, missing: list[str]) -> None:
    line = typer.style(command.name, fg=typer.colors.CYAN, bold=True)
    if command.tag:
        line += " " + typer.style(f"[{command.tag}]", fg=typer.colors.YELLOW, bold=True)
    typer.echo(line + _cwd_badge(command))
    _echo_body(command.body)
    if missing:
        typer.secho(f"unresolved: {', '.join(missing)}", fg=typer.colors.BRIGHT_BLACK)


def _echo_grouped(commands: list[Command], scope: str, names_only: bool) -> None:
    """Print commands under their tag headers, untagged first."""
    groups: dict[str, list[Command]] = {}
    for cmd in commands:
        groups.setdefault(cmd.tag, []).append(cmd)
    if not groups:
        return

    typer.secho(scope, fg=typer.colors.GREEN, bold=True)
    typer.echo()
    for tag in sorted(groups):
        if tag:
            typer.secho(f"[{tag}]", fg=typer.colors.YELLOW, bold=True)
        for cmd in groups[tag]:
            if names_only:
                typer.secho(cmd.name, fg=typer.colors.CYAN, bold=True)
                continue
            typer.echo(typer.style(cmd.name, fg=typer.colors.CYAN, bold=True) + _cwd_badge(cmd))
            _echo_body(cmd.body)
            typer.echo()


def list_(
    name: str | None = typer.Argument(  # noqa: B008
        None, help="Command name to show details for", autocompletion=complete_commands
    ),
    project: str | None = typer.Option(  # noqa: B008
        None, "--project", "-p", help=_PROJECT_HELP, autocompletion=complete_projects
    ),
    tag: str | None = typer.Option(  # noqa: B008
        None, "--tag", "-t", help="Filter commands by tag", autocompletion=complete_tags
    ),
    environment: str | None = typer.Option(  # noqa: B008
        None, "--env", "-e", help=_ENV_HELP, autocompletion=complete_environments
    ),
    names: bool = typer.Option(False, "--names", "-n", help="Show only command names"),  # noqa: B008
) -> None:
    """List commands, grouped by tag."""
    ref = project_ref(project)
    with _reporting("Failed to list commands"):
        store = _store()
        if name is not None:
            _echo_detail(
                store.resolve_command(name, ref, environment),
                store.missing_placeholders(name, ref, environment),
            )
            return
        scope = store.resolve(ref).name
        commands = store.list_commands(ref, environment)

    if not commands:
        typer.echo("No commands found. Use 'cmdstash add <name> <cmd>' to add one.")
        return
    _echo_grouped([c for c in commands if c.matches_tag(tag)], scope, names)


app.command("list")(list_)
app.command("ls", hidden=True)(list_)


@app.command()
def run(
    name: str = typer.Argument(..., help="Name of the command to run", autocompletion=complete_commands),  # noqa: B008
    project: str | None = typer.Option(  # noqa: B008
        None, "--project", "-p", help=_PROJECT_HELP, autocompletion=complete_projects
    ),
    environment: str | None = typer.Option(  # noqa: B008
        None, "--env", "-e", help=_ENV_HELP, autocompletion=complete_environments
    ),
) -> None:
    """Run a saved command."""
    with _reporting(f"Failed to run command '{name}'"):
        command = _store().resolve_command(name, project_ref(project), environment)
        shell.run_command(command)


def copy(
    name: str = typer.Argument(..., help="Name of the command to copy", autocompletion=complete_commands),  # noqa: B008
    project: str | None = typer.Option(  # noqa: B008
        None, "--project", "-p", help=_PROJECT_HELP, autocompletion=complete_projects
    ),
    environment: str | None = typer.Option(  # noqa: B008
        None, "--env", "-e", help=_ENV_HELP, autocompletion=complete_environments
    ),
) -> None:
    """Copy the expanded command to the clipboard."""
    with _reporting(f"Failed to copy command '{name}'"):
        command = _store().resolve_command(name, project_ref(project), environment)
        shell.copy_to_clipboard(command.body.strip())
    typer.echo(f"Copied '{name}' to clipboard.")


app.command("copy")(copy)
app.command("cp", hidden=True)(copy)


@app.command()
def search(
    query: str = typer.Argument(..., help="Fuzzy-matched against names and command text"),  # noqa: B008
) -> None:
    """Search commands across all projects."""
    with _reporting("Search failed"):
        hits = _store().search(query)
    if not hits:
        typer.echo("No matches found.")
        return
    for hit in hits:
        typer.echo(hit.command.name + " " + typer.style(f"({hit.project})", fg=typer.colors.BRIGHT_BLACK))


# ----------------------------------------------------------------------
# project
# ----------------------------------------------------------------------


@project_app.command("add")
def project_add(
    name: str = typer.Argument(..., help="Name of the project"),  # noqa: B008
    path: str | None = typer.Option(None, "--path", "-p", help="Path associated with the project"),  # noqa: B008
) -> None:
    """Create a new project and make it active."""
    with _reporting(f"Failed to create project '{name}'"):
        store = _store()
        store.create_project(name, path)
        store.set_active_project(name)
    typer.echo(f"Project '{name}' created and activated.")


def project_remove(
    name: str = typer.Argument(..., help="Name of the project to remove", autocompletion=complete_projects),  # noqa: B008
) -> None:
    """Remove a project and its file."""
    with _reporting(f"Failed to delete project '{name}'"):
        _store().delete_project(name)
    typer.echo(f"Project '{name}' deleted.")


project_app.command("remove")(project_remove)
project_app.command("rm", hidden=True)(project_remove)


def project_list() -> None:
    """List all projects; the active one is starred."""
    with _reporting("Failed to list projects"):
        store = _store()
        active = store.active_project_name()
    if not store.projects:
        typer.echo("No projects. Use 'cmdstash project add' to create one.")
        return
    for project in store.projects:
        line = typer.style(project.name, fg=typer.colors.BLUE)
        if project.path is not None:
            line += f" ({project.path})"
        if project.name == active:
            line += " " + typer.style("*", fg=typer.colors.GREEN)
        typer.echo(line)


project_app.command("list")(project_list)
project_app.command("ls", hidden=True)(project_list)


@project_app.command("switch")
def project_switch(
    name: str = typer.Argument(..., help="Name of the project to switch to", autocompletion=complete_projects),  # noqa: B008
) -> None:
    """Make a project active."""
    with _reporting(f"Failed to switch to project '{name}'"):
        _store().set_active_project(name)
    typer.echo(f"Switched to project '{name}'.")


@project_app.command("clear")
def project_clear() -> None:
    """Clear the active project."""
    with _reporting("Failed to clear the active project"):
        _store().clear_active_project()
    typer.echo("Active project cleared.")


@project_app.command("active")
def project_active() -> None:
    """Show the active project."""
    with _reporting("Failed to read the active project"):
        active = _store().active_project_name()
    typer.echo(active if active is not None else "No active project.")


# ----------------------------------------------------------------------
# env
# ----------------------------------------------------------------------


def _env_project(store: CommandStore, project: str | None) -> str:
    """Return the stored name of the explicit or active project."""
    return store.resolve(project_ref(project)).name


@env_app.command("add")
def env_add(
    name: str = typer.Argument(..., help="Environment name to add (e.g. dev, stg)"),  # noqa: B008
    project: str | None = typer.Option(  # noqa: B008
        None, "--project", "-p", help=_PROJECT_HELP, autocompletion=complete_projects
    ),
) -> None:
    """Add an empty environment and make it active."""
    with _reporting(f"Failed to add environment '{name}'"):
        store = _store()
        target = Explicit(_env_project(store, project))
        store.add_environment(target, name)
        store.activate_environment(target, name)
    typer.echo(f"Environment '{name}' added and activated in project '{target.name}'.")


def env_remove(
    name: str = typer.Argument(..., help="Environment name to remove", autocompletion=complete_environments),  # noqa: B008
    project: str | None = typer.Option(  # noqa: B008
        None, "--project", "-p", help=_PROJECT_HELP, autocompletion=complete_projects
    ),
) -> None:
    """Remove an environment from a project."""
    with _reporting(f"Failed to remove environment '{name}'"):
        store = _store()
        target = Explicit(_env_project(store, project))
        store.remove_environment(target, name)
    typer.echo(f"Environment '{name}' removed from project '{target.name}'.")


env_app.command("remove")(env_remove)
env_app.command("rm", hidden=True)(env_remove)


def environments_document(store: CommandStore, project: str) -> str:
    """Render every environment of a project as an editable TOML document."""
    target = store.get_project(project)
    doc: dict = {}
    if target.active_environment is not None:
        doc["active_environment"] = target.active_environment
    doc["environments"] = {env.name: {"values": dict(env.values)} for env in target.environments}
    return tomli_w.dumps(doc)


def apply_environments_document(store: CommandStore, project: str, text: str) -> None:
    """Apply an edited environments document.

    Environments named in the document get exactly the listed values; names
    that do not exist yet are created.  ``active_environment`` is applied last.
    """
    try:
        doc = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        _fail(f"Failed to parse edited TOML: {exc}")

    sections = doc.get("environments", {})
    if not isinstance(sections, dict):
        _fail("Failed to parse edited TOML: 'environments' must be a table")
    for env_name, section in sections.items():
        if not isinstance(section, dict) or not isinstance(section.get("values", {}), dict):
            _fail(f"Failed to parse edited TOML: 'environments.{env_name}.values' must be a table")

    target = Explicit(project)
    existing = {env.name for env in store.list_environments(target)}
    for env_name, section in sections.items():
        values = {str(k): str(v) for k, v in section.get("values", {}).items()}
        if env_name not in existing:
            store.add_environment(target, env_name)
        store.set_environment_values(target, env_name, values)

    active = doc.get("active_environment")
    if active:
        store.activate_environment(target, active)


@env_app.command("edit")
def env_edit(
    project: str | None = typer.Option(  # noqa: B008
        None, "--project", "-p", help=_PROJECT_HELP, autocompletion=complete_projects
    ),
) -> None:
    """Edit every environment of a project in $EDITOR."""
    with _reporting("Failed to edit environments"):
        store = _store()
        name = _env_project(store, project)
        edited = shell.edit_text(environments_document(store, name), suffix=".toml")
        apply_environments_document(store, name, edited)
    typer.echo(f"All environments updated for project '{name}'.")


def env_list(
    project: str | None = typer.Option(  # noqa: B008
        None, "--project", "-p", help=_PROJECT_HELP, autocompletion=complete_projects
    ),
) -> None:
    """List environments and their values; the active one is starred."""
    ref = project_ref(project)
    with _reporting("Failed to list environments"):
        store = _store()
        environments = store.list_environments(ref)
        active = store.get_active_environment(ref)
    if not environments:
        typer.echo("No environments.")
        return
    for env in environments:
        line = typer.style(env.name, fg=typer.colors.CYAN, bold=True)
        if env.name == active:
            line += " " + typer.style("*", fg=typer.colors.GREEN)
        typer.echo(line)
        for key, value in env.values.items():
            typer.echo("  " + typer.style(key, fg=typer.colors.BRIGHT_BLACK) + f" = {value}")


env_app.command("list")(env_list)
env_app.command("ls", hidden=True)(env_list)


@env_app.command("switch")
def env_switch(
    name: str = typer.Argument(..., help="Environment name to switch to", autocompletion=complete_environments),  # noqa: B008
    project: str | None = typer.Option(  # noqa: B008
        None, "--project", "-p", help=_PROJECT_HELP, autocompletion=complete_projects
    ),
) -> None:
    """Make an environment active."""
    with _reporting(f"Failed to switch to environment '{name}'"):
        store = _store()
        target = Explicit(_env_project(store, project))
        store.activate_environment(target, name)
    typer.echo(f"Switched to environment '{name}' in project '{target.name}'.")


@env_app.command("clear")
def env_clear(
    project: str | None = typer.Option(  # noqa: B008
        None, "--project", "-p", help=_PROJECT_HELP, autocompletion=complete_projects
    ),
) -> None:
    """Deactivate the active environment so commands show unexpanded."""
    with _reporting("Failed to clear the active environment"):
        store = _store()
        target = Explicit(_env_project(store, project))
        store.deactivate_environment(target)
    typer.echo(f"Active environment cleared in project '{target.name}'.")


@env_app.command("active")
def env_active(
    project: str | None = typer.Option(  # noqa: B008
        None, "--project", "-p", help=_PROJECT_HELP, autocompletion=complete_projects
    ),
) -> None:
    """Show the active environment of a project."""
    with _reporting("Failed to read the active environment"):
        active = _store().get_active_environment(project_ref(project))
    typer.echo(active if active is not None else "No active environment.")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
