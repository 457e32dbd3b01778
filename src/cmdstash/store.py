"""The command store: every project, command, and environment in one place.

``CommandStore`` loads all project files once on construction and writes the
affected project file back after each mutation.  The active project lives in
``config.toml`` and is re-read every time it is needed; a pointer to a
project that no longer exists is cleared on read.
"""

import logging
from pathlib import Path

from cmdstash.config import Config, bootstrap, default_home, load_config, save_config
from cmdstash.domain import search as fuzzy
from cmdstash.domain.template import expand_strict
from cmdstash.errors import (
    CommandExists,
    CommandNotFound,
    EnvironmentExists,
    EnvironmentNotFound,
    InvalidProjectName,
    ProjectExists,
    UnresolvedPlaceholders,
)
from cmdstash.models import (
    USE_ACTIVE,
    Command,
    Environment,
    Explicit,
    Project,
    ProjectRef,
    SearchHit,
)
from cmdstash.resolution import (
    active_project,
    expand_command,
    find_project,
    resolve_environment,
    resolve_project,
)
from cmdstash.storage import ProjectStorage

logger = logging.getLogger(__name__)


class CommandStore:
    """In-memory view of all projects, written through to disk on change.

    Args:
        home: Data directory. Defaults to ``$CMDSTASH_HOME`` or ``~/.cmdstash``.
    """

    def __init__(self, home: Path | None = None) -> None:
        self._home = home if home is not None else default_home()
        self._storage = ProjectStorage(self._home)
        self.projects: list[Project] = self._storage.load_all()

    @classmethod
    def open(cls, home: Path | None = None) -> "CommandStore":
        """Create the data directory if needed, then load it."""
        home = home if home is not None else default_home()
        bootstrap(home)
        return cls(home)

    @property
    def home(self) -> Path:
        return self._home

    # ------------------------------------------------------------------
    # Active project
    # ------------------------------------------------------------------

    def load_config(self) -> Config:
        """Read config.toml, clearing the active project if it is stale."""
        config = load_config(self._home)
        if config.active_project is not None and active_project(self.projects, config) is None:
            logger.info("Active project '%s' no longer exists; clearing it", config.active_project)
            config.active_project = None
            save_config(self._home, config)
        return config

    def active_project_name(self) -> str | None:
        """Return the stored name of the active project, if any."""
        project = active_project(self.projects, self.load_config())
        return project.name if project is not None else None

    def set_active_project(self, name: str) -> None:
        project = find_project(self.projects, name)
        config = load_config(self._home)
        config.active_project = project.name
        save_config(self._home, config)
        logger.info("Active project set to '%s'", project.name)

    def clear_active_project(self) -> None:
        config = load_config(self._home)
        config.active_project = None
        save_config(self._home, config)
        logger.info("Active project cleared")

    def resolve(self, ref: ProjectRef = USE_ACTIVE) -> Project:
        """Return the project ``ref`` points at (see ``cmdstash.resolution``)."""
        if isinstance(ref, Explicit):
            return find_project(self.projects, ref.name)
        return resolve_project(self.projects, ref, self.load_config())

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def get_project(self, name: str) -> Project:
        return find_project(self.projects, name)

    def create_project(self, name: str, path: str | None = None) -> Project:
        """Create and persist an empty project.

        The name becomes the file name, so it may not be blank, "." or "..",
        or contain a path separator.
        """
        if not name.strip() or name in (".", "..") or any(sep in name for sep in "/\\"):
            raise InvalidProjectName(name)
        if any(p.is_named(name) for p in self.projects):
            raise ProjectExists(name)
        project = Project(name=name, path=path)
        self._storage.save(project)
        self.projects.append(project)
        logger.info("Created project '%s'", name)
        return project

    def delete_project(self, name: str) -> None:
        """Remove a project, its file, and the active pointer if it matched."""
        project = find_project(self.projects, name)
        self.projects.remove(project)
        self._storage.delete(project.name)

        config = load_config(self._home)
        if config.active_project is not None and project.is_named(config.active_project):
            config.active_project = None
            save_config(self._home, config)
        logger.info("Deleted project '%s'", project.name)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def add_command(self, ref: ProjectRef, command: Command) -> Project:
        """Insert ``command`` into the resolved project.

        Returns the project the command was added to.
        """
        project = self.resolve(ref)
        if project.find_command(command.name) is not None:
            raise CommandExists(command.name)
        project.commands.append(command.model_copy())
        self._storage.save(project)
        logger.info("Added command '%s' to project '%s'", command.name, project.name)
        return project

    def remove_command(self, name: str, ref: ProjectRef = USE_ACTIVE) -> None:
        project = self.resolve(ref)
        command = self._require_command(project, name)
        project.commands.remove(command)
        self._storage.save(project)
        logger.info("Removed command '%s' from project '%s'", name, project.name)

    def rename_command(self, old_name: str, new_name: str) -> None:
        """Rename a command in the active project."""
        project = self.resolve(USE_ACTIVE)
        command = self._require_command(project, old_name)
        if project.find_command(new_name) is not None:
            raise CommandExists(new_name)
        command.name = new_name
        self._storage.save(project)
        logger.info("Renamed command '%s' to '%s' in '%s'", old_name, new_name, project.name)

    def update_command_body(self, name: str, new_body: str) -> str:
        """Replace a command's body in the active project; return the old body."""
        project = self.resolve(USE_ACTIVE)
        command = self._require_command(project, name)
        previous = command.body
        command.body = new_body
        self._storage.save(project)
        logger.info("Updated command '%s' in project '%s'", name, project.name)
        return previous

    def get_command(self, name: str, ref: ProjectRef = USE_ACTIVE) -> Command:
        """Return the stored (unexpanded) command."""
        return self._require_command(self.resolve(ref), name)

    def resolve_command(
        self,
        name: str,
        ref: ProjectRef = USE_ACTIVE,
        environment: str | None = None,
    ) -> Command:
        """Return the command with placeholders expanded, ready to run or copy."""
        project = self.resolve(ref)
        command = self._require_command(project, name)
        return expand_command(command, resolve_environment(project, environment))

    def missing_placeholders(
        self,
        name: str,
        ref: ProjectRef = USE_ACTIVE,
        environment: str | None = None,
    ) -> list[str]:
        """Return the placeholder keys the resolved environment has no value for."""
        project = self.resolve(ref)
        command = self._require_command(project, name)
        env = resolve_environment(project, environment)
        try:
            expand_strict(command.body, env.values if env is not None else {})
        except UnresolvedPlaceholders as exc:
            return exc.keys
        return []

    def list_commands(
        self,
        ref: ProjectRef = USE_ACTIVE,
        environment: str | None = None,
    ) -> list[Command]:
        """Return every command in the project, expanded and sorted by name."""
        project = self.resolve(ref)
        env = resolve_environment(project, environment)
        expanded = [expand_command(c, env) for c in project.commands]
        return sorted(expanded, key=lambda c: c.name)

    def list_by_tag(
        self,
        ref: ProjectRef,
        tag: str,
        environment: str | None = None,
    ) -> list[Command]:
        return [c for c in self.list_commands(ref, environment) if c.tag == tag]

    def _require_command(self, project: Project, name: str) -> Command:
        command = project.find_command(name)
        if command is None:
            raise CommandNotFound(name)
        return command

    # ------------------------------------------------------------------
    # Environments
    # ------------------------------------------------------------------

    def list_environments(self, ref: ProjectRef = USE_ACTIVE) -> list[Environment]:
        return list(self.resolve(ref).environments)

    def get_active_environment(self, ref: ProjectRef = USE_ACTIVE) -> str | None:
        return self.resolve(ref).active_environment

    def add_environment(self, ref: ProjectRef, name: str) -> Project:
        """Add an empty environment to the resolved project."""
        project = self.resolve(ref)
        if project.find_environment(name) is not None:
            raise EnvironmentExists(name, project.name)
        project.environments.append(Environment(name=name))
        self._storage.save(project)
        logger.info("Added environment '%s' to project '%s'", name, project.name)
        return project

    def remove_environment(self, ref: ProjectRef, name: str) -> None:
        """Remove an environment, deactivating it first if it was active."""
        project = self.resolve(ref)
        env = self._require_environment(project, name)
        project.environments.remove(env)
        if project.active_environment == name:
            project.active_environment = None
        self._storage.save(project)
        logger.info("Removed environment '%s' from project '%s'", name, project.name)

    def set_environment_values(self, ref: ProjectRef, name: str, values: dict[str, str]) -> None:
        """Replace every key/value pair of an environment."""
        project = self.resolve(ref)
        env = self._require_environment(project, name)
        env.values = dict(values)
        self._storage.save(project)
        logger.info("Updated %d value(s) in environment '%s'", len(values), name)

    def activate_environment(self, ref: ProjectRef, name: str) -> None:
        project = self.resolve(ref)
        self._require_environment(project, name)
        project.active_environment = name
        self._storage.save(project)
        logger.info("Activated environment '%s' in project '%s'", name, project.name)

    def deactivate_environment(self, ref: ProjectRef = USE_ACTIVE) -> None:
        project = self.resolve(ref)
        project.active_environment = None
        self._storage.save(project)
        logger.info("Deactivated environment in project '%s'", project.name)

    def _require_environment(self, project: Project, name: str) -> Environment:
        env = project.find_environment(name)
        if env is None:
            raise EnvironmentNotFound(name, project.name)
        return env

    # ------------------------------------------------------------------
    # Suggestions (shell completion) and search
    # ------------------------------------------------------------------

    def suggest_command_names(self) -> list[str]:
        """Return the command names of the active project, if one is set."""
        project = active_project(self.projects, self.load_config())
        if project is None:
            return []
        return sorted(c.name for c in project.commands)

    def suggest_projects(self) -> list[str]:
        return [p.name for p in self.projects]

    def suggest_tags(self, project: str | None = None) -> list[str]:
        """Return the distinct non-empty tags, optionally for one project."""
        projects = [find_project(self.projects, project)] if project else self.projects
        return sorted({c.tag for p in projects for c in p.commands if c.tag})

    def suggest_environments(self, project: str | None = None) -> list[str]:
        """Return the distinct environment names, optionally for one project."""
        projects = [find_project(self.projects, project)] if project else self.projects
        return sorted({e.name for p in projects for e in p.environments})

    def search(self, query: str, ref: ProjectRef | None = None) -> list[SearchHit]:
        """Fuzzy-search command names and bodies, best match first.

        Searches every project unless ``ref`` narrows it to one.
        """
        projects = self.projects if ref is None else [self.resolve(ref)]
        candidates = ((p.name, c) for p in projects for c in p.commands)
        return fuzzy.rank(candidates, query)
