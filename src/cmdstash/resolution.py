"""Resolve which project and environment an operation applies to.

Every store operation takes a ``ProjectRef``: ``Explicit(name)`` targets that
project, ``UseActive`` targets the project named in ``Config.active_project``.
There is no fallback search across projects, so two projects may hold
commands with the same name without ambiguity.

The environment follows the same pattern: an explicit name wins, otherwise
the project's ``active_environment``, otherwise no substitution at all.  An
explicit name is matched ignoring case, and a name that matches nothing
means no substitution rather than an error.
"""

import logging
from collections.abc import Iterable

from cmdstash.config import Config
from cmdstash.domain.template import expand
from cmdstash.errors import NoActiveProject, ProjectNotFound
from cmdstash.models import Command, Environment, Explicit, Project, ProjectRef

logger = logging.getLogger(__name__)


def find_project(projects: Iterable[Project], name: str) -> Project:
    """Return the project called ``name`` (case-insensitive)."""
    for project in projects:
        if project.is_named(name):
            return project
    raise ProjectNotFound(name)


def active_project(projects: Iterable[Project], config: Config) -> Project | None:
    """Return the active project, or None if unset or no longer present."""
    if config.active_project is None:
        return None
    try:
        return find_project(projects, config.active_project)
    except ProjectNotFound:
        return None


def resolve_project(projects: list[Project], ref: ProjectRef, config: Config) -> Project:
    """Return the project ``ref`` points at.

    Raises ProjectNotFound for an unknown explicit name and NoActiveProject
    when ``ref`` is UseActive and no valid project is active.
    """
    if isinstance(ref, Explicit):
        return find_project(projects, ref.name)
    project = active_project(projects, config)
    if project is None:
        raise NoActiveProject()
    return project


def resolve_environment(project: Project, name: str | None = None) -> Environment | None:
    """Return the environment to expand with, or None for no substitution.

    An explicit ``name`` is looked up ignoring case; if no environment
    matches, the command is left unexpanded.  Without a name the project's
    active environment is used, if any.
    """
    if name is not None:
        wanted = name.lower()
        env = next((e for e in project.environments if e.name.lower() == wanted), None)
        if env is None:
            logger.debug("No environment '%s' in project '%s'", name, project.name)
        return env
    if project.active_environment is None:
        return None
    return project.find_environment(project.active_environment)


def expand_command(command: Command, environment: Environment | None) -> Command:
    """Return a copy of ``command`` with its body expanded for ``environment``."""
    values = environment.values if environment is not None else None
    return command.model_copy(update={"body": expand(command.body, values)})
