"""Reading and writing project files.

Each project lives in ``<home>/projects/<name>.toml``.  Commands are written
sorted by name, and every body is given a trailing newline so it is stored as
a multi-line TOML string rather than an inline one.  Multi-line TOML strings
cannot hold a CRLF pair, so a project with one in any body or value is
written with escaped single-line strings instead.  A file that fails to
parse or validate aborts the whole load with StorageError.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import ValidationError

from cmdstash.constants import PROJECT_SUFFIX, PROJECTS_DIRNAME
from cmdstash.errors import StorageError
from cmdstash.models import Project

logger = logging.getLogger(__name__)


def with_trailing_newline(body: str) -> str:
    return body if body.endswith("\n") else body + "\n"


def serialize_project(project: Project) -> dict[str, Any]:
    """Return the on-disk document for a project."""
    commands = sorted(project.commands, key=lambda c: c.name)
    doc: dict[str, Any] = {"name": project.name}
    if project.path is not None:
        doc["path"] = project.path
    if project.active_environment is not None:
        doc["active_environment"] = project.active_environment
    doc["commands"] = [
        {
            **cmd.model_dump(exclude_none=True, exclude={"body"}),
            "body": with_trailing_newline(cmd.body),
        }
        for cmd in commands
    ]
    doc["environments"] = [env.model_dump() for env in project.environments]
    return doc


def has_crlf(project: Project) -> bool:
    """Return True if any body or environment value holds a CRLF pair."""
    if any("\r\n" in cmd.body for cmd in project.commands):
        return True
    return any("\r\n" in v for env in project.environments for v in env.values.values())


class ProjectStorage:
    """Persists projects as one TOML file each under ``<home>/projects``.

    Args:
        home: The data directory (see ``cmdstash.config.default_home``).
    """

    def __init__(self, home: Path) -> None:
        self._dir = home / PROJECTS_DIRNAME

    @property
    def directory(self) -> Path:
        return self._dir

    def path_for(self, name: str) -> Path:
        return self._dir / f"{name}{PROJECT_SUFFIX}"

    def load_all(self) -> list[Project]:
        """Load every ``*.toml`` file in the projects directory.

        Files are read in name order.  A project whose ``name`` is empty takes
        the file stem as its name.
        """
        if not self._dir.exists():
            return []

        projects: list[Project] = []
        for path in sorted(self._dir.iterdir()):
            if path.suffix != PROJECT_SUFFIX or not path.is_file():
                continue
            project = self._load_file(path)
            if not project.name:
                project.name = path.stem
            projects.append(project)
        logger.debug("Loaded %d project(s) from %s", len(projects), self._dir)
        return projects

    def save(self, project: Project) -> None:
        """Write a project to its file, creating the directory as needed."""
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(project.name)
        doc = serialize_project(project)
        with path.open("wb") as f:
            tomli_w.dump(doc, f, multiline_strings=not has_crlf(project))
        logger.debug("Wrote %s", path)

    def delete(self, name: str) -> None:
        """Remove a project's file. No-op if it does not exist."""
        path = self.path_for(name)
        path.unlink(missing_ok=True)
        logger.debug("Removed %s", path)

    def _load_file(self, path: Path) -> Project:
        try:
            with path.open("rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise StorageError(f"{path.name} is not valid TOML: {exc}") from exc
        try:
            return Project.model_validate(raw)
        except ValidationError as exc:
            raise StorageError(f"Invalid project file {path.name}: {exc}") from exc
