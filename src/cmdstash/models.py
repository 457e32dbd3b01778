"""Domain models."""

from dataclasses import dataclass

from pydantic import BaseModel, Field


class Command(BaseModel):
    """A saved shell command.

    ``body`` may contain ``{{key}}`` placeholders that are filled in from the
    owning project's environment when the command is listed or run.
    """

    name: str
    body: str
    working_dir: str | None = None
    tag: str = ""

    def matches_tag(self, tag: str | None) -> bool:
        """Return True if no tag filter is given or the tags are equal."""
        return tag is None or self.tag == tag


class Environment(BaseModel):
    """A named set of placeholder values, e.g. ``dev`` or ``stg``."""

    name: str
    values: dict[str, str] = Field(default_factory=dict)


class Project(BaseModel):
    """A named collection of commands and the environments that fill them in."""

    name: str = ""
    path: str | None = None
    commands: list[Command] = Field(default_factory=list)
    environments: list[Environment] = Field(default_factory=list)
    active_environment: str | None = None

    def find_command(self, name: str) -> Command | None:
        return next((c for c in self.commands if c.name == name), None)

    def find_environment(self, name: str) -> Environment | None:
        return next((e for e in self.environments if e.name == name), None)

    def is_named(self, name: str) -> bool:
        """Project names compare case-insensitively."""
        return self.name.lower() == name.lower()


@dataclass(frozen=True)
class Explicit:
    """Target the project with this name."""

    name: str


@dataclass(frozen=True)
class UseActive:
    """Target whichever project is currently active."""


ProjectRef = Explicit | UseActive

USE_ACTIVE = UseActive()


def project_ref(name: str | None) -> ProjectRef:
    """Map an optional project name (e.g. a CLI option) to a ProjectRef."""
    return Explicit(name) if name else USE_ACTIVE


@dataclass
class SearchHit:
    """A command matched by a search query, with its owning project."""

    project: str
    command: Command
    score: int
