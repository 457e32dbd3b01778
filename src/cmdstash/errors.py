"""Exceptions raised by the command store and its collaborators."""


class CmdstashError(Exception):
    """Base class for every error the core raises on purpose."""


class NotFound(CmdstashError):
    """Raised when a command, project, or environment does not exist."""

    kind = "Item"

    def __init__(self, name: str) -> None:
        super().__init__(f"{self.kind} not found: {name}")
        self.name = name


class CommandNotFound(NotFound):
    kind = "Command"


class ProjectNotFound(NotFound):
    kind = "Project"


class EnvironmentNotFound(NotFound):
    kind = "Environment"

    def __init__(self, name: str, project: str) -> None:
        super().__init__(name)
        self.project = project
        self.args = (f"Environment '{name}' not found in project '{project}'",)


class AlreadyExists(CmdstashError):
    """Raised when a create or rename would collide with an existing name."""

    kind = "Item"

    def __init__(self, name: str) -> None:
        super().__init__(f"{self.kind} already exists: {name}")
        self.name = name


class CommandExists(AlreadyExists):
    kind = "Command"


class ProjectExists(AlreadyExists):
    kind = "Project"


class EnvironmentExists(AlreadyExists):
    kind = "Environment"

    def __init__(self, name: str, project: str) -> None:
        super().__init__(name)
        self.project = project
        self.args = (f"Environment '{name}' already exists in project '{project}'",)


class NoActiveProject(CmdstashError):
    """Raised when an operation needs a project and none is given or active."""

    def __init__(self) -> None:
        super().__init__("No active project set")


class CommandFailed(CmdstashError):
    """Raised when an executed command exits with a non-zero status."""

    def __init__(self, exit_code: int) -> None:
        super().__init__(f"Command execution failed with status: {exit_code}")
        self.exit_code = exit_code


class UnresolvedPlaceholders(CmdstashError):
    """Raised by strict expansion when placeholders have no value."""

    def __init__(self, keys: list[str]) -> None:
        super().__init__(f"Unresolved placeholders: {', '.join(keys)}")
        self.keys = keys


class StorageError(CmdstashError):
    """Raised when a project file exists but cannot be parsed or validated."""


class EmptyCommand(CmdstashError):
    """Raised when asked to run a command whose body is blank."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Command is empty: {name}")
        self.name = name


class EditorError(CmdstashError):
    """Raised when the external editor exits with a non-zero status."""


class InvalidProjectName(CmdstashError):
    """Raised when a project name cannot be used as a file name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Invalid project name: {name!r}")
        self.name = name
