"""Config file loading, validation, and persistence.

Layout on disk (default ``~/.cmdstash``, overridable with ``CMDSTASH_HOME``):

    config.toml           active_project = "webapp"
    theme.json            {"theme": "nord"}
    projects/webapp.toml  one file per project, see ``cmdstash.storage``

The config file is never cached: every caller that needs the active project
loads it again so edits made by another process are seen immediately.
"""

import json
import logging
import os
import tomllib
from pathlib import Path

import tomli_w
from pydantic import BaseModel, ValidationError

from cmdstash.constants import (
    CONFIG_FILENAME,
    DEFAULT_HOME,
    HOME_ENV_VAR,
    PROJECTS_DIRNAME,
    README_FILENAME,
    THEME_FILENAME,
)

logger = logging.getLogger(__name__)

_README_CONTENT = """\
# cmdstash data directory

- `config.toml` holds the active project:

  ```toml
  active_project = "webapp"
  ```

- `projects/<name>.toml` holds one project each:

  ```toml
  name = "webapp"
  active_environment = "dev"

  [[commands]]
  name = "deploy"
  tag = "release"
  body = \"\"\"
  kubectl --context {{cluster}} apply -f k8s/
  \"\"\"

  [[environments]]
  name = "dev"

  [environments.values]
  cluster = "dev-eu"
  ```

Placeholders written as `{{key}}` are filled in from the active environment.
"""


class Config(BaseModel):
    """Settings shared by every project."""

    active_project: str | None = None


class ConfigError(Exception):
    """Raised when config.toml exists but cannot be parsed or validated."""


def default_home() -> Path:
    """Return the data directory: ``$CMDSTASH_HOME`` or ``~/.cmdstash``."""
    override = os.getenv(HOME_ENV_VAR)
    return Path(override).expanduser() if override else DEFAULT_HOME


def config_path(home: Path) -> Path:
    return home / CONFIG_FILENAME


def load_config(home: Path) -> Config:
    """Load and validate config.toml under ``home``.

    Returns a default Config if the file is missing or blank.  Raises
    ConfigError if the file exists but is malformed.
    """
    path = config_path(home)
    if not path.exists():
        return Config()
    try:
        with path.open("rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{CONFIG_FILENAME} is not valid TOML: {exc}") from exc

    try:
        return Config.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid {CONFIG_FILENAME}: {exc}") from exc


def save_config(home: Path, config: Config) -> None:
    """Persist config to disk, creating directories as needed."""
    path = config_path(home)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        tomli_w.dump(config.model_dump(exclude_none=True), f)
    logger.debug("Wrote %s (active_project=%s)", path, config.active_project)


def bootstrap(home: Path) -> bool:
    """Create the data directory, an empty config.toml, and a README.

    Returns True if the directory was created by this call.
    """
    if home.exists():
        (home / PROJECTS_DIRNAME).mkdir(parents=True, exist_ok=True)
        return False
    (home / PROJECTS_DIRNAME).mkdir(parents=True, exist_ok=True)
    config_path(home).write_text("")
    (home / README_FILENAME).write_text(_README_CONTENT)
    logger.info("Initialised data directory at %s", home)
    return True


def load_theme(home: Path) -> str | None:
    """Load the saved theme preference.

    Returns the theme name if set, None otherwise.
    """
    path = home / THEME_FILENAME
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text())
        return data.get("theme")
    except (json.JSONDecodeError, AttributeError):
        return None


def save_theme(home: Path, theme: str) -> None:
    """Save the theme preference to disk."""
    path = home / THEME_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"theme": theme}, indent=2))
