"""Application-wide constants."""

from pathlib import Path

APP_TITLE = "cmdstash"

HOME_ENV_VAR = "CMDSTASH_HOME"
LOG_LEVEL_ENV_VAR = "CMDSTASH_LOG_LEVEL"
DEFAULT_HOME = Path("~/.cmdstash").expanduser()

CONFIG_FILENAME = "config.toml"
THEME_FILENAME = "theme.json"
README_FILENAME = "README.md"
PROJECTS_DIRNAME = "projects"
PROJECT_SUFFIX = ".toml"

DEFAULT_EDITOR = "vi"
SHELL = "sh"

TABLE_COLUMNS = ("#", "Name", "Tag", "Command")

HELP_TEXT = """\
 Navigation
 ──────────────────────────────
 j / ↓        Move down
 k / ↑        Move up
 g g          Jump to top
 G            Jump to bottom

 Commands
 ──────────────────────────────
 i            Edit selected command
 o            Add new command
 r            Rename selected command
 d d          Delete selected command
 y            Copy expanded command

 Context
 ──────────────────────────────
 p            Switch project
 e            Cycle environment

 Search
 ──────────────────────────────
 /            Fuzzy search
 Escape       Clear search / close

 General
 ──────────────────────────────
 ?            Toggle this help
 q            Quit\
"""
