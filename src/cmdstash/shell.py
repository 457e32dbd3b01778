"""Process, editor, and clipboard glue used by the CLI and TUI.

Nothing here touches the store; callers resolve a command first and hand the
expanded result over.
"""

import logging
import os
import shlex
import subprocess
import tempfile
from pathlib import Path

import pyperclip

from cmdstash.constants import DEFAULT_EDITOR, SHELL
from cmdstash.errors import CommandFailed, EditorError, EmptyCommand
from cmdstash.models import Command

logger = logging.getLogger(__name__)


def editor() -> str:
    """Return the user's editor: ``$VISUAL``, then ``$EDITOR``, then vi."""
    return os.getenv("VISUAL") or os.getenv("EDITOR") or DEFAULT_EDITOR


def edit_text(initial: str = "", suffix: str = ".sh") -> str:
    """Open ``initial`` in the user's editor and return the saved text.

    The text round-trips through a temporary file that is always removed.
    """
    with tempfile.NamedTemporaryFile(mode="w", suffix=suffix, prefix="cmdstash-", delete=False) as f:
        f.write(initial)
        tmp = Path(f.name)
    try:
        cmd = editor()
        result = subprocess.run([*shlex.split(cmd), str(tmp)])
        if result.returncode != 0:
            raise EditorError(f"Editor '{cmd}' exited with status {result.returncode}")
        return tmp.read_text()
    finally:
        tmp.unlink(missing_ok=True)


def run_command(command: Command) -> None:
    """Run an expanded command through ``sh -c`` with inherited stdio.

    Runs in ``command.working_dir`` when set, otherwise the current
    directory.  Raises CommandFailed on a non-zero exit status.
    """
    if not command.body.strip():
        raise EmptyCommand(command.name)
    cwd = command.working_dir or None
    logger.debug("Running '%s' in %s", command.name, cwd or os.getcwd())
    result = subprocess.run([SHELL, "-c", command.body], cwd=cwd)
    if result.returncode != 0:
        raise CommandFailed(result.returncode)


def copy_to_clipboard(text: str) -> None:
    """Put ``text`` on the system clipboard."""
    pyperclip.copy(text)
