"""Horizontal project and environment indicator bar."""

import re

from textual.app import ComposeResult
from textual.events import Click
from textual.message import Message
from textual.reactive import reactive
from textual.widget import Widget
from textual.widgets import Static

_NO_PROJECT = "no project"


def _tab_id(env: str) -> str:
    """Return a valid Textual widget ID for an environment name."""
    slug = re.sub(r"[^A-Za-z0-9_-]", "-", env)
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    return f"tab-{slug}"


class ContextBar(Widget):
    """A read-only bar showing the active project and its environments.

    Renders as:  webapp ▸  dev  [stg]  prod

    The app calls ``show`` whenever the project, its environments, or the
    active environment change.  Clicking an environment posts
    ``ContextBar.TabClicked``; clicking the project label posts
    ``ContextBar.ProjectClicked``.
    """

    class TabClicked(Message):
        """Posted when the user clicks an environment tab."""

        def __init__(self, env: str) -> None:
            super().__init__()
            self.env = env

    class ProjectClicked(Message):
        """Posted when the user clicks the project label."""

    can_focus = False

    current_env: reactive[str | None] = reactive(None, init=False)

    def compose(self) -> ComposeResult:
        yield Static(f"{_NO_PROJECT} ▸", id="context-project", classes="tab-project")

    def _make_tab(self, env: str) -> Static:
        tab = Static(env, id=_tab_id(env), classes="tab active" if env == self.current_env else "tab")
        tab.data_env = env  # type: ignore[attr-defined]
        return tab

    async def show(self, project: str | None, environments: list[str], active: str | None) -> None:
        """Rebuild the bar for ``project``."""
        self.query_one("#context-project", Static).update(f"{project or _NO_PROJECT} ▸")
        await self.query(".tab").remove()
        self.set_reactive(ContextBar.current_env, active)
        await self.mount(*[self._make_tab(env) for env in environments])

    def watch_current_env(self, env: str | None) -> None:
        """Highlight the active environment tab."""
        tab_id = _tab_id(env) if env else None
        for tab in self.query(".tab"):
            tab.set_class(tab.id == tab_id, "active")

    def on_click(self, event: Click) -> None:
        widget = event.widget
        if widget is None:
            return
        if widget.has_class("tab-project"):
            self.post_message(ContextBar.ProjectClicked())
            return
        env: str | None = getattr(widget, "data_env", None)
        if env is not None:
            self.post_message(ContextBar.TabClicked(env))
