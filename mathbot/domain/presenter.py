"""Map calculator session state to renderable views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from mathbot.domain.models import Failure, Idle, Loading, QueryState, SessionState, Success
from mathbot.i18n import I18nService

ViewKind = Literal["loading", "error", "idle", "result", "help"]
ViewAction = Literal["clear", "help", "back"]


@dataclass(frozen=True, slots=True)
class View:
    kind: ViewKind
    text: str
    query: str | None = None
    answer: str | None = None
    error: str | None = None
    actions: tuple[ViewAction, ...] = ()


class ResultPresenter:
    """Pure state-to-view mapping; holds no session state of its own."""

    def __init__(self, i18n: I18nService | None = None, *, locale: str | None = None) -> None:
        self.i18n = i18n or I18nService()
        self.locale = locale

    def render(self, state: SessionState) -> View:
        if state.show_help:
            return self.render_help()
        return self.render_query(state.query)

    def render_query(self, query: QueryState) -> View:
        if isinstance(query, Loading):
            return View(kind="loading", text=self.text("panel.loading"))
        if isinstance(query, Failure):
            return View(kind="error", text=query.message, error=query.message, actions=("clear",))
        if isinstance(query, Success):
            return View(
                kind="result",
                text=self.text("panel.result", query=query.query, answer=query.answer),
                query=query.query,
                answer=query.answer,
                actions=("clear",),
            )
        if isinstance(query, Idle):
            return View(kind="idle", text=self.text("panel.idle"), actions=("help",))
        raise TypeError(f"Unsupported query state: {query!r}")

    def render_help(self) -> View:
        return View(kind="help", text=self.text("help.body"), actions=("back",))

    def label(self, action: ViewAction) -> str:
        return self.text(f"button.{action}")

    def text(self, key: str, **kwargs) -> str:
        return self.i18n.gettext(key, locale=self.locale, **kwargs)


__all__ = ["ResultPresenter", "View", "ViewAction", "ViewKind"]
