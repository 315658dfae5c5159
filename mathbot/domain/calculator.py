"""Calculator session controllers.

Structure
---------
- InputController: owns the text being typed and decides whether it can be
  submitted.
- AppController: owns the session state, runs the submit protocol against
  the evaluator and notifies listeners with a freshly rendered view after
  every state change.

Single-flight
-------------
Only one evaluation may be outstanding per session. ``submit`` refuses to
start while a request is loading, and every request carries a generation
number; a response whose generation is no longer current is discarded.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Protocol

from mathbot.domain.models import Evaluation, Failure, Idle, Loading, QueryState, SessionState, Success
from mathbot.domain.presenter import ResultPresenter, View
from mathbot.logging import logger
from mathbot.services.evaluator import FALLBACK_ERROR_MESSAGE

Listener = Callable[[View], Awaitable[None]]


class Evaluator(Protocol):
    async def evaluate(self, query: str) -> Evaluation: ...


class SubmitOutcome(str, Enum):
    IGNORED = "ignored"
    BUSY = "busy"
    COMPLETED = "completed"
    DISCARDED = "discarded"


class InputController:
    def __init__(self, *, is_disabled: Callable[[], bool]) -> None:
        self._text = ""
        self._is_disabled = is_disabled

    @property
    def text(self) -> str:
        return self._text

    @property
    def disabled(self) -> bool:
        return self._is_disabled()

    def update(self, text: str) -> bool:
        """Replace the current text; ignored while disabled."""

        if self.disabled:
            return False
        self._text = text
        return True

    def submit(self) -> str | None:
        """Return the trimmed query, or ``None`` if there is nothing to send."""

        if self.disabled:
            return None
        query = self._text.strip()
        return query or None

    def reset(self) -> None:
        self._text = ""


class AppController:
    def __init__(self, evaluator: Evaluator, presenter: ResultPresenter | None = None) -> None:
        self._evaluator = evaluator
        self._presenter = presenter or ResultPresenter()
        self._query: QueryState = Idle()
        self._show_help = False
        self._generation = 0
        self._listeners: list[Listener] = []
        self.input = InputController(is_disabled=lambda: self.is_loading)

    @property
    def state(self) -> SessionState:
        return SessionState(
            input_text=self.input.text,
            query=self._query,
            show_help=self._show_help,
        )

    @property
    def is_loading(self) -> bool:
        return isinstance(self._query, Loading)

    @property
    def presenter(self) -> ResultPresenter:
        return self._presenter

    def view(self) -> View:
        return self._presenter.render(self.state)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def submit(self, listener: Listener | None = None) -> SubmitOutcome:
        """Evaluate the current input.

        ``listener`` receives the views of this request only: the loading view
        and, if the request is still current when it completes, its outcome.
        Subscribers registered with ``subscribe`` see every view.
        """

        if self.is_loading:
            logger.info("submit_rejected", reason="busy", pending=self._query.query)
            return SubmitOutcome.BUSY
        query = self.input.submit()
        if query is None:
            return SubmitOutcome.IGNORED

        self._generation += 1
        pending = Loading(query=query, generation=self._generation)
        self._query = pending
        await self._notify(listener)

        try:
            evaluation = await self._evaluator.evaluate(query)
        except asyncio.CancelledError:
            if self._is_current(pending):
                self._query = Idle()
            raise
        except Exception:
            logger.exception("evaluation_crashed", query=query)
            if self._is_current(pending):
                self._query = Failure(query=query, message=FALLBACK_ERROR_MESSAGE)
                await self._notify(listener)
            raise
        return await self._complete(pending, evaluation, listener)

    async def clear(self) -> bool:
        if self.is_loading:
            return False
        self._query = Idle()
        self.input.reset()
        await self._notify()
        return True

    async def show_help(self) -> None:
        await self._set_help(True)

    async def hide_help(self) -> None:
        await self._set_help(False)

    async def toggle_help(self) -> None:
        await self._set_help(not self._show_help)

    def abandon(self) -> None:
        """Forget any request in flight; its response will be discarded."""

        self._generation += 1
        self._query = Idle()
        self._listeners.clear()

    async def _complete(
        self,
        pending: Loading,
        evaluation: Evaluation,
        listener: Listener | None = None,
    ) -> SubmitOutcome:
        if not self._is_current(pending):
            logger.info(
                "stale_response_discarded",
                query=pending.query,
                generation=pending.generation,
                current_generation=self._generation,
            )
            return SubmitOutcome.DISCARDED
        if evaluation.ok:
            self._query = Success(query=pending.query, answer=evaluation.answer or "")
        else:
            self._query = Failure(query=pending.query, message=evaluation.error or FALLBACK_ERROR_MESSAGE)
        await self._notify(listener)
        return SubmitOutcome.COMPLETED

    def _is_current(self, pending: Loading) -> bool:
        return self._query == pending and pending.generation == self._generation

    async def _set_help(self, value: bool) -> None:
        if self._show_help == value:
            return
        self._show_help = value
        await self._notify()

    async def _notify(self, request_listener: Listener | None = None) -> None:
        view = self.view()
        listeners = list(self._listeners)
        if request_listener is not None:
            listeners.append(request_listener)
        for listener in listeners:
            try:
                await listener(view)
            except Exception:
                logger.warning("view_listener_failed", view=view.kind, exc_info=True)


__all__ = ["AppController", "Evaluator", "InputController", "Listener", "SubmitOutcome"]
