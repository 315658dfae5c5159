"""In-memory registry of calculator sessions keyed by chat."""

from __future__ import annotations

import time
from typing import Callable

from mathbot.domain.calculator import AppController
from mathbot.logging import logger

ControllerFactory = Callable[[str | None], AppController]


class SessionRegistry:
    """Hold one AppController per chat while the chat stays active.

    Nothing is persisted; a restart starts every chat from the idle view.
    Sessions untouched for ``idle_ttl_seconds`` are dropped on the next lookup,
    unless a request is still loading for them.
    """

    def __init__(self, factory: ControllerFactory, *, idle_ttl_seconds: float | None = None) -> None:
        self._factory = factory
        self._idle_ttl_seconds = idle_ttl_seconds
        self._sessions: dict[int, AppController] = {}
        self._last_seen: dict[int, float] = {}

    def get(self, chat_id: int, *, locale: str | None = None) -> AppController:
        now = time.monotonic()
        self._evict_idle(now, keep=chat_id)
        controller = self._sessions.get(chat_id)
        if controller is None:
            controller = self._factory(locale)
            self._sessions[chat_id] = controller
            logger.info("session_created", chat_id=chat_id, locale=locale)
        self._last_seen[chat_id] = now
        return controller

    def discard(self, chat_id: int) -> bool:
        controller = self._pop(chat_id)
        if controller is None:
            return False
        logger.info("session_discarded", chat_id=chat_id)
        return True

    def _evict_idle(self, now: float, *, keep: int) -> None:
        if self._idle_ttl_seconds is None:
            return
        expired = [
            chat_id
            for chat_id, seen in self._last_seen.items()
            if chat_id != keep
            and now - seen >= self._idle_ttl_seconds
            and not self._sessions[chat_id].is_loading
        ]
        for chat_id in expired:
            idle_seconds = now - self._last_seen[chat_id]
            self._pop(chat_id)
            logger.info("session_expired", chat_id=chat_id, idle_seconds=round(idle_seconds))

    def _pop(self, chat_id: int) -> AppController | None:
        self._last_seen.pop(chat_id, None)
        controller = self._sessions.pop(chat_id, None)
        if controller is not None:
            controller.abandon()
        return controller

    def __contains__(self, chat_id: object) -> bool:
        return chat_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


__all__ = ["ControllerFactory", "SessionRegistry"]
