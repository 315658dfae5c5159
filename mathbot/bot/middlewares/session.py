"""Middleware that injects the chat's calculator session per update."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict

import structlog
from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject

from mathbot.domain.sessions import SessionRegistry


class SessionMiddleware(BaseMiddleware):
    def __init__(self, registry: SessionRegistry) -> None:
        super().__init__()
        self.registry = registry

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        chat_id = self._extract_chat_id(event)
        if chat_id is None:
            return await handler(event, data)

        from_user = getattr(event, "from_user", None)
        locale = getattr(from_user, "language_code", None)
        data["sessions"] = self.registry
        data["calculator"] = self.registry.get(chat_id, locale=locale)
        with structlog.contextvars.bound_contextvars(chat_id=chat_id):
            return await handler(event, data)

    @staticmethod
    def _extract_chat_id(event: TelegramObject) -> int | None:
        if isinstance(event, Message):
            return event.chat.id
        if isinstance(event, CallbackQuery) and event.message is not None:
            return event.message.chat.id
        return None
