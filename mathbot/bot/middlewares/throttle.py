"""Simple per-user throttle to prevent rapid-fire requests."""

from __future__ import annotations

import time
from collections import defaultdict, deque
from typing import Any, Awaitable, Callable, Deque, Dict

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject

from mathbot.config import BotSettings, get_settings
from mathbot.i18n import I18nService
from mathbot.logging import logger


class ThrottleMiddleware(BaseMiddleware):
    def __init__(self, settings: BotSettings | None = None, i18n: I18nService | None = None) -> None:
        self.settings = settings or get_settings()
        self.i18n = i18n or I18nService(default_locale=self.settings.default_language)
        self.window_seconds = self.settings.request_limit.interval_seconds
        self.max_requests = self.settings.request_limit.max_requests
        self._events: Dict[int, Deque[float]] = defaultdict(deque)

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        from_user = self._extract_user(event)
        if from_user is None:
            return await handler(event, data)

        if self.max_requests <= 0:
            return await handler(event, data)

        now = time.monotonic()
        bucket = self._events[from_user.id]

        while bucket and now - bucket[0] > self.window_seconds:
            bucket.popleft()

        if len(bucket) >= self.max_requests:
            logger.info("update_throttled", user_id=from_user.id)
            text = self.i18n.gettext("chat.throttled", locale=getattr(from_user, "language_code", None))
            await self._notify_limit(event, text)
            return None

        bucket.append(now)
        return await handler(event, data)

    @staticmethod
    def _extract_user(event: TelegramObject) -> Any | None:
        if isinstance(event, (Message, CallbackQuery)):
            return event.from_user
        return None

    @staticmethod
    async def _notify_limit(event: TelegramObject, text: str) -> None:
        if isinstance(event, Message):
            await event.answer(text, parse_mode=None)
        elif isinstance(event, CallbackQuery):
            await event.answer(text)


__all__ = ["ThrottleMiddleware"]
