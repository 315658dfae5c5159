"""Log unhandled handler errors and notify the administrator."""

from __future__ import annotations

import traceback

from aiogram import Bot
from aiogram.dispatcher.event.bases import UNHANDLED
from aiogram.types import ErrorEvent, Update

from mathbot.bot.utils.telegram import bot_send_with_retry
from mathbot.config import BotSettings
from mathbot.logging import logger

TRACEBACK_CHAR_LIMIT = 1800
INPUT_CHAR_LIMIT = 300


class ErrorMonitor:
    """Async callable plugged into aiogram error observer."""

    def __init__(self, settings: BotSettings) -> None:
        self._settings = settings

    async def __call__(self, event: ErrorEvent, bot: Bot):
        return await self.handle_error(event, bot)

    async def handle_error(self, event: ErrorEvent, bot: Bot):
        update_id = getattr(event.update, "update_id", None)
        logger.error(
            "bot_error_captured",
            exception_type=event.exception.__class__.__name__,
            exception=str(event.exception),
            update_id=update_id,
        )

        admin_id = self._settings.admin_telegram_id
        if admin_id is None:
            return UNHANDLED

        try:
            await bot_send_with_retry(
                bot,
                chat_id=admin_id,
                text=self._build_message(event),
                parse_mode=None,
            )
        except Exception:
            logger.exception("error_monitor_notification_failed", update_id=update_id)
        return UNHANDLED

    def _build_message(self, event: ErrorEvent) -> str:
        exception = event.exception
        chat_id, user_input = self._describe_update(event.update)
        lines = [
            "BOT ERROR DETECTED",
            f"Environment: {self._settings.environment}",
            f"Exception: {exception.__class__.__name__}: {exception}",
            f"Update ID: {getattr(event.update, 'update_id', 'unknown')}",
            f"Chat: {chat_id}",
        ]
        if user_input:
            lines.extend(["", "Input:", user_input])
        trace = self._format_traceback(exception)
        if trace:
            lines.extend(["", "Traceback:", trace])
        return "\n".join(lines).strip()

    def _describe_update(self, update: Update | None) -> tuple[str, str]:
        if update is None:
            return "unknown", ""
        if update.message is not None:
            text = update.message.text or update.message.caption or ""
            return str(update.message.chat.id), self._truncate(text, INPUT_CHAR_LIMIT)
        if update.callback_query is not None:
            message = update.callback_query.message
            chat_id = str(message.chat.id) if message is not None else "unknown"
            return chat_id, f"callback: {update.callback_query.data or ''}"
        return "unknown", ""

    def _format_traceback(self, exception: Exception) -> str:
        trace = "".join(traceback.format_exception(exception.__class__, exception, exception.__traceback__))
        return self._truncate(trace, TRACEBACK_CHAR_LIMIT)

    @staticmethod
    def _truncate(value: str, limit: int) -> str:
        value = value.strip()
        if len(value) <= limit:
            return value
        return f"{value[: limit - 15].rstrip()}\n...[truncated]"


__all__ = ["ErrorMonitor"]
