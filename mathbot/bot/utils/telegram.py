"""Telegram sending helpers with retry support."""

from __future__ import annotations

from typing import Any

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest, TelegramNetworkError, TelegramServerError
from aiogram.types import Message

from mathbot.bot.utils.keyboards import build_keyboard
from mathbot.domain.presenter import ResultPresenter, View
from mathbot.logging import logger
from mathbot.utils.retry import retry_async

TELEGRAM_SEND_MAX_ATTEMPTS = 3
TELEGRAM_SEND_BASE_DELAY = 0.3
TELEGRAM_RETRYABLE_ERRORS = (TelegramNetworkError, TelegramServerError)
# Telegram messages are limited to 4096 characters.
TELEGRAM_MESSAGE_LIMIT = 4000


def fit_message(text: str) -> str:
    if len(text) <= TELEGRAM_MESSAGE_LIMIT:
        return text
    return f"{text[: TELEGRAM_MESSAGE_LIMIT - 15].rstrip()}\n...[truncated]"


async def answer_with_retry(message: Message, text: str, **kwargs: Any) -> Any:
    """Send a reply with retry/backoff."""

    async def _send():
        return await message.answer(fit_message(text), **kwargs)

    return await retry_async(
        _send,
        max_attempts=TELEGRAM_SEND_MAX_ATTEMPTS,
        base_delay=TELEGRAM_SEND_BASE_DELAY,
        retry_on=TELEGRAM_RETRYABLE_ERRORS,
        logger=logger,
        operation_name="telegram_answer",
    )


async def edit_with_retry(message: Message, text: str, **kwargs: Any) -> Any:
    """Edit a previously sent message in place; unchanged content is not an error."""

    async def _edit():
        return await message.edit_text(fit_message(text), **kwargs)

    try:
        return await retry_async(
            _edit,
            max_attempts=TELEGRAM_SEND_MAX_ATTEMPTS,
            base_delay=TELEGRAM_SEND_BASE_DELAY,
            retry_on=TELEGRAM_RETRYABLE_ERRORS,
            logger=logger,
            operation_name="telegram_edit_text",
        )
    except TelegramBadRequest as exc:
        if "message is not modified" in str(exc):
            return None
        raise


async def bot_send_with_retry(bot: Bot, *, chat_id: int, text: str, **kwargs: Any) -> Any:
    """Send a message via Bot with retry/backoff."""

    async def _send():
        return await bot.send_message(chat_id=chat_id, text=fit_message(text), **kwargs)

    return await retry_async(
        _send,
        max_attempts=TELEGRAM_SEND_MAX_ATTEMPTS,
        base_delay=TELEGRAM_SEND_BASE_DELAY,
        retry_on=TELEGRAM_RETRYABLE_ERRORS,
        logger=logger,
        operation_name="telegram_send_message",
    )


class PanelMessage:
    """A chat message showing the calculator view, edited in place on every change."""

    def __init__(self, origin: Message, presenter: ResultPresenter, *, sent: Message | None = None) -> None:
        self._origin = origin
        self._presenter = presenter
        self._sent = sent

    @property
    def sent(self) -> Message | None:
        return self._sent

    async def show(self, view: View) -> None:
        markup = build_keyboard(view, self._presenter)
        if self._sent is None:
            self._sent = await answer_with_retry(
                self._origin,
                view.text,
                reply_markup=markup,
                parse_mode=None,
            )
            return
        await edit_with_retry(self._sent, view.text, reply_markup=markup, parse_mode=None)


__all__ = [
    "PanelMessage",
    "answer_with_retry",
    "bot_send_with_retry",
    "edit_with_retry",
    "fit_message",
]
