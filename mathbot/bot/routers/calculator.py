"""Telegram handlers driving a calculator session."""

from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command, CommandStart
from aiogram.types import CallbackQuery, Message

from mathbot.bot.utils.keyboards import CalculatorAction
from mathbot.bot.utils.telegram import PanelMessage, answer_with_retry
from mathbot.domain.calculator import AppController, SubmitOutcome
from mathbot.domain.sessions import SessionRegistry
from mathbot.logging import logger

router = Router()


@router.message(CommandStart())
async def handle_start(message: Message, sessions: SessionRegistry) -> None:
    chat_id = message.chat.id
    sessions.discard(chat_id)
    locale = getattr(message.from_user, "language_code", None)
    calculator = sessions.get(chat_id, locale=locale)
    presenter = calculator.presenter
    await answer_with_retry(message, presenter.text("start.greeting"), parse_mode=None)
    await PanelMessage(message, presenter).show(calculator.view())


@router.message(Command("help"))
async def handle_help(message: Message, calculator: AppController) -> None:
    await calculator.show_help()
    await PanelMessage(message, calculator.presenter).show(calculator.view())


@router.message(Command("clear"))
async def handle_clear(message: Message, calculator: AppController) -> None:
    if not await calculator.clear():
        await _reply_busy(message, calculator)
        return
    await PanelMessage(message, calculator.presenter).show(calculator.view())


@router.message(F.text)
async def handle_expression(message: Message, calculator: AppController) -> None:
    text = message.text or ""
    if not text.strip():
        logger.info("submit_ignored", chat_id=message.chat.id, reason="blank")
        return
    if calculator.input.disabled:
        await _reply_busy(message, calculator)
        return

    # An expression typed while the help panel is open returns to the calculator.
    await calculator.hide_help()
    calculator.input.update(text)

    # The panel only follows this request; a later expression gets its own panel.
    panel = PanelMessage(message, calculator.presenter)
    outcome = await calculator.submit(listener=panel.show)
    if outcome is SubmitOutcome.BUSY:
        await _reply_busy(message, calculator)


@router.callback_query(CalculatorAction.filter())
async def handle_action(
    callback: CallbackQuery,
    callback_data: CalculatorAction,
    calculator: AppController,
) -> None:
    action = callback_data.action
    notice: str | None = None
    if action == "clear":
        if not await calculator.clear():
            notice = calculator.presenter.text("chat.busy")
    elif action == "help":
        await calculator.show_help()
    elif action == "back":
        await calculator.hide_help()
    else:
        logger.warning("unknown_calculator_action", action=action)

    if isinstance(callback.message, Message):
        panel = PanelMessage(callback.message, calculator.presenter, sent=callback.message)
        await panel.show(calculator.view())
    await callback.answer(notice)


@router.message()
async def handle_unsupported(message: Message, calculator: AppController) -> None:
    await answer_with_retry(
        message,
        calculator.presenter.text("chat.unsupported"),
        parse_mode=None,
    )


async def _reply_busy(message: Message, calculator: AppController) -> None:
    logger.info("submit_rejected", chat_id=message.chat.id, reason="busy")
    await answer_with_retry(message, calculator.presenter.text("chat.busy"), parse_mode=None)
