"""Inline keyboards for calculator panels."""

from __future__ import annotations

from aiogram.filters.callback_data import CallbackData
from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from mathbot.domain.presenter import ResultPresenter, View


class CalculatorAction(CallbackData, prefix="calc"):
    action: str


def build_keyboard(view: View, presenter: ResultPresenter) -> InlineKeyboardMarkup | None:
    """One button per view action; ``None`` removes the keyboard."""

    if not view.actions:
        return None
    builder = InlineKeyboardBuilder()
    for action in view.actions:
        builder.button(
            text=presenter.label(action),
            callback_data=CalculatorAction(action=action),
        )
    builder.adjust(1)
    return builder.as_markup()


__all__ = ["CalculatorAction", "build_keyboard"]
