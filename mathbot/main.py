"""Application entrypoint."""

from __future__ import annotations

import asyncio

import httpx
from aiogram import Bot, Dispatcher
from aiogram.client.session.aiohttp import AiohttpSession

from mathbot.bot.middlewares import SessionMiddleware, ThrottleMiddleware
from mathbot.bot.routers import setup_routers
from mathbot.config import BotSettings, get_settings
from mathbot.domain.calculator import AppController
from mathbot.domain.presenter import ResultPresenter
from mathbot.domain.sessions import SessionRegistry
from mathbot.i18n import I18nService
from mathbot.logging import configure_logging, logger
from mathbot.services.error_monitor import ErrorMonitor
from mathbot.services.evaluator import MathJsEvaluator


def build_registry(settings: BotSettings, evaluator: MathJsEvaluator) -> SessionRegistry:
    i18n = I18nService(default_locale=settings.default_language)

    def _factory(locale: str | None) -> AppController:
        return AppController(evaluator, ResultPresenter(i18n, locale=locale))

    return SessionRegistry(_factory, idle_ttl_seconds=settings.session_idle_ttl_seconds)


async def main() -> None:
    configure_logging()
    settings = get_settings()

    session = (
        AiohttpSession(proxy=settings.telegram_proxy) if settings.telegram_proxy else None
    )
    bot = Bot(token=settings.telegram_token.get_secret_value(), session=session)
    dp = Dispatcher()
    dp.include_router(setup_routers())
    error_monitor = ErrorMonitor(settings=settings)
    dp.errors.register(error_monitor)

    async with httpx.AsyncClient(
        timeout=settings.evaluator.request_timeout_seconds,
        follow_redirects=True,
    ) as http_client:
        evaluator = MathJsEvaluator(http_client, settings=settings.evaluator)
        registry = build_registry(settings, evaluator)

        throttle_middleware = ThrottleMiddleware(settings)
        session_middleware = SessionMiddleware(registry)

        dp.message.middleware(throttle_middleware)
        dp.message.middleware(session_middleware)
        dp.callback_query.middleware(throttle_middleware)
        dp.callback_query.middleware(session_middleware)

        logger.info(
            "bot_starting",
            environment=settings.environment,
            evaluator_url=str(settings.evaluator.base_url),
        )
        await dp.start_polling(bot)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
