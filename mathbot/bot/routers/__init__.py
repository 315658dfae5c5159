from aiogram import Router

from mathbot.bot.routers import calculator


def setup_routers() -> Router:
    router = Router()
    router.include_router(calculator.router)
    return router


__all__ = ["setup_routers"]
