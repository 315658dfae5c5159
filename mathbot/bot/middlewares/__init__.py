from mathbot.bot.middlewares.session import SessionMiddleware
from mathbot.bot.middlewares.throttle import ThrottleMiddleware

__all__ = [
    "SessionMiddleware",
    "ThrottleMiddleware",
]
