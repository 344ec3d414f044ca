"""API routers."""

from digital_tick.routers import admin, chat, health, history

__all__ = [
    "admin",
    "chat",
    "health",
    "history",
]
