"""FastAPI dependencies."""

from digital_tick.dependencies.services import (
    get_app_settings,
    get_chat_service,
    get_conversation_store,
    identity_for_request,
)

__all__ = [
    "get_app_settings",
    "get_chat_service",
    "get_conversation_store",
    "identity_for_request",
]
