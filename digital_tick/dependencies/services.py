"""Dependencies that hand out the service objects built at startup."""

from fastapi import Request

from digital_tick.config import Settings
from digital_tick.services.core.chat import ChatService
from digital_tick.services.core.conversation_store import ConversationStore
from digital_tick.services.utils.identity import resolve_identity


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def get_conversation_store(request: Request) -> ConversationStore:
    return request.app.state.chat_service.store


def identity_for_request(request: Request, user_id: str | None = None) -> str:
    """Identity for a request: explicit user id, else the caller's address."""
    return resolve_identity(
        user_id,
        forwarded_for=request.headers.get("x-forwarded-for"),
        client_host=request.client.host if request.client else None,
    )
