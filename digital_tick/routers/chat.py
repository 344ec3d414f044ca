"""Chat endpoint."""

import logging

from fastapi import APIRouter, Depends, Request

from digital_tick.config import Settings
from digital_tick.dependencies.services import (
    get_app_settings,
    get_chat_service,
    identity_for_request,
)
from digital_tick.schemas.chat import ChatRequest, ChatResponse, LimitReachedResponse
from digital_tick.services.core.chat import ChatDenied, ChatService
from digital_tick.services.core.quota import get_plan_policy

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

LIMIT_REACHED_MESSAGE = (
    "You've reached your monthly limit of free questions. "
    "Upgrade to Plus for unlimited expert help."
)


@router.post("/chat", response_model=ChatResponse | LimitReachedResponse)
async def chat(
    body: ChatRequest,
    request: Request,
    service: ChatService = Depends(get_chat_service),
    settings: Settings = Depends(get_app_settings),
) -> ChatResponse | LimitReachedResponse:
    """Answer the next turn of a conversation, within the caller's plan allowance."""
    identity = identity_for_request(request, body.user_id)
    policy = get_plan_policy(body.plan, settings)

    logger.info(
        "Incoming chat: identity=%s plan=%s session=%s turns=%d image=%s",
        identity,
        policy.name,
        body.session_id,
        len(body.messages),
        body.image is not None,
    )

    outcome = await service.handle_chat(
        identity=identity,
        policy=policy,
        messages=[m.model_dump() for m in body.messages],
        user_supplied=body.user_id is not None,
        session_id=body.session_id,
        image_data_url=body.image.data_url if body.image else None,
    )

    if isinstance(outcome, ChatDenied):
        return LimitReachedResponse(
            error=LIMIT_REACHED_MESSAGE,
            allowed_per_month=outcome.allowed_per_month,
            used_this_month=outcome.used_this_month,
            plan=outcome.plan,
        )

    return ChatResponse(
        reply=outcome.reply,
        plan=outcome.plan,
        used_this_month=outcome.used_this_month,
        allowed_per_month=outcome.allowed_per_month,
    )
