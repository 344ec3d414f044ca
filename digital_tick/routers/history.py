"""Conversation history endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from digital_tick.dependencies.services import get_conversation_store
from digital_tick.schemas.history import (
    ConversationResponse,
    ConversationSummaryResponse,
    HistoryListResponse,
    HistoryResponse,
)
from digital_tick.services.core.conversation_store import ConversationStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["history"])


@router.get("/history", response_model=HistoryResponse | HistoryListResponse)
def get_history(
    user_id: str | None = Query(default=None, alias="userId"),
    session_id: str | None = Query(default=None, alias="sessionId"),
    latest: bool = False,
    store: ConversationStore = Depends(get_conversation_store),
) -> HistoryResponse | HistoryListResponse:
    """
    Return one conversation by session, the latest conversation, or the
    list of session summaries when neither is asked for.
    """
    if not user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="userId is required")

    if session_id:
        conversation = store.get_by_session(user_id, session_id)
        if conversation is None:
            raise HTTPException(status_code=404, detail="Conversation not found")
        return HistoryResponse(
            user_id=user_id,
            conversation=ConversationResponse.model_validate(conversation),
        )

    if latest:
        conversation = store.get_latest(user_id)
        return HistoryResponse(
            user_id=user_id,
            conversation=ConversationResponse.model_validate(conversation) if conversation else None,
        )

    summaries = store.list_summaries(user_id)
    return HistoryListResponse(
        user_id=user_id,
        sessions=[ConversationSummaryResponse.model_validate(s) for s in summaries],
    )
