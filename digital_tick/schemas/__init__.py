"""Pydantic schemas for API request/response validation."""

from digital_tick.schemas.chat import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    ImageAttachment,
    LimitReachedResponse,
)
from digital_tick.schemas.history import (
    ConversationResponse,
    ConversationSummaryResponse,
    HistoryListResponse,
    HistoryResponse,
)
from digital_tick.schemas.usage import UsageSnapshotResponse, UserUsageEntry

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "ConversationResponse",
    "ConversationSummaryResponse",
    "HistoryListResponse",
    "HistoryResponse",
    "ImageAttachment",
    "LimitReachedResponse",
    "UsageSnapshotResponse",
    "UserUsageEntry",
]
