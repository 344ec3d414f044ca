"""Conversation history schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from digital_tick.schemas.chat import ChatMessage


class ConversationResponse(BaseModel):
    """Full stored conversation."""

    session_id: str = Field(alias="sessionId")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    messages: list[ChatMessage]

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ConversationSummaryResponse(BaseModel):
    """Conversation metadata only."""

    session_id: str = Field(alias="sessionId")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    message_count: int = Field(alias="messageCount")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class HistoryResponse(BaseModel):
    """A single conversation (by session or latest). `conversation` is null when none exists."""

    user_id: str = Field(alias="userId")
    conversation: ConversationResponse | None

    model_config = ConfigDict(populate_by_name=True)


class HistoryListResponse(BaseModel):
    """All of a user's sessions, most recently updated first."""

    user_id: str = Field(alias="userId")
    sessions: list[ConversationSummaryResponse]

    model_config = ConfigDict(populate_by_name=True)
