"""Conversation types held by the conversation store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

# {"role": "user" | "assistant", "content": str | list[dict]}
ChatTurn = dict[str, Any]


@dataclass
class Conversation:
    """Persisted transcript for one identity and session."""

    session_id: str
    created_at: datetime
    updated_at: datetime
    messages: list[ChatTurn] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "messages": self.messages,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Conversation":
        messages = data.get("messages") or []
        if not isinstance(messages, list):
            raise ValueError("messages must be a list")
        return cls(
            session_id=str(data["sessionId"]),
            created_at=datetime.fromisoformat(data["createdAt"]),
            updated_at=datetime.fromisoformat(data["updatedAt"]),
            messages=messages,
        )

    def summary(self) -> "ConversationSummary":
        return ConversationSummary(
            session_id=self.session_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
            message_count=len(self.messages),
        )


@dataclass(frozen=True)
class ConversationSummary:
    """Conversation metadata without the transcript."""

    session_id: str
    created_at: datetime
    updated_at: datetime
    message_count: int
