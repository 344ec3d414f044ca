"""In-memory value types for usage metering and conversation state."""

from digital_tick.types.conversation import ChatTurn, Conversation, ConversationSummary
from digital_tick.types.usage import Allowed, Denied, QuotaDecision, Tier, UsageRecord

__all__ = [
    "Allowed",
    "ChatTurn",
    "Conversation",
    "ConversationSummary",
    "Denied",
    "QuotaDecision",
    "Tier",
    "UsageRecord",
]
