"""Core services: metering, conversation state and chat orchestration."""

from digital_tick.services.core.chat import ChatDenied, ChatReply, ChatService
from digital_tick.services.core.conversation_store import ConversationStore
from digital_tick.services.core.quota import PlanPolicy, decide, get_plan_policy
from digital_tick.services.core.usage_ledger import UsageLedger

__all__ = [
    "ChatDenied",
    "ChatReply",
    "ChatService",
    "ConversationStore",
    "PlanPolicy",
    "UsageLedger",
    "decide",
    "get_plan_policy",
]
