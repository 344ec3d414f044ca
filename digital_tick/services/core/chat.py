"""
Chat orchestration.

One request runs: resolve period → consume quota → bound transcript →
attach image → call the completion provider → record history → reply.
A denied request stops right after the quota check, with no provider call
and nothing persisted. A provider failure still counts against the quota.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from digital_tick.config import Settings
from digital_tick.exceptions import CollaboratorError
from digital_tick.services.core.conversation_store import ConversationStore
from digital_tick.services.core.quota import PlanPolicy
from digital_tick.services.core.usage_ledger import UsageLedger
from digital_tick.services.prompts import DIGITAL_HOME_PROMPT, plan_context_prompt
from digital_tick.services.providers.completion import CompletionClient
from digital_tick.services.utils.period import current_period, utc_now
from digital_tick.types.conversation import ChatTurn

logger = logging.getLogger(__name__)

IMAGE_DATA_URL_PREFIX = "data:image/"


@dataclass(frozen=True)
class ChatReply:
    reply: str
    plan: str
    used_this_month: int | None
    allowed_per_month: int | None


@dataclass(frozen=True)
class ChatDenied:
    plan: str
    used_this_month: int
    allowed_per_month: int


def bound_transcript(messages: list[ChatTurn], max_messages: int) -> list[ChatTurn]:
    """
    Keep only the most recent `max_messages` turns.

    After a cut the window starts at a user turn; assistant turns left at
    the front of the window are dropped with the older history.
    """
    if max_messages <= 0 or len(messages) <= max_messages:
        return list(messages)
    bounded = list(messages[-max_messages:])
    while len(bounded) > 1 and bounded[0].get("role") != "user":
        bounded.pop(0)
    return bounded


def attach_image(messages: list[ChatTurn], data_url: str) -> list[ChatTurn]:
    """Add an image part to the last user turn. Returns a new list."""
    result = copy.deepcopy(messages)
    if not data_url.startswith(IMAGE_DATA_URL_PREFIX):
        logger.info("Image attachment is not an image data URL, ignoring it")
        return result

    for turn in reversed(result):
        if turn.get("role") != "user":
            continue
        content = turn.get("content")
        if isinstance(content, list):
            parts = list(content)
        else:
            parts = [{"type": "text", "text": str(content or "")}]
        parts.append({"type": "image_url", "image_url": {"url": data_url}})
        turn["content"] = parts
        return result

    logger.info("No user turn to attach image to, ignoring it")
    return result


class ChatService:
    """Composes the usage ledger, conversation store and completion provider."""

    def __init__(
        self,
        settings: Settings,
        ledger: UsageLedger,
        store: ConversationStore,
        completion_client: CompletionClient,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.settings = settings
        self.ledger = ledger
        self.store = store
        self.completion_client = completion_client
        self.clock = clock

    async def handle_chat(
        self,
        *,
        identity: str,
        policy: PlanPolicy,
        messages: list[ChatTurn],
        user_supplied: bool = False,
        session_id: str | None = None,
        image_data_url: str | None = None,
    ) -> ChatReply | ChatDenied:
        """
        Run one billable chat exchange.

        Args:
            identity: Resolved caller identity
            policy: Plan the caller claims
            messages: Full transcript so far, oldest first
            user_supplied: Whether the identity came from an explicit userId
            session_id: Conversation session, defaults to the store's sentinel
            image_data_url: Optional image to attach to the last user turn

        Returns:
            ChatReply on success, ChatDenied when the monthly allowance is spent

        Raises:
            ValueError: If the transcript is empty
            CollaboratorError: If the completion provider fails
        """
        if not messages:
            raise ValueError("messages must be a non-empty list of turns")

        period = current_period(self.clock())
        decision = self.ledger.try_consume(
            identity, period, policy.tier, policy.monthly_limit
        )
        if not decision.allowed:
            logger.info(f"Limit reached for {identity} on {policy.name} plan in {period}")
            return ChatDenied(
                plan=policy.name,
                used_this_month=decision.used,
                allowed_per_month=decision.limit,
            )

        bounded = bound_transcript(messages, self.settings.max_context_messages)
        if image_data_url:
            if policy.allow_images:
                bounded = attach_image(bounded, image_data_url)
            else:
                logger.info(f"Ignoring image attachment on {policy.name} plan")

        payload: list[dict[str, Any]] = [
            {"role": "system", "content": DIGITAL_HOME_PROMPT},
            {"role": "system", "content": plan_context_prompt(policy.label)},
            *bounded,
        ]

        try:
            reply = await self.completion_client.complete(
                payload,
                max_tokens=policy.max_output_tokens,
                temperature=self.settings.model_temperature,
            )
        except CollaboratorError:
            logger.exception(f"Completion failed for {identity}")
            raise
        except Exception as e:
            logger.exception(f"Completion failed for {identity}: {type(e).__name__}")
            raise CollaboratorError(str(e) or type(e).__name__) from e

        if policy.keep_history and user_supplied:
            self.store.append(
                identity,
                session_id,
                messages,
                {"role": "assistant", "content": reply},
            )

        return ChatReply(
            reply=reply,
            plan=policy.name,
            used_this_month=decision.used,
            allowed_per_month=policy.monthly_limit,
        )
