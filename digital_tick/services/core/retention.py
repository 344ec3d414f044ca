"""Retention sweep for usage records and conversations."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable

from digital_tick.services.core.conversation_store import ConversationStore
from digital_tick.services.core.usage_ledger import UsageLedger
from digital_tick.services.utils.period import current_period, utc_now

logger = logging.getLogger(__name__)


def sweep(
    ledger: UsageLedger,
    store: ConversationStore,
    conversation_retention_days: int | None,
    now: datetime | None = None,
) -> tuple[int, int]:
    """
    Drop usage records from past periods and, when a retention window is
    set, conversations not updated within it.

    Returns:
        (usage records removed, conversations removed)
    """
    now = now or utc_now()
    usage_removed = ledger.prune(current_period(now))
    conversations_removed = 0
    if conversation_retention_days is not None:
        cutoff = now - timedelta(days=conversation_retention_days)
        conversations_removed = store.prune_older_than(cutoff)
    return usage_removed, conversations_removed


async def run_retention_loop(
    ledger: UsageLedger,
    store: ConversationStore,
    conversation_retention_days: int | None,
    interval_seconds: float = 3600.0,
    clock: Callable[[], datetime] = utc_now,
) -> None:
    """Background loop that sweeps stale state."""
    while True:
        try:
            sweep(ledger, store, conversation_retention_days, clock())
        except Exception as exc:
            logger.warning("Retention sweep failed: %s", exc)
        await asyncio.sleep(interval_seconds)
