"""Conversation store: per-identity, per-session transcripts."""

from __future__ import annotations

import copy
import logging
import threading
from datetime import datetime
from typing import Callable

from digital_tick.services.utils.period import utc_now
from digital_tick.services.utils.snapshot import SnapshotDocument
from digital_tick.types.conversation import ChatTurn, Conversation, ConversationSummary

logger = logging.getLogger(__name__)

DEFAULT_SESSION = "default"


class ConversationStore:
    """
    Owns conversations keyed by identity, then session.

    The caller sends the full transcript on every exchange, so an append
    replaces the stored messages with that transcript plus the new
    assistant turn.
    """

    def __init__(
        self,
        document: SnapshotDocument,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._document = document
        self._clock = clock
        self._conversations: dict[str, dict[str, Conversation]] = {}
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        raw = self._document.load()
        total = 0
        for identity, sessions in raw.items():
            if not isinstance(sessions, dict):
                logger.warning("Skipping malformed history for %s", identity)
                continue
            loaded: dict[str, Conversation] = {}
            for session_id, data in sessions.items():
                try:
                    loaded[session_id] = Conversation.from_dict(data)
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(
                        "Skipping malformed conversation %s/%s: %s", identity, session_id, e
                    )
            if loaded:
                self._conversations[identity] = loaded
                total += len(loaded)
        logger.info(
            "Loaded %d conversations for %d identities", total, len(self._conversations)
        )

    def append(
        self,
        identity: str,
        session_id: str | None,
        transcript: list[ChatTurn],
        assistant_turn: ChatTurn,
    ) -> Conversation:
        """Store `transcript` plus `assistant_turn` as the session's messages."""
        session_id = session_id or DEFAULT_SESSION
        messages = copy.deepcopy(list(transcript))
        messages.append(copy.deepcopy(assistant_turn))

        with self._lock:
            now = self._clock()
            sessions = self._conversations.setdefault(identity, {})
            existing = sessions.get(session_id)
            conversation = Conversation(
                session_id=session_id,
                created_at=existing.created_at if existing else now,
                updated_at=now,
                messages=messages,
            )
            sessions[session_id] = conversation
            self._persist_locked()
            return copy.deepcopy(conversation)

    def get_by_session(self, identity: str, session_id: str) -> Conversation | None:
        with self._lock:
            conversation = self._conversations.get(identity, {}).get(session_id)
            return copy.deepcopy(conversation) if conversation else None

    def get_latest(self, identity: str) -> Conversation | None:
        """Most recently updated conversation; ties go to the first session stored."""
        with self._lock:
            sessions = self._conversations.get(identity)
            if not sessions:
                return None
            latest = max(sessions.values(), key=lambda c: c.updated_at)
            return copy.deepcopy(latest)

    def list_summaries(self, identity: str) -> list[ConversationSummary]:
        """Session metadata, most recently updated first."""
        with self._lock:
            sessions = list(self._conversations.get(identity, {}).values())
        summaries = [conversation.summary() for conversation in sessions]
        return sorted(summaries, key=lambda s: s.updated_at, reverse=True)

    def prune_older_than(self, cutoff: datetime) -> int:
        """Drop conversations not updated since `cutoff`."""
        removed = 0
        with self._lock:
            for identity in list(self._conversations):
                sessions = self._conversations[identity]
                for session_id in [s for s, c in sessions.items() if c.updated_at < cutoff]:
                    del sessions[session_id]
                    removed += 1
                if not sessions:
                    del self._conversations[identity]
            if removed:
                self._persist_locked()

        if removed:
            logger.info("Pruned %d conversations not updated since %s", removed, cutoff.isoformat())
        return removed

    async def drain(self) -> None:
        """Wait for scheduled snapshot writes to finish."""
        await self._document.drain()

    def to_snapshot(self) -> dict[str, dict]:
        with self._lock:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> dict[str, dict]:
        return {
            identity: {
                session_id: copy.deepcopy(conversation.to_dict())
                for session_id, conversation in sessions.items()
            }
            for identity, sessions in self._conversations.items()
        }

    def _persist_locked(self) -> None:
        self._document.schedule_write(self._snapshot_locked())
