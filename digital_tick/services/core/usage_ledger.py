"""Usage ledger: per-identity request counts for the current accounting period."""

from __future__ import annotations

import logging
import threading

from digital_tick.services.core.quota import decide
from digital_tick.services.utils.snapshot import SnapshotDocument
from digital_tick.types.usage import Allowed, QuotaDecision, Tier, UsageRecord

logger = logging.getLogger(__name__)


class UsageLedger:
    """
    Owns usage records and is the only enforcement point for
    "at most `limit` billable requests per identity per period".

    A record is stored per identity together with the period it counts. A
    record from another period reads as a fresh zero record and is replaced
    on the next increment.
    """

    def __init__(self, document: SnapshotDocument) -> None:
        self._document = document
        self._records: dict[str, UsageRecord] = {}
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        raw = self._document.load()
        for identity, data in raw.items():
            try:
                self._records[identity] = UsageRecord.from_dict(data)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed usage record for %s: %s", identity, e)
        logger.info("Loaded %d usage records", len(self._records))

    def get_usage(self, identity: str, period: str) -> UsageRecord:
        """Return the identity's record for `period`, or a fresh unstored one."""
        with self._lock:
            return self._current(identity, period)

    def try_consume(
        self,
        identity: str,
        period: str,
        tier: Tier,
        limit: int | None,
    ) -> QuotaDecision:
        """
        Atomically check the allowance and count one billable request.

        Denied decisions leave the record untouched. The unlimited tier is
        always allowed and not recorded.
        """
        if tier == Tier.UNLIMITED:
            return Allowed()

        with self._lock:
            record = self._current(identity, period)
            decision = decide(tier, record.count, limit)
            if not decision.allowed:
                logger.info(
                    "Quota denied for %s in %s (%d/%d)", identity, period, record.count, limit
                )
                return decision

            self._records[identity] = UsageRecord(period=period, count=record.count + 1)
            self._persist_locked()

        return decision

    def period_snapshot(self, period: str) -> dict[str, int]:
        """Counts for every identity with usage in `period`."""
        with self._lock:
            return {
                identity: record.count
                for identity, record in self._records.items()
                if record.period == period
            }

    def prune(self, period: str) -> int:
        """Drop records that belong to any period other than `period`."""
        with self._lock:
            stale = [
                identity
                for identity, record in self._records.items()
                if record.period != period
            ]
            for identity in stale:
                del self._records[identity]
            if stale:
                self._persist_locked()

        if stale:
            logger.info("Pruned %d usage records from past periods", len(stale))
        return len(stale)

    async def drain(self) -> None:
        """Wait for scheduled snapshot writes to finish."""
        await self._document.drain()

    def to_snapshot(self) -> dict[str, dict]:
        with self._lock:
            return self._snapshot_locked()

    def _current(self, identity: str, period: str) -> UsageRecord:
        record = self._records.get(identity)
        if record is None or record.period != period:
            return UsageRecord(period=period, count=0)
        return UsageRecord(period=record.period, count=record.count)

    def _snapshot_locked(self) -> dict[str, dict]:
        return {identity: record.to_dict() for identity, record in self._records.items()}

    def _persist_locked(self) -> None:
        self._document.schedule_write(self._snapshot_locked())
