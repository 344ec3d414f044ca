"""
Best-effort durable snapshot documents.

Each document is a single JSON object that is read in full at startup and
rewritten in full after every mutation. Writes are fire-and-forget: when an
event loop is running they are pushed to a worker thread and tracked so
shutdown can wait for them; otherwise they run inline. A failed write is
logged and never raised to the caller, the in-memory state stays
authoritative for the life of the process.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any

from digital_tick.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class SnapshotDocument:
    """One JSON document on disk holding a full key-value snapshot."""

    def __init__(self, path: str | Path, name: str | None = None) -> None:
        self.path = Path(path)
        self.name = name or self.path.stem
        self._sequence = 0
        self._sequence_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._written_sequence = 0
        self._pending: set[asyncio.Task] = set()

    def load(self) -> dict[str, Any]:
        """Read the document. Missing or unreadable documents load as empty."""
        if not self.path.exists():
            logger.info("No %s snapshot at %s, starting empty", self.name, self.path)
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(
                "Could not read %s snapshot at %s, starting empty: %s", self.name, self.path, e
            )
            return {}

        if not isinstance(data, dict):
            logger.warning(
                "%s snapshot at %s is not an object, starting empty", self.name, self.path
            )
            return {}

        return data

    def schedule_write(self, payload: dict[str, Any]) -> None:
        """
        Persist `payload` without waiting for the disk.

        Callers must pass a private copy and call this while still holding
        the lock that guards their state, so sequence numbers follow the
        order of mutations.
        """
        with self._sequence_lock:
            self._sequence += 1
            sequence = self._sequence

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._write_safely(sequence, payload)
            return

        task = loop.create_task(asyncio.to_thread(self._write_safely, sequence, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for writes that are still in flight."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    def _write_safely(self, sequence: int, payload: dict[str, Any]) -> None:
        with self._write_lock:
            # A newer snapshot already landed
            if sequence <= self._written_sequence:
                return
            try:
                self._write(payload)
            except PersistenceError as e:
                logger.error("Failed to persist %s snapshot: %s", self.name, e)
                return
            self._written_sequence = sequence

    def _write(self, payload: dict[str, Any]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"{self.path}: {e}") from e
