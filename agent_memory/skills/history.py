"""
Skill Execution History Storage.

Append-only log of skill invocations and their outcomes, kept in memory
and rewritten in full to history.json after every change. The recommender
reads it to learn which skills worked for which kinds of query.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Optional

from .base import SkillExecutionRecord

logger = logging.getLogger("agent_memory.skills.history")

HISTORY_FILE = "history.json"


class SkillHistoryStore:
    """JSON-file-backed execution history."""

    def __init__(self, storage_path: str = ".agent-memory/skills"):
        self.storage_path = Path(storage_path)
        self.file_path = self.storage_path / HISTORY_FILE
        self._records: list[SkillExecutionRecord] = []
        self._lock = asyncio.Lock()

        self.storage_path.mkdir(parents=True, exist_ok=True)
        self._load()
        logger.info(
            f"SkillHistoryStore initialized with {len(self._records)} records: {self.file_path}"
        )

    def _load(self) -> None:
        """Load history from disk, treating a missing or broken file as empty."""
        if not self.file_path.exists():
            return

        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            records = [SkillExecutionRecord.from_dict(item) for item in data]
        except Exception as e:
            logger.warning(f"Failed to load skill history from {self.file_path}: {e}")
            return

        self._records = records

    def _write(self, payload: str) -> None:
        self.storage_path.mkdir(parents=True, exist_ok=True)
        tmp_path = self.file_path.with_name(f"{HISTORY_FILE}.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(payload)
        os.replace(tmp_path, self.file_path)

    async def _save(self, records: list[SkillExecutionRecord]) -> None:
        # Encode fully before touching the file
        payload = json.dumps([record.to_dict() for record in records], indent=2)
        await asyncio.to_thread(self._write, payload)

    async def append(self, record: SkillExecutionRecord) -> None:
        """
        Record an execution and persist the full history.

        Raises:
            TypeError: If the record cannot be encoded. The log is left unchanged.
        """
        async with self._lock:
            updated = self._records + [record]
            await self._save(updated)
            self._records = updated
        logger.debug(
            f"Recorded execution of {record.skill_id} "
            f"({'success' if record.result.success else 'failure'})"
        )

    def records(self, skill_id: Optional[str] = None) -> list[SkillExecutionRecord]:
        """All records in execution order, optionally for one skill."""
        if skill_id is None:
            return list(self._records)
        return [r for r in self._records if r.skill_id == skill_id]

    async def clear(self) -> None:
        """Empty the log and persist the empty state."""
        async with self._lock:
            removed = len(self._records)
            await self._save([])
            self._records = []
        logger.info(f"Cleared {removed} skill execution records")

    def __len__(self) -> int:
        return len(self._records)
