"""
Unit tests for agent_memory/skills/history.py

Tests JSON persistence of skill execution records.
"""

import json
from datetime import datetime, timedelta

import pytest

from agent_memory.skills.base import SkillContext, SkillExecutionRecord, SkillResult
from agent_memory.skills.history import SkillHistoryStore
from tests.fixtures import make_record


class TestSkillHistoryStore:
    """Tests for SkillHistoryStore class."""

    def test_init_creates_directory(self, skills_dir):
        """Test that initialization creates the storage directory."""
        history = SkillHistoryStore(storage_path=str(skills_dir))

        assert skills_dir.is_dir()
        assert len(history) == 0

    @pytest.mark.asyncio
    async def test_append(self, skill_history):
        """Test appending a record."""
        await skill_history.append(make_record())

        assert len(skill_history) == 1
        assert skill_history.file_path.exists()

    @pytest.mark.asyncio
    async def test_records_in_execution_order(self, skill_history):
        """Test that records come back in the order they were appended."""
        base = datetime(2024, 3, 1, 9, 0)
        for i in range(3):
            await skill_history.append(make_record(query=f"query {i}", timestamp=base + timedelta(minutes=i)))

        assert [r.context.query for r in skill_history.records()] == ["query 0", "query 1", "query 2"]

    @pytest.mark.asyncio
    async def test_records_filter_by_skill(self, skill_history):
        """Test filtering records by skill ID."""
        await skill_history.append(make_record(skill_id="code-review"))
        await skill_history.append(make_record(skill_id="refactoring"))
        await skill_history.append(make_record(skill_id="code-review"))

        assert len(skill_history.records("code-review")) == 2
        assert len(skill_history.records("refactoring")) == 1
        assert skill_history.records("missing") == []

    @pytest.mark.asyncio
    async def test_records_returns_copy(self, skill_history):
        """Test that callers cannot mutate the stored log."""
        await skill_history.append(make_record())

        skill_history.records().clear()

        assert len(skill_history) == 1

    @pytest.mark.asyncio
    async def test_persist_and_reload(self, skill_history, skills_dir):
        """Test that a new store loads what the previous one appended."""
        timestamp = datetime(2024, 3, 1, 9, 15, 30)
        await skill_history.append(make_record(skill_id="code-review", success=True, timestamp=timestamp))
        await skill_history.append(make_record(skill_id="code-review", success=False))

        reloaded = SkillHistoryStore(storage_path=str(skills_dir))
        records = reloaded.records()

        assert len(records) == 2
        assert records[0].skill_id == "code-review"
        assert records[0].timestamp == timestamp
        assert records[0].result.success is True
        assert records[0].result.output.as_json() == {"ok": True}
        assert records[1].result.success is False
        assert records[1].result.error == "boom"

    @pytest.mark.asyncio
    async def test_file_is_json_list(self, skill_history):
        """Test the on-disk layout."""
        await skill_history.append(make_record(skill_id="refactoring", query="tidy up"))

        data = json.loads(skill_history.file_path.read_text())

        assert isinstance(data, list)
        assert data[0]["skill_id"] == "refactoring"
        assert data[0]["context"]["query"] == "tidy up"
        assert data[0]["result"]["success"] is True

    @pytest.mark.asyncio
    async def test_clear(self, skill_history, skills_dir):
        """Test that clearing empties the log on disk too."""
        await skill_history.append(make_record())

        await skill_history.clear()

        assert len(skill_history) == 0
        assert len(SkillHistoryStore(storage_path=str(skills_dir))) == 0

    @pytest.mark.asyncio
    async def test_unencodable_record_not_kept(self, skill_history, skills_dir):
        """Test that a record that cannot be written is rejected and the log stays usable."""
        await skill_history.append(make_record(query="first"))
        bad = SkillExecutionRecord(
            skill_id="code-review",
            context=SkillContext(query="bad"),
            result=SkillResult(success=True, metadata={"obj": object()}),
        )

        with pytest.raises(TypeError):
            await skill_history.append(bad)

        assert len(skill_history) == 1
        await skill_history.append(make_record(query="second"))
        reloaded = SkillHistoryStore(storage_path=str(skills_dir))
        assert [r.context.query for r in reloaded.records()] == ["first", "second"]

    def test_corrupt_file_treated_as_empty(self, skills_dir, caplog):
        """Test that an unreadable history file yields an empty log and a warning."""
        skills_dir.mkdir(parents=True)
        (skills_dir / "history.json").write_text("[{\"skill_id\": ")

        history = SkillHistoryStore(storage_path=str(skills_dir))

        assert len(history) == 0
        assert "Failed to load skill history" in caplog.text
