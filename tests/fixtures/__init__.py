"""
Test fixtures and sample data for agent memory tests.
"""

from datetime import datetime

from agent_memory.memory.base import MemoryEntry, MemoryMetadata
from agent_memory.skills.base import (
    FunctionSkill,
    SkillContext,
    SkillExecutionRecord,
    SkillOutput,
    SkillResult,
)


def make_entry(
    id: str = "test-1",
    content: str = "Test content",
    type: str = "document",
    source: str = None,
    tags: list[str] = None,
    context: dict = None,
    timestamp: datetime = None,
) -> MemoryEntry:
    """Create a sample MemoryEntry for testing."""
    return MemoryEntry(
        id=id,
        content=content,
        metadata=MemoryMetadata(
            type=type,
            source=source,
            tags=tags or [],
            context=context or {},
        ),
        timestamp=timestamp or datetime.now(),
    )


def make_record(
    skill_id: str = "code-review",
    query: str = "review the login handler",
    success: bool = True,
    timestamp: datetime = None,
) -> SkillExecutionRecord:
    """Create a sample SkillExecutionRecord for testing."""
    return SkillExecutionRecord(
        skill_id=skill_id,
        context=SkillContext(query=query),
        result=(
            SkillResult(success=True, output=SkillOutput.from_json({"ok": True}))
            if success
            else SkillResult.failure("boom")
        ),
        timestamp=timestamp or datetime.now(),
    )


def make_skill(
    id: str = "echo",
    name: str = "Echo",
    description: str = "Repeat the query back",
    fail_with: Exception = None,
) -> FunctionSkill:
    """Create a FunctionSkill that echoes its query, or raises fail_with."""

    async def handler(context: SkillContext) -> SkillResult:
        if fail_with is not None:
            raise fail_with
        return SkillResult(
            success=True,
            output=SkillOutput.from_text(context.query),
            metadata={"memories_seen": len(context.memories)},
        )

    return FunctionSkill(id=id, name=name, description=description, handler=handler)
