"""
Skill base classes and data structures.

A skill is a named capability that receives a query plus relevant
memories and returns a structured result. Outputs are opaque blobs with a
declared content type; consumers decode them explicitly.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Literal, Optional

from ..memory.base import MemoryEntry, json_default, to_jsonable

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain"

ContentType = Literal["application/json", "text/plain"]


@dataclass(frozen=True)
class SkillOutput:
    """Serialized skill output with its content type."""
    content_type: ContentType
    body: str

    @classmethod
    def from_json(cls, value: Any) -> "SkillOutput":
        return cls(content_type=JSON_CONTENT_TYPE, body=json.dumps(value, default=json_default))

    @classmethod
    def from_text(cls, text: str) -> "SkillOutput":
        return cls(content_type=TEXT_CONTENT_TYPE, body=text)

    def as_json(self) -> Any:
        """Decode a JSON output. Raises ValueError for other content types."""
        if self.content_type != JSON_CONTENT_TYPE:
            raise ValueError(f"Output is {self.content_type}, not {JSON_CONTENT_TYPE}")
        return json.loads(self.body)

    def as_text(self) -> str:
        return self.body

    def to_dict(self) -> dict:
        return {"content_type": self.content_type, "body": self.body}

    @classmethod
    def from_dict(cls, data: dict) -> "SkillOutput":
        return cls(content_type=data["content_type"], body=data["body"])


@dataclass
class SkillContext:
    """What a skill gets to work with."""
    query: str
    memories: list[MemoryEntry] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "query": self.query,
            "memories": [memory.to_dict() for memory in self.memories],
            "metadata": to_jsonable(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SkillContext":
        return cls(
            query=data.get("query", ""),
            memories=[MemoryEntry.from_dict(m) for m in data.get("memories") or []],
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass
class SkillResult:
    """Outcome of a skill execution."""
    success: bool
    output: Optional[SkillOutput] = None
    error: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failure(cls, error: str) -> "SkillResult":
        return cls(success=False, output=None, error=error)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "output": self.output.to_dict() if self.output else None,
            "error": self.error,
            "metadata": to_jsonable(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SkillResult":
        output = data.get("output")
        return cls(
            success=bool(data.get("success")),
            output=SkillOutput.from_dict(output) if output else None,
            error=data.get("error"),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass(frozen=True)
class SkillExecutionRecord:
    """One historical invocation. Never modified after creation."""
    skill_id: str
    context: SkillContext
    result: SkillResult
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "skill_id": self.skill_id,
            "context": self.context.to_dict(),
            "result": self.result.to_dict(),
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SkillExecutionRecord":
        return cls(
            skill_id=data["skill_id"],
            context=SkillContext.from_dict(data.get("context") or {}),
            result=SkillResult.from_dict(data.get("result") or {}),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


class Skill(ABC):
    """
    Abstract base for all skills.

    Subclasses set id, name and description and implement execute().
    """

    id: str = "base"
    name: str = "Base Skill"
    description: str = ""

    @abstractmethod
    async def execute(self, context: SkillContext) -> SkillResult:
        """Run the skill against a query and its relevant memories."""
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"


SkillHandler = Callable[[SkillContext], Awaitable[SkillResult]]


class FunctionSkill(Skill):
    """A skill backed by a plain async function."""

    def __init__(self, id: str, name: str, description: str, handler: SkillHandler):
        self.id = id
        self.name = name
        self.description = description
        self._handler = handler

    async def execute(self, context: SkillContext) -> SkillResult:
        return await self._handler(context)


@dataclass
class SkillRecommendation:
    """A ranked suggestion of which skill to use. Derived, never persisted."""
    skill: Skill
    confidence: float  # 0-1
    reason: str
    historical_success_rate: Optional[float] = None
    relevance: Optional[float] = None
