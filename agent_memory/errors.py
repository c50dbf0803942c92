"""
Agent Memory error definitions.

Only conditions that abort a call are exceptions. Degraded embedding
providers, unreadable storage files and faulting skills are logged and
recovered where they happen.
"""


class AgentMemoryError(Exception):
    """Base exception for all agent memory errors."""
    pass


# =============================================================================
# Lookup Errors
# =============================================================================
class NotFoundError(AgentMemoryError):
    """Raised when a referenced file or skill does not exist."""
    pass


class DocumentNotFoundError(NotFoundError):
    """Raised when a file handed to ingestion does not exist."""
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File not found: {path}")


class SkillNotFoundError(NotFoundError):
    """Raised when a skill ID is not registered in the catalog."""
    def __init__(self, skill_id: str):
        self.skill_id = skill_id
        super().__init__(f"Skill not found: {skill_id}")


# =============================================================================
# Input Errors
# =============================================================================
class UnsupportedInputError(AgentMemoryError):
    """Raised when a file cannot be converted to text."""
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class DimensionMismatchError(AgentMemoryError, ValueError):
    """Raised when vectors of different lengths meet in the same store."""
    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Embedding dimension mismatch: expected {expected}, got {actual}"
        )
