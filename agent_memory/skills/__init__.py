"""
Skill execution, history tracking and recommendation.
"""

from .base import (
    FunctionSkill,
    Skill,
    SkillContext,
    SkillExecutionRecord,
    SkillOutput,
    SkillRecommendation,
    SkillResult,
)
from .builtin import builtin_skills
from .catalog import SkillCatalog
from .history import SkillHistoryStore
from .manager import SkillManager, jaccard_similarity

__all__ = [
    "FunctionSkill",
    "Skill",
    "SkillContext",
    "SkillExecutionRecord",
    "SkillOutput",
    "SkillRecommendation",
    "SkillResult",
    "builtin_skills",
    "SkillCatalog",
    "SkillHistoryStore",
    "SkillManager",
    "jaccard_similarity",
]
