"""
Skill execution and recommendation.

Executes skills with fault isolation and records every outcome. Ranks
skills for a new query by blending two signals:
- Historical success rate on similar past queries (word-level Jaccard)
- Keyword relevance of the query to the skill's name and description
"""

import json
import logging
from typing import Optional

from ..config import SkillConfig
from .base import (
    Skill,
    SkillContext,
    SkillExecutionRecord,
    SkillRecommendation,
    SkillResult,
)
from .catalog import SkillCatalog
from .history import SkillHistoryStore

logger = logging.getLogger("agent_memory.skills.manager")


def tokenize(text: str) -> set[str]:
    """Lowercased whitespace-separated words."""
    return set(text.lower().split())


def jaccard_similarity(a: str, b: str) -> float:
    """Word-set Jaccard similarity of two texts, 0.0 when both are empty."""
    words_a = tokenize(a)
    words_b = tokenize(b)
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


class SkillManager:
    """Runs skills from a catalog and learns from their history."""

    def __init__(
        self,
        catalog: SkillCatalog,
        history: SkillHistoryStore,
        scoring: Optional[SkillConfig] = None,
    ):
        self.catalog = catalog
        self.history = history
        self.scoring = scoring or SkillConfig()

    async def execute(self, skill_id: str, context: SkillContext) -> SkillResult:
        """
        Execute a skill and record the result.

        Errors raised by the skill itself, including a result that cannot
        be persisted, are captured as a failed result instead of propagating.

        Raises:
            SkillNotFoundError: If no skill is registered under skill_id.
            TypeError: If the caller's context cannot be persisted. Nothing
                is recorded in that case.
        """
        skill = self.catalog.require(skill_id)

        try:
            result = await skill.execute(context)
            if not isinstance(result, SkillResult):
                raise TypeError(
                    f"Skill returned {type(result).__name__}, expected SkillResult"
                )
            # The result must survive the trip into history.json
            json.dumps(result.to_dict())
        except Exception as e:
            logger.warning(f"Skill {skill_id} failed: {e}")
            result = SkillResult.failure(str(e) or type(e).__name__)

        await self.history.append(
            SkillExecutionRecord(skill_id=skill_id, context=context, result=result)
        )

        logger.info(f"Executed skill {skill_id}: success={result.success}")
        return result

    def success_rate(self, skill_id: str, context: SkillContext) -> float:
        """
        Fraction of successful runs of this skill on similar queries.

        Falls back to the neutral default when there is no similar history.
        """
        relevant = [
            record
            for record in self.history.records(skill_id)
            if self.is_similar_context(record.context, context)
        ]

        if not relevant:
            return self.scoring.default_success_rate

        successful = sum(1 for record in relevant if record.result.success)
        return successful / len(relevant)

    def is_similar_context(self, a: SkillContext, b: SkillContext) -> bool:
        return jaccard_similarity(a.query, b.query) > self.scoring.context_similarity_threshold

    def relevance(self, skill: Skill, context: SkillContext) -> float:
        """Keyword overlap between query and skill name/description, capped at 1.0."""
        skill_name = skill.name.lower()
        skill_description = skill.description.lower()

        keywords = [
            word
            for word in context.query.lower().split()
            if len(word) > self.scoring.min_keyword_length
        ]

        score = 0.0
        for keyword in keywords:
            if keyword in skill_name:
                score += self.scoring.name_match_weight
            if keyword in skill_description:
                score += self.scoring.description_match_weight

        return min(score, 1.0)

    def _reason(self, success_rate: float, relevance: float) -> str:
        """Human-readable explanation for a recommendation."""
        reasons = []

        if success_rate > self.scoring.high_success_rate:
            reasons.append(f"high success rate ({success_rate * 100:.0f}%)")

        if relevance > self.scoring.strong_relevance:
            reasons.append("strong relevance to query")

        if not reasons:
            return "potential match"

        return ", ".join(reasons)

    def recommend(self, context: SkillContext, limit: int = 3) -> list[SkillRecommendation]:
        """
        Rank registered skills for a query.

        Confidence is the mean of historical success rate and relevance.
        Ties keep registration order.
        """
        recommendations = []

        for skill in self.catalog:
            success_rate = self.success_rate(skill.id, context)
            relevance = self.relevance(skill, context)
            confidence = min(max((success_rate + relevance) / 2, 0.0), 1.0)

            recommendations.append(SkillRecommendation(
                skill=skill,
                confidence=confidence,
                reason=self._reason(success_rate, relevance),
                historical_success_rate=success_rate,
                relevance=relevance,
            ))

        recommendations.sort(key=lambda r: r.confidence, reverse=True)
        return recommendations[:limit]

    async def clear_history(self) -> None:
        await self.history.clear()
