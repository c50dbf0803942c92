"""
Skill catalog.

Each memory manager owns its own catalog, so independent memory instances
in one process never share skills by accident.
"""

import logging
from typing import Iterator, Optional

from ..errors import SkillNotFoundError
from .base import Skill

logger = logging.getLogger("agent_memory.skills.catalog")


class SkillCatalog:
    """Registered skills keyed by ID, in registration order."""

    def __init__(self, skills: Optional[list[Skill]] = None):
        self._skills: dict[str, Skill] = {}
        for skill in skills or []:
            self.register(skill)

    def register(self, skill: Skill) -> None:
        """Register a skill. Re-registering an ID replaces the earlier skill."""
        if skill.id in self._skills:
            logger.info(f"Replacing registered skill: {skill.id}")
        self._skills[skill.id] = skill
        logger.debug(f"Registered skill: {skill.id} ({skill.name})")

    def get(self, skill_id: str) -> Optional[Skill]:
        return self._skills.get(skill_id)

    def require(self, skill_id: str) -> Skill:
        """Get a skill or raise SkillNotFoundError."""
        skill = self._skills.get(skill_id)
        if skill is None:
            raise SkillNotFoundError(skill_id)
        return skill

    def all(self) -> list[Skill]:
        return list(self._skills.values())

    def __contains__(self, skill_id: object) -> bool:
        return skill_id in self._skills

    def __iter__(self) -> Iterator[Skill]:
        return iter(list(self._skills.values()))

    def __len__(self) -> int:
        return len(self._skills)
