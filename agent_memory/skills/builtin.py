"""
Built-in example skills.

These return canned, deterministic analyses. They exist so a fresh memory
has something to execute and rank, and as templates for real skills.
"""

from datetime import datetime

from .base import Skill, SkillContext, SkillOutput, SkillResult


class CodeReviewSkill(Skill):
    id = "code-review"
    name = "Code Review"
    description = "Analyze code for quality, security, and best practices"

    async def execute(self, context: SkillContext) -> SkillResult:
        return SkillResult(
            success=True,
            output=SkillOutput.from_json({
                "findings": [
                    "Code quality: Good",
                    "Security: No vulnerabilities detected",
                    "Best practices: Following conventions",
                ],
                "recommendations": [
                    "Consider adding more unit tests",
                    "Update documentation",
                ],
            }),
            metadata={"analysis_type": "code-review", "timestamp": datetime.now()},
        )


class DocGenerationSkill(Skill):
    id = "doc-generation"
    name = "Documentation Generator"
    description = "Generate documentation from code and context"

    async def execute(self, context: SkillContext) -> SkillResult:
        return SkillResult(
            success=True,
            output=SkillOutput.from_json({
                "documentation": f"# Documentation\n\nGenerated from context: {context.query}",
                "sections": ["Overview", "Usage", "API Reference"],
            }),
            metadata={"doc_type": "api-documentation", "timestamp": datetime.now()},
        )


class TestGenerationSkill(Skill):
    __test__ = False  # not a pytest class

    id = "test-generation"
    name = "Test Generator"
    description = "Generate unit tests for code"

    async def execute(self, context: SkillContext) -> SkillResult:
        return SkillResult(
            success=True,
            output=SkillOutput.from_json({
                "tests": [
                    "test case 1: should handle valid input",
                    "test case 2: should handle invalid input",
                    "test case 3: should handle edge cases",
                ],
                "framework": "pytest",
            }),
            metadata={"test_framework": "pytest", "timestamp": datetime.now()},
        )


class DbOptimizationSkill(Skill):
    id = "db-optimization"
    name = "Database Optimization"
    description = "Analyze and optimize database queries and schema"

    async def execute(self, context: SkillContext) -> SkillResult:
        return SkillResult(
            success=True,
            output=SkillOutput.from_json({
                "optimizations": [
                    "Add index on user_id column",
                    "Optimize join queries",
                    "Consider query caching",
                ],
                "estimated_improvement": "40% faster",
            }),
            metadata={"optimization_type": "database", "timestamp": datetime.now()},
        )


class RefactoringSkill(Skill):
    id = "refactoring"
    name = "Code Refactoring"
    description = "Suggest code refactoring improvements"

    async def execute(self, context: SkillContext) -> SkillResult:
        return SkillResult(
            success=True,
            output=SkillOutput.from_json({
                "suggestions": [
                    "Extract method for complex logic",
                    "Reduce cyclomatic complexity",
                    "Apply design patterns where appropriate",
                ],
                "priority": "medium",
            }),
            metadata={"refactor_type": "general", "timestamp": datetime.now()},
        )


def builtin_skills() -> list[Skill]:
    """Fresh instances of every built-in skill."""
    return [
        CodeReviewSkill(),
        DocGenerationSkill(),
        TestGenerationSkill(),
        DbOptimizationSkill(),
        RefactoringSkill(),
    ]
