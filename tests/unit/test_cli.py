"""
Unit tests for agent_memory/cli.py

Runs the typer app in-process against a temporary store with hash embeddings.
"""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from agent_memory.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def hash_provider(restore_logging, monkeypatch):
    """Use model-free embeddings and ignore any ambient store path."""
    monkeypatch.delenv("AGENT_MEMORY_PATH", raising=False)
    settings = {"embedding": {"provider": "hash"}, "logging": {"level": "WARNING"}}
    with patch("agent_memory.config._yaml_config", settings):
        yield


@pytest.fixture
def invoke(storage_dir):
    def _invoke(*args, input=None):
        return runner.invoke(app, ["--store", str(storage_dir), *args], input=input)
    return _invoke


@pytest.fixture
def notes_file(tmp_path):
    path = tmp_path / "notes.md"
    path.write_text("deploy with docker compose", encoding="utf-8")
    return path


class TestInitAndIngest:
    """Tests for init and ingest commands."""

    def test_init(self, invoke, storage_dir):
        result = invoke("init")

        assert result.exit_code == 0
        assert "initialized" in result.output
        assert (storage_dir / "vectors").is_dir()

    def test_ingest(self, invoke, notes_file):
        result = invoke("ingest", str(notes_file), "--tags", "ops, deploy")

        assert result.exit_code == 0
        assert "Ingested 1 chunks" in result.output
        assert "Memory IDs:" in result.output

    def test_ingest_missing_file(self, invoke, tmp_path):
        result = invoke("ingest", str(tmp_path / "missing.md"))

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_ingest_unsupported_file(self, invoke, tmp_path):
        path = tmp_path / "archive.zip"
        path.write_bytes(b"PK")

        result = invoke("ingest", str(path))

        assert result.exit_code == 1
        assert "Unsupported file format" in result.output


class TestRecall:
    """Tests for the recall command."""

    def test_recall_finds_ingested_text(self, invoke, notes_file):
        invoke("ingest", str(notes_file), "--tags", "ops")

        result = invoke("recall", "deploy with docker compose")

        assert result.exit_code == 0
        assert "Found 1 memories" in result.output
        assert "Similarity: 100.0%" in result.output
        assert f"Source: {notes_file}" in result.output

    def test_recall_with_filters(self, invoke, notes_file):
        invoke("ingest", str(notes_file), "--tags", "ops")

        matching = invoke("recall", "deploy with docker compose", "--tag", "ops", "--type", "document")
        other = invoke("recall", "deploy with docker compose", "--tag", "chat")

        assert "Found 1 memories" in matching.output
        assert "Found 0 memories" in other.output

    def test_recall_unknown_type(self, invoke):
        result = invoke("recall", "anything", "--type", "dream")

        assert result.exit_code == 1
        assert "Unknown memory type" in result.output


class TestSkillCommands:
    """Tests for skills, execute and recommend."""

    def test_skills(self, invoke):
        result = invoke("skills")

        assert result.exit_code == 0
        assert "Available Skills (5)" in result.output
        assert "ID: code-review" in result.output

    def test_execute(self, invoke):
        result = invoke("execute", "doc-generation", "the billing service")

        assert result.exit_code == 0
        assert "Skill executed successfully!" in result.output
        payload = json.loads(result.output.split("Skill executed successfully!", 1)[1])
        assert "the billing service" in payload["documentation"]

    def test_execute_unknown_skill(self, invoke):
        result = invoke("execute", "nope", "query")

        assert result.exit_code == 1
        assert "Skill not found: nope" in result.output

    def test_execute_records_experience(self, invoke):
        invoke("execute", "code-review", "check the parser")

        result = invoke("stats")

        assert "Total Memories: 1" in result.output
        assert "experience: 1" in result.output

    def test_recommend(self, invoke):
        result = invoke("recommend", "review the security of this code", "--limit", "2")

        assert result.exit_code == 0
        assert "Top 2 Recommendations" in result.output
        assert result.output.index("Code Review") < result.output.index("[2]")


class TestStatsAndClear:
    """Tests for stats and clear."""

    def test_stats_empty(self, invoke):
        result = invoke("stats")

        assert result.exit_code == 0
        assert "Total Memories: 0" in result.output
        assert "Oldest Memory" not in result.output

    def test_clear_with_yes(self, invoke, notes_file):
        invoke("ingest", str(notes_file))

        result = invoke("clear", "--yes")

        assert result.exit_code == 0
        assert "All memories cleared!" in result.output
        assert "Total Memories: 0" in invoke("stats").output

    def test_clear_cancelled(self, invoke, notes_file):
        invoke("ingest", str(notes_file))

        result = invoke("clear", input="n\n")

        assert "Cancelled." in result.output
        assert "Total Memories: 1" in invoke("stats").output
