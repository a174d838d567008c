"""Tests for the command-line interface."""

import json

import pytest

from code_tutor import config
from code_tutor.cli import main
from code_tutor.prompt.safety import HOMEWORK_REFUSAL


@pytest.fixture
def db(tmp_path, monkeypatch, log_dir):
    """Offline backend, a throwaway database and temp logs."""
    monkeypatch.setattr(config, "TUTOR_API_URL", None)
    return str(tmp_path / "cli.db")


def test_ask_uses_placeholder_tutor(db, capsys):
    assert main(["--db", db, "ask", "What is a loop?", "--level", "intermediate"]) == 0

    out = capsys.readouterr().out
    assert "[Prompt built:" in out
    assert "intermediate level" in out


def test_ask_refusal_exit_code(db, capsys):
    assert main(["--db", db, "ask", "Please do my homework"]) == 1
    assert HOMEWORK_REFUSAL in capsys.readouterr().out


def test_ask_with_report(db, capsys):
    main(["--db", db, "ask", "What is a loop?", "--report"])
    out = capsys.readouterr().out
    assert "--- Accessibility Report ---" in out
    assert '"wcag_level": "AA"' in out


def test_format_file(tmp_path, capsys, log_dir):
    reply = tmp_path / "reply.md"
    reply.write_text("##Title\n```\nx\n```", encoding="utf-8")

    assert main(["format", str(reply), "--report"]) == 0

    out = capsys.readouterr().out
    assert "## Title" in out
    assert "```plaintext" in out
    assert "--- Accessibility Report ---" in out


def test_history_and_export(db, capsys, tmp_path):
    main(["--db", db, "ask", "What is a loop?"])
    capsys.readouterr()

    assert main(["--db", db, "history"]) == 0
    out = capsys.readouterr().out
    assert "You: What is a loop?" in out
    assert "Tutor: [Prompt built:" in out

    assert main(["--db", db, "history", "--sessions"]) == 0
    assert "2 message(s)" in capsys.readouterr().out

    export_path = tmp_path / "export.json"
    assert main(["--db", db, "export", "-o", str(export_path)]) == 0
    exported = json.loads(export_path.read_text(encoding="utf-8"))
    assert len(exported[0]["messages"]) == 2


def test_cleanup(db, capsys):
    main(["--db", db, "ask", "What is a loop?"])
    capsys.readouterr()

    assert main(["--db", db, "cleanup", "--days", "30"]) == 0
    assert "Deleted 0 session(s)" in capsys.readouterr().out


def test_reset_requires_confirmation(db, capsys):
    main(["--db", db, "ask", "What is a loop?"])
    capsys.readouterr()

    assert main(["--db", db, "reset"]) == 2
    assert main(["--db", db, "reset", "--yes"]) == 0

    main(["--db", db, "history"])
    assert "No messages yet." in capsys.readouterr().out


def test_invalid_level_rejected(db):
    with pytest.raises(SystemExit):
        main(["--db", db, "ask", "hi", "--level", "wizard"])
