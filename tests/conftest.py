"""Pytest configuration and fixtures."""

import logging
import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from code_tutor import config
from code_tutor.client import TutorClient
from code_tutor.context import StudentContextManager
from code_tutor.store import ConversationStore


class FakeTutorClient(TutorClient):
    """Returns a canned reply and records every call."""

    def __init__(self, reply: str = "Here you go."):
        self.reply = reply
        self.calls = []

    async def complete(self, prompt, parsed, context):
        self.calls.append((prompt, parsed, context))
        return self.reply


@pytest.fixture
def store(tmp_path):
    """Fresh conversation store per test."""
    conversation_store = ConversationStore(str(tmp_path / "conversations.db"))
    yield conversation_store
    conversation_store.close()


@pytest.fixture
def contexts(store):
    return StudentContextManager(store, default_level="beginner")


@pytest.fixture
def fake_client():
    return FakeTutorClient()


@pytest.fixture
def log_dir(tmp_path, monkeypatch):
    """Point setup_logging() at a temp directory and undo its handlers afterwards."""
    monkeypatch.setattr(config, "LOG_DIR", tmp_path / "logs")
    yield config.LOG_DIR

    code_tutor_logger = logging.getLogger("code_tutor")
    for handler in list(code_tutor_logger.handlers):
        code_tutor_logger.removeHandler(handler)
        handler.close()
    code_tutor_logger.addHandler(logging.NullHandler())
    code_tutor_logger.setLevel(logging.NOTSET)
