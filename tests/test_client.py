"""Tests for the tutor backends."""

import json

import httpx
import pytest

from code_tutor import config
from code_tutor.client import (
    HttpTutorClient,
    PlaceholderTutorClient,
    TutorBackendError,
    create_client,
)
from code_tutor.prompt.classifier import parse
from code_tutor.types import BuiltPrompt, LearningLevel, StudentContext


PROMPT = BuiltPrompt(system_prompt="system", user_prompt="user", total_tokens=42)


def _context(level: LearningLevel = LearningLevel.BEGINNER) -> StudentContext:
    return StudentContext(session_id="s1", learning_level=level)


# =============================================================================
# PLACEHOLDER
# =============================================================================

@pytest.mark.asyncio
async def test_placeholder_prefix():
    reply = await PlaceholderTutorClient().complete(PROMPT, parse("hello"), _context())
    assert reply.startswith("[Prompt built: 42 tokens, beginner level]\n\n")


@pytest.mark.asyncio
async def test_placeholder_code_reply_names_languages():
    parsed = parse("Look:\n```py\nx = 1\n```\n```js\ny\n```")
    reply = await PlaceholderTutorClient().complete(PROMPT, parsed, _context(LearningLevel.ADVANCED))

    assert "I see some python, javascript code." in reply
    assert "What have you tried so far?" in reply


@pytest.mark.asyncio
@pytest.mark.parametrize("message,level,expected", [
    ("My code has a bug", LearningLevel.BEGINNER, "Let's debug this together!"),
    ("Explain closures", LearningLevel.INTERMEDIATE, "Good question!"),
    ("What is recursion", LearningLevel.ADVANCED, "theoretical foundations"),
    ("Hello", LearningLevel.BEGINNER, "I'm here to help you learn!"),
])
async def test_placeholder_by_question_type(message, level, expected):
    reply = await PlaceholderTutorClient().complete(PROMPT, parse(message), _context(level))
    assert expected in reply


# =============================================================================
# HTTP
# =============================================================================

@pytest.mark.asyncio
async def test_http_client_posts_prompt():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"reply": "## Answer"})

    client = HttpTutorClient(
        base_url="https://tutor.test/v1/reply",
        api_key="secret",
        transport=httpx.MockTransport(handler),
    )
    reply = await client.complete(PROMPT, parse("What is a list?"), _context(LearningLevel.INTERMEDIATE))

    assert reply == "## Answer"
    assert seen["body"] == {
        "system": "system",
        "prompt": "user",
        "learning_level": "intermediate",
        "question_type": "concept",
    }
    assert seen["auth"] == "Bearer secret"


@pytest.mark.asyncio
async def test_http_error_propagates():
    client = HttpTutorClient(
        base_url="https://tutor.test/v1/reply",
        api_key="",
        transport=httpx.MockTransport(lambda request: httpx.Response(503)),
    )
    with pytest.raises(httpx.HTTPStatusError):
        await client.complete(PROMPT, parse("hi"), _context())


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"json": {"text": "wrong key"}},
    {"json": {"reply": 5}},
    {"json": ["reply"]},
    {"content": b"not json"},
])
async def test_malformed_payload_raises(body):
    client = HttpTutorClient(
        base_url="https://tutor.test/v1/reply",
        api_key="",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, **body)),
    )
    with pytest.raises(TutorBackendError):
        await client.complete(PROMPT, parse("hi"), _context())


def test_http_client_requires_url(monkeypatch):
    monkeypatch.setattr(config, "TUTOR_API_URL", None)
    with pytest.raises(ValueError):
        HttpTutorClient()


def test_create_client_selects_backend(monkeypatch):
    monkeypatch.setattr(config, "TUTOR_API_URL", None)
    assert isinstance(create_client(), PlaceholderTutorClient)

    monkeypatch.setattr(config, "TUTOR_API_URL", "https://tutor.test/v1/reply")
    assert isinstance(create_client(), HttpTutorClient)
