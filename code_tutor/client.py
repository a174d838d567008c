"""Tutor backends.

A backend turns a built prompt into a raw reply. The placeholder backend works
offline and answers from fixed templates; the HTTP backend posts the prompt to
a chat-completion style service.
"""

from typing import Optional

import httpx

from code_tutor import config
from code_tutor.logger import logger
from code_tutor.types import (
    BuiltPrompt,
    LearningLevel,
    ParsedMessage,
    QuestionType,
    StudentContext,
)


class TutorBackendError(Exception):
    """The backend answered, but not with a usable reply."""


class TutorClient:
    """Interface for tutor backends."""

    async def complete(
        self,
        prompt: BuiltPrompt,
        parsed: ParsedMessage,
        context: StudentContext
    ) -> str:
        raise NotImplementedError


# =============================================================================
# PLACEHOLDER BACKEND
# =============================================================================

CODE_REPLIES = {
    LearningLevel.BEGINNER: "Let's break it down step by step. Can you explain what each part is supposed to do?",
    LearningLevel.INTERMEDIATE: "Let's analyze this together. What's the expected behavior versus what's actually happening?",
    LearningLevel.ADVANCED: "Let's examine the logic and identify potential issues. What have you tried so far?",
}

QUESTION_REPLIES = {
    QuestionType.DEBUGGING: {
        LearningLevel.BEGINNER: "Let's debug this together! First, can you describe what you expected to happen and what actually happened?",
        LearningLevel.INTERMEDIATE: "Let's debug this systematically. What debugging steps have you tried so far? What did you learn from them?",
        LearningLevel.ADVANCED: "Let's approach this methodically. Have you checked the inputs, outputs, and intermediate states? What patterns do you see?",
    },
    QuestionType.EXPLANATION: {
        LearningLevel.BEGINNER: "Great question! Let me explain this concept in simple terms with examples.",
        LearningLevel.INTERMEDIATE: "Good question! Let's explore this concept and understand the reasoning behind it.",
        LearningLevel.ADVANCED: "Excellent question! Let's dive deep into this concept, including edge cases and best practices.",
    },
    QuestionType.CONCEPT: {
        LearningLevel.BEGINNER: "Let's explore this concept together! I'll start with the basics and build up from there.",
        LearningLevel.INTERMEDIATE: "Let's examine this concept in detail, including practical applications and common patterns.",
        LearningLevel.ADVANCED: "Let's analyze this concept thoroughly, including theoretical foundations and advanced applications.",
    },
    QuestionType.GENERAL: {
        LearningLevel.BEGINNER: "I'm here to help you learn! What would you like to understand better? Feel free to share code or ask specific questions.",
        LearningLevel.INTERMEDIATE: "I'm here to guide your learning! What aspect would you like to explore further?",
        LearningLevel.ADVANCED: "I'm here to help you deepen your understanding! What would you like to discuss?",
    },
}


class PlaceholderTutorClient(TutorClient):
    """Offline tutor that answers from fixed, level-aware templates."""

    async def complete(
        self,
        prompt: BuiltPrompt,
        parsed: ParsedMessage,
        context: StudentContext
    ) -> str:
        level = LearningLevel(context.learning_level)
        prefix = f"[Prompt built: {prompt.total_tokens} tokens, {level.value} level]"

        if parsed.code_blocks:
            languages = ', '.join(parsed.detected_languages)
            body = f"I see some {languages} code. {CODE_REPLIES[level]}"
        else:
            body = QUESTION_REPLIES[parsed.question_type][level]

        return f"{prefix}\n\n{body}"


# =============================================================================
# HTTP BACKEND
# =============================================================================

class HttpTutorClient(TutorClient):
    """Posts the prompt as JSON and reads ``reply`` from the response body.

    Request body: {"system": ..., "prompt": ..., "learning_level": ...,
    "question_type": ...}. HTTP errors propagate as ``httpx.HTTPError``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url or config.TUTOR_API_URL
        if not self.base_url:
            raise ValueError("TUTOR_API_URL is not configured")
        self.api_key = api_key if api_key is not None else config.TUTOR_API_KEY
        self.timeout = timeout or config.TUTOR_API_TIMEOUT
        self.transport = transport

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def complete(
        self,
        prompt: BuiltPrompt,
        parsed: ParsedMessage,
        context: StudentContext
    ) -> str:
        payload = {
            "system": prompt.system_prompt,
            "prompt": prompt.user_prompt,
            "learning_level": LearningLevel(context.learning_level).value,
            "question_type": parsed.question_type.value,
        }

        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            response = await client.post(self.base_url, json=payload, headers=self._headers())
            response.raise_for_status()

        try:
            data = response.json()
        except ValueError as e:
            raise TutorBackendError(f"Tutor backend returned invalid JSON: {e}") from e

        reply = data.get("reply") if isinstance(data, dict) else None
        if not isinstance(reply, str):
            raise TutorBackendError("Tutor backend response has no 'reply' string")

        logger.debug(f"Tutor backend replied with {len(reply)} chars")
        return reply


def create_client() -> TutorClient:
    """HTTP backend when TUTOR_API_URL is set, otherwise the placeholder."""
    if config.TUTOR_API_URL:
        return HttpTutorClient()
    return PlaceholderTutorClient()
