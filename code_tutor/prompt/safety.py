"""Safety - Stage 3 of the Request Pipeline.

Second, independent pass over the assembled prompt. Checks run in a fixed
priority order and the first failure decides the refusal message.
"""

import math
import re

from code_tutor import config
from code_tutor.logger import logger
from code_tutor.types import ParsedMessage, SafetyVerdict


HOMEWORK_REFUSAL = (
    "I notice this might be homework. I can't solve assignments for you, but I'd "
    "love to help you understand the concepts! What specific part are you struggling with?"
)

UNETHICAL_REFUSAL = (
    "I can't help with that request. I'm designed to teach ethical programming "
    "practices. Would you like to learn about cybersecurity, proper authentication, "
    "or ethical coding instead?"
)

INJECTION_REFUSAL = (
    "I detected an unusual request format that I can't process. Could you rephrase "
    "your question about programming? I'm here to help you learn!"
)

LENGTH_REFUSAL = (
    "Your question is quite long! Could you break it down into smaller, more "
    "focused questions? This helps me give you better, more targeted guidance."
)

# Checked against the combined (already sanitised) prompt
PROMPT_INJECTION_PATTERNS = [
    re.compile(re.escape(config.REDACTION_TOKEN)),
    re.compile(r'ignore\s+(?:previous|above|all)', re.IGNORECASE),
    re.compile(r'you\s+are\s+now', re.IGNORECASE),
    re.compile(r'forget\s+everything', re.IGNORECASE),
    re.compile(r'new\s+instructions\s*:', re.IGNORECASE),
    re.compile(r'\[(?:SYSTEM|ADMIN)\]', re.IGNORECASE),
]


def estimate_tokens(text: str) -> int:
    """Rough token estimate (~4 characters per token), rounded up."""
    return math.ceil(len(text) / config.CHARS_PER_TOKEN)


def contains_injection(prompt: str) -> bool:
    return any(pattern.search(prompt) for pattern in PROMPT_INJECTION_PATTERNS)


def validate_safety(combined_prompt: str, parsed: ParsedMessage) -> SafetyVerdict:
    """Decide whether a prompt may be sent to the tutor backend.

    Order: homework flag, unethical flag, injection phrasing in the combined
    prompt, then the token budget.

    Args:
        combined_prompt: System prompt and user prompt concatenated
        parsed: Classifier output for the student's message

    Returns:
        SafetyVerdict; refusals carry a user-facing explanation
    """
    if parsed.is_homework_request:
        logger.info("Safety: refused homework request")
        return SafetyVerdict.refuse(HOMEWORK_REFUSAL)

    if parsed.is_unethical_request:
        logger.info("Safety: refused unethical request")
        return SafetyVerdict.refuse(UNETHICAL_REFUSAL)

    if contains_injection(combined_prompt):
        logger.warning("Safety: refused prompt containing injection phrasing")
        return SafetyVerdict.refuse(INJECTION_REFUSAL)

    tokens = estimate_tokens(combined_prompt)
    if tokens > config.MAX_PROMPT_TOKENS:
        logger.info(f"Safety: refused prompt over budget ({tokens} > {config.MAX_PROMPT_TOKENS} tokens)")
        return SafetyVerdict.refuse(LENGTH_REFUSAL)

    return SafetyVerdict.allow()
