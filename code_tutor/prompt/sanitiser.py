"""Sanitiser - Stage 2 of the Request Pipeline.

Cleans student text before it is embedded in a prompt. Injection phrasing is
flagged by substitution with the redaction token rather than rejected here;
the safety check downstream decides whether the prompt may proceed.
"""

import re
from dataclasses import dataclass, field

from code_tutor import config


@dataclass
class SanitiserResult:
    """Result of sanitisation with metadata."""
    content: str
    rules_applied: list[str] = field(default_factory=list)
    original_length: int = 0
    final_length: int = 0
    truncated: bool = False


# =============================================================================
# SANITISER RULES - Ordered by processing priority
# =============================================================================

SANITISER_RULES = [
    # 1. Control characters (C0 range and DEL). Tab/LF/CR are whitespace and
    #    are kept so multi-line injection phrasing still matches below.
    {
        'name': 'control_chars',
        'pattern': re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]'),
        'replacement': '',
        'description': 'Non-printing control characters'
    },

    # 2. Injection templates (MUST run before whitespace is collapsed)
    {
        'name': 'ignore_instructions',
        'pattern': re.compile(
            r'ignore\s+(?:previous|above|all)\s+(?:instructions|prompts|rules)',
            re.IGNORECASE
        ),
        'replacement': config.REDACTION_TOKEN,
        'description': 'Attempts to discard the tutor instructions'
    },
    {
        'name': 'role_override',
        'pattern': re.compile(
            r'you\s+are\s+now|act\s+as|pretend\s+(?:you\s+are|to\s+be)',
            re.IGNORECASE
        ),
        'replacement': config.REDACTION_TOKEN,
        'description': 'Attempts to reassign the tutor role'
    },
    {
        'name': 'forget_instructions',
        'pattern': re.compile(
            r'forget\s+(?:everything|all|your)\s+(?:previous|above)',
            re.IGNORECASE
        ),
        'replacement': config.REDACTION_TOKEN,
        'description': 'Attempts to wipe earlier context'
    },
    {
        'name': 'new_instructions',
        'pattern': re.compile(r'new\s+(?:instructions|rules|role)\s*:', re.IGNORECASE),
        'replacement': config.REDACTION_TOKEN,
        'description': 'Inline replacement instruction headers'
    },
    {
        'name': 'system_prompt_header',
        'pattern': re.compile(r'system\s+(?:prompt|message|role)\s*:', re.IGNORECASE),
        'replacement': config.REDACTION_TOKEN,
        'description': 'Fake system prompt headers'
    },
    {
        'name': 'privilege_markers',
        'pattern': re.compile(r'\[(?:SYSTEM|ADMIN|ROOT)\]', re.IGNORECASE),
        'replacement': config.REDACTION_TOKEN,
        'description': 'Bracketed privilege markers'
    },

    # 3. Whitespace runs (MUST be last)
    {
        'name': 'collapse_whitespace',
        'pattern': re.compile(r'\s+'),
        'replacement': ' ',
        'description': 'Runs of spaces, tabs and newlines'
    },
]

INJECTION_RULE_NAMES = {
    'ignore_instructions',
    'role_override',
    'forget_instructions',
    'new_instructions',
    'system_prompt_header',
    'privilege_markers',
}


def sanitize(text: str) -> str:
    """Clean student text for inclusion in a prompt.

    Args:
        text: Raw student text

    Returns:
        Cleaned text, at most MAX_INPUT_LENGTH characters plus a truncation notice
    """
    return sanitize_with_log(text).content


def sanitize_with_log(text: str) -> SanitiserResult:
    """Sanitise and report which rules fired."""
    if not text:
        return SanitiserResult('')

    original_length = len(text)
    rules_applied = []

    for rule in SANITISER_RULES:
        before = text
        text = rule['pattern'].sub(rule['replacement'], text)
        if text != before:
            rules_applied.append(rule['name'])

    text = text.strip()

    truncated = len(text) > config.MAX_INPUT_LENGTH
    if truncated:
        text = text[:config.MAX_INPUT_LENGTH] + config.TRUNCATION_NOTICE
        rules_applied.append('truncate')

    return SanitiserResult(
        content=text,
        rules_applied=rules_applied,
        original_length=original_length,
        final_length=len(text),
        truncated=truncated,
    )


def has_injection(result: SanitiserResult) -> bool:
    """Check whether any injection rule fired during sanitisation."""
    return any(name in INJECTION_RULE_NAMES for name in result.rules_applied)
