"""Classifier - Stage 1 of the Request Pipeline.

Parses a raw student message into a ParsedMessage: fenced code blocks, a
question type, and the homework/unethical policy flags.
"""

import re
from typing import Optional

from code_tutor.fences import scan_fences
from code_tutor.types import CodeBlock, ParsedMessage, QuestionType


# =============================================================================
# QUESTION TYPE KEYWORDS - Checked in order, first match wins
# =============================================================================

QUESTION_TYPE_PATTERNS = [
    (QuestionType.DEBUGGING, re.compile(
        r'(?:debug|fix|error|bug|wrong|not work|broken)',
        re.IGNORECASE
    )),
    (QuestionType.EXPLANATION, re.compile(
        r'(?:explain|why|how|understand|teach|meaning|purpose)',
        re.IGNORECASE
    )),
    (QuestionType.CONCEPT, re.compile(
        r'(?:concept|what|define|learn|algorithm|data structure)',
        re.IGNORECASE
    )),
]

# =============================================================================
# POLICY PATTERNS
# =============================================================================

HOMEWORK_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in [
        r'do (?:my|this|our) (?:homework|assignment|project|exercise)',
        r'solve (?:this|for me)',
        r'write (?:code|a program|a solution)',
        r'complete (?:my|this|the) (?:assignment|project|homework)',
        r'(?:is )?due (?:today|tomorrow|in \d+ (?:hours?|days?))',
        r'urgent.*code',
        r'asap.*fix',
    ]
]

UNETHICAL_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in [
        r'hack|crack|exploit|vulnerability|bypass',
        r'cheat|plagiari[sz]e|copy (?:code|answer)',
        r'malware|virus|trojan|ransomware',
        r'password.*crack|brute force',
        r'steal|unauthorized access',
    ]
]

# Short fence tags mapped to canonical language identifiers
LANGUAGE_ALIASES = {
    'js': 'javascript',
    'ts': 'typescript',
    'py': 'python',
    'cs': 'csharp',
    'rb': 'ruby',
    'rs': 'rust',
    'sh': 'shell',
    'yml': 'yaml',
    'c++': 'cpp',
    'c#': 'csharp',
}

UNKNOWN_LANGUAGE = 'unknown'


def parse(raw: Optional[str]) -> ParsedMessage:
    """Parse a raw student message.

    Never raises: empty or missing input yields ``ParsedMessage.empty()``.

    Args:
        raw: The student's message as typed

    Returns:
        ParsedMessage with extracted code, question type and policy flags
    """
    if not raw or not raw.strip():
        return ParsedMessage.empty()

    text = raw.strip()
    code_blocks = extract_code_blocks(text)

    return ParsedMessage(
        text=text,
        code_blocks=code_blocks,
        question_type=detect_question_type(text),
        is_homework_request=detect_homework_request(text),
        is_unethical_request=detect_unethical_request(text),
        detected_languages=detect_languages(code_blocks),
    )


def extract_code_blocks(text: str) -> tuple[CodeBlock, ...]:
    """Extract closed fenced regions in order of appearance.

    Unclosed regions are ignored; untagged regions are labelled 'unknown'.
    """
    regions = scan_fences(text.split('\n'))
    return tuple(
        CodeBlock(
            language=normalize_language(region.language or UNKNOWN_LANGUAGE),
            code='\n'.join(region.body),
        )
        for region in regions
        if region.closed
    )


def detect_question_type(text: str) -> QuestionType:
    for question_type, pattern in QUESTION_TYPE_PATTERNS:
        if pattern.search(text):
            return question_type
    return QuestionType.GENERAL


def detect_homework_request(text: str) -> bool:
    """True if the message asks for work to be done rather than understood."""
    return any(pattern.search(text) for pattern in HOMEWORK_PATTERNS)


def detect_unethical_request(text: str) -> bool:
    """True if the message touches hacking, cheating or malware."""
    return any(pattern.search(text) for pattern in UNETHICAL_PATTERNS)


def detect_languages(code_blocks: tuple[CodeBlock, ...]) -> tuple[str, ...]:
    # dict preserves first-occurrence order
    return tuple(dict.fromkeys(block.language for block in code_blocks))


def normalize_language(language: str) -> str:
    lower = language.lower()
    return LANGUAGE_ALIASES.get(lower, lower)
