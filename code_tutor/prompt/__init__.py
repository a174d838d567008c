"""Request pipeline for Code Tutor.

Turns a raw student message into a policy-checked prompt:
1. Classifier - Extract code, question type and policy flags
2. Sanitiser - Strip control characters and redact injection phrasing
3. Safety - Independent allow/deny verdict over the combined prompt
4. Builder - Assemble system and user prompts
"""

from .classifier import parse
from .sanitiser import sanitize, sanitize_with_log, SanitiserResult
from .safety import validate_safety, estimate_tokens
from .builder import (
    build_prompt,
    build_system_prompt,
    build_level_instruction,
    build_history_context,
    build_code_context,
)

__all__ = [
    'parse',
    'sanitize',
    'sanitize_with_log',
    'SanitiserResult',
    'validate_safety',
    'estimate_tokens',
    'build_prompt',
    'build_system_prompt',
    'build_level_instruction',
    'build_history_context',
    'build_code_context',
]
