"""Prompt Builder - Stage 4 of the Request Pipeline.

Assembles the system prompt and the user prompt (level instruction, recent
history, the student's code and the sanitised question).
"""

from typing import Iterable, Union

from code_tutor import config
from code_tutor.logger import logger
from code_tutor.prompt.sanitiser import INJECTION_RULE_NAMES, has_injection, sanitize_with_log
from code_tutor.prompt.safety import estimate_tokens
from code_tutor.prompt.templates import (
    CODE_BLOCK_ENTRY,
    CODE_SECTION,
    HISTORY_SECTION,
    LEVEL_INSTRUCTIONS,
    QUESTION_SECTION,
    SYSTEM_PROMPT,
)
from code_tutor.types import (
    BuiltPrompt,
    CodeBlock,
    ConversationMessage,
    LearningLevel,
    ParsedMessage,
    Role,
    StudentContext,
)


def build_prompt(parsed: ParsedMessage, context: StudentContext) -> BuiltPrompt:
    """Build the complete prompt for one student message.

    Args:
        parsed: Classifier output for the message
        context: Snapshot of the student's level, history and preferences

    Returns:
        BuiltPrompt with an approximate token count
    """
    system_prompt = build_system_prompt()

    question = sanitize_with_log(parsed.text)
    if has_injection(question):
        fired = [name for name in question.rules_applied if name in INJECTION_RULE_NAMES]
        logger.info(f"Redacted injection phrasing in question ({', '.join(fired)})")

    sections = [
        build_level_instruction(context.learning_level),
        build_history_context(context.conversation_history),
        build_code_context(parsed.code_blocks),
        QUESTION_SECTION.format(message=question.content),
    ]
    user_prompt = '\n\n'.join(section for section in sections if section)

    return BuiltPrompt(
        system_prompt=system_prompt,
        user_prompt=user_prompt,
        total_tokens=estimate_tokens(system_prompt + user_prompt),
    )


def build_system_prompt() -> str:
    return SYSTEM_PROMPT


def build_level_instruction(level: Union[LearningLevel, str]) -> str:
    """Instruction block for the student's learning level.

    Raises:
        ValueError: if ``level`` is not a known learning level
    """
    return LEVEL_INSTRUCTIONS[LearningLevel(level)]


def build_history_context(history: Iterable[ConversationMessage]) -> str:
    """Render the last MAX_HISTORY_MESSAGES turns, truncating long bodies."""
    recent = list(history or [])[-config.MAX_HISTORY_MESSAGES:]
    if not recent:
        return ''

    formatted = []
    for message in recent:
        speaker = 'Student' if message.role == Role.STUDENT else 'Tutor'
        content = message.content
        if len(content) > config.MAX_HISTORY_PREVIEW:
            content = content[:config.MAX_HISTORY_PREVIEW] + '...'
        formatted.append(f'{speaker}: {content}')

    return HISTORY_SECTION.format(messages='\n\n'.join(formatted))


def build_code_context(code_blocks: Iterable[CodeBlock]) -> str:
    """Render the student's code blocks; numbered only when there are several."""
    blocks = list(code_blocks or [])
    if not blocks:
        return ''

    numbered = len(blocks) > 1
    entries = [
        CODE_BLOCK_ENTRY.format(
            number=f' {index}' if numbered else '',
            language=block.language,
            code=block.code,
        )
        for index, block in enumerate(blocks, 1)
    ]

    return CODE_SECTION.format(blocks='\n\n'.join(entries))
