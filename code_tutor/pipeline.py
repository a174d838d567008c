"""Chat Pipeline - Main orchestrator.

Runs one student turn end to end:
1. Request pipeline - Classify, build the prompt, safety verdict
2. Backend - Ask the tutor client for a reply
3. Reply pipeline - Format the reply and audit it for accessibility
4. Persist - Store the student message and the formatted reply

Refused turns return the refusal text and are not stored.
"""

import time
from typing import Optional

from code_tutor.client import TutorClient
from code_tutor.context import StudentContextManager
from code_tutor.logger import logger
from code_tutor.prompt import build_prompt, parse, validate_safety
from code_tutor.response import format_response, generate_report
from code_tutor.types import (
    ChatResult,
    FormattedReply,
    PromptOutcome,
    Role,
    StudentContext,
)


def prepare_prompt(raw_message: str, context: StudentContext) -> PromptOutcome:
    """Classify a student message and build a policy-checked prompt.

    Args:
        raw_message: Message exactly as the student typed it
        context: Student context snapshot

    Returns:
        PromptOutcome; ``prompt`` is None when the verdict refuses
    """
    parsed = parse(raw_message)
    prompt = build_prompt(parsed, context)
    verdict = validate_safety(prompt.system_prompt + prompt.user_prompt, parsed)

    if not verdict.is_allowed:
        return PromptOutcome(parsed=parsed, verdict=verdict)

    logger.debug(f"Prompt ready: {prompt.total_tokens} tokens, "
                 f"type={parsed.question_type.value}, blocks={len(parsed.code_blocks)}")
    return PromptOutcome(parsed=parsed, verdict=verdict, prompt=prompt)


def finalise_reply(raw_reply: str) -> FormattedReply:
    """Format a backend reply and attach its accessibility report."""
    content = format_response(raw_reply)
    return FormattedReply(content=content, report=generate_report(content))


async def handle_chat(
    raw_message: str,
    contexts: StudentContextManager,
    client: TutorClient,
    session_id: Optional[str] = None
) -> ChatResult:
    """Handle one chat turn.

    Store and backend failures propagate to the caller.

    Args:
        raw_message: Message exactly as the student typed it
        contexts: Student context manager backing the conversation
        client: Tutor backend
        session_id: Session to use (defaults to the student's current one)

    Returns:
        ChatResult with the reply to display
    """
    start = time.monotonic()
    context = contexts.get_context(session_id)

    outcome = prepare_prompt(raw_message, context)
    if not outcome.prompt:
        logger.info("Request refused by safety check")
        return ChatResult(
            reply=outcome.verdict.message,
            parsed=outcome.parsed,
            verdict=outcome.verdict,
        )

    raw_reply = await client.complete(outcome.prompt, outcome.parsed, context)
    formatted = finalise_reply(raw_reply)

    contexts.add_message(Role.STUDENT, raw_message, session_id=context.session_id)
    contexts.add_message(Role.ASSISTANT, formatted.content, session_id=context.session_id)

    elapsed_ms = int((time.monotonic() - start) * 1000)
    logger.info(f"Chat handled in {elapsed_ms}ms "
                f"({len(formatted.report.warnings)} accessibility warning(s))")

    return ChatResult(
        reply=formatted.content,
        parsed=outcome.parsed,
        verdict=outcome.verdict,
        prompt=outcome.prompt,
        report=formatted.report,
    )
