"""Formatter - Stage 1 of the Reply Pipeline.

Repairs common markdown defects in a generated reply, tags and labels code
blocks, and keeps the heading hierarchy free of skipped levels.
"""

import re

from code_tutor.fences import fenced_line_numbers, scan_fences
from code_tutor.logger import logger
from code_tutor.response.accessibility import validate_response


HEADING_MISSING_SPACE = re.compile(r'^(#{1,6})(?=[^\s#])')
# '-' and '+' bullets; '*' handled separately so inline emphasis survives
DASH_PLUS_MISSING_SPACE = re.compile(r'^(\s*)([-+])(?=[^\s\-+])')
STAR_MISSING_SPACE = re.compile(r'^(\s*)\*(?=[^\s*])(?!.*\*)')
EXCESS_BLANK_LINES = re.compile(r'\n{3,}')
HEADING = re.compile(r'^(#{1,6})\s+(.*)$')

DEFAULT_FENCE_LANGUAGE = 'plaintext'


def format_response(text: str) -> str:
    """Format a raw tutor reply for display.

    Applies, in order: markdown repair, code block repair, code block labels,
    heading normalisation. The accessibility audit then runs on the result
    for logging only; it never changes the output.

    Args:
        text: Raw reply text from the tutor backend

    Returns:
        Formatted markdown
    """
    if not text:
        return ''

    formatted = fix_markdown_issues(text)
    formatted = fix_code_blocks(formatted)
    formatted = add_code_block_labels(formatted)
    formatted = normalize_headings(formatted)

    report = validate_response(formatted)
    logger.debug(f"Formatted reply: {len(text)} -> {len(formatted)} chars, "
                 f"{len(report.warnings)} accessibility warning(s)")

    return formatted


def fix_markdown_issues(text: str) -> str:
    """Add missing spaces after heading/list markers and collapse blank lines.

    Marker repairs skip lines inside fenced code. Blank-line collapsing runs
    over the whole text, code included.
    """
    lines = text.split('\n')
    inside = fenced_line_numbers(scan_fences(lines))

    for index, line in enumerate(lines):
        if index in inside:
            continue
        line = HEADING_MISSING_SPACE.sub(r'\1 ', line)
        line = DASH_PLUS_MISSING_SPACE.sub(r'\1\2 ', line)
        line = STAR_MISSING_SPACE.sub(r'\1* ', line)
        lines[index] = line

    return EXCESS_BLANK_LINES.sub('\n\n', '\n'.join(lines))


def fix_code_blocks(text: str) -> str:
    """Tag untagged fences as plaintext and trim blank lines inside fences."""
    lines = text.split('\n')
    output: list[str] = []
    cursor = 0

    for region in scan_fences(lines):
        if not region.closed:
            continue
        output.extend(lines[cursor:region.start])
        if region.prefix:
            output.append(region.prefix)
        output.append(f'{region.indent}```{region.language or DEFAULT_FENCE_LANGUAGE}')
        output.extend(_trim_blank_lines(region.body))
        output.append(f'{region.indent}```')
        cursor = region.end + 1

    output.extend(lines[cursor:])
    return '\n'.join(output)


def add_code_block_labels(text: str) -> str:
    """Insert a bold label line before every fenced code block.

    The first block is labelled "Example", later ones "Example 2", "Example 3"...
    """
    lines = text.split('\n')
    output: list[str] = []
    cursor = 0
    number = 0

    for region in scan_fences(lines):
        if not region.closed:
            continue
        number += 1
        output.extend(lines[cursor:region.start])
        if region.prefix:
            output.append(region.prefix)
        if output and output[-1].strip():
            output.append('')

        name = 'Example' if number == 1 else f'Example {number}'
        output.append(f'**{name} ({region.language or "code"}):**')
        output.append(region.opening)
        output.extend(lines[region.start + 1:region.end + 1])
        cursor = region.end + 1

    output.extend(lines[cursor:])
    return '\n'.join(output)


def normalize_headings(text: str) -> str:
    """Clamp heading levels so no heading rises more than one level.

    The first heading keeps whatever level it declares. Later headings may drop
    to any level but may go at most one level deeper than the current one.
    """
    lines = text.split('\n')
    inside = fenced_line_numbers(scan_fences(lines))
    current_level = 0

    for index, line in enumerate(lines):
        if index in inside:
            continue
        match = HEADING.match(line)
        if not match:
            continue

        proposed = len(match.group(1))
        if current_level == 0:
            level = proposed
        else:
            level = min(proposed, current_level + 1)

        current_level = level
        lines[index] = f"{'#' * level} {match.group(2)}"

    return '\n'.join(lines)


def _trim_blank_lines(body: list[str]) -> list[str]:
    start, end = 0, len(body)
    while start < end and not body[start].strip():
        start += 1
    while end > start and not body[end - 1].strip():
        end -= 1
    return body[start:end]
