"""Accessibility - Stage 2 of the Reply Pipeline.

Audits a formatted reply for WCAG 2.1 AA relevant defects: colour-only
meaning, unlabelled or very long code blocks, skipped heading levels, and
vague link text.

Findings are advisory. Nothing here blocks or alters the reply, and an
unexpected fault inside a check is reported as a warning rather than raised.
"""

import re
import time

from code_tutor import config
from code_tutor.fences import fenced_line_numbers, scan_fences
from code_tutor.logger import logger
from code_tutor.types import (
    AccessibilityReport,
    AccessibilityWarning,
    ErrorSeverity,
    HeadingEntry,
    WarningType,
)


INLINE_COLOR_STYLE = re.compile(r'style="[^"]*color\s*:[^"]*"', re.IGNORECASE)

COLOR_MEANING_PATTERNS = [
    re.compile(r'\*\*(?:red|green|blue|yellow|orange):', re.IGNORECASE),
    re.compile(r'text is (?:red|green|blue|yellow|orange)', re.IGNORECASE),
    re.compile(r'(?:red|green|blue) (?:means|indicates|shows)', re.IGNORECASE),
]

HEADING_LINE = re.compile(r'^(#+)\s+(.*)$')

# Markdown links, excluding images
LINK = re.compile(r'(?<!!)\[([^\]]+)\]\([^)]+\)')

VAGUE_LINK_TEXTS = {
    'click here',
    'here',
    'link',
    'this',
    'read more',
    'more',
    'click',
}
MIN_LINK_TEXT_LENGTH = 3
SHORT_LINK_ALLOWED = {'go'}


# =============================================================================
# CHECKS
# =============================================================================

def check_color_contrast(response: str) -> list[AccessibilityWarning]:
    """Flag inline colour styles and meaning conveyed by colour alone (WCAG 1.4.1)."""
    warnings = []

    if INLINE_COLOR_STYLE.search(response):
        warnings.append(AccessibilityWarning(
            type=WarningType.COLOR,
            message='Found inline color styles in response',
            suggestion='Ensure sufficient contrast (WCAG AA: 4.5:1 for normal text, '
                       '3:1 for large text)',
        ))

    # One warning for the whole class, however many phrasings match
    if any(pattern.search(response) for pattern in COLOR_MEANING_PATTERNS):
        warnings.append(AccessibilityWarning(
            type=WarningType.COLOR,
            message='Detected potential color-only meaning',
            suggestion='Use text labels, icons, or patterns in addition to color (WCAG 1.4.1)',
        ))

    return warnings


def check_code_block_accessibility(response: str) -> list[AccessibilityWarning]:
    """Count code blocks without a language tag and blocks over the length limit."""
    warnings = []
    regions = scan_fences(response.split('\n'))

    missing_language = sum(1 for region in regions if not region.language)
    if missing_language:
        warnings.append(AccessibilityWarning(
            type=WarningType.CODE_BLOCK,
            message=f'Found {missing_language} code block(s) without language identifier',
            suggestion='Add a language identifier (e.g., ```javascript) so screen readers '
                       'and syntax highlighting can announce the code (WCAG 3.1.1)',
        ))

    long_blocks = sum(
        1 for region in regions
        if region.closed and len(region.body) > config.LONG_CODE_BLOCK_LINES
    )
    if long_blocks:
        warnings.append(AccessibilityWarning(
            type=WarningType.CODE_BLOCK,
            message=f'Found {long_blocks} very long code block(s) '
                    f'(>{config.LONG_CODE_BLOCK_LINES} lines)',
            suggestion='Consider breaking long code examples into smaller, focused sections',
        ))

    return warnings


def extract_headings(response: str) -> list[HeadingEntry]:
    """Headings outside fenced code, with 1-based line numbers."""
    lines = response.split('\n')
    inside = fenced_line_numbers(scan_fences(lines))
    headings = []

    for index, line in enumerate(lines):
        if index in inside:
            continue
        match = HEADING_LINE.match(line)
        if match:
            headings.append(HeadingEntry(
                level=len(match.group(1)),
                text=match.group(2),
                line=index + 1,
            ))

    return headings


def check_heading_structure(response: str) -> list[AccessibilityWarning]:
    """Flag skipped heading levels and levels beyond h6 (WCAG 1.3.1)."""
    warnings = []
    previous_level = 0

    for heading in extract_headings(response):
        if previous_level and heading.level > previous_level + 1:
            warnings.append(AccessibilityWarning(
                type=WarningType.HEADING,
                message=f'Heading hierarchy violation: h{previous_level} → h{heading.level} '
                        f'(skipped h{previous_level + 1})',
                location=f'Line {heading.line}: "{heading.text}"',
                suggestion='Use sequential heading levels (h1 → h2 → h3) for proper '
                           'screen reader navigation (WCAG 1.3.1)',
            ))

        if heading.level > config.MAX_HEADING_LEVEL:
            warnings.append(AccessibilityWarning(
                type=WarningType.HEADING,
                message=f'Heading level h{heading.level} exceeds maximum '
                        f'(h{config.MAX_HEADING_LEVEL})',
                location=f'Line {heading.line}',
                suggestion='Use h1-h6 only',
            ))

        previous_level = heading.level

    return warnings


def check_link_accessibility(response: str) -> list[AccessibilityWarning]:
    """Collect every link with vague or too-short text into one warning (WCAG 2.4.4)."""
    vague_links = []

    for match in LINK.finditer(response):
        text = match.group(1)
        normalised = text.strip().lower()
        if normalised in VAGUE_LINK_TEXTS:
            vague_links.append(text)
        elif len(normalised) < MIN_LINK_TEXT_LENGTH and normalised not in SHORT_LINK_ALLOWED:
            vague_links.append(text)

    if not vague_links:
        return []

    quoted = '", "'.join(vague_links)
    return [AccessibilityWarning(
        type=WarningType.LINK,
        message=f'Found {len(vague_links)} link(s) with vague text: "{quoted}"',
        suggestion='Use descriptive link text that explains the destination or purpose '
                   '(WCAG 2.4.4). Example: instead of "click here", use '
                   '"read the installation guide"',
    )]


CHECKS = (
    check_color_contrast,
    check_code_block_accessibility,
    check_heading_structure,
    check_link_accessibility,
)


# =============================================================================
# REPORTS
# =============================================================================

def validate_response(formatted_response: str) -> AccessibilityReport:
    """Run every check and log the findings. Never raises.

    Args:
        formatted_response: Formatted markdown reply

    Returns:
        AccessibilityReport with warnings (errors stay empty for current checks)
    """
    warnings = _run_checks(formatted_response)
    errors = []

    if warnings:
        logger.warning(f"Accessibility validation found {len(warnings)} warning(s):")
        for warning in warnings:
            logger.warning(f"  [{warning.type.value}] {warning.message}")
            if warning.suggestion:
                logger.warning(f"    → Suggestion: {warning.suggestion}")

    return AccessibilityReport(
        passed=not any(e.type == ErrorSeverity.CRITICAL for e in errors),
        warnings=warnings,
        errors=errors,
    )


def generate_report(response: str) -> AccessibilityReport:
    """Full compliance report with fixed WCAG AA support flags and a timestamp."""
    warnings = _run_checks(response)
    errors = []

    return AccessibilityReport(
        passed=not any(e.type == ErrorSeverity.CRITICAL for e in errors),
        warnings=warnings,
        errors=errors,
        wcag_level='AA',
        keyboard_navigable=True,
        screen_reader_support=True,
        color_contrast=not any(w.type == WarningType.COLOR for w in warnings),
        zoom_support=True,
        timestamp=int(time.time()),
    )


def _run_checks(response: str) -> list[AccessibilityWarning]:
    warnings: list[AccessibilityWarning] = []
    try:
        for check in CHECKS:
            warnings.extend(check(response or ''))
    except Exception:
        # Audit faults must never block the reply
        logger.exception("Error during accessibility validation")
        warnings.append(AccessibilityWarning(
            type=WarningType.OTHER,
            message='Accessibility validation encountered an error',
            suggestion='Check the log for details',
        ))
    return warnings
