"""Reply pipeline for Code Tutor.

Turns a raw tutor reply into a well-formed, audited document:
1. Formatter - Repair markdown, tag and label code, normalise headings
2. Accessibility - WCAG-oriented advisory report
"""

from .accessibility import (
    validate_response,
    generate_report,
    check_color_contrast,
    check_code_block_accessibility,
    check_heading_structure,
    check_link_accessibility,
)
from .formatter import (
    format_response,
    fix_markdown_issues,
    fix_code_blocks,
    add_code_block_labels,
    normalize_headings,
)

__all__ = [
    'format_response',
    'fix_markdown_issues',
    'fix_code_blocks',
    'add_code_block_labels',
    'normalize_headings',
    'validate_response',
    'generate_report',
    'check_color_contrast',
    'check_code_block_accessibility',
    'check_heading_structure',
    'check_link_accessibility',
]
