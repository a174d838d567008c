"""Tests for the reply formatter."""

import itertools
import re

import pytest

from code_tutor.response.formatter import (
    add_code_block_labels,
    fix_code_blocks,
    fix_markdown_issues,
    format_response,
    normalize_headings,
)


def _heading_levels(text: str) -> list[int]:
    return [len(m.group(1)) for m in re.finditer(r'^(#+) ', text, re.MULTILINE)]


# =============================================================================
# FULL FORMAT
# =============================================================================

def test_format_response_scenario():
    """Markers get spaces, the fence gets a tag and a label."""
    output = format_response("##Header\n-Item 1\n```\ncode\n```")

    assert "## Header" in output
    assert "- Item 1" in output
    assert "```plaintext" in output
    assert output.index("**Example") < output.index("```plaintext")


def test_format_response_empty():
    assert format_response("") == ""


def test_format_response_is_stable():
    """Formatting a formatted reply without code again changes nothing."""
    once = format_response("# Title\n\nSome text.\n\n- a\n- b")
    assert format_response(once) == once


# =============================================================================
# MARKDOWN FIXES
# =============================================================================

@pytest.mark.parametrize("raw,expected", [
    ("#Title", "# Title"),
    ("###Deep", "### Deep"),
    ("-item", "- item"),
    ("+item", "+ item"),
    ("*item", "* item"),
    ("  -nested", "  - nested"),
])
def test_missing_marker_space_added(raw, expected):
    assert fix_markdown_issues(raw) == expected


@pytest.mark.parametrize("raw", [
    "# Already fine",
    "- already fine",
    "---",
    "**bold** text",
    "*emphasis* here",
])
def test_well_formed_lines_untouched(raw):
    assert fix_markdown_issues(raw) == raw


def test_blank_line_runs_collapsed():
    assert fix_markdown_issues("a\n\n\n\nb") == "a\n\nb"


def test_fenced_lines_not_repaired():
    text = "```python\n#comment\n-x\n```"
    assert fix_markdown_issues(text) == text


def test_blank_line_runs_collapsed_inside_code_too():
    assert fix_markdown_issues("```py\na\n\n\n\nb\n```") == "```py\na\n\nb\n```"


# =============================================================================
# CODE BLOCKS
# =============================================================================

def test_untagged_fence_becomes_plaintext():
    assert fix_code_blocks("```\nx\n```") == "```plaintext\nx\n```"


def test_tagged_fence_keeps_language():
    assert fix_code_blocks("```rust\nfn main() {}\n```") == "```rust\nfn main() {}\n```"


def test_blank_lines_trimmed_inside_fence():
    assert fix_code_blocks("```py\n\n\nx = 1\n\n```") == "```py\nx = 1\n```"


def test_indentation_preserved():
    text = "```py\ndef f():\n    return 1\n```"
    assert fix_code_blocks(text) == text


def test_unclosed_fence_untouched():
    text = "```\nno end"
    assert fix_code_blocks(text) == text


@pytest.mark.parametrize("text", [
    "```\ncode\n```",
    "intro\n```js\n\nlet a = 1;\n\n```\nmiddle\n```\n  two\n```\nend",
    "```python\n```",
    "no code at all",
    "  ```\n  indented fence\n  ```",
])
def test_fix_code_blocks_idempotent(text):
    once = fix_code_blocks(text)
    assert fix_code_blocks(once) == once


# =============================================================================
# LABELS
# =============================================================================

def test_labels_numbered_from_second_block():
    text = "Intro\n```python\na\n```\nThen\n```js\nb\n```"
    labelled = add_code_block_labels(text)

    assert "**Example (python):**" in labelled
    assert "**Example 2 (js):**" in labelled
    assert labelled.index("**Example (python):**") < labelled.index("```python")


def test_label_separated_by_blank_line():
    labelled = add_code_block_labels("Intro\n```py\nx\n```")
    assert labelled == "Intro\n\n**Example (py):**\n```py\nx\n```"


def test_label_at_start_of_text():
    assert add_code_block_labels("```py\nx\n```") == "**Example (py):**\n```py\nx\n```"


def test_no_blocks_no_labels():
    assert add_code_block_labels("plain") == "plain"


def test_fence_opening_after_prose_is_split():
    """Prose before a mid-line fence moves to its own line and later blocks keep their tags."""
    output = format_response("Here: ```js\nlet a = 1\n```\nand then\n```py\nx = 2\n```")

    assert output == (
        "Here:\n\n**Example (js):**\n```js\nlet a = 1\n```\n"
        "and then\n\n**Example 2 (py):**\n```py\nx = 2\n```"
    )


def test_mid_line_untagged_fence_tagged():
    assert fix_code_blocks("See: ```\nx\n```") == "See:\n```plaintext\nx\n```"


# =============================================================================
# HEADINGS
# =============================================================================

def test_skipped_level_clamped():
    assert normalize_headings("# A\n### B") == "# A\n## B"


def test_first_heading_keeps_its_level():
    assert normalize_headings("### Start\n#### Next") == "### Start\n#### Next"


def test_headings_may_drop_freely():
    text = "# A\n## B\n#### C\n# D\n### E"
    assert normalize_headings(text) == "# A\n## B\n### C\n# D\n## E"


def test_headings_inside_fences_ignored():
    text = "# A\n```python\n### not a heading\n```\n### B"
    assert normalize_headings(text) == "# A\n```python\n### not a heading\n```\n## B"


@pytest.mark.parametrize("levels", list(itertools.product(range(1, 7), repeat=3)))
def test_no_heading_jump_greater_than_one(levels):
    text = "\n\n".join(f"{'#' * level} Heading {i}" for i, level in enumerate(levels))
    result = _heading_levels(normalize_headings(text))

    assert result[0] == levels[0]
    for previous, current in zip(result, result[1:]):
        assert current <= previous + 1
