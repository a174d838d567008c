"""Fenced code region scanning shared by every pipeline stage.

Fences are tracked line by line rather than with one global regex: an opening
fence may carry a language tag, a closing fence never does, so a tagged fence
line seen inside a region is part of the body.

An opening fence may follow prose on the same line ("Here: ```js"). That
prose is kept on the region as ``prefix`` so callers can split it off.
"""

import re
from dataclasses import dataclass, field
from typing import Optional


# Prose before the fence may not itself contain a fence marker
OPENING_FENCE = re.compile(r'^(\s*)((?:(?!```).)*?)```\s*([\w+#.-]*)\s*$')
CLOSING_FENCE = re.compile(r'^\s*```\s*$')


@dataclass
class FenceRegion:
    """A fenced code region located by line index."""
    start: int                 # Index of the opening fence line
    end: Optional[int]         # Index of the closing fence line, None if unclosed
    language: str              # Tag on the opening fence, '' if none
    indent: str = ''
    prefix: str = ''           # Prose before a mid-line opening fence
    body: list[str] = field(default_factory=list)

    @property
    def closed(self) -> bool:
        return self.end is not None

    @property
    def last_line(self) -> int:
        """Last line index covered by the region."""
        if self.end is not None:
            return self.end
        return self.start + len(self.body)

    @property
    def opening(self) -> str:
        """The opening fence line without any leading prose."""
        return f'{self.indent}```{self.language}'


def scan_fences(lines: list[str]) -> list[FenceRegion]:
    """Walk lines top to bottom and return every fenced region in order."""
    regions: list[FenceRegion] = []
    current: Optional[FenceRegion] = None

    for index, line in enumerate(lines):
        if current is None:
            match = OPENING_FENCE.match(line)
            if match:
                indent, prose, language = match.groups()
                if prose.strip():
                    current = FenceRegion(
                        start=index,
                        end=None,
                        language=language,
                        prefix=(indent + prose).rstrip(),
                    )
                else:
                    current = FenceRegion(
                        start=index,
                        end=None,
                        language=language,
                        indent=indent + prose,
                    )
            continue

        if CLOSING_FENCE.match(line):
            current.end = index
            regions.append(current)
            current = None
        else:
            current.body.append(line)

    if current is not None:
        regions.append(current)

    return regions


def fenced_line_numbers(regions: list[FenceRegion]) -> set[int]:
    """Indices of every line inside a region, fences included."""
    inside: set[int] = set()
    for region in regions:
        inside.update(range(region.start, region.last_line + 1))
    return inside
