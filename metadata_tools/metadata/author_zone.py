#!/usr/bin/env python3
"""
Author zone location.

Finds a plausible title line near the top of the header and returns the block
of lines directly below it, up to the first section cue. Limiting author
extraction to this block keeps citation lines and affiliations further down
the page from leaking into the author list.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from metadata_tools.metadata import rules
from metadata_tools.utils.text_utils import letters_ratio, non_empty_lines


logger = logging.getLogger(__name__)

LinePredicate = Callable[[str], bool]


def skip_while(lines: Sequence[str], start: int, predicate: LinePredicate, limit: int) -> int:
    """Return the first index >= start where predicate fails, advancing at most limit lines."""
    end = min(len(lines), start + limit)
    for i in range(start, end):
        if not predicate(lines[i]):
            return i
    return end


def find_first(lines: Sequence[str], start: int, stop: int, predicate: LinePredicate) -> Optional[int]:
    """Return the index of the first line in [start, stop) matching predicate."""
    for i in range(start, min(len(lines), stop)):
        if predicate(lines[i]):
            return i
    return None


@dataclass(frozen=True)
class AuthorZone:
    """Line block [start, end) of the header believed to hold author names."""
    lines: List[str] = field(default_factory=list)
    title_index: Optional[int] = None
    start: int = 0
    end: int = 0

    @property
    def title(self) -> Optional[str]:
        return self.lines[self.title_index] if self.title_index is not None else None

    @property
    def text(self) -> str:
        return "\n".join(self.lines[self.start:self.end])


class AuthorZoneLocator:
    """Locate the title line and the author block that follows it."""

    TITLE_SCAN_LINES = 20
    MIN_TITLE_LENGTH = 20
    MIN_LETTERS_RATIO = 0.6
    MAX_TITLE_COMMAS = 3
    MAX_CONTINUATION_LINES = 3
    ZONE_MAX_LINES = 12
    STOP_CUE_SEARCH_LINES = 40

    _CONTINUATION_FORBIDDEN = re.compile(r'[0-9@,:;|]')
    _STARTS_WITH_BY = re.compile(r'^\s*by\b', re.IGNORECASE)

    def __init__(self):
        self.logger = logger

    def is_title_candidate(self, line: str) -> bool:
        """Long, mostly-letter line without digits, affiliation cues or boilerplate."""
        if rules.matches_any(rules.TITLE_IGNORE_RULES, line):
            return False
        if rules.is_affiliation(line):
            return False
        if re.search(r'\d', line):
            return False
        if line.count(',') >= self.MAX_TITLE_COMMAS:
            return False
        return len(line) >= self.MIN_TITLE_LENGTH and letters_ratio(line) >= self.MIN_LETTERS_RATIO

    def is_title_continuation(self, line: str) -> bool:
        """Short wrapped-title fragment, e.g. the second half of a long title."""
        if not line:
            return False
        if self._STARTS_WITH_BY.match(line):
            return False
        if rules.is_stop_cue(line) or rules.is_affiliation(line):
            return False
        if self._CONTINUATION_FORBIDDEN.search(line):
            return False
        words = line.split()
        if len(words) < 2 or len(words) > 15:
            return False
        return letters_ratio(line) >= self.MIN_LETTERS_RATIO

    def find_title_index(self, lines: Sequence[str]) -> Optional[int]:
        """Index of the longest title candidate among the first lines (first wins on ties)."""
        best_index = None
        best_length = 0
        for i, line in enumerate(lines[:self.TITLE_SCAN_LINES]):
            if self.is_title_candidate(line) and len(line) > best_length:
                best_index, best_length = i, len(line)
        return best_index

    def locate_lines(self, lines: Sequence[str]) -> AuthorZone:
        """Locate the zone in an already split, stripped, non-empty line list."""
        lines = list(lines)
        title_index = self.find_title_index(lines)

        if title_index is None:
            start = 0
        else:
            start = skip_while(lines, title_index + 1, self.is_title_continuation,
                               self.MAX_CONTINUATION_LINES)

        end = min(len(lines), start + self.ZONE_MAX_LINES)
        stop = find_first(lines, start, start + self.STOP_CUE_SEARCH_LINES, rules.is_stop_cue)
        if stop is not None:
            end = min(end, stop)

        zone = AuthorZone(lines=lines, title_index=title_index, start=start, end=max(start, end))
        self.logger.debug(f"Author zone: title={zone.title!r} lines {zone.start}-{zone.end}")
        return zone

    def locate(self, header_text: str) -> AuthorZone:
        """Locate the author zone in raw header text."""
        return self.locate_lines(non_empty_lines(header_text))
