#!/usr/bin/env python3
"""
Publication date ranking for first-page text.

Two passes:
1. Cue-window scan: for every cue verb ("posted", "published online",
   "accepted", ...) read the first date shape in the next 180 characters.
   The first cue whose date validates wins.
2. Line scoring: when no cue window yields a date, every header line (plus
   the first 80 body lines) is scored by the date shape it contains, whether
   the line has a cue verb, and how early it appears.

Ambiguous numeric dates never produce a day (05/06/2023 -> 2023-05).
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from metadata_tools.metadata import rules
from metadata_tools.utils.date_utils import (
    MONTH_PATTERN, is_valid_ymd, parse_numeric_date, to_iso, year_in_range,
)
from metadata_tools.utils.text_utils import non_empty_lines


logger = logging.getLogger(__name__)

_SEP = r"[\s,.:/\-–—]*"

# Tolerant shapes: optional period after the month, ordinals, mixed punctuation
MDY_PATTERN = re.compile(
    rf"\b({MONTH_PATTERN})\.?{_SEP}(\d{{1,2}})(?:st|nd|rd|th)?{_SEP}(\d{{4}})\b", re.IGNORECASE
)
DMY_PATTERN = re.compile(
    rf"\b(\d{{1,2}})(?:st|nd|rd|th)?{_SEP}({MONTH_PATTERN})\.?{_SEP}(\d{{4}})\b", re.IGNORECASE
)
MONTH_YEAR_PATTERN = re.compile(rf"\b({MONTH_PATTERN})\.?{_SEP}(\d{{4}})\b", re.IGNORECASE)

# Strict shapes for the header-day flag
STRICT_MDY = re.compile(rf"\b({MONTH_PATTERN})\s+(\d{{1,2}}),\s*(\d{{4}})\b", re.IGNORECASE)
STRICT_DMY = re.compile(rf"\b(\d{{1,2}})\s+({MONTH_PATTERN})\s*,?\s*(\d{{4}})\b", re.IGNORECASE)
STRICT_ISO = re.compile(r'\b(20\d{2}|19\d{2})[-/.](\d{1,2})[-/.](\d{1,2})\b')

HEADER_SCAN_CHARS = 12000
BODY_SCAN_CHARS = 20000
CUE_WINDOW_CHARS = 180
BODY_SCORING_LINES = 80
HEADER_DAY_LINES = 120

# (matched, iso) where iso may be None when the match fails calendar/bound checks
ShapeReader = Callable[[str], Tuple[bool, Optional[str]]]


def read_month_day_year(text: str) -> Tuple[bool, Optional[str]]:
    m = MDY_PATTERN.search(text)
    if not m:
        return False, None
    return True, to_iso(m.group(3), m.group(1), m.group(2))


def read_day_month_year(text: str) -> Tuple[bool, Optional[str]]:
    m = DMY_PATTERN.search(text)
    if not m:
        return False, None
    return True, to_iso(m.group(3), m.group(2), m.group(1))


def read_month_year(text: str) -> Tuple[bool, Optional[str]]:
    m = MONTH_YEAR_PATTERN.search(text)
    if not m:
        return False, None
    return True, to_iso(m.group(2), m.group(1))


def read_numeric(text: str) -> Tuple[bool, Optional[str]]:
    iso = parse_numeric_date(text)
    return iso is not None, iso


@dataclass(frozen=True)
class ScoringRule:
    """One row of the scoring table: a date shape and its two base weights."""
    shape: str
    read: ShapeReader
    cue_weight: float
    plain_weight: float


# Evaluated in order; the first shape that matches a line decides its score
SCORING_TABLE = (
    ScoringRule('month_day_year', read_month_day_year, 1.00, 0.75),
    ScoringRule('day_month_year', read_day_month_year, 0.95, 0.72),
    ScoringRule('month_year', read_month_year, 0.85, 0.65),
    ScoringRule('numeric', read_numeric, 0.80, 0.55),
)


def position_bonus(line_index: int) -> float:
    """Small bonus for lines near the top of the page."""
    return max(0.0, 0.15 - 0.002 * line_index)


@dataclass
class DateCandidate:
    iso: str
    score: float
    line_index: int


class DateCandidateRanker:
    """Rank date-like substrings of header and body text into one ISO value."""

    def __init__(self, scoring_table=SCORING_TABLE, bonus=position_bonus):
        self.scoring_table = scoring_table
        self.bonus = bonus

    def rank(self, header_text: str, body_text: str = "") -> Optional[str]:
        """Return the best publication date as YYYY, YYYY-MM or YYYY-MM-DD.

        Args:
            header_text: Header slice of the document (only the first 12,000
                         characters are scanned)
            body_text: Full document text (only the first 20,000 characters
                       are scanned)

        Returns:
            ISO-shaped date string or None
        """
        header = (header_text or "")[:HEADER_SCAN_CHARS]
        body = (body_text or "")[:BODY_SCAN_CHARS]

        iso = self.scan_cue_windows(header) or self.scan_cue_windows(body)
        if iso:
            logger.debug(f"Date from cue window: {iso}")
            return iso

        candidates = self.score_lines(non_empty_lines(header) + non_empty_lines(body)[:BODY_SCORING_LINES])
        if not candidates:
            return None
        best = candidates[0]
        logger.debug(f"Date from line scoring: {best.iso} (score {best.score:.3f}, line {best.line_index})")
        return best.iso

    def scan_cue_windows(self, zone: str) -> Optional[str]:
        """Date following a cue verb, left to right.

        Only the first date shape matched in each window is read; when it
        does not validate the scan moves on to the next cue.
        """
        pos = 0
        while True:
            cue = rules.CUE_VERB_RULE.search(zone, pos)
            if not cue:
                return None
            window = zone[cue.start():cue.start() + CUE_WINDOW_CHARS]
            for rule in self.scoring_table:
                matched, iso = rule.read(window)
                if matched:
                    if iso:
                        return iso
                    break
            pos = cue.start() + 1

    def score_lines(self, lines: List[str]) -> List[DateCandidate]:
        """Score every line and return candidates best first (ties: earliest line)."""
        candidates = []
        for i, line in enumerate(lines):
            has_cue = bool(rules.CUE_VERB_RULE.search(line))
            if not has_cue and rules.looks_like_reference(line):
                continue
            for rule in self.scoring_table:
                matched, iso = rule.read(line)
                if not matched:
                    continue
                if iso:
                    weight = rule.cue_weight if has_cue else rule.plain_weight
                    candidates.append(DateCandidate(iso, weight + self.bonus(i), i))
                break
        candidates.sort(key=lambda c: (-c.score, c.line_index))
        return candidates


def header_has_explicit_day(header_text: str) -> bool:
    """True if the top of the header shows a full date with real calendar values.

    Only "Month D, YYYY", "D Month YYYY" and "YYYY-MM-DD" count, and
    citation-like lines are ignored.
    """
    for line in non_empty_lines(header_text)[:HEADER_DAY_LINES]:
        if rules.looks_like_reference(line):
            continue
        m = STRICT_MDY.search(line)
        if m and to_iso(m.group(3), m.group(1), m.group(2)):
            return True
        m = STRICT_DMY.search(line)
        if m and to_iso(m.group(3), m.group(2), m.group(1)):
            return True
        m = STRICT_ISO.search(line)
        if m:
            y, mo, d = int(m.group(1)), int(m.group(2)), int(m.group(3))
            if year_in_range(y) and is_valid_ymd(y, mo, d):
                return True
    return False
