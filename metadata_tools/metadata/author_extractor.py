#!/usr/bin/env python3
"""
Author name extraction from an author-zone text block.

Handles publisher quirks seen on first pages:
- footnote digits and superscripts glued to names ("Jane Doe1,2")
- degree and credential tokens ("MD, PhD, FRCP")
- given name and surname wrapped onto separate lines
- ALL-CAPS bylines
- a "CRediT author statement" as last resort when no byline is found
"""

import logging
import re
from typing import List

from metadata_tools.metadata import rules


logger = logging.getLogger(__name__)


class AuthorNameExtractor:
    """Turn an author-zone block into a clean, deduplicated list of names."""

    MAX_ZONE_CHARS = 4000
    MAX_ZONE_LINES = 60
    MAX_AUTHORS = 24
    MIN_TOKENS = 2
    MAX_TOKENS = 5

    # Abc / O'Neil / A. / Smith-Jones
    NAME_TOKEN = re.compile(
        r"^(?:[A-Z][a-zA-Z'’-]+|[A-Z]\.|[A-Z][a-zA-Z'’-]+-[A-Z][a-zA-Z'’-]+)$"
    )
    SINGLE_WORD = re.compile(r'^[A-Z][a-z]+$')
    SEGMENT_SPLIT = re.compile(r'\s*,\s*|\s*;\s*|/|\s+and\s+', re.IGNORECASE)

    def extract(self, zone_text: str) -> List[str]:
        """Extract person names from the zone text.

        Args:
            zone_text: Text block returned by the author zone locator

        Returns:
            Up to 24 unique names in order of appearance (may be empty)
        """
        if not zone_text:
            return []

        names = self._dedupe(
            segment for segment in self._segments(self._zone_lines(zone_text))
            if self.is_name_segment(segment)
        )

        if not names:
            names = self._dedupe(self._credit_statement_names(zone_text))
            if names:
                logger.debug(f"Authors taken from CRediT statement: {names}")

        return names[:self.MAX_AUTHORS]

    def _zone_lines(self, zone_text: str) -> List[str]:
        cut = rules.AUTHOR_ZONE_CUT.search(zone_text)
        zone = zone_text[:cut.start()] if cut and cut.start() > 0 else zone_text
        zone = zone[:self.MAX_ZONE_CHARS]
        lines = [rules.LEADING_BY.sub('', line).strip() for line in zone.split('\n')]
        return [line for line in lines if line][:self.MAX_ZONE_LINES]

    def _segments(self, lines: List[str]) -> List[str]:
        """Clean each line and split it into candidate name segments."""
        segments = []
        i = 0
        while i < len(lines):
            line = self.strip_marks(lines[i])

            # raw line: footnote stripping turns "[12]" into "[]"
            if rules.matches_any(rules.AUTHOR_REFERENCE_RULES, lines[i]):
                i += 1
                continue
            if rules.AUTHOR_STOP_LINE.search(line) or rules.is_document_label(line):
                i += 1
                continue

            # "Cheryl" / "Battersby" wrapped onto two lines
            if (self.SINGLE_WORD.match(line) and i + 1 < len(lines)
                    and self.SINGLE_WORD.match(lines[i + 1])):
                line = f"{line} {lines[i + 1]}"
                i += 1

            line = re.sub(r'[†*]', '', line)
            line = re.sub(r'\d+$', '', line).strip()
            line = line.replace('|', ',')

            segments.extend(s.strip() for s in self.SEGMENT_SPLIT.split(line) if s and s.strip())
            i += 1
        return segments

    @staticmethod
    def strip_marks(line: str) -> str:
        """Remove superscripts, footnote digits and credential tokens."""
        line = rules.SUPERSCRIPT_MARKS.sub('', line)
        line = rules.FOOTNOTE_DIGITS.sub('', line)
        return rules.CREDENTIAL_TOKENS.sub('', line)

    @staticmethod
    def normalize_caps(segment: str) -> str:
        """Title-case an ALL-CAPS segment ("JANE DOE" -> "Jane Doe")."""
        if segment != segment.upper():
            return segment
        return re.sub(r'\b\w', lambda m: m.group(0).upper(), segment.lower())

    def is_name_segment(self, segment: str) -> bool:
        segment = re.sub(r'\s{2,}', ' ', self.normalize_caps(segment))
        if rules.is_document_label(segment) or rules.AUTHOR_STOP_LINE.search(segment):
            return False
        tokens = segment.split()
        if not self.MIN_TOKENS <= len(tokens) <= self.MAX_TOKENS:
            return False
        return all(self.NAME_TOKEN.match(token) for token in tokens)

    def _credit_statement_names(self, text: str) -> List[str]:
        match = rules.CREDIT_STATEMENT.search(text)
        if not match:
            return []
        first_line = match.group(1).split('\n')[0]
        names = []
        for part in re.split(r'[.;]', first_line):
            part = re.sub(r':.*$', '', part.strip())
            if part and len(part.split()) >= 2:
                names.append(part)
        return names

    def _dedupe(self, names) -> List[str]:
        """Case-insensitive dedupe keeping first-seen order; ALL-CAPS re-cased."""
        seen = set()
        unique = []
        for name in names:
            name = re.sub(r'\s{2,}', ' ', self.normalize_caps(name)).strip()
            key = name.lower()
            if key not in seen:
                seen.add(key)
                unique.append(name)
        return unique
