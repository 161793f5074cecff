#!/usr/bin/env python3
"""
Fusion of parser/authority candidates with LLM candidates.

One Field per attribute is chosen with a fitness function; confidence only
breaks fitness ties. Dates are sanitized before and after the choice so that
day precision survives only with evidence in the text (or an explicit
header-date flag from the parser).
"""

import logging
import re
from typing import Any, Callable, List, Optional, Sequence

from metadata_tools.metadata import rules
from metadata_tools.metadata.document_type import (
    PREPRINT, guess_document_type, normalize_document_type, preprint_signals,
)
from metadata_tools.models.document import (
    Field, FusedMetadata, ParsedDocument, Provenance, Sections,
)
from metadata_tools.utils.date_utils import (
    ISO_DAY, ISO_SHAPE, MONTH_PATTERN, date_precision, is_valid_iso,
    to_iso_date, year_in_range,
)
from metadata_tools.utils.text_utils import collapse_whitespace


logger = logging.getLogger(__name__)

MAX_AUTHORS = 24

PRECISION_FITNESS = {'day': 1.0, 'month': 0.8, 'year': 0.6}

# verb, optional colon/dash, then "May 2, 2024" | "2 May 2024" | "2024-05-02"
POSTED_DATE_EVIDENCE = re.compile(
    r'(?:' + '|'.join(rules.EVIDENCE_VERBS) + r')\s*[:\-–]?\s*'
    r'(?:' + MONTH_PATTERN + r'\s+\d{1,2},\s*\d{4}'
    r'|\d{1,2}\s+' + MONTH_PATTERN + r'\s+\d{4}'
    r'|\d{4}-\d{2}-\d{2})',
    re.IGNORECASE,
)

_PERSON_TOKENS = (
    re.compile(r"^[A-Z][a-z'’-]+$"),
    re.compile(r'^[A-Z]\.$'),
    re.compile(r'^[A-Z][a-z]+-[A-Z][a-z]+$'),
)
_AUTHOR_STRING_SPLIT = re.compile(r'\s*[,;]\s*|\s+and\s+', re.IGNORECASE)


def choose_field(candidates: Sequence[Field], fitness: Callable[[Any], float]) -> Field:
    """Pick the fittest candidate; confidence breaks ties, then list order.

    A later candidate replaces the current best only when its fitness is
    strictly greater, or equal with strictly greater confidence. On an exact
    tie the first-listed candidate wins.
    """
    best = candidates[0]
    for candidate in candidates[1:]:
        best_fit = fitness(best.value)
        cand_fit = fitness(candidate.value)
        if cand_fit > best_fit or (cand_fit == best_fit and (candidate.confidence or 0) > (best.confidence or 0)):
            best = candidate
    return best.copy()


def has_posted_date_evidence(sections: Sections) -> bool:
    """True if a lifecycle verb is directly followed by a full date anywhere in the text."""
    return bool(POSTED_DATE_EVIDENCE.search(sections.combined_text()))


def sanitize_document_date(raw: Any, sections: Sections, force_accept_day: bool = False) -> Optional[str]:
    """Normalize a date candidate and drop precision it cannot justify.

    Args:
        raw: Candidate value (ISO-shaped or free-form string)
        sections: Document text used for the evidence check
        force_accept_day: Keep day precision without evidence (header-date flag)

    Returns:
        YYYY, YYYY-MM or YYYY-MM-DD, or None when the value is unusable
    """
    if not raw or not isinstance(raw, str):
        return None
    raw = raw.strip()
    iso = raw if ISO_SHAPE.match(raw) else to_iso_date(raw)
    if not iso or not ISO_SHAPE.match(iso):
        return None
    if not year_in_range(int(iso[:4])):
        return None

    if ISO_DAY.match(iso) and not force_accept_day and not has_posted_date_evidence(sections):
        iso = iso[:7]
    return iso if is_valid_iso(iso) else None


def date_fitness(value: Optional[str]) -> float:
    """Rank by precision: day 1.0, month 0.8, year 0.6."""
    if not value:
        return 0.0
    return PRECISION_FITNESS.get(date_precision(value), 0.4)


def presence_fitness(value: Any) -> float:
    return 1.0 if value else 0.0


def is_likely_person_name(name: str) -> bool:
    """2-5 tokens, no label or organisation word, at most one irregular token."""
    name = rules.LEADING_BY.sub('', name).strip()
    if rules.is_document_label(name) or rules.has_organisation_word(name):
        return False
    tokens = name.split()
    if not 2 <= len(tokens) <= 5:
        return False
    good = sum(1 for token in tokens if any(p.match(token) for p in _PERSON_TOKENS))
    return good >= max(2, len(tokens) - 1)


def clean_authors(authors: Any) -> Optional[List[str]]:
    """Strictly clean an author list from a parser or an LLM.

    A string is split on commas, semicolons and " and " first. Non-string
    items are ignored.

    Returns:
        Deduplicated names (case-insensitive, first seen wins), at most 24,
        or None when nothing survives
    """
    if isinstance(authors, str):
        authors = _AUTHOR_STRING_SPLIT.split(authors)
    if not authors or not isinstance(authors, (list, tuple)):
        return None

    cleaned = []
    seen = set()
    for item in authors:
        if not isinstance(item, str):
            continue
        name = rules.DEGREE_SUFFIX.sub('', item)
        name = collapse_whitespace(rules.LEADING_BY.sub('', name))
        if len(name) < 3 or rules.is_document_label(name) or not is_likely_person_name(name):
            continue
        key = name.lower()
        if key not in seen:
            seen.add(key)
            cleaned.append(name)
    return cleaned[:MAX_AUTHORS] or None


def quality_text_field(value: Any, provenance: str, max_chars: int = 1200) -> Field:
    """Score a free-text field by length and content; truncate long values."""
    text = collapse_whitespace(value) if isinstance(value, str) else None
    text = text or None
    length = len(text) if text else 0

    confidence = 0.5
    if text and re.search(r'[a-z]', text, re.IGNORECASE) and length >= 30:
        confidence = 0.85
    if length > max_chars:
        confidence = max(confidence, 0.9)
        text = text[:max_chars]
    return Field(text, confidence, provenance)


class FusionEngine:
    """Arbitrate one final value per attribute from parser and LLM candidates."""

    def __init__(self, preprint_threshold: int = 2, summary_max_chars: int = 1200):
        self.preprint_threshold = preprint_threshold
        self.summary_max_chars = summary_max_chars
        self.logger = logging.getLogger(__name__)

    def fuse(self, parsed: Optional[ParsedDocument], llm: Optional[dict],
             sections: Optional[Sections] = None, base: Optional[dict] = None) -> FusedMetadata:
        """Fuse candidates into FusedMetadata.

        Args:
            parsed: Output of the parser (heuristic, authority or grobid); may be None
            llm: LLM candidate fields; any field may be missing or malformed
            sections: Text used for evidence checks (defaults to parsed.sections)
            base: Fallback authors/document_date when the parser has none

        Returns:
            FusedMetadata with one Field per attribute
        """
        llm = llm if isinstance(llm, dict) else {}
        base = base or {}
        if sections is None:
            sections = parsed.sections if parsed else Sections()
        source = parsed.method if parsed else Provenance.HEURISTIC.value

        fused = FusedMetadata(
            document_type=self._document_type(llm, sections, source),
            authors=self._authors(parsed, llm, base, source),
            document_date=self._document_date(parsed, llm, base, sections, source),
            summary=quality_text_field(llm.get('summary'), Provenance.LLM.value, self.summary_max_chars),
            methods_summary=quality_text_field(
                llm.get('methods_summary'), Provenance.LLM.value, self.summary_max_chars),
            findings_summary=quality_text_field(
                llm.get('findings_summary'), Provenance.LLM.value, self.summary_max_chars),
        )
        self.logger.debug(f"Fused provenance: {fused.provenance()}")
        return fused

    def _document_type(self, llm: dict, sections: Sections, source: str) -> Field:
        heuristic_type = guess_document_type(sections, self.preprint_threshold)
        doc_type = choose_field([
            Field(normalize_document_type(llm.get('document_type')), 0.7, Provenance.LLM.value),
            Field(heuristic_type, 0.6, source),
        ], presence_fitness)

        if preprint_signals(sections) >= self.preprint_threshold and doc_type.value != PREPRINT:
            doc_type = Field(PREPRINT, max(doc_type.confidence, 0.9), Provenance.HEURISTIC.value)
        return doc_type

    def _authors(self, parsed: Optional[ParsedDocument], llm: dict, base: dict, source: str) -> Field:
        raw = (parsed.candidates.authors if parsed else None) or base.get('authors')
        from_parser = clean_authors(raw)
        from_llm = clean_authors(llm.get('authors'))
        return choose_field([
            Field(from_parser, 0.96 if from_parser else 0.2, source),
            Field(from_llm, 0.72 if from_llm else 0.3, Provenance.LLM.value),
        ], presence_fitness)

    def _document_date(self, parsed: Optional[ParsedDocument], llm: dict, base: dict,
                       sections: Sections, source: str) -> Field:
        raw = (parsed.candidates.document_date if parsed else None) or base.get('document_date')
        from_header = bool(parsed and parsed.meta.date_from_header)

        from_parser = sanitize_document_date(raw, sections, from_header)
        from_llm = sanitize_document_date(llm.get('document_date'), sections, False)

        picked = choose_field([
            Field(from_parser, 0.92 if from_parser else 0.2, source),
            Field(from_llm, 0.7 if from_llm else 0.3, Provenance.LLM.value),
        ], date_fitness)

        final = sanitize_document_date(picked.value, sections, from_header)
        if final is None:
            picked.confidence = 0.2
        picked.value = final
        return picked
