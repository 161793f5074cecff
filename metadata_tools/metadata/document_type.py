"""
Document type heuristics: preprint signal counting, a header-based type
guess and normalization of free-form type labels.
"""
import re
from typing import Any, Optional

from metadata_tools.metadata import rules
from metadata_tools.models.document import Sections


PREPRINT = "Preprint"
CONFERENCE_PAPER = "Conference Paper"
JOURNAL_ARTICLE = "Journal Article"
THESIS = "Thesis"
GENERIC_ARTICLE = "Journal/Conference Article"

_ARXIV = re.compile(r'\barxiv\b|arxiv\.org/abs/')
_CONFERENCE = re.compile(r'proceedings of|in:\s|acm\b|ieee\b|springer\b|aaai\b|neurips\b|icml\b|iclr\b')
_DOI_PREFIX = re.compile(r'doi:10\.')
_JOURNAL = re.compile(r'vol\.|issue|journal|nature|science|elsevier|wiley|springer')
_THESIS = re.compile(r'thesis|dissertation')


def preprint_signals(sections: Sections) -> int:
    """Number of distinct preprint cues found in header and body."""
    text = sections.combined_text().lower()
    return sum(1 for rule in rules.PREPRINT_CUE_RULES if rule.search(text))


def guess_document_type(sections: Sections, preprint_threshold: int = 2) -> str:
    """Guess the document type from header wording."""
    header = (sections.header_text or "").lower()
    if preprint_signals(sections) >= preprint_threshold:
        return PREPRINT
    if _ARXIV.search(header):
        return PREPRINT
    if _CONFERENCE.search(header):
        return CONFERENCE_PAPER
    if _DOI_PREFIX.search(header) and _JOURNAL.search(header):
        return JOURNAL_ARTICLE
    if _THESIS.search(header):
        return THESIS
    return GENERIC_ARTICLE


def normalize_document_type(value: Any) -> Optional[str]:
    """Map a free-form label ("conference proceedings", "PhD thesis") to a canonical type."""
    if not value or not isinstance(value, str):
        return None
    lowered = value.lower()
    if "preprint" in lowered:
        return PREPRINT
    if "conference" in lowered or "proceedings" in lowered or "abstract" in lowered:
        return CONFERENCE_PAPER
    if "journal" in lowered:
        return JOURNAL_ARTICLE
    if "thesis" in lowered or "dissertation" in lowered:
        return THESIS
    return value.strip() or None
