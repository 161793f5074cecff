#!/usr/bin/env python3
"""
Heuristic paper parser: raw text in, ParsedDocument out.

Order of preference:
1. Authority metadata via a DOI in the header (title must match)
2. Author-zone heuristics and ranked in-text date
3. PDF creation date as the last date fallback
"""

import logging
import re
from typing import Optional

from metadata_tools.metadata.author_extractor import AuthorNameExtractor
from metadata_tools.metadata.author_zone import AuthorZoneLocator
from metadata_tools.metadata.date_ranker import DateCandidateRanker, header_has_explicit_day
from metadata_tools.models.document import (
    Candidates, DocumentMeta, ParsedDocument, Provenance, Sections,
)
from metadata_tools.resolvers.authority import AuthorityResolver
from metadata_tools.utils.date_utils import parse_pdf_creation_date
from metadata_tools.utils.text_utils import normalize_text


SECTION_MAX_CHARS = 8000

SECTION_NAMES = {
    'abstract': r'abstract',
    'methods': r'methods?|methodology|materials and methods|experimental|approach|study design|procedures?',
    'results': r'results?|findings?|evaluation|experiments?',
    'discussion': r'discussion',
    'conclusion': r'conclusions?',
}

# Heading on its own line, optionally numbered ("2.", "3.1 ")
SECTION_HEADINGS = {
    name: re.compile(rf'\n\s*(?:\d[.\d\s]*)?(?:{names})\s*\n', re.IGNORECASE)
    for name, names in SECTION_NAMES.items()
}


def grab_section(text: str, name: str) -> Optional[str]:
    """Text following the named heading line, up to 8,000 characters."""
    match = SECTION_HEADINGS[name].search(text)
    if not match:
        return None
    return text[match.end():match.end() + SECTION_MAX_CHARS] or None


class HeuristicPaperParser:
    """Build a ParsedDocument from plain text without any structured parser."""

    def __init__(self, authority_resolver: Optional[AuthorityResolver] = None, header_chars: int = 12000):
        self.authority_resolver = authority_resolver
        self.header_chars = header_chars
        self.zone_locator = AuthorZoneLocator()
        self.author_extractor = AuthorNameExtractor()
        self.date_ranker = DateCandidateRanker()
        self.logger = logging.getLogger(__name__)

    def build_sections(self, text: str) -> Sections:
        """Slice normalized text into header, body and optional named sections."""
        has_abstract = re.search(r'\babstract\b', text, re.IGNORECASE) is not None
        return Sections(
            header_text=text[:self.header_chars],
            body=text,
            abstract=grab_section(text, 'abstract') if has_abstract else None,
            methods=grab_section(text, 'methods'),
            results=grab_section(text, 'results'),
            discussion=grab_section(text, 'discussion'),
            conclusion=grab_section(text, 'conclusion'),
        )

    def parse(self, raw_text: str, creation_date: Optional[str] = None) -> ParsedDocument:
        """Parse document text.

        Args:
            raw_text: Text extracted from the PDF
            creation_date: PDF CreationDate metadata ("D:YYYYMMDD...") if known

        Returns:
            ParsedDocument with sections, best-effort candidates and meta flags
        """
        text = normalize_text(raw_text or "")
        sections = self.build_sections(text)
        header = sections.header_text

        authority = self.authority_resolver.resolve(header) if self.authority_resolver else None
        authority_authors = authority.authors if authority and authority.authors else None
        authority_date = authority.date if authority and authority.date else None

        if authority_authors:
            authors = authority_authors
        else:
            zone = self.zone_locator.locate(header)
            authors = self.author_extractor.extract(zone.text) or None

        document_date = (
            authority_date
            or self.date_ranker.rank(header, text)
            or parse_pdf_creation_date(creation_date)
        )

        method = Provenance.AUTHORITY.value if (authority_authors or authority_date) else Provenance.HEURISTIC.value
        meta = DocumentMeta(date_from_header=header_has_explicit_day(header))
        self.logger.debug(f"Parsed ({method}): authors={authors} date={document_date} "
                          f"date_from_header={meta.date_from_header}")

        return ParsedDocument(
            sections=sections,
            candidates=Candidates(authors=authors, document_date=document_date),
            method=method,
            meta=meta,
        )
