#!/usr/bin/env python3
"""
Client for an Unstructured partition endpoint.

The service splits a PDF into typed elements (Title, NarrativeText,
ListItem, ...). Sections are assembled from element types; authors and date
still come from the first-page heuristics run over the element text.
"""

import logging
from pathlib import Path
from typing import List, Optional

import requests

from metadata_tools.metadata.author_extractor import AuthorNameExtractor
from metadata_tools.metadata.author_zone import AuthorZoneLocator
from metadata_tools.metadata.date_ranker import DateCandidateRanker, header_has_explicit_day
from metadata_tools.models.document import (
    Candidates, DocumentMeta, ParsedDocument, Provenance, Sections,
)
from metadata_tools.utils.date_utils import parse_pdf_creation_date
from metadata_tools.utils.text_utils import normalize_text


# Section name -> (element types, max characters)
SECTION_ELEMENT_TYPES = {
    'abstract': (('Abstract',), None),
    'introduction': (('SectionHeader', 'NarrativeText'), 8000),
    'methods': (('Methods', 'ListItem'), 8000),
    'results': (('Results', 'NarrativeText'), 8000),
    'discussion': (('Discussion',), 8000),
    'conclusion': (('Conclusion',), 4000),
}


class UnstructuredClient:
    """Client for an Unstructured general/v0 partition server."""

    def __init__(self, url: str = "http://localhost:8000/general/v0/general",
                 timeout: int = 120, header_chars: int = 4000):
        """Initialize Unstructured client.

        Args:
            url: Partition endpoint URL
            timeout: Request timeout in seconds
            header_chars: Size of the header slice taken from the element text
        """
        self.url = url
        self.timeout = timeout
        self.header_chars = header_chars
        self.zone_locator = AuthorZoneLocator()
        self.author_extractor = AuthorNameExtractor()
        self.date_ranker = DateCandidateRanker()
        self.logger = logging.getLogger(__name__)

    def parse(self, pdf_path: Path, text: str = "", creation_date: Optional[str] = None) -> Optional[ParsedDocument]:
        """Partition a PDF with Unstructured.

        Args:
            pdf_path: Path to PDF file
            text: Plain text of the same PDF (unused; the element text is used instead)
            creation_date: PDF CreationDate metadata used as date fallback

        Returns:
            ParsedDocument with method "unstructured", or None if failed
        """
        try:
            with open(pdf_path, 'rb') as f:
                response = requests.post(
                    self.url,
                    files={'files': f},
                    data={'strategy': 'hi_res'},
                    timeout=self.timeout,
                )
        except (OSError, requests.RequestException) as e:
            self.logger.error(f"Unstructured request failed: {e}")
            return None

        if response.status_code != 200:
            self.logger.error(f"Unstructured failed: {response.status_code}")
            return None

        try:
            elements = response.json()
        except ValueError as e:
            self.logger.error(f"Unstructured returned invalid JSON: {e}")
            return None

        if not isinstance(elements, list):
            self.logger.error("Unstructured returned no element list")
            return None

        return self.build_document(elements, creation_date)

    def build_document(self, elements: List[dict], creation_date: Optional[str] = None) -> ParsedDocument:
        """Build a ParsedDocument from partition elements."""
        elements = [e for e in elements if isinstance(e, dict)]
        body = normalize_text("\n".join(self._texts(elements)))
        header = body[:self.header_chars]

        title = next((e.get('text') for e in elements if e.get('type') == 'Title' and e.get('text')), None)
        sections = Sections(
            header_text=header,
            body=body,
            title=title,
            **{name: self._join(elements, types, limit) for name, (types, limit) in SECTION_ELEMENT_TYPES.items()}
        )

        zone = self.zone_locator.locate(header)
        authors = self.author_extractor.extract(zone.text) or None
        document_date = self.date_ranker.rank(header, body) or parse_pdf_creation_date(creation_date)
        self.logger.info(f"Unstructured extracted: {len(authors or [])} authors, date {document_date}")

        return ParsedDocument(
            sections=sections,
            candidates=Candidates(authors=authors, document_date=document_date),
            method=Provenance.UNSTRUCTURED.value,
            meta=DocumentMeta(date_from_header=header_has_explicit_day(header)),
        )

    @staticmethod
    def _texts(elements: List[dict], types=None) -> List[str]:
        return [
            e['text'] for e in elements
            if isinstance(e.get('text'), str) and e['text'].strip()
            and (types is None or e.get('type') in types)
        ]

    def _join(self, elements: List[dict], types, limit: Optional[int]) -> Optional[str]:
        text = "\n".join(self._texts(elements, types))
        if limit:
            text = text[:limit]
        return text or None
