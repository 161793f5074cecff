#!/usr/bin/env python3
"""
GROBID client for academic paper metadata extraction.

GROBID (GeneRation Of BIbliographic Data) is a machine learning-based system
for extracting structured data from PDFs, specifically designed for academic papers.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional

import requests

from metadata_tools.models.document import Candidates, ParsedDocument, Provenance, Sections
from metadata_tools.utils.date_utils import parse_pdf_creation_date, to_iso_date
from metadata_tools.utils.text_utils import normalize_text


TEI = '{http://www.tei-c.org/ns/1.0}'

# Section name -> words looked for in <div><head>
SECTION_HEADS = {
    'methods': ('method', 'materials and methods', 'experimental', 'approach', 'study design', 'procedure'),
    'results': ('result', 'finding', 'evaluation', 'experiment'),
    'discussion': ('discussion',),
    'conclusion': ('conclusion',),
}


class GrobidClient:
    """Client for GROBID server."""

    def __init__(self, base_url: str = "http://localhost:8070", timeout: int = 60, header_chars: int = 4000):
        """Initialize GROBID client.

        Args:
            base_url: GROBID server URL
            timeout: Request timeout in seconds for full-text processing
            header_chars: Size of the header slice taken from the plain text
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.header_chars = header_chars
        self.logger = logging.getLogger(__name__)

    def is_available(self, verbose: bool = False) -> bool:
        """Check if GROBID server is available.

        Args:
            verbose: If True, log debug messages. If False, silent check.

        Returns:
            True if server is responding
        """
        try:
            response = requests.get(f"{self.base_url}/api/isalive", timeout=5)
            return response.status_code == 200 and response.text.strip() == "true"
        except requests.RequestException as e:
            if verbose:
                self.logger.debug(f"GROBID not available: {e}")
            return False

    def parse(self, pdf_path: Path, text: str = "", creation_date: Optional[str] = None) -> Optional[ParsedDocument]:
        """Parse a PDF with GROBID.

        Args:
            pdf_path: Path to PDF file
            text: Plain text of the same PDF, used for header/body sections
            creation_date: PDF CreationDate metadata used as date fallback

        Returns:
            ParsedDocument with method "grobid", or None if failed
        """
        try:
            with open(pdf_path, 'rb') as f:
                response = requests.post(
                    f"{self.base_url}/api/processFulltextDocument",
                    files={'input': f},
                    timeout=self.timeout,
                )
        except (OSError, requests.RequestException) as e:
            self.logger.error(f"GROBID request failed: {e}")
            return None

        if response.status_code != 200:
            self.logger.error(f"GROBID failed: {response.status_code}")
            return None

        try:
            root = ET.fromstring(response.text)
        except ET.ParseError as e:
            self.logger.error(f"GROBID returned invalid TEI: {e}")
            return None

        return self.parse_tei(root, text, creation_date)

    def parse_tei(self, root: ET.Element, text: str = "", creation_date: Optional[str] = None) -> ParsedDocument:
        """Build a ParsedDocument from a TEI document root."""
        normalized = normalize_text(text or "")

        sections = Sections(
            header_text=normalized[:self.header_chars],
            body=normalized,
            title=self._text(root.find(f'.//{TEI}titleStmt/{TEI}title')),
            abstract=self._text(root.find(f'.//{TEI}profileDesc/{TEI}abstract')),
            **{name: self._section_by_head(root, heads) for name, heads in SECTION_HEADS.items()}
        )

        authors = self._parse_authors(root)
        date_elem = root.find(f'.//{TEI}date[@type="published"]')
        published = None
        if date_elem is not None:
            published = date_elem.get('when') or self._text(date_elem)

        document_date = to_iso_date(published) or parse_pdf_creation_date(creation_date)
        self.logger.info(f"GROBID extracted: {len(authors)} authors, date {document_date}")

        return ParsedDocument(
            sections=sections,
            candidates=Candidates(authors=authors or None, document_date=document_date),
            method=Provenance.GROBID.value,
        )

    def _parse_authors(self, root: ET.Element) -> List[str]:
        authors = []
        elems = (root.findall(f'.//{TEI}sourceDesc//{TEI}analytic/{TEI}author')
                 or root.findall(f'.//{TEI}titleStmt/{TEI}author'))
        for author in elems:
            pers_name = author.find(f'{TEI}persName')
            if pers_name is None:
                continue
            forename = pers_name.find(f'{TEI}forename')
            surname = pers_name.find(f'{TEI}surname')
            parts = [self._text(forename), self._text(surname)]
            name = ' '.join(p for p in parts if p).strip()
            if name:
                authors.append(name)
        return authors

    def _section_by_head(self, root: ET.Element, heads) -> Optional[str]:
        for div in root.findall(f'.//{TEI}text/{TEI}body/{TEI}div'):
            head = (self._text(div.find(f'{TEI}head')) or '').lower()
            if any(h in head for h in heads):
                return self._text(div)
        return None

    @staticmethod
    def _text(elem: Optional[ET.Element]) -> Optional[str]:
        if elem is None:
            return None
        text = ' '.join(t.strip() for t in elem.itertext() if t.strip())
        return text or None
