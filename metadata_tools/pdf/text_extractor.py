#!/usr/bin/env python3
"""
Plain text and creation date from a PDF via pdfplumber.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import pdfplumber
from pdfminer.psparser import PSException
from pdfplumber.utils.exceptions import PdfminerException


class PDFTextExtractor:
    """Extract page text and the CreationDate metadata entry."""

    def __init__(self, max_pages: Optional[int] = None):
        """Initialize extractor.

        Args:
            max_pages: Only read the first N pages (None reads all pages)
        """
        self.max_pages = max_pages
        self.logger = logging.getLogger(__name__)

    def extract(self, pdf_path) -> Tuple[str, Optional[str]]:
        """Extract text and creation date.

        Args:
            pdf_path: Path to PDF file

        Returns:
            Tuple of (text, raw CreationDate string or None)

        Raises:
            FileNotFoundError: If the PDF does not exist
            ValueError: If pdfminer cannot read the file
        """
        pdf_path = Path(pdf_path)
        if not pdf_path.is_file():
            raise FileNotFoundError(f"PDF not found: {pdf_path}")

        try:
            with pdfplumber.open(pdf_path) as pdf:
                pages = pdf.pages if self.max_pages is None else pdf.pages[:self.max_pages]
                text = "\n".join(page.extract_text() or "" for page in pages)
                creation_date = (pdf.metadata or {}).get('CreationDate')
        except (PdfminerException, PSException) as e:
            self.logger.error(f"Cannot read {pdf_path.name}: {e!r}")
            raise ValueError(f"Unreadable PDF {pdf_path}: {e!r}") from e

        self.logger.debug(f"Extracted {len(text)} chars from {pdf_path.name}")
        return text, creation_date if isinstance(creation_date, str) else None
