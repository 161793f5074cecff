#!/usr/bin/env python3
"""
Regex-based identifier extraction from document text.
"""

import re
from typing import Optional


class IdentifierExtractor:
    """Fast regex-based identifier extraction."""

    # Standard Crossref-recommended DOI shape
    DOI_PATTERN = re.compile(r'\b10\.\d{4,9}/[-._;()/:A-Z0-9]+\b', re.IGNORECASE)

    @classmethod
    def extract_doi(cls, text: str) -> Optional[str]:
        """Return the first DOI in the text.

        Args:
            text: Text to search (callers pass header text only, so that DOIs
                  of cited references further down are not picked up)

        Returns:
            DOI string or None
        """
        if not text:
            return None
        match = cls.DOI_PATTERN.search(text)
        return match.group(0) if match else None
