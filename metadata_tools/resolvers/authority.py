#!/usr/bin/env python3
"""
Authority metadata resolution via a DOI found in the document header.

The DOI is taken from the header only, and the returned record is trusted only
when its title plausibly matches the header. This keeps a DOI that belongs to
a cited reference from overwriting the document's own authors and date.
"""

import logging
import re
from typing import Any, Callable, Optional

from metadata_tools.models.document import AuthorityRecord
from metadata_tools.utils.identifier_extractor import IdentifierExtractor


logger = logging.getLogger(__name__)

# doi -> AuthorityRecord | dict | None
AuthorityLookup = Callable[[str], Any]

TITLE_MATCH_THRESHOLD = 0.65
MIN_TITLE_TOKEN_LENGTH = 3


def looks_like_same_work(title: str, header_text: str, threshold: float = TITLE_MATCH_THRESHOLD) -> bool:
    """True if enough of the title's tokens occur in the header text.

    Tokens are lowercased words of at least 3 characters (non-alphanumerics
    become spaces); order does not matter and a token counts when it appears
    as a substring of the lowercased header.
    """
    normalized = re.sub(r'[^a-z0-9\s]', ' ', (title or '').lower())
    tokens = [t for t in normalized.split() if len(t) >= MIN_TITLE_TOKEN_LENGTH]
    if not tokens:
        return False
    header = (header_text or '').lower()
    hits = sum(1 for token in tokens if token in header)
    return hits / len(tokens) >= threshold


class AuthorityResolver:
    """Resolve authors and date for a document from an authority lookup."""

    def __init__(self, lookup: Optional[AuthorityLookup] = None):
        """Initialize resolver.

        Args:
            lookup: Callable taking a DOI and returning an AuthorityRecord,
                    a dict with authors/date/title, or None
        """
        self.lookup = lookup
        self.logger = logging.getLogger(__name__)

    def resolve(self, header_text: str) -> Optional[AuthorityRecord]:
        """Look up the header DOI and return the record if it matches the document.

        Args:
            header_text: Header slice of the document text

        Returns:
            AuthorityRecord with authors/date, or None when there is no DOI,
            the lookup fails, or the title does not match the header
        """
        if self.lookup is None:
            return None

        doi = IdentifierExtractor.extract_doi(header_text)
        if not doi:
            return None

        try:
            record = AuthorityRecord.from_value(self.lookup(doi))
        except Exception as e:
            self.logger.warning(f"Authority lookup failed for {doi}: {e}")
            return None

        if record is None:
            self.logger.debug(f"No authority data for {doi}")
            return None

        if record.title and not looks_like_same_work(record.title, header_text):
            self.logger.debug(f"Authority title does not match header, ignoring {doi}: {record.title!r}")
            return None

        self.logger.debug(f"Authority data accepted for {doi}")
        return record
