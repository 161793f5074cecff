#!/usr/bin/env python3
"""
CrossRef API client for DOI metadata lookup.

CrossRef is the official DOI registration agency and provides
authoritative metadata for scholarly works.

API Documentation: https://github.com/CrossRef/rest-api-doc
No authentication required, but please add email for "polite" pool.
"""

import logging
from typing import Dict, List, Optional
from urllib.parse import quote

import requests

from metadata_tools.models.document import AuthorityRecord


class CrossRefClient:
    """Client for CrossRef API."""

    BASE_URL = "https://api.crossref.org/works/"

    # published-print > published-online > issued > created
    DATE_FIELDS = ('published-print', 'published-online', 'issued', 'created')

    def __init__(self, email: Optional[str] = None, timeout: int = 6):
        """Initialize CrossRef client.

        Args:
            email: Your email for polite pool (gets better rate limits)
            timeout: Request timeout in seconds
        """
        self.email = email
        self.timeout = timeout
        self.session = requests.Session()
        self.logger = logging.getLogger(__name__)

        if email:
            self.session.headers.update({
                'User-Agent': f'paper-metadata-tools/1.0 (mailto:{email})'
            })

    def get_metadata(self, doi: str) -> Optional[AuthorityRecord]:
        """Get authors, date and title for a DOI from CrossRef.

        Args:
            doi: DOI string

        Returns:
            AuthorityRecord or None if not found or the request failed
        """
        if not doi:
            return None

        try:
            response = self.session.get(f"{self.BASE_URL}{quote(doi, safe='')}", timeout=self.timeout)
            if response.status_code != 200:
                if response.status_code != 404:
                    self.logger.warning(f"CrossRef API error for {doi}: {response.status_code}")
                return None
            return self._parse_crossref_response(response.json())
        except requests.RequestException as e:
            self.logger.warning(f"CrossRef API request failed: {e}")
            return None
        except ValueError as e:
            self.logger.warning(f"CrossRef returned invalid JSON for {doi}: {e}")
            return None

    def _parse_crossref_response(self, data: Dict) -> Optional[AuthorityRecord]:
        message = data.get('message') if isinstance(data, dict) else None
        if not message:
            return None

        authors = self._parse_authors(message.get('author'))

        title = message.get('title')
        if isinstance(title, list):
            title = ' '.join(str(t) for t in title).strip()
        elif isinstance(title, str):
            title = title.strip()
        else:
            title = None

        return AuthorityRecord(
            authors=authors or None,
            date=self.pick_date(message),
            title=title or None,
        )

    @staticmethod
    def _parse_authors(entries) -> List[str]:
        authors = []
        for author in entries or []:
            name = ' '.join(p for p in (author.get('given'), author.get('family')) if p).strip()
            if len(name) > 1:
                authors.append(name)
        return authors

    @classmethod
    def pick_date(cls, message: Dict) -> Optional[str]:
        """First available date by CrossRef precedence as YYYY, YYYY-MM or YYYY-MM-DD."""
        for key in cls.DATE_FIELDS:
            parts = ((message.get(key) or {}).get('date-parts') or [[]])[0]
            if not parts or not parts[0]:
                continue
            year = int(parts[0])
            month = int(parts[1]) if len(parts) > 1 and parts[1] else None
            day = int(parts[2]) if len(parts) > 2 and parts[2] else None
            if month and day:
                return f"{year:04d}-{month:02d}-{day:02d}"
            if month:
                return f"{year:04d}-{month:02d}"
            return f"{year:04d}"
        return None
