"""
Data models for parsed documents and fused metadata.
"""
from dataclasses import dataclass, field, replace
from typing import Optional, List, Dict, Any, Generic, TypeVar
from enum import Enum


T = TypeVar('T')


class Provenance(str, Enum):
    """Which extractor produced a field value."""
    HEURISTIC = "heuristic"
    AUTHORITY = "authority"
    LLM = "llm"
    GROBID = "grobid"
    UNSTRUCTURED = "unstructured"


@dataclass(frozen=True)
class Sections:
    """Logical text regions of one document.

    header_text is a bounded prefix of the normalized text, body the full
    normalized text. The remaining slices are optional.
    """
    header_text: str = ""
    body: str = ""
    title: Optional[str] = None
    abstract: Optional[str] = None
    introduction: Optional[str] = None
    methods: Optional[str] = None
    results: Optional[str] = None
    discussion: Optional[str] = None
    conclusion: Optional[str] = None

    def combined_text(self) -> str:
        """Header and body joined, used by the evidence and cue scans."""
        return f"{self.header_text or ''}\n{self.body or ''}"


@dataclass
class Field(Generic[T]):
    """A single candidate value with its confidence and source."""
    value: Optional[T]
    confidence: float
    provenance: str

    def copy(self) -> 'Field[T]':
        return replace(self)


@dataclass
class Candidates:
    """Best-effort values produced by a parsing strategy."""
    authors: Optional[List[str]] = None
    document_date: Optional[str] = None


@dataclass
class DocumentMeta:
    """Extra flags set by parsers."""
    # True when the header itself shows an explicit day-precision date
    date_from_header: bool = False


@dataclass
class ParsedDocument:
    """Output of one parsing strategy (heuristic, authority, grobid, ...)."""
    sections: Sections
    candidates: Candidates = field(default_factory=Candidates)
    method: str = Provenance.HEURISTIC.value
    meta: DocumentMeta = field(default_factory=DocumentMeta)


@dataclass
class AuthorityRecord:
    """Bibliographic record returned by a DOI lookup."""
    authors: Optional[List[str]] = None
    date: Optional[str] = None
    title: Optional[str] = None

    @classmethod
    def from_value(cls, value: Any) -> Optional['AuthorityRecord']:
        """Coerce a lookup result (record, dict or None) into a record."""
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            title = value.get('title')
            if isinstance(title, list):
                title = ' '.join(str(t) for t in title).strip()
            authors = value.get('authors')
            return cls(
                authors=list(authors) if isinstance(authors, (list, tuple)) else None,
                date=value.get('date') if isinstance(value.get('date'), str) else None,
                title=title if isinstance(title, str) else None,
            )
        return None


@dataclass
class FusedMetadata:
    """Final per-attribute result of fusion."""
    document_type: Field[str]
    authors: Field[List[str]]
    document_date: Field[str]
    summary: Field[str]
    methods_summary: Field[str]
    findings_summary: Field[str]

    FIELD_NAMES = (
        'document_type', 'authors', 'document_date',
        'summary', 'methods_summary', 'findings_summary',
    )

    def to_dict(self) -> Dict[str, Any]:
        """Unwrap every field to its value for serialization."""
        return {name: getattr(self, name).value for name in self.FIELD_NAMES}

    def provenance(self) -> Dict[str, str]:
        """Map each attribute to the source that won it."""
        return {name: getattr(self, name).provenance for name in self.FIELD_NAMES}
