"""
Rule tables for header heuristics.

Each table is an ordered, immutable tuple of compiled patterns (or plain
keywords) so rules can be tested one at a time and evaluated in a fixed order.
"""
import re
from typing import Iterable, Pattern, Tuple


def _compile_all(patterns: Iterable[str], flags: int = re.IGNORECASE) -> Tuple[Pattern, ...]:
    return tuple(re.compile(p, flags) for p in patterns)


def matches_any(rules: Tuple[Pattern, ...], text: str) -> bool:
    """True if any rule in the table matches somewhere in text."""
    return any(rule.search(text) for rule in rules)


# Lines that are never a title (repository boilerplate)
TITLE_IGNORE_RULES = _compile_all((
    r'electronic copy available at',
    r'this (?:paper|version) (?:was )?posted',
    r'ssrn',
    r'^open access$',
))

# Affiliation, address and contact cues
AFFILIATION_RULES = _compile_all((
    r'\b(?:section|department|dept|school|college|faculty|division|unit|institute|center|centre|laboratory|lab|hospital|nhs)\b',
    r'\buniversity\b',
    r'\bimperial\b|\blondon\b|\buk\b',
    r'\bcampus\b|\broad\b|\bst\.?(?:\s|$)|\bstreet\b',
    r'\bchelsea\b|\bsw\d{1,2}\b',
    r'\bcorresponding author\b',
    r'@|email|telephone|\btel\b\.?',
    r'\d{2,}[- ,]\d{2,}',
))

# Line prefixes that end the author block
STOP_CUE_RULES = _compile_all((
    r'^abstract\b',
    r'^summary\b',
    r'^keywords?\b',
    r'^jel\b',
    r'^article (?:info|information|history)\b',
    r'^references\b',
    r'^bibliography\b',
    r'^introduction\b',
))

# Where the author extractor cuts its input zone
AUTHOR_ZONE_CUT = re.compile(r'\b(?:abstract|summary|keywords?|introduction)\b', re.IGNORECASE)

# Lines inside the author zone that carry no names
AUTHOR_STOP_LINE = re.compile(
    r'\b(?:abstract|summary|keywords?|correspondence|author\s+information|affiliations?'
    r'|how to cite|copyright|journal|received|accepted|published|department|dept'
    r'|university|institute|school|college|hospital|centre|center|laboratory|division'
    r'|ministry|agency|authority|office|board|bureau)\b',
    re.IGNORECASE,
)

# Reference markers that disqualify a line from the author zone
AUTHOR_REFERENCE_RULES = _compile_all((
    r'^\[\d+\]\s*',
    r'doi:',
))

CREDENTIAL_TOKENS = re.compile(
    r'\b(?:PhD|DPhil|MSc|MS|BSc|BS|MD|DO|MPH|MBA|RN|RM|FMedSci|FRCP|FRCS|FRCPath|FRCA'
    r'|FRCPC|DDS|DMD|Ph\.?D)\b\.?',
    re.IGNORECASE,
)

# Degree suffix attached with a comma ("Jane Doe, PhD")
DEGREE_SUFFIX = re.compile(r'\s*,\s*(?:PhD|MSc|BSc|MD|MPH|MBA|Ph\.?D\.?)\b', re.IGNORECASE)

SUPERSCRIPT_MARKS = re.compile(r'[\u00B9\u00B2\u00B3\u2070-\u2079]')
FOOTNOTE_DIGITS = re.compile(r'\^?\d+')
LEADING_BY = re.compile(r'^\s*by\s+', re.IGNORECASE)
CREDIT_STATEMENT = re.compile(r'credit author statement\s*:\s*([\s\S]{0,800})', re.IGNORECASE)

# Typical non-author labels found in headers
DOCUMENT_LABELS = (
    "original article", "research article", "review article", "systematic review",
    "meta-analysis", "meta analysis", "brief report", "short report", "short communication",
    "case report", "editorial", "commentary", "perspective", "viewpoint", "protocol",
    "special article", "open access", "letter to the editor", "technical note",
    "methods article", "article info", "article information", "article history",
    "how to cite", "correspondence",
)

# Affiliation / organisation words that never belong to a person name
ORGANISATION_WORDS = (
    "university", "univ", "institute", "department", "dept", "school", "college", "laboratory",
    "centre", "center", "hospital", "clinic", "commission", "authority", "ministry", "agency",
    "federal", "court", "board", "foundation", "trust", "unit", "division", "bureau", "office",
    "medicine", "medical", "health", "healthcare", "science", "sciences", "research",
    "perinatal", "neonatal", "pediatrics", "pediatric", "childrens", "children's",
    "london", "ontario", "canada", "united", "kingdom", "usa",
)
ORGANISATION_RULE = re.compile(
    r"\b(?:" + "|".join(re.escape(w) for w in ORGANISATION_WORDS) + r")\b",
    re.IGNORECASE,
)

# Lines that look like citations rather than header metadata
REFERENCE_LINE_RULES = (
    re.compile(r'\bdoi:', re.IGNORECASE),
    re.compile(r'\bvol\.', re.IGNORECASE),
    re.compile(r'\bissue\b', re.IGNORECASE),
    re.compile(r'\bpages\b', re.IGNORECASE),
    re.compile(r'\bpp\.', re.IGNORECASE),
    re.compile(r'\bno\.\s*\d', re.IGNORECASE),
    re.compile(r'^\[\d+\]'),
    re.compile(r'^[A-Z][a-z]+,\s*[A-Z]\.'),
    re.compile(r'\(\d{4}\)'),
    re.compile(r'\d{4};\d'),
    re.compile(r'\b(?:keywords?|abstract|references|bibliography)\b', re.IGNORECASE),
)

# Publication-lifecycle verbs that anchor a date
CUE_VERBS = (
    r'this\s+version\s+posted',
    r'posted',
    r'published\s+online',
    r'published',
    r'available\s+online',
    r'accepted',
    r'received',
)
CUE_VERB_RULE = re.compile(r'\b(?:' + '|'.join(CUE_VERBS) + r')\b', re.IGNORECASE)

# Verbs accepted as evidence for keeping day precision
EVIDENCE_VERBS = (
    r'posted',
    r'this\s+version\s+posted',
    r'published(?:\s+online)?',
    r'accepted',
    r'received',
    r'available\s+online',
    r'first\s+published',
    r'epub(?:\s+ahead\s+of\s+print)?',
)

# Preprint cues, counted once each over header + body
PREPRINT_CUE_RULES = _compile_all((
    r'\bpreprint\b',
    r'has not been peer reviewed',
    r'\bssrn\b',
    r'social\s+science\s+research\s+network',
    r'\barxiv\b|arxiv\.org/abs/',
    r'\bmedrxiv\b',
    r'\bbiorxiv\b',
    r'\bresearch\s*square\b',
    r'electronic copy available at:\s*ssrn\.com',
    r'this version posted|first posted|posted:\s*\w+\s+\d{1,2},\s+\d{4}',
))


def is_document_label(text: str) -> bool:
    """True if the text contains a known header label ("case report", ...)."""
    normalized = re.sub(r'\s+', ' ', text.lower())
    return any(label in normalized for label in DOCUMENT_LABELS)


def is_affiliation(text: str) -> bool:
    return matches_any(AFFILIATION_RULES, text)


def is_stop_cue(text: str) -> bool:
    return matches_any(STOP_CUE_RULES, text)


def has_organisation_word(text: str) -> bool:
    return bool(ORGANISATION_RULE.search(text))


def looks_like_reference(line: str) -> bool:
    """True for citation-like lines (volume/issue/pages, [n], (YYYY), ...)."""
    return matches_any(REFERENCE_LINE_RULES, line)
