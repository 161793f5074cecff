"""
Plain-text helpers for PDF-extracted text.
"""
import re
from typing import List


_LETTER = re.compile(r'[A-Za-z]')


def normalize_text(text: str) -> str:
    """Normalize raw PDF text.

    Tabs and carriage returns become spaces, non-breaking spaces become
    spaces, end-of-line hyphenation is joined, blank-line runs collapse to a
    single newline and stray control characters are removed.
    """
    if not text:
        return ""
    text = re.sub(r'[\r\t]+', ' ', text)
    text = text.replace("\u00a0", " ")
    text = re.sub(r'\s+-\s*\n', '', text)
    text = re.sub(r'-\n', '', text)
    text = re.sub(r'\n{2,}', '\n', text)
    text = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f]', '', text)
    return text


def truncate_for_llm(text: str, max_chars: int) -> str:
    return text if len(text) <= max_chars else text[:max_chars]


def collapse_whitespace(text: str) -> str:
    return re.sub(r'\s+', ' ', text).strip()


def letters_ratio(text: str) -> float:
    """Share of ASCII letters in a string (0.0 for empty input)."""
    letters = len(_LETTER.findall(text or ''))
    return letters / max(1, len(text or ''))


def non_empty_lines(text: str) -> List[str]:
    """Split on newlines, strip each line and drop empty ones."""
    return [line.strip() for line in (text or '').splitlines() if line.strip()]
