#!/usr/bin/env python3
"""
Two-prompt LLM ensemble for paper metadata.

Prompt A gives the model broad context (title, abstract and all named
sections); prompt B asks a field-by-field checklist over a narrower context.
Both run concurrently and their answers are merged per field.
"""

import json
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from metadata_tools.metadata import rules
from metadata_tools.models.document import Sections
from metadata_tools.utils.text_utils import collapse_whitespace, truncate_for_llm


LLM_FIELDS = ('document_type', 'authors', 'document_date', 'summary', 'methods_summary', 'findings_summary')

SYSTEM_PROMPT = """You extract structured metadata from scientific PDFs.

Rules:
- Use only information present in the provided text.
- authors: array of full person names only (no affiliations, roles or degrees), or null.
- document_type: one of "Preprint", "Journal Article", "Conference Paper", "Thesis", "Other".
  Cues such as "preprint", "has not been peer reviewed", arXiv, SSRN, bioRxiv or medRxiv mean "Preprint".
- document_date: an explicit posted/published/accepted date as YYYY-MM-DD, YYYY-MM or YYYY,
  with only the precision that is visible in the text. Otherwise null.
- methods_summary: only techniques and timepoints stated in the text.
- findings_summary: key outcomes and metrics stated in the text.
- Summaries are 2-4 sentences.
- Output strict JSON with exactly these keys:
  {"document_type": string|null, "authors": string[]|null, "document_date": string|null,
   "summary": string|null, "methods_summary": string|null, "findings_summary": string|null}
- Output JSON only, no markdown and no commentary."""

FEW_SHOT = """Example:
TEXT: "Efficient Transformers. Jane Doe, John Smith. Abstract: We study... Methods: We benchmark... Results: Our model... 2021."
JSON: {"document_type": "Conference Paper", "authors": ["Jane Doe", "John Smith"], "document_date": "2021", "summary": "Investigates efficient Transformer variants.", "methods_summary": "Benchmarks several architectures on standard NLP tasks.", "findings_summary": "Similar accuracy at lower compute."}"""

PROMPT_A_CHARS = 12000
PROMPT_B_CHARS = 10000
METHODS_FALLBACK_CHARS = 6000

_ORG_LAST_TOKEN = re.compile(
    r'^(?:University|College|School|Hospital|Centre|Center|Institute|Laboratory|Lab|Department|Dept'
    r'|Faculty|District|Province|City|Region|Campus|Authority|Bureau|Committee)$',
    re.IGNORECASE,
)
_AFFILIATION_WORD = re.compile(
    r'\b(?:department|university|school|hospital|centre|center|institute|laboratory)\b', re.IGNORECASE
)
_NAME_TOKEN = re.compile(r"^(?:[A-Z][a-zA-Z'’-]+|[A-Z]\.)$")
_PROF = re.compile(r'\bProf\b\.?', re.IGNORECASE)
_SPLIT = re.compile(r'\s*[,;]\s*|\s+and\s+', re.IGNORECASE)


def build_prompt_a(sections: Sections, hints: Dict) -> str:
    """Broad-context prompt over every named section."""
    parts = [sections.title, sections.abstract, sections.introduction, sections.methods,
             sections.results, sections.discussion, sections.conclusion]
    text = truncate_for_llm("\n\n".join(p for p in parts if p), PROMPT_A_CHARS)
    return f"""{FEW_SHOT}

Task:
Extract the following fields:
- document_type
- authors
- document_date
- summary (2-4 sentences)
- methods_summary (2-4 sentences)
- findings_summary (2-4 sentences)

HINTS: {json.dumps(hints)}

TEXT:
{text}"""


def build_prompt_b(sections: Sections, hints: Dict) -> str:
    """Checklist prompt over title, abstract, methods and results."""
    methods = sections.methods or (sections.body or "")[:METHODS_FALLBACK_CHARS]
    results = sections.results or sections.discussion or sections.conclusion or ""
    parts = [sections.title, sections.abstract, methods, results]
    text = truncate_for_llm("\n\n".join(p for p in parts if p), PROMPT_B_CHARS)
    return f"""{FEW_SHOT}

Checklist (answer strictly from TEXT):
1) document_type: "Preprint", "Journal Article", "Conference Paper", "Thesis" or "Other"
2) authors: array of full names only (no affiliations), or null
3) document_date: YYYY-MM-DD, YYYY-MM or YYYY if explicit, else null
4) summary: 2-4 sentences
5) methods_summary: 2-4 sentences, only techniques and timepoints present in TEXT
6) findings_summary: 2-4 sentences, with explicit numbers or metrics if present

HINTS: {json.dumps(hints)}

TEXT:
{text}"""


def pick_string(a: Any, b: Any) -> Optional[str]:
    """Non-empty string wins; on conflict the longer one (a on equal length)."""
    a = a.strip() if isinstance(a, str) else ""
    b = b.strip() if isinstance(b, str) else ""
    if not a and not b:
        return None
    return a if len(a) >= len(b) else b


def clean_llm_authors(value: Any) -> List[str]:
    """Loose cleaning of model-reported names; strict checks happen in fusion."""
    if isinstance(value, str):
        value = _SPLIT.split(value)
    if not isinstance(value, list):
        return []

    names = []
    for item in value:
        if not isinstance(item, str):
            continue
        name = rules.SUPERSCRIPT_MARKS.sub('', item)
        name = rules.FOOTNOTE_DIGITS.sub('', name)
        name = _PROF.sub('', rules.CREDENTIAL_TOKENS.sub('', name))
        name = collapse_whitespace(name.replace('|', ','))
        if not name or _AFFILIATION_WORD.search(name):
            continue
        tokens = name.split()
        if not 2 <= len(tokens) <= 5:
            continue
        if not all(_NAME_TOKEN.match(t) for t in tokens) or _ORG_LAST_TOKEN.match(tokens[-1]):
            continue
        if name == name.upper():
            name = re.sub(r'\b\w', lambda m: m.group(0).upper(), name.lower())
        if name not in names:
            names.append(name)
    return names[:24]


def pick_authors(a: Any, b: Any) -> Optional[List[str]]:
    """Union of both cleaned lists, the longer list's order first."""
    a, b = clean_llm_authors(a), clean_llm_authors(b)
    if not a and not b:
        return None
    longer, shorter = (a, b) if len(a) >= len(b) else (b, a)
    merged = list(longer)
    merged.extend(name for name in shorter if name not in merged)
    return merged


class LLMEnsemble:
    """Run both prompts against one provider and merge the answers."""

    def __init__(self, client, max_workers: int = 2):
        """Initialize ensemble.

        Args:
            client: Object with call_json(prompt, system) -> dict
            max_workers: Concurrent prompt limit
        """
        self.client = client
        self.max_workers = max(1, max_workers)
        self.logger = logging.getLogger(__name__)

    def _call(self, prompt: str) -> Dict:
        try:
            result = self.client.call_json(prompt, SYSTEM_PROMPT)
        except Exception as e:
            self.logger.warning(f"LLM prompt failed: {e}")
            return {}
        return result if isinstance(result, dict) else {}

    def run(self, sections: Sections, hints: Optional[Dict] = None) -> Dict[str, Any]:
        """Run prompts A and B and merge them field by field.

        Args:
            sections: Document sections
            hints: Parser hints (authors, date, heuristic type) shown to the model

        Returns:
            Dict with the six LLM fields (values may be None)
        """
        hints = hints or {}
        prompts = [build_prompt_a(sections, hints), build_prompt_b(sections, hints)]
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            a, b = list(executor.map(self._call, prompts))

        merged = {name: pick_string(a.get(name), b.get(name)) for name in LLM_FIELDS if name != 'authors'}
        merged['authors'] = pick_authors(a.get('authors'), b.get('authors'))
        self.logger.debug(f"LLM ensemble result: {merged}")
        return {name: merged[name] for name in LLM_FIELDS}
