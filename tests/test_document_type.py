"""
Unit tests for document type heuristics.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from metadata_tools.metadata.document_type import (
    CONFERENCE_PAPER, GENERIC_ARTICLE, JOURNAL_ARTICLE, PREPRINT, THESIS,
    guess_document_type, normalize_document_type, preprint_signals,
)
from metadata_tools.models.document import Sections


def header_only(text):
    return Sections(header_text=text, body=text)


class TestPreprintSignals:
    """Test preprint cue counting."""

    def test_each_cue_counted_once(self):
        text = "preprint preprint preprint"
        assert preprint_signals(header_only(text)) == 1

    def test_distinct_cues(self):
        text = "bioRxiv preprint doi\nThis version posted March 3, 2022"
        assert preprint_signals(header_only(text)) == 3

    def test_ssrn_banner(self):
        text = "Electronic copy available at: ssrn.com/abstract=123456"
        assert preprint_signals(header_only(text)) == 2

    def test_body_counts_too(self):
        sections = Sections(header_text="A Title", body="Research Square")
        assert preprint_signals(sections) == 1

    def test_no_cues(self):
        assert preprint_signals(Sections()) == 0


class TestGuessDocumentType:
    """Test the header-based type guess."""

    def test_preprint_by_signals(self):
        assert guess_document_type(header_only("medRxiv preprint")) == PREPRINT

    def test_arxiv_header(self):
        assert guess_document_type(header_only("arXiv:2101.00001v2 [cs.LG]"), preprint_threshold=5) == PREPRINT

    def test_conference(self):
        assert guess_document_type(header_only("Proceedings of the 12th Workshop")) == CONFERENCE_PAPER

    def test_journal_needs_doi_and_journal_word(self):
        assert guess_document_type(header_only("Journal of Things\ndoi:10.1000/x")) == JOURNAL_ARTICLE
        assert guess_document_type(header_only("Journal of Things")) == GENERIC_ARTICLE

    def test_thesis(self):
        assert guess_document_type(header_only("A dissertation submitted for the degree")) == THESIS

    def test_default(self):
        assert guess_document_type(header_only("A Plain Title")) == GENERIC_ARTICLE


class TestNormalizeDocumentType:
    """Test free-form label normalization."""

    def test_canonical_labels(self):
        assert normalize_document_type("Preprint (not peer reviewed)") == PREPRINT
        assert normalize_document_type("conference proceedings") == CONFERENCE_PAPER
        assert normalize_document_type("Journal article") == JOURNAL_ARTICLE
        assert normalize_document_type("PhD Thesis") == THESIS

    def test_unknown_label_kept(self):
        assert normalize_document_type("  Book chapter ") == "Book chapter"

    def test_missing_or_malformed(self):
        assert normalize_document_type(None) is None
        assert normalize_document_type("   ") is None
        assert normalize_document_type(["journal"]) is None
