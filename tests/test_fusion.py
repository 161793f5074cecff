"""
Unit tests for candidate fusion.

Covers the chooser tie-break, strict author cleaning, date sanitization and
evidence rules, the preprint override and summary scoring.
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from metadata_tools.metadata.fusion import (
    FusionEngine, choose_field, clean_authors, date_fitness, has_posted_date_evidence,
    quality_text_field, sanitize_document_date,
)
from metadata_tools.models.document import (
    Candidates, DocumentMeta, Field, ParsedDocument, Sections,
)


NO_EVIDENCE = Sections(
    header_text="A Study of Things\nJane Doe, John Smith\nAbstract\nWe study things.",
    body="A Study of Things\nJane Doe, John Smith\nAbstract\nWe study things.\nMethods\nWe measured.",
)


def parsed_doc(authors=None, date=None, date_from_header=False, sections=NO_EVIDENCE, method="heuristic"):
    return ParsedDocument(
        sections=sections,
        candidates=Candidates(authors=authors, document_date=date),
        method=method,
        meta=DocumentMeta(date_from_header=date_from_header),
    )


class TestChooseField:
    """Test the generic chooser."""

    def test_higher_fitness_wins(self):
        best = choose_field([Field('2024', 0.9, 'heuristic'), Field('2023-05', 0.1, 'llm')], date_fitness)
        assert best.value == '2023-05'

    def test_equal_fitness_higher_confidence_wins(self):
        best = choose_field([Field('2024', 0.5, 'heuristic'), Field('2023', 0.7, 'llm')], date_fitness)
        assert best.provenance == 'llm'

    def test_exact_tie_first_listed_wins(self):
        best = choose_field([Field('2024', 0.7, 'heuristic'), Field('2023', 0.7, 'llm')], date_fitness)
        assert best.value == '2024'
        assert best.provenance == 'heuristic'

    def test_date_fitness_by_precision(self):
        assert date_fitness('2024-05-02') == 1.0
        assert date_fitness('2024-05') == 0.8
        assert date_fitness('2024') == 0.6
        assert date_fitness('May 2024') == 0.4
        assert date_fitness(None) == 0.0

    def test_returns_copy(self):
        first = Field('2024', 0.7, 'heuristic')
        best = choose_field([first], date_fitness)
        best.value = None
        assert first.value == '2024'


class TestDateSanitization:
    """Test precision rules for document dates."""

    def test_day_dropped_without_evidence(self):
        assert sanitize_document_date('2024-05-13', NO_EVIDENCE) == '2024-05'

    def test_day_kept_when_forced(self):
        assert sanitize_document_date('2024-05-13', NO_EVIDENCE, force_accept_day=True) == '2024-05-13'

    def test_day_kept_with_posted_evidence(self):
        sections = Sections(header_text="Title\nPosted: May 13, 2024", body="")
        assert has_posted_date_evidence(sections)
        assert sanitize_document_date('2024-05-13', sections) == '2024-05-13'

    def test_evidence_shapes(self):
        assert has_posted_date_evidence(Sections(body="Received 2 May 2024"))
        assert has_posted_date_evidence(Sections(body="Published online - 2024-05-02"))
        assert has_posted_date_evidence(Sections(body="Epub ahead of print May 2, 2024"))
        assert not has_posted_date_evidence(Sections(body="Received May 2024"))
        assert not has_posted_date_evidence(NO_EVIDENCE)

    def test_free_form_input_normalized(self):
        assert sanitize_document_date('March 2021', NO_EVIDENCE) == '2021-03'
        assert sanitize_document_date('March 5, 2021', NO_EVIDENCE) == '2021-03'

    def test_year_bounds(self):
        current = datetime.now().year
        assert sanitize_document_date('1899', NO_EVIDENCE) is None
        assert sanitize_document_date(str(current + 2), NO_EVIDENCE) is None
        assert sanitize_document_date(str(current + 1), NO_EVIDENCE) == str(current + 1)

    def test_invalid_calendar_values(self):
        assert sanitize_document_date('2023-13', NO_EVIDENCE) is None
        assert sanitize_document_date('2023-02-30', NO_EVIDENCE, force_accept_day=True) is None

    def test_impossible_day_without_evidence_keeps_year_month(self):
        assert sanitize_document_date('2024-02-30', Sections()) == '2024-02'
        assert sanitize_document_date('2024-02-30', NO_EVIDENCE) == '2024-02'

    def test_ambiguous_numeric_date_never_gains_a_day(self):
        evidence = Sections(header_text="Received 2 May 2024", body="")
        assert sanitize_document_date('05/06/2023', evidence) == '2023-05'
        assert sanitize_document_date('13/06/2023', evidence) == '2023-06-13'

    def test_missing_or_malformed(self):
        assert sanitize_document_date(None, NO_EVIDENCE) is None
        assert sanitize_document_date('', NO_EVIDENCE) is None
        assert sanitize_document_date(20240513, NO_EVIDENCE) is None

    @pytest.mark.parametrize('raw', ['2024-05-13', '2024-02-30', '05/06/2023', 'March 5, 2021', '2023', '2023-07', '1899', None])
    def test_idempotent(self, raw):
        once = sanitize_document_date(raw, NO_EVIDENCE)
        assert sanitize_document_date(once, NO_EVIDENCE) == once


class TestCleanAuthors:
    """Test strict author cleaning."""

    def test_organisation_excluded(self):
        cleaned = clean_authors(["Imperial College London", "Jessica Ann Gomez", "Karla Abela"])
        assert cleaned == ["Jessica Ann Gomez", "Karla Abela"]

    def test_degree_and_by_removed(self):
        assert clean_authors(["Jane Doe, PhD", "By John Smith"]) == ["Jane Doe", "John Smith"]

    def test_wrapped_title_fragment_rejected(self):
        assert clean_authors(["Bell's Stage III necrotizing enterocolitis"]) is None

    def test_labels_and_short_values_rejected(self):
        assert clean_authors(["Original Article", "Jo", "Case Report Series"]) is None

    def test_one_irregular_token_tolerated(self):
        assert clean_authors(["Anna von Smith-Jones"]) == ["Anna von Smith-Jones"]
        assert clean_authors(["anna von smith"]) is None

    def test_dedupe_and_cap(self):
        assert clean_authors(["Jane Doe", "Jane  Doe"]) == ["Jane Doe"]
        names = [f"Jane S{'a' * (i + 1)}" for i in range(30)]
        assert len(clean_authors(names)) == 24

    def test_string_input_split(self):
        assert clean_authors("Jane Doe, John Smith and Mary Major") == ["Jane Doe", "John Smith", "Mary Major"]

    def test_malformed_input(self):
        assert clean_authors(None) is None
        assert clean_authors(42) is None
        assert clean_authors([None, 7]) is None


class TestQualityTextField:
    """Test summary scoring."""

    def test_regular_summary(self):
        field = quality_text_field("  This study   examines the effect of X on Y.  ", 'llm')
        assert field.value == "This study examines the effect of X on Y."
        assert field.confidence == 0.85

    def test_short_summary(self):
        assert quality_text_field("Too short", 'llm').confidence == 0.5

    def test_long_summary_truncated(self):
        field = quality_text_field("word " * 400, 'llm')
        assert len(field.value) == 1200
        assert field.confidence == 0.9

    def test_missing(self):
        field = quality_text_field(None, 'llm')
        assert field.value is None
        assert field.confidence == 0.5
        assert quality_text_field(['not', 'text'], 'llm').value is None


class TestFusionEngine:
    """Test end-to-end fusion of parser and LLM candidates."""

    def setup_method(self):
        self.engine = FusionEngine()

    def test_parser_day_dropped_without_evidence(self):
        fused = self.engine.fuse(parsed_doc(date='2024-05-13'), {})
        assert fused.document_date.value == '2024-05'

    def test_parser_day_kept_with_header_flag(self):
        fused = self.engine.fuse(parsed_doc(date='2024-05-13', date_from_header=True), {})
        assert fused.document_date.value == '2024-05-13'
        assert fused.document_date.confidence == 0.92

    def test_more_precise_parser_date_beats_llm(self):
        fused = self.engine.fuse(parsed_doc(date='2024-05'), {'document_date': '2023'})
        assert fused.document_date.value == '2024-05'
        assert fused.document_date.provenance != 'llm'

    def test_llm_date_used_when_parser_has_none(self):
        fused = self.engine.fuse(parsed_doc(), {'document_date': '2024-05-13'})
        assert fused.document_date.value == '2024-05'
        assert fused.document_date.provenance == 'llm'

    def test_ambiguous_llm_date_with_evidence_elsewhere(self):
        sections = Sections(header_text="A Study of Things\nReceived 2 May 2024", body="")
        fused = self.engine.fuse(parsed_doc(sections=sections), {'document_date': '05/06/2023'})
        assert fused.document_date.value == '2023-05'
        assert fused.document_date.provenance == 'llm'

    def test_no_date_anywhere(self):
        fused = self.engine.fuse(parsed_doc(), {})
        assert fused.document_date.value is None
        assert fused.document_date.confidence == 0.2

    def test_authors_prefer_parser(self):
        parsed = parsed_doc(authors=["Imperial College London", "Jessica Ann Gomez", "Karla Abela"])
        fused = self.engine.fuse(parsed, {'authors': ["Someone Else"]})
        assert fused.authors.value == ["Jessica Ann Gomez", "Karla Abela"]
        assert fused.authors.confidence == 0.96
        assert fused.authors.provenance == 'heuristic'

    def test_authors_fall_back_to_llm(self):
        fused = self.engine.fuse(parsed_doc(), {'authors': "Jane Doe; John Smith"})
        assert fused.authors.value == ["Jane Doe", "John Smith"]
        assert fused.authors.provenance == 'llm'
        assert fused.authors.confidence == 0.72

    def test_absent_authors_report_llm_provenance(self):
        fused = self.engine.fuse(parsed_doc(), {})
        assert fused.authors.value is None
        assert fused.authors.provenance == 'llm'

    def test_authority_provenance(self):
        fused = self.engine.fuse(parsed_doc(authors=["Jane Doe"], method="authority"), {})
        assert fused.authors.provenance == 'authority'

    def test_base_values_used_when_parser_empty(self):
        fused = self.engine.fuse(parsed_doc(), {}, base={'authors': ["Jane Doe"], 'document_date': '2020'})
        assert fused.authors.value == ["Jane Doe"]
        assert fused.document_date.value == '2020'

    def test_document_type_llm_preferred(self):
        fused = self.engine.fuse(parsed_doc(), {'document_type': 'journal article'})
        assert fused.document_type.value == 'Journal Article'
        assert fused.document_type.provenance == 'llm'

    def test_document_type_heuristic_fallback(self):
        fused = self.engine.fuse(parsed_doc(), {})
        assert fused.document_type.value == 'Journal/Conference Article'
        assert fused.document_type.provenance == 'heuristic'

    def test_preprint_override(self):
        sections = Sections(
            header_text="This preprint has not been peer reviewed.\nmedRxiv",
            body="This preprint has not been peer reviewed.\nmedRxiv",
        )
        fused = self.engine.fuse(parsed_doc(sections=sections), {'document_type': 'Journal Article'})
        assert fused.document_type.value == 'Preprint'
        assert fused.document_type.confidence == 0.9
        assert fused.document_type.provenance == 'heuristic'

    def test_preprint_threshold_is_tunable(self):
        sections = Sections(header_text="Posted on SSRN", body="Posted on SSRN")
        assert self.engine.fuse(parsed_doc(sections=sections), {'document_type': 'Journal'}) \
            .document_type.value == 'Journal Article'
        strict = FusionEngine(preprint_threshold=1)
        assert strict.fuse(parsed_doc(sections=sections), {'document_type': 'Journal'}) \
            .document_type.value == 'Preprint'

    def test_summaries_from_llm_only(self):
        llm = {
            'summary': "This study examines the effect of X on Y in adults.",
            'methods_summary': None,
            'findings_summary': "x" * 1500,
        }
        fused = self.engine.fuse(parsed_doc(), llm)
        assert fused.summary.provenance == 'llm'
        assert fused.summary.confidence == 0.85
        assert fused.methods_summary.value is None
        assert len(fused.findings_summary.value) == 1200

    def test_malformed_llm_never_raises(self):
        llm = {'authors': 42, 'document_date': 20240513, 'summary': ['x'], 'document_type': {'a': 1}}
        fused = self.engine.fuse(parsed_doc(), llm)
        assert fused.authors.value is None
        assert fused.document_date.value is None
        assert fused.summary.value is None

    def test_nothing_at_all(self):
        fused = self.engine.fuse(None, None)
        assert fused.to_dict() == {
            'document_type': 'Journal/Conference Article',
            'authors': None,
            'document_date': None,
            'summary': None,
            'methods_summary': None,
            'findings_summary': None,
        }
