"""
Tests for the Ollama client and the two-prompt LLM ensemble.

No model is called: the ensemble gets a fake client and the Ollama client
talks to a monkeypatched requests.post.
"""

import sys
from pathlib import Path

import requests

sys.path.insert(0, str(Path(__file__).parent.parent))

from metadata_tools.ai import ollama_client
from metadata_tools.ai.llm_ensemble import (
    LLM_FIELDS, LLMEnsemble, build_prompt_a, build_prompt_b, clean_llm_authors,
    pick_authors, pick_string,
)
from metadata_tools.ai.ollama_client import OllamaClient
from metadata_tools.models.document import Sections


SECTIONS = Sections(
    header_text="Deep Learning for Protein Folding\nJane Doe, John Smith",
    body="Deep Learning for Protein Folding\nJane Doe, John Smith\nAbstract\nWe fold proteins.",
    title="Deep Learning for Protein Folding",
    abstract="We fold proteins.",
)


class FakeClient:
    """Answers prompt A and the checklist prompt B differently."""

    def __init__(self, answer_a, answer_b):
        self.answer_a = answer_a
        self.answer_b = answer_b
        self.prompts = []

    def call_json(self, prompt, system=None):
        self.prompts.append((prompt, system))
        return self.answer_b if "Checklist" in prompt else self.answer_a


class RaisingClient:
    def call_json(self, prompt, system=None):
        raise RuntimeError("model crashed")


class TestPrompts:
    """Test prompt construction."""

    def test_prompt_a_has_hints_and_sections(self):
        prompt = build_prompt_a(SECTIONS, {'document_date': '2019-04'})
        assert '"document_date": "2019-04"' in prompt
        assert "We fold proteins." in prompt
        assert "Checklist" not in prompt

    def test_prompt_b_falls_back_to_body(self):
        sections = Sections(body="Body only text without headings", title="A Title")
        prompt = build_prompt_b(sections, {})
        assert "Body only text without headings" in prompt
        assert "Checklist" in prompt
        assert "Body only text" not in build_prompt_a(sections, {})

    def test_prompt_text_is_truncated(self):
        long_sections = Sections(abstract="x" * 20000)
        assert build_prompt_a(long_sections, {}).count("x" * 12000) == 1
        assert "x" * 12001 not in build_prompt_a(long_sections, {})
        assert "x" * 10001 not in build_prompt_b(long_sections, {})


class TestMergeHelpers:
    """Test field-level merging."""

    def test_pick_string(self):
        assert pick_string("abc", "abcd") == "abcd"
        assert pick_string("abc", "xyz") == "abc"
        assert pick_string(None, "  ") is None
        assert pick_string(5, "x") == "x"

    def test_clean_llm_authors(self):
        raw = ["Jane Doe¹", "Department of Surgery", "JOHN SMITH", "Prof. Mary Major",
               "Harvard University", "Acme Campus", "Jane Doe", 7]
        assert clean_llm_authors(raw) == ["Jane Doe", "John Smith", "Mary Major"]

    def test_clean_llm_authors_from_string(self):
        assert clean_llm_authors("Jane Doe; John Smith") == ["Jane Doe", "John Smith"]
        assert clean_llm_authors(None) == []

    def test_pick_authors_union(self):
        assert pick_authors(["Jane Doe"], ["John Smith", "Jane Doe"]) == ["John Smith", "Jane Doe"]
        assert pick_authors(["Jane Doe", "Mary Major"], ["John Smith"]) == ["Jane Doe", "Mary Major", "John Smith"]
        assert pick_authors(None, []) is None


class TestLLMEnsemble:
    """Test running and merging both prompts."""

    def test_merges_both_answers(self):
        client = FakeClient(
            {'document_type': 'Journal Article', 'authors': ['Jane Doe'], 'summary': 'Short.'},
            {'authors': ['Jane Doe', 'John Smith'], 'summary': 'A longer summary text.', 'document_date': '2021'},
        )
        result = LLMEnsemble(client).run(SECTIONS, {'document_type': 'Journal/Conference Article'})
        assert list(result) == list(LLM_FIELDS)
        assert result['document_type'] == 'Journal Article'
        assert result['authors'] == ['Jane Doe', 'John Smith']
        assert result['document_date'] == '2021'
        assert result['summary'] == 'A longer summary text.'
        assert result['methods_summary'] is None
        assert len(client.prompts) == 2
        assert all(system for _, system in client.prompts)

    def test_failing_client_gives_empty_fields(self):
        result = LLMEnsemble(RaisingClient()).run(SECTIONS)
        assert result == {name: None for name in LLM_FIELDS}

    def test_non_dict_answer_ignored(self):
        result = LLMEnsemble(FakeClient(["not", "a", "dict"], None)).run(SECTIONS)
        assert result['authors'] is None


class _Resp:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class TestOllamaClient:
    """Test the Ollama HTTP wrapper."""

    def setup_method(self):
        self.client = OllamaClient(model_name="test-model", retry_delay=0)

    def test_parse_json_response(self):
        assert self.client.parse_json_response('```json\n{"authors": ["Jane Doe"]}\n```') == {'authors': ['Jane Doe']}
        assert self.client.parse_json_response('Sure! {"a": 1} hope that helps') == {'a': 1}
        assert self.client.parse_json_response('{"a": }') == {}
        assert self.client.parse_json_response('[1, 2]') == {}
        assert self.client.parse_json_response('') == {}

    def test_call_json(self, monkeypatch):
        sent = []

        def fake_post(url, json=None, timeout=None):
            sent.append((url, json))
            return _Resp({'response': '{"document_date": "2021"}'})

        monkeypatch.setattr(requests, 'post', fake_post)
        assert self.client.call_json("prompt", system="rules") == {'document_date': '2021'}
        url, payload = sent[0]
        assert url == "http://localhost:11434/api/generate"
        assert payload['model'] == "test-model"
        assert payload['stream'] is False
        assert payload['system'] == "rules"

    def test_retries_connection_errors(self, monkeypatch):
        attempts = []

        def fake_post(url, json=None, timeout=None):
            attempts.append(url)
            if len(attempts) == 1:
                raise requests.ConnectionError("model loading")
            return _Resp({'response': '{"summary": "ok"}'})

        monkeypatch.setattr(requests, 'post', fake_post)
        monkeypatch.setattr(ollama_client.time, 'sleep', lambda seconds: None)
        assert self.client.call_json("prompt") == {'summary': 'ok'}
        assert len(attempts) == 2

    def test_gives_up_after_retries(self, monkeypatch):
        def fake_post(url, json=None, timeout=None):
            raise requests.Timeout("slow")

        monkeypatch.setattr(requests, 'post', fake_post)
        monkeypatch.setattr(ollama_client.time, 'sleep', lambda seconds: None)
        assert self.client.call_json("prompt") == {}

    def test_http_error(self, monkeypatch):
        monkeypatch.setattr(requests, 'post', lambda url, json=None, timeout=None: _Resp({}, 500))
        assert self.client.call_json("prompt") == {}
