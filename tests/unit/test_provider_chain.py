"""Unit tests for provider selection and the fallback chain."""

import pytest

from docsign_ai.analysis.exceptions import ProviderError
from docsign_ai.analysis.local_llm import LocalLLMProvider
from docsign_ai.analysis.provider_chain import (
    AnalysisProviderChain,
    HeuristicProvider,
    build_provider,
)
from docsign_ai.config.models import HeuristicProviderConfig, LocalProviderConfig
from docsign_ai.interfaces.provider import IAnalysisProvider
from docsign_ai.models.enums import FileType


FORM_TEXT = "Name: _____\nSignature: _____\nDo you agree?"


class FailingProvider(IAnalysisProvider):
    """Provider that always raises."""

    name = "failing"

    def __init__(self, error=None):
        self.error = error or ProviderError("model offline", provider="failing")
        self.calls = 0

    def analyze_content(self, content, file_type):
        self.calls += 1
        raise self.error


class StaticProvider(IAnalysisProvider):
    """Provider that returns a fixed payload."""

    name = "static"

    def __init__(self, payload):
        self.payload = payload

    def analyze_content(self, content, file_type):
        return self.payload


class TestBuildProvider:
    """Tests for build_provider."""

    def test_local_config(self):
        provider = build_provider(LocalProviderConfig(endpoint="http://localhost:11434"))
        assert isinstance(provider, LocalLLMProvider)

    def test_heuristic_config(self):
        provider = build_provider(HeuristicProviderConfig())
        assert isinstance(provider, HeuristicProvider)

    def test_unknown_config_raises(self):
        with pytest.raises(TypeError):
            build_provider({"kind": "cloud"})

    def test_timeouts_passed_to_local_provider(self):
        provider = build_provider(
            LocalProviderConfig(endpoint="http://localhost:11434"),
            analysis_timeout=5.0,
        )
        assert provider.analysis_timeout == 5.0


class TestAnalysisProviderChain:
    """Tests for AnalysisProviderChain."""

    def test_primary_result_used(self):
        payload = {"language": "en", "formFields": []}
        chain = AnalysisProviderChain(StaticProvider(payload))

        outcome = chain.analyze_with_provenance("text", FileType.DOCX)

        assert outcome.payload is payload
        assert outcome.provider == "static"
        assert not outcome.fell_back

    def test_failing_primary_falls_back_to_heuristic(self):
        """A failing primary yields the heuristic result for the same text."""
        primary = FailingProvider()
        chain = AnalysisProviderChain(primary)

        outcome = chain.analyze_with_provenance(FORM_TEXT, FileType.DOCX)

        expected = HeuristicProvider().analyze_content(FORM_TEXT, FileType.DOCX)
        assert outcome.payload == expected
        assert outcome.provider == "heuristic"
        assert outcome.fell_back
        assert "model offline" in outcome.fallback_reason
        assert primary.calls == 1

    def test_unexpected_exception_is_absorbed(self):
        chain = AnalysisProviderChain(FailingProvider(RuntimeError("boom")))

        outcome = chain.analyze_with_provenance(FORM_TEXT, FileType.DOCX)

        assert outcome.provider == "heuristic"

    def test_non_dict_payload_falls_back(self):
        chain = AnalysisProviderChain(StaticProvider(["not", "a", "dict"]))

        outcome = chain.analyze_with_provenance(FORM_TEXT, FileType.DOCX)

        assert outcome.provider == "heuristic"
        assert "expected dict" in outcome.fallback_reason

    def test_both_tiers_failing_returns_minimal_payload(self):
        chain = AnalysisProviderChain(FailingProvider(), fallback=FailingProvider())

        outcome = chain.analyze_with_provenance("שלום", FileType.DOCX)

        assert outcome.provider == "minimal"
        assert outcome.payload["language"] == "he"
        assert outcome.payload["formFields"] == []
        assert outcome.payload["questions"] == []
        assert outcome.payload["signatures"] == []

    def test_heuristic_primary_runs_once(self):
        """A heuristic primary is its own fallback."""
        chain = AnalysisProviderChain.from_config(HeuristicProviderConfig())

        assert chain.fallback is chain.primary
        outcome = chain.analyze_with_provenance(FORM_TEXT, FileType.DOCX)
        assert outcome.provider == "heuristic"
        assert not outcome.fell_back

    def test_analyze_content_returns_payload(self):
        chain = AnalysisProviderChain(FailingProvider())

        payload = chain.analyze_content(FORM_TEXT, FileType.DOCX)

        assert len(payload["formFields"]) == 2
        assert len(payload["questions"]) == 1
