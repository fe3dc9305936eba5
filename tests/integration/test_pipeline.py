"""Integration tests for the end-to-end processing pipeline."""

import json
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests
from docx import Document

from docsign_ai.analysis.exceptions import ProviderError
from docsign_ai.analysis.local_llm import LocalLLMProvider
from docsign_ai.analysis.provider_chain import AnalysisProviderChain
from docsign_ai.backend.fallback_document import SignedDocumentStore
from docsign_ai.backend.signing_client import BackendError
from docsign_ai.config.models import ServiceSettings
from docsign_ai.interfaces.provider import IAnalysisProvider
from docsign_ai.models.enums import FieldType, FileType, SignatureType
from docsign_ai.models.processing import UserProfile
from docsign_ai.models.signature import SignatureData
from docsign_ai.pipeline import (
    FAST_MODE_WARNING,
    DocumentAnalysisOrchestrator,
    DocumentProcessingError,
    DocumentProcessingPipeline,
    PipelineConfig,
)


PROFILE = UserProfile(name="Dana Levi", email="dana@example.com", phone="+972501234567")


class OfflineProvider(IAnalysisProvider):
    """Provider standing in for an unreachable language model."""

    name = "local"

    def analyze_content(self, content, file_type):
        raise ProviderError("Connection refused", provider=self.name)


class StaticProvider(IAnalysisProvider):
    """Provider returning a canned model payload."""

    name = "local"

    def __init__(self, payload):
        self.payload = payload

    def analyze_content(self, content, file_type):
        return self.payload


def write_docx(path, *lines):
    doc = Document()
    for line in lines:
        doc.add_paragraph(line)
    doc.save(str(path))
    return path


@pytest.fixture
def form_docx(tmp_path):
    return write_docx(
        tmp_path / "form.docx",
        "Application Form",
        "Name: __________",
        "Email: __________",
        "Signature: __________",
        "Do you agree to the terms?",
    )


@pytest.fixture
def hebrew_docx(tmp_path):
    return write_docx(tmp_path / "טופס.docx", "שם: __________", "חתימה: __________")


@pytest.fixture
def backend():
    return Mock()


def make_pipeline(tmp_path, backend=None, provider=None, fast_mode=False):
    chain = AnalysisProviderChain(provider) if provider is not None else None
    config = PipelineConfig(output_dir=str(tmp_path / "signed"), fast_mode=fast_mode)
    return DocumentProcessingPipeline(
        config=config,
        orchestrator=DocumentAnalysisOrchestrator(provider_chain=chain),
        backend=backend,
        store=SignedDocumentStore(config.output_dir),
        profile=PROFILE,
    )


class TestAnalyzeDocument:
    """Tests for the analysis half of the pipeline."""

    def test_docx_analysis(self, form_docx):
        orchestrator = DocumentAnalysisOrchestrator()

        analysis = orchestrator.analyze_document(str(form_docx), FileType.DOCX)

        assert [f.type for f in analysis.form_fields] == [
            FieldType.TEXT, FieldType.EMAIL, FieldType.SIGNATURE,
        ]
        assert len(analysis.questions) == 1
        assert len(analysis.signatures) == 1
        assert analysis.confidence == 0.91
        assert analysis.content is not None
        assert analysis.document_info.name == "form.docx"
        assert analysis.document_info.type == FileType.DOCX.mime_type
        assert analysis.metadata["provider"] == "heuristic"

    def test_offline_model_falls_back(self, form_docx):
        """An unreachable model still yields the heuristic analysis."""
        orchestrator = DocumentAnalysisOrchestrator(AnalysisProviderChain(OfflineProvider()))

        analysis = orchestrator.analyze_document(str(form_docx), FileType.DOCX)

        assert len(analysis.form_fields) == 3
        assert analysis.metadata["provider"] == "heuristic"
        assert "Connection refused" in analysis.metadata["fallbackReason"]

    def test_model_payload_normalized(self, form_docx):
        payload = {
            "language": "en",
            "category": "job_application",
            "formFields": [
                {"id": "a", "type": "mystery", "label": "Name"},
                {"id": "a", "type": "email", "label": "Email", "confidence": 7},
                "not an object",
            ],
            "signatures": None,
        }
        orchestrator = DocumentAnalysisOrchestrator(AnalysisProviderChain(StaticProvider(payload)))

        analysis = orchestrator.analyze_document(str(form_docx), FileType.DOCX)

        assert [f.id for f in analysis.form_fields] == ["a", "a_2"]
        assert analysis.form_fields[0].type is FieldType.TEXT
        assert analysis.form_fields[1].confidence == 1.0
        assert analysis.signatures == []
        assert analysis.questions == []
        assert analysis.document_info.category == "job_application"
        assert analysis.metadata["provider"] == "local"

    def test_non_finite_numbers_in_model_payload(self, form_docx):
        """Infinity and NaN decode as valid JSON and must not break analysis."""
        payload = json.loads(
            '{"formFields": [{"id": "1", "type": "text", "label": "Name", "page": Infinity,'
            ' "confidence": NaN, "position": {"x": Infinity, "y": -Infinity}}],'
            ' "signatures": [{"id": "s", "page": 1e400}]}'
        )
        orchestrator = DocumentAnalysisOrchestrator(AnalysisProviderChain(StaticProvider(payload)))

        analysis = orchestrator.analyze_document(str(form_docx), FileType.DOCX)

        field = analysis.form_fields[0]
        assert field.page == 1
        assert 0.0 <= field.confidence <= 1.0
        assert field.position.anchor == (0.0, 0.0)
        assert analysis.signatures[0].page == 1
        assert analysis.metadata["provider"] == "local"

    def test_unnormalizable_payload_yields_minimal_analysis(self, form_docx, monkeypatch):
        from docsign_ai import pipeline as pipeline_module

        real = pipeline_module.payload_to_analysis

        def failing_for_model_payload(payload, *args, **kwargs):
            if payload.get("formFields"):
                raise ValueError("bad geometry")
            return real(payload, *args, **kwargs)

        monkeypatch.setattr(pipeline_module, "payload_to_analysis", failing_for_model_payload)
        payload = {"formFields": [{"id": "1", "label": "Name"}]}
        orchestrator = DocumentAnalysisOrchestrator(AnalysisProviderChain(StaticProvider(payload)))

        analysis = orchestrator.analyze_document(str(form_docx), FileType.DOCX)

        assert analysis.form_fields == []
        assert analysis.metadata["provider"] == "minimal"
        assert "bad geometry" in analysis.metadata["fallbackReason"]

    def test_pdf_uses_placeholder_content(self, tmp_path):
        path = tmp_path / "scan.pdf"
        path.write_bytes(b"%PDF-1.4 minimal")

        analysis = DocumentAnalysisOrchestrator().analyze_document(str(path), FileType.PDF)

        assert analysis.content is None
        assert analysis.document_info.type == "application/pdf"

    def test_insights(self, form_docx):
        orchestrator = DocumentAnalysisOrchestrator()
        analysis = orchestrator.analyze_document(str(form_docx), FileType.DOCX)

        insights = orchestrator.get_document_insights(analysis)

        assert insights.insights == analysis.key_insights
        assert insights.recommendations


class TestProcessDocument:
    """Tests for the complete processing pipeline."""

    def test_signed_document_saved(self, tmp_path, form_docx, backend):
        backend.add_signatures.return_value = b"signed docx bytes"
        pipeline = make_pipeline(tmp_path, backend)

        result = pipeline.process_document(str(form_docx), FileType.DOCX, {"Name": "Noa Cohen"})

        assert result.success
        values = {f.label: f.value for f in result.filled_fields}
        assert values["Name:"] == "Noa Cohen"
        assert values["Email:"] == "dana@example.com"
        assert values["Signature:"] == "Dana Levi"
        assert result.answered_questions[0].value == "Yes"

        target = tmp_path / "signed" / "form_signed.docx"
        assert target.read_bytes() == b"signed docx bytes"
        assert result.signed_document_uri == target.resolve().as_uri()

        document_path, signature_requests = backend.add_signatures.call_args.args
        assert document_path == str(form_docx)
        assert len(signature_requests) == 1
        assert signature_requests[0].metadata["source"] == "field"

    def test_hebrew_encoding_failure_writes_summary(self, tmp_path, hebrew_docx, backend):
        """A WinAnsi failure on Hebrew text yields a plain-text summary."""
        backend.add_signatures.side_effect = BackendError(
            500, "Failed to add signature", body='WinAnsi cannot encode "ש" (0x05e9)'
        )
        pipeline = make_pipeline(tmp_path, backend)

        result = pipeline.process_document(str(hebrew_docx), FileType.DOCX)

        assert result.success
        assert result.signed_document_uri.endswith(".txt")
        summary = (tmp_path / "signed" / "טופס_filled_summary.txt").read_text(encoding="utf-8")
        assert "DOCUMENT FILLED SUMMARY" in summary
        assert "Original Document: טופס.docx" in summary
        assert any("plain-text summary" in w for w in result.warnings)

    def test_backend_rejection_keeps_original(self, tmp_path, form_docx, backend):
        backend.add_signatures.side_effect = BackendError(400, "Invalid signature data")
        pipeline = make_pipeline(tmp_path, backend)

        result = pipeline.process_document(str(form_docx), FileType.DOCX)

        assert result.success
        assert result.signed_document_uri == Path(form_docx).resolve().as_uri()
        assert any("Invalid signature data" in w for w in result.warnings)

    def test_backend_unreachable_keeps_original(self, tmp_path, form_docx, backend):
        backend.add_signatures.side_effect = requests.ConnectionError("refused")
        pipeline = make_pipeline(tmp_path, backend)

        result = pipeline.process_document(str(form_docx), FileType.DOCX)

        assert result.signed_document_uri == Path(form_docx).resolve().as_uri()
        assert any("refused" in w for w in result.warnings)

    def test_no_backend_configured(self, tmp_path, form_docx):
        result = make_pipeline(tmp_path).process_document(str(form_docx), FileType.DOCX)

        assert result.signed_document_uri == Path(form_docx).resolve().as_uri()
        assert any("No signing backend" in w for w in result.warnings)

    def test_fast_mode_never_calls_backend(self, tmp_path, form_docx, backend):
        provider = Mock(spec=IAnalysisProvider)
        provider.name = "local"
        pipeline = make_pipeline(tmp_path, backend, provider=provider)

        result = pipeline.process_document_fast(str(form_docx), FileType.DOCX)

        backend.add_signatures.assert_not_called()
        provider.analyze_content.assert_not_called()
        assert FAST_MODE_WARNING in result.warnings
        assert result.signed_document_uri == Path(form_docx).resolve().as_uri()
        assert len(result.filled_fields) == 3
        assert result.signature_requests

    def test_fast_mode_from_config(self, tmp_path, form_docx, backend):
        pipeline = make_pipeline(tmp_path, backend, fast_mode=True)

        result = pipeline.process_document(str(form_docx), FileType.DOCX)

        backend.add_signatures.assert_not_called()
        assert FAST_MODE_WARNING in result.warnings

    def test_extraction_failure_raises(self, tmp_path):
        broken = tmp_path / "broken.docx"
        broken.write_bytes(b"not a word file")

        with pytest.raises(DocumentProcessingError) as exc_info:
            make_pipeline(tmp_path).process_document(str(broken), FileType.DOCX)

        assert exc_info.value.file_path == str(broken)
        assert exc_info.value.__cause__ is not None
        assert exc_info.value.to_dict()["details"]["error_type"] == "DocumentCorruptedError"

    def test_fallback_is_reported(self, tmp_path, form_docx):
        pipeline = make_pipeline(tmp_path, provider=OfflineProvider())

        result = pipeline.process_document_fast(str(form_docx), FileType.DOCX)
        assert not any("AI analysis unavailable" in w for w in result.warnings)

        result = pipeline.process_document(str(form_docx), FileType.DOCX)
        assert any("AI analysis unavailable" in w for w in result.warnings)

    def test_signature_fields_win_over_keyed_zones(self, tmp_path, backend):
        """Signature fields cover their zones, so keyed zone data is not applied twice."""
        backend.add_signatures.return_value = b"signed"
        path = tmp_path / "zones.docx"
        write_docx(path, "Witness signature", "", "", "Applicant signature")
        pipeline = make_pipeline(tmp_path, backend)
        drawing = json.dumps([{"x": 60, "y": 110}, {"x": 80, "y": 120}])
        user_signature = SignatureData(
            id="mine", name="Noa", type=SignatureType.TYPED, data="Noa", is_default=True,
        )

        result = pipeline.process_document(
            str(path),
            FileType.DOCX,
            {"signature_1": drawing},
            signature_data=[user_signature],
        )

        assert len(result.signature_requests) == 2
        assert {r.metadata["source"] for r in result.signature_requests} == {"field"}
        assert all(r.metadata["signatureId"] == "mine" for r in result.signature_requests)

    def test_result_serializes(self, tmp_path, form_docx):
        result = make_pipeline(tmp_path).process_document_fast(str(form_docx), FileType.DOCX)

        encoded = json.dumps(result.to_dict(), ensure_ascii=False)

        assert "signedDocumentUri" in encoded


class TestFromSettings:
    """Tests for building a pipeline from service settings."""

    def test_heuristic_settings(self, tmp_path):
        settings = ServiceSettings(output_dir=str(tmp_path))

        pipeline = DocumentProcessingPipeline.from_settings(settings, PROFILE)

        chain = pipeline.orchestrator.provider_chain
        assert chain.primary is chain.fallback
        assert pipeline.config.output_dir == str(tmp_path)

    def test_local_settings(self, tmp_path):
        settings = ServiceSettings(
            llm_url="http://localhost:11434",
            analysis_timeout=30.0,
            output_dir=str(tmp_path),
        )

        pipeline = DocumentProcessingPipeline.from_settings(settings)

        primary = pipeline.orchestrator.provider_chain.primary
        assert isinstance(primary, LocalLLMProvider)
        assert primary.analysis_timeout == 30.0
