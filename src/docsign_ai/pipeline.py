"""End-to-end processing pipeline for the document signing services.

This module wires together content extraction, the analysis provider
chain, field reconciliation, signature request building and the signing
backend, from upload to signed document.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import requests

from .analysis.normalization import minimal_payload, payload_to_analysis
from .analysis.provider_chain import AnalysisProviderChain, HeuristicProvider
from .backend.fallback_document import (
    SignedDocumentStore,
    is_encoding_failure,
    render_text_summary,
)
from .backend.signing_client import BackendError, SigningBackendClient
from .config.models import LocalProviderConfig, ServiceSettings
from .interfaces.backend import ISigningBackend
from .interfaces.extractor import IContentExtractor
from .models.document import DocumentAnalysis, DocumentInfo, DocumentInsights, FormField
from .models.enums import FileType, RiskLevel
from .models.processing import AIProcessingResult, UserProfile
from .models.signature import SignatureData, SignatureRequest
from .parsers.base import ContentExtractor
from .parsers.exceptions import ContentExtractionError
from .parsers.language_detector import detect_language
from .reconciliation.field_reconciler import FieldReconciler
from .reconciliation.form_validator import validate_form
from .reconciliation.signature_builder import SignatureRequestBuilder, default_signatures


logger = logging.getLogger(__name__)

FAST_MODE_WARNING = "Document processed in fast mode"
KEYED_SIGNATURE_PREFIX = "signature_"


@dataclass
class PipelineConfig:
    """Configuration for the processing pipeline."""

    # Where signed documents and fallback summaries are written
    output_dir: str = "data/signed"

    # Skip the language model and the signing backend
    fast_mode: bool = False

    # Confidence stamped on every analysis
    analysis_confidence: float = 0.91

    @classmethod
    def from_settings(cls, settings: ServiceSettings, fast_mode: bool = False) -> "PipelineConfig":
        return cls(
            output_dir=settings.output_dir,
            fast_mode=fast_mode,
            analysis_confidence=settings.analysis_confidence,
        )


@dataclass
class DocumentProcessingError(Exception):
    """
    Raised when a document cannot be processed at all.

    Only happens when its content cannot be extracted; the extraction
    error is chained as ``__cause__``.
    """
    message: str
    file_path: Optional[str] = None
    details: Optional[dict] = field(default_factory=dict)

    def __post_init__(self):
        if self.details is None:
            self.details = {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "file_path": self.file_path,
            "details": self.details,
        }


class DocumentAnalysisOrchestrator:
    """
    Owns the analyze contract: extract content, run the provider chain
    and normalize the payload into a DocumentAnalysis.

    Only content extraction errors propagate; provider failures are
    absorbed by the chain.
    """

    def __init__(
        self,
        provider_chain: Optional[AnalysisProviderChain] = None,
        extractor: Optional[IContentExtractor] = None,
        confidence: float = 0.91,
    ):
        self._chain = provider_chain or AnalysisProviderChain(HeuristicProvider())
        self._fast_chain = AnalysisProviderChain(HeuristicProvider())
        self._extractor = extractor or ContentExtractor()
        self.confidence = confidence

    @property
    def provider_chain(self) -> AnalysisProviderChain:
        return self._chain

    def analyze_document(self, source_path: str, file_type: FileType) -> DocumentAnalysis:
        """
        Analyze an uploaded document.

        Args:
            source_path: Path to the uploaded document.
            file_type: Format of the document.

        Returns:
            DocumentAnalysis with provenance recorded in its metadata.

        Raises:
            ContentExtractionError: If the content cannot be extracted.
        """
        return self._analyze(source_path, file_type, self._chain)

    def analyze_document_fast(self, source_path: str, file_type: FileType) -> DocumentAnalysis:
        """Analyze a document with the heuristic tier only."""
        return self._analyze(source_path, file_type, self._fast_chain)

    def get_document_insights(self, analysis: DocumentAnalysis) -> DocumentInsights:
        """Distill insights and recommendations from an analysis."""
        risk = analysis.risk_assessment
        return DocumentInsights(
            insights=list(analysis.key_insights),
            recommendations=list(risk.recommendations) if risk else [],
            risk_level=risk.level if risk else RiskLevel.MEDIUM,
        )

    def _analyze(
        self,
        source_path: str,
        file_type: FileType,
        chain: AnalysisProviderChain,
    ) -> DocumentAnalysis:
        start_time = time.time()
        logger.info(f"Starting {file_type.value.upper()} document analysis: {source_path}")

        extracted = self._extractor.extract(source_path, file_type)
        outcome = chain.analyze_with_provenance(extracted.content, file_type)

        info = DocumentInfo(
            name=Path(source_path).name,
            size=int(extracted.metadata.get("file_size", len(extracted.content.encode("utf-8")))),
            pages=max(1, int(extracted.metadata.get("page_count", 1))),
            type=file_type.mime_type,
            language=extracted.metadata.get("language") or detect_language(extracted.content),
        )
        metadata: Dict[str, Any] = {"provider": outcome.provider}
        if outcome.fallback_reason:
            metadata["fallbackReason"] = outcome.fallback_reason

        content = extracted.content if file_type is FileType.DOCX else None
        try:
            analysis = payload_to_analysis(
                outcome.payload,
                info,
                processing_time=time.time() - start_time,
                confidence=self.confidence,
                content=content,
                metadata=metadata,
            )
        except Exception as e:
            reason = f"{outcome.provider} payload could not be normalized: {e}"
            logger.exception(f"{reason}; returning minimal analysis")
            if outcome.fallback_reason:
                reason = f"{outcome.fallback_reason}; {reason}"
            analysis = payload_to_analysis(
                minimal_payload(info.language),
                info,
                processing_time=time.time() - start_time,
                confidence=self.confidence,
                content=content,
                metadata={"provider": "minimal", "fallbackReason": reason},
            )
        logger.info(
            f"Analysis completed by {analysis.metadata['provider']}: {len(analysis.form_fields)} fields, "
            f"{len(analysis.questions)} questions, {len(analysis.signatures)} signature zones"
        )
        return analysis


class DocumentProcessingPipeline:
    """
    Main processing pipeline: analyze, fill, answer, sign.

    Every failure after content extraction degrades the result rather
    than aborting it: provider outages fall back to the heuristic
    analyzer and backend failures become warnings.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        orchestrator: Optional[DocumentAnalysisOrchestrator] = None,
        reconciler: Optional[FieldReconciler] = None,
        signature_builder: Optional[SignatureRequestBuilder] = None,
        backend: Optional[ISigningBackend] = None,
        store: Optional[SignedDocumentStore] = None,
        profile: Optional[UserProfile] = None,
    ):
        """
        Initialize the processing pipeline.

        Args:
            config: Pipeline configuration.
            orchestrator: Optional analysis orchestrator (heuristic-only if not provided).
            reconciler: Optional field reconciler.
            signature_builder: Optional signature request builder.
            backend: Optional signing backend; documents stay unsigned without one.
            store: Optional store for signed documents (created from output_dir).
            profile: Default user profile for reconciliation.
        """
        self.config = config or PipelineConfig()
        self.orchestrator = orchestrator or DocumentAnalysisOrchestrator(
            confidence=self.config.analysis_confidence
        )
        self._reconciler = reconciler or FieldReconciler()
        self._signature_builder = signature_builder or SignatureRequestBuilder()
        self._backend = backend
        self._store = store or SignedDocumentStore(self.config.output_dir)
        self._profile = profile or UserProfile()

        logger.info("Processing pipeline initialized")

    @classmethod
    def from_settings(
        cls,
        settings: ServiceSettings,
        profile: Optional[UserProfile] = None,
    ) -> "DocumentProcessingPipeline":
        """Build a pipeline wired to the configured provider and backend."""
        config = PipelineConfig.from_settings(settings)
        provider_config = settings.provider_config()
        if isinstance(provider_config, LocalProviderConfig):
            chain = AnalysisProviderChain.from_config(
                provider_config,
                analysis_timeout=settings.analysis_timeout,
                interactive_timeout=settings.interactive_timeout,
            )
        else:
            chain = AnalysisProviderChain.from_config(provider_config)

        return cls(
            config=config,
            orchestrator=DocumentAnalysisOrchestrator(
                provider_chain=chain,
                confidence=settings.analysis_confidence,
            ),
            backend=SigningBackendClient(settings.backend_url, timeout=settings.backend_timeout),
            profile=profile,
        )

    def process_document(
        self,
        source_path: str,
        file_type: FileType,
        user_data: Optional[Mapping[str, Any]] = None,
        signature_data: Optional[List[SignatureData]] = None,
        keyed_signatures: Optional[Mapping[str, Any]] = None,
        profile: Optional[UserProfile] = None,
    ) -> AIProcessingResult:
        """
        Execute the complete processing pipeline.

        Args:
            source_path: Path to the uploaded document.
            file_type: Format of the document.
            user_data: Field values keyed by label, answers keyed
                ``question_<id>`` and signatures keyed ``signature_<zoneId>``.
            signature_data: The user's signature artifacts.
            keyed_signatures: Additional per-zone signature artifacts.
            profile: User profile; the pipeline default when omitted.

        Returns:
            AIProcessingResult with the filled fields, answers and the
            URI of the signed (or original) document.

        Raises:
            DocumentProcessingError: If the document content cannot be extracted.
        """
        return self._process(
            source_path, file_type, user_data, signature_data, keyed_signatures, profile,
            fast=self.config.fast_mode,
        )

    def process_document_fast(
        self,
        source_path: str,
        file_type: FileType,
        user_data: Optional[Mapping[str, Any]] = None,
        signature_data: Optional[List[SignatureData]] = None,
        keyed_signatures: Optional[Mapping[str, Any]] = None,
        profile: Optional[UserProfile] = None,
    ) -> AIProcessingResult:
        """Process with heuristic analysis only and without calling the backend."""
        return self._process(
            source_path, file_type, user_data, signature_data, keyed_signatures, profile,
            fast=True,
        )

    def _process(
        self,
        source_path: str,
        file_type: FileType,
        user_data: Optional[Mapping[str, Any]],
        signature_data: Optional[List[SignatureData]],
        keyed_signatures: Optional[Mapping[str, Any]],
        profile: Optional[UserProfile],
        fast: bool,
    ) -> AIProcessingResult:
        start_time = time.time()
        profile = profile or self._profile
        user_data = dict(user_data or {})
        warnings: List[str] = []

        try:
            if fast:
                analysis = self.orchestrator.analyze_document_fast(source_path, file_type)
            else:
                analysis = self.orchestrator.analyze_document(source_path, file_type)
        except ContentExtractionError as e:
            logger.error(f"Content extraction failed: {e}")
            raise DocumentProcessingError(
                message=f"Failed to analyze {file_type.value.upper()} document: {e.message}",
                file_path=source_path,
                details=e.to_dict(),
            ) from e

        if analysis.metadata.get("fallbackReason"):
            warnings.append("AI analysis unavailable; used basic document analysis")

        filled_fields = self._reconciler.fill(analysis.form_fields, user_data, profile)
        answered_questions = self._reconciler.answer(analysis.questions, user_data, profile)

        report = validate_form(filled_fields)
        warnings.extend(report.errors)
        warnings.extend(report.warnings)

        signatures = list(signature_data) if signature_data else default_signatures(profile)
        keyed = {k: v for k, v in user_data.items() if k.startswith(KEYED_SIGNATURE_PREFIX)}
        keyed.update(keyed_signatures or {})
        signature_requests = self._signature_builder.build(
            filled_fields, analysis.signatures, signatures, keyed
        )

        if fast:
            signed_uri = Path(source_path).resolve().as_uri()
            warnings.append(FAST_MODE_WARNING)
        else:
            signed_uri = self._sign(source_path, filled_fields, signature_requests, signatures, warnings)

        processing_time = time.time() - start_time
        logger.info(f"Document processed in {processing_time:.2f}s")

        return AIProcessingResult(
            success=True,
            analysis=analysis,
            filled_fields=filled_fields,
            answered_questions=answered_questions,
            signed_document_uri=signed_uri,
            processing_time=processing_time,
            errors=[],
            warnings=warnings,
            signature_requests=signature_requests,
        )

    def _sign(
        self,
        source_path: str,
        filled_fields: List[FormField],
        signature_requests: List[SignatureRequest],
        signatures: List[SignatureData],
        warnings: List[str],
    ) -> str:
        """Send the document to the backend; fall back to the original URI."""
        original_uri = Path(source_path).resolve().as_uri()
        if self._backend is None:
            warnings.append("No signing backend configured; document left unsigned")
            return original_uri

        try:
            content = self._backend.add_signatures(source_path, signature_requests)
            return self._store.save_signed(source_path, content)
        except BackendError as e:
            if is_encoding_failure(e):
                logger.warning("Signing backend cannot encode Hebrew text, writing text summary")
                summary = render_text_summary(
                    Path(source_path).name, filled_fields, signature_requests, signatures
                )
                try:
                    summary_uri = self._store.save_text_summary(source_path, summary)
                except OSError as save_error:
                    logger.warning(f"Could not store text summary: {save_error}")
                    warnings.append(f"Text summary could not be saved: {save_error}")
                    return original_uri
                warnings.append("Hebrew text could not be embedded; generated a plain-text summary")
                return summary_uri
            logger.warning(f"Signing backend rejected the document: {e}")
            warnings.append(f"Signature application failed: {e.message}")
        except requests.RequestException as e:
            logger.warning(f"Signing backend unreachable: {e}")
            warnings.append(f"Signature application failed: {e}")
        except OSError as e:
            logger.warning(f"Could not store signed document: {e}")
            warnings.append(f"Signed document could not be saved: {e}")

        return original_uri
