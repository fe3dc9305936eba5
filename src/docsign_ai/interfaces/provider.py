"""Analysis provider interface for the document signing pipeline."""

from abc import ABC, abstractmethod
from typing import Any, Dict

from ..models.enums import FileType


class IAnalysisProvider(ABC):
    """
    Abstract interface for document-understanding providers.

    A provider turns document text into a raw analysis payload: a dict in
    the camelCase wire format with the keys language, category, summary,
    keyInsights, riskAssessment, formFields, questions and signatures.
    Any key may be missing; normalization happens downstream.
    """

    #: Short name recorded in analysis metadata.
    name: str = "provider"

    @abstractmethod
    def analyze_content(self, content: str, file_type: FileType) -> Dict[str, Any]:
        """
        Analyze document text.

        Args:
            content: Plain text of the document.
            file_type: Format of the source document.

        Returns:
            Raw analysis payload.

        Raises:
            ProviderError: If the provider cannot produce an analysis.
        """
        pass
