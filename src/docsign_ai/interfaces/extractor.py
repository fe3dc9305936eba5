"""Content extractor interface for the document signing pipeline."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ..models.enums import FileType


@dataclass
class ExtractedContent:
    """
    Plain text obtained from an uploaded document.

    metadata carries whatever the extractor could learn cheaply
    (file_size, page_count, word_count, language, ...).
    """
    content: str
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.metadata is None:
            self.metadata = {}


class IContentExtractor(ABC):
    """
    Abstract interface for document content extraction.

    Implementations turn an uploaded file into plain text for the
    analysis providers.
    """

    @abstractmethod
    def extract(self, file_path: str, file_type: FileType) -> ExtractedContent:
        """
        Extract the text content of a document.

        Args:
            file_path: Path to the uploaded document.
            file_type: Declared format of the document.

        Returns:
            ExtractedContent with the text and metadata.

        Raises:
            ContentExtractionError: If the content cannot be obtained.
        """
        pass
