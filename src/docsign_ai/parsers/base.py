"""Content extractor dispatching on document format."""

from pathlib import Path
from typing import Optional

from ..interfaces.extractor import ExtractedContent, IContentExtractor
from ..models.enums import FileType
from .exceptions import DocumentNotFoundError, UnsupportedFormatError
from .word_parser import WordContentExtractor


PDF_PLACEHOLDER_CONTENT = "PDF document content - form fields and signatures detected"

SUPPORTED_FORMATS = [".docx", ".pdf"]


class ContentExtractor(IContentExtractor):
    """
    Main content extractor that delegates to format-specific extractors.

    DOCX text is read with python-docx. PDF text extraction is not
    supported: the file is checked for existence and a fixed placeholder
    string stands in for its content.
    """

    def __init__(self, word_extractor: Optional[WordContentExtractor] = None):
        self._word_extractor = word_extractor or WordContentExtractor()

    def extract(self, file_path: str, file_type: FileType) -> ExtractedContent:
        """
        Extract the text content of a document.

        Args:
            file_path: Path to the uploaded document.
            file_type: Declared format of the document.

        Returns:
            ExtractedContent with the text and metadata.

        Raises:
            DocumentNotFoundError: If the file does not exist.
            UnsupportedFormatError: If the format is not supported.
            DocumentCorruptedError: If the document is corrupted.
        """
        if file_type is FileType.DOCX:
            return self._word_extractor.extract(file_path)
        elif file_type is FileType.PDF:
            path = Path(file_path)
            if not path.exists():
                raise DocumentNotFoundError(
                    message="PDF file not found",
                    file_path=file_path,
                )
            return ExtractedContent(
                content=PDF_PLACEHOLDER_CONTENT,
                metadata={"file_size": path.stat().st_size, "placeholder": True},
            )
        else:
            raise UnsupportedFormatError(
                message=f"Unsupported file type: {file_type}",
                file_path=file_path,
                location="file type",
                details={"supported_formats": SUPPORTED_FORMATS}
            )


def detect_file_type(file_path: str) -> FileType:
    """
    Detect the document type from file extension.

    Raises:
        UnsupportedFormatError: If format is not supported.
    """
    suffix = Path(file_path).suffix.lower()

    if suffix == ".docx":
        return FileType.DOCX
    elif suffix == ".pdf":
        return FileType.PDF
    else:
        raise UnsupportedFormatError(
            message=f"Unsupported file format: {suffix}",
            file_path=file_path,
            location="file extension",
            details={"supported_formats": SUPPORTED_FORMATS}
        )
