"""Word document (.docx) content extractor."""

import logging
import re
from pathlib import Path
from zipfile import BadZipFile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from ..interfaces.extractor import ExtractedContent
from .exceptions import (
    ContentExtractionError,
    DocumentCorruptedError,
    DocumentNotFoundError,
    UnsupportedFormatError,
)
from .language_detector import detect_language


logger = logging.getLogger(__name__)


class WordContentExtractor:
    """
    Extractor for Word (.docx) documents.

    Collects body paragraphs followed by table cell text, one line per
    paragraph or table row, so underscore runs and checkbox glyphs stay
    on the line they were written on.
    """

    WORDS_PER_PAGE = 500

    def extract(self, file_path: str) -> ExtractedContent:
        """
        Extract the plain text of a Word document.

        Args:
            file_path: Path to the .docx file.

        Returns:
            ExtractedContent with the document text and metadata.

        Raises:
            DocumentNotFoundError: If the file does not exist.
            UnsupportedFormatError: If the file is not a .docx file.
            DocumentCorruptedError: If the document is corrupted.
        """
        path = Path(file_path)
        if not path.exists():
            raise DocumentNotFoundError("Uploaded Word document is missing", file_path=file_path)
        if path.suffix.lower() != ".docx":
            raise UnsupportedFormatError(
                f"Expected a .docx file, got '{path.suffix or 'no extension'}'",
                file_path=file_path,
            )

        try:
            doc = Document(file_path)
        except (BadZipFile, PackageNotFoundError, KeyError) as e:
            raise DocumentCorruptedError(
                "Not a readable Word package",
                file_path=file_path,
                location="word/document.xml",
                details={"original_error": str(e)},
            ) from e
        except Exception as e:
            raise ContentExtractionError(
                f"Word document could not be opened: {e}",
                file_path=file_path,
                details={"original_error": str(e)},
            ) from e

        lines = self._collect_lines(doc)
        content = "\n".join(lines)
        logger.info(f"Extracted {len(content)} characters from {path.name}")

        return ExtractedContent(
            content=content,
            metadata=self._build_metadata(content, lines, doc, path),
        )

    def _collect_lines(self, doc) -> list[str]:
        """Collect non-empty paragraph and table row texts in order."""
        lines = [para.text for para in doc.paragraphs if para.text.strip()]

        for table in doc.tables:
            for row in table.rows:
                cells = []
                for cell in row.cells:
                    text = cell.text.strip()
                    # Merged cells repeat the same text across the row.
                    if text and (not cells or cells[-1] != text):
                        cells.append(text)
                if cells:
                    lines.append(" ".join(cells))

        return lines

    def _build_metadata(self, content: str, lines: list[str], doc, path: Path) -> dict:
        """Build extraction metadata."""
        word_count = self._count_words(content)
        metadata = {
            "file_size": path.stat().st_size,
            "word_count": word_count,
            "paragraph_count": len(lines),
            "page_count": max(1, word_count // self.WORDS_PER_PAGE + 1),
            "has_tables": len(doc.tables) > 0,
            "has_lists": any(line.lstrip().startswith(("•", "-", "*")) for line in lines),
            "language": detect_language(content),
        }

        core_props = doc.core_properties
        if core_props.title:
            metadata["title"] = core_props.title
        if core_props.author:
            metadata["author"] = core_props.author

        return metadata

    def _count_words(self, text: str) -> int:
        """Count whitespace-separated words plus CJK characters."""
        cjk_chars = len(re.findall(r'[\u4e00-\u9fff]', text))
        words = len([w for w in re.split(r'\s+', text) if w and not re.search(r'[\u4e00-\u9fff]', w)])
        return words + cjk_chars
