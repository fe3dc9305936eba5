"""Local persistence of signed documents and the plain-text fallback."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from ..models.document import FormField
from ..models.enums import SignatureType
from ..models.signature import SignatureData, SignatureRequest
from ..parsers.language_detector import contains_hebrew
from .signing_client import BackendError


logger = logging.getLogger(__name__)

ENCODING_FAILURE_MARKER = "WinAnsi cannot encode"


def is_encoding_failure(error: BackendError) -> bool:
    """
    Recognize the backend failing to draw Hebrew text.

    The backend's standard fonts only cover WinAnsi; it reports the
    glyph it choked on, so the body holds both the marker and the
    Hebrew character.
    """
    body = error.body or error.message
    return ENCODING_FAILURE_MARKER in body and contains_hebrew(body)


def render_text_summary(
    original_name: str,
    fields: Sequence[FormField],
    signature_requests: Sequence[SignatureRequest],
    signatures: Sequence[SignatureData] = (),
    processed_at: Optional[datetime] = None,
) -> str:
    """Render the plain-text document used when the backend cannot sign."""
    processed_at = processed_at or datetime.now()
    by_id: Dict[str, SignatureData] = {s.id: s for s in signatures}

    lines = [
        "DOCUMENT FILLED SUMMARY",
        "========================",
        "",
        f"Original Document: {original_name}",
        f"Processed: {processed_at.strftime('%Y-%m-%d %H:%M:%S')}",
        "",
    ]

    if fields:
        lines.extend(["FILLED FIELDS:", "=============="])
        for index, field in enumerate(fields, start=1):
            lines.append(f"{index}. {field.label}: {field.value or ''}")
            lines.append(f"   Position: ({field.position.x:g}, {field.position.y:g}), Page: {field.page}")
            lines.append("")

    if signature_requests:
        lines.extend(["SIGNATURES APPLIED:", "==================="])
        for index, request in enumerate(signature_requests, start=1):
            datum = by_id.get(request.metadata.get("signatureId", ""))
            if datum is None:
                lines.append(f"{index}. Signature ({request.metadata.get('source', 'default')})")
            else:
                lines.append(f"{index}. {datum.name} ({datum.type.value})")
            lines.append(f"   Position: ({request.x:g}, {request.y:g}), Page: {request.page}")
            if datum is not None:
                if datum.type is SignatureType.TYPED:
                    lines.append(f"   Signature Text: {datum.data}")
                else:
                    lines.append(f"   Signature Data: {datum.data[:50]}...")
            lines.append(f"   Stroke Points: {len(request.points)}")
            lines.append("")

    lines.extend([
        "",
        "DOCUMENT PROCESSING COMPLETE",
        "This summary contains all the information that would be filled in the document.",
    ])
    return "\n".join(lines)


class SignedDocumentStore:
    """Writes signed documents and fallback summaries to an output directory."""

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)

    def save_signed(self, original_path: Union[str, Path], content: bytes) -> str:
        """Persist a signed document and return its file:// URI."""
        original = Path(original_path)
        target = self._target(f"{original.stem}_signed{original.suffix}")
        target.write_bytes(content)
        logger.info(f"Signed document saved to {target}")
        return target.resolve().as_uri()

    def save_text_summary(self, original_path: Union[str, Path], summary: str) -> str:
        """Persist a plain-text fallback document and return its file:// URI."""
        original = Path(original_path)
        target = self._target(f"{original.stem}_filled_summary.txt")
        target.write_text(summary, encoding="utf-8")
        logger.info(f"Fallback summary saved to {target}")
        return target.resolve().as_uri()

    def _target(self, name: str) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir / name
