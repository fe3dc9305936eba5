"""HTTP client for the remote signing backend."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence

import requests

from ..interfaces.backend import ISigningBackend
from ..models.enums import FileType
from ..models.signature import SignatureRequest
from ..reconciliation.signature_builder import serialize_requests


logger = logging.getLogger(__name__)


@dataclass
class BackendError(Exception):
    """
    Raised when the signing backend answers with a non-2xx status.

    Attributes:
        status_code: HTTP status returned by the backend.
        message: The ``error`` field of a JSON body, or the plain-text body.
        details: The ``details`` field of a JSON body, if any.
        body: Raw response body text.
    """
    status_code: int
    message: str
    details: Optional[Any] = None
    body: str = ""

    def __post_init__(self):
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"Signing backend error {self.status_code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "status_code": self.status_code,
            "message": self.message,
            "details": self.details,
        }


class SigningBackendClient(ISigningBackend):
    """
    Client for ``POST {backend_url}/api/add-signature``.

    The document goes up as the multipart field ``document`` under its
    original filename; the requests go up as the JSON field
    ``signatures``. A 200 response body is the signed document.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def add_signatures(
        self,
        document_path: str,
        signature_requests: Sequence[SignatureRequest],
    ) -> bytes:
        """
        Send a document and its signature requests to the backend.

        Raises:
            ValueError: If no signature request is given.
            BackendError: If the backend rejects the request.
            requests.RequestException: On transport failure.
        """
        if not signature_requests:
            raise ValueError("At least one signature request is required")

        path = Path(document_path)
        url = f"{self.base_url}/api/add-signature"
        logger.info(f"Sending {path.name} with {len(signature_requests)} signature request(s) to {url}")

        with open(path, "rb") as document:
            response = self._session.post(
                url,
                files={"document": (path.name, document, _mime_type(path))},
                data={"signatures": serialize_requests(signature_requests)},
                timeout=self.timeout,
            )

        if response.status_code != 200:
            raise _backend_error(response)

        logger.info(f"Signed document received ({len(response.content)} bytes)")
        return response.content

    def close(self) -> None:
        self._session.close()


def _mime_type(path: Path) -> str:
    suffix = path.suffix.lower().lstrip(".")
    for file_type in FileType:
        if file_type.value == suffix:
            return file_type.mime_type
    return "application/octet-stream"


def _backend_error(response: requests.Response) -> BackendError:
    body = response.text or ""
    message = body.strip() or f"HTTP {response.status_code}"
    details = None
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("error"):
        message = str(payload["error"])
        details = payload.get("details")
    return BackendError(
        status_code=response.status_code,
        message=message,
        details=details,
        body=body,
    )
