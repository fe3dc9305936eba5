"""Signing backend interface for the document signing pipeline."""

from abc import ABC, abstractmethod
from typing import Sequence

from ..models.signature import SignatureRequest


class ISigningBackend(ABC):
    """
    Abstract interface for the remote service that stamps signatures
    into a document.
    """

    @abstractmethod
    def add_signatures(
        self,
        document_path: str,
        signature_requests: Sequence[SignatureRequest],
    ) -> bytes:
        """
        Send a document and its signature requests to the backend.

        Args:
            document_path: Path to the original document.
            signature_requests: Non-empty sequence of signature requests.

        Returns:
            The bytes of the signed document.

        Raises:
            BackendError: If the backend rejects the request.
            requests.RequestException: On transport failure.
        """
        pass
