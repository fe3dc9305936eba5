"""Analysis provider backed by a locally hosted language model."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import requests

from ..config.models import LocalProviderConfig
from ..interfaces.provider import IAnalysisProvider
from ..models.enums import FileType
from .cancellation import CancellationToken
from .exceptions import ProviderError, ProviderTimeoutError
from .prompts import (
    CONNECTION_TEST_PROMPT,
    build_system_prompt,
    build_user_prompt,
    excerpt,
)
from .response_recovery import recover


logger = logging.getLogger(__name__)

DEFAULT_ANALYSIS_TIMEOUT = 60.0
DEFAULT_INTERACTIVE_TIMEOUT = 15.0
DEFAULT_CONNECT_TIMEOUT = 5.0

CONNECTION_TEST_REPLY = "Connection successful"


@dataclass
class ConnectionCheck:
    """Result of probing the model endpoint."""
    success: bool
    message: str
    response_time: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "responseTime": self.response_time,
        }


class LocalLLMProvider(IAnalysisProvider):
    """
    Provider that asks an Ollama-style endpoint for a JSON analysis.

    Two request styles are supported: the native ``/api/generate`` call
    and the OpenAI-compatible ``/v1/chat/completions`` call. Only the
    first ``excerpt_chars`` characters of a document are sent.

    Every call runs under a CancellationToken. When its deadline passes
    the token closes the session, aborting the open connection, and the
    call raises ProviderTimeoutError.
    """

    name = "local"

    def __init__(
        self,
        config: LocalProviderConfig,
        session_factory: Callable[[], requests.Session] = requests.Session,
        analysis_timeout: float = DEFAULT_ANALYSIS_TIMEOUT,
        interactive_timeout: float = DEFAULT_INTERACTIVE_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ):
        self.config = config
        self._session_factory = session_factory
        self.analysis_timeout = analysis_timeout
        self.interactive_timeout = interactive_timeout
        self.connect_timeout = connect_timeout

    @property
    def endpoint(self) -> str:
        return self.config.endpoint.rstrip("/")

    def analyze_content(
        self,
        content: str,
        file_type: FileType,
        token: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """
        Analyze document text with the language model.

        Args:
            content: Plain text of the document.
            file_type: Format of the source document.
            token: Cancellation token; a fresh one with the analysis
                budget is created when omitted.

        Returns:
            Raw analysis payload recovered from the model reply.

        Raises:
            ProviderTimeoutError: If the deadline passes.
            ProviderError: On HTTP errors, malformed envelopes or a reply
                that holds no analysis at all.
        """
        token = token or CancellationToken(self.analysis_timeout)
        document_excerpt = excerpt(content, self.config.excerpt_chars)
        logger.info(
            f"Requesting {self.config.api_style} analysis from {self.endpoint} "
            f"({len(document_excerpt)} of {len(content or '')} characters)"
        )

        path, body = self._build_request(
            build_system_prompt(document_excerpt),
            build_user_prompt(document_excerpt, file_type),
            self.config.max_tokens,
        )
        data = self._post(path, body, token)
        text = self._response_text(data)
        logger.info(f"Model reply received, length: {len(text)}")

        result = recover(text)
        if result.partial:
            if not result.has_analysis_markers:
                raise ProviderError(
                    message=f"Unusable response from local LLM: {result.failure}",
                    provider=self.name,
                    details={"preview": text[:300]},
                )
            logger.warning(f"Using partial analysis from malformed reply: {result.failure}")
        return result.payload

    def test_connection(self, token: Optional[CancellationToken] = None) -> ConnectionCheck:
        """
        Check that the endpoint is up and the model answers.

        Never raises; failures are reported in the returned check.
        """
        token = token or CancellationToken(self.interactive_timeout)
        started = time.monotonic()
        try:
            self._health_check(token)
            path, body = self._build_request(None, CONNECTION_TEST_PROMPT, 32)
            reply = self._response_text(self._post(path, body, token))
        except ProviderError as e:
            logger.warning(f"Local LLM connection test failed: {e}")
            return ConnectionCheck(False, e.message, time.monotonic() - started)

        elapsed = time.monotonic() - started
        if CONNECTION_TEST_REPLY.lower() not in reply.lower():
            return ConnectionCheck(False, f"Unexpected reply: {reply[:100]}", elapsed)
        return ConnectionCheck(True, f"Connected to {self.config.model} at {self.endpoint}", elapsed)

    def _health_check(self, token: CancellationToken) -> None:
        path = "/api/tags" if self.config.api_style == "generate" else "/v1/models"
        response = self._send("get", path, None, token)
        if response.status_code != 200:
            raise ProviderError(
                message=f"Health check failed with status {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
            )

    def _build_request(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        max_tokens: int,
    ) -> Tuple[str, Dict[str, Any]]:
        if self.config.api_style == "chat":
            messages = []
            if system_prompt:
                messages.append({"role": "system", "content": system_prompt})
            messages.append({"role": "user", "content": user_prompt})
            return "/v1/chat/completions", {
                "model": self.config.model,
                "messages": messages,
                "stream": False,
                "temperature": 0.0,
                "top_p": 0.9,
                "max_tokens": max_tokens,
            }

        prompt = f"{system_prompt}\n\n{user_prompt}" if system_prompt else user_prompt
        return "/api/generate", {
            "model": self.config.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": 0.0,
                "top_p": 0.9,
                "num_predict": max_tokens,
            },
        }

    def _post(self, path: str, body: Dict[str, Any], token: CancellationToken) -> Any:
        response = self._send("post", path, body, token)
        if not 200 <= response.status_code < 300:
            raise ProviderError(
                message=f"Local LLM API error: {response.status_code} - {response.text[:500]}",
                provider=self.name,
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                message="Response body is not JSON",
                provider=self.name,
                status_code=response.status_code,
                details={"original_error": str(e)},
            ) from e

    def _send(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]],
        token: CancellationToken,
    ) -> requests.Response:
        """Issue one request bounded by the token's remaining budget."""
        if token.expired:
            raise self._timeout_error(token)

        url = f"{self.endpoint}{path}"
        session = self._session_factory()
        token.on_cancel(session.close)
        try:
            with token:
                remaining = token.remaining()
                timeout = (min(self.connect_timeout, remaining), remaining)
                if method == "post":
                    response = session.post(url, json=body, timeout=timeout)
                else:
                    response = session.get(url, timeout=timeout)
        except requests.Timeout as e:
            raise self._timeout_error(token) from e
        except requests.RequestException as e:
            if token.expired:
                raise self._timeout_error(token) from e
            raise ProviderError(
                message=f"Request to {url} failed: {e}",
                provider=self.name,
                details={"original_error": str(e)},
            ) from e
        finally:
            session.close()

        if token.expired:
            raise self._timeout_error(token)
        return response

    def _response_text(self, data: Any) -> str:
        """Pull the reply text out of a generate or chat envelope."""
        if isinstance(data, dict):
            if isinstance(data.get("response"), str):
                return data["response"]
            choices = data.get("choices")
            if isinstance(choices, list) and choices and isinstance(choices[0], dict):
                message = choices[0].get("message")
                if isinstance(message, dict) and isinstance(message.get("content"), str):
                    return message["content"]
        raise ProviderError(
            message="Invalid response structure from local LLM",
            provider=self.name,
            details={"keys": sorted(data) if isinstance(data, dict) else type(data).__name__},
        )

    def _timeout_error(self, token: CancellationToken) -> ProviderTimeoutError:
        return ProviderTimeoutError(
            message=f"Local LLM request timed out after {token.timeout:.0f}s",
            provider=self.name,
            timeout=token.timeout,
        )
