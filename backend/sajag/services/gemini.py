"""
Gemini generateContent API client.

WHAT THIS DOES:
Sends one request to Google's generative-language endpoint and hands back
the decoded JSON body. Retries and interpretation happen elsewhere.

HOW IT WORKS:
1. POST {base_url}/{endpoint_path} with the serialized request body
2. Non-2xx status → RemoteEndpointError(HTTP_STATUS), body ignored
3. Connection failure / timeout → RemoteEndpointError(TRANSPORT)
4. Undecodable body, or 2xx but not JSON → RemoteEndpointError(MALFORMED_RESPONSE)
5. Otherwise return the decoded body for the ResponseInterpreter

Retrying is the runner's job (see runner.py). Keeping this client dumb means
every failure is classified in exactly one place.

USAGE:
    client = GeminiClient()
    body = await client.send(request)
    # {"candidates": [{"content": {"parts": [{"text": "..."}]}}], ...}
"""

import logging
from typing import Any, Optional

import httpx

from sajag.config import Settings, get_settings
from sajag.models.outcomes import Failure, FailureReason
from sajag.models.schemas import OperationRequest

logger = logging.getLogger(__name__)


class RemoteEndpointError(Exception):
    """Raised when a single call to the endpoint fails."""

    def __init__(self, failure: Failure):
        self.failure = failure
        super().__init__(failure.describe())


class GeminiClient:
    """
    Async client for the Gemini generateContent endpoint.

    One httpx.AsyncClient is reused for every call. It is created lazily,
    unless one is passed in (tests pass one backed by httpx.MockTransport).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        settings = settings or get_settings()
        self.base_url = settings.gemini_base_url.rstrip("/")
        self.api_key = settings.gemini_api_key or None
        self.timeout = settings.request_timeout

        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _build_params(self) -> dict:
        """Query params, adding the API key if we have one."""
        if self.api_key:
            return {"key": self.api_key}
        return {}

    async def send(self, request: OperationRequest) -> dict[str, Any]:
        """
        Send one request and return the decoded JSON body.

        Args:
            request: The operation request (path + body)

        Returns:
            Decoded response body

        Raises:
            RemoteEndpointError: carrying a classified Failure
        """
        client = await self._get_client()
        url = f"{self.base_url}/{request.endpoint_path.lstrip('/')}"

        try:
            response = await client.post(
                url,
                params=self._build_params(),
                content=request.body_json,
                headers={"Content-Type": "application/json"},
            )
        except httpx.DecodingError as e:
            # Raised while reading the body, before the status is looked at
            logger.error(f"Gemini response body could not be decoded: {e}")
            raise RemoteEndpointError(
                Failure(FailureReason.MALFORMED_RESPONSE, detail="body could not be decoded")
            ) from e
        except httpx.RequestError as e:
            logger.warning(f"Gemini request failed in transport: {e!r}")
            raise RemoteEndpointError(
                Failure(FailureReason.TRANSPORT, detail=type(e).__name__)
            ) from e

        if not response.is_success:
            logger.warning(
                f"Gemini request rejected: {response.status_code} {response.reason_phrase}"
            )
            raise RemoteEndpointError(
                Failure(FailureReason.HTTP_STATUS, status_code=response.status_code)
            )

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Gemini returned a non-JSON body ({len(response.content)} bytes)")
            raise RemoteEndpointError(
                Failure(FailureReason.MALFORMED_RESPONSE, detail="body is not JSON")
            ) from e

    async def close(self):
        """Close the HTTP client (call when done). Injected clients are left open."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None
