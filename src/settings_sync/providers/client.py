"""
HTTP client for the model-listing surface of OpenAI-compatible local servers
(LM Studio and friends).

Only ``GET {base_url}/v1/models`` is used; inference itself is out of scope.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from settings_sync.providers.exceptions import (
    ProviderMalformedResponseError,
    ProviderUnreachableError,
)
from settings_sync.utils.logging import get_logger

logger = get_logger("providers.client")

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_CONNECTION_TEST_TIMEOUT = 5.0

# Raised while building the request for a malformed base URL.
_URL_ERRORS = (httpx.InvalidURL, ValueError)
_REQUEST_ERRORS = (httpx.HTTPError, *_URL_ERRORS)


class ModelEntry(BaseModel):
    """One entry of the ``data`` array returned by ``/v1/models``."""

    model_config = ConfigDict(extra="allow")

    id: str
    object: str = "model"
    owned_by: str | None = None


class ModelListResponse(BaseModel):
    """Body of ``GET /v1/models``."""

    model_config = ConfigDict(extra="allow")

    object: str = "list"
    data: list[ModelEntry]


class ProviderHealth(BaseModel):
    """Diagnostic snapshot of a provider endpoint."""

    url: str
    reachable: bool = False
    status_code: int | None = None
    response_time_ms: float | None = Field(default=None, ge=0)
    api_object: str | None = Field(
        default=None, description="The top-level ``object`` tag of the response"
    )
    model_count: int = 0
    content_type: str | None = None
    error: str | None = None


def models_url(base_url: str) -> str:
    """Compose the model-listing URL, tolerating a trailing slash."""
    return f"{base_url.rstrip('/')}/v1/models"


class ModelListingClient:
    """Talks to the model-listing endpoint with bounded timeouts."""

    def __init__(
        self,
        *,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        connection_test_timeout: float = DEFAULT_CONNECTION_TEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.request_timeout = request_timeout
        self.connection_test_timeout = connection_test_timeout
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )

    async def fetch_models(self, base_url: str) -> list[str]:
        """Fetch available model identifiers in response order.

        Args:
            base_url: Server root, e.g. ``http://localhost:1234``

        Returns:
            Model ids; entries with an empty id are dropped

        Raises:
            ProviderUnreachableError: Network error, timeout or non-success status
            ProviderMalformedResponseError: Body is not the expected model list
        """
        url = models_url(base_url)
        logger.info(f"Fetching models from {url}")

        try:
            async with self._client(self.request_timeout) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as err:
            status = err.response.status_code
            reason = err.response.reason_phrase or "Unknown error"
            error_msg = f"Server at {url} returned status {status}: {reason}"
            logger.error(error_msg)
            raise ProviderUnreachableError(
                error_msg, url=url, status_code=status
            ) from err
        except httpx.TimeoutException as err:
            error_msg = f"Timed out after {self.request_timeout}s connecting to {url}"
            logger.error(error_msg)
            raise ProviderUnreachableError(error_msg, url=url) from err
        except httpx.HTTPError as err:
            error_msg = f"Failed to connect to {url}: {err!s}"
            logger.error(error_msg)
            raise ProviderUnreachableError(error_msg, url=url) from err
        except _URL_ERRORS as err:
            error_msg = f"Invalid provider URL {url}: {err!s}"
            logger.error(error_msg)
            raise ProviderUnreachableError(error_msg, url=url) from err

        logger.debug("Model list response: %s", response.text)
        models = self._parse_models(response, url)
        logger.info(f"Successfully parsed {len(models)} models")
        return models

    def _parse_models(self, response: httpx.Response, url: str) -> list[str]:
        try:
            payload: Any = response.json()
        except ValueError as err:
            error_msg = f"Response from {url} is not valid JSON: {err!s}"
            logger.error(error_msg)
            raise ProviderMalformedResponseError(error_msg, url=url) from err

        try:
            parsed = ModelListResponse.model_validate(payload)
        except ValidationError as err:
            error_msg = (
                f"Response from {url} is missing the model list: "
                f"{err.error_count()} validation error(s)"
            )
            logger.error(f"{error_msg}. Response was: {response.text}")
            raise ProviderMalformedResponseError(error_msg, url=url) from err

        return [entry.id for entry in parsed.data if entry.id]

    async def test_connection(self, base_url: str) -> bool:
        """Check the endpoint; True only for a success status."""
        url = models_url(base_url)
        logger.info(f"Testing connection to {url}")

        try:
            async with self._client(self.connection_test_timeout) as client:
                response = await client.get(url)
        except _REQUEST_ERRORS as err:
            logger.warning(f"Connection test failed: {err!s}")
            return False

        logger.info(
            f"Connection test result: {response.is_success} "
            f"(status: {response.status_code})"
        )
        return response.is_success

    async def check_status(self, base_url: str) -> ProviderHealth:
        """Collect timing and shape diagnostics for the endpoint. Never raises."""
        url = models_url(base_url)
        health = ProviderHealth(url=url)
        started = time.perf_counter()

        try:
            async with self._client(self.connection_test_timeout) as client:
                response = await client.get(url)
        except _REQUEST_ERRORS as err:
            health.error = str(err) or type(err).__name__
            logger.warning(f"Provider at {url} is not accessible: {health.error}")
            return health

        health.response_time_ms = round((time.perf_counter() - started) * 1000, 1)
        health.status_code = response.status_code
        health.content_type = response.headers.get("content-type")
        health.reachable = response.is_success

        if not response.is_success:
            health.error = f"HTTP {response.status_code} {response.reason_phrase}"
            return health

        try:
            payload = response.json()
        except ValueError as err:
            health.error = f"Invalid JSON: {err!s}"
            return health

        if isinstance(payload, dict):
            health.api_object = payload.get("object")
            data = payload.get("data")
            health.model_count = len(data) if isinstance(data, list) else 0
        return health
