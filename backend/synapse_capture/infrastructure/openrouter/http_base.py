"""Shared HTTP plumbing for the OpenRouter adapters."""

import logging
from collections.abc import Callable
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_APP_NAME = "Synapse Capture"


class OpenRouterHTTP:
    """Auth headers, client lifecycle and transport-error mapping.

    An injected ``http_client`` is reused across calls and owned by the
    caller; otherwise a short-lived client is opened per request.
    """

    provider_name = "openrouter"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        app_name: str = DEFAULT_APP_NAME,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._app_name = app_name
        self._http_client = http_client
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "X-Title": self._app_name,
        }

    async def _post(
        self,
        path: str,
        payload: dict[str, Any],
        error: Callable[[int, str], Exception],
    ) -> dict[str, Any]:
        """POST ``payload`` and return the decoded JSON body.

        ``error(status_code, message)`` builds the exception raised for
        transport failures (status 503), non-200 answers and non-JSON bodies.
        """
        url = f"{self._base_url}/{path.lstrip('/')}"
        client = self._http_client or httpx.AsyncClient(timeout=self._timeout)
        try:
            try:
                response = await client.post(url, headers=self._headers(), json=payload)
            except httpx.HTTPError as e:
                logger.warning("OpenRouter %s request failed: %s", path, e)
                raise error(503, str(e) or type(e).__name__) from e

            if response.status_code != 200:
                message = _error_message(response)
                logger.warning(
                    "OpenRouter %s error %d: %s", path, response.status_code, message[:200]
                )
                raise error(response.status_code, message)

            try:
                body = response.json()
            except ValueError as e:
                raise error(502, f"Invalid JSON from {path}: {response.text[:200]}") from e
            if not isinstance(body, dict):
                raise error(502, f"Unexpected {type(body).__name__} body from {path}")
            return body
        finally:
            if self._http_client is None:
                await client.aclose()


def _error_message(response: httpx.Response) -> str:
    """Best-effort error text: ``{"error": {"message": ...}}`` or the raw body."""
    try:
        error = response.json().get("error") or {}
    except (ValueError, AttributeError):
        return response.text[:500]
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.text[:500]
