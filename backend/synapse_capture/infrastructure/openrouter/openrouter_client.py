"""OpenRouter chat adapter: implements the ChatProvider port.

Only non-streaming completions are needed: the classifier sends one short
prompt and parses a JSON answer.
"""

import logging

import httpx

from synapse_capture.application.interfaces import ChatProvider
from synapse_capture.domain.entities import ChatCompletionResult, ChatMessage, TokenUsage
from synapse_capture.domain.exceptions import ChatProviderError
from synapse_capture.infrastructure.openrouter.http_base import (
    DEFAULT_APP_NAME,
    DEFAULT_BASE_URL,
    OpenRouterHTTP,
)

logger = logging.getLogger(__name__)


class OpenRouterClient(OpenRouterHTTP, ChatProvider):
    """Chat completions via ``POST /chat/completions``."""

    provider_name = "openrouter"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        app_name: str = DEFAULT_APP_NAME,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        super().__init__(api_key, base_url, app_name, http_client, timeout)

    async def complete(
        self,
        messages: list[ChatMessage],
        model: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ChatCompletionResult:
        payload: dict = {
            "model": model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        data = await self._post("chat/completions", payload, self._error)
        return self._parse_completion(data)

    def _error(self, status_code: int, message: str) -> ChatProviderError:
        return ChatProviderError(provider=self.provider_name, status_code=status_code, message=message)

    def _parse_completion(self, data: dict) -> ChatCompletionResult:
        # OpenRouter may report upstream failures inside a 200 response
        if "error" in data:
            error = data["error"] or {}
            raise self._error(error.get("code", 500), error.get("message", "Unknown error"))

        choices = data.get("choices") or []
        if not choices:
            raise self._error(500, "No choices in response")

        choice = choices[0]
        usage = data.get("usage") or {}
        result = ChatCompletionResult(
            model=data.get("model", ""),
            content=(choice.get("message") or {}).get("content") or "",
            finish_reason=choice.get("finish_reason") or "stop",
            usage=TokenUsage(
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0),
                cost=usage.get("cost"),
            ),
            provider=self.provider_name,
        )
        logger.debug(
            "Completion from %s: %d tokens, finish=%s",
            result.model,
            result.usage.total_tokens,
            result.finish_reason,
        )
        return result
