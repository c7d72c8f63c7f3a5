"""
OpenAI-compatible provider.

Supports any endpoint that speaks the OpenAI chat completions API with
server-sent events streaming:
- api.openai.com
- OpenRouter
- llama.cpp server, vLLM, LocalAI
- Ollama (/v1 compatibility layer)
"""

from __future__ import annotations

import json
import logging

import httpx

from supportdesk.errors import ProviderError
from supportdesk.providers.base import BaseProvider

logger = logging.getLogger(__name__)


SSE_DONE = "[DONE]"


def sse_data(line: str) -> str | None:
    """Return the payload of an SSE data: field, or None for any other line."""
    if not line.startswith("data:"):
        return None
    return line[5:].strip()


def delta_text(chunk: dict) -> str:
    """Extract choices[0].delta.content, or "" for role-only / empty deltas."""
    choices = chunk.get("choices") or []
    if not choices:
        return ""
    delta = choices[0].get("delta") or {}
    return delta.get("content") or ""


class OpenAICompatibleProvider(BaseProvider):
    """
    Provider for OpenAI-compatible endpoints.

    Works with any service that implements /v1/chat/completions and /v1/models.
    """

    def __init__(
        self,
        name: str,
        url: str,
        timeout: int = 120,
        api_key: str = "",
    ):
        super().__init__(name, url, timeout)
        self.api_key = api_key

    def _headers(self) -> dict:
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def stream_text(self, messages: list[dict], model: str):
        """Stream a chat completion, yielding the text of each delta."""
        body = {"model": model, "messages": messages, "stream": True}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                async with client.stream(
                    "POST",
                    f"{self.url}/v1/chat/completions",
                    json=body,
                    headers=self._headers(),
                ) as resp:
                    if resp.status_code >= 400:
                        await resp.aread()
                        raise ProviderError(
                            f"HTTP {resp.status_code}: {resp.text[:200]}",
                            status_code=resp.status_code,
                        )
                    async for line in resp.aiter_lines():
                        data_str = sse_data(line)
                        if not data_str:
                            continue
                        if data_str == SSE_DONE:
                            return
                        try:
                            chunk = json.loads(data_str)
                        except json.JSONDecodeError:
                            logger.debug("Skipping malformed SSE line from '%s': %r", self.name, line[:100])
                            continue
                        if "error" in chunk:
                            raise ProviderError(f"Provider error: {chunk['error']}")
                        text = delta_text(chunk)
                        if text:
                            yield text
        except httpx.TimeoutException as e:
            logger.warning("Provider '%s' stream timed out", self.name)
            raise ProviderError(f"Timeout after {self.timeout}s") from e
        except httpx.HTTPError as e:
            logger.warning("Provider '%s' stream failed: %s", self.name, e)
            raise ProviderError(str(e) or e.__class__.__name__) from e

    async def health_check(self) -> bool:
        """Check endpoint is reachable."""
        try:
            async with httpx.AsyncClient(timeout=5) as client:
                resp = await client.get(
                    f"{self.url}/v1/models",
                    headers=self._headers(),
                )
                return resp.status_code == 200
        except httpx.HTTPError:
            return False
