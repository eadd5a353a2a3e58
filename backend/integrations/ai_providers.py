"""
AI provider adapters: Gemini and DeepSeek over httpx.

Both providers receive the same prompt layout: the context rendered as
indented JSON, a blank line, then the instruction. Every failure
(missing key, transport error, non-200 response, malformed body) surfaces
as ``AIProviderError``; callers decide whether that fails a workflow step
or an agent run.
"""

import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import httpx
import structlog

from app.config import Settings, get_settings
from core.constants import ModelProvider
from core.exceptions import AIProviderError

logger = structlog.get_logger(__name__)


def build_prompt(prompt: str, context: Any = None) -> str:
    """Render ``context`` as indented JSON followed by a blank line and ``prompt``."""
    if context is None:
        context = {}
    return f"{json.dumps(context, indent=2, ensure_ascii=False, default=str)}\n\n{prompt}"


@dataclass
class Generation:
    """Text returned by a provider plus the usage figures it reported."""

    text: str
    input_tokens: int = 0
    output_tokens: int = 0
    duration_ms: int = 0


class AIProvider(ABC):
    """Base class for one LLM provider.

    Subclasses build the request body and parse the response; the HTTP
    client lifecycle lives here.
    """

    name: str = ""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    @abstractmethod
    def base_url(self) -> str: ...

    @property
    @abstractmethod
    def api_key(self) -> str: ...

    def _headers(self) -> dict:
        return {"content-type": "application/json"}

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers(),
                timeout=httpx.Timeout(float(self.settings.AI_TIMEOUT), connect=10.0),
                transport=self._transport,
            )
        return self._client

    @abstractmethod
    async def _request(self, client: httpx.AsyncClient, full_prompt: str) -> httpx.Response: ...

    @abstractmethod
    def _parse(self, data: dict) -> Generation: ...

    async def generate_with_usage(self, prompt: str, context: Any = None) -> Generation:
        """Call the provider and return text with token usage."""
        if not self.api_key:
            raise AIProviderError(self.name, "API key not configured")

        full_prompt = build_prompt(prompt, context)
        start_time = time.monotonic()
        try:
            response = await self._request(self._get_client(), full_prompt)
        except httpx.TimeoutException:
            logger.warning("AI request timeout", provider=self.name)
            raise AIProviderError(self.name, "Request timed out")
        except httpx.HTTPError as e:
            logger.error("AI request failed", provider=self.name, error=str(e))
            raise AIProviderError(self.name, f"Request failed: {e}")

        duration_ms = int((time.monotonic() - start_time) * 1000)

        if response.status_code != 200:
            body = response.text
            logger.error(
                "AI API error",
                provider=self.name,
                status=response.status_code,
                body=body[:500],
            )
            raise AIProviderError(
                self.name, f"API error {response.status_code}: {body[:200]}"
            )

        try:
            generation = self._parse(response.json())
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise AIProviderError(self.name, f"Malformed response: {e}")

        generation.duration_ms = duration_ms
        logger.info(
            "AI generation completed",
            provider=self.name,
            duration_ms=duration_ms,
            output_tokens=generation.output_tokens,
        )
        return generation

    async def generate(self, prompt: str, context: Any = None) -> str:
        """Call the provider and return only the generated text."""
        generation = await self.generate_with_usage(prompt, context)
        return generation.text

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class GeminiProvider(AIProvider):
    """Google Gemini ``generateContent`` endpoint."""

    name = ModelProvider.GEMINI.value

    @property
    def base_url(self) -> str:
        return self.settings.GEMINI_BASE_URL

    @property
    def api_key(self) -> str:
        return self.settings.GOOGLE_GEMINI_API_KEY

    async def _request(self, client: httpx.AsyncClient, full_prompt: str) -> httpx.Response:
        return await client.post(
            f"/models/{self.settings.GEMINI_MODEL}:generateContent",
            params={"key": self.api_key},
            json={"contents": [{"parts": [{"text": full_prompt}]}]},
        )

    def _parse(self, data: dict) -> Generation:
        candidates = data.get("candidates") or []
        if not candidates:
            raise ValueError("response has no candidates")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        usage = data.get("usageMetadata") or {}
        return Generation(
            text="".join(part.get("text", "") for part in parts),
            input_tokens=usage.get("promptTokenCount", 0),
            output_tokens=usage.get("candidatesTokenCount", 0),
        )


class DeepSeekProvider(AIProvider):
    """DeepSeek's OpenAI-compatible chat completions endpoint."""

    name = ModelProvider.DEEPSEEK.value

    @property
    def base_url(self) -> str:
        return self.settings.DEEPSEEK_BASE_URL

    @property
    def api_key(self) -> str:
        return self.settings.DEEPSEEK_API_KEY

    def _headers(self) -> dict:
        headers = super()._headers()
        headers["authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _request(self, client: httpx.AsyncClient, full_prompt: str) -> httpx.Response:
        return await client.post(
            "/chat/completions",
            json={
                "model": self.settings.DEEPSEEK_MODEL,
                "messages": [
                    {"role": "system", "content": self.settings.DEEPSEEK_SYSTEM_PROMPT},
                    {"role": "user", "content": full_prompt},
                ],
                "temperature": self.settings.DEEPSEEK_TEMPERATURE,
                "max_tokens": self.settings.DEEPSEEK_MAX_TOKENS,
            },
        )

    def _parse(self, data: dict) -> Generation:
        choices = data.get("choices") or []
        content = ""
        if choices:
            content = ((choices[0] or {}).get("message") or {}).get("content") or ""
        usage = data.get("usage") or {}
        return Generation(
            text=content,
            input_tokens=usage.get("prompt_tokens", 0),
            output_tokens=usage.get("completion_tokens", 0),
        )


class AIProviderRegistry:
    """Maps provider names to adapters."""

    def __init__(self, providers: Optional[dict[str, AIProvider]] = None):
        self._providers: dict[str, AIProvider] = dict(providers or {})

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AIProviderRegistry":
        settings = settings or get_settings()
        return cls({
            ModelProvider.GEMINI.value: GeminiProvider(settings, transport),
            ModelProvider.DEEPSEEK.value: DeepSeekProvider(settings, transport),
        })

    def get(self, name: str) -> Optional[AIProvider]:
        """Adapter registered under ``name``, or None when unknown."""
        return self._providers.get(name)

    @property
    def names(self) -> list[str]:
        return sorted(self._providers)

    async def generate(self, provider_name: str, prompt: str, context: Any = None) -> str:
        """Generate with the named provider.

        Raises:
            AIProviderError: If the provider is unknown or the call fails
        """
        provider = self.get(provider_name)
        if provider is None:
            raise AIProviderError(provider_name, "Unsupported model provider")
        return await provider.generate(prompt, context)

    async def close(self) -> None:
        """Release every provider's HTTP client."""
        for provider in self._providers.values():
            await provider.close()


# ─── Global Instance ───────────────────────────────────────────

_registry: Optional[AIProviderRegistry] = None


def get_ai_registry() -> AIProviderRegistry:
    """Get the process-wide provider registry."""
    global _registry
    if _registry is None:
        _registry = AIProviderRegistry.from_settings()
    return _registry


async def close_ai_registry() -> None:
    global _registry
    if _registry is not None:
        await _registry.close()
        _registry = None
