"""Tests for the Gemini and DeepSeek adapters over httpx.MockTransport."""

import json

import httpx
import pytest

from app.config import Settings
from core.exceptions import AIProviderError
from integrations.ai_providers import (
    AIProviderRegistry,
    DeepSeekProvider,
    GeminiProvider,
    build_prompt,
)


def _settings(**overrides) -> Settings:
    values = {
        "GOOGLE_GEMINI_API_KEY": "gemini-key",
        "DEEPSEEK_API_KEY": "deepseek-key",
    }
    values.update(overrides)
    return Settings(**values)


class Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, status_code=200, payload=None, exc: Exception = None):
        self.status_code = status_code
        self.payload = payload
        self.exc = exc
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def body(self) -> dict:
        return json.loads(self.requests[-1].content)


GEMINI_OK = {
    "candidates": [{"content": {"parts": [{"text": "Hello "}, {"text": "world"}]}}],
    "usageMetadata": {"promptTokenCount": 12, "candidatesTokenCount": 3},
}

DEEPSEEK_OK = {
    "choices": [{"message": {"role": "assistant", "content": "Bonjour"}}],
    "usage": {"prompt_tokens": 8, "completion_tokens": 2},
}


class TestBuildPrompt:

    def test_context_then_blank_line_then_prompt(self):
        assert build_prompt("Summarise", {"a": 1}) == '{\n  "a": 1\n}\n\nSummarise'

    def test_missing_context_is_empty_object(self):
        assert build_prompt("Go") == "{}\n\nGo"

    def test_text_context(self):
        assert build_prompt("Go", "plain") == '"plain"\n\nGo'

    def test_non_ascii_is_sent_verbatim(self):
        assert build_prompt("p", {"name": "café"}) == '{\n  "name": "café"\n}\n\np'


class TestGemini:

    @pytest.mark.asyncio
    async def test_generate(self):
        recorder = Recorder(payload=GEMINI_OK)
        provider = GeminiProvider(_settings(), httpx.MockTransport(recorder))

        generation = await provider.generate_with_usage("Summarise", {"a": 1})

        assert generation.text == "Hello world"
        assert generation.input_tokens == 12
        assert generation.output_tokens == 3
        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/v1beta/models/gemini-pro:generateContent"
        assert request.url.params["key"] == "gemini-key"
        assert recorder.body == {
            "contents": [{"parts": [{"text": build_prompt("Summarise", {"a": 1})}]}]
        }
        await provider.close()

    @pytest.mark.asyncio
    async def test_missing_key(self):
        recorder = Recorder(payload=GEMINI_OK)
        provider = GeminiProvider(_settings(GOOGLE_GEMINI_API_KEY=""), httpx.MockTransport(recorder))

        with pytest.raises(AIProviderError, match="API key not configured"):
            await provider.generate("x")
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_non_200(self):
        provider = GeminiProvider(
            _settings(), httpx.MockTransport(Recorder(status_code=429, payload={"error": "quota"}))
        )
        with pytest.raises(AIProviderError, match="API error 429"):
            await provider.generate("x")

    @pytest.mark.asyncio
    async def test_transport_error(self):
        provider = GeminiProvider(
            _settings(), httpx.MockTransport(Recorder(exc=httpx.ConnectError("refused")))
        )
        with pytest.raises(AIProviderError, match="Request failed"):
            await provider.generate("x")

    @pytest.mark.asyncio
    async def test_timeout(self):
        provider = GeminiProvider(
            _settings(), httpx.MockTransport(Recorder(exc=httpx.ReadTimeout("slow")))
        )
        with pytest.raises(AIProviderError, match="timed out"):
            await provider.generate("x")

    @pytest.mark.asyncio
    async def test_no_candidates(self):
        provider = GeminiProvider(_settings(), httpx.MockTransport(Recorder(payload={"candidates": []})))
        with pytest.raises(AIProviderError, match="Malformed response"):
            await provider.generate("x")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [["not", "an", "object"], "text"])
    async def test_non_object_body(self, payload):
        provider = GeminiProvider(_settings(), httpx.MockTransport(Recorder(payload=payload)))
        with pytest.raises(AIProviderError, match="Malformed response"):
            await provider.generate("x")


class TestDeepSeek:

    @pytest.mark.asyncio
    async def test_generate(self):
        recorder = Recorder(payload=DEEPSEEK_OK)
        provider = DeepSeekProvider(_settings(), httpx.MockTransport(recorder))

        generation = await provider.generate_with_usage("Translate", ["x"])

        assert generation.text == "Bonjour"
        assert generation.input_tokens == 8
        request = recorder.requests[0]
        assert request.url.path == "/v1/chat/completions"
        assert request.headers["authorization"] == "Bearer deepseek-key"
        body = recorder.body
        assert body["model"] == "deepseek-chat"
        assert body["temperature"] == 0.7
        assert body["max_tokens"] == 2000
        assert body["messages"][0]["role"] == "system"
        assert body["messages"][1] == {"role": "user", "content": build_prompt("Translate", ["x"])}

    @pytest.mark.asyncio
    async def test_empty_choices_is_empty_text(self):
        provider = DeepSeekProvider(_settings(), httpx.MockTransport(Recorder(payload={"choices": []})))
        assert await provider.generate("x") == ""

    @pytest.mark.asyncio
    async def test_list_body_is_malformed(self):
        provider = DeepSeekProvider(_settings(), httpx.MockTransport(Recorder(payload=[{"choices": []}])))
        with pytest.raises(AIProviderError, match="Malformed response") as exc_info:
            await provider.generate("x")
        assert exc_info.value.detail.startswith("Malformed response")

    @pytest.mark.asyncio
    async def test_server_error(self):
        provider = DeepSeekProvider(
            _settings(), httpx.MockTransport(Recorder(status_code=500, payload={"error": "boom"}))
        )
        with pytest.raises(AIProviderError) as exc_info:
            await provider.generate("x")
        assert exc_info.value.provider == "deepseek"


class TestRegistry:

    def test_from_settings_registers_both(self):
        registry = AIProviderRegistry.from_settings(_settings())
        assert registry.names == ["deepseek", "gemini"]
        assert isinstance(registry.get("gemini"), GeminiProvider)
        assert registry.get("openai") is None

    @pytest.mark.asyncio
    async def test_generate_by_name(self):
        transport = httpx.MockTransport(Recorder(payload=DEEPSEEK_OK))
        registry = AIProviderRegistry.from_settings(_settings(), transport)
        assert await registry.generate("deepseek", "x") == "Bonjour"
        await registry.close()

    @pytest.mark.asyncio
    async def test_unknown_provider(self):
        registry = AIProviderRegistry({})
        with pytest.raises(AIProviderError, match="Unsupported model provider"):
            await registry.generate("openai", "x")
