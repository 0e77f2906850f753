"""Tests for the HuggingFace hosted inference provider."""

import json

import httpx
import pytest

from src.infrastructure.llm import (
    HuggingFaceProvider,
    LLMAuthenticationError,
    LLMModelNotFoundError,
    LLMProviderError,
    LLMResponseFormatError,
    LLMUnavailableError,
    ModelId,
)
from src.infrastructure.llm.huggingface import normalize_generated_text

PRIMARY = "https://api-inference.huggingface.co"
MIRROR = "https://router.huggingface.co"


def _loading() -> httpx.Response:
    return httpx.Response(
        503,
        json={"error": "Model is currently loading", "estimated_time": 20.0},
    )


class ScriptedHandler:
    """Answers each host from its own queue of responses."""

    def __init__(self, script: dict[str, list[httpx.Response]]) -> None:
        self._script = script
        self.calls: list[str] = []
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        base = f"{request.url.scheme}://{request.url.host}"
        self.calls.append(base)
        self.requests.append(request)
        return self._script[base].pop(0)


def _provider(handler: ScriptedHandler, **kwargs) -> HuggingFaceProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    kwargs.setdefault("loading_retry_delay", 0)
    return HuggingFaceProvider("hf_test", client=client, **kwargs)


class TestHuggingFaceColdStart:
    """Model loading retries and the mirror endpoint."""

    async def test_loading_twice_then_success(self):
        handler = ScriptedHandler(
            {
                PRIMARY: [
                    _loading(),
                    _loading(),
                    httpx.Response(200, json=[{"generated_text": "# Contract"}]),
                ]
            }
        )

        result = await _provider(handler).generate("Draft", model=ModelId.HUGGINGFACE)

        assert result == "# Contract"
        assert handler.calls == [PRIMARY, PRIMARY, PRIMARY]

    async def test_waits_between_loading_retries(self, monkeypatch):
        delays: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            delays.append(seconds)

        monkeypatch.setattr(
            "src.infrastructure.llm.huggingface.asyncio.sleep", fake_sleep
        )
        handler = ScriptedHandler(
            {PRIMARY: [_loading(), httpx.Response(200, json={"generated_text": "ok"})]}
        )

        await _provider(handler, loading_retry_delay=5.0).generate(
            "Draft", model=ModelId.HUGGINGFACE
        )

        assert delays == [5.0]

    async def test_moves_to_mirror_after_loading_retries_exhausted(self):
        handler = ScriptedHandler(
            {
                PRIMARY: [_loading(), _loading(), _loading()],
                MIRROR: [httpx.Response(200, json={"generated_text": "from mirror"})],
            }
        )

        result = await _provider(handler).generate("Draft", model=ModelId.HUGGINGFACE)

        assert result == "from mirror"
        assert handler.calls == [PRIMARY, PRIMARY, PRIMARY, MIRROR]

    async def test_both_endpoints_loading_raises_unavailable(self):
        handler = ScriptedHandler(
            {PRIMARY: [_loading()], MIRROR: [_loading()]}
        )

        with pytest.raises(LLMUnavailableError):
            await _provider(handler, max_loading_retries=0).generate(
                "Draft", model=ModelId.HUGGINGFACE
            )

        assert handler.calls == [PRIMARY, MIRROR]

    async def test_not_found_fails_fast_with_default_model_hint(self):
        handler = ScriptedHandler(
            {PRIMARY: [httpx.Response(404, json={"error": "Model not found"})]}
        )

        with pytest.raises(LLMModelNotFoundError) as exc_info:
            await _provider(handler, model_name="nobody/missing").generate(
                "Draft", model=ModelId.HUGGINGFACE
            )

        assert "mistralai/Mistral-7B-Instruct-v0.2" in str(exc_info.value)
        assert handler.calls == [PRIMARY]

    async def test_invalid_token_fails_fast(self):
        handler = ScriptedHandler(
            {PRIMARY: [httpx.Response(401, json={"error": "Invalid credentials"})]}
        )

        with pytest.raises(LLMAuthenticationError):
            await _provider(handler).generate("Draft", model=ModelId.HUGGINGFACE)

        assert handler.calls == [PRIMARY]


class TestHuggingFaceRequest:
    async def test_request_shape(self):
        handler = ScriptedHandler(
            {PRIMARY: [httpx.Response(200, json={"generated_text": "ok"})]}
        )

        await _provider(handler, system_prompt="Be formal.").generate(
            "Draft", model=ModelId.HUGGINGFACE
        )

        request = handler.requests[0]
        assert request.url.path == "/models/mistralai/Mistral-7B-Instruct-v0.2"
        assert request.headers["authorization"] == "Bearer hf_test"
        body = json.loads(request.content)
        assert body["inputs"] == "Be formal.\n\nDraft"
        assert body["parameters"]["return_full_text"] is False

    async def test_model_name_override(self):
        handler = ScriptedHandler(
            {PRIMARY: [httpx.Response(200, json={"generated_text": "ok"})]}
        )

        await _provider(handler, model_name="google/flan-t5-large").generate(
            "Draft", model=ModelId.HUGGINGFACE
        )

        assert handler.requests[0].url.path == "/models/google/flan-t5-large"


class TestNormalizeGeneratedText:
    """Every known payload shape becomes one string."""

    @pytest.mark.parametrize(
        "payload",
        [
            [{"generated_text": "doc"}],
            {"generated_text": "doc"},
            {"summary_text": "doc"},
            {"text": "doc"},
            "doc",
        ],
    )
    def test_known_shapes(self, payload):
        assert normalize_generated_text(payload) == "doc"

    def test_loading_error_payload_is_unavailable(self):
        with pytest.raises(LLMUnavailableError):
            normalize_generated_text({"error": "Model x is currently loading"})

    def test_error_payload_is_provider_error(self):
        with pytest.raises(LLMProviderError) as exc_info:
            normalize_generated_text({"error": "Input too long"})

        assert "Input too long" in str(exc_info.value)

    @pytest.mark.parametrize("payload", [[], {"foo": "bar"}, 42, None])
    def test_unknown_shapes_are_format_errors(self, payload):
        with pytest.raises(LLMResponseFormatError):
            normalize_generated_text(payload)
