"""Tests for model selection."""

import pytest

from src.infrastructure.llm import (
    MODEL_PROVIDERS,
    ComplexityHint,
    LLMConfigurationError,
    ModelId,
    ModelSelector,
    Provider,
    ProviderCredentials,
    UnknownModelError,
    parse_complexity_hint,
    parse_requested_model,
)


def _selector(*providers: Provider) -> ModelSelector:
    return ModelSelector(ProviderCredentials({p: f"{p.value}-key" for p in providers}))


class TestExplicitSelection:
    @pytest.mark.parametrize("model", list(ModelId))
    def test_explicit_model_returned_unchanged(self, model):
        """Credentials do not matter for an explicit request."""
        assert _selector().select(model) == model
        assert _selector(*Provider).select(model) == model

    def test_hint_ignored_for_explicit_model(self):
        selector = _selector(Provider.ANTHROPIC)

        assert (
            selector.select(ModelId.GPT_4O_MINI, ComplexityHint.COMPLEX)
            == ModelId.GPT_4O_MINI
        )


class TestAutoSelection:
    def test_default_prefers_cheap_tier(self):
        assert _selector(*Provider).select("auto") == ModelId.GPT_4O_MINI

    def test_complex_prefers_highest_quality(self):
        selector = _selector(*Provider)

        assert selector.select("auto", ComplexityHint.COMPLEX) == ModelId.CLAUDE_3_5_SONNET

    def test_complex_without_anthropic_uses_gpt4_turbo(self):
        selector = _selector(Provider.OPENAI, Provider.GOOGLE)

        assert selector.select("auto", ComplexityHint.COMPLEX) == ModelId.GPT_4_TURBO

    def test_default_skips_unconfigured_providers(self):
        selector = _selector(Provider.ANTHROPIC, Provider.HUGGINGFACE)

        assert selector.select("auto") == ModelId.CLAUDE_3_5_SONNET

    @pytest.mark.parametrize("only", list(Provider))
    @pytest.mark.parametrize("hint", [None, ComplexityHint.SIMPLE, ComplexityHint.COMPLEX])
    def test_auto_respects_configured_credentials(self, only, hint):
        """With one provider configured, auto never picks another provider."""
        model = _selector(only).select("auto", hint)

        assert MODEL_PROVIDERS[model] == only

    def test_no_credentials_raises(self):
        with pytest.raises(LLMConfigurationError) as exc_info:
            _selector().select("auto")

        message = str(exc_info.value)
        assert message.startswith("No AI model API keys configured")
        assert "OPENAI_API_KEY" in message
        assert "HF_TOKEN" in message


class TestParsing:
    @pytest.mark.parametrize("value", [None, "", "  ", "auto", "AUTO"])
    def test_auto_values(self, value):
        assert parse_requested_model(value) == "auto"

    def test_known_model_is_case_insensitive(self):
        assert parse_requested_model(" Claude-3-5-Sonnet ") == ModelId.CLAUDE_3_5_SONNET

    def test_unknown_model_raises(self):
        with pytest.raises(UnknownModelError) as exc_info:
            parse_requested_model("gpt-17")

        assert str(exc_info.value) == "Unknown model: gpt-17"

    def test_complexity_hint(self):
        assert parse_complexity_hint("complex") == ComplexityHint.COMPLEX
        assert parse_complexity_hint("Simple") == ComplexityHint.SIMPLE
        assert parse_complexity_hint("extreme") is None
        assert parse_complexity_hint(None) is None


class TestProviderCredentials:
    def test_blank_keys_are_unconfigured(self):
        credentials = ProviderCredentials({Provider.OPENAI: "  ", Provider.GOOGLE: "g"})

        assert not credentials.is_configured(Provider.OPENAI)
        assert credentials.configured_providers() == [Provider.GOOGLE]

    def test_repr_hides_keys(self):
        credentials = ProviderCredentials({Provider.OPENAI: "sk-secret"})

        assert "sk-secret" not in repr(credentials)
        assert "openai" in repr(credentials)
