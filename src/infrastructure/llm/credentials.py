"""Process-wide provider credentials."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from src.infrastructure.llm.models import CREDENTIAL_ENV_VARS, Provider

if TYPE_CHECKING:
    from collections.abc import Mapping

    from src.config import Settings


@dataclass(frozen=True)
class ProviderCredentials:
    """Read-only API keys per provider.

    A provider with no key (or a blank one) is treated as unconfigured, which
    makes every model mapped to it unusable.
    """

    keys: "Mapping[Provider, str]" = field(default_factory=dict)

    def __post_init__(self) -> None:
        cleaned = {
            provider: key.strip()
            for provider, key in self.keys.items()
            if key and key.strip()
        }
        object.__setattr__(self, "keys", MappingProxyType(cleaned))

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ProviderCredentials":
        """Build credentials from application settings."""
        secrets = {
            Provider.OPENAI: settings.openai_api_key,
            Provider.ANTHROPIC: settings.anthropic_api_key,
            Provider.GOOGLE: settings.google_api_key,
            Provider.HUGGINGFACE: settings.huggingface_api_key,
        }
        return cls(
            {
                provider: secret.get_secret_value()
                for provider, secret in secrets.items()
                if secret is not None
            }
        )

    def is_configured(self, provider: Provider) -> bool:
        return provider in self.keys

    def get(self, provider: Provider) -> str | None:
        return self.keys.get(provider)

    def configured_providers(self) -> list[Provider]:
        """Configured providers in catalogue order."""
        return [p for p in Provider if p in self.keys]

    def __repr__(self) -> str:
        # Never expose key material
        names = ", ".join(p.value for p in self.configured_providers())
        return f"ProviderCredentials(configured=[{names}])"


def describe_credential(provider: Provider) -> str:
    """Human-readable list of variables accepted for a provider."""
    return " or ".join(CREDENTIAL_ENV_VARS[provider])
