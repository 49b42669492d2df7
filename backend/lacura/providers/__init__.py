from typing import Optional

from lacura.core.config import Settings
from .base import LLMProvider, ProviderResponse
from .openai_provider import OpenAIProvider

class ProviderFactory:
    _providers = {
        "openai": OpenAIProvider,
    }

    @classmethod
    def get_provider(cls, settings: Settings, name: str = "openai") -> Optional[LLMProvider]:
        """Returns None when the model endpoint is not configured."""
        if not settings.openai_configured:
            return None
        provider_class = cls._providers.get(name)
        if not provider_class:
            raise ValueError(f"Provider {name} not found")
        return provider_class(settings)
