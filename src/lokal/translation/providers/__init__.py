"""Translation provider adapters."""

from ...config import AIConfig
from ...errors import ConfigError
from .base import BaseProvider, TranslationProvider
from .deepl_provider import DeepLProvider
from .gemini_provider import GeminiProvider
from .openai_provider import OpenAIProvider


def create_provider(ai_config: AIConfig) -> TranslationProvider:
    """
    Create the provider named in the AI configuration.

    Raises:
        ConfigError: For an unknown provider or a missing API key
    """
    if not ai_config.api_key:
        raise ConfigError(f"No API key configured for {ai_config.provider}")

    if ai_config.provider == "openai":
        return OpenAIProvider(ai_config.api_key, model=ai_config.model or "gpt-4o-mini")
    if ai_config.provider == "gemini":
        return GeminiProvider(ai_config.api_key, model=ai_config.model or "gemini-2.5-flash")
    if ai_config.provider == "deepl":
        return DeepLProvider(ai_config.api_key)

    raise ConfigError(f"Unknown translation provider: {ai_config.provider}")


__all__ = [
    "BaseProvider",
    "TranslationProvider",
    "OpenAIProvider",
    "GeminiProvider",
    "DeepLProvider",
    "create_provider",
]
