"""
Metadata Provider Factory.

Manages provider selection based on an explicit AIConfig.
Uses the Factory pattern to provide plug-and-play AI provider support.
"""
from ...core.config import AIConfig
from ...core.logging_config import get_logger
from .anthropic_provider import AnthropicProvider
from .base import MetadataProvider
from .mock_provider import MockProvider

logger = get_logger(__name__)


class MetadataProviderFactory:
    """Factory for creating metadata provider instances."""

    @staticmethod
    def create(ai_config: AIConfig) -> MetadataProvider:
        """
        Get the provider named by the configuration.

        Args:
            ai_config: Enrichment settings (provider, key, model)

        Returns:
            MetadataProvider instance

        Raises:
            ValueError: Unknown provider or missing API key
        """
        provider_type = ai_config.provider.lower()

        if provider_type == "anthropic":
            if not ai_config.api_key:
                raise ValueError("Anthropic API key not configured")
            return AnthropicProvider(api_key=ai_config.api_key, model=ai_config.model)
        elif provider_type == "mock":
            return MockProvider()
        else:
            raise ValueError(
                f"Unsupported AI provider: {provider_type}. "
                f"Supported providers: 'anthropic', 'mock'"
            )
