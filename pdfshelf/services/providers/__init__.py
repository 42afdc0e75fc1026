"""
AI Providers Module - Pluggable metadata provider implementations.

To add a new provider:
1. Create a class inheriting from MetadataProvider
2. Implement extract_metadata() and test_connection()
3. Register it in MetadataProviderFactory
"""
from .anthropic_provider import AnthropicProvider
from .base import ConnectionTestResult, MetadataProvider, parse_metadata_response
from .factory import MetadataProviderFactory
from .mock_provider import MockProvider

__all__ = [
    "AnthropicProvider",
    "ConnectionTestResult",
    "MetadataProvider",
    "MetadataProviderFactory",
    "MockProvider",
    "parse_metadata_response",
]
