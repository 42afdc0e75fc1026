"""
Metadata Extractor - one enrichment contract over the local PDF parser
and the remote AI provider.

The two halves are independent: parse_local never calls the provider and
extract_remote never opens the PDF. The import pipeline composes them.
"""
import asyncio
from typing import List, Optional

from ..core.config import AI_TEXT_CHAR_LIMIT, AI_TEXT_PAGE_LIMIT, CLAUDE_MODEL, AIConfig
from ..core.logging_config import get_logger
from ..domain.entities import LocalMetadata, RemoteMetadata
from .pdf_parser import PDFParser
from .providers import ConnectionTestResult, MetadataProviderFactory
from .text_extractors import BaseTextExtractor, PDFExtractor

logger = get_logger(__name__)


class MetadataExtractor:
    """
    Service for document metadata extraction.
    Collaborators are injected so tests can replace the parser or provider.
    """

    def __init__(
        self,
        parser: Optional[PDFParser] = None,
        text_extractor: Optional[BaseTextExtractor] = None,
        provider_factory=MetadataProviderFactory,
        page_limit: int = AI_TEXT_PAGE_LIMIT,
        char_limit: int = AI_TEXT_CHAR_LIMIT
    ):
        self.parser = parser or PDFParser()
        self.text_extractor = text_extractor or PDFExtractor()
        self.provider_factory = provider_factory
        self.page_limit = page_limit
        self.char_limit = char_limit

    def parse_local(self, file_bytes: bytes) -> LocalMetadata:
        """
        Read attributes, geometry and thumbnail from the PDF itself.
        Never raises; unparseable input yields an empty LocalMetadata.
        """
        return self.parser.parse_local(file_bytes)

    def text_sample(self, file_bytes: bytes) -> str:
        """
        Bounded text prefix for the AI request.

        Raises:
            NoTextExtracted: If the leading pages carry no text
        """
        return self.text_extractor.extract_sample(file_bytes, self.page_limit, self.char_limit)

    def extract_remote(self, text_sample: str, api_key: Optional[str],
                       model: Optional[str] = None, provider: str = "anthropic") -> RemoteMetadata:
        """
        Ask the AI provider for title/author/date/summary/keywords.

        Args:
            text_sample: Document text (truncated to the character limit)
            api_key: Provider API key
            model: Model override
            provider: Provider name ('anthropic' or 'mock')

        Returns:
            RemoteMetadata

        Raises:
            NoTextExtracted, ProviderError, EmptyResponse, MalformedJSON
        """
        ai_config = AIConfig(enabled=True, api_key=api_key, model=model or CLAUDE_MODEL, provider=provider)
        return self.provider_factory.create(ai_config).extract_metadata(text_sample[:self.char_limit])

    async def extract_metadata(self, file_bytes: bytes, ai_config: AIConfig) -> RemoteMetadata:
        """
        Text sampling plus provider call, both off the event loop.

        Args:
            file_bytes: Raw PDF content
            ai_config: Enrichment settings, sourced by the caller

        Raises:
            ValueError: If enrichment is not active for this configuration
            NoTextExtracted, ProviderError, EmptyResponse, MalformedJSON
        """
        if not ai_config.is_active:
            raise ValueError("AI enrichment is disabled or has no API key")

        loop = asyncio.get_event_loop()
        sample = await loop.run_in_executor(None, self.text_sample, file_bytes)
        return await loop.run_in_executor(
            None, self.extract_remote, sample, ai_config.api_key, ai_config.model, ai_config.provider
        )

    async def test_connection(self, ai_config: AIConfig, candidate_models: List[str]) -> ConnectionTestResult:
        """Test the provider; the first answering model is reported back."""
        try:
            provider = self.provider_factory.create(ai_config)
        except ValueError as e:
            return ConnectionTestResult(ok=False, error=str(e))
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, provider.test_connection, candidate_models)
