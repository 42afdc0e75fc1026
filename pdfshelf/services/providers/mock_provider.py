"""
Mock AI Provider.

Provides a deterministic provider for offline development and tests.
Does not make actual API calls, derives metadata from the text itself.
"""
from typing import List

from ...core.logging_config import get_logger
from ...domain.entities import RemoteMetadata
from ...domain.exceptions import NoTextExtracted
from .base import ConnectionTestResult, MetadataProvider

logger = get_logger(__name__)


class MockProvider(MetadataProvider):
    """
    Mock metadata provider.

    Title is the first non-empty line, summary the first 60 words,
    keywords the first five distinct longer words.
    """

    def extract_metadata(self, text_sample: str) -> RemoteMetadata:
        lines = [line.strip() for line in text_sample.splitlines() if line.strip()]
        if not lines:
            raise NoTextExtracted("No text to send to the provider")

        words = text_sample.split()
        keywords = []
        for word in words:
            word = word.strip(".,;:!?()[]\"'").lower()
            if len(word) > 4 and word.isalpha() and word not in keywords:
                keywords.append(word)
                if len(keywords) >= 5:
                    break

        return RemoteMetadata(
            title=lines[0][:120],
            summary=" ".join(words[:60]),
            keywords=keywords,
        )

    def test_connection(self, candidate_models: List[str]) -> ConnectionTestResult:
        model = candidate_models[0] if candidate_models else "mock"
        return ConnectionTestResult(ok=True, model=model)
