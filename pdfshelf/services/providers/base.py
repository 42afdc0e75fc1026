"""
Base Metadata Provider Interface.

All AI providers must inherit from this base class and implement
all abstract methods. Response parsing is shared by every provider.
"""
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ...domain.entities import RemoteMetadata
from ...domain.exceptions import MalformedJSON
from ...utils.document_utils import clean_text, normalize_keywords, parse_iso_day

METADATA_PROMPT = """Analyze the following PDF text and extract this information as JSON:

{{
  "title": "The title of the document",
  "author": "Name of the author",
  "creationDate": "YYYY-MM-DD (if recognizable, otherwise null)",
  "summary": "Summary of at most 240 words",
  "keywords": ["Keyword1", "Keyword2", "Keyword3"]
}}

Important:
- The title should be the main title of the document
- The author can be a person, an organization or an institution
- The date should be the creation date of the document, not today's date
- The summary must not exceed 240 words and should describe the main contents
- Keywords should describe the main topics and concepts of the document (5-10 keywords)
- Answer ONLY with the JSON object, without additional text

PDF text:

{text}"""


@dataclass
class ConnectionTestResult:
    """Outcome of probing the provider with a minimal request."""
    ok: bool
    model: Optional[str] = None
    error: Optional[str] = None


def build_metadata_prompt(text_sample: str) -> str:
    return METADATA_PROMPT.format(text=text_sample)


def _optional_string(payload: dict, key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedJSON(f"Field '{key}' must be a string or null")
    return clean_text(value)


def parse_metadata_response(response_text: str) -> RemoteMetadata:
    """
    Parse the provider's answer into RemoteMetadata.

    Prose around the JSON object is tolerated: only the substring between
    the first '{' and the last '}' is parsed.

    Raises:
        MalformedJSON: If no JSON object is found or fields have the wrong type
    """
    start = response_text.find("{")
    end = response_text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise MalformedJSON("No JSON object found in provider response")

    try:
        payload = json.loads(response_text[start:end + 1])
    except json.JSONDecodeError as e:
        raise MalformedJSON(f"Invalid JSON in provider response: {e}") from e
    if not isinstance(payload, dict):
        raise MalformedJSON("Provider response is not a JSON object")

    keywords = payload.get("keywords") or []
    if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
        raise MalformedJSON("Field 'keywords' must be a list of strings")

    creation_date = payload.get("creationDate")
    if creation_date is not None and not isinstance(creation_date, str):
        raise MalformedJSON("Field 'creationDate' must be a string or null")

    return RemoteMetadata(
        title=_optional_string(payload, "title"),
        author=_optional_string(payload, "author"),
        creation_date=parse_iso_day(creation_date),
        summary=_optional_string(payload, "summary"),
        keywords=normalize_keywords(keywords),
    )


class MetadataProvider(ABC):
    """
    Abstract base class for AI metadata providers.

    Providers are synchronous; callers run them off the event loop.
    """

    @abstractmethod
    def extract_metadata(self, text_sample: str) -> RemoteMetadata:
        """
        Extract title/author/date/summary/keywords from document text.

        Args:
            text_sample: Bounded prefix of the document's text

        Returns:
            RemoteMetadata

        Raises:
            NoTextExtracted: Empty sample
            ProviderError: Non-success answer from the provider
            EmptyResponse: Answer without text content
            MalformedJSON: Answer without a usable JSON object
        """
        pass

    @abstractmethod
    def test_connection(self, candidate_models: List[str]) -> ConnectionTestResult:
        """
        Try each candidate model until one answers.

        Args:
            candidate_models: Model names to try, in order

        Returns:
            ConnectionTestResult naming the first working model,
            or the last error seen
        """
        pass
