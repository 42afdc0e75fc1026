"""
Anthropic AI Provider.

Extracts document metadata using Anthropic's Claude Messages API.
"""
from typing import List, Optional

import anthropic

from ...core.config import AI_MAX_TOKENS, AI_REQUEST_TIMEOUT, CLAUDE_MODEL
from ...core.logging_config import get_logger
from ...domain.entities import RemoteMetadata
from ...domain.exceptions import EmptyResponse, NoTextExtracted, ProviderError
from .base import ConnectionTestResult, MetadataProvider, build_metadata_prompt, parse_metadata_response

logger = get_logger(__name__)


def format_status_error(error: anthropic.APIStatusError) -> str:
    """
    Render a non-success answer as "[type] message" when the body carries
    a structured error, otherwise the raw body.
    """
    body = error.body
    if isinstance(body, dict):
        details = body.get("error")
        if isinstance(details, dict) and details.get("message"):
            return f"[{details.get('type', 'error')}] {details['message']}"
    return error.response.text or str(error)


class AnthropicProvider(MetadataProvider):
    """
    Metadata provider using the Anthropic Claude API directly.

    Each request is made exactly once: the client is built without
    automatic retries.
    """

    def __init__(
        self,
        api_key: str,
        model: str = CLAUDE_MODEL,
        max_tokens: int = AI_MAX_TOKENS,
        timeout: float = AI_REQUEST_TIMEOUT,
        client: Optional[anthropic.Anthropic] = None
    ):
        """
        Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key
            model: Model used for extraction
            max_tokens: Response token limit
            timeout: Request timeout in seconds
            client: Preconfigured client
        """
        if not api_key and client is None:
            raise ValueError("Anthropic API key not configured")
        self.model = model
        self.max_tokens = max_tokens
        self.client = client or anthropic.Anthropic(api_key=api_key, max_retries=0, timeout=timeout)

    def _create(self, model: str, max_tokens: int, content: str):
        try:
            return self.client.messages.create(
                model=model,
                max_tokens=max_tokens,
                messages=[
                    {"role": "user", "content": content}
                ]
            )
        except anthropic.APIStatusError as e:
            raise ProviderError(e.status_code, format_status_error(e)) from e
        except anthropic.APIConnectionError as e:
            raise ProviderError(None, str(e)) from e

    def extract_metadata(self, text_sample: str) -> RemoteMetadata:
        """Extract metadata for one document."""
        if not text_sample or not text_sample.strip():
            raise NoTextExtracted("No text to send to the provider")

        logger.debug(f"Requesting metadata from {self.model} ({len(text_sample)} characters)")
        message = self._create(self.model, self.max_tokens, build_metadata_prompt(text_sample))

        texts = [
            block.text for block in (message.content or [])
            if getattr(block, "type", None) == "text" and getattr(block, "text", None)
        ]
        if not texts:
            raise EmptyResponse("Provider response contained no text content")

        return parse_metadata_response(texts[0])

    def test_connection(self, candidate_models: List[str]) -> ConnectionTestResult:
        """Try each candidate model with a minimal request."""
        last_error = "No models to try"
        for model in candidate_models:
            try:
                self._create(model, 10, "Hi")
            except ProviderError as e:
                last_error = f"HTTP {e.status}: {e.message}" if e.status else e.message
                logger.info(f"Model {model} not usable: {last_error}")
                continue
            logger.info(f"Connection test succeeded with model {model}")
            return ConnectionTestResult(ok=True, model=model)

        logger.warning(f"Connection test failed for all models: {last_error}")
        return ConnectionTestResult(ok=False, error=last_error)
