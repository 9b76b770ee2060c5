"""
Summarization Service
Sends prompts to the OpenAI chat completions API and classifies failures
into rate limits vs. everything else. Retry policy belongs to the caller.
"""

import logging
from typing import Optional

from openai import AsyncOpenAI

from contract_vault.core.config import settings
from contract_vault.schemas.summarization import (
    SummarizationError,
    RateLimited,
    GenerationError
)

logger = logging.getLogger(__name__)

RATE_LIMIT_MARKERS = ("429", "resource_exhausted", "rate limit", "rate_limit")


def _as_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def classify_error(error: Exception) -> SummarizationError:
    """
    Map a backend exception to RateLimited or GenerationError.

    Pure function of the error's status/code/message fields: HTTP 429 in
    status_code, status or code, or a rate-limit marker in the message,
    means rate limited.
    """
    if isinstance(error, SummarizationError):
        return error

    status = _as_int(getattr(error, "status_code", None)) or _as_int(getattr(error, "status", None))
    code = getattr(error, "code", None)
    error_str = str(error)

    if status == 429 or _as_int(code) == 429:
        return RateLimited(f"Rate limit exceeded: {error_str}", status=429)

    lowered = f"{error_str} {code or ''}".lower()
    if any(marker in lowered for marker in RATE_LIMIT_MARKERS):
        return RateLimited(f"Rate limit exceeded: {error_str}", status=status or 429)

    return GenerationError(f"Summary generation failed: {error_str}", status=status)


class SummarizationService:
    """
    Generative-text client used for per-document and per-search summaries.

    The underlying SDK client runs with max_retries=0 so a 429 surfaces
    immediately and the caller can switch AI off for the rest of a search.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None
    ):
        """
        Initialize summarization service.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY from settings)
            model: Chat model (defaults to SUMMARY_MODEL from settings)
            timeout: Per-request timeout in seconds (defaults to AI_CALL_TIMEOUT)
            client: Pre-built AsyncOpenAI client, mainly for tests
        """
        self.api_key = api_key or settings.OPENAI_API_KEY
        self.model = model or settings.SUMMARY_MODEL
        self.timeout = timeout or settings.AI_CALL_TIMEOUT

        if client is not None:
            self.client = client
        else:
            if not self.api_key:
                raise ValueError("OpenAI API key is required. Set OPENAI_API_KEY in environment variables.")
            self.client = AsyncOpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)

    async def summarize(self, prompt: str) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Full user prompt

        Returns:
            Generated text, or "" when the response carries none

        Raises:
            RateLimited: Backend reported 429 / resource exhausted
            GenerationError: Any other failure
        """
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.3
            )
        except Exception as e:
            raise classify_error(e) from e

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""
