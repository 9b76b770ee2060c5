"""
Mistral OCR Service
OCR fallback for scanned contract PDFs that carry no text layer.
Handles base64 submission of downloaded PDF bytes with retry logic.
"""

import asyncio
import base64
import logging
from typing import Any, List, Optional

from mistralai import Mistral

from contract_vault.core.config import settings

logger = logging.getLogger(__name__)


class MistralOCRService:
    """
    Mistral OCR service with retry logic.

    Features:
    - Automatic retry with exponential backoff for transient failures
    - Non-retryable errors (auth, invalid request) are raised immediately
    - Page markdown flattened to plain text
    """

    OCR_MODEL = "mistral-ocr-latest"

    # Retry configuration
    MAX_RETRIES = 3
    INITIAL_RETRY_DELAY = 1.0  # seconds
    MAX_RETRY_DELAY = 10.0  # seconds
    BACKOFF_MULTIPLIER = 2.0

    def __init__(self, api_key: Optional[str] = None):
        """
        Initialize Mistral OCR service.

        Args:
            api_key: Mistral API key (defaults to MISTRAL_API_KEY from settings)
        """
        self.api_key = api_key or settings.MISTRAL_API_KEY
        if not self.api_key:
            raise ValueError("Mistral API key is required. Set MISTRAL_API_KEY in environment variables.")

        self.client = Mistral(api_key=self.api_key)

    def _is_retryable(self, error: Exception) -> bool:
        """Auth and invalid-request failures will not succeed on retry"""
        error_str = str(error).lower()
        if "unauthorized" in error_str or "401" in error_str or "403" in error_str:
            return False
        if "invalid" in error_str or "400" in error_str:
            return False
        return True

    async def _retry_with_backoff(self, func, *args, **kwargs):
        """
        Execute a blocking SDK call in a worker thread with exponential backoff.

        Raises:
            Exception: The last error if all retries fail
        """
        delay = self.INITIAL_RETRY_DELAY
        last_error = None

        for attempt in range(self.MAX_RETRIES):
            try:
                return await asyncio.to_thread(func, *args, **kwargs)
            except Exception as e:
                last_error = e

                if not self._is_retryable(e):
                    logger.error(f"Non-retryable OCR error: {str(e)}")
                    raise

                if attempt < self.MAX_RETRIES - 1:
                    logger.warning(
                        f"OCR attempt {attempt + 1}/{self.MAX_RETRIES} failed: {str(e)[:100]}. "
                        f"Retrying in {delay:.2f}s..."
                    )
                    await asyncio.sleep(delay)
                    delay = min(delay * self.BACKOFF_MULTIPLIER, self.MAX_RETRY_DELAY)

        raise last_error

    def _process_base64_pdf(self, base64_content: str) -> Any:
        document = {
            "type": "document_url",
            "document_url": f"data:application/pdf;base64,{base64_content}"
        }

        return self.client.ocr.process(
            model=self.OCR_MODEL,
            document=document,
            include_image_base64=False
        )

    @staticmethod
    def _extract_text(ocr_result: Any) -> str:
        """
        Flatten an OCR response to text.

        Mistral returns pages, each with a 'markdown' attribute.
        """
        pages = getattr(ocr_result, "pages", None)
        if pages is None and isinstance(ocr_result, dict):
            pages = ocr_result.get("pages")

        text_parts: List[str] = []
        for page in pages or []:
            if isinstance(page, dict):
                page_text = page.get("markdown") or page.get("text")
            else:
                page_text = getattr(page, "markdown", None) or getattr(page, "text", None)
            if page_text:
                text_parts.append(str(page_text))

        return "\n\n".join(text_parts).strip()

    async def extract_text(self, pdf_bytes: bytes) -> str:
        """
        Run OCR over raw PDF bytes and return the recognised text.

        Args:
            pdf_bytes: PDF file content

        Returns:
            Text of all pages joined by blank lines
        """
        base64_content = base64.b64encode(pdf_bytes).decode("ascii")
        result = await self._retry_with_backoff(self._process_base64_pdf, base64_content)
        text = self._extract_text(result)
        logger.info(f"OCR extracted {len(text)} characters")
        return text
