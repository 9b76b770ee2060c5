"""
Document Text Extractor
Downloads a stored contract document and extracts its leading words as
plain text. PDFs are parsed locally with pdfplumber; scanned PDFs without a
text layer fall back to Mistral OCR when it is configured.
"""

import asyncio
import io
import logging
from typing import Optional

import httpx
import pdfplumber

from contract_vault.core.config import settings
from contract_vault.services.mistral_ocr_service import MistralOCRService

logger = logging.getLogger(__name__)

ACCESS_ERROR_STATUSES = (401, 403, 404)


class FetchError(Exception):
    """Document location unreachable or answered with a non-success status"""
    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        self.status = status
        super().__init__(self.message)

    @property
    def is_access_error(self) -> bool:
        return self.status in ACCESS_ERROR_STATUSES


class ParseError(Exception):
    """Fetched bytes could not be parsed as a PDF"""


def limit_words(text: str, word_limit: int) -> str:
    """Collapse whitespace and keep the first word_limit words."""
    return " ".join(text.split()[:word_limit])


def _parse_pdf_text(pdf_bytes: bytes) -> str:
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        return "\n\n".join(page.extract_text() or "" for page in pdf.pages)


class DocumentTextExtractor:
    """
    Fetch + parse pipeline for contract documents.

    Args:
        client: Optional shared httpx client (a fresh one is opened per call otherwise)
        ocr_service: Optional OCR fallback for PDFs without a text layer
        timeout: Download timeout in seconds
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        ocr_service: Optional[MistralOCRService] = None,
        timeout: Optional[float] = None
    ):
        self.client = client
        self.ocr_service = ocr_service
        self.timeout = timeout or settings.DOCUMENT_FETCH_TIMEOUT

    async def _download(self, url: str) -> bytes:
        try:
            if self.client is not None:
                response = await self.client.get(url, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch document from {url}: {str(e)}") from e

        if not response.is_success:
            raise FetchError(
                f"Failed to fetch document from {url}: HTTP {response.status_code}",
                status=response.status_code
            )
        return response.content

    async def _parse(self, pdf_bytes: bytes) -> str:
        try:
            text = await asyncio.to_thread(_parse_pdf_text, pdf_bytes)
        except Exception as e:
            raise ParseError(f"Failed to parse PDF: {str(e)}") from e

        if not text.strip() and self.ocr_service is not None:
            logger.info("PDF has no text layer, falling back to OCR")
            try:
                text = await self.ocr_service.extract_text(pdf_bytes)
            except Exception as e:
                raise ParseError(f"OCR failed: {str(e)}") from e

        return text

    async def extract_text(self, url: str, word_limit: int) -> str:
        """
        Download the document at url and return its first word_limit words.

        Raises:
            FetchError: Unreachable location or non-2xx status
            ParseError: Content is not a readable PDF
        """
        pdf_bytes = await self._download(url)
        text = await self._parse(pdf_bytes)
        return limit_words(text, word_limit)
