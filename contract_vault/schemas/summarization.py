"""
Summarization error types
"""

from typing import Optional
from enum import Enum


class SummarizationErrorType(str, Enum):
    """Types of generative-text backend errors"""
    RATE_LIMIT = "rate_limit"
    GENERATION = "generation"


class SummarizationError(Exception):
    """Custom summarization service error"""
    def __init__(self, message: str, error_type: SummarizationErrorType, status: Optional[int] = None):
        self.message = message
        self.error_type = error_type
        self.status = status
        super().__init__(self.message)


class RateLimited(SummarizationError):
    """Backend reported HTTP 429 / resource exhausted"""
    def __init__(self, message: str, status: Optional[int] = 429):
        super().__init__(message, SummarizationErrorType.RATE_LIMIT, status)


class GenerationError(SummarizationError):
    """Any other backend failure, including network errors"""
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message, SummarizationErrorType.GENERATION, status)
