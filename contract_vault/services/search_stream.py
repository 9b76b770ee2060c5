"""
Streaming Search Orchestrator
Runs one search invocation end to end over a live channel: parse, retrieve,
emit each match with an optional document summary, emit an overall summary,
then record the search in the caller's history.

Per-document failures (inaccessible files, parse errors, generation errors,
timeouts) never abort the invocation. A rate limit switches AI off for the
rest of that invocation only.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from contract_vault.core.config import settings
from contract_vault.core.exceptions import ContractRetrievalError
from contract_vault.schemas.contract import ContractWithMedia, MediaRead
from contract_vault.schemas.search import SearchEvent
from contract_vault.schemas.summarization import RateLimited
from contract_vault.services.contract_search import ContractSearchEngine, SEARCH_RESULT_LIMIT
from contract_vault.services.document_extractor import DocumentTextExtractor, FetchError
from contract_vault.services.history_service import HistoryService
from contract_vault.services.mistral_ocr_service import MistralOCRService
from contract_vault.services.summarization_service import SummarizationService
from contract_vault.services.user_library_service import UserLibraryService

logger = logging.getLogger(__name__)

DOCUMENT_WORD_LIMIT = 500
MIN_SUMMARY_TEXT_LENGTH = 50

DOCUMENT_SUMMARY_PROMPT = (
    "Summarize this contract document in 2-3 sentences. "
    "Focus on key terms, parties involved, and main obligations:\n\n{text}"
)
SEARCH_SUMMARY_PROMPT = (
    'Based on the search query "{query}", provide a brief 2-3 sentence summary '
    "of these contract search results:\n\n{lines}"
)
FALLBACK_SUMMARY = 'Found {count} contracts matching "{query}"'
RATE_LIMITED_SUFFIX = " (AI summaries unavailable due to rate limits)"
EMPTY_SUMMARY = "No summary available"


class SearchState(str, Enum):
    IDLE = "idle"
    STARTED = "started"
    SEARCHING = "searching"
    ZERO = "zero"
    EMITTING = "emitting"
    SUMMARIZING = "summarizing"
    COMPLETE = "complete"
    FAILED = "failed"


class AiDisabledReason(str, Enum):
    NOT_CONFIGURED = "not_configured"
    RATE_LIMITED = "rate_limited"


class ChannelClosed(Exception):
    """The client went away; the invocation stops without emitting anything else"""


class SearchChannel(ABC):
    """
    Outbound side of one client connection.

    Implementations send {"event": ..., "data": ...} frames and report
    whether the connection is still usable.
    """

    @abstractmethod
    def is_open(self) -> bool:
        pass

    @abstractmethod
    async def emit(self, event: str, data: Dict[str, Any]) -> None:
        pass


@dataclass
class SearchSession:
    """State of one streaming search invocation"""
    raw_query: str
    tab: str = "all"
    caller_id: Optional[str] = None
    exclude_ids: List[str] = field(default_factory=list)
    ai_available: bool = True
    ai_disabled_reason: Optional[AiDisabledReason] = None
    results_count: int = 0
    state: SearchState = SearchState.IDLE

    def disable_ai(self, reason: AiDisabledReason) -> None:
        self.ai_available = False
        if self.ai_disabled_reason is None:
            self.ai_disabled_reason = reason


class StepStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"


@dataclass
class StepResult:
    status: StepStatus
    value: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.status is StepStatus.SUCCESS


def find_document(media: List[MediaRead]) -> Optional[MediaRead]:
    """First PDF attached to a contract, by mimetype or file extension"""
    for item in media:
        if item.mimetype == "application/pdf" or (item.url or "").lower().endswith(".pdf"):
            return item
    return None


def build_search_summary_prompt(query: str, contracts: List[ContractWithMedia]) -> str:
    lines = "\n".join(
        f"- {c.contract_title} ({c.operator}, {c.contractor_name}, {c.year})"
        for c in contracts
    )
    return SEARCH_SUMMARY_PROMPT.format(query=query, lines=lines)


class SearchStreamOrchestrator:
    """
    Drives SearchSession through IDLE -> STARTED -> SEARCHING ->
    (ZERO | EMITTING -> SUMMARIZING) -> COMPLETE, or FAILED.

    Args:
        search_engine: Shared contract search engine
        extractor: Document text extractor
        summarizer: Generative-text client, None when AI is not configured
        library_service: Source of the caller's personal archive
        history_service: Search history writer
        fetch_timeout: Seconds allowed per document extraction
        ai_timeout: Seconds allowed per summarization call
    """

    def __init__(
        self,
        search_engine: Optional[ContractSearchEngine] = None,
        extractor: Optional[DocumentTextExtractor] = None,
        summarizer: Optional[SummarizationService] = None,
        library_service: Optional[UserLibraryService] = None,
        history_service: Optional[HistoryService] = None,
        fetch_timeout: Optional[float] = None,
        ai_timeout: Optional[float] = None
    ):
        self.library_service = library_service or UserLibraryService()
        self.search_engine = search_engine or ContractSearchEngine(self.library_service)
        self.extractor = extractor or DocumentTextExtractor()
        self.summarizer = summarizer
        self.history_service = history_service or HistoryService()
        self.fetch_timeout = fetch_timeout or settings.DOCUMENT_FETCH_TIMEOUT
        self.ai_timeout = ai_timeout or settings.AI_CALL_TIMEOUT

    @staticmethod
    def _ensure_open(channel: SearchChannel) -> None:
        if not channel.is_open():
            raise ChannelClosed()

    async def _emit(self, channel: SearchChannel, event: str, data: Dict[str, Any]) -> None:
        self._ensure_open(channel)
        await channel.emit(event, data)

    async def _run_step(
        self,
        session: SearchSession,
        channel: SearchChannel,
        label: str,
        call: Callable[[], Awaitable[Any]],
        timeout: float
    ) -> StepResult:
        """
        Run one external call under a timeout and classify its outcome.

        A rate limit turns AI off for the remainder of the session.
        """
        self._ensure_open(channel)
        try:
            value = await asyncio.wait_for(call(), timeout=timeout)
        except RateLimited as e:
            logger.warning(f"AI rate limit reached during {label}, disabling AI for this search")
            session.disable_ai(AiDisabledReason.RATE_LIMITED)
            return StepResult(StepStatus.RATE_LIMITED, error=e)
        except FetchError as e:
            if e.is_access_error:
                logger.warning(f"Document not accessible during {label} (HTTP {e.status}), skipping summary")
                return StepResult(StepStatus.SKIPPED, error=e)
            logger.error(f"{label} failed: {e.message}")
            return StepResult(StepStatus.FAILED, error=e)
        except asyncio.TimeoutError as e:
            logger.error(f"{label} timed out after {timeout}s")
            return StepResult(StepStatus.FAILED, error=e)
        except Exception as e:
            logger.error(f"{label} failed: {str(e)}")
            return StepResult(StepStatus.FAILED, error=e)

        return StepResult(StepStatus.SUCCESS, value=value)

    async def _summarize_contract(
        self,
        session: SearchSession,
        channel: SearchChannel,
        contract: ContractWithMedia
    ) -> Optional[str]:
        if not session.ai_available:
            return None

        document = find_document(contract.media)
        if document is None:
            return None

        await self._emit(channel, SearchEvent.PROGRESS, {
            "message": f"Reading document for {contract.contract_title}..."
        })
        extracted = await self._run_step(
            session, channel, f"Reading document for contract {contract.id}",
            lambda: self.extractor.extract_text(document.url, DOCUMENT_WORD_LIMIT),
            self.fetch_timeout
        )
        if not extracted.ok:
            return None

        text = extracted.value or ""
        if len(text) <= MIN_SUMMARY_TEXT_LENGTH:
            logger.info(f"Document for contract {contract.id} has too little text to summarize")
            return None

        await self._emit(channel, SearchEvent.PROGRESS, {
            "message": f"Generating summary for {contract.contract_title}..."
        })
        summary = await self._run_step(
            session, channel, f"Summarizing contract {contract.id}",
            lambda: self.summarizer.summarize(DOCUMENT_SUMMARY_PROMPT.format(text=text)),
            self.ai_timeout
        )
        if not summary.ok:
            return None
        return summary.value or None

    async def _search_summary(
        self,
        session: SearchSession,
        channel: SearchChannel,
        contracts: List[ContractWithMedia]
    ) -> str:
        fallback = FALLBACK_SUMMARY.format(count=len(contracts), query=session.raw_query)

        if not session.ai_available:
            if session.ai_disabled_reason is AiDisabledReason.RATE_LIMITED:
                return fallback + RATE_LIMITED_SUFFIX
            return fallback

        await self._emit(channel, SearchEvent.PROGRESS, {"message": "Generating search summary..."})
        result = await self._run_step(
            session, channel, "Search summary",
            lambda: self.summarizer.summarize(build_search_summary_prompt(session.raw_query, contracts)),
            self.ai_timeout
        )
        if not result.ok:
            return fallback
        return result.value or EMPTY_SUMMARY

    async def run(
        self,
        db: AsyncSession,
        channel: SearchChannel,
        query: Optional[str],
        tab: Optional[str] = None,
        caller_id: Optional[str] = None
    ) -> SearchSession:
        """
        Execute one streaming search invocation.

        Args:
            db: Session owned by this invocation
            channel: Client channel receiving the events
            query: Raw query text
            tab: Client context label stored with the history entry
            caller_id: Authenticated user id, if any

        Returns:
            The finished SearchSession (state COMPLETE, FAILED, or where it
            stopped when the channel closed)
        """
        session = SearchSession(raw_query=(query or "").strip(), tab=tab or "all", caller_id=caller_id)
        if self.summarizer is None:
            session.disable_ai(AiDisabledReason.NOT_CONFIGURED)

        try:
            if not session.raw_query:
                session.state = SearchState.FAILED
                await self._emit(channel, SearchEvent.ERROR, {"message": "Search query is required"})
                return session

            await self._execute(db, channel, session)
        except ChannelClosed:
            logger.info(f"Client disconnected, stopping search '{session.raw_query}' in state {session.state.value}")
        except ContractRetrievalError as e:
            session.state = SearchState.FAILED
            await self._emit_error(channel, e.message)
        except Exception:
            session.state = SearchState.FAILED
            logger.exception(f"Search '{session.raw_query}' failed")
            await self._emit_error(channel, "Search failed")

        return session

    async def _emit_error(self, channel: SearchChannel, message: str) -> None:
        if not channel.is_open():
            return
        try:
            await channel.emit(SearchEvent.ERROR, {"message": message})
        except ChannelClosed:
            logger.info(f"Client disconnected before error '{message}' could be sent")

    async def _execute(self, db: AsyncSession, channel: SearchChannel, session: SearchSession) -> None:
        session.state = SearchState.STARTED
        await self._emit(channel, SearchEvent.START, {"message": "Search started"})

        session.state = SearchState.SEARCHING
        if session.caller_id:
            try:
                session.exclude_ids = await self.library_service.archived_contract_ids(db, session.caller_id)
            except SQLAlchemyError as e:
                logger.error(f"Failed to load archived contracts for user {session.caller_id}: {str(e)}")
                raise ContractRetrievalError("Failed to retrieve contracts") from e
        self._ensure_open(channel)
        outcome = await self.search_engine.search(
            db,
            session.raw_query,
            caller_id=session.caller_id,
            exclude_ids=session.exclude_ids,
            limit=SEARCH_RESULT_LIMIT
        )
        contracts = outcome.contracts
        session.results_count = len(contracts)

        if not contracts:
            session.state = SearchState.ZERO
            await self._emit(channel, SearchEvent.PROGRESS, {"message": "Found 0 contracts", "count": 0})
            session.state = SearchState.COMPLETE
            await self._emit(channel, SearchEvent.COMPLETE, {"message": "No contracts found", "total": 0})
            return

        session.state = SearchState.EMITTING
        await self._emit(channel, SearchEvent.PROGRESS, {
            "message": f"Found {len(contracts)} contracts",
            "count": len(contracts)
        })

        for contract in contracts:
            document_summary = await self._summarize_contract(session, channel, contract)
            payload = contract.model_dump(by_alias=True, mode="json")
            payload["documentSummary"] = document_summary
            await self._emit(channel, SearchEvent.RESULT, {"contract": payload})

        session.state = SearchState.SUMMARIZING
        summary = await self._search_summary(session, channel, contracts)
        await self._emit(channel, SearchEvent.SUMMARY, {"summary": summary})

        session.state = SearchState.COMPLETE
        await self._emit(channel, SearchEvent.COMPLETE, {
            "message": "Search completed",
            "total": len(contracts)
        })

        if session.caller_id:
            await self.history_service.record_best_effort(
                db,
                session.caller_id,
                outcome.parsed.clean_query or session.raw_query,
                len(contracts),
                session.tab
            )


def build_search_orchestrator() -> SearchStreamOrchestrator:
    """Wire the orchestrator from settings; AI and OCR are optional."""
    summarizer = SummarizationService() if settings.OPENAI_API_KEY else None
    ocr_service = MistralOCRService() if settings.MISTRAL_API_KEY else None
    if summarizer is None:
        logger.warning("OPENAI_API_KEY not set, search summaries disabled")
    return SearchStreamOrchestrator(
        extractor=DocumentTextExtractor(ocr_service=ocr_service),
        summarizer=summarizer
    )
