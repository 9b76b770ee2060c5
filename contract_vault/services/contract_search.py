"""
Contract Search Engine
Keyword + date search over contracts, shared by the REST search route and
the streaming search over WebSocket.
"""

import calendar
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from sqlalchemy import select, and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from contract_vault.core.config import settings
from contract_vault.core.exceptions import ContractRetrievalError
from contract_vault.db.models.contract import Contract
from contract_vault.db.models.media import Media
from contract_vault.schemas.contract import ContractWithMedia, MediaRead
from contract_vault.services.date_parser import ParsedQuery, parse_date_from_query
from contract_vault.services.user_library_service import UserLibraryService

logger = logging.getLogger(__name__)

SEARCH_RESULT_LIMIT = 20
TEXT_SEARCH_COLUMNS = (
    Contract.contract_title,
    Contract.contractor_name,
    Contract.operator,
    Contract.contract_number,
)


@dataclass
class SearchOutcome:
    parsed: ParsedQuery
    contracts: List[ContractWithMedia] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.contracts)


def date_range_for(year: int, month: Optional[int] = None):
    """
    First and last instant of a calendar month, or of the whole year when
    month is None. The end is inclusive (23:59:59.999999).
    """
    if month:
        last_day = calendar.monthrange(year, month)[1]
        start = datetime(year, month, 1, tzinfo=timezone.utc)
        end = datetime(year, month, last_day, 23, 59, 59, 999999, tzinfo=timezone.utc)
    else:
        start = datetime(year, 1, 1, tzinfo=timezone.utc)
        end = datetime(year, 12, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)
    return start, end


def zip_url_for(contract_id: str) -> str:
    return f"{settings.API_PREFIX}/media/zip/{contract_id}"


def build_search_conditions(parsed: ParsedQuery, exclude_ids: Sequence[str] = ()) -> list:
    """
    Translate a parsed query into WHERE conditions.

    Globally archived contracts and exclude_ids are always filtered out; the
    date overlap and text match are added only when present.
    """
    conditions = [Contract.is_archived.is_(False)]

    if exclude_ids:
        conditions.append(Contract.id.not_in(list(exclude_ids)))

    if parsed.year:
        range_start, range_end = date_range_for(parsed.year, parsed.month)
        # Contract period overlaps the requested range
        conditions.append(and_(
            Contract.start_date <= range_end,
            Contract.end_date >= range_start,
        ))

    if parsed.clean_query:
        conditions.append(or_(*[
            column.icontains(parsed.clean_query, autoescape=True)
            for column in TEXT_SEARCH_COLUMNS
        ]))

    return conditions


async def load_media_for_contracts(db: AsyncSession, contract_ids: Sequence[str]) -> Dict[str, List[Media]]:
    """Batch-load non-deleted media for many contracts, grouped by contract id"""
    grouped: Dict[str, List[Media]] = defaultdict(list)
    if not contract_ids:
        return grouped

    result = await db.execute(
        select(Media)
        .where(Media.contract_id.in_(list(contract_ids)), Media.is_deleted.is_(False))
        .order_by(Media.created_at, Media.id)
    )
    for media in result.scalars().all():
        grouped[media.contract_id].append(media)
    return grouped


def attach_media(contract: Contract, media: List[Media]) -> ContractWithMedia:
    item = ContractWithMedia.model_validate(contract)
    item.media = [MediaRead.model_validate(m) for m in media]
    item.zip_url = zip_url_for(contract.id) if len(media) > 1 else None
    return item


class ContractSearchEngine:
    """
    Parses a raw query, builds the storage filter and returns up to
    SEARCH_RESULT_LIMIT contracts newest-first with their media attached.
    """

    def __init__(self, library_service: Optional[UserLibraryService] = None):
        self.library_service = library_service or UserLibraryService()

    async def search(
        self,
        db: AsyncSession,
        raw_query: str,
        caller_id: Optional[str] = None,
        exclude_ids: Optional[Sequence[str]] = None,
        limit: int = SEARCH_RESULT_LIMIT
    ) -> SearchOutcome:
        """
        Run a contract search.

        Args:
            db: Database session
            raw_query: Query text, possibly containing a date expression
            caller_id: Caller identity; used to load the personal archive
                when exclude_ids is not supplied
            exclude_ids: Contract ids to hide (caller's personal archive)
            limit: Maximum number of contracts

        Returns:
            SearchOutcome with the parsed query and ordered contracts

        Raises:
            ContractRetrievalError: Storage could not be queried
        """
        parsed = parse_date_from_query(raw_query)

        try:
            if exclude_ids is None:
                exclude_ids = await self.library_service.archived_contract_ids(db, caller_id) if caller_id else []

            conditions = build_search_conditions(parsed, exclude_ids)
            result = await db.execute(
                select(Contract)
                .where(*conditions)
                .order_by(Contract.created_at.desc(), Contract.id.desc())
                .limit(limit)
            )
            contracts = list(result.scalars().all())

            media_by_contract = await load_media_for_contracts(db, [c.id for c in contracts])
        except SQLAlchemyError as e:
            logger.error(f"Contract search failed for query '{raw_query}': {str(e)}")
            raise ContractRetrievalError("Failed to retrieve contracts") from e

        logger.info(
            f"Search '{raw_query}' -> text='{parsed.clean_query}' year={parsed.year} "
            f"month={parsed.month}: {len(contracts)} contracts"
        )

        return SearchOutcome(
            parsed=parsed,
            contracts=[attach_media(c, media_by_contract.get(c.id, [])) for c in contracts]
        )
