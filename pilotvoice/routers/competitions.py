"""Competition listing endpoint."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pilotvoice.database import get_db
from pilotvoice.schemas.survey import (
    CompetitionDto,
    CompetitionSortField,
    PaginatedCompetitions,
    Pagination,
    SortOrder,
)
from pilotvoice.services.competition_service import CompetitionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/competitions", tags=["competitions"])


@router.get("", response_model=PaginatedCompetitions)
async def list_competitions(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    sort_by: CompetitionSortField = Query("starts_at", alias="sortBy"),
    order: SortOrder = Query("desc"),
    db: AsyncSession = Depends(get_db),
) -> PaginatedCompetitions:
    """Return one page of competitions."""
    try:
        competitions, total = await CompetitionService(db).get_competitions(page, page_size, sort_by, order)
    except Exception as e:
        logger.error(f"Error fetching competitions: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="internal_server_error")

    return PaginatedCompetitions(
        data=[CompetitionDto.model_validate(c) for c in competitions],
        pagination=Pagination(page=page, page_size=page_size, total=total),
    )
