"""Competition listing."""
from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pilotvoice.models.competition import Competition

SORTABLE_COLUMNS = {
    "name": Competition.name,
    "starts_at": Competition.starts_at,
    "ends_at": Competition.ends_at,
    "city": Competition.city,
    "country_code": Competition.country_code,
}


class CompetitionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_competitions(
            self,
            page: int = 1,
            page_size: int = 10,
            sort_by: str = "starts_at",
            order: str = "desc",
    ) -> tuple[list[Competition], int]:
        """Return one page of competitions and the total count."""
        column = SORTABLE_COLUMNS[sort_by]
        ordering = column.asc() if order == "asc" else column.desc()

        rows = await self.db.execute(
            select(Competition)
            .order_by(ordering, Competition.id)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        total = await self.db.execute(select(func.count()).select_from(Competition))
        return list(rows.scalars().all()), int(total.scalar_one())
