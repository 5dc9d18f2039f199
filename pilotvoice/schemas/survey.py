"""Schemas for surveys and competitions."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field

from pilotvoice.schemas.base import BaseSchema

CompetitionSortField = Literal["name", "starts_at", "ends_at", "city", "country_code"]
SortOrder = Literal["asc", "desc"]


class CompetitionDto(BaseSchema):
    """Competition summary used in lists and survey pages."""

    id: int
    name: str
    city: str
    country_code: str
    starts_at: datetime
    ends_at: datetime
    participant_count: int
    tasks_count: int


class Pagination(BaseSchema):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    page: int
    page_size: int = Field(alias="pageSize")
    total: int


class PaginatedCompetitions(BaseSchema):
    data: list[CompetitionDto]
    pagination: Pagination


class SurveyDto(BaseSchema):
    """A survey row plus its computed open state."""

    id: int
    competition_id: int
    slug: str
    opens_at: datetime
    closes_at: datetime
    is_open: bool = False


class SurveyWithCompetition(BaseSchema):
    survey: SurveyDto
    competition: CompetitionDto
