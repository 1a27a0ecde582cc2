"""Pydantic models for calendar views."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field


class AgendaEntry(BaseModel):
    """One event of one calendar block, located by page and block.

    Attributes:
        page_id: Page that owns the calendar block
        page_title: Title of that page at the time of the query
        block_id: Calendar block holding the event
        day: Day key the note is stored under
        text: The note itself
    """

    page_id: UUID
    page_title: str
    block_id: UUID
    day: date
    text: str


class MonthGrid(BaseModel):
    """A month laid out in weekday-aligned rows.

    ``days`` is the flat grid (leading ``None`` slots then one date per day);
    ``weeks`` is the same grid cut into rows of seven.
    """

    year: int
    month: int
    first_weekday: int = Field(..., ge=0, le=6)
    days: list[date | None] = Field(default_factory=list)
    weeks: list[list[date | None]] = Field(default_factory=list)
