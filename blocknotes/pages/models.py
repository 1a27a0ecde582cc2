"""Pydantic models for pages and their blocks."""

from datetime import UTC, date, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, model_validator

BlockType = Literal["text", "todo", "calendar"]

DEFAULT_PAGE_TITLE = "New Page"


class Block(BaseModel):
    """A single unit of content inside a page.

    Attributes:
        id: Unique identifier, minted at creation and never changed
        type: One of ``text``, ``todo`` or ``calendar``
        content: Text for text/todo blocks (empty for calendar blocks)
        is_completed: Checkbox state, only meaningful for todo blocks
        events: Day key -> note text, only populated for calendar blocks
    """

    id: UUID = Field(default_factory=uuid4, frozen=True)
    type: BlockType = "text"
    content: str = ""
    is_completed: bool = False
    events: dict[date, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_events_owner(self) -> "Block":
        """Reject events on anything but a calendar block."""
        if self.events and self.type != "calendar":
            raise ValueError(f"{self.type} blocks cannot hold calendar events")
        return self


class Page(BaseModel):
    """An ordered, titled document made of blocks.

    Attributes:
        id: Unique identifier within the collection
        title: User-editable title
        created_at: When the page was created (UTC), never mutated
        blocks: Blocks in display order
    """

    id: UUID = Field(default_factory=uuid4, frozen=True)
    title: str = DEFAULT_PAGE_TITLE
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), frozen=True)
    blocks: list[Block] = Field(default_factory=list)

    def block_index(self, block_id: UUID) -> int | None:
        """Return the position of a block, or None if it is not on this page."""
        for index, block in enumerate(self.blocks):
            if block.id == block_id:
                return index
        return None

    def find_block(self, block_id: UUID) -> Block | None:
        index = self.block_index(block_id)
        return None if index is None else self.blocks[index]


class PageCollection(BaseModel):
    """The persisted root: every page, in sidebar order."""

    pages: list[Page] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_ids(self) -> "PageCollection":
        """Page ids must be unique across the collection."""
        seen: set[UUID] = set()
        for page in self.pages:
            if page.id in seen:
                raise ValueError(f"Duplicate page id: {page.id}")
            seen.add(page.id)
        return self
