"""Request and response models for the HTTP host adapter."""

from datetime import date

from pydantic import BaseModel, Field

from blocknotes.pages.models import BlockType
from blocknotes.templates.models import TemplateName


class CreatePageRequest(BaseModel):
    """Create a page, optionally from a built-in template."""

    title: str | None = None
    template: TemplateName | None = None


class RenamePageRequest(BaseModel):
    title: str


class MovePageRequest(BaseModel):
    source: int = Field(..., ge=0)
    destination: int = Field(..., ge=0)


class CreateBlockRequest(BaseModel):
    type: BlockType = "text"
    content: str = ""


class EditBlockRequest(BaseModel):
    content: str


class DeleteBlocksRequest(BaseModel):
    """Positions may be scattered, e.g. ``[1, 3]``."""

    positions: list[int] = Field(..., min_length=1)


class MoveBlocksRequest(BaseModel):
    positions: list[int] = Field(..., min_length=1)
    destination: int = Field(..., ge=0)


class SetEventRequest(BaseModel):
    """Empty (or whitespace-only) text clears the day."""

    text: str = ""


class EventItem(BaseModel):
    day: date
    text: str


class UndoResult(BaseModel):
    restored: bool


class ErrorDetail(BaseModel):
    """Error detail in the response body."""

    message: str
    type: str = "invalid_request_error"
    code: str | None = None


class ErrorResponse(BaseModel):
    """Error envelope returned with 4xx responses."""

    error: ErrorDetail
