"""Models for undoable block deletion."""

from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from pydantic import BaseModel, Field

from blocknotes.pages.models import Block


@dataclass(frozen=True)
class RemovedBlock:
    """A deleted block together with the index it occupied."""

    position: int
    block: Block


@dataclass(frozen=True)
class PendingDelete:
    """Snapshot of the most recent block deletion.

    Attributes:
        token: Identifies this delete; superseded tokens are ignored
        page_id: Page the blocks were removed from
        removed: Removed blocks in ascending original position
        expires_at: Clock reading after which undo is no longer offered
    """

    token: int
    page_id: UUID
    removed: tuple[RemovedBlock, ...]
    expires_at: float

    @property
    def count(self) -> int:
        return len(self.removed)

    @property
    def message(self) -> str:
        noun = "block" if self.count == 1 else "blocks"
        return f"{self.count} {noun} deleted"


@dataclass(frozen=True)
class UndoAction:
    """Command handed to a host undo facility.

    Performing it runs the coordinator's normal undo path for the delete it
    was created for; once that delete is superseded or expired it does
    nothing.
    """

    token: int
    label: str
    _perform: Callable[[int], bool]

    def perform(self) -> bool:
        return self._perform(self.token)


class UndoStatus(BaseModel):
    """What the host should show about the pending delete, if any."""

    pending: bool = False
    count: int = Field(default=0, ge=0)
    message: str = ""
    page_id: UUID | None = None
    expires_in: float = Field(default=0.0, ge=0.0)
