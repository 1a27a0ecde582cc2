"""Undo window for block deletion.

Only the latest delete can be undone, and only until its window runs out.
A delete snapshots the removed blocks with their original positions; undo
puts them back in ascending position order, which restores the exact prior
order even when the deleted positions were scattered.

States:
    Idle -> (delete) -> PendingUndo
    PendingUndo -> (undo) -> Idle, blocks restored
    PendingUndo -> (window elapses) -> Idle, delete is permanent
    PendingUndo -> (another delete) -> PendingUndo for the new delete only
"""

import itertools
import time
from collections.abc import Callable, Iterable
from typing import Protocol, runtime_checkable
from uuid import UUID

from blocknotes.dependencies import logger
from blocknotes.pages.models import Block
from blocknotes.undo.models import PendingDelete, RemovedBlock, UndoAction, UndoStatus

RestoreCallback = Callable[[PendingDelete], bool]


@runtime_checkable
class UndoManager(Protocol):
    """Host-provided undo facility (menu item, shake gesture, keyboard shortcut)."""

    def register(self, action: UndoAction) -> None:
        """Offer *action* as the thing the next generic undo should perform."""
        ...


# =============================================================================
# Position Helpers
# =============================================================================


def remove_positions(
    blocks: list[Block], positions: Iterable[int]
) -> tuple[list[Block], list[RemovedBlock]]:
    """Split ``blocks`` into the survivors and the blocks at ``positions``.

    Duplicate positions collapse and out-of-range positions are ignored.

    Returns:
        ``(remaining, removed)`` where ``removed`` is in ascending position
        order and holds deep copies of the removed blocks
    """
    wanted = {p for p in positions if 0 <= p < len(blocks)}
    remaining = [block for index, block in enumerate(blocks) if index not in wanted]
    removed = [
        RemovedBlock(position=index, block=blocks[index].model_copy(deep=True))
        for index in sorted(wanted)
    ]
    return remaining, removed


def restore_positions(blocks: list[Block], removed: Iterable[RemovedBlock]) -> list[Block]:
    """Re-insert removed blocks at their original positions.

    Insertions run lowest position first so each one lands where it was
    before any of the others were taken out.
    """
    restored = list(blocks)
    for item in sorted(removed, key=lambda r: r.position):
        restored.insert(min(item.position, len(restored)), item.block.model_copy(deep=True))
    return restored


# =============================================================================
# Coordinator
# =============================================================================


class UndoCoordinator:
    """Tracks the single pending block deletion and its undo window."""

    def __init__(
        self,
        window_seconds: float = 4.0,
        clock: Callable[[], float] = time.monotonic,
        undo_manager: UndoManager | None = None,
    ) -> None:
        self.window_seconds = window_seconds
        self.clock = clock
        self.undo_manager = undo_manager
        self._tokens = itertools.count(1)
        self._pending: PendingDelete | None = None
        self._restore: RestoreCallback | None = None

    @property
    def pending(self) -> PendingDelete | None:
        """The delete that can still be undone, if any."""
        if self._pending is not None and self.clock() >= self._pending.expires_at:
            self.expire(self._pending.token)
        return self._pending

    def begin(
        self,
        page_id: UUID,
        removed: Iterable[RemovedBlock],
        restore: RestoreCallback,
        perform: Callable[[int], bool] | None = None,
    ) -> PendingDelete:
        """Open an undo window for a delete that has just been applied.

        Any earlier pending delete is dropped and becomes permanent.

        Args:
            page_id: Page the blocks were removed from
            removed: Snapshot from :func:`remove_positions`
            restore: Puts a snapshot back into the page; returns success
            perform: What the host undo action calls with its token; defaults
                to :meth:`undo`
        """
        if self._pending is not None:
            logger.info(
                "undo_superseded",
                extra={"token": self._pending.token, "page_id": str(self._pending.page_id)},
            )
        pending = PendingDelete(
            token=next(self._tokens),
            page_id=page_id,
            removed=tuple(sorted(removed, key=lambda r: r.position)),
            expires_at=self.clock() + self.window_seconds,
        )
        self._pending = pending
        self._restore = restore

        if self.undo_manager is not None:
            self.undo_manager.register(
                UndoAction(
                    token=pending.token,
                    label=f"Undo: {pending.message}",
                    _perform=perform or self.undo,
                )
            )
        return pending

    def undo(self, token: int | None = None) -> bool:
        """Restore the pending delete.

        Args:
            token: Only undo if this is still the pending delete. ``None``
                means whichever delete is pending.

        Returns:
            True if blocks were restored, False if there was nothing to undo
        """
        pending = self.pending
        if pending is None or (token is not None and token != pending.token):
            logger.debug("undo_ignored", extra={"token": token})
            return False

        restore = self._restore
        self._pending = None
        self._restore = None
        restored = restore(pending) if restore is not None else False
        logger.info(
            "undo_applied" if restored else "undo_target_missing",
            extra={"token": pending.token, "page_id": str(pending.page_id), "count": pending.count},
        )
        return restored

    def expire(self, token: int | None = None) -> bool:
        """Close the undo window, making the delete permanent.

        This is what a host timer calls when the window runs out. A timer left
        over from a superseded delete passes a stale token and is ignored.
        """
        if self._pending is None or (token is not None and token != self._pending.token):
            return False
        logger.debug("undo_expired", extra={"token": self._pending.token})
        self._pending = None
        self._restore = None
        return True

    def status(self) -> UndoStatus:
        pending = self.pending
        if pending is None:
            return UndoStatus()
        return UndoStatus(
            pending=True,
            count=pending.count,
            message=pending.message,
            page_id=pending.page_id,
            expires_in=max(pending.expires_at - self.clock(), 0.0),
        )
