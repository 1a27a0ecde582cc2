"""Tests for the undo coordinator and its position helpers."""

from uuid import uuid4

import pytest

from blocknotes.pages.models import Block
from blocknotes.tests.conftest import FakeClock, RecordingUndoManager
from blocknotes.undo.coordinator import (
    UndoCoordinator,
    UndoManager,
    remove_positions,
    restore_positions,
)
from blocknotes.undo.models import PendingDelete, RemovedBlock


def _blocks(n: int) -> list[Block]:
    return [Block(type="todo", content=f"b{i}") for i in range(n)]


# =============================================================================
# Position Helper Tests
# =============================================================================


class TestPositions:
    """Tests for remove_positions and restore_positions."""

    @pytest.mark.parametrize(
        "positions",
        [{0}, {5}, {1, 3}, {0, 2, 4}, {0, 5}, {1, 2, 3}, {0, 1, 2, 3, 4, 5}, {4, 1}],
    )
    def test_restore_is_exact_inverse(self, positions: set[int]) -> None:
        """Test that removing then restoring any position set gives back the original."""
        original = _blocks(6)

        remaining, removed = remove_positions(original, positions)
        restored = restore_positions(remaining, removed)

        assert len(remaining) == 6 - len(positions)
        assert restored == original
        assert [b.id for b in restored] == [b.id for b in original]

    def test_removed_records_original_positions(self) -> None:
        """Test that each removed block carries the index it came from."""
        original = _blocks(5)

        remaining, removed = remove_positions(original, [3, 1])

        assert [r.position for r in removed] == [1, 3]
        assert [r.block.content for r in removed] == ["b1", "b3"]
        assert [b.content for b in remaining] == ["b0", "b2", "b4"]

    def test_invalid_positions_ignored(self) -> None:
        """Test that duplicates and out-of-range positions are ignored."""
        original = _blocks(3)

        remaining, removed = remove_positions(original, [1, 1, -1, 7])

        assert [r.position for r in removed] == [1]
        assert len(remaining) == 2

    def test_snapshot_is_independent(self) -> None:
        """Test that editing the original block does not change the snapshot."""
        original = _blocks(2)

        _, removed = remove_positions(original, {0})
        original[0].content = "edited"

        assert removed[0].block.content == "b0"

    def test_restore_order_of_snapshot_does_not_matter(self) -> None:
        """Test that restoration sorts the snapshot itself."""
        original = _blocks(5)
        remaining, removed = remove_positions(original, {0, 2, 4})

        assert restore_positions(remaining, reversed(removed)) == original

    def test_restore_clamps_past_end(self) -> None:
        """Test that a position past the current end appends."""
        block = Block(content="late")

        restored = restore_positions([], [RemovedBlock(position=3, block=block)])

        assert restored == [block]


# =============================================================================
# Coordinator Tests
# =============================================================================


class TestUndoCoordinator:
    """Tests for the pending-undo state machine."""

    def _begin(self, coordinator: UndoCoordinator, calls: list[PendingDelete]) -> PendingDelete:
        _, removed = remove_positions(_blocks(3), {1})

        def restore(pending: PendingDelete) -> bool:
            calls.append(pending)
            return True

        return coordinator.begin(uuid4(), removed, restore)

    def test_idle_initially(self, coordinator: UndoCoordinator) -> None:
        """Test that a fresh coordinator has nothing to undo."""
        assert coordinator.pending is None
        assert coordinator.undo() is False
        assert coordinator.status().pending is False

    def test_undo_within_window(self, coordinator: UndoCoordinator, clock: FakeClock) -> None:
        """Test that undo before expiry restores and returns to idle."""
        calls: list[PendingDelete] = []
        pending = self._begin(coordinator, calls)
        clock.advance(3.9)

        assert coordinator.undo() is True
        assert calls == [pending]
        assert coordinator.pending is None
        assert coordinator.undo() is False

    def test_expiry(self, coordinator: UndoCoordinator, clock: FakeClock) -> None:
        """Test that once the window elapses undo has no effect."""
        calls: list[PendingDelete] = []
        self._begin(coordinator, calls)
        clock.advance(4.0)

        assert coordinator.pending is None
        assert coordinator.undo() is False
        assert calls == []

    def test_new_delete_supersedes(self, coordinator: UndoCoordinator) -> None:
        """Test that only the latest delete can be undone."""
        calls: list[PendingDelete] = []
        first = self._begin(coordinator, calls)
        second = self._begin(coordinator, calls)

        assert coordinator.undo(first.token) is False
        assert coordinator.undo() is True
        assert calls == [second]

    def test_stale_expiry_timer_is_ignored(
        self, coordinator: UndoCoordinator, clock: FakeClock
    ) -> None:
        """Test that a timer from a superseded delete does not close the new window."""
        calls: list[PendingDelete] = []
        first = self._begin(coordinator, calls)
        clock.advance(2.0)
        second = self._begin(coordinator, calls)

        assert coordinator.expire(first.token) is False
        assert coordinator.pending == second

        clock.advance(3.0)
        assert coordinator.undo() is True

    def test_explicit_expire(self, coordinator: UndoCoordinator) -> None:
        """Test that the host timer callback makes the delete permanent."""
        calls: list[PendingDelete] = []
        pending = self._begin(coordinator, calls)

        assert coordinator.expire(pending.token) is True
        assert coordinator.undo() is False

    def test_status(self, coordinator: UndoCoordinator, clock: FakeClock) -> None:
        """Test the status offered to the UI while a delete is pending."""
        _, removed = remove_positions(_blocks(4), {0, 2})
        page_id = uuid4()
        coordinator.begin(page_id, removed, lambda p: True)
        clock.advance(1.5)

        status = coordinator.status()

        assert status.pending is True
        assert status.count == 2
        assert status.message == "2 blocks deleted"
        assert status.page_id == page_id
        assert status.expires_in == pytest.approx(2.5)

    def test_singular_message(self, coordinator: UndoCoordinator) -> None:
        """Test the message for a single deleted block."""
        pending = self._begin(coordinator, [])

        assert pending.message == "1 block deleted"

    def test_restore_failure_still_consumes(self, coordinator: UndoCoordinator) -> None:
        """Test that a restore that finds nothing returns False and goes idle."""
        _, removed = remove_positions(_blocks(2), {0})
        coordinator.begin(uuid4(), removed, lambda p: False)

        assert coordinator.undo() is False
        assert coordinator.pending is None


class TestHostUndoManager:
    """Tests for registering undo actions with a host facility."""

    def test_manager_satisfies_protocol(self) -> None:
        assert isinstance(RecordingUndoManager(), UndoManager)

    def test_action_uses_same_path(self, clock: FakeClock) -> None:
        """Test that the host action restores through the coordinator."""
        manager = RecordingUndoManager()
        coordinator = UndoCoordinator(window_seconds=4.0, clock=clock, undo_manager=manager)
        restored: list[PendingDelete] = []
        _, removed = remove_positions(_blocks(3), {2})

        pending = coordinator.begin(uuid4(), removed, lambda p: restored.append(p) is None)

        assert len(manager.actions) == 1
        action = manager.actions[0]
        assert action.label == "Undo: 1 block deleted"
        assert action.perform() is True
        assert restored == [pending]
        # Already consumed: neither path can restore twice
        assert action.perform() is False
        assert coordinator.undo() is False

    def test_superseded_action_does_nothing(self, clock: FakeClock) -> None:
        """Test that an action for an older delete cannot undo a newer one."""
        manager = RecordingUndoManager()
        coordinator = UndoCoordinator(window_seconds=4.0, clock=clock, undo_manager=manager)
        _, removed = remove_positions(_blocks(3), {0})
        coordinator.begin(uuid4(), removed, lambda p: True)
        coordinator.begin(uuid4(), removed, lambda p: True)

        old_action, new_action = manager.actions

        assert old_action.perform() is False
        assert new_action.perform() is True
