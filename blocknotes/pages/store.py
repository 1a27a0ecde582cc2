"""Page collection store with write-through persistence.

:class:`PageStore` is the only way the host mutates pages. Every method that
changes something saves the whole collection through the
:class:`~blocknotes.persistence.gateway.PersistenceGateway` before returning.
Pages and blocks are addressed by id (blocks always by ``(page_id, block_id)``);
an id that is not found turns the call into a no-op that returns ``None`` or
``False`` and saves nothing.

Reads hand out deep copies, so callers never hold a live reference into the
collection.

Example:
    store = PageStore.open(gateway, UndoCoordinator())
    page = store.add_page(get_template("todo"))
    store.toggle_block(page.id, page.blocks[0].id)
    store.delete_blocks(page.id, {0})
    store.undo()
"""

import threading
from collections.abc import Callable, Iterable
from datetime import date, datetime
from uuid import UUID

from blocknotes.calendar.grid import collect_agenda, set_event
from blocknotes.calendar.models import AgendaEntry
from blocknotes.dependencies import logger
from blocknotes.pages.models import DEFAULT_PAGE_TITLE, Block, BlockType, Page
from blocknotes.persistence.gateway import PersistenceGateway
from blocknotes.templates.models import Template
from blocknotes.templates.presets import expand
from blocknotes.undo.coordinator import UndoCoordinator, remove_positions, restore_positions
from blocknotes.undo.models import PendingDelete


def move_items(items: list, positions: Iterable[int], destination: int) -> list:
    """Move the items at ``positions`` so they sit before index ``destination``.

    ``destination`` is an index into the list *before* the move (``len(items)``
    means the end). Moved items keep their relative order.

    Examples:
        >>> move_items(["a", "b", "c", "d"], {0}, 3)
        ['b', 'c', 'a', 'd']
        >>> move_items(["a", "b", "c", "d"], {3}, 0)
        ['d', 'a', 'b', 'c']
    """
    wanted = {p for p in positions if 0 <= p < len(items)}
    moving = [items[p] for p in sorted(wanted)]
    staying = [item for index, item in enumerate(items) if index not in wanted]
    destination = max(0, min(destination, len(items)))
    insert_at = destination - sum(1 for p in wanted if p < destination)
    return staying[:insert_at] + moving + staying[insert_at:]


class PageStore:
    """In-memory page collection that saves itself on every change."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        undo: UndoCoordinator | None = None,
        pages: list[Page] | None = None,
    ) -> None:
        self.gateway = gateway
        self.undo_coordinator = undo or UndoCoordinator()
        self._pages: list[Page] = list(pages or [])
        self._lock = threading.RLock()

    @classmethod
    def open(cls, gateway: PersistenceGateway, undo: UndoCoordinator | None = None) -> "PageStore":
        """Create a store populated from whatever the gateway has saved."""
        return cls(gateway, undo, gateway.load())

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _commit(self, event: str, **extra: object) -> None:
        logger.info(event, extra={k: str(v) for k, v in extra.items()})
        self.gateway.save(self._pages)

    def _page_index(self, page_id: UUID) -> int | None:
        for index, page in enumerate(self._pages):
            if page.id == page_id:
                return index
        return None

    def _find_page(self, page_id: UUID) -> Page | None:
        index = self._page_index(page_id)
        if index is None:
            logger.debug("page_not_found", extra={"page_id": str(page_id)})
            return None
        return self._pages[index]

    def _find_block(self, page_id: UUID, block_id: UUID) -> Block | None:
        page = self._find_page(page_id)
        block = page.find_block(block_id) if page is not None else None
        if page is not None and block is None:
            logger.debug(
                "block_not_found", extra={"page_id": str(page_id), "block_id": str(block_id)}
            )
        return block

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def pages(self) -> list[Page]:
        """All pages in sidebar order (copies)."""
        with self._lock:
            return [page.model_copy(deep=True) for page in self._pages]

    def get_page(self, page_id: UUID) -> Page | None:
        with self._lock:
            page = self._find_page(page_id)
            return page.model_copy(deep=True) if page is not None else None

    def get_block(self, page_id: UUID, block_id: UUID) -> Block | None:
        with self._lock:
            block = self._find_block(page_id, block_id)
            return block.model_copy(deep=True) if block is not None else None

    def agenda(self) -> list[AgendaEntry]:
        """Every calendar event on every page, ordered by day."""
        with self._lock:
            return collect_agenda(self._pages)

    # -------------------------------------------------------------------------
    # Pages
    # -------------------------------------------------------------------------

    def add_page(self, template: Template | None = None, title: str | None = None) -> Page:
        """Append a new page, optionally filled from a template.

        The title defaults to the template's title, or "New Page" without one.
        """
        with self._lock:
            if title is None:
                title = template.title if template is not None else DEFAULT_PAGE_TITLE
            page = Page(title=title, blocks=expand(template) if template is not None else [])
            self._pages.append(page)
            self._commit(
                "page_added",
                page_id=page.id,
                template=template.name if template is not None else None,
            )
            return page.model_copy(deep=True)

    def delete_page(self, page_id: UUID) -> bool:
        with self._lock:
            index = self._page_index(page_id)
            if index is None:
                logger.debug("page_not_found", extra={"page_id": str(page_id)})
                return False
            del self._pages[index]
            self._commit("page_deleted", page_id=page_id)
            return True

    def rename_page(self, page_id: UUID, title: str) -> bool:
        with self._lock:
            page = self._find_page(page_id)
            if page is None:
                return False
            page.title = title
            self._commit("page_renamed", page_id=page_id)
            return True

    def move_page(self, source: int, destination: int) -> bool:
        """Move the page at ``source`` to before index ``destination``."""
        with self._lock:
            if not 0 <= source < len(self._pages):
                return False
            self._pages = move_items(self._pages, {source}, destination)
            self._commit("page_moved", source=source, destination=destination)
            return True

    # -------------------------------------------------------------------------
    # Blocks
    # -------------------------------------------------------------------------

    def add_block(self, page_id: UUID, block_type: BlockType, content: str = "") -> Block | None:
        """Append a block to a page. Calendar blocks ignore ``content``."""
        with self._lock:
            page = self._find_page(page_id)
            if page is None:
                return None
            block = Block(type=block_type, content="" if block_type == "calendar" else content)
            page.blocks.append(block)
            self._commit("block_added", page_id=page_id, block_id=block.id, type=block_type)
            return block.model_copy(deep=True)

    def delete_blocks(self, page_id: UUID, positions: Iterable[int]) -> PendingDelete | None:
        """Delete the blocks at ``positions`` and open an undo window.

        Returns:
            The pending delete, or None if nothing was deleted (unknown page
            or no valid positions), in which case any earlier pending delete
            is left alone
        """
        with self._lock:
            page = self._find_page(page_id)
            if page is None:
                return None
            remaining, removed = remove_positions(page.blocks, positions)
            if not removed:
                return None
            page.blocks = remaining
            pending = self.undo_coordinator.begin(
                page_id, removed, self._restore, perform=self.undo
            )
            self._commit("blocks_deleted", page_id=page_id, count=pending.count)
            return pending

    def _restore(self, pending: PendingDelete) -> bool:
        with self._lock:
            page = self._find_page(pending.page_id)
            if page is None:
                return False
            page.blocks = restore_positions(page.blocks, pending.removed)
            self._commit("blocks_restored", page_id=pending.page_id, count=pending.count)
            return True

    def undo(self, token: int | None = None) -> bool:
        """Restore the most recent block deletion if its window is still open.

        Host undo actions registered by :meth:`delete_blocks` call this with
        their token and run under the store lock.
        """
        with self._lock:
            return self.undo_coordinator.undo(token)

    def move_blocks(self, page_id: UUID, positions: Iterable[int], destination: int) -> bool:
        """Reorder blocks; ``destination`` indexes the pre-move order."""
        with self._lock:
            page = self._find_page(page_id)
            if page is None:
                return False
            wanted = {p for p in positions if 0 <= p < len(page.blocks)}
            if not wanted:
                return False
            page.blocks = move_items(page.blocks, wanted, destination)
            self._commit("blocks_moved", page_id=page_id, destination=destination)
            return True

    def update_block(self, page_id: UUID, block_id: UUID, mutator: Callable[[Block], None]) -> bool:
        """Apply ``mutator`` to a block and save.

        The mutator runs against a copy; the page only takes the result if the
        mutator returns normally, the result still validates as a block and
        it keeps the original id, so a failing edit leaves the collection
        untouched.

        Raises:
            Whatever ``mutator`` raises, or ``ValueError`` if it left the
            block in an invalid state
        """
        with self._lock:
            page = self._find_page(page_id)
            index = page.block_index(block_id) if page is not None else None
            if page is None or index is None:
                return False
            draft = page.blocks[index].model_copy(deep=True)
            mutator(draft)
            if draft.id != block_id:
                raise ValueError(f"Mutator changed block id {block_id} to {draft.id}")
            page.blocks[index] = Block.model_validate(draft.model_dump())
            self._commit("block_updated", page_id=page_id, block_id=block_id)
            return True

    def _update_typed(
        self,
        page_id: UUID,
        block_id: UUID,
        allowed: set[str],
        mutator: Callable[[Block], None],
    ) -> bool:
        with self._lock:
            block = self._find_block(page_id, block_id)
            if block is None or block.type not in allowed:
                return False
            return self.update_block(page_id, block_id, mutator)

    def edit_block(self, page_id: UUID, block_id: UUID, content: str) -> bool:
        """Replace the text of a text or todo block."""

        def _set_content(b: Block) -> None:
            b.content = content

        return self._update_typed(page_id, block_id, {"text", "todo"}, _set_content)

    def toggle_block(self, page_id: UUID, block_id: UUID) -> bool:
        """Flip the completion state of a todo block."""

        def _toggle(b: Block) -> None:
            b.is_completed = not b.is_completed

        return self._update_typed(page_id, block_id, {"todo"}, _toggle)

    def set_event(self, page_id: UUID, block_id: UUID, day: date | datetime, text: str) -> bool:
        """Set or clear (empty text) the note for a day on a calendar block."""
        return self._update_typed(
            page_id, block_id, {"calendar"}, lambda b: set_event(b, day, text)
        )
