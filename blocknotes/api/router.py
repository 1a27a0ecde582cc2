"""FastAPI router exposing the page store to a UI host."""

from datetime import date
from functools import lru_cache
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse

from blocknotes.api.models import (
    CreateBlockRequest,
    CreatePageRequest,
    DeleteBlocksRequest,
    EditBlockRequest,
    ErrorDetail,
    ErrorResponse,
    EventItem,
    MoveBlocksRequest,
    MovePageRequest,
    RenamePageRequest,
    SetEventRequest,
    UndoResult,
)
from blocknotes.calendar.grid import events_sorted, generate_month_grid, month_weeks, shift_month
from blocknotes.calendar.models import AgendaEntry, MonthGrid
from blocknotes.config import get_settings
from blocknotes.dependencies import StorageClient, logger
from blocknotes.export.markdown import page_to_markdown
from blocknotes.pages.models import Block, Page
from blocknotes.pages.store import PageStore
from blocknotes.persistence.gateway import PersistenceGateway
from blocknotes.templates.models import Template
from blocknotes.templates.presets import get_template, list_templates
from blocknotes.undo.coordinator import UndoCoordinator
from blocknotes.undo.models import UndoStatus

router = APIRouter(prefix="/v1", tags=["pages"])


@lru_cache
def get_page_store() -> PageStore:
    """FastAPI dependency provider for the process-wide PageStore."""
    settings = get_settings()
    gateway = PersistenceGateway(StorageClient(root=settings.storage_path), settings.storage_key)
    store = PageStore.open(gateway, UndoCoordinator(settings.undo_window_seconds))
    logger.info(
        "page_store_opened",
        extra={"storage_path": str(settings.storage_path), "pages": len(store.pages)},
    )
    return store


def _not_found(message: str, code: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=ErrorResponse(
            error=ErrorDetail(message=message, type="not_found_error", code=code)
        ).model_dump(),
    )


def _bad_request(message: str, code: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=ErrorResponse(error=ErrorDetail(message=message, code=code)).model_dump(),
    )


def _page_or_404(store: PageStore, page_id: UUID) -> Page:
    page = store.get_page(page_id)
    if page is None:
        raise _not_found(f"Page {page_id} not found.", "page_not_found")
    return page


def _block_or_404(store: PageStore, page_id: UUID, block_id: UUID) -> Block:
    _page_or_404(store, page_id)
    block = store.get_block(page_id, block_id)
    if block is None:
        raise _not_found(f"Block {block_id} not found on page {page_id}.", "block_not_found")
    return block


# =============================================================================
# Pages
# =============================================================================


@router.get("/pages")
async def list_pages(store: PageStore = Depends(get_page_store)) -> list[Page]:
    return store.pages


@router.post("/pages", status_code=status.HTTP_201_CREATED)
async def create_page(
    request: CreatePageRequest, store: PageStore = Depends(get_page_store)
) -> Page:
    """Create a page, filled from a template when one is named."""
    template = get_template(request.template) if request.template else None
    return store.add_page(template, title=request.title)


@router.get("/pages/{page_id}")
async def read_page(page_id: UUID, store: PageStore = Depends(get_page_store)) -> Page:
    return _page_or_404(store, page_id)


@router.patch("/pages/{page_id}")
async def rename_page(
    page_id: UUID, request: RenamePageRequest, store: PageStore = Depends(get_page_store)
) -> Page:
    if not store.rename_page(page_id, request.title):
        raise _not_found(f"Page {page_id} not found.", "page_not_found")
    return _page_or_404(store, page_id)


@router.delete("/pages/{page_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_page(page_id: UUID, store: PageStore = Depends(get_page_store)) -> None:
    if not store.delete_page(page_id):
        raise _not_found(f"Page {page_id} not found.", "page_not_found")


@router.post("/pages/move")
async def move_page(
    request: MovePageRequest, store: PageStore = Depends(get_page_store)
) -> list[Page]:
    if not store.move_page(request.source, request.destination):
        raise _bad_request(f"No page at position {request.source}.", "invalid_position")
    return store.pages


@router.get("/pages/{page_id}/markdown", response_class=PlainTextResponse)
async def export_page(page_id: UUID, store: PageStore = Depends(get_page_store)) -> str:
    """Export a page as a markdown note with frontmatter."""
    return page_to_markdown(_page_or_404(store, page_id))


# =============================================================================
# Blocks
# =============================================================================


@router.post("/pages/{page_id}/blocks", status_code=status.HTTP_201_CREATED)
async def create_block(
    page_id: UUID, request: CreateBlockRequest, store: PageStore = Depends(get_page_store)
) -> Block:
    block = store.add_block(page_id, request.type, request.content)
    if block is None:
        raise _not_found(f"Page {page_id} not found.", "page_not_found")
    return block


@router.patch("/pages/{page_id}/blocks/{block_id}")
async def edit_block(
    page_id: UUID,
    block_id: UUID,
    request: EditBlockRequest,
    store: PageStore = Depends(get_page_store),
) -> Block:
    block = _block_or_404(store, page_id, block_id)
    if not store.edit_block(page_id, block_id, request.content):
        raise _bad_request(f"{block.type} blocks have no editable content.", "wrong_block_type")
    return _block_or_404(store, page_id, block_id)


@router.post("/pages/{page_id}/blocks/{block_id}/toggle")
async def toggle_block(
    page_id: UUID, block_id: UUID, store: PageStore = Depends(get_page_store)
) -> Block:
    block = _block_or_404(store, page_id, block_id)
    if not store.toggle_block(page_id, block_id):
        raise _bad_request(f"{block.type} blocks cannot be completed.", "wrong_block_type")
    return _block_or_404(store, page_id, block_id)


@router.post("/pages/{page_id}/blocks/delete")
async def delete_blocks(
    page_id: UUID, request: DeleteBlocksRequest, store: PageStore = Depends(get_page_store)
) -> UndoStatus:
    """Delete blocks by position; the response describes the undo offer."""
    _page_or_404(store, page_id)
    if store.delete_blocks(page_id, request.positions) is None:
        raise _bad_request("None of the positions exist on this page.", "invalid_position")
    return store.undo_coordinator.status()


@router.post("/pages/{page_id}/blocks/move")
async def move_blocks(
    page_id: UUID, request: MoveBlocksRequest, store: PageStore = Depends(get_page_store)
) -> Page:
    _page_or_404(store, page_id)
    if not store.move_blocks(page_id, request.positions, request.destination):
        raise _bad_request("None of the positions exist on this page.", "invalid_position")
    return _page_or_404(store, page_id)


# =============================================================================
# Calendar
# =============================================================================


@router.get("/pages/{page_id}/blocks/{block_id}/events")
async def list_events(
    page_id: UUID, block_id: UUID, store: PageStore = Depends(get_page_store)
) -> list[EventItem]:
    block = _block_or_404(store, page_id, block_id)
    return [EventItem(day=day, text=text) for day, text in events_sorted(block)]


@router.put("/pages/{page_id}/blocks/{block_id}/events/{day}")
async def set_event(
    page_id: UUID,
    block_id: UUID,
    day: date,
    request: SetEventRequest,
    store: PageStore = Depends(get_page_store),
) -> Block:
    """Set the note for a day; empty text clears it."""
    block = _block_or_404(store, page_id, block_id)
    if not store.set_event(page_id, block_id, day, request.text):
        raise _bad_request(f"{block.type} blocks cannot hold events.", "wrong_block_type")
    return _block_or_404(store, page_id, block_id)


@router.get("/calendar/grid")
async def month_grid(
    month: date | None = None,
    offset: int = 0,
    first_weekday: int | None = Query(default=None, ge=0, le=6),
) -> MonthGrid:
    """Lay out a month; ``offset`` navigates relative to ``month`` (default: today)."""
    try:
        first = shift_month(month or date.today(), offset)
    except (ValueError, OverflowError) as e:
        raise _bad_request(f"Month is out of range: {e}", "invalid_month") from e
    weekday = get_settings().first_weekday if first_weekday is None else first_weekday
    days = generate_month_grid(first, weekday)
    return MonthGrid(
        year=first.year,
        month=first.month,
        first_weekday=weekday,
        days=days,
        weeks=month_weeks(days),
    )


@router.get("/calendar/agenda")
async def agenda(store: PageStore = Depends(get_page_store)) -> list[AgendaEntry]:
    return store.agenda()


# =============================================================================
# Undo & templates
# =============================================================================


@router.get("/undo")
async def undo_status(store: PageStore = Depends(get_page_store)) -> UndoStatus:
    return store.undo_coordinator.status()


@router.post("/undo")
async def undo(store: PageStore = Depends(get_page_store)) -> UndoResult:
    """Generic undo trigger: restores the last block deletion if still pending."""
    return UndoResult(restored=store.undo())


@router.get("/templates")
async def templates() -> list[Template]:
    return list_templates()
