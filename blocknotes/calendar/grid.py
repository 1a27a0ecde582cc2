"""Month grid layout and day-keyed event storage for calendar blocks.

Everything here works on day keys: plain :class:`datetime.date` values
obtained by truncating a timestamp to local midnight. Two different times on
the same calendar day always map to the same key, so events are stored and
looked up only through :func:`normalize_day`.

Example:
    grid = generate_month_grid(date(2025, 10, 25))
    # [None, None, None, date(2025, 10, 1), ..., date(2025, 10, 31)]

    set_event(block, datetime(2025, 10, 25, 15, 30), "Team meeting")
    events_sorted(block)
    # [(date(2025, 10, 25), "Team meeting")]
"""

import calendar
from collections.abc import Iterable
from datetime import date, datetime

from blocknotes.calendar.models import AgendaEntry
from blocknotes.pages.models import Block, Page

# =============================================================================
# Day Keys
# =============================================================================


def normalize_day(value: date | datetime) -> date:
    """Truncate a date or timestamp to its local calendar day.

    Timezone-aware timestamps are converted to local time first; naive
    timestamps are taken to be local already.

    Examples:
        >>> normalize_day(datetime(2025, 10, 25, 15, 30))
        datetime.date(2025, 10, 25)
        >>> normalize_day(date(2025, 10, 25))
        datetime.date(2025, 10, 25)
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


# =============================================================================
# Month Grid
# =============================================================================


def shift_month(anchor: date | datetime, months: int) -> date:
    """Return the first day of the month ``months`` away from ``anchor``.

    Handles year rollover in both directions.

    Examples:
        >>> shift_month(date(2025, 12, 15), 1)
        datetime.date(2026, 1, 1)
        >>> shift_month(date(2025, 1, 31), -1)
        datetime.date(2024, 12, 1)
    """
    day = normalize_day(anchor)
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    return date(year, month + 1, 1)


def generate_month_grid(
    anchor: date | datetime, first_weekday: int = calendar.SUNDAY
) -> list[date | None]:
    """Lay out the month containing ``anchor`` as a seven-column grid.

    Args:
        anchor: Any day (or timestamp) inside the month to lay out
        first_weekday: Weekday of the leftmost column (0 = Monday, 6 = Sunday)

    Returns:
        ``offset`` empty slots (``None``) so that day 1 lands in its weekday
        column, followed by one date per day of the month. The last week is
        left incomplete.
    """
    first = shift_month(anchor, 0)
    _, days_in_month = calendar.monthrange(first.year, first.month)
    offset = (first.weekday() - first_weekday) % 7

    grid: list[date | None] = [None] * offset
    grid.extend(date(first.year, first.month, d) for d in range(1, days_in_month + 1))
    return grid


def month_weeks(grid: list[date | None]) -> list[list[date | None]]:
    """Cut a month grid into display rows of seven (the last may be short)."""
    return [grid[i : i + 7] for i in range(0, len(grid), 7)]


# =============================================================================
# Events
# =============================================================================


def _require_calendar(block: Block) -> None:
    if block.type != "calendar":
        raise ValueError(f"Block {block.id} is a {block.type} block, not a calendar block")


def set_event(block: Block, day: date | datetime, text: str) -> None:
    """Store, replace or clear the note for one day of a calendar block.

    Text is trimmed first. Empty text removes the day's entry (nothing
    happens if there is none); anything else is stored under the day key.

    Raises:
        ValueError: If the block is not a calendar block
    """
    _require_calendar(block)
    key = normalize_day(day)
    note = text.strip()
    if note:
        block.events[key] = note
    else:
        block.events.pop(key, None)


def event_for(block: Block, day: date | datetime) -> str | None:
    """Return the note stored for a day, or None."""
    return block.events.get(normalize_day(day))


def events_sorted(block: Block) -> list[tuple[date, str]]:
    """Return a block's events in ascending day order."""
    return sorted(block.events.items(), key=lambda item: item[0])


def collect_agenda(pages: Iterable[Page]) -> list[AgendaEntry]:
    """Gather every calendar event across pages, ordered by day.

    Events on the same day keep page order, then block order.
    """
    entries = [
        AgendaEntry(
            page_id=page.id,
            page_title=page.title,
            block_id=block.id,
            day=day,
            text=text,
        )
        for page in pages
        for block in page.blocks
        if block.type == "calendar"
        for day, text in events_sorted(block)
    ]
    # sorted() is stable, so same-day entries stay in page/block order
    return sorted(entries, key=lambda entry: entry.day)
