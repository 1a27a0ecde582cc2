"""Export a page as a markdown note with YAML frontmatter.

Example output:
    ---
    created: '2025-10-23T10:30:00+00:00'
    id: 0b8f...
    title: To-Do List
    ---
    # To-Do List

    - [ ] Task 1
    - [x] Task 2
"""

import frontmatter

from blocknotes.calendar.grid import events_sorted
from blocknotes.pages.models import Block, Page


def block_to_markdown(block: Block) -> str:
    """Render one block as a markdown fragment (may be empty)."""
    if block.type == "todo":
        mark = "x" if block.is_completed else " "
        return f"- [{mark}] {block.content}"
    if block.type == "calendar":
        return "\n\n".join(f"## {day.isoformat()}\n\n{text}" for day, text in events_sorted(block))
    return block.content


def page_to_markdown(page: Page) -> str:
    """Build the markdown note for a page, frontmatter included.

    Consecutive todo blocks are kept together as one list; other blocks are
    separated by blank lines. Empty blocks are skipped.
    """
    parts: list[str] = [f"# {page.title}"]
    previous_type: str | None = None
    for block in page.blocks:
        fragment = block_to_markdown(block)
        if not fragment:
            continue
        if block.type == "todo" and previous_type == "todo":
            parts[-1] = f"{parts[-1]}\n{fragment}"
        else:
            parts.append(fragment)
        previous_type = block.type

    post = frontmatter.Post("\n\n".join(parts))
    post.metadata = {
        "id": str(page.id),
        "title": page.title,
        "created": page.created_at.isoformat(),
    }
    return frontmatter.dumps(post)
