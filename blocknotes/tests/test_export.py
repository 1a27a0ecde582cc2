"""Tests for markdown export."""

from datetime import date

import frontmatter

from blocknotes.export.markdown import block_to_markdown, page_to_markdown
from blocknotes.pages.models import Block, Page


class TestBlockToMarkdown:
    """Tests for single-block rendering."""

    def test_text(self) -> None:
        assert block_to_markdown(Block(content="Hello")) == "Hello"

    def test_todo(self) -> None:
        assert block_to_markdown(Block(type="todo", content="Open")) == "- [ ] Open"
        assert block_to_markdown(Block(type="todo", content="Done", is_completed=True)) == (
            "- [x] Done"
        )

    def test_calendar_uses_day_headings(self) -> None:
        """Test that events become date headings in day order."""
        block = Block(
            type="calendar",
            events={date(2025, 11, 1): "Doctor appointment", date(2025, 10, 25): "Team meeting"},
        )

        assert block_to_markdown(block) == (
            "## 2025-10-25\n\nTeam meeting\n\n## 2025-11-01\n\nDoctor appointment"
        )

    def test_empty_calendar(self) -> None:
        assert block_to_markdown(Block(type="calendar")) == ""


class TestPageToMarkdown:
    """Tests for whole-page export."""

    def test_frontmatter_and_body(self) -> None:
        """Test that the note carries page metadata and grouped todos."""
        page = Page(
            title="Errands",
            blocks=[
                Block(content="Saturday"),
                Block(type="todo", content="Buy milk"),
                Block(type="todo", content="Call mom", is_completed=True),
                Block(content=""),
                Block(type="calendar", events={date(2025, 10, 25): "Market"}),
            ],
        )

        post = frontmatter.loads(page_to_markdown(page))

        assert post.metadata["id"] == str(page.id)
        assert post.metadata["title"] == "Errands"
        assert post.metadata["created"] == page.created_at.isoformat()
        assert post.content == (
            "# Errands\n\n"
            "Saturday\n\n"
            "- [ ] Buy milk\n- [x] Call mom\n\n"
            "## 2025-10-25\n\nMarket"
        )

    def test_export_does_not_mutate(self) -> None:
        page = Page(blocks=[Block(type="calendar", events={date(2025, 1, 2): "b"})])
        before = page.model_copy(deep=True)

        page_to_markdown(page)

        assert page == before
