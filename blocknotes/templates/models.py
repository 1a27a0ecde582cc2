"""Pydantic models for page templates."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from blocknotes.pages.models import BlockType

TemplateName = Literal["blank", "todo", "calendar", "checklist", "planner"]


class BlockRecipe(BaseModel):
    """Shape of one block a template produces (everything but the id)."""

    model_config = ConfigDict(frozen=True)

    type: BlockType
    content: str = ""


class Template(BaseModel):
    """A named, immutable recipe for a page's initial blocks.

    Attributes:
        name: Stable identifier used by the template picker
        title: Title given to pages created from this template
        blocks: Recipes for the initial blocks, in page order
    """

    model_config = ConfigDict(frozen=True)

    name: TemplateName
    title: str
    blocks: tuple[BlockRecipe, ...] = Field(default_factory=tuple)
