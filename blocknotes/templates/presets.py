"""Built-in page templates and their expansion into blocks.

Templates are plain data. :func:`expand` turns one into a fresh list of
:class:`~blocknotes.pages.models.Block` objects; every call mints new ids,
so two pages created from the same template never share block identities.

Example:
    blocks = expand(get_template("todo"))
    # [Block(type="todo", content="Task 1"), Block(type="todo", content="Task 2")]
"""

from blocknotes.pages.models import Block
from blocknotes.templates.models import BlockRecipe, Template, TemplateName

TEMPLATES: dict[str, Template] = {
    template.name: template
    for template in (
        Template(
            name="blank",
            title="New Page",
            blocks=(BlockRecipe(type="text"),),
        ),
        Template(
            name="todo",
            title="To-Do List",
            blocks=(
                BlockRecipe(type="todo", content="Task 1"),
                BlockRecipe(type="todo", content="Task 2"),
            ),
        ),
        Template(
            name="calendar",
            title="Calendar",
            blocks=(BlockRecipe(type="calendar"),),
        ),
        Template(
            name="checklist",
            title="Checklist",
            blocks=(
                BlockRecipe(type="todo", content="Buy milk"),
                BlockRecipe(type="todo", content="Call mom"),
                BlockRecipe(type="todo", content="Finish project"),
                BlockRecipe(type="text", content="Add more items below"),
            ),
        ),
        Template(
            name="planner",
            title="Planner",
            blocks=(
                BlockRecipe(type="text", content="Goals"),
                BlockRecipe(type="todo", content="First goal"),
                BlockRecipe(type="calendar"),
            ),
        ),
    )
}


def get_template(name: TemplateName) -> Template:
    """Look up a built-in template by name.

    Raises:
        KeyError: If no template has that name
    """
    return TEMPLATES[name]


def list_templates() -> list[Template]:
    """Return all built-in templates in picker order."""
    return list(TEMPLATES.values())


def expand(template: Template) -> list[Block]:
    """Instantiate a template's blocks, each with a freshly minted id."""
    return [Block(type=recipe.type, content=recipe.content) for recipe in template.blocks]
