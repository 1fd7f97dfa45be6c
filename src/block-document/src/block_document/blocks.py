"""Block model for prompt documents.

A document is an ordered, never-empty tuple of blocks. There are exactly two
block kinds: editable text and atomic prompt snapshots.
"""

import uuid
from dataclasses import dataclass, field, replace
from typing import Literal, Union


def new_block_id() -> str:
    """Generate a process-unique block identifier.

    Returns:
        UUID4 string (e.g., "f47ac10b-58cc-4372-a567-0e02b2c3d479")
    """
    return str(uuid.uuid4())


@dataclass(frozen=True)
class TextBlock:
    """Editable run of text.

    Attributes:
        id: Block identifier
        content: Text content; embedded newlines stand for adjacent paragraphs
    """

    id: str = field(default_factory=new_block_id)
    content: str = ""
    kind: Literal["text"] = "text"


@dataclass(frozen=True)
class PromptBlock:
    """Atomic reference to a saved prompt.

    IMPORTANT: title/content/tags/created_at are a snapshot taken when the
    block was inserted. Later edits to the saved prompt never reach it.

    Attributes:
        id: Block identifier (fresh per insertion)
        source_id: Identifier of the saved prompt this block was taken from
        title: Prompt title at insertion time
        content: Prompt text at insertion time
        tags: Prompt tags at insertion time
        created_at: Prompt creation timestamp (milliseconds since epoch)
    """

    id: str
    source_id: str
    title: str
    content: str
    tags: tuple[str, ...] = ()
    created_at: int = 0
    kind: Literal["prompt"] = "prompt"


Block = Union[TextBlock, PromptBlock]


def empty_document() -> tuple[Block, ...]:
    """Return a document holding a single empty text block."""
    return (TextBlock(),)


def index_of(items, item_id: str) -> int:
    """Find position of the item whose ``id`` equals ``item_id``.

    Returns:
        Index in ``items``, or -1 when no item matches
    """
    for i, item in enumerate(items):
        if item.id == item_id:
            return i
    return -1


def update_text(
    blocks: tuple[Block, ...], block_id: str, content: str
) -> tuple[Block, ...]:
    """Replace the content of a text block, keeping its identity.

    Args:
        blocks: Current document
        block_id: Text block to edit
        content: New content

    Returns:
        New document, or ``blocks`` itself when the id is unknown or names
        a prompt block
    """
    i = index_of(blocks, block_id)
    if i < 0 or not isinstance(blocks[i], TextBlock):
        return blocks
    if blocks[i].content == content:
        return blocks
    return blocks[:i] + (replace(blocks[i], content=content),) + blocks[i + 1:]
