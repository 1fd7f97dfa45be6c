"""Insertion engine for prompt blocks."""

from dataclasses import dataclass, field

from block_document.blocks import Block, PromptBlock, TextBlock, new_block_id


@dataclass(frozen=True)
class PromptRef:
    """Saved prompt fields to snapshot into a new prompt block."""

    source_id: str
    title: str
    content: str
    tags: tuple[str, ...] = field(default_factory=tuple)
    created_at: int = 0


def insert_prompt(
    blocks: tuple[Block, ...], prompt: PromptRef, at_index: int
) -> tuple[Block, ...]:
    """Insert a snapshot of ``prompt`` as a new atomic block.

    The new block always gets a fresh id. If it is not immediately followed
    by a text block (end of document, or another prompt block next), an empty
    text block is inserted after it so there is always somewhere to type.

    Args:
        blocks: Current document
        prompt: Prompt to snapshot
        at_index: Insertion index in [0, len(blocks)]

    Returns:
        New document, or ``blocks`` unchanged for an out-of-range index
    """
    if not 0 <= at_index <= len(blocks):
        return blocks

    block = PromptBlock(
        id=new_block_id(),
        source_id=prompt.source_id,
        title=prompt.title,
        content=prompt.content,
        tags=tuple(prompt.tags),
        created_at=prompt.created_at,
    )

    inserted: tuple[Block, ...] = (block,)
    following = blocks[at_index] if at_index < len(blocks) else None
    if not isinstance(following, TextBlock):
        inserted += (TextBlock(),)

    return blocks[:at_index] + inserted + blocks[at_index:]


def append_prompt(blocks: tuple[Block, ...], prompt: PromptRef) -> tuple[Block, ...]:
    """Insert ``prompt`` at the end of the document."""
    return insert_prompt(blocks, prompt, len(blocks))


def has_content(blocks: tuple[Block, ...]) -> bool:
    """Check whether a document is worth saving.

    True if it holds any prompt block or any text block with non-whitespace
    content.
    """
    for block in blocks:
        if isinstance(block, PromptBlock):
            return True
        if isinstance(block, TextBlock) and block.content.strip():
            return True
    return False
