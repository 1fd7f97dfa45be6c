"""Reorder engine: moving and removing whole blocks.

All functions are pure. They return a new sequence, or the input object
itself when the operation does not apply (unknown id, no-op move).
"""

from dataclasses import dataclass
from typing import Literal, Optional, Sequence, TypeVar

from block_document.blocks import (
    Block,
    PromptBlock,
    TextBlock,
    empty_document,
    index_of,
)


T = TypeVar("T")

DropPosition = Literal["above", "below"]


def _same_kind(items: Sequence[T], result: list[T]) -> Sequence[T]:
    return tuple(result) if isinstance(items, tuple) else result


def move(items: Sequence[T], source_id: str, destination_index: int) -> Sequence[T]:
    """Move one item to a new structural position.

    ``destination_index`` is expressed against the sequence before removal
    ("insert before the item currently at this index"). Removing the source
    first shifts later indices down by one, so a destination past the source
    is adjusted by -1.

    Works on any sequence of objects exposing an ``id`` attribute.

    Args:
        items: Current sequence
        source_id: Identity of the item to move
        destination_index: Insertion index in [0, len(items)]

    Returns:
        Reordered sequence of the same type, or ``items`` unchanged when the
        source is missing, the destination is out of range, or the item
        would land where it already is

    Examples:
        >>> [b.id for b in move(blocks, "c", 0)]  # a, b, c
        ['c', 'a', 'b']
    """
    source = index_of(items, source_id)
    if source < 0:
        return items
    if not 0 <= destination_index <= len(items):
        return items

    effective = destination_index - 1 if source < destination_index else destination_index
    if effective == source:
        return items

    result = list(items)
    item = result.pop(source)
    result.insert(effective, item)
    return _same_kind(items, result)


def move_relative(
    items: Sequence[T],
    source_id: str,
    target_id: str,
    position: DropPosition,
) -> Sequence[T]:
    """Move an item onto another item's upper or lower half.

    Args:
        items: Current sequence
        source_id: Identity of the dragged item
        target_id: Identity of the item it was dropped on
        position: "above" to land before the target, "below" to land after it

    Returns:
        Reordered sequence, or ``items`` unchanged for unknown ids or a drop
        onto itself
    """
    if source_id == target_id:
        return items
    target = index_of(items, target_id)
    if target < 0:
        return items
    return move(items, source_id, target + 1 if position == "below" else target)


def delete_block(blocks: tuple[Block, ...], block_id: str) -> tuple[Block, ...]:
    """Remove one block as a whole unit.

    A document never becomes empty: removing the last block leaves a single
    empty text block behind.
    """
    i = index_of(blocks, block_id)
    if i < 0:
        return blocks
    remaining = blocks[:i] + blocks[i + 1:]
    return remaining or empty_document()


@dataclass(frozen=True)
class Caret:
    """Cursor location after a structural edit.

    Attributes:
        block_id: Block holding the caret (None = start of document)
        offset: Character offset inside a text block; 1 means "after" an
                atomic prompt block
    """

    block_id: Optional[str] = None
    offset: int = 0


@dataclass(frozen=True)
class BackspaceResult:
    """Outcome of a backspace at the start of a text block.

    Attributes:
        blocks: Document after the edit
        caret: New caret position (None when not handled)
        handled: False when the edit belongs to the text-editing surface
    """

    blocks: tuple[Block, ...]
    caret: Optional[Caret] = None
    handled: bool = False


def backspace_at_start(blocks: tuple[Block, ...], block_id: str) -> BackspaceResult:
    """Apply backspace with an empty caret at the start of a text block.

    When the block before ``block_id`` is a prompt block, that prompt block is
    deleted in one step and the caret lands at the end of whatever preceded
    it. Any other case (text predecessor, start of document, unknown id) is
    left to ordinary text merging.
    """
    i = index_of(blocks, block_id)
    if i <= 0 or not isinstance(blocks[i], TextBlock):
        return BackspaceResult(blocks=blocks)

    previous = blocks[i - 1]
    if not isinstance(previous, PromptBlock):
        return BackspaceResult(blocks=blocks)

    remaining = blocks[:i - 1] + blocks[i:]
    if i - 2 < 0:
        caret = Caret()
    else:
        before = blocks[i - 2]
        offset = len(before.content) if isinstance(before, TextBlock) else 1
        caret = Caret(block_id=before.id, offset=offset)

    return BackspaceResult(blocks=remaining, caret=caret, handled=True)
