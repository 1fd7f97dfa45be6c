"""Block document model - text and atomic prompt blocks.

This package provides the document model behind the prompt composer: an
ordered sequence of text blocks and atomic prompt blocks, conversion to and
from the persisted content tree, and the pure move/insert/delete operations
used by drag and drop.

Key features:
- Never-empty block sequences with exactly two block kinds
- Lossless round-trip between blocks and per-line content tree
- Pointer-Y to insertion-index resolution from rendered block boxes
- Pure reorder and insertion engines (inputs are never mutated)

Example:
    >>> from block_document import TextBlock, PromptRef, insert_prompt, extract_plain_text
    >>> doc = insert_prompt((TextBlock(content="hello"),), PromptRef("p1", "Greeting", "Hi there"), 1)
    >>> extract_plain_text(doc)
    'hello\\n\\nHi there'
"""

from block_document.blocks import (
    Block,
    PromptBlock,
    TextBlock,
    empty_document,
    new_block_id,
    update_text,
)
from block_document.codec import (
    MalformedDocumentError,
    ParagraphNode,
    PromptNode,
    deserialize_tree,
    dump_document,
    extract_plain_text,
    load_document,
    serialize_tree,
    to_sequence,
    to_tree,
)
from block_document.insertion import PromptRef, append_prompt, has_content, insert_prompt
from block_document.position import BlockBox, indicator_offset, resolve_insertion_index
from block_document.reorder import (
    BackspaceResult,
    Caret,
    backspace_at_start,
    delete_block,
    move,
    move_relative,
)

__version__ = "0.1.0"

__all__ = [
    "Block",
    "TextBlock",
    "PromptBlock",
    "empty_document",
    "new_block_id",
    "update_text",
    "MalformedDocumentError",
    "ParagraphNode",
    "PromptNode",
    "to_sequence",
    "to_tree",
    "extract_plain_text",
    "serialize_tree",
    "deserialize_tree",
    "dump_document",
    "load_document",
    "PromptRef",
    "insert_prompt",
    "append_prompt",
    "has_content",
    "BlockBox",
    "resolve_insertion_index",
    "indicator_offset",
    "move",
    "move_relative",
    "delete_block",
    "backspace_at_start",
    "Caret",
    "BackspaceResult",
]
