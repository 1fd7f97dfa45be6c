"""Conversion between block sequences and the persisted content tree.

The content tree is one node per paragraph line plus one node per prompt.
It is more granular than the block sequence: a text block of N lines maps
to N consecutive paragraph nodes.

The serialized form is a JSON document in the rich-text editor format::

    {"type": "doc", "content": [
        {"type": "paragraph", "attrs": {"id": "..."},
         "content": [{"type": "text", "text": "hello"}]},
        {"type": "promptBlock", "attrs": {"id": "...", "promptId": "...", ...}}
    ]}
"""

import json
import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Union

from block_document.blocks import (
    Block,
    PromptBlock,
    TextBlock,
    empty_document,
    new_block_id,
)


class MalformedDocumentError(ValueError):
    """Raised when serialized document data cannot be decoded."""


@dataclass(frozen=True)
class ParagraphNode:
    """One line of text.

    Attributes:
        text: Inline text of the paragraph (may be empty)
        id: Identity of the text block this line opens (None for follow-on lines)
    """

    text: str = ""
    id: Optional[str] = None


@dataclass(frozen=True)
class PromptNode:
    """Persisted prompt block with its full snapshot."""

    id: str
    source_id: str
    title: str = ""
    content: str = ""
    tags: tuple[str, ...] = ()
    created_at: int = 0


Node = Union[ParagraphNode, PromptNode]


def to_sequence(nodes: Iterable[Node]) -> tuple[Block, ...]:
    """Collapse a content tree into a block sequence.

    Consecutive paragraphs are joined with "\\n" into one text block. A
    paragraph carrying its own block id always opens a new text block, so
    adjacent text blocks keep their identity through a save and reload.

    Every prompt is preceded by a text block, empty if need be, so there is an
    editable gap between two prompts. The only exception is a document that
    starts directly with a prompt: it gets no leading text block. The final
    run is always flushed, so the result is never empty.

    Args:
        nodes: Content tree nodes in document order

    Returns:
        Block sequence (length >= 1)
    """
    blocks: list[Block] = []
    lines: list[str] = []
    run_id: Optional[str] = None
    run_open = False

    def flush() -> None:
        nonlocal lines, run_id, run_open
        blocks.append(TextBlock(id=run_id or new_block_id(), content="\n".join(lines)))
        lines = []
        run_id = None
        run_open = False

    for node in nodes:
        if isinstance(node, ParagraphNode):
            if node.id is not None and run_open:
                flush()
            lines.append(node.text)
            if run_id is None:
                run_id = node.id
            run_open = True
        elif isinstance(node, PromptNode):
            if run_open or blocks:
                flush()
            blocks.append(
                PromptBlock(
                    id=node.id,
                    source_id=node.source_id,
                    title=node.title,
                    content=node.content,
                    tags=tuple(node.tags),
                    created_at=node.created_at,
                )
            )
        else:
            raise TypeError(f"Unknown node type: {type(node).__name__}")

    flush()
    return tuple(blocks)


def to_tree(blocks: Iterable[Block]) -> list[Node]:
    """Expand a block sequence into content tree nodes.

    Each text block becomes one paragraph per line. Empty lines are kept as
    empty paragraphs. The first paragraph carries the block id.

    Args:
        blocks: Block sequence

    Returns:
        List of nodes (never empty)
    """
    nodes: list[Node] = []
    for block in blocks:
        if isinstance(block, TextBlock):
            for i, line in enumerate(block.content.split("\n")):
                nodes.append(ParagraphNode(text=line, id=block.id if i == 0 else None))
        elif isinstance(block, PromptBlock):
            nodes.append(
                PromptNode(
                    id=block.id,
                    source_id=block.source_id,
                    title=block.title,
                    content=block.content,
                    tags=tuple(block.tags),
                    created_at=block.created_at,
                )
            )
        else:
            raise TypeError(f"Unknown block type: {type(block).__name__}")

    if not nodes:
        nodes.append(ParagraphNode())
    return nodes


def extract_plain_text(items: Iterable[Union[Block, Node]]) -> str:
    """Flatten a document to plain text.

    Accepts either a block sequence or a content tree. Text blocks contribute
    their content, prompt blocks their stored prompt text. Segments are joined
    with a blank line; empty segments are trimmed from the two ends only.

    A content tree is collapsed with to_sequence first, so consecutive
    paragraph lines of one text block stay separated by a single "\\n" and
    the result does not depend on which form the document is given in.

    Examples:
        >>> extract_plain_text([TextBlock(content="hello"), prompt, TextBlock()])
        'hello\\n\\nHi there'
    """
    items = list(items)
    if any(isinstance(item, (ParagraphNode, PromptNode)) for item in items):
        blocks = to_sequence(items)
    else:
        blocks = tuple(items)

    segments = []
    for block in blocks:
        if isinstance(block, TextBlock):
            segments.append(block.content)
        elif isinstance(block, PromptBlock):
            segments.append(block.content)
        else:
            raise TypeError(f"Unknown block type: {type(block).__name__}")

    start, end = 0, len(segments)
    while start < end and not segments[start]:
        start += 1
    while end > start and not segments[end - 1]:
        end -= 1

    return "\n\n".join(segments[start:end])


def _node_to_json(node: Node) -> dict[str, Any]:
    if isinstance(node, ParagraphNode):
        data: dict[str, Any] = {"type": "paragraph"}
        if node.id is not None:
            data["attrs"] = {"id": node.id}
        if node.text:
            data["content"] = [{"type": "text", "text": node.text}]
        return data

    return {
        "type": "promptBlock",
        "attrs": {
            "id": node.id,
            "promptId": node.source_id,
            "title": node.title,
            "content": node.content,
            "tags": list(node.tags),
            "createdAt": node.created_at,
        },
    }


def _node_from_json(data: Any) -> Optional[Node]:
    if not isinstance(data, dict):
        raise MalformedDocumentError(f"Expected node object, got {type(data).__name__}")

    attrs = data.get("attrs") or {}
    if not isinstance(attrs, dict):
        raise MalformedDocumentError("Node attrs must be an object")

    node_type = data.get("type")
    if node_type == "paragraph":
        inline = data.get("content") or []
        if not isinstance(inline, list):
            raise MalformedDocumentError("Paragraph content must be a list")
        text = "".join(
            child.get("text") or ""
            for child in inline
            if isinstance(child, dict) and isinstance(child.get("text", ""), str)
        )
        block_id = attrs.get("id")
        return ParagraphNode(text=text, id=block_id if isinstance(block_id, str) else None)

    if node_type == "promptBlock":
        tags = attrs.get("tags") or []
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise MalformedDocumentError("Prompt tags must be a list of strings")
        created_at = attrs.get("createdAt") or 0
        if isinstance(created_at, bool) or not isinstance(created_at, (int, float)):
            raise MalformedDocumentError("Prompt createdAt must be a number")
        # json accepts NaN, Infinity and overflowing literals like 1e400
        if isinstance(created_at, float) and not math.isfinite(created_at):
            raise MalformedDocumentError("Prompt createdAt must be finite")
        source_id = attrs.get("promptId")
        return PromptNode(
            id=str(attrs.get("id") or new_block_id()),
            source_id="" if source_id is None else str(source_id),
            title=str(attrs.get("title") or ""),
            content=str(attrs.get("content") or ""),
            tags=tuple(tags),
            created_at=int(created_at),
        )

    # Unknown node types are skipped
    return None


def serialize_tree(nodes: Iterable[Node]) -> str:
    """Serialize content tree nodes to a JSON document string."""
    return json.dumps(
        {"type": "doc", "content": [_node_to_json(node) for node in nodes]},
        ensure_ascii=False,
    )


def deserialize_tree(data: str) -> list[Node]:
    """Parse a serialized JSON document into content tree nodes.

    Args:
        data: String produced by serialize_tree (or a compatible editor)

    Returns:
        List of nodes in document order

    Raises:
        MalformedDocumentError: If data is not valid JSON or has the wrong shape
    """
    try:
        doc = json.loads(data)
    except (TypeError, RecursionError, json.JSONDecodeError) as e:
        raise MalformedDocumentError(f"Invalid document JSON: {e}") from e

    if not isinstance(doc, dict):
        raise MalformedDocumentError("Document must be a JSON object")

    content = doc.get("content") or []
    if not isinstance(content, list):
        raise MalformedDocumentError("Document content must be a list")

    nodes = []
    for item in content:
        node = _node_from_json(item)
        if node is not None:
            nodes.append(node)
    return nodes


def dump_document(blocks: Iterable[Block]) -> str:
    """Serialize a block sequence to its persisted string form."""
    return serialize_tree(to_tree(blocks))


def load_document(data: str) -> tuple[Block, ...]:
    """Load a block sequence from its persisted string form.

    Malformed data yields an empty document instead of an error.
    """
    try:
        return to_sequence(deserialize_tree(data))
    except MalformedDocumentError:
        return empty_document()
