"""Editing session: the single owner of the document being composed.

Every mutation goes through a pure engine function from ``block_document``
and replaces ``EditorSession.blocks`` wholesale, so handlers always act on
the latest document and never on a stale reference.

Drag and drop runs in three phases:

1. ``begin_block_drag`` / ``begin_prompt_drag`` capture what is dragged
2. ``drag_over`` resolves the insertion index (read-only, call at any rate)
3. ``drop`` applies exactly one move or insert; ``cancel_drag`` ends the
   drag without touching the document
"""

from dataclasses import dataclass
from typing import Literal, Optional, Sequence, Union

from block_document import (
    Block,
    BlockBox,
    Caret,
    MalformedDocumentError,
    PromptBlock,
    TextBlock,
    append_prompt,
    backspace_at_start,
    delete_block,
    deserialize_tree,
    dump_document,
    empty_document,
    extract_plain_text,
    has_content,
    indicator_offset,
    insert_prompt,
    move,
    resolve_insertion_index,
    to_sequence,
    update_text,
)
from block_document.blocks import index_of
from promptweave.models.config import EditorConfig
from promptweave.models.draft import Draft
from promptweave.models.prompt import PromptPayload, SavedPrompt
from promptweave.services.draft_store import DraftStore
from promptweave.services.exceptions import StoreError
from promptweave.services.prompt_store import PromptStore
from promptweave.utils.ids import generate_random_uuid
from promptweave.utils.logging import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class DragState:
    """Transient state of an in-progress drag.

    Attributes:
        kind: "block" for reordering a document block, "prompt" for a
              prompt dragged in from the library
        source_id: Dragged block id (block drags only)
        payload: Validated prompt payload (prompt drags only)
        ghost_text: Content snapshot shown under the pointer
        indicator_index: Last insertion index resolved by drag_over
    """

    kind: Literal["block", "prompt"]
    source_id: Optional[str] = None
    payload: Optional[PromptPayload] = None
    ghost_text: str = ""
    indicator_index: Optional[int] = None


class EditorSession:
    """
    Current document plus draft bookkeeping for one editing session.

    Collaborator failures (StoreError) are logged and reported through
    return values; local state is left as it was so the user can retry.

    Example:
        >>> session = EditorSession(prompt_store, draft_store)
        >>> session.insert_saved_prompt(prompt_store.get("p-1"))
        >>> session.plain_text()
        'Hi there'
    """

    def __init__(
        self,
        prompt_store: PromptStore,
        draft_store: DraftStore,
        config: Optional[EditorConfig] = None,
    ) -> None:
        self.prompt_store = prompt_store
        self.draft_store = draft_store
        self.config = config or EditorConfig()

        self.blocks: tuple[Block, ...] = empty_document()
        self.title: str = self.config.default_title
        self.draft_id: Optional[str] = None
        self.drag: Optional[DragState] = None

    def _replace(self, blocks: tuple[Block, ...], action: str, **fields) -> bool:
        """Install a new document value; engines return the same object for no-ops."""
        if blocks is self.blocks:
            logger.debug("document_unchanged", action=action, **fields)
            return False
        self.blocks = blocks
        logger.debug("document_changed", action=action, block_count=len(blocks), **fields)
        return True

    # Document operations

    def edit_text(self, block_id: str, content: str) -> bool:
        """Set the content of a text block (same block id)."""
        return self._replace(update_text(self.blocks, block_id, content), "edit_text", block_id=block_id)

    def insert_saved_prompt(self, prompt: SavedPrompt, at_index: Optional[int] = None) -> bool:
        """Insert a library prompt snapshot (at the end when no index is given)."""
        if at_index is None:
            blocks = append_prompt(self.blocks, prompt.to_ref())
        else:
            blocks = insert_prompt(self.blocks, prompt.to_ref(), at_index)
        return self._replace(blocks, "insert_prompt", source_id=prompt.id, at_index=at_index)

    def insert_payload(self, raw: Union[str, bytes, dict, None], at_index: Optional[int] = None) -> bool:
        """
        Insert a prompt from an external payload.

        Malformed payloads are ignored without error.

        Returns:
            True if the document changed
        """
        payload = PromptPayload.parse(raw)
        if payload is None:
            logger.debug("prompt_payload_ignored")
            return False
        if at_index is None:
            at_index = len(self.blocks)
        blocks = insert_prompt(self.blocks, payload.to_ref(), at_index)
        return self._replace(blocks, "insert_prompt", source_id=payload.source_id, at_index=at_index)

    def move_block(self, block_id: str, destination_index: int) -> bool:
        return self._replace(
            move(self.blocks, block_id, destination_index),
            "move_block",
            block_id=block_id,
            destination_index=destination_index,
        )

    def remove_block(self, block_id: str) -> bool:
        """Remove a block as a whole (e.g., the delete button on a prompt block)."""
        return self._replace(delete_block(self.blocks, block_id), "remove_block", block_id=block_id)

    def backspace(self, block_id: str) -> Optional[Caret]:
        """
        Backspace with an empty caret at the start of a text block.

        Returns:
            New caret position when a preceding prompt block was removed,
            None when the keystroke belongs to ordinary text editing
        """
        result = backspace_at_start(self.blocks, block_id)
        if not result.handled:
            return None
        self._replace(result.blocks, "backspace", block_id=block_id)
        return result.caret

    def plain_text(self) -> str:
        return extract_plain_text(self.blocks)

    def has_content(self) -> bool:
        return has_content(self.blocks)

    def prompt_count(self) -> int:
        return sum(1 for block in self.blocks if isinstance(block, PromptBlock))

    # Drag and drop

    def begin_block_drag(self, block_id: str) -> Optional[DragState]:
        """Start dragging a document block; unknown ids start nothing."""
        i = index_of(self.blocks, block_id)
        if i < 0:
            logger.debug("block_drag_ignored", block_id=block_id)
            return None
        block = self.blocks[i]
        ghost = block.title if isinstance(block, PromptBlock) else block.content
        self.drag = DragState(kind="block", source_id=block_id, ghost_text=ghost)
        logger.debug("drag_started", kind="block", block_id=block_id)
        return self.drag

    def begin_prompt_drag(self, raw: Union[str, bytes, dict, None]) -> Optional[DragState]:
        """Start dragging a prompt from the library; malformed payloads start nothing."""
        payload = PromptPayload.parse(raw)
        if payload is None:
            logger.debug("prompt_payload_ignored")
            return None
        self.drag = DragState(kind="prompt", payload=payload, ghost_text=payload.title)
        logger.debug("drag_started", kind="prompt", source_id=payload.source_id)
        return self.drag

    def drag_over(self, pointer_y: float, boxes: Sequence[BlockBox]) -> Optional[int]:
        """
        Resolve and remember the insertion index under the pointer.

        Returns:
            Insertion index, or None when no drag is in progress
        """
        if self.drag is None:
            return None
        index = resolve_insertion_index(pointer_y, boxes)
        if index != self.drag.indicator_index:
            self.drag = DragState(
                kind=self.drag.kind,
                source_id=self.drag.source_id,
                payload=self.drag.payload,
                ghost_text=self.drag.ghost_text,
                indicator_index=index,
            )
        return index

    def indicator_position(self, boxes: Sequence[BlockBox]) -> Optional[float]:
        """Y coordinate for the drop indicator line, if one should be shown."""
        if self.drag is None or self.drag.indicator_index is None:
            return None
        return indicator_offset(boxes, self.drag.indicator_index)

    def drop(self, pointer_y: float, boxes: Sequence[BlockBox]) -> bool:
        """
        Finish the drag: one move or insert against the current document.

        Transient drag state is always cleared.

        Returns:
            True if the document changed
        """
        drag, self.drag = self.drag, None
        if drag is None:
            return False

        if len(boxes) != len(self.blocks):
            logger.debug("drop_geometry_mismatch", boxes=len(boxes), blocks=len(self.blocks))

        index = resolve_insertion_index(pointer_y, boxes)
        if drag.kind == "block":
            return self._replace(
                move(self.blocks, drag.source_id, index),
                "drop_move",
                block_id=drag.source_id,
                destination_index=index,
            )
        return self._replace(
            insert_prompt(self.blocks, drag.payload.to_ref(), index),
            "drop_insert",
            source_id=drag.payload.source_id,
            at_index=index,
        )

    def cancel_drag(self) -> None:
        """End a drag that left the drop surface; the document is untouched."""
        if self.drag is not None:
            logger.debug("drag_cancelled", kind=self.drag.kind)
        self.drag = None

    # Drafts

    def save_draft(self) -> Optional[str]:
        """
        Auto-save the current document into draft history.

        Empty documents are never saved.

        Returns:
            Draft id, or None if nothing was saved (empty document or store failure)
        """
        if not self.has_content():
            return None

        draft_id = self.draft_id or generate_random_uuid()
        draft = Draft(
            id=draft_id,
            title=self.title.strip() or self.config.untitled_title,
            content=dump_document(self.blocks),
        )
        try:
            self.draft_store.save(draft)
        except StoreError as e:
            logger.error("draft_save_failed", draft_id=draft_id, error=str(e))
            return None

        self.draft_id = draft_id
        return draft_id

    def _autosave_before_switch(self) -> bool:
        return not self.has_content() or self.save_draft() is not None

    def clear(self) -> None:
        """Reset to an empty, untitled document without saving."""
        self.blocks = empty_document()
        self.title = self.config.default_title
        self.draft_id = None
        self.drag = None

    def new_document(self) -> bool:
        """
        Auto-save the current document, then start a fresh one.

        Returns:
            False if the auto-save failed (the current document is kept)
        """
        if not self._autosave_before_switch():
            return False
        self.clear()
        logger.info("document_cleared")
        return True

    def load_draft(self, draft: Draft) -> None:
        """
        Make ``draft`` the current document.

        Draft content that cannot be decoded loads as an empty document.
        """
        try:
            blocks = to_sequence(deserialize_tree(draft.content))
        except MalformedDocumentError as e:
            logger.warning("draft_content_malformed", draft_id=draft.id, error=str(e))
            blocks = empty_document()

        self.blocks = blocks
        self.title = draft.title
        self.draft_id = draft.id
        self.drag = None
        logger.info("draft_loaded", draft_id=draft.id, block_count=len(blocks))

    def open_draft(self, draft_id: str) -> bool:
        """
        Auto-save the current document, then switch to a stored draft.

        Returns:
            False if the draft does not exist or the auto-save failed
        """
        if self.draft_store.get(draft_id) is None:
            logger.debug("draft_not_found", draft_id=draft_id)
            return False
        if not self._autosave_before_switch():
            return False
        # Re-read: the auto-save may have just rewritten this very draft
        draft = self.draft_store.get(draft_id)
        if draft is None:
            return False
        self.load_draft(draft)
        return True

    def delete_draft(self, draft_id: str) -> bool:
        """
        Delete a draft from history; deleting the open draft also clears the editor.

        Returns:
            True if a draft was removed
        """
        try:
            removed = self.draft_store.delete(draft_id)
        except StoreError as e:
            logger.error("draft_delete_failed", draft_id=draft_id, error=str(e))
            return False
        if removed and draft_id == self.draft_id:
            self.clear()
        return removed

    # Prompt library

    def save_as_prompt(self, title: str, tags: Optional[list[str]] = None) -> Optional[SavedPrompt]:
        """
        Save the flattened document as a new library prompt.

        Returns:
            Created prompt, or None if title/content is blank or the store failed
        """
        title = title.strip()
        content = self.plain_text().strip()
        if not title or not content:
            logger.debug("save_as_prompt_rejected", has_title=bool(title), has_content=bool(content))
            return None
        try:
            return self.prompt_store.create(title, content, tags)
        except StoreError as e:
            logger.error("prompt_save_failed", error=str(e))
            return None

    def edit_source_prompt(
        self,
        block_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> Optional[SavedPrompt]:
        """
        Update the library prompt a prompt block was taken from.

        The block's own snapshot in this document does not change.

        Returns:
            Updated prompt, or None if the block/prompt is unknown, the
            values are blank, or the store failed
        """
        i = index_of(self.blocks, block_id)
        if i < 0 or isinstance(self.blocks[i], TextBlock):
            return None
        try:
            return self.prompt_store.update(self.blocks[i].source_id, title, content, tags)
        except (ValueError, StoreError) as e:
            logger.error("prompt_update_failed", block_id=block_id, error=str(e))
            return None
