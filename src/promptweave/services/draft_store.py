"""Draft history backed by a JSON file."""

from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from promptweave.models.draft import Draft
from promptweave.services.file_monitor import FileMonitor
from promptweave.services.json_store import JsonFileStore
from promptweave.utils.ids import now_millis
from promptweave.utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class DraftStore(JsonFileStore):
    """
    Most-recent-first history of auto-saved documents.

    - New drafts go to the front of the history
    - Saving an existing id updates that entry in place and refreshes
      its updated_at timestamp (no duplicates)
    - History is capped at ``limit`` entries; the oldest fall off the end

    File layout::

        {"drafts": [{"id": ..., "title": ..., "content": "<doc json>", ...}]}
    """

    def __init__(
        self,
        path: Path,
        limit: int = DEFAULT_HISTORY_LIMIT,
        file_monitor: Optional[FileMonitor] = None,
    ) -> None:
        super().__init__(path, file_monitor)
        self.limit = limit

    def _load(self) -> list[Draft]:
        drafts = []
        for raw in self._list_field(self._read(), "drafts"):
            try:
                drafts.append(Draft.model_validate(raw))
            except ValidationError as e:
                logger.warning("draft_record_skipped", path=str(self.path), error=str(e))
        return drafts

    def _save(self, drafts: list[Draft]) -> None:
        self._write({"drafts": [d.model_dump() for d in drafts[: self.limit]]})

    def list_drafts(self) -> list[Draft]:
        """Drafts, newest first."""
        return self._load()[: self.limit]

    def get(self, draft_id: str) -> Optional[Draft]:
        for draft in self.list_drafts():
            if draft.id == draft_id:
                return draft
        return None

    def search(self, query: str) -> list[Draft]:
        """Drafts whose title contains ``query`` (case-insensitive)."""
        needle = query.lower()
        return [d for d in self.list_drafts() if needle in d.title.lower()]

    def save(self, draft: Draft) -> Draft:
        """
        Insert or update a draft.

        Args:
            draft: Draft to store

        Returns:
            The stored draft (with refreshed updated_at when it already existed)

        Raises:
            StoreError: If the history file cannot be written
        """
        drafts = self._load()
        for i, existing in enumerate(drafts):
            if existing.id == draft.id:
                stored = draft.model_copy(
                    update={"created_at": existing.created_at, "updated_at": now_millis()}
                )
                drafts[i] = stored
                break
        else:
            stored = draft
            drafts.insert(0, stored)

        self._save(drafts)
        logger.info("draft_saved", draft_id=stored.id, title=stored.title, history_size=min(len(drafts), self.limit))
        return stored

    def delete(self, draft_id: str) -> bool:
        """
        Remove a draft from history.

        Returns:
            True if a draft was removed, False if the id was unknown
        """
        drafts = self._load()
        remaining = [d for d in drafts if d.id != draft_id]
        if len(remaining) == len(drafts):
            return False
        self._save(remaining)
        logger.info("draft_deleted", draft_id=draft_id)
        return True
