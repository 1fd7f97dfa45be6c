"""Saved prompt library backed by a JSON file."""

from typing import Any, Optional

from pydantic import ValidationError

from block_document import move_relative
from block_document.reorder import DropPosition
from promptweave.models.prompt import SavedPrompt
from promptweave.services.json_store import JsonFileStore
from promptweave.utils.ids import generate_random_uuid, now_millis
from promptweave.utils.logging import get_logger


logger = get_logger(__name__)


def _clean_tags(tags: Optional[list[str]]) -> list[str]:
    cleaned: list[str] = []
    for tag in tags or []:
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


class PromptStore(JsonFileStore):
    """
    CRUD access to saved prompts and the known tag list.

    File layout::

        {"prompts": [{"id": ..., "title": ..., ...}], "tags": ["a", "b"]}

    Prompt order in the file is the library's display order.

    Example:
        >>> store = PromptStore(Path("~/.local/share/promptweave/prompts.json"))
        >>> prompt = store.create("Greeting", "Hi there", tags=["social"])
        >>> store.tags()
        ['social']
    """

    def _load(self) -> tuple[list[SavedPrompt], list[str]]:
        data = self._read()

        prompts = []
        for raw in self._list_field(data, "prompts"):
            try:
                prompts.append(SavedPrompt.model_validate(raw))
            except ValidationError as e:
                logger.warning("prompt_record_skipped", path=str(self.path), error=str(e))

        tags = [t for t in self._list_field(data, "tags") if isinstance(t, str)]
        return prompts, tags

    def _save(self, prompts: list[SavedPrompt], tags: list[str]) -> None:
        self._write(
            {
                "prompts": [p.model_dump() for p in prompts],
                "tags": tags,
            }
        )

    def list_prompts(self) -> list[SavedPrompt]:
        """All saved prompts in library order."""
        prompts, _ = self._load()
        return prompts

    def get(self, prompt_id: str) -> Optional[SavedPrompt]:
        for prompt in self.list_prompts():
            if prompt.id == prompt_id:
                return prompt
        return None

    def search(self, query: Optional[str] = None, tag: Optional[str] = None) -> list[SavedPrompt]:
        """Prompts whose title or content contains ``query`` and that carry ``tag``."""
        return [p for p in self.list_prompts() if p.matches(query, tag)]

    def create(self, title: str, content: str, tags: Optional[list[str]] = None) -> SavedPrompt:
        """
        Save a new prompt.

        Title and content are trimmed; tags used for the first time are added
        to the known tag list.

        Raises:
            ValueError: If title or content is blank
            StoreError: If the library file cannot be written
        """
        title, content = title.strip(), content.strip()
        if not title or not content:
            raise ValueError("Prompt title and content must not be empty")

        prompts, known_tags = self._load()
        prompt = SavedPrompt(
            id=generate_random_uuid(),
            title=title,
            content=content,
            tags=_clean_tags(tags),
            created_at=now_millis(),
        )
        prompts.append(prompt)
        known_tags.extend(t for t in prompt.tags if t not in known_tags)

        self._save(prompts, known_tags)
        logger.info("prompt_created", prompt_id=prompt.id, tags=prompt.tags)
        return prompt

    def update(
        self,
        prompt_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> Optional[SavedPrompt]:
        """
        Change fields of an existing prompt.

        Documents that already contain a snapshot of this prompt are not
        affected.

        Returns:
            Updated prompt, or None if no prompt has this id

        Raises:
            ValueError: If the new title or content is blank
            StoreError: If the library file cannot be written
        """
        changes: dict[str, Any] = {}
        if title is not None:
            changes["title"] = title.strip()
        if content is not None:
            changes["content"] = content.strip()
        if tags is not None:
            changes["tags"] = _clean_tags(tags)
        if changes.get("title") == "" or changes.get("content") == "":
            raise ValueError("Prompt title and content must not be empty")

        prompts, known_tags = self._load()
        for i, prompt in enumerate(prompts):
            if prompt.id == prompt_id:
                updated = prompt.model_copy(update=changes)
                prompts[i] = updated
                known_tags.extend(t for t in updated.tags if t not in known_tags)
                self._save(prompts, known_tags)
                logger.info("prompt_updated", prompt_id=prompt_id, fields=sorted(changes))
                return updated

        logger.debug("prompt_update_missing", prompt_id=prompt_id)
        return None

    def delete(self, prompt_id: str) -> bool:
        """
        Remove a prompt from the library.

        Returns:
            True if a prompt was removed, False if the id was unknown
        """
        prompts, known_tags = self._load()
        remaining = [p for p in prompts if p.id != prompt_id]
        if len(remaining) == len(prompts):
            return False
        self._save(remaining, known_tags)
        logger.info("prompt_deleted", prompt_id=prompt_id)
        return True

    def reorder(self, source_id: str, target_id: str, position: DropPosition) -> list[SavedPrompt]:
        """
        Move one prompt above or below another in the library list.

        Returns:
            Prompts in their new order (unchanged order for unknown ids)
        """
        prompts, known_tags = self._load()
        reordered = move_relative(prompts, source_id, target_id, position)
        if reordered is not prompts:
            self._save(list(reordered), known_tags)
            logger.info("prompts_reordered", source_id=source_id, target_id=target_id, position=position)
        return list(reordered)

    def tags(self) -> list[str]:
        """Known tags in the order they were first used."""
        _, known_tags = self._load()
        return known_tags

    def add_tag(self, tag: str) -> list[str]:
        """Register a tag without attaching it to a prompt."""
        tag = tag.strip()
        prompts, known_tags = self._load()
        if tag and tag not in known_tags:
            known_tags.append(tag)
            self._save(prompts, known_tags)
        return known_tags
