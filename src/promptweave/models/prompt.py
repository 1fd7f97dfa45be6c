"""Saved prompt models and the drag-and-drop prompt payload."""

import json
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from block_document import PromptRef
from promptweave.utils.ids import now_millis


class SavedPrompt(BaseModel):
    """A named, reusable piece of prompt text in the library."""

    id: str = Field(..., description="Stable prompt identifier")

    title: str = Field(..., min_length=1, description="Display title")

    content: str = Field(..., description="Prompt text inserted into documents")

    tags: list[str] = Field(default_factory=list, description="Free-form labels")

    created_at: int = Field(
        default_factory=now_millis,
        description="Creation time (milliseconds since epoch)"
    )

    model_config = {"frozen": False}

    def to_ref(self) -> PromptRef:
        """Snapshot source for inserting this prompt into a document."""
        return PromptRef(
            source_id=self.id,
            title=self.title,
            content=self.content,
            tags=tuple(self.tags),
            created_at=self.created_at,
        )

    def matches(self, query: Optional[str] = None, tag: Optional[str] = None) -> bool:
        """Case-insensitive title/content search plus exact tag filter."""
        if tag is not None and tag not in self.tags:
            return False
        if query:
            needle = query.lower()
            return needle in self.title.lower() or needle in self.content.lower()
        return True


class PromptPayload(BaseModel):
    """Prompt reference carried by an external drag (e.g., from the library list).

    Accepts both camelCase (wire) and snake_case keys. The library list
    historically sent the prompt's own ``id``; it is accepted as ``sourceId``.
    """

    source_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("sourceId", "source_id", "id"),
    )

    title: str = Field(..., min_length=1)

    content: str

    tags: list[str] = Field(default_factory=list)

    created_at: int = Field(
        default_factory=now_millis,
        validation_alias=AliasChoices("createdAt", "created_at"),
    )

    model_config = {"frozen": True}

    @field_validator("tags", mode="before")
    @classmethod
    def none_tags_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @classmethod
    def parse(cls, raw: Union[str, bytes, dict, None]) -> Optional["PromptPayload"]:
        """
        Validate a raw drag payload.

        Args:
            raw: JSON string/bytes or already-decoded dict

        Returns:
            Validated payload, or None if it is missing or malformed
        """
        if raw is None:
            return None
        try:
            if isinstance(raw, (str, bytes)):
                return cls.model_validate_json(raw)
            return cls.model_validate(raw)
        except (ValidationError, ValueError, TypeError):
            return None

    def to_ref(self) -> PromptRef:
        """Snapshot source for the insertion engine."""
        return PromptRef(
            source_id=self.source_id,
            title=self.title,
            content=self.content,
            tags=tuple(self.tags),
            created_at=self.created_at,
        )


def payload_from_prompt(prompt: SavedPrompt) -> str:
    """Encode a saved prompt as the JSON payload of an external drag."""
    return json.dumps(
        {
            "sourceId": prompt.id,
            "title": prompt.title,
            "content": prompt.content,
            "tags": prompt.tags,
            "createdAt": prompt.created_at,
        }
    )
