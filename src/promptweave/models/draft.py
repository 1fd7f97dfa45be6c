"""Draft history record."""

from pydantic import BaseModel, Field

from promptweave.utils.ids import now_millis


class Draft(BaseModel):
    """Auto-saved snapshot of a document being composed."""

    id: str = Field(..., description="Draft identifier")

    title: str = Field(default="Untitled", description="Document title at save time")

    content: str = Field(
        ...,
        description="Serialized content tree (JSON document string)"
    )

    created_at: int = Field(
        default_factory=now_millis,
        description="First save time (milliseconds since epoch)"
    )

    updated_at: int = Field(
        default_factory=now_millis,
        description="Last save time (milliseconds since epoch)"
    )

    model_config = {"frozen": False}
