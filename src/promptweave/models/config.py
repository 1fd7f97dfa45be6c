"""Configuration models for promptweave."""

from pydantic import BaseModel, Field, field_validator
from pathlib import Path


def _default_data_dir() -> str:
    return str(Path.home() / ".local" / "share" / "promptweave")


class StorageConfig(BaseModel):
    """Configuration for local prompt library and draft history files."""

    data_dir: str = Field(
        default_factory=_default_data_dir,
        description="Directory holding prompts.json and drafts.json"
    )

    draft_history_limit: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Number of most recent drafts kept in history"
    )

    @field_validator('data_dir')
    @classmethod
    def validate_data_dir(cls, v: str) -> str:
        """Expand ~ and reject paths that exist but are not directories."""
        path = Path(v).expanduser()
        if path.exists() and not path.is_dir():
            raise ValueError(
                f"Data directory is not a directory: {path}\n"
                f"Please provide a valid directory path"
            )
        return str(path)

    @property
    def prompts_file(self) -> Path:
        return Path(self.data_dir) / "prompts.json"

    @property
    def drafts_file(self) -> Path:
        return Path(self.data_dir) / "drafts.json"

    model_config = {"frozen": True}


class EditorConfig(BaseModel):
    """Configuration for the editing session."""

    default_title: str = Field(
        default="New prompt",
        min_length=1,
        description="Title given to a freshly cleared document"
    )

    untitled_title: str = Field(
        default="Untitled",
        min_length=1,
        description="Title stored for drafts saved with a blank title"
    )

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for promptweave."""

    storage: StorageConfig = Field(default_factory=StorageConfig, description="Storage settings")
    editor: EditorConfig = Field(default_factory=EditorConfig, description="Editor settings")

    model_config = {"frozen": True}
