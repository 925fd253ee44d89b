"""Configuration settings loaded from .env file."""

from pathlib import Path
from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings, loaded from .env file.

    Authentication for text generation is handled by the Claude Agent SDK
    via the Claude Code CLI. Image generation talks to an HTTP endpoint
    configured below.
    """

    # LLM Models: one per task
    llm_model_writing: str = "claude-sonnet-4-5"      # WriterAgent / ContentBlockAgent
    llm_model_editing: str = "claude-sonnet-4-5"      # EditorAgent improve/expand
    llm_model_planning: str = "claude-sonnet-4-5"     # PlannerAgent
    llm_model_research: str = "claude-sonnet-4-5"     # ResearchAgent / MetadataAgent
    llm_model_translation: str = "claude-haiku-4-5"   # TranslatorAgent / summarize

    # Persistence
    snapshot_db_path: Path = Path("./data/projects.db")
    snapshot_max_bytes: int = 5 * 1024 * 1024
    archive_key_prefix: str = "bookforge-projects-archive"
    authors_key_prefix: str = "bookforge-authors-archive"

    # Identity
    user_id: Optional[str] = None
    auth_enabled: bool = False

    # Retry (rate limits)
    retry_max_retries: int = 5
    retry_initial_delay: float = 61.0
    retry_jitter: float = 1.0

    # Generation
    edit_debounce_seconds: float = 1.0
    batch_pacing_seconds: float = 1.5
    batch_target_word_count: int = 5000

    # Translation
    translation_chunk_size: int = 3
    translation_pacing_seconds: float = 61.0
    translation_source_language: str = "Italian"

    # Images
    image_api_url: str = "https://api.openai.com/v1/images/generations"
    image_api_key: Optional[str] = None
    image_model: str = "gpt-image-1"
    image_size: str = "1024x1024"
    image_timeout_seconds: float = 120.0
    cover_option_count: int = 3

    # Logging
    log_dir: Path = Path("./data/logs")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @field_validator("retry_max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("retry_max_retries must be >= 0")
        return v

    @field_validator("retry_initial_delay")
    @classmethod
    def validate_initial_delay(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("retry_initial_delay must be > 0")
        return v

    @field_validator(
        "retry_jitter", "edit_debounce_seconds", "batch_pacing_seconds", "translation_pacing_seconds",
    )
    @classmethod
    def validate_non_negative_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Delay must be non-negative")
        return v

    @field_validator(
        "translation_chunk_size", "snapshot_max_bytes", "batch_target_word_count", "cover_option_count",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Value must be >= 1")
        return v

    @field_validator("snapshot_db_path", "log_dir")
    @classmethod
    def ensure_parent_dirs(cls, v: Path) -> Path:
        v.parent.mkdir(parents=True, exist_ok=True)
        return v

    @model_validator(mode="after")
    def validate_identity(self) -> "Settings":
        if self.user_id is not None and not self.user_id.strip():
            raise ValueError("user_id must not be blank when set")
        return self


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
