"""Application configuration model using pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from logo_gallery.models.upload import UploadPolicy

DEFAULT_MAX_UPLOAD_BYTES = 2 * 1024 * 1024
DEFAULT_ALLOWED_CONTENT_TYPES = ["image/png", "image/jpeg", "image/svg+xml"]


class Config(BaseSettings):
    """Application configuration loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LOGO_GALLERY_",
        case_sensitive=False,
        extra="ignore",
    )

    database_path: str = "data/logos.db"
    log_level: str = "INFO"
    log_json: bool = False
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    allowed_content_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_CONTENT_TYPES)
    )
    min_dimension: int = 1
    max_dimension: int = 10_000
    similarity_threshold: float = 0.85
    allow_system_duplicates: bool = True
    allow_similar_images: bool = False

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, value: str) -> str:
        """Ensure parent directory exists, creating it if necessary."""
        parent = Path(value).parent
        parent.mkdir(parents=True, exist_ok=True)
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Log level must be a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            msg = f"log_level must be one of {', '.join(sorted(valid_levels))}"
            raise ValueError(msg)
        return upper_value

    @field_validator("max_upload_bytes")
    @classmethod
    def validate_max_upload_bytes(cls, value: int) -> int:
        """Upload cap must be positive."""
        if value <= 0:
            msg = "max_upload_bytes must be greater than 0"
            raise ValueError(msg)
        return value

    @field_validator("allowed_content_types")
    @classmethod
    def validate_allowed_content_types(cls, value: list[str]) -> list[str]:
        """Normalize MIME types to lowercase; at least one is required."""
        normalized = [item.strip().lower() for item in value if item.strip()]
        if not normalized:
            msg = "allowed_content_types must not be empty"
            raise ValueError(msg)
        return normalized

    @field_validator("similarity_threshold")
    @classmethod
    def validate_similarity_threshold(cls, value: float) -> float:
        """Threshold must be between 0.0 and 1.0."""
        if value < 0.0 or value > 1.0:
            msg = "similarity_threshold must be between 0.0 and 1.0"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def validate_dimension_range(self) -> Config:
        """min_dimension must be positive and not exceed max_dimension."""
        if self.min_dimension < 1 or self.min_dimension > self.max_dimension:
            msg = "dimension range must satisfy 1 <= min_dimension <= max_dimension"
            raise ValueError(msg)
        return self

    def upload_policy(self) -> UploadPolicy:
        """Default duplicate policy derived from configuration."""
        return UploadPolicy(
            allow_system_duplicates=self.allow_system_duplicates,
            allow_similar_images=self.allow_similar_images,
        )
