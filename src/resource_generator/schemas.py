"""Pydantic schemas for runtime validation of task inputs."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from resource_generator.types import DEFAULT_OUTPUT_FORMAT, ResourceFormat


class TaskConfig(BaseModel):
    """Validated task surface shared by the API, the CLI and ``--config`` files."""

    model_config = ConfigDict(extra="forbid")

    references: list[Path] = Field(default_factory=list)
    additional_inputs: list[Path] = Field(default_factory=list)
    state_file: Path | None = None
    output_format: ResourceFormat = DEFAULT_OUTPUT_FORMAT
    strongly_typed_language: str | None = None
    strongly_typed_namespace: str | None = None
    strongly_typed_class_name: str | None = None
    strongly_typed_file_name: Path | None = None
    public_class: bool = False
    max_workers: int = Field(default=1, ge=1)
    converter_timeout: float | None = Field(default=None, gt=0.0)

    @field_validator("output_format", mode="before")
    @classmethod
    def _normalize_format(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator(
        "strongly_typed_language",
        "strongly_typed_namespace",
        "strongly_typed_class_name",
    )
    @classmethod
    def _validate_optional_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        if not value.strip():
            raise ValueError("strongly typed settings cannot be blank.")
        return value.strip()


class SourceEntry(BaseModel):
    """One path with optional string metadata."""

    model_config = ConfigDict(extra="forbid")

    path: Path
    metadata: dict[str, str] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def _normalize_metadata(cls, value: object) -> object:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("metadata must be a mapping.")
        return {str(key): str(item) for key, item in value.items()}


class GenerateResourceConfig(TaskConfig):
    """Full task configuration including the source and output lists.

    Source and output entries are ``{"path": ..., "metadata": {...}}``
    tables or plain path strings.
    """

    sources: list[Path | SourceEntry] = Field(default_factory=list)
    output_resources: list[Path | SourceEntry] | None = None
