"""Shared type aliases and item types for resource generation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

type ResourceFormat = Literal["resx", "text", "resources"]
type Severity = Literal["info", "warning", "error"]
type Metadata = Mapping[str, str]

EXTENSION_FORMATS: dict[str, ResourceFormat] = {
    ".resx": "resx",
    ".resources": "resources",
    ".txt": "text",
    ".restext": "text",
}

FORMAT_EXTENSIONS: dict[ResourceFormat, str] = {
    "resx": ".resx",
    "resources": ".resources",
    "text": ".txt",
}

DEFAULT_OUTPUT_FORMAT: ResourceFormat = "resources"


def format_for_path(path: Path) -> ResourceFormat | None:
    """Return the resource format implied by ``path``'s extension."""
    return EXTENSION_FORMATS.get(path.suffix.lower())


@dataclass(frozen=True)
class TaskItem:
    """A file path plus arbitrary string metadata.

    Used for both source items and output items. Identity is the path; the
    metadata mapping is never mutated once the item is handed to the task.
    """

    path: Path
    metadata: Metadata = field(default_factory=dict)

    @classmethod
    def of(cls, path: str | Path, **metadata: str) -> TaskItem:
        """Build an item from a path and keyword metadata."""
        return cls(path=Path(path), metadata=dict(metadata))

    def get_metadata(self, key: str, default: str = "") -> str:
        """Return metadata value for ``key`` or ``default`` when absent."""
        return self.metadata.get(key, default)
