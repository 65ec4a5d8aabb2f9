"""Typed option objects shared across resource generation use-cases."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from resource_generator.types import DEFAULT_OUTPUT_FORMAT, ResourceFormat


@dataclass(frozen=True)
class StronglyTypedOptions:
    """Strongly-typed accessor configuration."""

    language: str | None = None
    namespace: str | None = None
    class_name: str | None = None
    file_name: Path | None = None
    public_class: bool = False

    @property
    def requested(self) -> bool:
        return self.language is not None

    def fields_without_language(self) -> list[str]:
        """Names of accessor fields that were set although no language was."""
        if self.requested:
            return []
        supplied = {
            "namespace": self.namespace,
            "class name": self.class_name,
            "file name": self.file_name,
        }
        return [label for label, value in supplied.items() if value is not None]


@dataclass(frozen=True)
class ExecutionOptions:
    """Per-source dispatch configuration."""

    max_workers: int = 1
    converter_timeout: float | None = None


@dataclass(frozen=True)
class TaskOptions:
    """Shared task options passed through use-cases."""

    references: tuple[Path, ...] = ()
    additional_inputs: tuple[Path, ...] = ()
    state_file: Path | None = None
    output_format: ResourceFormat = DEFAULT_OUTPUT_FORMAT
    strongly_typed: StronglyTypedOptions = StronglyTypedOptions()
    execution: ExecutionOptions = ExecutionOptions()
