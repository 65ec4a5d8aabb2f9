"""Application-layer result objects."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from resource_generator.types import Severity, TaskItem

type SourceStatus = Literal["converted", "up_to_date", "failed"]


@dataclass(frozen=True)
class Diagnostic:
    """One user-facing message produced during a run."""

    severity: Severity
    message: str
    source: Path | None = None

    def __str__(self) -> str:
        prefix = f"{self.source}: " if self.source is not None else ""
        return f"{self.severity}: {prefix}{self.message}"


@dataclass(frozen=True)
class ConversionOutcome:
    """What a converter reports after writing one output."""

    written: Path
    linked_content: tuple[Path, ...] = ()
    keys: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class SourceOutcome:
    """Per-source result: converted, already up to date, or failed."""

    index: int
    source: TaskItem
    output: TaskItem
    status: SourceStatus
    error: str | None = None
    keys: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.status != "failed"


@dataclass(frozen=True)
class GeneratedAccessor:
    """What an accessor generator reports after writing its file."""

    path: Path
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class AccessorOutcome:
    """Resolved accessor file and whether it was (re)generated."""

    path: Path
    class_name: str
    generated: bool
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class RunResult:
    """Structured outcome of one task run."""

    output_resources: tuple[TaskItem, ...] = ()
    files_written: tuple[Path, ...] = ()
    success: bool = True
    outcomes: tuple[SourceOutcome, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()
    strongly_typed_file_name: Path | None = None
    strongly_typed_class_name: str | None = None

    @property
    def errors(self) -> list[Diagnostic]:
        return [item for item in self.diagnostics if item.severity == "error"]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [item for item in self.diagnostics if item.severity == "warning"]

    @property
    def converted(self) -> list[SourceOutcome]:
        return [item for item in self.outcomes if item.status == "converted"]
