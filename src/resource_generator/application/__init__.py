"""Application-layer use-cases and option objects."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from resource_generator.application.options import (
    ExecutionOptions,
    StronglyTypedOptions,
    TaskOptions,
)
from resource_generator.application.ports import AccessorGenerator, ResourceConverter
from resource_generator.application.results import RunResult
from resource_generator.types import TaskItem


def build_task_options(
    *,
    references: Iterable[Path] = (),
    additional_inputs: Iterable[Path] = (),
    state_file: Path | None = None,
    output_format: str = "resources",
    strongly_typed_language: str | None = None,
    strongly_typed_namespace: str | None = None,
    strongly_typed_class_name: str | None = None,
    strongly_typed_file_name: Path | None = None,
    public_class: bool = False,
    max_workers: int = 1,
    converter_timeout: float | None = None,
) -> TaskOptions:
    """Build typed task options via lazy use-case import."""
    from resource_generator.application.use_cases import build_task_options as _impl

    return _impl(
        references=references,
        additional_inputs=additional_inputs,
        state_file=state_file,
        output_format=output_format,
        strongly_typed_language=strongly_typed_language,
        strongly_typed_namespace=strongly_typed_namespace,
        strongly_typed_class_name=strongly_typed_class_name,
        strongly_typed_file_name=strongly_typed_file_name,
        public_class=public_class,
        max_workers=max_workers,
        converter_timeout=converter_timeout,
    )


def generate_resources(
    *,
    sources: Sequence[TaskItem],
    outputs: Sequence[TaskItem] | None = None,
    options: TaskOptions | None = None,
    converter: ResourceConverter | None = None,
    generator: AccessorGenerator | None = None,
) -> RunResult:
    """Run one resource generation task via lazy use-case import."""
    from resource_generator.application.use_cases import generate_resources as _impl

    return _impl(
        sources=sources,
        outputs=outputs,
        options=options,
        converter=converter,
        generator=generator,
    )


__all__ = [
    "ExecutionOptions",
    "StronglyTypedOptions",
    "TaskOptions",
    "RunResult",
    "build_task_options",
    "generate_resources",
]
