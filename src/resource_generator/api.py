"""Public file-based resource generation API (delegates to application use-cases)."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable
from typing import Optional
from typing import Sequence

from resource_generator.adapters.converters import FileResourceConverter
from resource_generator.application.results import RunResult
from resource_generator.application.use_cases import build_task_options
from resource_generator.application.use_cases import generate_resources
from resource_generator.formats import create_default_registry
from resource_generator.types import TaskItem

type ItemLike = str | Path | TaskItem


def _as_item(value: ItemLike) -> TaskItem:
    if isinstance(value, TaskItem):
        return value
    return TaskItem(path=Path(value))


def generate_resource(
    sources: Sequence[ItemLike],
    output_resources: Optional[Sequence[ItemLike]] = None,
    references: Iterable[Path] = (),
    additional_inputs: Iterable[Path] = (),
    state_file: Optional[Path] = None,
    output_format: str = "resources",
    strongly_typed_language: Optional[str] = None,
    strongly_typed_namespace: Optional[str] = None,
    strongly_typed_class_name: Optional[str] = None,
    strongly_typed_file_name: Optional[Path] = None,
    public_class: bool = False,
    max_workers: int = 1,
    converter_timeout: Optional[float] = None,
    format_modules: Optional[Iterable[str]] = None,
) -> RunResult:
    """Convert resource files incrementally and optionally emit an accessor class.

    Raises ``ConfigurationError`` for invalid parameter types; task-level
    configuration problems are reported on the returned result.
    ``format_modules`` names extra codec modules (import path or file path)
    to register next to the built-in formats.
    """
    options = build_task_options(
        references=[Path(path) for path in references],
        additional_inputs=[Path(path) for path in additional_inputs],
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
    outputs = (
        None if output_resources is None else [_as_item(item) for item in output_resources]
    )
    converter = None
    if format_modules:
        converter = FileResourceConverter(create_default_registry(extra_modules=format_modules))
    return generate_resources(
        sources=[_as_item(item) for item in sources],
        outputs=outputs,
        options=options,
        converter=converter,
    )
