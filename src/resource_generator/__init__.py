"""Top-level API for incremental resource generation."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from resource_generator.types import TaskItem

__version__ = "0.1.0"


def generate_resource(
    sources: Sequence[str | Path | TaskItem],
    output_resources: Sequence[str | Path | TaskItem] | None = None,
    references: Iterable[Path] = (),
    additional_inputs: Iterable[Path] = (),
    state_file: Path | None = None,
    **kwargs: object,
):
    """Convert resource files between formats, skipping up-to-date outputs.

    Parameters
    ----------
    sources : Sequence[str | Path | TaskItem]
        Source resource files (``.resx``, ``.txt``/``.restext``,
        ``.resources``).
    output_resources : Sequence, optional
        Explicit outputs, index-aligned with ``sources``. Defaults to the
        source path with the output format's extension.
    references : Iterable[Path], default=()
        Assemblies used to resolve typed values.
    additional_inputs : Iterable[Path], default=()
        Extra files whose change forces every source to be regenerated.
    state_file : Path | None, default=None
        Dependency cache location; without it every run is a full rebuild.
    **kwargs
        Remaining task options, e.g. ``strongly_typed_language``.

    Returns
    -------
    RunResult
        Outputs, written files, diagnostics and the success flag.
    """
    from .api import generate_resource as _impl

    return _impl(
        sources=sources,
        output_resources=output_resources,
        references=references,
        additional_inputs=additional_inputs,
        state_file=state_file,
        **kwargs,
    )


__all__ = ["TaskItem", "generate_resource"]
