"""Output item resolution and metadata forwarding."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from resource_generator.errors import ConfigurationError
from resource_generator.types import TaskItem

INVALID_PATH_CHARS = frozenset('<>"|?*\x00') | frozenset(chr(code) for code in range(1, 32))


def merge_forwarding(dst: TaskItem, src: TaskItem) -> TaskItem:
    """Copy every metadata key of ``src`` onto ``dst``.

    Same-named keys on ``dst`` are overwritten, keys only on ``dst`` are
    kept and ``dst.path`` is never changed. Returns a new item.
    """
    merged = dict(dst.metadata)
    merged.update(src.metadata)
    return TaskItem(path=dst.path, metadata=merged)


def validate_output_path(path: Path) -> None:
    """Raise :class:`ConfigurationError` when ``path`` cannot name an output file."""
    raw = str(path)
    bad = sorted({ch for ch in raw if ch in INVALID_PATH_CHARS})
    if bad:
        shown = ", ".join(repr(ch) for ch in bad)
        raise ConfigurationError(f"Output path '{raw}' contains invalid characters: {shown}.")
    if not raw.strip() or path.name in {"", ".", ".."} or raw.endswith(("/", "\\")):
        raise ConfigurationError(f"Output path '{raw}' does not name a file.")


class OutputResolver:
    """Compute one output item per source item."""

    def __init__(self, default_extension: str = ".resources") -> None:
        self.default_extension = default_extension

    def _derive(self, source: Path) -> Path:
        try:
            return source.with_suffix(self.default_extension)
        except ValueError as exc:
            raise ConfigurationError(
                f"Cannot derive an output name from source '{source}'."
            ) from exc

    def resolve(
        self,
        sources: Sequence[TaskItem],
        explicit_outputs: Sequence[TaskItem] | None = None,
    ) -> list[TaskItem]:
        """Resolve outputs, validating them before any conversion.

        Parameters
        ----------
        sources : Sequence[TaskItem]
            Source items in task order.
        explicit_outputs : Sequence[TaskItem] | None, default=None
            Caller-supplied outputs, index-aligned with ``sources``. When
            omitted, each output is the source path with
            :attr:`default_extension`.

        Returns
        -------
        list[TaskItem]
            Output items carrying the forwarded source metadata.

        Raises
        ------
        ConfigurationError
            On a length mismatch, an invalid output path or two sources
            sharing one output.
        """
        if explicit_outputs is None:
            outputs = [TaskItem(path=self._derive(source.path)) for source in sources]
        else:
            if len(explicit_outputs) != len(sources):
                raise ConfigurationError(
                    f"{len(sources)} source item(s) but {len(explicit_outputs)} "
                    "output item(s) were specified; the counts must match."
                )
            outputs = list(explicit_outputs)

        resolved = [merge_forwarding(out, src) for out, src in zip(outputs, sources)]
        seen: dict[str, Path] = {}
        for source, output in zip(sources, resolved):
            validate_output_path(output.path)
            key = str(output.path)
            if key in seen:
                raise ConfigurationError(
                    f"Sources '{seen[key]}' and '{source.path}' both write '{key}'."
                )
            seen[key] = source.path
        return resolved
