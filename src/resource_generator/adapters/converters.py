"""File-based resource converter implementing the application port."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path

from resource_generator.application.results import ConversionOutcome
from resource_generator.errors import ResourceConversionError
from resource_generator.formats import (
    FormatRegistry,
    ResourceCodec,
    ResourceSet,
    create_default_registry,
)

logger = logging.getLogger(__name__)

BUILTIN_ASSEMBLIES = frozenset({"mscorlib", "system.private.corelib", "netstandard"})


class FileResourceConverter:
    """Convert between resource formats through the codec registry."""

    def __init__(self, registry: FormatRegistry | None = None) -> None:
        self.registry = registry or create_default_registry()

    def convert(
        self,
        input_path: Path,
        input_format: str | None,
        output_path: Path,
        output_format: str | None,
        references: Sequence[Path],
    ) -> ConversionOutcome:
        """Read ``input_path`` and write ``output_path``.

        Parameters
        ----------
        input_path : Path
            Source resource file.
        input_format : str | None
            Codec name, or ``None`` to infer from the extension.
        output_path : Path
            Destination; replaced atomically so a failed conversion never
            leaves a partial file behind.
        output_format : str | None
            Codec name, or ``None`` to infer from the extension.
        references : Sequence[Path]
            Assemblies available for resolving typed values.

        Returns
        -------
        ConversionOutcome
            Written path, linked files, resource keys and parse warnings.
        """
        try:
            reader = self._codec(input_format, input_path)
            writer = self._codec(output_format, output_path)
            _check_references(references)
            if not input_path.is_file():
                raise ResourceConversionError(f"Source file '{input_path}' does not exist.")
            resources = reader.read(input_path)
            _check_types(resources, references)
            _atomic_write(writer.write, resources, output_path)
        except ResourceConversionError as exc:
            exc.source = input_path
            raise
        except Exception as exc:
            raise ResourceConversionError(str(exc), source=input_path) from exc

        logger.debug(
            "Wrote %d resource(s) from '%s' to '%s'", len(resources), input_path, output_path
        )
        return ConversionOutcome(
            written=output_path,
            linked_content=tuple(resources.linked_paths()),
            keys=tuple(resources.names()),
            warnings=tuple(resources.warnings),
        )

    def _codec(self, name: str | None, path: Path) -> ResourceCodec:
        if name is None:
            return self.registry.resolve(path)
        return self.registry.get(name)


def _check_references(references: Sequence[Path]) -> None:
    missing = [str(path) for path in references if not path.is_file()]
    if missing:
        raise ResourceConversionError(
            f"Referenced assemblies could not be found: {', '.join(missing)}."
        )


def _check_types(resources: ResourceSet, references: Sequence[Path]) -> None:
    available = BUILTIN_ASSEMBLIES | {path.stem.lower() for path in references}
    for entry in resources:
        if entry.linked_path is not None or not isinstance(entry.value, str):
            continue
        assembly = entry.assembly_name
        if assembly is not None and assembly.lower() not in available:
            raise ResourceConversionError(
                f"Resource '{entry.name}' uses type '{entry.type_name}' but assembly "
                f"'{assembly}' is not referenced."
            )


def _atomic_write(
    write: Callable[[ResourceSet, Path], None], resources: ResourceSet, path: Path
) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    os.close(fd)
    try:
        write(resources, Path(tmp_name))
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
