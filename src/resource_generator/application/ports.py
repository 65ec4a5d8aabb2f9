"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from resource_generator.application.results import ConversionOutcome, GeneratedAccessor


class ResourceConverter(Protocol):
    """Convert one resource file into another format."""

    def convert(
        self,
        input_path: Path,
        input_format: str | None,
        output_path: Path,
        output_format: str | None,
        references: Sequence[Path],
    ) -> ConversionOutcome:
        """Write ``output_path`` from ``input_path``.

        Formats are format names (``"resx"``, ``"text"``, ``"resources"``)
        or ``None`` to infer them from the file extension. Raises
        ``ResourceConversionError`` on failure.
        """


class AccessorGenerator(Protocol):
    """Emit a strongly-typed accessor class for a resource set."""

    def file_extension(self, language: str) -> str:
        """Return the source extension for ``language``.

        Raises ``ConfigurationError`` for unknown languages.
        """

    def generate(
        self,
        resource_keys: Sequence[str],
        language: str,
        namespace: str | None,
        class_name: str,
        public_class: bool,
        output_path: Path,
        resource_base_name: str,
    ) -> GeneratedAccessor:
        """Write the accessor source and report its path and skipped keys.

        Raises ``AccessorGenerationError`` on failure.
        """
