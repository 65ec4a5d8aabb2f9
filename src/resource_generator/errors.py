"""Exception hierarchy for resource generation."""

from __future__ import annotations

from pathlib import Path


class ResourceGeneratorError(Exception):
    """Base error for all resource generation failures."""

    exit_code = 1


class ConfigurationError(ResourceGeneratorError):
    """Task configuration is invalid; raised before any side effect."""

    exit_code = 2


class ResourceConversionError(ResourceGeneratorError):
    """Conversion of a single source failed.

    Parameters
    ----------
    message : str
        Human-readable failure description.
    source : Path | None, default=None
        Source file the failure is attributed to.
    """

    def __init__(self, message: str, source: Path | None = None) -> None:
        super().__init__(message)
        self.source = source


class ResourceFormatError(ResourceConversionError):
    """Malformed resource content (parse or write failure)."""

    def __init__(
        self,
        message: str,
        source: Path | None = None,
        line: int | None = None,
    ) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message, source=source)
        self.line = line


class AccessorGenerationError(ResourceGeneratorError):
    """Strongly-typed accessor file could not be generated."""


class CacheIOError(ResourceGeneratorError):
    """Dependency cache could not be read or written."""
