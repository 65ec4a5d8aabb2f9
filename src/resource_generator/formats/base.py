"""Codec protocol for resource file formats."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from resource_generator.formats.model import ResourceSet


@runtime_checkable
class ResourceCodec(Protocol):
    """Protocol implemented by resource format codecs."""

    name: str
    extensions: tuple[str, ...]

    def can_handle(self, path: Path) -> bool:
        """Check whether this codec reads and writes ``path``.

        Parameters
        ----------
        path : Path
            Resource file path; usually only the extension matters.

        Returns
        -------
        bool
            ``True`` if the codec owns this file type.
        """

    def read(self, path: Path) -> ResourceSet:
        """Read a resource file.

        Parameters
        ----------
        path : Path
            File to read.

        Returns
        -------
        ResourceSet
            Entries in file order plus any non-fatal warnings.
        """

    def write(self, resources: ResourceSet, path: Path) -> None:
        """Write ``resources`` to ``path``.

        Parameters
        ----------
        resources : ResourceSet
            Entries to serialize.
        path : Path
            Destination file; overwritten if present.
        """
