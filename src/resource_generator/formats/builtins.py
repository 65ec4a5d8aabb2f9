"""Built-in resource format codecs."""

from __future__ import annotations

from pathlib import Path

from resource_generator.formats.binary import (
    read_binary_resources,
    write_binary_resources,
)
from resource_generator.formats.model import ResourceSet
from resource_generator.formats.resx import read_resx_resources, write_resx_resources
from resource_generator.formats.text import read_text_resources, write_text_resources


class _ExtensionCodec:
    name = ""
    extensions: tuple[str, ...] = ()

    def can_handle(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions


class ResxCodec(_ExtensionCodec):
    """Structured XML resource definitions."""

    name = "resx"
    extensions = (".resx",)

    def read(self, path: Path) -> ResourceSet:
        return read_resx_resources(path)

    def write(self, resources: ResourceSet, path: Path) -> None:
        write_resx_resources(resources, path)


class TextCodec(_ExtensionCodec):
    """Flat ``name=value`` string lists."""

    name = "text"
    extensions = (".txt", ".restext")

    def read(self, path: Path) -> ResourceSet:
        return read_text_resources(path)

    def write(self, resources: ResourceSet, path: Path) -> None:
        write_text_resources(resources, path)


class BinaryCodec(_ExtensionCodec):
    """Compiled binary resource blobs."""

    name = "resources"
    extensions = (".resources",)

    def read(self, path: Path) -> ResourceSet:
        return read_binary_resources(path)

    def write(self, resources: ResourceSet, path: Path) -> None:
        write_binary_resources(resources, path)
