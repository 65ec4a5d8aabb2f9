"""Compiled binary (``.resources``) resource format.

Layout (little-endian)::

    magic    4s   b"RSRC"
    version  H    FORMAT_VERSION
    count    I    number of entries
    entries  count * (tag B, name, [type name], value)

Strings and byte payloads are ``I``-length-prefixed; strings are UTF-8.
"""

from __future__ import annotations

import struct
from pathlib import Path

from resource_generator.errors import ResourceFormatError
from resource_generator.formats.model import BYTES_TYPE, ResourceEntry, ResourceSet

MAGIC = b"RSRC"
FORMAT_VERSION = 1

TAG_STRING = 0
TAG_BYTES = 1
TAG_TYPED_STRING = 2
TAG_TYPED_BYTES = 3

_HEADER = struct.Struct("<4sHI")
_LENGTH = struct.Struct("<I")
_TAG = struct.Struct("<B")


def _pack_blob(data: bytes) -> bytes:
    return _LENGTH.pack(len(data)) + data


def _pack_str(value: str) -> bytes:
    return _pack_blob(value.encode("utf-8"))


class _Reader:
    def __init__(self, data: bytes, source: Path | None) -> None:
        self._data = data
        self._offset = 0
        self._source = source

    def unpack(self, fmt: struct.Struct) -> tuple:
        end = self._offset + fmt.size
        if end > len(self._data):
            raise ResourceFormatError("Truncated resources file.", source=self._source)
        values = fmt.unpack_from(self._data, self._offset)
        self._offset = end
        return values

    def blob(self) -> bytes:
        (length,) = self.unpack(_LENGTH)
        end = self._offset + length
        if end > len(self._data):
            raise ResourceFormatError("Truncated resources file.", source=self._source)
        payload = self._data[self._offset : end]
        self._offset = end
        return payload

    def text(self) -> str:
        try:
            return self.blob().decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ResourceFormatError(
                f"Invalid UTF-8 string in resources file: {exc}", source=self._source
            ) from exc

    @property
    def exhausted(self) -> bool:
        return self._offset == len(self._data)


def encode_resources(resources: ResourceSet) -> bytes:
    """Serialize ``resources`` to the binary layout."""
    chunks = [_HEADER.pack(MAGIC, FORMAT_VERSION, len(resources))]
    for entry in resources:
        if isinstance(entry.value, bytes):
            if entry.type_name in (None, BYTES_TYPE):
                chunks.append(_TAG.pack(TAG_BYTES) + _pack_str(entry.name))
            else:
                chunks.append(
                    _TAG.pack(TAG_TYPED_BYTES)
                    + _pack_str(entry.name)
                    + _pack_str(entry.type_name)
                )
            chunks.append(_pack_blob(entry.value))
        elif entry.is_string:
            chunks.append(_TAG.pack(TAG_STRING) + _pack_str(entry.name))
            chunks.append(_pack_str(entry.value))
        else:
            chunks.append(
                _TAG.pack(TAG_TYPED_STRING)
                + _pack_str(entry.name)
                + _pack_str(entry.type_name or "")
            )
            chunks.append(_pack_str(entry.value))
    return b"".join(chunks)


def decode_resources(data: bytes, source: Path | None = None) -> ResourceSet:
    """Deserialize the binary layout.

    Raises
    ------
    ResourceFormatError
        On a bad magic number, an unsupported version, an unknown entry tag
        or truncated content.
    """
    reader = _Reader(data, source)
    magic, version, count = reader.unpack(_HEADER)
    if magic != MAGIC:
        raise ResourceFormatError("Not a compiled resources file.", source=source)
    if version != FORMAT_VERSION:
        raise ResourceFormatError(
            f"Unsupported resources format version {version}.", source=source
        )
    resources = ResourceSet()
    for _ in range(count):
        (tag,) = reader.unpack(_TAG)
        name = reader.text()
        if tag == TAG_STRING:
            entry = ResourceEntry(name=name, value=reader.text())
        elif tag == TAG_BYTES:
            entry = ResourceEntry(name=name, value=reader.blob(), type_name=BYTES_TYPE)
        elif tag == TAG_TYPED_STRING:
            type_name = reader.text()
            entry = ResourceEntry(name=name, value=reader.text(), type_name=type_name)
        elif tag == TAG_TYPED_BYTES:
            type_name = reader.text()
            entry = ResourceEntry(name=name, value=reader.blob(), type_name=type_name)
        else:
            raise ResourceFormatError(f"Unknown entry tag {tag}.", source=source)
        resources.add(entry)
    if not reader.exhausted:
        raise ResourceFormatError("Trailing data after last entry.", source=source)
    return resources


def read_binary_resources(path: Path) -> ResourceSet:
    """Read a compiled ``.resources`` file."""
    return decode_resources(path.read_bytes(), source=path)


def write_binary_resources(resources: ResourceSet, path: Path) -> None:
    """Write ``resources`` to ``path`` in the compiled layout."""
    path.write_bytes(encode_resources(resources))
