"""In-memory resource set shared by all format codecs."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

STRING_TYPE = "System.String"
BYTES_TYPE = "System.Byte[]"
BUILTIN_TYPES = frozenset({STRING_TYPE, BYTES_TYPE})


@dataclass(frozen=True)
class ResourceEntry:
    """One named resource value.

    Parameters
    ----------
    name : str
        Resource key.
    value : str | bytes
        Textual or binary payload. Typed values keep their textual form.
    type_name : str | None, default=None
        Fully-qualified type for values that are neither plain strings nor
        byte arrays, e.g. ``"System.Drawing.Point, System.Drawing"``.
    comment : str | None, default=None
        Free-form comment carried by formats that support one.
    linked_path : Path | None, default=None
        File the value was loaded from when it was linked rather than
        embedded.
    """

    name: str
    value: str | bytes
    type_name: str | None = None
    comment: str | None = None
    linked_path: Path | None = None

    @property
    def is_string(self) -> bool:
        return isinstance(self.value, str) and self.type_name in (None, STRING_TYPE)

    @property
    def assembly_name(self) -> str | None:
        """Assembly part of ``type_name`` for non-builtin types."""
        if self.type_name is None or self.type_name in BUILTIN_TYPES:
            return None
        _, sep, assembly = self.type_name.partition(",")
        if not sep:
            return None
        return assembly.split(",", 1)[0].strip() or None


@dataclass
class ResourceSet:
    """Ordered collection of resource entries with parse warnings."""

    entries: list[ResourceEntry] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __iter__(self) -> Iterator[ResourceEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]

    def add(self, entry: ResourceEntry) -> bool:
        """Append ``entry`` unless its name is taken; return whether added."""
        if entry.name in self.names():
            self.warnings.append(
                f"Duplicate resource name '{entry.name}' ignored; "
                "the first definition is kept."
            )
            return False
        self.entries.append(entry)
        return True

    def linked_paths(self) -> list[Path]:
        return [entry.linked_path for entry in self.entries if entry.linked_path]
