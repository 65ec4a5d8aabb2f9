"""Persistent dependency cache for incremental resource generation."""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from resource_generator.errors import CacheIOError

logger = logging.getLogger(__name__)

CACHE_FORMAT_VERSION = 1


class CacheRecord(BaseModel):
    """Timestamps observed after the last successful conversion of a source."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    source: str
    source_mtime_ns: int
    output: str
    output_mtime_ns: int
    linked_content: dict[str, int] = Field(default_factory=dict)
    references: dict[str, int] = Field(default_factory=dict)
    dependency_fingerprint: str
    resource_keys: list[str] = Field(default_factory=list)


class AccessorRecord(BaseModel):
    """Identity of the last generated strongly-typed accessor."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str
    fingerprint: str


class CacheDocument(BaseModel):
    """On-disk cache layout."""

    model_config = ConfigDict(extra="forbid")

    version: int = CACHE_FORMAT_VERSION
    records: dict[str, CacheRecord] = Field(default_factory=dict)
    accessor: AccessorRecord | None = None

    @field_validator("version")
    @classmethod
    def _validate_version(cls, value: int) -> int:
        if value != CACHE_FORMAT_VERSION:
            raise ValueError(
                f"unsupported cache version {value} (expected {CACHE_FORMAT_VERSION})"
            )
        return value


class CacheStore:
    """Run-scoped owner of the source → :class:`CacheRecord` mapping.

    Loaded once at task start, mutated during the run (thread-safe) and
    flushed once at the end. Read and write failures never raise; they are
    logged and collected in :attr:`warnings` so the run can proceed as a
    full rebuild.
    """

    def __init__(self, path: Path | None, document: CacheDocument | None = None) -> None:
        self.path = path
        self.loaded = document is not None
        self._document = document or CacheDocument()
        self._lock = threading.Lock()
        self.warnings: list[str] = []

    @classmethod
    def load(cls, path: Path | None) -> CacheStore:
        """Load the cache at ``path``; a missing or corrupt file yields an empty cache."""
        if path is None or not path.exists():
            return cls(path)
        try:
            document = _read_document(path)
        except CacheIOError as exc:
            store = cls(path)
            store._warn(f"{exc} The dependency cache is ignored and all sources are rebuilt.")
            return store
        logger.debug("Loaded dependency cache %s (%d records)", path, len(document.records))
        return cls(path, document)

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def get(self, source: Path) -> CacheRecord | None:
        with self._lock:
            return self._document.records.get(str(source))

    def put(self, record: CacheRecord) -> None:
        with self._lock:
            self._document.records[record.source] = record

    @property
    def accessor(self) -> AccessorRecord | None:
        with self._lock:
            return self._document.accessor

    def set_accessor(self, record: AccessorRecord | None) -> None:
        with self._lock:
            self._document.accessor = record

    def __len__(self) -> int:
        with self._lock:
            return len(self._document.records)

    def flush(self) -> bool:
        """Persist the cache; return ``True`` when the file was written."""
        if self.path is None:
            return False
        with self._lock:
            payload = self._document.model_dump_json(indent=2)
        try:
            _atomic_write(self.path, payload)
        except CacheIOError as exc:
            self._warn(str(exc))
            return False
        logger.debug("Wrote dependency cache %s", self.path)
        return True


def _read_document(path: Path) -> CacheDocument:
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CacheIOError(f"Could not read dependency cache '{path}': {exc}.") from exc
    try:
        return CacheDocument.model_validate_json(raw)
    except ValidationError as exc:
        raise CacheIOError(
            f"Dependency cache '{path}' is corrupt or from another version "
            f"({exc.error_count()} validation errors)."
        ) from exc


def _atomic_write(path: Path, data: str) -> None:
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", delete=False, dir=path.parent, encoding="utf-8", suffix=".tmp"
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise CacheIOError(f"Could not write dependency cache '{path}': {exc}.") from exc
