"""Unit tests for the persistent dependency cache."""

from __future__ import annotations

import json
from pathlib import Path

from resource_generator.infrastructure.cache_store import (
    CACHE_FORMAT_VERSION,
    AccessorRecord,
    CacheRecord,
    CacheStore,
)


def _record(source: str = "A.resx") -> CacheRecord:
    return CacheRecord(
        source=source,
        source_mtime_ns=1,
        output="A.resources",
        output_mtime_ns=2,
        linked_content={"logo.png": 3},
        references={"Lib.dll": 4},
        dependency_fingerprint="abc",
        resource_keys=["Greeting"],
    )


def test_missing_file_loads_empty_unavailable_cache(tmp_path: Path) -> None:
    store = CacheStore.load(tmp_path / "state.cache")
    assert len(store) == 0
    assert store.loaded is False
    assert store.warnings == []


def test_no_path_never_flushes() -> None:
    store = CacheStore.load(None)
    store.put(_record())
    assert store.flush() is False
    assert store.warnings == []


def test_flush_and_reload_roundtrip(tmp_path: Path) -> None:
    """Records and the accessor identity survive a flush/load cycle."""
    path = tmp_path / "obj" / "state.cache"
    store = CacheStore.load(path)
    store.put(_record())
    store.set_accessor(AccessorRecord(path="A.cs", fingerprint="f"))

    assert store.flush() is True

    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["version"] == CACHE_FORMAT_VERSION
    reloaded = CacheStore.load(path)
    assert reloaded.loaded is True
    assert reloaded.get(Path("A.resx")) == _record()
    assert reloaded.accessor == AccessorRecord(path="A.cs", fingerprint="f")
    assert list(path.parent.glob("*.tmp")) == []


def test_put_replaces_existing_record(tmp_path: Path) -> None:
    store = CacheStore.load(tmp_path / "state.cache")
    store.put(_record())
    store.put(_record().model_copy(update={"source_mtime_ns": 99}))
    assert len(store) == 1
    assert store.get(Path("A.resx")).source_mtime_ns == 99


def test_corrupt_file_is_diagnosed_and_ignored(tmp_path: Path) -> None:
    """Unreadable content degrades to an empty cache with a warning."""
    path = tmp_path / "state.cache"
    path.write_text("{ not json", encoding="utf-8")

    store = CacheStore.load(path)

    assert store.loaded is False
    assert len(store) == 0
    assert len(store.warnings) == 1
    assert "corrupt" in store.warnings[0]
    assert "rebuilt" in store.warnings[0]


def test_other_version_is_treated_as_corrupt(tmp_path: Path) -> None:
    path = tmp_path / "state.cache"
    path.write_text(json.dumps({"version": 42, "records": {}}), encoding="utf-8")
    store = CacheStore.load(path)
    assert store.loaded is False
    assert store.warnings


def test_unknown_fields_are_rejected(tmp_path: Path) -> None:
    path = tmp_path / "state.cache"
    path.write_text(json.dumps({"version": CACHE_FORMAT_VERSION, "extra": 1}), encoding="utf-8")
    assert CacheStore.load(path).loaded is False


def test_unwritable_target_is_a_warning(tmp_path: Path) -> None:
    """Flushing onto a directory fails softly and leaves no temp files."""
    target = tmp_path / "state.cache"
    target.mkdir()

    store = CacheStore.load(target)
    store.put(_record())

    assert store.flush() is False
    assert any("Could not write dependency cache" in warning for warning in store.warnings)
    assert list(tmp_path.glob("*.tmp")) == []
