"""Per-source staleness decisions for incremental generation."""

from __future__ import annotations

import hashlib
import json
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from resource_generator.infrastructure.cache_store import CacheRecord, CacheStore


class Staleness(str, Enum):
    STALE = "stale"
    UP_TO_DATE = "up_to_date"


@dataclass(frozen=True)
class GlobalDependency:
    """Dependency shared by every source in the batch.

    ``recorded_ns`` of ``None`` compares the file against the output being
    evaluated (additional inputs); otherwise against the recorded snapshot
    (references).
    """

    path: Path
    recorded_ns: int | None = None


@dataclass(frozen=True)
class PerSourceDependency:
    """Dependency discovered inside one source (linked content)."""

    source: Path
    path: Path
    recorded_ns: int


type Dependency = GlobalDependency | PerSourceDependency


@dataclass(frozen=True)
class Verdict:
    staleness: Staleness
    reason: str = ""

    @property
    def up_to_date(self) -> bool:
        return self.staleness is Staleness.UP_TO_DATE


@dataclass(frozen=True)
class GlobalTriggers:
    """Run-wide inputs to every staleness decision."""

    additional_inputs: tuple[Path, ...] = ()
    references: tuple[Path, ...] = ()
    fingerprint: str = ""
    cache_available: bool = True


UP_TO_DATE = Verdict(Staleness.UP_TO_DATE)


def mtime_ns(path: Path) -> int | None:
    """Modification time in nanoseconds, or ``None`` when ``path`` is not a file."""
    try:
        stat = os.stat(path)
    except OSError:
        return None
    return stat.st_mtime_ns


def dependency_fingerprint(
    additional_inputs: Iterable[Path], references: Iterable[Path]
) -> str:
    """Stable digest of the additional-input and reference path sets."""
    payload = json.dumps(
        {
            "additional_inputs": sorted(str(path) for path in additional_inputs),
            "references": sorted(str(path) for path in references),
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def snapshot(paths: Iterable[Path]) -> dict[str, int]:
    """Record current mtimes for existing ``paths`` keyed by path string."""
    recorded: dict[str, int] = {}
    for path in paths:
        current = mtime_ns(path)
        if current is not None:
            recorded[str(path)] = current
    return recorded


class StalenessEvaluator:
    """Decide whether one source must be regenerated."""

    def global_triggers(
        self,
        additional_inputs: Sequence[Path],
        references: Sequence[Path],
        cache: CacheStore,
    ) -> GlobalTriggers:
        return GlobalTriggers(
            additional_inputs=tuple(additional_inputs),
            references=tuple(references),
            fingerprint=dependency_fingerprint(additional_inputs, references),
            cache_available=cache.loaded,
        )

    def dependencies(
        self,
        source: Path,
        record: CacheRecord,
        triggers: GlobalTriggers,
    ) -> list[Dependency]:
        """Every dependency of ``source``; overlapping paths keep the global rule."""
        deps: list[Dependency] = [
            GlobalDependency(path=path) for path in triggers.additional_inputs
        ]
        deps.extend(
            GlobalDependency(path=path, recorded_ns=record.references.get(str(path), -1))
            for path in triggers.references
        )
        global_paths = {str(dep.path) for dep in deps}
        deps.extend(
            PerSourceDependency(source=source, path=Path(path), recorded_ns=recorded)
            for path, recorded in record.linked_content.items()
            if path not in global_paths
        )
        return deps

    @staticmethod
    def invalidation(dep: Dependency, output_mtime: int) -> str | None:
        """Reason ``dep`` invalidates the output, or ``None``."""
        current = mtime_ns(dep.path)
        kind = "linked file" if isinstance(dep, PerSourceDependency) else "dependency"
        if current is None:
            return f"{kind} '{dep.path}' is missing"
        baseline = output_mtime if dep.recorded_ns is None else dep.recorded_ns
        if current > baseline:
            return f"{kind} '{dep.path}' changed"
        return None

    def evaluate(
        self,
        source: Path,
        output: Path,
        record: CacheRecord | None,
        triggers: GlobalTriggers,
    ) -> Verdict:
        """Return :data:`UP_TO_DATE` only when every precondition holds.

        Equal timestamps count as up to date; only a strictly newer file
        invalidates an output.
        """
        if not triggers.cache_available:
            return Verdict(Staleness.STALE, "no dependency cache")
        if record is None:
            return Verdict(Staleness.STALE, "no cache record")
        if record.output != str(output):
            return Verdict(Staleness.STALE, "output path changed")
        if record.dependency_fingerprint != triggers.fingerprint:
            return Verdict(Staleness.STALE, "references or additional inputs changed")
        output_mtime = mtime_ns(output)
        if output_mtime is None:
            return Verdict(Staleness.STALE, "output file is missing")
        source_mtime = mtime_ns(source)
        if source_mtime is None:
            return Verdict(Staleness.STALE, "source file is missing")
        if source_mtime > record.source_mtime_ns:
            return Verdict(Staleness.STALE, "source file changed")
        for dep in self.dependencies(source, record, triggers):
            reason = self.invalidation(dep, output_mtime)
            if reason is not None:
                return Verdict(Staleness.STALE, reason)
        return UP_TO_DATE
