"""Unit tests for per-source staleness decisions."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from resource_generator.application.staleness import (
    GlobalDependency,
    GlobalTriggers,
    PerSourceDependency,
    Staleness,
    StalenessEvaluator,
    dependency_fingerprint,
    snapshot,
)
from resource_generator.infrastructure.cache_store import CacheRecord

BASE_NS = 1_700_000_000_000_000_000
SECOND = 1_000_000_000


class _Layout:
    """Source, output and optional dependencies with pinned timestamps."""

    def __init__(self, root: Path, set_mtime: Callable[[Path, int], None]) -> None:
        self.root = root
        self.set_mtime = set_mtime
        self.source = self.file("A.resx", BASE_NS)
        self.output = self.file("A.resources", BASE_NS + SECOND)

    def file(self, name: str, mtime_ns: int) -> Path:
        path = self.root / name
        path.write_text(name, encoding="utf-8")
        self.set_mtime(path, mtime_ns)
        return path

    def record(self, **overrides: object) -> CacheRecord:
        fields: dict[str, object] = {
            "source": str(self.source),
            "source_mtime_ns": BASE_NS,
            "output": str(self.output),
            "output_mtime_ns": BASE_NS + SECOND,
            "dependency_fingerprint": dependency_fingerprint([], []),
        }
        fields.update(overrides)
        return CacheRecord(**fields)


@pytest.fixture
def layout(tmp_path: Path, set_mtime: Callable[[Path, int], None]) -> _Layout:
    return _Layout(tmp_path, set_mtime)


def _triggers(
    additional: tuple[Path, ...] = (),
    references: tuple[Path, ...] = (),
    cache_available: bool = True,
) -> GlobalTriggers:
    return GlobalTriggers(
        additional_inputs=additional,
        references=references,
        fingerprint=dependency_fingerprint(additional, references),
        cache_available=cache_available,
    )


def test_fresh_record_is_up_to_date(layout: _Layout) -> None:
    verdict = StalenessEvaluator().evaluate(
        layout.source, layout.output, layout.record(), _triggers()
    )
    assert verdict.up_to_date
    assert verdict.staleness is Staleness.UP_TO_DATE


def test_equal_timestamps_count_as_up_to_date(layout: _Layout) -> None:
    """Only a strictly newer source invalidates the output."""
    layout.set_mtime(layout.source, BASE_NS)
    verdict = StalenessEvaluator().evaluate(
        layout.source, layout.output, layout.record(source_mtime_ns=BASE_NS), _triggers()
    )
    assert verdict.up_to_date


def test_newer_source_is_stale(layout: _Layout) -> None:
    layout.set_mtime(layout.source, BASE_NS + 1)
    verdict = StalenessEvaluator().evaluate(
        layout.source, layout.output, layout.record(), _triggers()
    )
    assert not verdict.up_to_date
    assert verdict.reason == "source file changed"


@pytest.mark.parametrize(
    ("mutate", "reason"),
    [
        (lambda lay: None, "no cache record"),
        (lambda lay: lay.output.unlink(), "output file is missing"),
    ],
)
def test_missing_preconditions_are_stale(
    layout: _Layout, mutate: Callable[[_Layout], None], reason: str
) -> None:
    record = None if reason == "no cache record" else layout.record()
    mutate(layout)
    verdict = StalenessEvaluator().evaluate(layout.source, layout.output, record, _triggers())
    assert verdict.staleness is Staleness.STALE
    assert verdict.reason == reason


def test_deleted_output_is_stale_even_with_fresh_timestamps(layout: _Layout) -> None:
    """Existence of the output is checked directly, not inferred from timestamps."""
    record = layout.record()
    layout.output.unlink()
    assert not StalenessEvaluator().evaluate(
        layout.source, layout.output, record, _triggers()
    ).up_to_date


def test_changed_output_path_is_stale(layout: _Layout) -> None:
    other = layout.file("B.resources", BASE_NS + SECOND)
    verdict = StalenessEvaluator().evaluate(layout.source, other, layout.record(), _triggers())
    assert verdict.reason == "output path changed"


def test_missing_cache_file_forces_rebuild(layout: _Layout) -> None:
    verdict = StalenessEvaluator().evaluate(
        layout.source, layout.output, layout.record(), _triggers(cache_available=False)
    )
    assert verdict.reason == "no dependency cache"


def test_changed_dependency_set_is_stale(layout: _Layout) -> None:
    extra = layout.file("extra.txt", BASE_NS)
    verdict = StalenessEvaluator().evaluate(
        layout.source, layout.output, layout.record(), _triggers(additional=(extra,))
    )
    assert verdict.reason == "references or additional inputs changed"


def test_additional_input_newer_than_output_is_stale(layout: _Layout) -> None:
    extra = layout.file("extra.txt", BASE_NS + 2 * SECOND)
    triggers = _triggers(additional=(extra,))
    record = layout.record(dependency_fingerprint=triggers.fingerprint)
    verdict = StalenessEvaluator().evaluate(layout.source, layout.output, record, triggers)
    assert verdict.reason == f"dependency '{extra}' changed"


def test_additional_input_equal_to_output_is_up_to_date(layout: _Layout) -> None:
    extra = layout.file("extra.txt", BASE_NS + SECOND)
    triggers = _triggers(additional=(extra,))
    record = layout.record(dependency_fingerprint=triggers.fingerprint)
    assert StalenessEvaluator().evaluate(layout.source, layout.output, record, triggers).up_to_date


def test_missing_additional_input_is_stale(layout: _Layout) -> None:
    extra = layout.root / "missing.txt"
    triggers = _triggers(additional=(extra,))
    record = layout.record(dependency_fingerprint=triggers.fingerprint)
    verdict = StalenessEvaluator().evaluate(layout.source, layout.output, record, triggers)
    assert verdict.reason == f"dependency '{extra}' is missing"


def test_reference_compared_with_recorded_snapshot(layout: _Layout) -> None:
    """References are judged against their recorded time, not the output's."""
    ref = layout.file("Lib.dll", BASE_NS + 5 * SECOND)
    triggers = _triggers(references=(ref,))
    record = layout.record(
        dependency_fingerprint=triggers.fingerprint,
        references={str(ref): BASE_NS + 5 * SECOND},
    )
    evaluator = StalenessEvaluator()
    assert evaluator.evaluate(layout.source, layout.output, record, triggers).up_to_date

    layout.set_mtime(ref, BASE_NS + 6 * SECOND)
    assert not evaluator.evaluate(layout.source, layout.output, record, triggers).up_to_date


def test_linked_content_newer_than_snapshot_is_stale(layout: _Layout) -> None:
    logo = layout.file("logo.png", BASE_NS)
    record = layout.record(linked_content={str(logo): BASE_NS})
    evaluator = StalenessEvaluator()
    assert evaluator.evaluate(layout.source, layout.output, record, _triggers()).up_to_date

    layout.set_mtime(logo, BASE_NS + 1)
    verdict = evaluator.evaluate(layout.source, layout.output, record, _triggers())
    assert verdict.reason == f"linked file '{logo}' changed"


def test_missing_linked_content_is_stale(layout: _Layout) -> None:
    logo = layout.root / "gone.png"
    record = layout.record(linked_content={str(logo): BASE_NS})
    verdict = StalenessEvaluator().evaluate(layout.source, layout.output, record, _triggers())
    assert verdict.reason == f"linked file '{logo}' is missing"


def test_overlapping_linked_and_additional_input_uses_global_rule(layout: _Layout) -> None:
    """A path that is both linked and an additional input is only checked globally."""
    shared = layout.file("shared.txt", BASE_NS)
    triggers = _triggers(additional=(shared,))
    record = layout.record(
        dependency_fingerprint=triggers.fingerprint,
        linked_content={str(shared): BASE_NS},
    )

    deps = StalenessEvaluator().dependencies(layout.source, record, triggers)

    assert deps == [GlobalDependency(path=shared)]
    assert not any(isinstance(dep, PerSourceDependency) for dep in deps)


def test_fingerprint_ignores_order() -> None:
    first = dependency_fingerprint([Path("b"), Path("a")], [Path("r")])
    second = dependency_fingerprint([Path("a"), Path("b")], [Path("r")])
    assert first == second
    assert first != dependency_fingerprint([Path("a")], [Path("b"), Path("r")])


def test_snapshot_skips_missing_files(tmp_path: Path) -> None:
    present = tmp_path / "here.txt"
    present.write_text("x", encoding="utf-8")
    recorded = snapshot([present, tmp_path / "gone.txt"])
    assert list(recorded) == [str(present)]
