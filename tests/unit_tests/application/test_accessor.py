"""Unit tests for strongly-typed accessor planning and regeneration."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from resource_generator.application.accessor import (
    StronglyTypedCoordinator,
    sanitize_identifier,
)
from resource_generator.application.options import StronglyTypedOptions
from resource_generator.application.results import GeneratedAccessor
from resource_generator.errors import ConfigurationError
from resource_generator.infrastructure.cache_store import CacheStore


class _Generator:
    def __init__(self, warnings: tuple[str, ...] = ()) -> None:
        self.calls: list[dict[str, object]] = []
        self.warnings = warnings

    def file_extension(self, language: str) -> str:
        if language.lower() != "csharp":
            raise ConfigurationError(f"Unsupported strongly typed language '{language}'.")
        return ".cs"

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
        self.calls.append(
            {
                "keys": list(resource_keys),
                "namespace": namespace,
                "class_name": class_name,
                "base_name": resource_base_name,
            }
        )
        output_path.write_text("// accessor\n", encoding="utf-8")
        return GeneratedAccessor(path=output_path, warnings=self.warnings)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("Strings", "Strings"), ("My-Strings.en", "My_Strings_en"), ("1st", "_1st"), ("", "_")],
)
def test_sanitize_identifier(raw: str, expected: str) -> None:
    assert sanitize_identifier(raw) == expected


def test_plan_defaults_follow_output_name(tmp_path: Path) -> None:
    """Accessor file and class name derive from the output resource, not the source."""
    coordinator = StronglyTypedCoordinator(_Generator())
    output = tmp_path / "custom.resources"

    plan = coordinator.plan(StronglyTypedOptions(language="CSharp", namespace="App"), output)

    assert plan.path == tmp_path / "custom.cs"
    assert plan.class_name == "custom"
    assert plan.resource_base_name == "App.custom"
    assert plan.public_class is False


def test_plan_uses_explicit_file_and_class(tmp_path: Path) -> None:
    options = StronglyTypedOptions(
        language="CSharp",
        class_name="Texts",
        file_name=tmp_path / "gen" / "Resources.Designer.cs",
        public_class=True,
    )
    plan = StronglyTypedCoordinator(_Generator()).plan(options, tmp_path / "S.resources")
    assert plan.path == tmp_path / "gen" / "Resources.Designer.cs"
    assert plan.class_name == "Texts"
    assert plan.resource_base_name == "S"


def test_plan_class_name_from_explicit_file_stem(tmp_path: Path) -> None:
    options = StronglyTypedOptions(language="CSharp", file_name=tmp_path / "Strings.Designer.cs")
    plan = StronglyTypedCoordinator(_Generator()).plan(options, tmp_path / "S.resources")
    assert plan.class_name == "Strings_Designer"


def test_plan_rejects_unknown_language(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        StronglyTypedCoordinator(_Generator()).plan(
            StronglyTypedOptions(language="Cobol"), tmp_path / "S.resources"
        )


def test_generation_tracks_identity_and_keys(tmp_path: Path) -> None:
    """Regenerate on missing file or changed keys; never on unchanged identity."""
    generator = _Generator()
    coordinator = StronglyTypedCoordinator(generator)
    cache = CacheStore.load(tmp_path / "state.cache")
    output = tmp_path / "S.resources"
    plan = coordinator.plan(StronglyTypedOptions(language="CSharp"), output)

    first = coordinator.maybe_generate(True, plan, output, ["A", "B"], cache)
    second = coordinator.maybe_generate(True, plan, output, ["B", "A"], cache)
    third = coordinator.maybe_generate(True, plan, output, ["A", "B", "C"], cache)
    plan.path.unlink()
    fourth = coordinator.maybe_generate(True, plan, output, ["A", "B", "C"], cache)

    assert first is not None and first.generated
    assert second is not None and not second.generated
    assert third is not None and third.generated
    assert fourth is not None and fourth.generated
    assert len(generator.calls) == 3
    assert cache.accessor is not None
    assert cache.accessor.path == str(plan.path)


def test_generation_skipped_when_source_failed(tmp_path: Path) -> None:
    generator = _Generator()
    coordinator = StronglyTypedCoordinator(generator)
    output = tmp_path / "S.resources"
    plan = coordinator.plan(StronglyTypedOptions(language="CSharp"), output)

    outcome = coordinator.maybe_generate(False, plan, output, ["A"], CacheStore.load(None))

    assert outcome is None
    assert generator.calls == []


def test_changed_namespace_regenerates(tmp_path: Path) -> None:
    generator = _Generator()
    coordinator = StronglyTypedCoordinator(generator)
    cache = CacheStore.load(None)
    output = tmp_path / "S.resources"

    plain = coordinator.plan(StronglyTypedOptions(language="CSharp"), output)
    scoped = coordinator.plan(StronglyTypedOptions(language="CSharp", namespace="App"), output)
    coordinator.maybe_generate(True, plain, output, ["A"], cache)
    outcome = coordinator.maybe_generate(True, scoped, output, ["A"], cache)

    assert outcome is not None and outcome.generated
    assert generator.calls[-1]["namespace"] == "App"


def test_generator_warnings_reach_the_outcome(tmp_path: Path) -> None:
    generator = _Generator(warnings=("Resource 'a' maps to member 'A'; skipped.",))
    coordinator = StronglyTypedCoordinator(generator)
    cache = CacheStore.load(None)
    output = tmp_path / "S.resources"
    plan = coordinator.plan(StronglyTypedOptions(language="CSharp"), output)

    fresh = coordinator.maybe_generate(True, plan, output, ["A", "a"], cache)
    current = coordinator.maybe_generate(True, plan, output, ["A", "a"], cache)

    assert fresh is not None
    assert fresh.warnings == ("Resource 'a' maps to member 'A'; skipped.",)
    assert current is not None and current.warnings == ()
