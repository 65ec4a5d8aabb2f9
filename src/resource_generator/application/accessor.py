"""Strongly-typed accessor coordination."""

from __future__ import annotations

import hashlib
import json
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from resource_generator.application.options import StronglyTypedOptions
from resource_generator.application.ports import AccessorGenerator
from resource_generator.application.results import AccessorOutcome
from resource_generator.infrastructure.cache_store import AccessorRecord, CacheStore

logger = logging.getLogger(__name__)

_NON_IDENTIFIER = re.compile(r"[^0-9A-Za-z_]")


def sanitize_identifier(name: str) -> str:
    """Turn an arbitrary file stem into a usable identifier."""
    cleaned = _NON_IDENTIFIER.sub("_", name) or "_"
    if cleaned[0].isdigit():
        cleaned = f"_{cleaned}"
    return cleaned


@dataclass(frozen=True)
class AccessorPlan:
    """Resolved accessor identity for one run."""

    language: str
    namespace: str | None
    class_name: str
    public_class: bool
    path: Path
    resource_base_name: str

    def fingerprint(self, output: Path, keys: Sequence[str]) -> str:
        payload = json.dumps(
            {
                "language": self.language.lower(),
                "namespace": self.namespace,
                "class_name": self.class_name,
                "public_class": self.public_class,
                "path": str(self.path),
                "output": str(output),
                "keys": sorted(keys),
            },
            sort_keys=True,
            separators=(",", ":"),
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class StronglyTypedCoordinator:
    """Decide whether the accessor file must be (re)generated and do it.

    The accessor depends on its identity (language, namespace, class name,
    visibility, file and output names), on the resource key set and on the
    existence of its file; resource value changes alone never regenerate it.
    """

    def __init__(self, generator: AccessorGenerator) -> None:
        self._generator = generator

    def plan(self, options: StronglyTypedOptions, output: Path) -> AccessorPlan:
        if options.language is None:
            raise ValueError("accessor planning requires a language")
        extension = self._generator.file_extension(options.language)
        path = options.file_name or output.with_suffix(extension)
        class_name = options.class_name or sanitize_identifier(path.stem)
        base_name = f"{options.namespace}.{output.stem}" if options.namespace else output.stem
        return AccessorPlan(
            language=options.language,
            namespace=options.namespace,
            class_name=class_name,
            public_class=options.public_class,
            path=path,
            resource_base_name=base_name,
        )

    def needs_generation(
        self, plan: AccessorPlan, fingerprint: str, cache: CacheStore
    ) -> str | None:
        """Reason to regenerate, or ``None`` when the accessor is current."""
        if not plan.path.is_file():
            return "accessor file is missing"
        record = cache.accessor
        if record is None:
            return "no accessor record"
        if record.path != str(plan.path) or record.fingerprint != fingerprint:
            return "accessor identity or resource keys changed"
        return None

    def maybe_generate(
        self,
        source_done: bool,
        plan: AccessorPlan,
        output: Path,
        keys: Sequence[str],
        cache: CacheStore,
    ) -> AccessorOutcome | None:
        """Generate the accessor if needed.

        Returns ``None`` when the source did not succeed. Raises
        ``AccessorGenerationError`` from the generator.
        """
        if not source_done:
            return None
        fingerprint = plan.fingerprint(output, keys)
        reason = self.needs_generation(plan, fingerprint, cache)
        if reason is None:
            logger.debug("Accessor %s is up to date", plan.path)
            return AccessorOutcome(path=plan.path, class_name=plan.class_name, generated=False)

        type_name = f"{plan.namespace}.{plan.class_name}" if plan.namespace else plan.class_name
        logger.info("Creating strongly typed resources class '%s' (%s)", type_name, reason)
        generated = self._generator.generate(
            resource_keys=keys,
            language=plan.language,
            namespace=plan.namespace,
            class_name=plan.class_name,
            public_class=plan.public_class,
            output_path=plan.path,
            resource_base_name=plan.resource_base_name,
        )
        cache.set_accessor(AccessorRecord(path=str(generated.path), fingerprint=fingerprint))
        return AccessorOutcome(
            path=generated.path,
            class_name=plan.class_name,
            generated=True,
            warnings=generated.warnings,
        )
