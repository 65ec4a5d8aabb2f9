"""Application use-cases orchestrating incremental resource generation."""

from __future__ import annotations

import concurrent.futures
import dataclasses
import logging
import os
import uuid
from collections.abc import Iterable, Sequence
from pathlib import Path

from pydantic import ValidationError

from resource_generator.adapters.codegen import AccessorCodeGenerator
from resource_generator.adapters.converters import FileResourceConverter
from resource_generator.application.accessor import AccessorPlan, StronglyTypedCoordinator
from resource_generator.application.options import (
    ExecutionOptions,
    StronglyTypedOptions,
    TaskOptions,
)
from resource_generator.application.outputs import OutputResolver
from resource_generator.application.ports import AccessorGenerator, ResourceConverter
from resource_generator.application.results import (
    AccessorOutcome,
    ConversionOutcome,
    Diagnostic,
    RunResult,
    SourceOutcome,
)
from resource_generator.application.staleness import (
    GlobalTriggers,
    StalenessEvaluator,
    mtime_ns,
    snapshot,
)
from resource_generator.errors import (
    AccessorGenerationError,
    ConfigurationError,
    ResourceConversionError,
)
from resource_generator.infrastructure.cache_store import CacheRecord, CacheStore
from resource_generator.schemas import TaskConfig
from resource_generator.types import FORMAT_EXTENSIONS, TaskItem

logger = logging.getLogger(__name__)

NO_WORK_MESSAGE = (
    "No resources are out of date with respect to their source files. "
    "Skipping resource generation."
)


class BatchTransformationCoordinator:
    """Drive one incremental run over a batch of source resource files.

    Configuration is validated before anything touches the disk. Each source
    is then evaluated, converted when stale and recorded independently, so a
    failing source never blocks its siblings. The dependency cache is
    flushed once at the end of the run whatever the outcome.
    """

    def __init__(
        self,
        converter: ResourceConverter | None = None,
        generator: AccessorGenerator | None = None,
        evaluator: StalenessEvaluator | None = None,
    ) -> None:
        self._converter = converter or FileResourceConverter()
        self._generator = generator or AccessorCodeGenerator()
        self._evaluator = evaluator or StalenessEvaluator()
        self._accessor = StronglyTypedCoordinator(self._generator)

    def run(
        self,
        sources: Sequence[TaskItem],
        outputs: Sequence[TaskItem] | None = None,
        options: TaskOptions | None = None,
    ) -> RunResult:
        """Run the task.

        Parameters
        ----------
        sources : Sequence[TaskItem]
            Source resource files in task order.
        outputs : Sequence[TaskItem] | None, default=None
            Explicit output items, index-aligned with ``sources``.
        options : TaskOptions | None, default=None
            Dependencies, cache location, accessor and execution settings.

        Returns
        -------
        RunResult
            Ordered outputs and written files of the succeeding sources,
            plus diagnostics. Configuration errors produce a failed result
            with no outputs instead of raising.
        """
        options = options or TaskOptions()
        sources = list(sources)
        try:
            resolved, plan = self._preflight(sources, outputs, options)
        except ConfigurationError as exc:
            logger.error("%s", exc)
            return RunResult(success=False, diagnostics=(Diagnostic("error", str(exc)),))

        if not sources:
            logger.info("No source resource files were specified.")
            return RunResult(
                diagnostics=(Diagnostic("info", "No source resource files were specified."),)
            )

        cache = CacheStore.load(options.state_file)
        triggers = self._evaluator.global_triggers(
            options.additional_inputs, options.references, cache
        )
        outcomes = self._dispatch(sources, resolved, triggers, cache, options)
        if all(outcome.status == "up_to_date" for outcome in outcomes):
            logger.info(NO_WORK_MESSAGE)

        accessor: AccessorOutcome | None = None
        accessor_error: str | None = None
        if plan is not None:
            only = outcomes[0]
            try:
                accessor = self._accessor.maybe_generate(
                    only.succeeded, plan, only.output.path, only.keys, cache
                )
            except AccessorGenerationError as exc:
                accessor_error = str(exc)
                logger.error("%s", exc)

        flushed = cache.flush()
        return self._assemble(outcomes, plan, accessor, accessor_error, cache, flushed)

    def _preflight(
        self,
        sources: list[TaskItem],
        outputs: Sequence[TaskItem] | None,
        options: TaskOptions,
    ) -> tuple[list[TaskItem], AccessorPlan | None]:
        strongly_typed = options.strongly_typed
        orphaned = strongly_typed.fields_without_language()
        if orphaned:
            raise ConfigurationError(
                f"Strongly typed {', '.join(orphaned)} was specified without a language."
            )
        if strongly_typed.requested and len(sources) > 1:
            raise ConfigurationError(
                "Strongly typed resource classes can only be generated for a single "
                f"source file, but {len(sources)} were specified."
            )
        resolver = OutputResolver(FORMAT_EXTENSIONS[options.output_format])
        resolved = resolver.resolve(sources, outputs)
        plan = None
        if strongly_typed.requested and resolved:
            plan = self._accessor.plan(strongly_typed, resolved[0].path)
        return resolved, plan

    def _dispatch(
        self,
        sources: list[TaskItem],
        outputs: list[TaskItem],
        triggers: GlobalTriggers,
        cache: CacheStore,
        options: TaskOptions,
    ) -> list[SourceOutcome]:
        jobs = list(enumerate(zip(sources, outputs)))
        workers = options.execution.max_workers
        if workers <= 1 or len(jobs) <= 1:
            return [
                self._process(index, source, output, triggers, cache, options)
                for index, (source, output) in jobs
            ]

        outcomes: list[SourceOutcome] = []
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._process, index, source, output, triggers, cache, options)
                for index, (source, output) in jobs
            ]
            for future in concurrent.futures.as_completed(futures):
                outcomes.append(future.result())
        return sorted(outcomes, key=lambda outcome: outcome.index)

    def _process(
        self,
        index: int,
        source: TaskItem,
        output: TaskItem,
        triggers: GlobalTriggers,
        cache: CacheStore,
        options: TaskOptions,
    ) -> SourceOutcome:
        record = cache.get(source.path)
        verdict = self._evaluator.evaluate(source.path, output.path, record, triggers)
        if verdict.up_to_date and record is not None:
            logger.debug("'%s' is up to date with '%s'", output.path, source.path)
            return SourceOutcome(
                index=index,
                source=source,
                output=output,
                status="up_to_date",
                keys=tuple(record.resource_keys),
            )

        logger.info(
            "Processing resource file '%s' into '%s' (%s)",
            source.path,
            output.path,
            verdict.reason,
        )
        source_mtime = mtime_ns(source.path)
        try:
            converted = self._convert(source.path, output.path, options)
        except ResourceConversionError as exc:
            logger.error("%s: %s", source.path, exc)
            return SourceOutcome(
                index=index, source=source, output=output, status="failed", error=str(exc)
            )

        for warning in converted.warnings:
            logger.warning("%s: %s", source.path, warning)
        cache.put(
            CacheRecord(
                source=str(source.path),
                source_mtime_ns=source_mtime or 0,
                output=str(output.path),
                output_mtime_ns=mtime_ns(output.path) or 0,
                linked_content=snapshot(converted.linked_content),
                references=snapshot(options.references),
                dependency_fingerprint=triggers.fingerprint,
                resource_keys=list(converted.keys),
            )
        )
        return SourceOutcome(
            index=index,
            source=source,
            output=output,
            status="converted",
            keys=converted.keys,
            warnings=converted.warnings,
        )

    def _convert(self, source: Path, output: Path, options: TaskOptions) -> ConversionOutcome:
        timeout = options.execution.converter_timeout
        if timeout is None:
            return self._converter.convert(source, None, output, None, options.references)

        # An overrunning worker cannot be stopped, so it only ever sees a staging
        # file that is committed once the call returns in time.
        token = uuid.uuid4().hex[:8]
        staging = output.with_name(f".{output.stem}.{token}.pending{output.suffix}")
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
        future = executor.submit(
            self._converter.convert, source, None, staging, None, options.references
        )
        try:
            converted = future.result(timeout=timeout)
        except concurrent.futures.TimeoutError as exc:
            future.add_done_callback(lambda _: staging.unlink(missing_ok=True))
            raise ResourceConversionError(
                f"Conversion did not finish within {timeout:g} seconds.", source=source
            ) from exc
        except ResourceConversionError:
            staging.unlink(missing_ok=True)
            raise
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        try:
            os.replace(staging, output)
        except OSError as exc:
            staging.unlink(missing_ok=True)
            raise ResourceConversionError(
                f"Could not move the converted file to '{output}': {exc}", source=source
            ) from exc
        return dataclasses.replace(converted, written=output)

    def _assemble(
        self,
        outcomes: list[SourceOutcome],
        plan: AccessorPlan | None,
        accessor: AccessorOutcome | None,
        accessor_error: str | None,
        cache: CacheStore,
        flushed: bool,
    ) -> RunResult:
        diagnostics: list[Diagnostic] = []
        for outcome in outcomes:
            diagnostics.extend(
                Diagnostic("warning", warning, outcome.source.path)
                for warning in outcome.warnings
            )
            if outcome.error is not None:
                diagnostics.append(Diagnostic("error", outcome.error, outcome.source.path))
        diagnostics.extend(Diagnostic("warning", warning) for warning in cache.warnings)

        succeeded = [outcome for outcome in outcomes if outcome.succeeded]
        output_resources: tuple[TaskItem, ...] = ()
        files_written: list[Path] = []
        if accessor_error is None:
            output_resources = tuple(outcome.output for outcome in succeeded)
            files_written = [outcome.output.path for outcome in succeeded]
        else:
            diagnostics.append(Diagnostic("error", accessor_error))
        if flushed and cache.path is not None:
            files_written.append(cache.path)
        # The accessor file always closes the list.
        if accessor is not None:
            diagnostics.extend(Diagnostic("warning", warning) for warning in accessor.warnings)
            files_written.append(accessor.path)

        return RunResult(
            output_resources=output_resources,
            files_written=tuple(files_written),
            success=len(succeeded) == len(outcomes) and accessor_error is None,
            outcomes=tuple(outcomes),
            diagnostics=tuple(diagnostics),
            strongly_typed_file_name=plan.path if plan else None,
            strongly_typed_class_name=plan.class_name if plan else None,
        )


def build_task_options(
    *,
    references: Iterable[Path] = (),
    additional_inputs: Iterable[Path] = (),
    state_file: Path | None = None,
    output_format: str = "resources",
    strongly_typed_language: str | None = None,
    strongly_typed_namespace: str | None = None,
    strongly_typed_class_name: str | None = None,
    strongly_typed_file_name: Path | None = None,
    public_class: bool = False,
    max_workers: int = 1,
    converter_timeout: float | None = None,
) -> TaskOptions:
    """Build typed task options from command/API params."""
    try:
        config = TaskConfig(
            references=list(references),
            additional_inputs=list(additional_inputs),
            state_file=state_file,
            output_format=output_format,
            strongly_typed_language=strongly_typed_language,
            strongly_typed_namespace=strongly_typed_namespace,
            strongly_typed_class_name=strongly_typed_class_name,
            strongly_typed_file_name=strongly_typed_file_name,
            public_class=public_class,
            max_workers=max_workers,
            converter_timeout=converter_timeout,
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid task parameters: {exc}") from exc
    return options_from_config(config)


def options_from_config(config: TaskConfig) -> TaskOptions:
    """Translate a validated :class:`TaskConfig` into :class:`TaskOptions`."""
    return TaskOptions(
        references=tuple(config.references),
        additional_inputs=tuple(config.additional_inputs),
        state_file=config.state_file,
        output_format=config.output_format,
        strongly_typed=StronglyTypedOptions(
            language=config.strongly_typed_language,
            namespace=config.strongly_typed_namespace,
            class_name=config.strongly_typed_class_name,
            file_name=config.strongly_typed_file_name,
            public_class=config.public_class,
        ),
        execution=ExecutionOptions(
            max_workers=config.max_workers,
            converter_timeout=config.converter_timeout,
        ),
    )


def generate_resources(
    *,
    sources: Sequence[TaskItem],
    outputs: Sequence[TaskItem] | None = None,
    options: TaskOptions | None = None,
    converter: ResourceConverter | None = None,
    generator: AccessorGenerator | None = None,
) -> RunResult:
    """Use-case: run one incremental resource generation task."""
    coordinator = BatchTransformationCoordinator(converter=converter, generator=generator)
    return coordinator.run(sources, outputs, options)
