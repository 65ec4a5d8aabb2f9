#!/usr/bin/env python3
"""
resource_generator.cli.cli

Typer-based CLI for incremental resource generation.

Examples
--------
Convert two ResX files to compiled resources, reusing a dependency cache:

    generate-resource generate Strings.resx Errors.resx --state-file obj/resgen.cache

Emit a C# accessor next to the compiled output:

    generate-resource generate Strings.resx --str-language CSharp --str-namespace App

Run from a TOML task file:

    generate-resource generate --config resources.toml
"""

from __future__ import annotations

import logging
import sys
import tomllib
import traceback
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError

from resource_generator.errors import ConfigurationError, ResourceGeneratorError
from resource_generator.schemas import GenerateResourceConfig
from resource_generator.types import TaskItem

app = typer.Typer(
    name="generate-resource",
    help="Convert .resx / .txt / .resources files incrementally.",
    no_args_is_help=True,
)

METADATA_HELP = "Metadata KEY=VALUE attached to every source item (repeatable)."
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

_PATH_LIST_KEYS = ("sources", "output_resources", "references", "additional_inputs")
_PATH_KEYS = ("state_file", "strongly_typed_file_name")

_log_handler: logging.Handler | None = None


# -----------------------------
# Utilities
# -----------------------------
def _configure_logging(level: int) -> None:
    """Route package logs to stderr at ``level``."""
    global _log_handler
    package_logger = logging.getLogger("resource_generator")
    if _log_handler is not None:
        package_logger.removeHandler(_log_handler)
    _log_handler = logging.StreamHandler(sys.stderr)
    _log_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(_log_handler)
    package_logger.setLevel(level)


def _print_conversion_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly error.

    Parameters
    ----------
    exc : Exception
        Exception raised while running the task.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    typer.echo(f"✗ {type(exc).__name__}: {exc}", err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _parse_metadata(metadata_items: list[str] | None) -> dict[str, str]:
    """Parse repeated KEY=VALUE metadata entries."""
    parsed: dict[str, str] = {}
    for item in metadata_items or []:
        if "=" not in item:
            raise typer.BadParameter(
                f"Invalid metadata entry '{item}'. Use KEY=VALUE format."
            )
        key, value = item.split("=", 1)
        key = key.strip()
        if not key:
            raise typer.BadParameter("Metadata key cannot be empty.")
        parsed[key] = value
    return parsed


def _load_config_file(path: Path) -> dict[str, Any]:
    """Read a TOML task file; a ``[generate-resource]`` table is used when present."""
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise typer.BadParameter(f"Could not read config file '{path}': {exc}") from exc
    section = data.get("generate-resource", data)
    if not isinstance(section, dict):
        raise typer.BadParameter(f"Config file '{path}' has no task table.")
    base = path.parent
    for key in _PATH_LIST_KEYS:
        entries = section.get(key)
        if isinstance(entries, list):
            section[key] = [_rebase_entry(entry, base) for entry in entries]
    for key in _PATH_KEYS:
        section[key] = _rebase_entry(section.get(key), base)
    return section


def _rebase_entry(entry: object, base: Path) -> object:
    if isinstance(entry, str):
        return str(base / entry)
    if isinstance(entry, dict) and isinstance(entry.get("path"), str):
        return {**entry, "path": str(base / entry["path"])}
    return entry


def _task_items(entries: list[Any] | None, metadata: dict[str, str]) -> list[TaskItem] | None:
    if entries is None:
        return None
    items: list[TaskItem] = []
    for entry in entries:
        if isinstance(entry, Path):
            items.append(TaskItem(path=entry, metadata=dict(metadata)))
        else:
            items.append(TaskItem(path=entry.path, metadata={**metadata, **entry.metadata}))
    return items


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks and debug logs."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress to stderr."),
) -> None:
    """Initialize shared CLI state.

    Parameters
    ----------
    ctx : typer.Context
        Typer context object used to store shared state.
    debug : bool, default=False
        Whether to enable debug error output.
    verbose : bool, default=False
        Whether to log per-source progress.
    """
    ctx.obj = {"debug": debug}
    if debug:
        _configure_logging(logging.DEBUG)
    elif verbose:
        _configure_logging(logging.INFO)


# -----------------------------
# Commands
# -----------------------------
@app.command("generate")
def generate_cmd(
    ctx: typer.Context,
    sources: list[Path] | None = typer.Argument(
        None, help="Source resource files (.resx, .txt, .restext, .resources)."
    ),
    output: list[Path] | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Explicit output file, index-aligned with the sources (repeatable).",
    ),
    reference: list[Path] | None = typer.Option(
        None, "--reference", "-r", help="Referenced assembly (repeatable)."
    ),
    additional_input: list[Path] | None = typer.Option(
        None,
        "--additional-input",
        help="Extra dependency forcing a full rebuild when it changes (repeatable).",
    ),
    state_file: Path | None = typer.Option(
        None, "--state-file", help="Dependency cache used for incremental runs."
    ),
    output_format: str | None = typer.Option(
        None,
        "--output-format",
        help="Format of derived outputs: resources (default), resx or text.",
    ),
    str_language: str | None = typer.Option(
        None, "--str-language", help="Accessor language: CSharp, VisualBasic or Python."
    ),
    str_namespace: str | None = typer.Option(
        None, "--str-namespace", help="Namespace of the accessor class."
    ),
    str_class_name: str | None = typer.Option(
        None, "--str-class-name", help="Accessor class name (default: file name)."
    ),
    str_file_name: Path | None = typer.Option(
        None, "--str-file-name", help="Accessor source file (default: output name)."
    ),
    public_class: bool | None = typer.Option(
        None, "--public-class/--internal-class", help="Accessor class visibility."
    ),
    metadata: list[str] | None = typer.Option(None, "--metadata", help=METADATA_HELP),
    jobs: int | None = typer.Option(
        None, "--jobs", "-j", min=1, help="Convert up to N sources in parallel."
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Per-source conversion timeout in seconds."
    ),
    format_module: list[str] | None = typer.Option(
        None,
        "--format-module",
        help="Codec module import path or file path (repeatable).",
    ),
    config: Path | None = typer.Option(
        None, "--config", exists=True, dir_okay=False, help="TOML task file."
    ),
) -> None:
    """Convert resource files, skipping outputs that are already up to date.

    Command-line values override the ones read from ``--config``. Exits with
    a non-zero code when any source or the accessor step failed.
    """
    debug: bool = bool(ctx.obj.get("debug", False))
    metadata_payload = _parse_metadata(metadata)

    raw: dict[str, Any] = _load_config_file(config) if config is not None else {}
    overrides: dict[str, Any] = {
        "sources": sources or None,
        "output_resources": output or None,
        "references": reference or None,
        "additional_inputs": additional_input or None,
        "state_file": state_file,
        "output_format": output_format,
        "strongly_typed_language": str_language,
        "strongly_typed_namespace": str_namespace,
        "strongly_typed_class_name": str_class_name,
        "strongly_typed_file_name": str_file_name,
        "public_class": public_class,
        "max_workers": jobs,
        "converter_timeout": timeout,
    }
    raw.update({key: value for key, value in overrides.items() if value is not None})

    try:
        from resource_generator.api import generate_resource

        try:
            task = GenerateResourceConfig.model_validate(raw)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid task configuration: {exc}") from exc
        if not task.sources:
            raise ConfigurationError("No source resource files were specified.")

        settings = task.model_dump(exclude={"sources", "output_resources"})
        result = generate_resource(
            sources=_task_items(task.sources, metadata_payload) or [],
            output_resources=_task_items(task.output_resources, {}),
            format_modules=format_module,
            **settings,
        )
    except ResourceGeneratorError as exc:
        raise typer.Exit(code=_print_conversion_error(exc, debug))
    except Exception as exc:
        # Unexpected crash: still show a clean message; debug prints traceback.
        raise typer.Exit(code=_print_conversion_error(exc, debug))

    for diagnostic in result.diagnostics:
        typer.echo(str(diagnostic), err=diagnostic.severity != "info")
    for path in result.files_written:
        typer.echo(f"✓ {path}")
    if result.strongly_typed_file_name is not None and result.success:
        typer.echo(
            f"✓ Accessor: {result.strongly_typed_class_name} "
            f"({result.strongly_typed_file_name})"
        )
    converted = len(result.converted)
    up_to_date = sum(1 for outcome in result.outcomes if outcome.status == "up_to_date")
    failed = len(result.outcomes) - converted - up_to_date
    typer.echo(f"{converted} converted, {up_to_date} up to date, {failed} failed.")
    if not result.success:
        raise typer.Exit(code=1)


@app.command("inspect")
def inspect_cmd(
    ctx: typer.Context,
    resource_path: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Resource file to read."
    ),
    format_module: list[str] | None = typer.Option(
        None,
        "--format-module",
        help="Codec module import path or file path (repeatable).",
    ),
) -> None:
    """List the resources stored in a file, one ``name<TAB>type`` per line."""
    debug: bool = bool(ctx.obj.get("debug", False))
    try:
        from resource_generator.formats import create_default_registry

        registry = create_default_registry(extra_modules=format_module)
        resources = registry.resolve(resource_path).read(resource_path)
    except ResourceGeneratorError as exc:
        raise typer.Exit(code=_print_conversion_error(exc, debug))
    except Exception as exc:
        raise typer.Exit(code=_print_conversion_error(exc, debug))

    for warning in resources.warnings:
        typer.echo(f"warning: {warning}", err=True)
    for entry in resources:
        kind = entry.type_name or ("System.String" if entry.is_string else "System.Byte[]")
        typer.echo(f"{entry.name}\t{kind}")


@app.command("doctor")
def doctor_cmd() -> None:
    """Print installed toolchain versions, formats and accessor languages."""
    import importlib.metadata as metadata

    typer.echo(f"Python: {sys.version.split()[0]}")
    for module in ("resource-generator", "pydantic", "typer"):
        try:
            version = metadata.version(module)
            typer.echo(f"{module}: {version}")
        except metadata.PackageNotFoundError:
            typer.echo(f"{module}: <not installed>")

    from resource_generator.adapters.codegen import supported_languages
    from resource_generator.formats import create_default_registry

    registry = create_default_registry()
    typer.echo(f"formats: {', '.join(registry.names())}")
    typer.echo(f"extensions: {', '.join(registry.extensions())}")
    typer.echo(f"accessor languages: {', '.join(supported_languages())}")


if __name__ == "__main__":
    app()
