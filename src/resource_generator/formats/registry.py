"""Format codec registry and discovery helpers."""

from __future__ import annotations

import importlib
import importlib.util
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType

from resource_generator.errors import ConfigurationError, ResourceConversionError
from resource_generator.formats.base import ResourceCodec
from resource_generator.formats.builtins import BinaryCodec, ResxCodec, TextCodec


class FormatRegistry:
    """Registry for resource format codecs."""

    def __init__(self) -> None:
        self._codecs: dict[str, ResourceCodec] = {}

    def register(self, codec: ResourceCodec) -> None:
        """Register codec instance by unique name.

        Parameters
        ----------
        codec : ResourceCodec
            Codec instance to register. A codec with the same name replaces
            the previous registration.

        Raises
        ------
        ConfigurationError
            If the codec does not provide a valid name or any extension.
        """
        name = getattr(codec, "name", "").strip()
        if not name:
            raise ConfigurationError("Format codec must define a non-empty 'name'.")
        if not getattr(codec, "extensions", ()):
            raise ConfigurationError(f"Format codec '{name}' declares no extensions.")
        self._codecs[name] = codec

    def names(self) -> list[str]:
        """Return registered format names, sorted."""
        return sorted(self._codecs.keys())

    def extensions(self) -> list[str]:
        """Return every registered extension, sorted."""
        return sorted({ext for codec in self._codecs.values() for ext in codec.extensions})

    def get(self, name: str) -> ResourceCodec:
        """Get codec by format name.

        Raises
        ------
        ConfigurationError
            If the format name is not registered.
        """
        try:
            return self._codecs[name]
        except KeyError as exc:
            raise ConfigurationError(
                f"Unknown resource format '{name}'. Available formats: {', '.join(self.names())}"
            ) from exc

    def resolve(self, path: Path) -> ResourceCodec:
        """Resolve the codec owning ``path``.

        Parameters
        ----------
        path : Path
            Source or output resource file.

        Returns
        -------
        ResourceCodec
            The first registered codec whose ``can_handle`` accepts the path.

        Raises
        ------
        ResourceConversionError
            If no codec handles the file extension.
        """
        for codec in self._codecs.values():
            if codec.can_handle(path):
                return codec
        raise ResourceConversionError(
            f"Unsupported resource file extension '{path.suffix or '<none>'}'. "
            f"Supported extensions: {', '.join(self.extensions())}",
            source=path,
        )

    def load_module(self, module_or_path: str) -> None:
        """Load codecs from module name or file path.

        .. warning::
            This method executes code from the specified module. Only load
            codecs from trusted sources.
        """
        module = _import_module_or_path(module_or_path)
        _register_from_module(module, self)


def _import_module_or_path(module_or_path: str) -> ModuleType:
    """Import module by import path or filesystem path.

    Raises
    ------
    ConfigurationError
        If import cannot be completed.
    """
    candidate = Path(module_or_path)
    if candidate.exists():
        spec = importlib.util.spec_from_file_location(candidate.stem, candidate)
        if spec is None or spec.loader is None:
            raise ConfigurationError(f"Unable to load format module from {candidate}.")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    try:
        return importlib.import_module(module_or_path)
    except Exception as exc:
        raise ConfigurationError(
            f"Unable to import format module '{module_or_path}': {exc}"
        ) from exc


def _register_from_module(module: ModuleType, registry: FormatRegistry) -> None:
    """Register codecs exposed by ``module``."""
    if hasattr(module, "register_formats"):
        module.register_formats(registry)
        return

    codecs = getattr(module, "CODECS", None)
    if codecs is not None:
        for codec in codecs:
            registry.register(codec)
        return

    codec = getattr(module, "CODEC", None)
    if codec is not None:
        registry.register(codec)
        return

    raise ConfigurationError(
        "Format module must expose register_formats(registry), CODECS, or CODEC."
    )


def create_default_registry(
    extra_modules: Iterable[str] | None = None,
) -> FormatRegistry:
    """Create a registry holding the built-in ResX, text and binary codecs.

    Parameters
    ----------
    extra_modules : Iterable[str] | None, optional
        Additional codec modules to load.
    """
    registry = FormatRegistry()
    registry.register(ResxCodec())
    registry.register(TextCodec())
    registry.register(BinaryCodec())
    for module in extra_modules or []:
        registry.load_module(module)
    return registry
