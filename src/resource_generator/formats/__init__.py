"""Resource file formats: model, codecs and the codec registry."""

from .base import ResourceCodec
from .model import ResourceEntry, ResourceSet
from .registry import FormatRegistry, create_default_registry

__all__ = [
    "ResourceCodec",
    "ResourceEntry",
    "ResourceSet",
    "FormatRegistry",
    "create_default_registry",
]
