"""Shared pytest configuration, marker assignment and resource fixtures."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from pathlib import Path
from xml.sax.saxutils import escape

import pytest

RESX_HEADER = """<?xml version="1.0" encoding="utf-8"?>
<root>
  <resheader name="resmimetype"><value>text/microsoft-resx</value></resheader>
  <resheader name="version"><value>2.0</value></resheader>
"""


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        parts = set(path.parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


def render_resx(strings: Mapping[str, str], extra: str = "") -> str:
    """Build ``.resx`` XML holding ``strings`` plus raw ``extra`` elements."""
    body = "".join(
        f'  <data name="{escape(name)}" xml:space="preserve"><value>{escape(value)}</value></data>\n'
        for name, value in strings.items()
    )
    return f"{RESX_HEADER}{body}{extra}</root>\n"


@pytest.fixture
def make_resx(tmp_path: Path) -> Callable[..., Path]:
    """Write a ``.resx`` file under ``tmp_path`` and return its path."""

    def _make(name: str, strings: Mapping[str, str] | None = None, extra: str = "") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_resx(strings or {"Greeting": "Hello"}, extra), encoding="utf-8")
        return path

    return _make


@pytest.fixture
def bump() -> Callable[..., int]:
    """Move a file's mtime forward deterministically; return the new ``st_mtime_ns``."""

    def _bump(path: Path, seconds: float = 10.0) -> int:
        stat = path.stat()
        delta = int(seconds * 1_000_000_000)
        new_ns = stat.st_mtime_ns + delta
        os.utime(path, ns=(stat.st_atime_ns + delta, new_ns))
        return new_ns

    return _bump


@pytest.fixture
def set_mtime() -> Callable[[Path, int], None]:
    """Pin a file's mtime to an exact nanosecond value."""

    def _set(path: Path, mtime_ns: int) -> None:
        os.utime(path, ns=(mtime_ns, mtime_ns))

    return _set
