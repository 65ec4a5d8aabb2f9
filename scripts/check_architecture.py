#!/usr/bin/env python3
"""Architecture boundary checks."""

from __future__ import annotations

from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PACKAGE = ROOT / "src/resource_generator"


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _assert_no_imports(path: Path, banned: list[str]) -> None:
    text = _read(path)
    for token in banned:
        if token in text:
            raise SystemExit(f"Architecture violation in {path}: found '{token}'")


def main() -> None:
    """Run repository architecture boundary checks."""
    for layer in ("application", "formats", "infrastructure"):
        for path in (PACKAGE / layer).glob("*.py"):
            _assert_no_imports(
                path,
                [
                    "import typer",
                    "from typer",
                    "resource_generator.cli",
                ],
            )

    for layer in ("formats", "infrastructure"):
        for path in (PACKAGE / layer).glob("*.py"):
            _assert_no_imports(
                path,
                [
                    "resource_generator.application",
                    "resource_generator.adapters",
                ],
            )

    _assert_no_imports(
        PACKAGE / "cli/cli.py",
        [
            "resource_generator.application.use_cases",
            "resource_generator.infrastructure",
        ],
    )

    print("Architecture checks passed.")


if __name__ == "__main__":
    main()
