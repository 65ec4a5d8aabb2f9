#!/usr/bin/env python3
"""Write or verify requirements.txt from the runtime dependencies in pyproject.toml."""

from __future__ import annotations

import argparse
import tomllib
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
HEADER = (
    "# Generated from pyproject.toml (base dependencies)",
    "# Do not edit manually; run: python scripts/sync_requirements.py",
    "",
)


def runtime_requirements(root: Path = ROOT) -> list[str]:
    """Runtime dependencies only; test tooling lives in the `test` extra."""
    pyproject = tomllib.loads((root / "pyproject.toml").read_text(encoding="utf-8"))
    deps = pyproject["project"].get("dependencies", [])
    return sorted({dep.strip() for dep in deps if dep.strip()})


def pinned_requirements(root: Path = ROOT) -> list[str]:
    lines = (root / "requirements.txt").read_text(encoding="utf-8").splitlines()
    stripped = (line.split("#", 1)[0].strip() for line in lines)
    return sorted({line for line in stripped if line})


def render(requirements: list[str]) -> str:
    return "\n".join((*HEADER, *requirements)) + "\n"


def drift(root: Path = ROOT) -> list[str]:
    """Describe every difference between pyproject.toml and requirements.txt."""
    expected = set(runtime_requirements(root))
    actual = set(pinned_requirements(root))
    problems = [f"missing from requirements.txt: {dep}" for dep in sorted(expected - actual)]
    problems.extend(f"unexpected in requirements.txt: {dep}" for dep in sorted(actual - expected))
    return problems


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--check", action="store_true", help="fail instead of rewriting when out of sync"
    )
    args = parser.parse_args(argv)

    if args.check:
        problems = drift()
        if problems:
            raise SystemExit(
                "requirements.txt is out of sync with pyproject.toml.\n"
                "Run: python scripts/sync_requirements.py\n"
                + "\n".join(f"- {problem}" for problem in problems)
            )
        print("Dependency sync check passed.")
        return

    requirements = runtime_requirements()
    (ROOT / "requirements.txt").write_text(render(requirements), encoding="utf-8")
    print(f"Wrote {len(requirements)} requirements to requirements.txt")


if __name__ == "__main__":
    main()
