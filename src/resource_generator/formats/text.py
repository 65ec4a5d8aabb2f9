"""Flat ``name=value`` text resource format."""

from __future__ import annotations

from pathlib import Path

from resource_generator.errors import ResourceFormatError
from resource_generator.formats.model import ResourceEntry, ResourceSet

COMMENT_PREFIXES = ("#", ";")
STRINGS_SECTION = "[strings]"

_SIMPLE_ESCAPES = {
    "\\": "\\",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    '"': '"',
    "'": "'",
}
_WRITE_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\r": "\\r", "\t": "\\t"}
# Everything str.splitlines() breaks on.
_LINE_BREAKS = frozenset("\n\r\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029")
_RESERVED_NAME_PREFIXES = (*COMMENT_PREFIXES, "[", "\ufeff")


def _unescape(value: str, source: Path | None, line: int) -> str:
    out: list[str] = []
    index = 0
    while index < len(value):
        char = value[index]
        if char != "\\":
            out.append(char)
            index += 1
            continue
        if index + 1 >= len(value):
            raise ResourceFormatError(
                "Escape sequence at end of line.", source=source, line=line
            )
        code = value[index + 1]
        if code in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[code])
            index += 2
            continue
        if code == "u":
            digits = value[index + 2 : index + 6]
            if len(digits) != 4 or any(
                ch not in "0123456789abcdefABCDEF" for ch in digits
            ):
                raise ResourceFormatError(
                    f"Invalid \\u escape sequence '\\u{digits}'.",
                    source=source,
                    line=line,
                )
            out.append(chr(int(digits, 16)))
            index += 6
            continue
        raise ResourceFormatError(
            f"Unsupported escape sequence '\\{code}'.", source=source, line=line
        )
    return "".join(out)


def parse_text(content: str, source: Path | None = None) -> ResourceSet:
    """Parse text-format resource content.

    Parameters
    ----------
    content : str
        Decoded file content.
    source : Path | None, default=None
        Originating path, used in error messages.

    Returns
    -------
    ResourceSet
        Parsed entries in file order; duplicate names and the optional
        ``[strings]`` header are reported as warnings.

    Raises
    ------
    ResourceFormatError
        On unknown sections, lines without ``=``, empty names or bad escapes.
    """
    resources = ResourceSet()
    for lineno, raw in enumerate(content.splitlines(), start=1):
        line = raw.lstrip()
        if not line or line.startswith(COMMENT_PREFIXES):
            continue
        if line.startswith("["):
            if line.rstrip().lower() == STRINGS_SECTION:
                resources.warnings.append(
                    f"line {lineno}: the {STRINGS_SECTION} section header is "
                    "ignored; text files contain only string resources."
                )
                continue
            raise ResourceFormatError(
                f"Unsupported section '{line.rstrip()}'.", source=source, line=lineno
            )
        name, sep, value = line.partition("=")
        if not sep:
            raise ResourceFormatError(
                f"Expected 'name=value' but found '{line.rstrip()}'.",
                source=source,
                line=lineno,
            )
        name = name.strip()
        if not name:
            raise ResourceFormatError(
                "Resource name cannot be empty.", source=source, line=lineno
            )
        entry = ResourceEntry(name=name, value=_unescape(value.lstrip(), source, lineno))
        if not resources.add(entry):
            resources.warnings[-1] = f"line {lineno}: {resources.warnings[-1]}"
    return resources


def read_text_resources(path: Path) -> ResourceSet:
    """Read a text-format resource file."""
    return parse_text(path.read_text(encoding="utf-8-sig"), source=path)


def _name_problem(name: str) -> str | None:
    if not name.strip():
        return "is empty"
    if name != name.strip():
        return "has leading or trailing whitespace"
    if name.startswith(_RESERVED_NAME_PREFIXES):
        return f"starts with '{name[0]}'"
    if "=" in name:
        return "contains '='"
    if any(ch in _LINE_BREAKS for ch in name):
        return "contains a line break"
    return None


def _unicode_escape(ch: str) -> str:
    return f"\\u{ord(ch):04x}"


def _escape_value(value: str) -> str:
    body = value.lstrip()
    lead = value[: len(value) - len(body)]
    # The reader strips whitespace after '=', so leading whitespace is always escaped.
    escaped = [_WRITE_ESCAPES.get(ch) or _unicode_escape(ch) for ch in lead]
    for ch in body:
        if ch in _WRITE_ESCAPES:
            escaped.append(_WRITE_ESCAPES[ch])
        elif ch in _LINE_BREAKS:
            escaped.append(_unicode_escape(ch))
        else:
            escaped.append(ch)
    return "".join(escaped)


def format_text(resources: ResourceSet, target: Path | None = None) -> str:
    """Render ``resources`` as text.

    Only string entries are representable, and only under names the reader
    parses back unchanged; anything else raises ``ResourceFormatError``
    instead of being silently lost.
    """
    lines: list[str] = []
    for entry in resources:
        if not entry.is_string or not isinstance(entry.value, str):
            raise ResourceFormatError(
                f"Resource '{entry.name}' is not a string and is unsupported "
                "in text format.",
                source=target,
            )
        problem = _name_problem(entry.name)
        if problem is not None:
            raise ResourceFormatError(
                f"Resource name {entry.name!r} {problem} and cannot be written "
                "in text format.",
                source=target,
            )
        lines.append(f"{entry.name}={_escape_value(entry.value)}")
    return "\n".join(lines) + ("\n" if lines else "")


def write_text_resources(resources: ResourceSet, path: Path) -> None:
    """Write ``resources`` to ``path`` in text format."""
    payload = format_text(resources, target=path)
    path.write_text(payload, encoding="utf-8")
