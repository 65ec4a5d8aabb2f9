"""Unit tests for the flat text resource format."""

from __future__ import annotations

import os
import re
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from resource_generator.errors import ResourceFormatError
from resource_generator.formats.model import ResourceEntry, ResourceSet
from resource_generator.formats.text import (
    format_text,
    parse_text,
    read_text_resources,
    write_text_resources,
)

_HYPOTHESIS_MAX_EXAMPLES = int(os.getenv("HYPOTHESIS_MAX_EXAMPLES", "30"))


def test_parse_skips_comments_and_blank_lines() -> None:
    """Only name=value lines produce entries."""
    content = "# comment\n; another\n\nGreeting = Hello world\nFarewell=Bye\n"
    resources = parse_text(content)
    assert resources.names() == ["Greeting", "Farewell"]
    assert [entry.value for entry in resources] == ["Hello world", "Bye"]
    assert resources.warnings == []


def test_parse_keeps_trailing_whitespace_and_inner_equals() -> None:
    resources = parse_text("Formula=a=b  \n")
    assert resources.entries[0].value == "a=b  "


def test_parse_decodes_escapes() -> None:
    """Backslash escapes, including unicode, are decoded."""
    resources = parse_text(r"Text=line1\nline2\ttab \"q\" \u00e9\\" + "\n")
    assert resources.entries[0].value == 'line1\nline2\ttab "q" \u00e9\\'


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("NoSeparator\n", "Expected 'name=value'"),
        ("=value\n", "cannot be empty"),
        ("[other]\n", "Unsupported section"),
        ("Bad=\\x\n", "Unsupported escape"),
        ("Bad=\\u12\n", "Invalid"),
        ("Bad=trailing\\\n", "end of line"),
    ],
)
def test_parse_rejects_malformed_lines(content: str, message: str) -> None:
    """Malformed lines raise with the offending line number."""
    with pytest.raises(ResourceFormatError, match=message) as excinfo:
        parse_text("# header\n" + content, source=Path("bad.txt"))
    assert excinfo.value.line == 2
    assert str(excinfo.value).startswith("line 2: ")
    assert excinfo.value.source == Path("bad.txt")


def test_strings_section_is_accepted_with_warning() -> None:
    resources = parse_text("[strings]\nA=1\n")
    assert resources.names() == ["A"]
    assert len(resources.warnings) == 1
    assert "[strings]" in resources.warnings[0]


def test_duplicate_name_keeps_first_definition() -> None:
    """Duplicates are warnings and never overwrite the first value."""
    resources = parse_text("A=first\nB=x\nA=second\n")
    assert resources.names() == ["A", "B"]
    assert resources.entries[0].value == "first"
    assert resources.warnings == [
        "line 3: Duplicate resource name 'A' ignored; the first definition is kept."
    ]


def test_format_escapes_control_characters() -> None:
    resources = ResourceSet([ResourceEntry("A", "x\\y\nz\tw\r")])
    assert format_text(resources) == "A=x\\\\y\\nz\\tw\\r\n"


def test_format_rejects_non_string_entries() -> None:
    """Binary and typed values cannot be written as text."""
    resources = ResourceSet([ResourceEntry("Blob", b"\x00\x01")])
    with pytest.raises(ResourceFormatError, match="unsupported in text format"):
        format_text(resources)

    typed = ResourceSet(
        [ResourceEntry("Point", "1, 2", type_name="System.Drawing.Point, System.Drawing")]
    )
    with pytest.raises(ResourceFormatError, match="unsupported in text format"):
        format_text(typed)


def test_file_roundtrip_preserves_values(tmp_path: Path) -> None:
    path = tmp_path / "strings.restext"
    original = ResourceSet(
        [
            ResourceEntry("Multi", "one\ntwo"),
            ResourceEntry("Path", "C:\\temp"),
            ResourceEntry("Empty", ""),
        ]
    )
    write_text_resources(original, path)
    loaded = read_text_resources(path)
    assert [(entry.name, entry.value) for entry in loaded] == [
        ("Multi", "one\ntwo"),
        ("Path", "C:\\temp"),
        ("Empty", ""),
    ]


def test_read_ignores_utf8_bom(tmp_path: Path) -> None:
    path = tmp_path / "bom.txt"
    path.write_bytes("\ufeffA=1\n".encode("utf-8"))
    assert read_text_resources(path).names() == ["A"]


@pytest.mark.parametrize(
    ("name", "problem"),
    [
        ("#Hash", "starts with '#'"),
        (";Semi", "starts with ';'"),
        ("[Section", "starts with '['"),
        ("a=b", "contains '='"),
        ("Two\u2028Lines", "contains a line break"),
        ("Split\nName", "contains a line break"),
        (" Padded", "leading or trailing whitespace"),
        ("   ", "is empty"),
    ],
)
def test_format_rejects_names_the_reader_cannot_restore(name: str, problem: str) -> None:
    """Names that would read back as comments, sections or other entries are errors."""
    resources = ResourceSet([ResourceEntry(name, "x")])
    with pytest.raises(ResourceFormatError, match=re.escape(problem)) as excinfo:
        format_text(resources, target=Path("out.txt"))
    assert excinfo.value.source == Path("out.txt")


def test_format_escapes_leading_whitespace_and_line_breaks() -> None:
    resources = ResourceSet(
        [
            ResourceEntry("Pad", "  lead \ttrail  "),
            ResourceEntry("Breaks", "a\u2028b\x85c\x0bd\x0ce\x1cf"),
        ]
    )
    text = format_text(resources)
    assert text == (
        "Pad=\\u0020\\u0020lead \\ttrail  \n"
        "Breaks=a\\u2028b\\u0085c\\u000bd\\u000ce\\u001cf\n"
    )
    assert [(e.name, e.value) for e in parse_text(text)] == [
        ("Pad", "  lead \ttrail  "),
        ("Breaks", "a\u2028b\x85c\x0bd\x0ce\x1cf"),
    ]


_TEXT_NAMES = st.text(
    alphabet=st.characters(exclude_categories=("Cs", "Cc", "Zl", "Zp"), exclude_characters="="),
    min_size=1,
    max_size=12,
).filter(lambda name: name == name.strip() and not name.startswith(("#", ";", "[", "\ufeff")))


@pytest.mark.property
@settings(max_examples=_HYPOTHESIS_MAX_EXAMPLES, deadline=None)
@given(
    entries=st.lists(
        st.tuples(_TEXT_NAMES, st.text(st.characters(exclude_categories=("Cs",)), max_size=24)),
        max_size=6,
        unique_by=lambda pair: pair[0],
    )
)
def test_any_writable_string_set_reads_back_unchanged(entries: list[tuple[str, str]]) -> None:
    resources = ResourceSet([ResourceEntry(name, value) for name, value in entries])
    reparsed = parse_text(format_text(resources))
    assert [(e.name, e.value) for e in reparsed] == entries
    assert reparsed.warnings == []
