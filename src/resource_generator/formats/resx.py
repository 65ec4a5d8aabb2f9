"""Structured XML (``.resx``) resource format."""

from __future__ import annotations

import base64
import binascii
from pathlib import Path
from xml.etree import ElementTree as ET

from resource_generator.errors import ResourceFormatError
from resource_generator.formats.model import (
    BYTES_TYPE,
    STRING_TYPE,
    ResourceEntry,
    ResourceSet,
)

RESX_MIMETYPE = "text/microsoft-resx"
RESX_VERSION = "2.0"
BYTEARRAY_MIMETYPE = "application/x-microsoft.net.object.bytearray.base64"
FILE_REF_TYPE = "System.Resources.ResXFileRef"
XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>\n'

_HEADERS = (
    ("resmimetype", RESX_MIMETYPE),
    ("version", RESX_VERSION),
    ("reader", "System.Resources.ResXResourceReader, System.Windows.Forms"),
    ("writer", "System.Resources.ResXResourceWriter, System.Windows.Forms"),
)


def _bare_type(type_name: str) -> str:
    return type_name.split(",", 1)[0].strip()


def _child_text(element: ET.Element, tag: str) -> str | None:
    child = element.find(tag)
    if child is None:
        return None
    return child.text or ""


def _load_file_ref(raw: str, base_dir: Path, source: Path | None, name: str) -> ResourceEntry:
    parts = [part.strip() for part in raw.split(";")]
    if len(parts) < 2 or not parts[0]:
        raise ResourceFormatError(
            f"Invalid file reference '{raw}' for resource '{name}'.", source=source
        )
    linked = Path(parts[0])
    if not linked.is_absolute():
        linked = base_dir / linked
    declared = parts[1]
    try:
        if _bare_type(declared) == STRING_TYPE:
            encoding = parts[2] if len(parts) > 2 and parts[2] else "utf-8"
            value: str | bytes = linked.read_text(encoding=encoding)
            type_name = None
        else:
            value = linked.read_bytes()
            type_name = BYTES_TYPE if _bare_type(declared) == BYTES_TYPE else declared
    except (OSError, LookupError, UnicodeDecodeError) as exc:
        raise ResourceFormatError(
            f"Cannot read linked file '{linked}' for resource '{name}': {exc}",
            source=source,
        ) from exc
    return ResourceEntry(name=name, value=value, type_name=type_name, linked_path=linked)


def _parse_data(element: ET.Element, base_dir: Path, source: Path | None) -> ResourceEntry:
    name = element.get("name")
    if not name:
        raise ResourceFormatError("<data> element without a name.", source=source)
    type_name = element.get("type")
    mimetype = element.get("mimetype")
    raw = _child_text(element, "value") or ""
    comment = _child_text(element, "comment")

    if type_name and _bare_type(type_name) == FILE_REF_TYPE:
        return _load_file_ref(raw, base_dir, source, name)
    if mimetype == BYTEARRAY_MIMETYPE:
        try:
            payload = base64.b64decode("".join(raw.split()), validate=True)
        except binascii.Error as exc:
            raise ResourceFormatError(
                f"Invalid base64 payload for resource '{name}'.", source=source
            ) from exc
        if type_name is None or _bare_type(type_name) == BYTES_TYPE:
            type_name = BYTES_TYPE
        return ResourceEntry(name=name, value=payload, type_name=type_name, comment=comment)
    if mimetype:
        raise ResourceFormatError(
            f"Unsupported mimetype '{mimetype}' for resource '{name}'.", source=source
        )
    if type_name is None or _bare_type(type_name) == STRING_TYPE:
        return ResourceEntry(name=name, value=raw, comment=comment)
    return ResourceEntry(name=name, value=raw, type_name=type_name, comment=comment)


def parse_resx(content: str | bytes, source: Path | None = None) -> ResourceSet:
    """Parse ``.resx`` content.

    File references are resolved relative to the directory of ``source``
    (or the working directory when ``source`` is unknown) and reported
    through :meth:`ResourceSet.linked_paths`.

    Raises
    ------
    ResourceFormatError
        If the XML is malformed or a ``<data>`` element is invalid.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as exc:
        raise ResourceFormatError(f"Invalid ResX content: {exc}", source=source) from exc
    if root.tag != "root":
        raise ResourceFormatError(
            f"Expected a <root> element but found <{root.tag}>.", source=source
        )
    base_dir = source.parent if source is not None else Path.cwd()
    resources = ResourceSet()
    for element in root.iter("data"):
        resources.add(_parse_data(element, base_dir, source))
    return resources


def read_resx_resources(path: Path) -> ResourceSet:
    """Read a ``.resx`` file."""
    return parse_resx(path.read_bytes(), source=path)


def format_resx(resources: ResourceSet) -> str:
    """Render ``resources`` as ``.resx`` XML. Linked values are embedded."""
    root = ET.Element("root")
    for header, value in _HEADERS:
        element = ET.SubElement(root, "resheader", name=header)
        ET.SubElement(element, "value").text = value
    for entry in resources:
        data = ET.SubElement(root, "data", name=entry.name)
        if isinstance(entry.value, bytes):
            if entry.type_name in (None, BYTES_TYPE):
                data.set("type", f"{BYTES_TYPE}, mscorlib")
            else:
                data.set("type", entry.type_name)
            data.set("mimetype", BYTEARRAY_MIMETYPE)
            text = base64.b64encode(entry.value).decode("ascii")
        else:
            if entry.type_name and entry.type_name != STRING_TYPE:
                data.set("type", entry.type_name)
            data.set(XML_SPACE, "preserve")
            text = entry.value
        ET.SubElement(data, "value").text = text
        if entry.comment is not None:
            ET.SubElement(data, "comment").text = entry.comment
    ET.indent(root)
    # XML parsers fold a raw CR into LF; ElementTree only escapes it inside attributes.
    body = ET.tostring(root, encoding="unicode").replace("\r", "&#13;")
    return XML_DECLARATION + body + "\n"


def write_resx_resources(resources: ResourceSet, path: Path) -> None:
    """Write ``resources`` to ``path`` as ``.resx``."""
    path.write_text(format_resx(resources), encoding="utf-8")
