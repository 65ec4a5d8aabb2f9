"""Strongly-typed accessor source generators implementing the application port."""

from __future__ import annotations

import keyword
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from resource_generator.application.results import GeneratedAccessor
from resource_generator.errors import AccessorGenerationError, ConfigurationError

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_NON_IDENTIFIER = re.compile(r"[^0-9A-Za-z_]")

_CSHARP_KEYWORDS = frozenset(
    """
    abstract as base bool break byte case catch char checked class const continue
    decimal default delegate do double else enum event explicit extern false finally
    fixed float for foreach goto if implicit in int interface internal is lock long
    namespace new null object operator out override params private protected public
    readonly ref return sbyte sealed short sizeof stackalloc static string struct
    switch this throw true try typeof uint ulong unchecked unsafe ushort using virtual
    void volatile while
    """.split()
)

_VB_KEYWORDS = frozenset(
    """
    addhandler addressof alias and andalso as boolean byref byte byval call case catch
    cbool cbyte cchar cdate cdbl cdec char cint class clng cobj const continue csbyte
    cshort csng cstr ctype cuint culng cushort date decimal declare default delegate
    dim directcast do double each else elseif end enum erase error event exit false
    finally for friend function get gettype global gosub goto handles if implements
    imports in inherits integer interface is isnot let lib like long loop me mod module
    mustinherit mustoverride mybase myclass namespace narrowing new next not nothing
    notinheritable notoverridable object of on operator option optional or orelse
    overloads overridable overrides paramarray partial private property protected
    public raiseevent readonly redim rem removehandler resume return sbyte select set
    shadows shared short single static step stop string structure sub synclock then
    throw to true try trycast typeof uinteger ulong ushort using variant wend when
    while widening with withevents writeonly xor
    """.split()
)

_RESERVED_MEMBERS = ("ResourceManager", "Culture")

_HEADER_LINES = (
    "<auto-generated>",
    "    This code was generated by generate-resource.",
    "    Changes to this file may cause incorrect behavior and will be lost if",
    "    the code is regenerated.",
    "</auto-generated>",
)


@dataclass(frozen=True)
class AccessorModel:
    """Everything a renderer needs to emit one accessor class."""

    namespace: str | None
    class_name: str
    public_class: bool
    resource_base_name: str
    members: tuple[tuple[str, str], ...]


def sanitize_member(key: str) -> str:
    """Map a resource key onto an identifier usable as a property name."""
    member = _NON_IDENTIFIER.sub("_", key) or "_"
    if member[0].isdigit():
        member = f"_{member}"
    return member


class _Renderer:
    language = ""
    aliases: tuple[str, ...] = ()
    extension = ""
    case_sensitive = True
    reserved: tuple[str, ...] = _RESERVED_MEMBERS

    def escape_member(self, member: str) -> str:
        return member

    def render(self, model: AccessorModel) -> str:
        raise NotImplementedError


class CSharpRenderer(_Renderer):
    language = "CSharp"
    aliases = ("csharp", "c#", "cs")
    extension = ".cs"

    def escape_member(self, member: str) -> str:
        return f"@{member}" if member in _CSHARP_KEYWORDS else member

    def render(self, model: AccessorModel) -> str:
        visibility = "public" if model.public_class else "internal"
        body = [
            f"{visibility} class {model.class_name}",
            "{",
            "    private static global::System.Resources.ResourceManager resourceMan;",
            "    private static global::System.Globalization.CultureInfo resourceCulture;",
            "",
            f"    internal {model.class_name}()",
            "    {",
            "    }",
            "",
            f"    {visibility} static global::System.Resources.ResourceManager ResourceManager",
            "    {",
            "        get",
            "        {",
            "            if (object.ReferenceEquals(resourceMan, null))",
            "            {",
            "                resourceMan = new global::System.Resources.ResourceManager("
            f"{_c_string(model.resource_base_name)}, typeof({model.class_name}).Assembly);",
            "            }",
            "            return resourceMan;",
            "        }",
            "    }",
            "",
            f"    {visibility} static global::System.Globalization.CultureInfo Culture",
            "    {",
            "        get { return resourceCulture; }",
            "        set { resourceCulture = value; }",
            "    }",
        ]
        for member, key in model.members:
            body.extend(
                [
                    "",
                    f"    {visibility} static string {self.escape_member(member)}",
                    "    {",
                    "        get { return ResourceManager.GetString("
                    f"{_c_string(key)}, resourceCulture); }}",
                    "    }",
                ]
            )
        body.append("}")

        lines = [f"// {line}" for line in _HEADER_LINES]
        lines.append("")
        if model.namespace:
            lines.extend([f"namespace {model.namespace}", "{"])
            lines.extend(_indent(body, "    "))
            lines.append("}")
        else:
            lines.extend(body)
        return "\n".join(lines) + "\n"


class VisualBasicRenderer(_Renderer):
    language = "VisualBasic"
    aliases = ("visualbasic", "vb", "vbnet")
    extension = ".vb"
    case_sensitive = False

    def escape_member(self, member: str) -> str:
        return f"[{member}]" if member.lower() in _VB_KEYWORDS else member

    def render(self, model: AccessorModel) -> str:
        visibility = "Public" if model.public_class else "Friend"
        manager = "Global.System.Resources.ResourceManager"
        culture = "Global.System.Globalization.CultureInfo"
        body = [
            f"{visibility} Class {model.class_name}",
            "",
            f"    Private Shared resourceMan As {manager}",
            f"    Private Shared resourceCulture As {culture}",
            "",
            "    Friend Sub New()",
            "        MyBase.New",
            "    End Sub",
            "",
            f"    {visibility} Shared ReadOnly Property ResourceManager() As {manager}",
            "        Get",
            "            If Object.ReferenceEquals(resourceMan, Nothing) Then",
            f"                resourceMan = New {manager}("
            f"{_vb_string(model.resource_base_name)}, GetType({model.class_name}).Assembly)",
            "            End If",
            "            Return resourceMan",
            "        End Get",
            "    End Property",
            "",
            f"    {visibility} Shared Property Culture() As {culture}",
            "        Get",
            "            Return resourceCulture",
            "        End Get",
            "        Set",
            "            resourceCulture = value",
            "        End Set",
            "    End Property",
        ]
        for member, key in model.members:
            body.extend(
                [
                    "",
                    f"    {visibility} Shared ReadOnly Property "
                    f"{self.escape_member(member)}() As String",
                    "        Get",
                    f"            Return ResourceManager.GetString({_vb_string(key)}, resourceCulture)",
                    "        End Get",
                    "    End Property",
                ]
            )
        body.append("End Class")

        lines = ["'" + "-" * 78]
        lines.extend(f"' {line}" for line in _HEADER_LINES)
        lines.append("'" + "-" * 78)
        lines.extend(["", "Option Strict On", "Option Explicit On", ""])
        if model.namespace:
            lines.append(f"Namespace {model.namespace}")
            lines.extend(_indent(body, "    "))
            lines.append("End Namespace")
        else:
            lines.extend(body)
        return "\n".join(lines) + "\n"


class PythonRenderer(_Renderer):
    language = "Python"
    aliases = ("python", "py")
    extension = ".py"
    reserved = ("base_name", "keys")

    def escape_member(self, member: str) -> str:
        return f"{member}_" if keyword.iskeyword(member) else member

    def render(self, model: AccessorModel) -> str:
        qualified = (
            f"{model.namespace}.{model.class_name}" if model.namespace else model.class_name
        )
        lines = [
            f'"""Resource keys of {model.resource_base_name!r}.',
            "",
            "Generated by generate-resource; changes are lost when it is regenerated.",
            '"""',
            "",
        ]
        if model.public_class:
            lines.extend([f"__all__ = [{model.class_name!r}]", ""])
        lines.extend(
            [
                "",
                f"class {model.class_name}:",
                f'    """Accessor for {qualified}."""',
                "",
                f"    base_name = {model.resource_base_name!r}",
            ]
        )
        for member, key in model.members:
            lines.append(f"    {self.escape_member(member)} = {key!r}")
        lines.extend(
            [
                "",
                "    @classmethod",
                "    def keys(cls) -> tuple[str, ...]:",
                f"        return {tuple(key for _, key in model.members)!r}",
            ]
        )
        return "\n".join(lines) + "\n"


_RENDERERS: tuple[_Renderer, ...] = (CSharpRenderer(), VisualBasicRenderer(), PythonRenderer())


def _indent(lines: Sequence[str], prefix: str) -> list[str]:
    return [f"{prefix}{line}" if line else line for line in lines]


def _c_string(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def _vb_string(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def resolve_renderer(language: str) -> _Renderer:
    """Return the renderer for ``language`` (case-insensitive alias)."""
    wanted = language.strip().lower()
    for renderer in _RENDERERS:
        if wanted in renderer.aliases:
            return renderer
    known = ", ".join(renderer.language for renderer in _RENDERERS)
    raise ConfigurationError(
        f"Unsupported strongly typed language '{language}'. Supported languages: {known}"
    )


def supported_languages() -> list[str]:
    return [renderer.language for renderer in _RENDERERS]


class AccessorCodeGenerator:
    """Generate C#, Visual Basic or Python accessor classes."""

    def file_extension(self, language: str) -> str:
        return resolve_renderer(language).extension

    def generate(
        self,
        resource_keys: Sequence[str],
        language: str,
        namespace: str | None,
        class_name: str,
        public_class: bool,
        output_path: Path,
        resource_base_name: str,
    ) -> GeneratedAccessor:
        """Render and write the accessor source file.

        Keys whose member name collides with an existing member are left out
        and reported in ``warnings``.

        Raises
        ------
        ConfigurationError
            If ``language`` is unsupported.
        AccessorGenerationError
            If the class name or namespace is not a valid identifier, or the
            file cannot be written.
        """
        renderer = resolve_renderer(language)
        if not _IDENTIFIER.match(class_name) or _is_keyword(renderer, class_name):
            raise AccessorGenerationError(
                f"Strongly typed class name '{class_name}' is not a valid identifier."
            )
        if namespace is not None and not all(
            _IDENTIFIER.match(part) for part in namespace.split(".")
        ):
            raise AccessorGenerationError(
                f"Strongly typed namespace '{namespace}' is not a valid namespace."
            )

        members, skipped = _members(renderer, class_name, resource_keys)
        model = AccessorModel(
            namespace=namespace,
            class_name=class_name,
            public_class=public_class,
            resource_base_name=resource_base_name,
            members=members,
        )
        if output_path.is_dir():
            raise AccessorGenerationError(
                f"Strongly typed file name '{output_path}' is a directory."
            )
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(renderer.render(model), encoding="utf-8")
        except OSError as exc:
            raise AccessorGenerationError(
                f"Could not write strongly typed class '{output_path}': {exc}"
            ) from exc
        return GeneratedAccessor(path=output_path, warnings=skipped)


def _is_keyword(renderer: _Renderer, name: str) -> bool:
    if isinstance(renderer, PythonRenderer):
        return keyword.iskeyword(name)
    if isinstance(renderer, VisualBasicRenderer):
        return name.lower() in _VB_KEYWORDS
    return name in _CSHARP_KEYWORDS


def _members(
    renderer: _Renderer, class_name: str, keys: Sequence[str]
) -> tuple[tuple[tuple[str, str], ...], tuple[str, ...]]:
    def fold(name: str) -> str:
        return name if renderer.case_sensitive else name.lower()

    taken = {fold(name) for name in (class_name, *renderer.reserved)}
    members: list[tuple[str, str]] = []
    skipped: list[str] = []
    for key in keys:
        member = sanitize_member(key)
        if fold(member) in taken:
            message = (
                f"Resource '{key}' maps to member '{member}' which is already defined; "
                "skipped."
            )
            logger.warning("%s", message)
            skipped.append(message)
            continue
        taken.add(fold(member))
        members.append((member, key))
    return tuple(members), tuple(skipped)
