"""Syntax tree consumed by the diagram visitor.

Language front-ends (see :mod:`class_atlas.parsing.languages`) lower
concrete parse trees into these nodes.  Declarations link back to their
enclosing declaration or compilation unit through ``parent``; the links are
wired automatically when a node is attached to its container, so trees can
also be assembled by hand.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class MalformedTreeError(RuntimeError):
    """The tree violates a structural precondition (e.g. a missing parent link)."""


class TypeForm(StrEnum):
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    RECORD = "record"


# ---------------------------------------------------------------------------
# Type references
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TypeRef:
    """A type as written in source.

    ``text`` is the literal form.  Named (class or interface) types also
    expose ``base_name`` (the simple, unqualified identifier) and their
    generic ``arguments``; primitives, arrays and wildcards leave
    ``base_name`` as ``None``.
    """

    text: str
    base_name: str | None = None
    arguments: tuple[TypeRef, ...] | None = None

    @property
    def is_named(self) -> bool:
        return self.base_name is not None

    @classmethod
    def named(cls, base_name: str, *arguments: TypeRef | str, text: str | None = None) -> TypeRef:
        """Build a named reference; string arguments are treated as raw text."""
        args = tuple(a if isinstance(a, TypeRef) else TypeRef(a) for a in arguments) or None
        if text is None:
            text = base_name + (f"<{', '.join(a.text for a in args)}>" if args else "")
        return cls(text=text, base_name=base_name, arguments=args)


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


@dataclass
class Declarator:
    """One variable introduced by a field declaration."""

    name: str
    type: str


@dataclass
class FieldDeclaration:
    modifiers: list[str]
    type: TypeRef  # element type, array dimensions stripped
    declarators: list[Declarator]


@dataclass
class Parameter:
    modifiers: list[str]
    type: TypeRef
    name: str


@dataclass
class MethodDeclaration:
    modifiers: list[str]
    return_type: TypeRef
    name: str
    parameters: list[Parameter] = field(default_factory=list)


@dataclass
class ConstructorDeclaration:
    modifiers: list[str]
    name: str
    parameters: list[Parameter] = field(default_factory=list)


@dataclass
class EnumConstant:
    name: str


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


@dataclass
class TypeDeclaration:
    """A class, interface, enum or record declaration."""

    form: TypeForm
    name: str
    modifiers: list[str] = field(default_factory=list)
    type_parameters: list[str] = field(default_factory=list)
    implemented: list[TypeRef] = field(default_factory=list)
    extended: list[TypeRef] = field(default_factory=list)
    fields: list[FieldDeclaration] = field(default_factory=list)
    constructors: list[ConstructorDeclaration] = field(default_factory=list)
    methods: list[MethodDeclaration] = field(default_factory=list)
    constants: list[EnumConstant] = field(default_factory=list)
    components: list[Parameter] = field(default_factory=list)
    members: list[TypeDeclaration] = field(default_factory=list)
    parent: TypeDeclaration | CompilationUnit | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        for member in self.members:
            member.parent = self

    def add_member(self, member: TypeDeclaration) -> None:
        member.parent = self
        self.members.append(member)

    @property
    def display_name(self) -> str:
        """Simple name with its generic parameter list, e.g. ``Map<K, V>``."""
        if self.type_parameters:
            return f"{self.name}<{', '.join(self.type_parameters)}>"
        return self.name


@dataclass(frozen=True)
class Import:
    """An import statement.

    ``name`` is the last segment of ``qualified_name``.  Wildcard imports
    keep the imported package (or type) in ``qualified_name`` and leave
    ``name`` empty.
    """

    name: str
    qualified_name: str
    is_static: bool = False
    is_wildcard: bool = False


@dataclass
class CompilationUnit:
    """One parsed source file."""

    package: str = ""
    imports: list[Import] = field(default_factory=list)
    types: list[TypeDeclaration] = field(default_factory=list)
    path: str | None = None

    def __post_init__(self) -> None:
        for decl in self.types:
            decl.parent = self

    def add_type(self, decl: TypeDeclaration) -> None:
        decl.parent = self
        self.types.append(decl)

    def walk(self) -> Iterator[TypeDeclaration]:
        """Yield every type declaration depth-first, parents before members."""
        stack = list(reversed(self.types))
        while stack:
            decl = stack.pop()
            yield decl
            stack.extend(reversed(decl.members))
