"""Diagram model built by the visitor and consumed by renderers.

A :class:`Document` holds one source file's contribution: the declared
types and the relationships discovered while walking them.  All sequences
are insertion-ordered; nothing is deduplicated at this stage.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from class_atlas.schema import Connector, DeclarationKind, Visibility


@dataclass(frozen=True)
class Relationship:
    """A directed link between two type references."""

    connector: Connector
    source: str
    target: str


@dataclass
class Field:
    visibility: Visibility
    is_static: bool
    type: str
    name: str


@dataclass
class Method:
    """A method or constructor.

    For constructors ``return_type`` holds the owning type's display name.
    """

    visibility: Visibility
    is_static: bool
    is_abstract: bool
    return_type: str
    name: str
    parameters: list[str] = field(default_factory=list)


@dataclass
class TypeEntity:
    """A class, interface, enum or record declaration."""

    package: str
    kind: DeclarationKind
    name: str
    imports: dict[str, str] = field(default_factory=dict)
    fields: list[Field] = field(default_factory=list)
    methods: list[Method] = field(default_factory=list)
    # Non-owning back-reference used to append inferred relationships.
    document: Document | None = field(default=None, repr=False, compare=False)

    @property
    def package_prefix(self) -> str:
        return f"{self.package}." if self.package else ""

    @property
    def qualified_name(self) -> str:
        return self.package_prefix + self.name


@dataclass
class Document:
    """Diagram contribution of one compilation unit."""

    types: list[TypeEntity] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)

    def add_type(self, package: str, kind: DeclarationKind, name: str) -> TypeEntity:
        entity = TypeEntity(package=package, kind=kind, name=name, document=self)
        self.types.append(entity)
        return entity

    def add_relationship(self, relationship: Relationship) -> None:
        self.relationships.append(relationship)
