"""Syntax-tree to diagram-model visitor.

Walks one :class:`~class_atlas.parsing.tree.CompilationUnit` and builds a
:class:`~class_atlas.model.Document`.  Every visit function takes the node
and the current context, which is either the whole document (file scope)
or a single type entity (inside a type body).  Type declarations are only
processed under a document context and members only under an entity
context; any other pairing is ignored.

Relationship endpoints are resolved syntactically: a referenced type is
qualified through the declaring file's explicit imports, nothing more.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from class_atlas.model import Document, Field, Method, Relationship, TypeEntity
from class_atlas.parsing.tree import (
    CompilationUnit,
    MalformedTreeError,
    TypeDeclaration,
    TypeForm,
)
from class_atlas.schema import Connector, DeclarationKind, Visibility, visibility_from_modifiers

if TYPE_CHECKING:
    from class_atlas.parsing.tree import (
        ConstructorDeclaration,
        EnumConstant,
        FieldDeclaration,
        MethodDeclaration,
        Parameter,
        TypeRef,
    )
    from class_atlas.settings import DiagramSettings

# ---------------------------------------------------------------------------
# Traversal context
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DocumentContext:
    """File scope: new type entities are registered on ``document``."""

    document: Document


@dataclass(frozen=True)
class EntityContext:
    """Inside a type body: members are recorded on ``entity``."""

    entity: TypeEntity


Context = DocumentContext | EntityContext


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _generic_suffix(type_ref: TypeRef) -> str:
    if not type_ref.arguments:
        return ""
    return f"<{', '.join(a.text for a in type_ref.arguments)}>"


def _declaration_kind(decl: TypeDeclaration) -> DeclarationKind:
    match decl.form:
        case TypeForm.INTERFACE:
            return DeclarationKind.INTERFACE
        case TypeForm.ENUM:
            return DeclarationKind.ENUM
        case TypeForm.RECORD:
            return DeclarationKind.RECORD
        case _:
            if "abstract" in decl.modifiers:
                return DeclarationKind.ABSTRACT_CLASS
            return DeclarationKind.CLASS


# ---------------------------------------------------------------------------
# Visitor
# ---------------------------------------------------------------------------


class DiagramVisitor:
    """Builds diagram entities and relationships from declaration nodes.

    ``package`` is the package the compilation unit belongs to; it prefixes
    entity names and unresolved relationship endpoints when
    ``settings.show_package`` is enabled.
    """

    def __init__(self, package: str, settings: DiagramSettings) -> None:
        self.package = package
        self.settings = settings

    # -- dispatch ------------------------------------------------------------

    def visit_type(self, decl: TypeDeclaration, ctx: Context) -> None:
        match ctx:
            case DocumentContext(document=document):
                self._build_entity(decl, document)
                # Nested declarations become entities of their own.
                for member in decl.members:
                    self.visit_type(member, ctx)

    def visit_field(self, decl: FieldDeclaration, ctx: Context) -> None:
        match ctx:
            case EntityContext(entity=entity):
                self._record_field(decl, entity)

    def visit_constructor(self, decl: ConstructorDeclaration, ctx: Context) -> None:
        match ctx:
            case EntityContext(entity=entity) if self.settings.show_constructors:
                self._record_constructor(decl, entity)

    def visit_method(self, decl: MethodDeclaration, ctx: Context) -> None:
        match ctx:
            case EntityContext(entity=entity):
                self._record_method(decl, entity)

    def visit_enum_constant(self, constant: EnumConstant, ctx: Context) -> None:
        match ctx:
            case EntityContext(entity=entity):
                entity.fields.append(Field(Visibility.PUBLIC, True, "", constant.name))

    def visit_parameter(self, param: Parameter, ctx: Context) -> None:
        """Record component; ignored unless the context entity is a record."""
        match ctx:
            case EntityContext(entity=entity) if entity.kind == DeclarationKind.RECORD:
                entity.fields.append(Field(Visibility.PUBLIC, False, param.type.text, param.name))

    # -- type declarations ---------------------------------------------------

    def _qualified_path(self, decl: TypeDeclaration) -> tuple[str, CompilationUnit]:
        """Dotted display path of *decl* and the compilation unit the walk ended on."""
        name = decl.display_name
        node = decl.parent
        if node is None:
            raise MalformedTreeError(f"type declaration {decl.name!r} has no parent")
        while isinstance(node, TypeDeclaration):
            name = f"{node.display_name}.{name}"
            node = node.parent
            if node is None:
                raise MalformedTreeError(f"type declaration {decl.name!r} is detached from its compilation unit")
        return name, node

    def _build_entity(self, decl: TypeDeclaration, document: Document) -> TypeEntity:
        pkg = self.package if self.settings.show_package else ""
        prefix = f"{pkg}." if pkg else ""

        name, unit = self._qualified_path(decl)
        if "." in name:
            # source is nested inside its immediate enclosing type
            document.add_relationship(
                Relationship(Connector.CONTAINMENT, prefix + name, prefix + name.rsplit(".", 1)[0])
            )

        entity = document.add_type(pkg, _declaration_kind(decl), name)
        logger.debug("Built {} {}", entity.kind, entity.qualified_name)

        for imp in unit.imports:
            if not imp.is_wildcard:
                entity.imports[imp.name] = imp.qualified_name

        for type_ref in decl.implemented:
            self._add_relationship(Connector.REALIZATION, type_ref, entity)
        if decl.form in (TypeForm.CLASS, TypeForm.INTERFACE):
            for type_ref in decl.extended:
                self._add_relationship(Connector.EXTENSION, type_ref, entity)

        ctx = EntityContext(entity)
        for field_decl in decl.fields:
            self.visit_field(field_decl, ctx)
        for ctor in decl.constructors:
            self.visit_constructor(ctor, ctx)
        for method in decl.methods:
            self.visit_method(method, ctx)
        if decl.form is TypeForm.ENUM:
            for constant in decl.constants:
                self.visit_enum_constant(constant, ctx)
        if decl.form is TypeForm.RECORD:
            for component in decl.components:
                self.visit_parameter(component, ctx)
        return entity

    # -- members -------------------------------------------------------------

    def _record_field(self, decl: FieldDeclaration, entity: TypeEntity) -> None:
        visibility = visibility_from_modifiers(decl.modifiers)
        if visibility not in self.settings.field_visibilities or not decl.declarators:
            return

        # Only the first variable of `int a, b;` is represented.
        first = decl.declarators[0]
        entity.fields.append(Field(visibility, "static" in decl.modifiers, first.type, first.name))

        if self.settings.show_field_relationships:
            self._add_relationship(Connector.COMPOSITION, decl.type, entity)

    def _record_constructor(self, decl: ConstructorDeclaration, entity: TypeEntity) -> None:
        visibility = visibility_from_modifiers(decl.modifiers)
        if visibility not in self.settings.method_visibilities:
            return
        method = Method(visibility, "static" in decl.modifiers, "abstract" in decl.modifiers, entity.name, decl.name)
        method.parameters.extend(p.type.text for p in decl.parameters)
        entity.methods.append(method)

    def _record_method(self, decl: MethodDeclaration, entity: TypeEntity) -> None:
        visibility = visibility_from_modifiers(decl.modifiers)
        if visibility not in self.settings.method_visibilities:
            return
        method = Method(
            visibility,
            "static" in decl.modifiers,
            "abstract" in decl.modifiers,
            decl.return_type.text,
            decl.name,
        )
        method.parameters.extend(p.type.text for p in decl.parameters)
        entity.methods.append(method)

        if self.settings.show_method_relationships:
            self._add_relationship(Connector.DEPENDENCY, decl.return_type, entity)
            for param in decl.parameters:
                self._add_relationship(Connector.DEPENDENCY, param.type, entity)

    # -- relationship inference ----------------------------------------------

    def _add_relationship(self, connector: Connector, type_ref: TypeRef, entity: TypeEntity) -> None:
        """Link *type_ref* to *entity*, qualifying it through the entity's imports."""
        source = entity.package_prefix + type_ref.text

        if type_ref.base_name is not None:
            qualified = entity.imports.get(type_ref.base_name)
            if qualified is not None:
                source = (qualified if self.settings.show_package else type_ref.base_name) + _generic_suffix(type_ref)

        if entity.document is None:
            raise MalformedTreeError(f"type entity {entity.name!r} is not attached to a document")
        entity.document.add_relationship(Relationship(connector, source, entity.qualified_name))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_document(unit: CompilationUnit, settings: DiagramSettings, package: str | None = None) -> Document:
    """Build the diagram document for one compilation unit.

    *package* defaults to the unit's own package declaration.
    """
    document = Document()
    visitor = DiagramVisitor(unit.package if package is None else package, settings)
    ctx = DocumentContext(document)
    for decl in unit.types:
        visitor.visit_type(decl, ctx)
    return document
