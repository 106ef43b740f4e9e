"""Java language support: lowers tree-sitter-java trees to compilation units."""

from __future__ import annotations

from typing import TYPE_CHECKING

import tree_sitter_java as tsjava
from tree_sitter import Language

from class_atlas.parsing.ast import LanguageConfig, node_text, register_language
from class_atlas.parsing.tree import (
    CompilationUnit,
    ConstructorDeclaration,
    Declarator,
    EnumConstant,
    FieldDeclaration,
    Import,
    MethodDeclaration,
    Parameter,
    TypeDeclaration,
    TypeForm,
    TypeRef,
)

if TYPE_CHECKING:
    from tree_sitter import Node

# ---------------------------------------------------------------------------
# Node type groupings
# ---------------------------------------------------------------------------

_TYPE_DECLARATIONS: dict[str, TypeForm] = {
    "class_declaration": TypeForm.CLASS,
    "interface_declaration": TypeForm.INTERFACE,
    "enum_declaration": TypeForm.ENUM,
    "record_declaration": TypeForm.RECORD,
}

_ANNOTATIONS = frozenset({"marker_annotation", "annotation"})

_TYPE_NODES = frozenset(
    {
        "type_identifier",
        "scoped_type_identifier",
        "generic_type",
        "array_type",
        "annotated_type",
        "integral_type",
        "floating_point_type",
        "boolean_type",
        "void_type",
        "wildcard",
    }
)

_NAME_NODES = frozenset({"identifier", "scoped_identifier"})

_JAVA_LANGUAGE = Language(tsjava.language())


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


def _dimensions(node: Node | None) -> str:
    """Normalise a ``dimensions`` node (``[ ] []``) to ``[][]``."""
    if node is None:
        return ""
    return "[]" * node_text(node).count("[")


def _unannotated(node: Node) -> Node:
    """Strip type annotations: `@NonNull String` -> `String`."""
    while node.type == "annotated_type":
        node = [c for c in node.named_children if c.type not in _ANNOTATIONS][-1]
    return node


def _type_text(node: Node | None) -> str:
    """Render a type node canonically: no annotations, ``", "`` between arguments."""
    if node is None:
        return ""
    node = _unannotated(node)
    match node.type:
        case "generic_type":
            base, args = _generic_parts(node)
            return f"{_type_text(base)}<{', '.join(_type_text(a) for a in args)}>"
        case "scoped_type_identifier":
            return ".".join(_type_text(c) for c in node.named_children if c.type not in _ANNOTATIONS)
        case "array_type":
            return _type_text(node.child_by_field_name("element")) + _dimensions(node.child_by_field_name("dimensions"))
        case "wildcard":
            text = "?"
            bound_kind = None
            for child in node.children:
                if child.type in ("extends", "super"):
                    bound_kind = child.type
                elif child.type in _TYPE_NODES and bound_kind is not None:
                    text += f" {bound_kind} {_type_text(child)}"
            return text
        case _:
            return " ".join(node_text(node).split())


def _generic_parts(node: Node) -> tuple[Node | None, list[Node]]:
    base = next((c for c in node.named_children if c.type in ("type_identifier", "scoped_type_identifier")), None)
    args: list[Node] = []
    for child in node.named_children:
        if child.type == "type_arguments":
            args = [a for a in child.named_children if a.type not in _ANNOTATIONS]
    return base, args


def _simple_name(node: Node) -> str:
    """Last identifier of a (possibly scoped) type name: ``java.util.List`` -> ``List``."""
    if node.type == "scoped_type_identifier":
        return node_text([c for c in node.named_children if c.type == "type_identifier"][-1])
    return node_text(node)


def _type_ref(node: Node | None) -> TypeRef:
    if node is None:
        return TypeRef(text="")
    node = _unannotated(node)
    text = _type_text(node)
    match node.type:
        case "type_identifier" | "scoped_type_identifier":
            return TypeRef(text=text, base_name=_simple_name(node))
        case "generic_type":
            base, args = _generic_parts(node)
            return TypeRef(
                text=text,
                base_name=_simple_name(base) if base is not None else None,
                arguments=tuple(_type_ref(a) for a in args) or None,
            )
        case _:
            return TypeRef(text=text)


def _element_type(node: Node | None) -> Node | None:
    while node is not None and _unannotated(node).type == "array_type":
        node = _unannotated(node).child_by_field_name("element")
    return node


def _type_list(node: Node) -> list[TypeRef]:
    """Collect type references from ``superclass``/``super_interfaces``/``extends_interfaces``."""
    refs: list[TypeRef] = []
    for child in node.named_children:
        if child.type == "type_list":
            refs.extend(_type_list(child))
        elif child.type in _TYPE_NODES:
            refs.append(_type_ref(child))
    return refs


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


def _modifiers(node: Node) -> list[str]:
    for child in node.children:
        if child.type == "modifiers":
            return [node_text(c) for c in child.children if c.type not in _ANNOTATIONS]
    return []


def _name(node: Node) -> str:
    name_node = node.child_by_field_name("name")
    return node_text(name_node) if name_node is not None else ""


def _parameters(node: Node | None) -> list[Parameter]:
    if node is None:
        return []
    params: list[Parameter] = []
    for child in node.named_children:
        if child.type == "formal_parameter":
            type_node = child.child_by_field_name("type")
            dims = _dimensions(child.child_by_field_name("dimensions"))
            type_ref = TypeRef(text=_type_text(type_node) + dims) if dims else _type_ref(type_node)
            params.append(Parameter(modifiers=_modifiers(child), type=type_ref, name=_name(child)))
        elif child.type == "spread_parameter":
            # Varargs keep the element type, matching how the declaration is typed.
            type_node = next((c for c in child.named_children if c.type in _TYPE_NODES), None)
            declarator = next((c for c in child.named_children if c.type == "variable_declarator"), None)
            name = _name(declarator) if declarator is not None else ""
            params.append(Parameter(modifiers=_modifiers(child), type=_type_ref(type_node), name=name))
    return params


def _field(node: Node) -> FieldDeclaration:
    type_node = node.child_by_field_name("type")
    base_text = _type_text(type_node)
    declarators = [
        Declarator(name=_name(d), type=base_text + _dimensions(d.child_by_field_name("dimensions")))
        for d in node.children_by_field_name("declarator")
    ]
    return FieldDeclaration(
        modifiers=_modifiers(node),
        type=_type_ref(_element_type(type_node)),
        declarators=declarators,
    )


def _method(node: Node) -> MethodDeclaration:
    return MethodDeclaration(
        modifiers=_modifiers(node),
        return_type=_type_ref(node.child_by_field_name("type")),
        name=_name(node),
        parameters=_parameters(node.child_by_field_name("parameters")),
    )


def _constructor(node: Node) -> ConstructorDeclaration:
    return ConstructorDeclaration(
        modifiers=_modifiers(node),
        name=_name(node),
        parameters=_parameters(node.child_by_field_name("parameters")),
    )


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


def _type_parameters(node: Node) -> list[str]:
    tp_node = node.child_by_field_name("type_parameters")
    if tp_node is None:
        return []
    names: list[str] = []
    for tp in tp_node.named_children:
        if tp.type != "type_parameter":
            continue
        ident = next((c for c in tp.named_children if c.type in ("type_identifier", "identifier")), None)
        if ident is not None:
            names.append(node_text(ident))
    return names


def _collect_body(body: Node, decl: TypeDeclaration) -> None:
    for child in body.named_children:
        match child.type:
            case "enum_constant":
                decl.constants.append(EnumConstant(name=_name(child)))
            case "enum_body_declarations":
                _collect_body(child, decl)
            case "field_declaration" | "constant_declaration":
                decl.fields.append(_field(child))
            case "method_declaration":
                decl.methods.append(_method(child))
            case "constructor_declaration":
                decl.constructors.append(_constructor(child))
            case kind if kind in _TYPE_DECLARATIONS:
                decl.add_member(_type_declaration(child))


def _type_declaration(node: Node) -> TypeDeclaration:
    form = _TYPE_DECLARATIONS[node.type]
    decl = TypeDeclaration(
        form=form,
        name=_name(node),
        modifiers=_modifiers(node),
        type_parameters=_type_parameters(node),
    )
    for child in node.children:
        match child.type:
            case "superclass" | "extends_interfaces":
                decl.extended.extend(_type_list(child))
            case "super_interfaces":
                decl.implemented.extend(_type_list(child))
            case "formal_parameters" if form is TypeForm.RECORD:
                decl.components = _parameters(child)

    body = node.child_by_field_name("body")
    if body is not None:
        _collect_body(body, decl)
    return decl


def _import(node: Node) -> Import | None:
    name_node = next((c for c in node.named_children if c.type in _NAME_NODES), None)
    if name_node is None:
        return None
    qualified = node_text(name_node)
    is_wildcard = any(c.type == "asterisk" for c in node.children)
    return Import(
        name="" if is_wildcard else qualified.rsplit(".", 1)[-1],
        qualified_name=qualified,
        is_static=any(c.type == "static" for c in node.children),
        is_wildcard=is_wildcard,
    )


# ---------------------------------------------------------------------------
# Java lowering entry point
# ---------------------------------------------------------------------------


def _lower_java(path: str, root: Node) -> CompilationUnit:
    """Lower a tree-sitter-java ``program`` node to a compilation unit."""
    unit = CompilationUnit(path=path)
    for child in root.named_children:
        if child.type == "package_declaration":
            name_node = next((c for c in child.named_children if c.type in _NAME_NODES), None)
            if name_node is not None:
                unit.package = node_text(name_node)
        elif child.type == "import_declaration":
            imp = _import(child)
            if imp is not None:
                unit.imports.append(imp)
        elif child.type in _TYPE_DECLARATIONS:
            unit.add_type(_type_declaration(child))
    return unit


JAVA_LANGUAGE = LanguageConfig(
    name="java",
    extensions=frozenset({".java"}),
    language=_JAVA_LANGUAGE,
    lower_func=_lower_java,
)

register_language(JAVA_LANGUAGE)
