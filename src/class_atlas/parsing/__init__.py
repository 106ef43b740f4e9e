"""Parsing package: tree-sitter front-ends and the syntax tree they produce."""

from __future__ import annotations

from class_atlas.parsing.ast import (
    LanguageConfig,
    get_language,
    get_language_for_file,
    parse_file,
    parse_source,
    register_language,
)
from class_atlas.parsing.tree import (
    CompilationUnit,
    ConstructorDeclaration,
    Declarator,
    EnumConstant,
    FieldDeclaration,
    Import,
    MalformedTreeError,
    MethodDeclaration,
    Parameter,
    TypeDeclaration,
    TypeForm,
    TypeRef,
)

__all__ = [
    "CompilationUnit",
    "ConstructorDeclaration",
    "Declarator",
    "EnumConstant",
    "FieldDeclaration",
    "Import",
    "LanguageConfig",
    "MalformedTreeError",
    "MethodDeclaration",
    "Parameter",
    "TypeDeclaration",
    "TypeForm",
    "TypeRef",
    "get_language",
    "get_language_for_file",
    "parse_file",
    "parse_source",
    "register_language",
]
