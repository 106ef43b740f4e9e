"""Diagram schema definitions for Class Atlas.

Defines visibility levels, declaration kinds and the fixed relationship
connector vocabulary, plus the modifier-based visibility classifier.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------


class Visibility(StrEnum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
    PACKAGE = "package"  # no access modifier (package-private)


_ACCESS_MODIFIERS: frozenset[str] = frozenset({Visibility.PUBLIC, Visibility.PROTECTED, Visibility.PRIVATE})


def visibility_from_modifiers(modifiers: Iterable[str]) -> Visibility:
    """Classify a declaration by its modifier tokens.

    The first access modifier in declaration order wins; without one the
    declaration is package-private.
    """
    for token in modifiers:
        if token in _ACCESS_MODIFIERS:
            return Visibility(token)
    return Visibility.PACKAGE


# ---------------------------------------------------------------------------
# Declaration kinds
# ---------------------------------------------------------------------------


class DeclarationKind(StrEnum):
    CLASS = "class"
    ABSTRACT_CLASS = "abstract class"
    INTERFACE = "interface"
    ENUM = "enum"
    RECORD = "record"


# ---------------------------------------------------------------------------
# Relationship connectors
# ---------------------------------------------------------------------------


class Connector(StrEnum):
    """Relationship tokens, reproduced verbatim in rendered output."""

    CONTAINMENT = "+.."  # source nested inside target
    REALIZATION = "<|.."  # source interface implemented by target
    EXTENSION = "<|--"  # source type extended by target
    COMPOSITION = "--"  # source field type held by target
    DEPENDENCY = ".."  # source type used in target's method signatures
