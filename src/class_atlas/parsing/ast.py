"""Tree-sitter front-end registry.

Parses source files using py-tree-sitter and lowers the concrete syntax
tree into :class:`~class_atlas.parsing.tree.CompilationUnit` nodes for the
diagram visitor.

Language-specific front-ends live in ``parsing.languages.*`` and register
via ``register_language()`` at import time.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from loguru import logger
from tree_sitter import Language, Parser

if TYPE_CHECKING:
    from collections.abc import Callable

    from tree_sitter import Node

    from class_atlas.parsing.tree import CompilationUnit

# ---------------------------------------------------------------------------
# Language config registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LanguageConfig:
    """Configuration for a tree-sitter language."""

    name: str
    extensions: frozenset[str]
    language: Language
    lower_func: Callable[[str, Node], CompilationUnit]


_LANGUAGES: dict[str, LanguageConfig] = {}
_EXTENSION_MAP: dict[str, str] = {}


def register_language(config: LanguageConfig) -> None:
    """Register a language configuration."""
    _LANGUAGES[config.name] = config
    for ext in config.extensions:
        _EXTENSION_MAP[ext] = config.name


def get_language(name: str) -> LanguageConfig | None:
    """Look up language config by name (e.g. ``"java"``)."""
    from class_atlas.parsing.languages import discover_plugins  # noqa: PLC0415

    discover_plugins()
    return _LANGUAGES.get(name)


def get_language_for_file(path: str) -> LanguageConfig | None:
    """Look up language config by file extension.

    Triggers plugin discovery on first call so that built-in and
    external languages are available.
    """
    from class_atlas.parsing.languages import discover_plugins  # noqa: PLC0415

    discover_plugins()

    suffix = PurePosixPath(path).suffix.lower()
    lang_name = _EXTENSION_MAP.get(suffix)
    if lang_name is None:
        return None
    return _LANGUAGES.get(lang_name)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def node_text(node: Node) -> str:
    """Get the text content of a tree-sitter node as a string."""
    text = node.text
    if text is None:
        return ""
    return text.decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# Core parse functions
# ---------------------------------------------------------------------------


def parse_source(source: bytes, lang_config: LanguageConfig, path: str = "<source>") -> CompilationUnit:
    """Parse *source* with *lang_config* and lower it to a compilation unit.

    Syntax errors do not abort parsing: tree-sitter recovers and the
    lowered tree holds whatever declarations survived.
    """
    # Parsers are cheap and not shareable across threads; one per call.
    parser = Parser(lang_config.language)
    tree = parser.parse(source)
    if tree.root_node.has_error:
        logger.warning("Syntax errors in {}; diagram may be incomplete", path)

    unit = lang_config.lower_func(path, tree.root_node)
    logger.debug("Parsed {}: {} top-level type(s)", path, len(unit.types))
    return unit


def parse_file(path: str, source: bytes) -> CompilationUnit | None:
    """Parse a source file into a compilation unit.

    Returns None if the language is not supported.
    """
    lang_config = get_language_for_file(path)
    if lang_config is None:
        return None
    return parse_source(source, lang_config, path)
