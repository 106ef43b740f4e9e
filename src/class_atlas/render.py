"""PlantUML rendering of diagram documents.

Relationships are deduplicated here, across all documents, keeping the
first occurrence; the model itself never merges them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from class_atlas.schema import Visibility

if TYPE_CHECKING:
    from collections.abc import Iterable

    from class_atlas.model import Document, Field, Method, Relationship, TypeEntity

_VISIBILITY_GLYPHS: dict[Visibility, str] = {
    Visibility.PUBLIC: "+",
    Visibility.PROTECTED: "#",
    Visibility.PRIVATE: "-",
    Visibility.PACKAGE: "~",
}


def _quote(name: str) -> str:
    return f'"{name}"'


def _render_field(f: Field) -> str:
    static = "{static} " if f.is_static else ""
    text = f"{_VISIBILITY_GLYPHS[f.visibility]}{static}{f.name}"
    return f"{text} : {f.type}" if f.type else text


def _render_method(m: Method) -> str:
    modifiers = ("{static} " if m.is_static else "") + ("{abstract} " if m.is_abstract else "")
    return f"{_VISIBILITY_GLYPHS[m.visibility]}{modifiers}{m.name}({', '.join(m.parameters)}) : {m.return_type}"


def render_entity(entity: TypeEntity) -> list[str]:
    """Render one entity as a PlantUML class block."""
    lines = [f"{entity.kind} {_quote(entity.qualified_name)} {{"]
    lines.extend(f"  {_render_field(f)}" for f in entity.fields)
    lines.extend(f"  {_render_method(m)}" for m in entity.methods)
    lines.append("}")
    return lines


def render_relationship(rel: Relationship) -> str:
    return f"{_quote(rel.source)} {rel.connector} {_quote(rel.target)}"


def unique_relationships(documents: Iterable[Document]) -> list[Relationship]:
    """All relationships of *documents*, first occurrence wins."""
    seen: set[Relationship] = set()
    result: list[Relationship] = []
    for document in documents:
        for rel in document.relationships:
            if rel not in seen:
                seen.add(rel)
                result.append(rel)
    return result


def render_plantuml(documents: Iterable[Document], *, title: str | None = None) -> str:
    """Render *documents* as one PlantUML class diagram."""
    documents = list(documents)
    lines = ["@startuml"]
    if title:
        lines.append(f"title {title}")
    for document in documents:
        for entity in document.types:
            lines.extend(render_entity(entity))
    lines.extend(render_relationship(rel) for rel in unique_relationships(documents))
    lines.append("@enduml")
    return "\n".join(lines) + "\n"
