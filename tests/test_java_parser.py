"""Unit tests for the tree-sitter Java front-end."""

from __future__ import annotations

from class_atlas.parsing.ast import get_language, get_language_for_file, parse_file
from class_atlas.parsing.tree import CompilationUnit, TypeDeclaration, TypeForm
from class_atlas.schema import Connector
from class_atlas.settings import DiagramSettings
from class_atlas.visitor import build_document

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse(source: str, path: str = "src/Example.java") -> CompilationUnit:
    result = parse_file(path, source.encode("utf-8"))
    assert result is not None
    return result


def _type(unit: CompilationUnit, name: str) -> TypeDeclaration:
    matches = [d for d in unit.walk() if d.name == name]
    names = [d.name for d in unit.walk()]
    assert len(matches) == 1, f"Expected 1 declaration named {name!r}, got {len(matches)}: {names}"
    return matches[0]


SHAPE_SOURCE = """\
package com.example.shapes;

import java.util.List;
import java.util.Map;
import java.io.*;
import static java.lang.Math.max;

@Deprecated
public abstract class Shape<T extends Number> implements Comparable<Shape<T>>, java.io.Serializable {
    private static final int MAX = 10, MIN = 0;
    protected List<String> names;
    int[] values;
    int legacy[];

    public Shape(String name) {}

    public abstract double area();

    public static <K, V> Map<K, V> index(List<? extends K> keys, V... values) {
        return null;
    }

    class Node {}
}
"""


# ---------------------------------------------------------------------------
# Language detection
# ---------------------------------------------------------------------------


def test_language_detection_java():
    assert get_language_for_file("src/Main.java") is not None
    assert get_language("java") is not None


def test_language_detection_unsupported():
    assert get_language_for_file("src/main.py") is None
    assert parse_file("notes.txt", b"hello") is None


# ---------------------------------------------------------------------------
# Compilation unit
# ---------------------------------------------------------------------------


def test_package_and_imports():
    unit = _parse(SHAPE_SOURCE)

    assert unit.package == "com.example.shapes"
    assert [(i.name, i.qualified_name) for i in unit.imports] == [
        ("List", "java.util.List"),
        ("Map", "java.util.Map"),
        ("", "java.io"),
        ("max", "java.lang.Math.max"),
    ]
    assert [i.is_wildcard for i in unit.imports] == [False, False, True, False]
    assert [i.is_static for i in unit.imports] == [False, False, False, True]


def test_default_package():
    unit = _parse("class A {}\n")
    assert unit.package == ""
    assert unit.path == "src/Example.java"


# ---------------------------------------------------------------------------
# Classes
# ---------------------------------------------------------------------------


def test_class_header():
    shape = _type(_parse(SHAPE_SOURCE), "Shape")

    assert shape.form is TypeForm.CLASS
    assert shape.modifiers == ["public", "abstract"]
    assert shape.type_parameters == ["T"]
    assert [t.text for t in shape.implemented] == ["Comparable<Shape<T>>", "java.io.Serializable"]
    assert [t.base_name for t in shape.implemented] == ["Comparable", "Serializable"]
    assert shape.extended == []


def test_superclass():
    unit = _parse("class Circle extends Shape<Double> implements Drawable {}\n")
    circle = _type(unit, "Circle")

    assert [t.text for t in circle.extended] == ["Shape<Double>"]
    assert circle.extended[0].arguments[0].text == "Double"
    assert [t.text for t in circle.implemented] == ["Drawable"]


def test_fields():
    shape = _type(_parse(SHAPE_SOURCE), "Shape")
    max_field, names, values, legacy = shape.fields

    assert max_field.modifiers == ["private", "static", "final"]
    assert [(d.name, d.type) for d in max_field.declarators] == [("MAX", "int"), ("MIN", "int")]
    assert max_field.type.base_name is None

    assert names.type.text == "List<String>"
    assert names.type.base_name == "List"
    assert [a.text for a in names.type.arguments] == ["String"]

    assert values.declarators[0].type == "int[]"
    assert values.type.text == "int"
    assert legacy.declarators[0].type == "int[]"


def test_constructors_and_methods():
    shape = _type(_parse(SHAPE_SOURCE), "Shape")

    (ctor,) = shape.constructors
    assert ctor.name == "Shape"
    assert [(p.type.text, p.name) for p in ctor.parameters] == [("String", "name")]

    area, index = shape.methods
    assert area.modifiers == ["public", "abstract"]
    assert area.return_type.text == "double"
    assert area.return_type.base_name is None

    assert index.return_type.text == "Map<K, V>"
    assert [(p.type.text, p.name) for p in index.parameters] == [("List<? extends K>", "keys"), ("V", "values")]


def test_nested_class_linked_to_parent():
    unit = _parse(SHAPE_SOURCE)
    shape = _type(unit, "Shape")
    node = _type(unit, "Node")

    assert shape.members == [node]
    assert node.parent is shape
    assert shape.parent is unit


def test_scoped_type_reference():
    unit = _parse("class A { java.util.Map.Entry<String, Integer> entry; }\n")
    (field_decl,) = _type(unit, "A").fields

    assert field_decl.type.text == "java.util.Map.Entry<String, Integer>"
    assert field_decl.type.base_name == "Entry"


# ---------------------------------------------------------------------------
# Interfaces, enums, records
# ---------------------------------------------------------------------------


def test_interface():
    unit = _parse(
        """\
interface Repo<T> extends Base<T>, AutoCloseable {
    int LIMIT = 5;
    T find(long id);
}
"""
    )
    repo = _type(unit, "Repo")

    assert repo.form is TypeForm.INTERFACE
    assert [t.text for t in repo.extended] == ["Base<T>", "AutoCloseable"]
    assert [d.name for f in repo.fields for d in f.declarators] == ["LIMIT"]
    (find,) = repo.methods
    assert find.return_type.text == "T"
    assert [p.type.text for p in find.parameters] == ["long"]


def test_enum():
    unit = _parse(
        """\
public enum Color implements Named {
    RED, GREEN, BLUE;

    private String code;

    String code() { return code; }
}
"""
    )
    color = _type(unit, "Color")

    assert color.form is TypeForm.ENUM
    assert [c.name for c in color.constants] == ["RED", "GREEN", "BLUE"]
    assert [t.text for t in color.implemented] == ["Named"]
    assert [d.name for f in color.fields for d in f.declarators] == ["code"]
    assert [m.name for m in color.methods] == ["code"]


def test_record():
    unit = _parse(
        """\
public record Point(int x, int y) implements Serializable {
    static Point origin() { return new Point(0, 0); }
}
"""
    )
    point = _type(unit, "Point")

    assert point.form is TypeForm.RECORD
    assert [(c.type.text, c.name) for c in point.components] == [("int", "x"), ("int", "y")]
    assert [t.text for t in point.implemented] == ["Serializable"]
    assert [m.name for m in point.methods] == ["origin"]


def test_declarations_inside_bodies_are_not_lowered():
    source = """\
class Host {
    Host() { class InCtor {} }
    void run() {
        class Local {}
        record LocalPair(int a) {}
        Runnable r = new Runnable() { public void run() {} };
    }
    static { enum InInit { A } }
    class Member {}
}
"""
    unit = _parse(source)
    assert [d.name for d in unit.walk()] == ["Host", "Member"]


def test_syntax_errors_do_not_raise():
    unit = _parse("class Broken { int x = ; }\n")
    assert isinstance(unit, CompilationUnit)


# ---------------------------------------------------------------------------
# End to end
# ---------------------------------------------------------------------------


def test_parse_and_build_nested_generic():
    unit = _parse("package p;\nclass Outer<T> { class Inner {} }\n")
    doc = build_document(unit, DiagramSettings())

    assert [t.qualified_name for t in doc.types] == ["p.Outer<T>", "p.Outer<T>.Inner"]
    assert [(r.connector, r.source, r.target) for r in doc.relationships] == [
        (Connector.CONTAINMENT, "p.Outer<T>.Inner", "p.Outer<T>"),
    ]


def test_parse_and_build_resolves_imports():
    unit = _parse(
        """\
package app;

import lib.Foo;

class Holder {
    private Foo<Bar> foo;
}
"""
    )
    doc = build_document(unit, DiagramSettings())

    assert [(r.connector, r.source, r.target) for r in doc.relationships] == [
        (Connector.COMPOSITION, "lib.Foo<Bar>", "app.Holder"),
    ]
