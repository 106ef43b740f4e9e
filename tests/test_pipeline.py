"""Tests for source discovery and document building."""

from __future__ import annotations

from typing import TYPE_CHECKING

from class_atlas.pipeline import FileScope, build_documents, build_file, collect_sources
from class_atlas.settings import AtlasSettings, ScanSettings

if TYPE_CHECKING:
    from pathlib import Path

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write(root: Path, rel_path: str, content: str = "") -> Path:
    """Write a file at root/rel_path, creating parent dirs."""
    p = root / rel_path
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8")
    return p


def _make_settings(root: Path, **scan_kwargs) -> AtlasSettings:
    return AtlasSettings(project_root=root, scan=ScanSettings(**scan_kwargs))


# ---------------------------------------------------------------------------
# FileScope
# ---------------------------------------------------------------------------


class TestFileScope:
    def test_discovers_java_files(self, tmp_path):
        _write(tmp_path, "src/main/java/a/A.java", "class A {}")
        _write(tmp_path, "src/main/java/a/B.java", "class B {}")
        _write(tmp_path, "README.md", "# hi")
        _write(tmp_path, "build.gradle", "")

        result = FileScope(tmp_path, _make_settings(tmp_path)).scan()

        assert result == ["src/main/java/a/A.java", "src/main/java/a/B.java"]

    def test_default_excludes(self, tmp_path):
        _write(tmp_path, "target/generated/Gen.java", "class Gen {}")
        _write(tmp_path, "build/Tmp.java", "class Tmp {}")
        _write(tmp_path, "App.java", "class App {}")

        assert FileScope(tmp_path, _make_settings(tmp_path)).scan() == ["App.java"]

    def test_gitignore_respected(self, tmp_path):
        _write(tmp_path, ".gitignore", "# generated\ngen/\n")
        _write(tmp_path, "gen/G.java", "class G {}")
        _write(tmp_path, "App.java", "class App {}")

        assert FileScope(tmp_path, _make_settings(tmp_path)).scan() == ["App.java"]

    def test_exclude_patterns(self, tmp_path):
        _write(tmp_path, "App.java", "class App {}")
        _write(tmp_path, "AppTest.java", "class AppTest {}")

        settings = _make_settings(tmp_path, exclude_patterns=["*Test.java"])

        assert FileScope(tmp_path, settings).scan() == ["App.java"]

    def test_scan_from_subdirectory_keeps_root_relative_paths(self, tmp_path):
        _write(tmp_path, "core/a/A.java", "class A {}")
        _write(tmp_path, "web/W.java", "class W {}")

        assert FileScope(tmp_path, _make_settings(tmp_path)).scan("core") == ["core/a/A.java"]

    def test_include_paths(self, tmp_path):
        _write(tmp_path, "core/C.java", "class C {}")
        _write(tmp_path, "web/W.java", "class W {}")

        settings = _make_settings(tmp_path, include_paths=["core"])

        assert FileScope(tmp_path, settings).scan() == ["core/C.java"]


# ---------------------------------------------------------------------------
# collect_sources / build
# ---------------------------------------------------------------------------


def test_collect_sources_mixes_files_and_directories(tmp_path):
    single = _write(tmp_path, "One.java", "class One {}")
    _write(tmp_path, "pkg/Two.java", "class Two {}")

    sources = collect_sources([single, "pkg", "missing"], _make_settings(tmp_path))

    assert sources == [single, tmp_path / "pkg" / "Two.java"]


def test_collect_sources_subdirectory_honours_root_include_paths(tmp_path):
    source = _write(tmp_path, "src/main/java/A.java", "class A {}")
    _write(tmp_path, "src/test/java/ATest.java", "class ATest {}")
    settings = _make_settings(tmp_path, include_paths=["src/main/java"])

    assert collect_sources(["."], settings) == [source]
    assert collect_sources(["src"], settings) == [source]
    assert collect_sources(["src/test"], settings) == []


def test_collect_sources_subdirectory_honours_root_gitignore(tmp_path):
    _write(tmp_path, ".gitignore", "src/gen/\n")
    kept = _write(tmp_path, "src/App.java", "class App {}")
    _write(tmp_path, "src/gen/G.java", "class G {}")

    assert collect_sources(["src"], _make_settings(tmp_path)) == [kept]


def test_collect_sources_skips_overlapping_paths(tmp_path):
    single = _write(tmp_path, "A.java", "class A {}")
    other = _write(tmp_path, "pkg/B.java", "class B {}")

    sources = collect_sources([".", "A.java", single, "pkg"], _make_settings(tmp_path))

    assert sources == [single, other]


def test_build_file(tmp_path, settings):
    path = _write(tmp_path, "Shape.java", "package geo;\npublic interface Shape { double area(); }\n")

    document = build_file(path, settings)

    assert document is not None
    assert [t.qualified_name for t in document.types] == ["geo.Shape"]
    assert [m.name for m in document.types[0].methods] == ["area"]


def test_build_file_unsupported(tmp_path, settings):
    path = _write(tmp_path, "notes.txt", "hello")
    assert build_file(path, settings) is None


def test_build_documents_keeps_order(tmp_path):
    paths = [_write(tmp_path, f"T{i}.java", f"class T{i} {{}}") for i in range(5)]
    missing = tmp_path / "Gone.java"
    settings = _make_settings(tmp_path)
    settings.workers = 3

    result = build_documents([*paths, missing], settings)

    assert [d.types[0].name for d in result.documents] == [f"T{i}" for i in range(5)]
    assert result.files_skipped == [str(missing)]
    assert result.duration_s >= 0
