"""Source discovery and per-file diagram building.

Each file is parsed and visited in isolation, producing its own
:class:`~class_atlas.model.Document`.  With ``settings.workers > 1`` files
are fanned out over a thread pool; results always keep input order.
"""

from __future__ import annotations

import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import pathspec
from loguru import logger

from class_atlas.parsing.ast import get_language_for_file, parse_source
from class_atlas.parsing.languages import discover_plugins
from class_atlas.visitor import build_document

if TYPE_CHECKING:
    from class_atlas.model import Document
    from class_atlas.settings import AtlasSettings

_DEFAULT_EXCLUDES: list[str] = [
    ".git/",
    ".gradle/",
    ".idea/",
    "node_modules/",
    "build/",
    "out/",
    "target/",
]


# ---------------------------------------------------------------------------
# File scope filter
# ---------------------------------------------------------------------------


class FileScope:
    """Filters a source tree down to parseable files.

    Exclusion order:
      1. Default excludes (``.git/``, ``target/``, etc.)
      2. Root ``.gitignore`` patterns
      3. ``settings.scan.exclude_patterns``
      4. Include-path prefix filter (if set)
    """

    def __init__(self, root: str | Path, settings: AtlasSettings) -> None:
        self._root = Path(root).resolve()
        self._spec = self._build_spec(settings)
        self._include_prefixes = [p.replace("\\", "/").rstrip("/") for p in settings.scan.include_paths]

    @property
    def root(self) -> Path:
        return self._root

    def scan(self, start: str | Path = "") -> list[str]:
        """Walk *start* (relative to the root) and return sorted root-relative POSIX paths of supported files."""
        result: list[str] = []
        for dirpath, dirnames, filenames in os.walk(self._root / start):
            rel_dir = Path(dirpath).relative_to(self._root).as_posix()
            if rel_dir == ".":
                rel_dir = ""

            dirnames[:] = [d for d in dirnames if not self._spec.match_file(f"{rel_dir}/{d}/" if rel_dir else f"{d}/")]

            for fname in filenames:
                rel_path = f"{rel_dir}/{fname}" if rel_dir else fname
                if self.is_included(rel_path) and get_language_for_file(rel_path) is not None:
                    result.append(rel_path)

        result.sort()
        return result

    def is_included(self, rel_path: str) -> bool:
        if self._spec.match_file(rel_path):
            logger.trace("EXCLUDE {}: matched ignore pattern", rel_path)
            return False
        if self._include_prefixes and not any(
            rel_path == p or rel_path.startswith(f"{p}/") for p in self._include_prefixes
        ):
            logger.trace("EXCLUDE {}: not under any include path", rel_path)
            return False
        return True

    def _build_spec(self, settings: AtlasSettings) -> pathspec.PathSpec:
        patterns: list[str] = list(_DEFAULT_EXCLUDES)

        gitignore = self._root / ".gitignore"
        if gitignore.is_file():
            gi_patterns = _read_ignore_file(gitignore)
            patterns.extend(gi_patterns)
            logger.debug("Loaded {} patterns from {}", len(gi_patterns), gitignore)

        patterns.extend(settings.scan.exclude_patterns)
        return pathspec.PathSpec.from_lines("gitignore", patterns)


def _read_ignore_file(path: Path) -> list[str]:
    """Read a .gitignore-style file, stripping comments and blank lines."""
    lines: list[str] = []
    for raw in path.read_text(encoding="utf-8-sig", errors="replace").splitlines():
        stripped = raw.strip()
        if stripped and not stripped.startswith("#"):
            lines.append(stripped)
    return lines


def collect_sources(paths: list[str | Path], settings: AtlasSettings) -> list[Path]:
    """Expand *paths* (files or directories) into the source files to process.

    Relative paths resolve against ``settings.project_root``.  Explicit
    files are kept as given.  Directories under the project root are scanned
    through one root-wide :class:`FileScope`, so ``include_paths`` and the
    root ``.gitignore`` apply the same way whichever subdirectory is passed;
    directories outside it get a scope of their own.  A file reached twice
    is only returned once.
    """
    root_scope = FileScope(settings.project_root, settings)
    sources: list[Path] = []
    seen: set[Path] = set()

    def _add(path: Path) -> None:
        key = path.resolve()
        if key in seen:
            logger.debug("Skipping {}: already collected", path)
            return
        seen.add(key)
        sources.append(path)

    for raw in paths:
        path = Path(raw)
        if not path.is_absolute():
            path = settings.project_root / path
        if path.is_dir():
            resolved = path.resolve()
            if resolved.is_relative_to(root_scope.root):
                start = resolved.relative_to(root_scope.root)
                for rel in root_scope.scan(start):
                    _add(path / Path(rel).relative_to(start))
            else:
                for rel in FileScope(path, settings).scan():
                    _add(path / rel)
        elif path.is_file():
            _add(path)
        else:
            logger.warning("Skipping {}: no such file or directory", path)
    return sources


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------


@dataclass
class BuildResult:
    """Documents built from a set of source files."""

    documents: list[Document] = field(default_factory=list)
    files_skipped: list[str] = field(default_factory=list)
    duration_s: float = 0.0


def build_file(path: Path, settings: AtlasSettings) -> Document | None:
    """Parse and visit one file; returns None if it cannot be read or parsed."""
    lang_config = get_language_for_file(path.name)
    if lang_config is None:
        logger.debug("Skipping {}: unsupported language", path)
        return None
    try:
        source = path.read_bytes()
    except OSError as exc:
        logger.warning("Cannot read {}: {}", path, exc)
        return None

    unit = parse_source(source, lang_config, str(path))
    return build_document(unit, settings.diagram)


def build_documents(sources: list[Path], settings: AtlasSettings) -> BuildResult:
    """Build one document per source file, keeping input order."""
    t0 = time.monotonic()
    # Languages must be registered before worker threads look them up.
    discover_plugins()
    if settings.workers > 1 and len(sources) > 1:
        with ThreadPoolExecutor(max_workers=settings.workers) as pool:
            built = list(pool.map(lambda p: build_file(p, settings), sources))
    else:
        built = [build_file(p, settings) for p in sources]

    result = BuildResult()
    for path, document in zip(sources, built, strict=True):
        if document is None:
            result.files_skipped.append(str(path))
        else:
            result.documents.append(document)
    result.duration_s = time.monotonic() - t0

    logger.info(
        "Built {} document(s) from {} file(s) in {:.2f}s ({} skipped)",
        len(result.documents),
        len(sources),
        result.duration_s,
        len(result.files_skipped),
    )
    return result
