"""Language plugin discovery for Class Atlas.

The built-in Java front-end is registered at import time.  External
languages can be added via entry points::

    # In your package's pyproject.toml:
    [project.entry-points."class_atlas.languages"]
    kotlin = "class_atlas_kotlin:register"

The entry point must be a callable that takes no arguments and calls
``register_language()`` when invoked.
"""

from __future__ import annotations

import importlib.metadata

from loguru import logger

_discovered = False


def discover_plugins() -> None:
    """Import built-in languages and load external entry-point plugins.

    Safe to call multiple times; subsequent calls are no-ops.
    """
    global _discovered  # noqa: PLW0603
    if _discovered:
        return
    _discovered = True

    # Built-in languages
    import class_atlas.parsing.languages.java  # noqa: PLC0415, F401

    # External plugins via entry points
    for ep in importlib.metadata.entry_points(group="class_atlas.languages"):
        try:
            register_func = ep.load()
            register_func()
        except Exception:
            logger.opt(exception=True).warning("Failed to load language plugin {!r}", ep.name)
