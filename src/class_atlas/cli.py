"""CLI entrypoint for Class Atlas."""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from loguru import logger

app = typer.Typer(
    name="class-atlas",
    help="Class Atlas: turn Java sources into UML class diagrams.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
) -> None:
    """Configure logging for all commands."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO", format="<level>{level: <8}</level> {message}")


def _load_settings(
    show_package: bool | None = None,
    show_constructors: bool | None = None,
    field_relationships: bool | None = None,
    method_relationships: bool | None = None,
    workers: int | None = None,
):
    """Load settings, letting explicit CLI flags override file and env values."""
    from class_atlas.settings import AtlasSettings

    settings = AtlasSettings()
    overrides = {
        "show_package": show_package,
        "show_constructors": show_constructors,
        "show_field_relationships": field_relationships,
        "show_method_relationships": method_relationships,
    }
    diagram_updates = {k: v for k, v in overrides.items() if v is not None}
    if diagram_updates:
        settings.diagram = settings.diagram.model_copy(update=diagram_updates)
    if workers is not None:
        settings.workers = workers
    return settings


def _build(paths: list[Path], settings):
    from class_atlas.pipeline import build_documents, collect_sources

    sources = collect_sources(list(paths), settings)
    if not sources:
        logger.error("No Java sources found under {}", ", ".join(str(p) for p in paths))
        raise typer.Exit(code=1)
    return build_documents(sources, settings)


@app.command()
def render(
    paths: list[Path] = typer.Argument(..., help="Java files or directories to diagram."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write PlantUML here instead of stdout."),
    title: str | None = typer.Option(None, "--title", help="Diagram title."),
    show_package: bool | None = typer.Option(None, "--package/--no-package", help="Qualify names with packages."),
    show_constructors: bool | None = typer.Option(
        None, "--constructors/--no-constructors", help="Include constructors."
    ),
    field_relationships: bool | None = typer.Option(
        None, "--field-relationships/--no-field-relationships", help="Infer composition from fields."
    ),
    method_relationships: bool | None = typer.Option(
        None, "--method-relationships/--no-method-relationships", help="Infer dependencies from method signatures."
    ),
    workers: int | None = typer.Option(None, "--workers", "-j", help="Threads used to build documents."),
) -> None:
    """Render a PlantUML class diagram."""
    from class_atlas.render import render_plantuml

    settings = _load_settings(show_package, show_constructors, field_relationships, method_relationships, workers)
    result = _build(paths, settings)
    text = render_plantuml(result.documents, title=title)

    if output is None:
        typer.echo(text, nl=False)
    else:
        output.write_text(text, encoding="utf-8")
        logger.info("Wrote {}", output)


@app.command()
def types(
    paths: list[Path] = typer.Argument(..., help="Java files or directories to scan."),
    show_package: bool | None = typer.Option(None, "--package/--no-package", help="Qualify names with packages."),
) -> None:
    """List the types found, one per line."""
    settings = _load_settings(show_package=show_package)
    result = _build(paths, settings)
    for document in result.documents:
        for entity in document.types:
            typer.echo(f"{entity.kind} {entity.qualified_name}")


if __name__ == "__main__":
    app()
