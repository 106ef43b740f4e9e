"""Configuration management for Class Atlas."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict, TomlConfigSettingsSource

from class_atlas.schema import Visibility

CONFIG_FILENAME = "class-atlas.toml"

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def _find_config_toml() -> Path | None:
    """Walk up from cwd looking for ``class-atlas.toml``."""
    current = Path.cwd().resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _all_visibilities() -> set[Visibility]:
    return set(Visibility)


class DiagramSettings(BaseSettings):
    """What the visitor puts into the diagram model."""

    field_visibilities: set[Visibility] = Field(
        default_factory=_all_visibilities, description="Field visibilities to include."
    )
    method_visibilities: set[Visibility] = Field(
        default_factory=_all_visibilities, description="Method and constructor visibilities to include."
    )
    show_package: bool = Field(default=True, description="Prefix type names and endpoints with their package.")
    show_constructors: bool = Field(default=True, description="Include constructors in method lists.")
    show_field_relationships: bool = Field(default=True, description="Infer composition links from field types.")
    show_method_relationships: bool = Field(
        default=True, description="Infer dependency links from method return and parameter types."
    )


class ScanSettings(BaseSettings):
    """Source discovery settings."""

    include_paths: list[str] = Field(
        default_factory=list, description="Whitelist of paths (relative to the root) to scan."
    )
    exclude_patterns: list[str] = Field(
        default_factory=list, description="Additional glob patterns to exclude beyond .gitignore."
    )


class AtlasSettings(BaseSettings):
    """Root configuration for Class Atlas."""

    model_config = SettingsConfigDict(
        toml_file=CONFIG_FILENAME,
        env_prefix="CLASS_ATLAS_",
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml_path = _find_config_toml()
        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]
        if toml_path:
            sources.append(TomlConfigSettingsSource(settings_cls, toml_file=toml_path))
        sources.append(file_secret_settings)
        return tuple(sources)

    project_root: Path = Field(default_factory=Path.cwd, description="Root that relative scan paths resolve against.")
    workers: int = Field(default=1, description="Threads used to build documents; 1 builds sequentially.")
    diagram: DiagramSettings = Field(default_factory=DiagramSettings)
    scan: ScanSettings = Field(default_factory=ScanSettings)
