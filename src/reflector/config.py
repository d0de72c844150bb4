from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator

from reflection.hierarchy import DEFAULT_MAX_DEPTH
from reflector.reflector import ClassReflector
from reflector.strategies import BuiltinStrategy, DirectoryStrategy, LookupStrategy

CONFIG_FILENAME = "phpreflect.toml"

StrategyName = Literal["builtin", "directory"]


class ReflectorConfig(BaseModel):
    """Configuration for building a reflector over a project."""

    model_config = ConfigDict(extra="forbid")

    source_dirs: list[str] = Field(
        default_factory=lambda: ["."],
        description="Directories, relative to the project root, searched for PHP files",
    )
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all PHP files)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to exclude",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    strategies: list[StrategyName] = Field(
        default_factory=lambda: ["builtin", "directory"],
        description="Lookup strategies in the order they are consulted",
    )
    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        gt=0,
        description="Maximum inheritance depth before a hierarchy walk fails",
    )

    @field_validator("strategies")
    @classmethod
    def validate_strategies(cls, v: list[str]) -> list[str]:
        if not v:
            msg = "strategies must name at least one lookup strategy"
            raise ValueError(msg)
        if len(set(v)) != len(v):
            msg = f"strategies must not repeat entries: {v}"
            raise ValueError(msg)
        return v


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def resolve_source_dir(root: Path, source_dir: str) -> Path:
    """Resolve a config-provided source directory safely within the root.

    Absolute paths and paths that escape the root are rejected.
    """
    if not source_dir:
        msg = "source_dirs entries must be non-empty relative paths"
        raise ConfigError(msg)

    source_path = Path(source_dir)
    if source_dir.startswith("~") or source_path.is_absolute():
        msg = "source_dirs entries must be relative paths within the project root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_source = (resolved_root / source_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve source dir '{source_dir}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved_source.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"source dir '{source_dir}' escapes the project root"
        raise ConfigError(msg) from exc

    return resolved_source


def load_config(root: Path) -> ReflectorConfig:
    """Load configuration from phpreflect.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return ReflectorConfig()

    try:
        with config_path.open("rb") as f:
            data: dict[str, Any] = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return ReflectorConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e


def build_strategies(root: Path, config: ReflectorConfig) -> list[LookupStrategy]:
    strategies: list[LookupStrategy] = []
    for strategy_name in config.strategies:
        if strategy_name == "builtin":
            strategies.append(BuiltinStrategy())
        elif strategy_name == "directory":
            for source_dir in config.source_dirs:
                strategies.append(
                    DirectoryStrategy(
                        resolve_source_dir(root, source_dir),
                        include_patterns=config.include or None,
                        exclude_patterns=config.exclude or None,
                        nested_gitignore=config.nested_gitignore,
                    )
                )
        else:
            raise AssertionError(strategy_name)
    return strategies


def build_reflector(root: Path, config: ReflectorConfig | None = None) -> ClassReflector:
    """Build a reflector for a project from an explicit configuration."""
    if config is None:
        config = load_config(root)
    return ClassReflector(build_strategies(root, config), max_depth=config.max_depth)
