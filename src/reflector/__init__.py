"""Reflectors and the lookup strategies they are composed of."""

from reflector.config import (
    ConfigError,
    ReflectorConfig,
    build_reflector,
    load_config,
)
from reflector.reflector import ClassReflector, Reflector
from reflector.strategies import (
    BuiltinStrategy,
    DeclarationIndexStrategy,
    DirectoryStrategy,
    LookupStrategy,
    SourceStrategy,
)

__all__ = [
    "BuiltinStrategy",
    "ClassReflector",
    "ConfigError",
    "DeclarationIndexStrategy",
    "DirectoryStrategy",
    "LookupStrategy",
    "Reflector",
    "ReflectorConfig",
    "SourceStrategy",
    "build_reflector",
    "load_config",
]
