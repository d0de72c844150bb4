"""Declaration models for class-like symbols.

A Declaration is the normalized, parser-independent view of one class,
interface or trait. Instances are frozen: reflections built on top of them
may be shared freely between threads.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from models.expressions import ConstExpr
from names.resolution import join_name

Visibility = Literal["public", "protected", "private"]


class SymbolKind(str, Enum):
    """Kinds of class-like declarations."""

    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"


class Modifiers(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_abstract: bool = False
    is_final: bool = False


class SourceLocation(BaseModel):
    """Where a declaration came from."""

    model_config = ConfigDict(frozen=True)

    file: str | None = None
    start_line: int = -1
    end_line: int = -1
    is_internal: bool = False
    doc_comment: str | None = None


class TraitAdaptation(BaseModel):
    """One entry of a trait-use block, e.g. `T::m as protected aliasedM`."""

    model_config = ConfigDict(frozen=True)

    method: str
    from_trait: str | None = None
    alias: str | None = None
    visibility: Visibility | None = None
    insteadof: tuple[str, ...] = ()


class TraitUseStatement(BaseModel):
    model_config = ConfigDict(frozen=True)

    traits: tuple[str, ...] = Field(min_length=1)
    adaptations: tuple[TraitAdaptation, ...] = ()


class MethodDecl(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    visibility: Visibility = "public"
    is_static: bool = False
    is_abstract: bool = False
    is_final: bool = False
    start_line: int = -1
    end_line: int = -1
    doc_comment: str | None = None


class PropertyDecl(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    visibility: Visibility = "public"
    is_static: bool = False
    is_readonly: bool = False
    default: ConstExpr | None = None
    is_promoted: bool = False
    doc_comment: str | None = None


class ConstantDecl(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: ConstExpr
    visibility: Visibility = "public"


class Declaration(BaseModel):
    """Normalized view of one parsed class-like node."""

    model_config = ConfigDict(frozen=True)

    kind: SymbolKind
    short_name: str
    namespace: tuple[str, ...] | None = None
    modifiers: Modifiers = Field(default_factory=Modifiers)
    parent: str | None = Field(
        default=None, description="Parent class name as written (classes only)"
    )
    interfaces: tuple[str, ...] = Field(
        default=(),
        description="Implemented (class) or extended (interface) names as written",
    )
    trait_uses: tuple[TraitUseStatement, ...] = ()
    methods: tuple[MethodDecl, ...] = ()
    properties: tuple[PropertyDecl, ...] = ()
    constants: tuple[ConstantDecl, ...] = ()
    imports: dict[str, str] = Field(
        default_factory=dict,
        description="Import aliases in effect for this declaration: alias -> FQN",
    )
    location: SourceLocation = Field(default_factory=SourceLocation)

    @property
    def name(self) -> str:
        """Fully-qualified name; stable for the lifetime of the declaration."""
        return join_name(self.namespace, self.short_name)

    @property
    def namespace_name(self) -> str:
        return "\\".join(self.namespace) if self.namespace else ""


__all__ = [
    "ConstantDecl",
    "Declaration",
    "MethodDecl",
    "Modifiers",
    "PropertyDecl",
    "SourceLocation",
    "SymbolKind",
    "TraitAdaptation",
    "TraitUseStatement",
    "Visibility",
]
