"""Model namespace for declaration and expression schemas."""

from models.declarations import (
    ConstantDecl,
    Declaration,
    MethodDecl,
    Modifiers,
    PropertyDecl,
    SourceLocation,
    SymbolKind,
    TraitAdaptation,
    TraitUseStatement,
)
from models.expressions import ArrayItem, ConstExpr

__all__ = [
    "ArrayItem",
    "ConstExpr",
    "ConstantDecl",
    "Declaration",
    "MethodDecl",
    "Modifiers",
    "PropertyDecl",
    "SourceLocation",
    "SymbolKind",
    "TraitAdaptation",
    "TraitUseStatement",
]
