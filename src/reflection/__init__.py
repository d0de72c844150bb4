"""Static reflection over class-like declarations."""

from reflection.errors import (
    ClassNotFound,
    CyclicInheritance,
    EvaluationError,
    InvalidArgument,
    MemberNotFound,
    NotAClassReflection,
    NotAnInterfaceReflection,
    ReflectionError,
)
from reflection.evaluator import ConstantEvaluator, LiteralEvaluator
from reflection.hierarchy import HierarchyResolver
from reflection.members import ConstantReflection, MethodReflection, PropertyReflection
from reflection.symbol import SymbolReflection

__all__ = [
    "ClassNotFound",
    "ConstantEvaluator",
    "ConstantReflection",
    "CyclicInheritance",
    "EvaluationError",
    "HierarchyResolver",
    "InvalidArgument",
    "LiteralEvaluator",
    "MemberNotFound",
    "MethodReflection",
    "NotAClassReflection",
    "NotAnInterfaceReflection",
    "PropertyReflection",
    "ReflectionError",
    "SymbolReflection",
]
