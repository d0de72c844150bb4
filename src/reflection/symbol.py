"""Per-declaration reflection of a class, interface or trait."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from models.declarations import SymbolKind
from reflection.errors import InvalidArgument, MemberNotFound
from reflection.evaluator import LiteralEvaluator
from reflection.hierarchy import HierarchyResolver
from reflection.members import ConstantReflection, MethodReflection, PropertyReflection

if TYPE_CHECKING:
    from models.declarations import Declaration
    from reflection.evaluator import ConstantEvaluator
    from reflector.reflector import Reflector

# Values of PHP's ReflectionClass::IS_* modifier constants.
IS_FINAL = 32
IS_EXPLICIT_ABSTRACT = 64


class SymbolReflection:
    """Reflection over one Declaration.

    Member maps are built once at construction and never mutated. Lookups
    of related symbols (parent, interfaces, traits) go through the shared
    reflector, so the same instance can answer hierarchy questions without
    holding on to any derived state.

    Duplicate member names follow last-declaration-wins: a later method,
    property or constant with the same name replaces the earlier one while
    keeping its original position. Method names compare case-insensitively;
    property and constant names are case-sensitive.
    """

    def __init__(
        self,
        declaration: Declaration,
        reflector: Reflector,
        *,
        evaluator: ConstantEvaluator | None = None,
        hierarchy: HierarchyResolver | None = None,
        evaluation_lock: threading.RLock | None = None,
    ) -> None:
        self._declaration = declaration
        self._reflector = reflector
        self._evaluator = evaluator or LiteralEvaluator()
        self._evaluation_lock = evaluation_lock or threading.RLock()
        self._hierarchy = hierarchy or HierarchyResolver(reflector)

        methods: dict[str, MethodReflection] = {}
        for method in declaration.methods:
            methods[method.name.lower()] = MethodReflection(method, self)
        self._methods = methods

        properties: dict[str, PropertyReflection] = {}
        for prop in declaration.properties:
            properties[prop.name] = PropertyReflection(prop, self)
        self._properties = properties

        constants: dict[str, ConstantReflection] = {}
        for constant in declaration.constants:
            constants[constant.name] = ConstantReflection(constant, self)
        self._constants = constants

    @property
    def declaration(self) -> Declaration:
        return self._declaration

    @property
    def reflector(self) -> Reflector:
        return self._reflector

    @property
    def evaluator(self) -> ConstantEvaluator:
        return self._evaluator

    @property
    def evaluation_lock(self) -> threading.RLock:
        """Lock held while constant and property initializers are evaluated."""
        return self._evaluation_lock

    def __repr__(self) -> str:
        return f"<SymbolReflection {self._declaration.kind.value} {self.get_name()}>"

    # Names

    def get_name(self) -> str:
        return self._declaration.name

    def get_short_name(self) -> str:
        return self._declaration.short_name

    def get_namespace_name(self) -> str:
        return self._declaration.namespace_name

    def in_namespace(self) -> bool:
        return bool(self._declaration.namespace)

    # Methods

    def get_methods(self) -> list[MethodReflection]:
        return list(self._methods.values())

    def get_method(self, method_name: str) -> MethodReflection:
        method = self._methods.get(method_name.lower())
        if method is None:
            msg = f"Could not find method: {method_name}"
            raise MemberNotFound(msg)
        return method

    def has_method(self, method_name: str) -> bool:
        try:
            self.get_method(method_name)
        except MemberNotFound:
            return False
        return True

    def get_constructor(self) -> MethodReflection:
        return self.get_method("__construct")

    # Constants

    def get_reflection_constants(self) -> dict[str, ConstantReflection]:
        return dict(self._constants)

    def get_constants(self) -> dict[str, Any]:
        """Evaluate and return every constant, in declaration order.

        Raises EvaluationError if any constant fails; use
        get_reflection_constants() to evaluate them one by one.
        """
        return {name: const.get_value() for name, const in self._constants.items()}

    def get_constant(self, name: str) -> Any:
        """Return the value of a constant, or None when it is not declared."""
        constant = self._constants.get(name)
        if constant is None:
            return None
        return constant.get_value()

    def has_constant(self, name: str) -> bool:
        return name in self._constants

    # Properties

    def get_properties(self) -> dict[str, PropertyReflection]:
        return dict(self._properties)

    def get_property(self, name: str) -> PropertyReflection | None:
        return self._properties.get(name)

    def has_property(self, name: str) -> bool:
        return name in self._properties

    def get_default_properties(self) -> dict[str, PropertyReflection]:
        """Properties defined at compile time rather than at run time."""
        return {
            name: prop for name, prop in self._properties.items() if prop.is_default()
        }

    # Source location

    def get_file_name(self) -> str | None:
        return self._declaration.location.file

    def get_start_line(self) -> int:
        return self._declaration.location.start_line

    def get_end_line(self) -> int:
        return self._declaration.location.end_line

    def get_doc_comment(self) -> str:
        return self._declaration.location.doc_comment or ""

    def is_internal(self) -> bool:
        return self._declaration.location.is_internal

    def is_user_defined(self) -> bool:
        return not self.is_internal()

    # Modifiers and kind

    def is_abstract(self) -> bool:
        return (
            self._declaration.kind is SymbolKind.CLASS
            and self._declaration.modifiers.is_abstract
        )

    def is_final(self) -> bool:
        return (
            self._declaration.kind is SymbolKind.CLASS
            and self._declaration.modifiers.is_final
        )

    def get_modifiers(self) -> int:
        value = 0
        value += IS_EXPLICIT_ABSTRACT if self.is_abstract() else 0
        value += IS_FINAL if self.is_final() else 0
        return value

    def is_interface(self) -> bool:
        return self._declaration.kind is SymbolKind.INTERFACE

    def is_trait(self) -> bool:
        return self._declaration.kind is SymbolKind.TRAIT

    # Hierarchy

    def get_parent_class(self) -> SymbolReflection | None:
        return self._hierarchy.parent_of(self)

    def get_interfaces(self) -> dict[str, SymbolReflection]:
        return self._hierarchy.interfaces(self)

    def get_interface_names(self) -> list[str]:
        return list(self._hierarchy.interfaces(self))

    def implements_interface(self, interface_name: str) -> bool:
        return self._hierarchy.implements_interface(self, interface_name)

    def is_subclass_of(self, class_name: str) -> bool:
        return self._hierarchy.is_subclass_of(self, class_name)

    def is_instance(self, candidate: object) -> bool:
        """Whether an object of the reflected class `candidate` is an instance of this."""
        if not isinstance(candidate, SymbolReflection):
            raise InvalidArgument.not_an_object(candidate)
        return self._hierarchy.is_a(candidate, self)

    def is_instantiable(self) -> bool:
        return self._hierarchy.is_instantiable(self)

    def is_cloneable(self) -> bool:
        return self._hierarchy.is_cloneable(self)

    def is_iterateable(self) -> bool:
        return self._hierarchy.is_iterateable(self)

    def get_inheritance_chain(self) -> list[SymbolReflection]:
        return self._hierarchy.inheritance_chain(self)

    # Traits

    def get_traits(self) -> list[SymbolReflection]:
        return self._hierarchy.traits(self)

    def get_trait_names(self) -> list[str]:
        return [trait.get_name() for trait in self._hierarchy.traits(self)]

    def get_trait_aliases(self) -> dict[str, str]:
        return self._hierarchy.trait_aliases(self)


__all__ = ["IS_EXPLICIT_ABSTRACT", "IS_FINAL", "SymbolReflection"]
