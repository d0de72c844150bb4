"""Hierarchy resolution over class-like declarations.

Walks the graph formed by parent, interface and trait references and
derives the inheritance chain, the closed interface set and the trait-alias
table. Nothing computed here is cached on the reflections themselves; every
view is derived on demand from immutable declarations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from models.declarations import SymbolKind
from names.resolution import name_key, resolve_name, same_name
from reflection.errors import (
    ClassNotFound,
    CyclicInheritance,
    InvalidArgument,
    NotAClassReflection,
    NotAnInterfaceReflection,
    ReflectionError,
)

if TYPE_CHECKING:
    from reflection.members import MethodReflection
    from reflection.symbol import SymbolReflection
    from reflector.reflector import Reflector

DEFAULT_MAX_DEPTH = 256

TRAVERSABLE = "Traversable"

InterfaceSet = dict[str, "SymbolReflection"]


def _depth_exceeded(name: str, max_depth: int) -> ReflectionError:
    return ReflectionError(
        f"Hierarchy of '{name}' exceeds the maximum depth of {max_depth}"
    )


class HierarchyResolver:
    """Derive hierarchy views for reflections obtained from one reflector."""

    def __init__(self, reflector: Reflector, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self._reflector = reflector
        self._max_depth = max_depth

    @property
    def reflector(self) -> Reflector:
        return self._reflector

    def resolve_reference(
        self, symbol: SymbolReflection, name_ref: str
    ) -> SymbolReflection:
        """Resolve a name written inside `symbol` and reflect its target."""
        declaration = symbol.declaration
        resolved = resolve_name(name_ref, declaration.namespace, declaration.imports)
        if resolved is None:
            raise ClassNotFound(name_ref)
        return self._reflector.resolve(resolved)

    def parent_of(self, symbol: SymbolReflection) -> SymbolReflection | None:
        declaration = symbol.declaration
        if declaration.kind is not SymbolKind.CLASS or declaration.parent is None:
            return None

        parent = self.resolve_reference(symbol, declaration.parent)
        if parent.declaration.kind is not SymbolKind.CLASS:
            raise NotAClassReflection.from_reflection(parent)
        return parent

    def inheritance_chain(self, symbol: SymbolReflection) -> list[SymbolReflection]:
        """Return the ancestors of `symbol`, root first, `symbol` last."""
        chain = [symbol]
        seen = {name_key(symbol.get_name())}

        current = self.parent_of(symbol)
        while current is not None:
            key = name_key(current.get_name())
            if key in seen:
                path = [item.get_name() for item in chain]
                raise CyclicInheritance([*path, current.get_name()])
            if len(chain) >= self._max_depth:
                raise _depth_exceeded(symbol.get_name(), self._max_depth)
            seen.add(key)
            chain.append(current)
            current = self.parent_of(current)

        chain.reverse()
        return chain

    def interface_hierarchy(self, interface: SymbolReflection) -> InterfaceSet:
        """Return `interface` plus every interface it extends, transitively."""
        return self._interface_hierarchy(interface, ())

    def _interface_hierarchy(
        self, interface: SymbolReflection, path: tuple[str, ...]
    ) -> InterfaceSet:
        if interface.declaration.kind is not SymbolKind.INTERFACE:
            raise NotAnInterfaceReflection.from_reflection(interface)

        name = interface.get_name()
        if any(same_name(name, visited) for visited in path):
            raise CyclicInheritance([*path, name])
        if len(path) >= self._max_depth:
            raise _depth_exceeded(name, self._max_depth)

        result: InterfaceSet = {name: interface}
        extended_path = (*path, name)
        for name_ref in interface.declaration.interfaces:
            extended = self.resolve_reference(interface, name_ref)
            result.update(self._interface_hierarchy(extended, extended_path))
        return result

    def own_interfaces(self, symbol: SymbolReflection) -> InterfaceSet:
        """Interfaces contributed by the declaration of `symbol` alone."""
        declaration = symbol.declaration
        result: InterfaceSet = {}

        if declaration.kind is SymbolKind.CLASS:
            for name_ref in declaration.interfaces:
                implemented = self.resolve_reference(symbol, name_ref)
                result.update(self.interface_hierarchy(implemented))
        elif declaration.kind is SymbolKind.INTERFACE:
            path = (symbol.get_name(),)
            for name_ref in declaration.interfaces:
                extended = self.resolve_reference(symbol, name_ref)
                result.update(self._interface_hierarchy(extended, path))
        elif declaration.kind is SymbolKind.TRAIT:
            pass
        else:
            raise AssertionError(declaration.kind)

        return result

    def interfaces(self, symbol: SymbolReflection) -> InterfaceSet:
        """Closed interface set of `symbol` over its whole inheritance chain."""
        result: InterfaceSet = {}
        for ancestor in self.inheritance_chain(symbol):
            result.update(self.own_interfaces(ancestor))
        return result

    def traits(self, symbol: SymbolReflection) -> list[SymbolReflection]:
        return [
            self.resolve_reference(symbol, name_ref)
            for statement in symbol.declaration.trait_uses
            for name_ref in statement.traits
        ]

    def trait_aliases(self, symbol: SymbolReflection) -> dict[str, str]:
        """Map each trait method alias to ``TraitFQN::method``.

        An adaptation without an explicit source trait refers to the first
        trait of its statement. On alias collisions the last one wins.
        """
        declaration = symbol.declaration
        aliases: dict[str, str] = {}

        for statement in declaration.trait_uses:
            for adaptation in statement.adaptations:
                if not adaptation.alias:
                    continue
                trait_ref = adaptation.from_trait or statement.traits[0]
                trait_name = resolve_name(
                    trait_ref, declaration.namespace, declaration.imports
                )
                if trait_name is None:
                    raise ClassNotFound(trait_ref)
                aliases[adaptation.alias] = f"{trait_name}::{adaptation.method}"

        return aliases

    def find_method(
        self, symbol: SymbolReflection, method_name: str
    ) -> MethodReflection | None:
        """Find a method declared on `symbol`, its traits or its ancestors."""
        visited: set[str] = set()
        for owner in reversed(self.inheritance_chain(symbol)):
            found = self._find_in_class_and_traits(owner, method_name, visited)
            if found is not None:
                return found
        return None

    def _find_in_class_and_traits(
        self,
        symbol: SymbolReflection,
        method_name: str,
        visited: set[str],
    ) -> MethodReflection | None:
        key = name_key(symbol.get_name())
        if key in visited:
            return None
        visited.add(key)

        if symbol.has_method(method_name):
            return symbol.get_method(method_name)

        for trait in self.traits(symbol):
            found = self._find_in_class_and_traits(trait, method_name, visited)
            if found is not None:
                return found
        return None

    def is_subclass_of(self, symbol: SymbolReflection, class_name: object) -> bool:
        if not isinstance(class_name, str):
            raise InvalidArgument.not_a_string(class_name)
        ancestors = self.inheritance_chain(symbol)[:-1]
        return any(same_name(ancestor.get_name(), class_name) for ancestor in ancestors)

    def implements_interface(
        self, symbol: SymbolReflection, interface_name: object
    ) -> bool:
        if not isinstance(interface_name, str):
            raise InvalidArgument.not_a_string(interface_name)
        key = name_key(interface_name)
        return any(name_key(name) == key for name in self.interfaces(symbol))

    def is_instantiable(self, symbol: SymbolReflection) -> bool:
        declaration = symbol.declaration
        if declaration.kind is not SymbolKind.CLASS:
            return False
        return not declaration.modifiers.is_abstract

    def is_cloneable(self, symbol: SymbolReflection) -> bool:
        if not self.is_instantiable(symbol):
            return False
        clone = self.find_method(symbol, "__clone")
        return clone is None or clone.is_public()

    def is_iterateable(self, symbol: SymbolReflection) -> bool:
        return self.is_instantiable(symbol) and self.implements_interface(
            symbol, TRAVERSABLE
        )

    def is_a(self, candidate: SymbolReflection, target: SymbolReflection) -> bool:
        """Whether an object of class `candidate` is an instance of `target`."""
        target_name = target.get_name()
        if same_name(candidate.get_name(), target_name):
            return True
        if target.declaration.kind is SymbolKind.INTERFACE:
            return self.implements_interface(candidate, target_name)
        return self.is_subclass_of(candidate, target_name)


__all__ = ["DEFAULT_MAX_DEPTH", "HierarchyResolver", "InterfaceSet", "TRAVERSABLE"]
