"""Tree-sitter based declaration extraction for PHP sources."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import tree_sitter_php as tsphp
from tree_sitter import Language, Node, Parser

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
    Visibility,
)
from models.expressions import ArrayItem, ConstExpr
from names.resolution import split_name

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_LANGUAGE: Language | None = None

_DECLARATION_KINDS: dict[str, SymbolKind] = {
    "class_declaration": SymbolKind.CLASS,
    "interface_declaration": SymbolKind.INTERFACE,
    "trait_declaration": SymbolKind.TRAIT,
}

_NAME_TYPES = frozenset({"name", "qualified_name", "relative_name"})

_VISIBILITIES: frozenset[str] = frozenset({"public", "protected", "private"})

_USE_AS_RE = re.compile(
    r"^(?:(?P<trait>[\\\w]+)\s*::\s*)?(?P<method>\w+)\s+as\s+"
    r"(?:(?P<visibility>public|protected|private)\b\s*)?(?P<alias>\w+)?$",
    re.IGNORECASE,
)
_INSTEADOF_RE = re.compile(
    r"^(?P<trait>[\\\w]+)\s*::\s*(?P<method>\w+)\s+insteadof\s+(?P<excluded>.+)$",
    re.IGNORECASE,
)
_IMPORT_ALIAS_RE = re.compile(r"\s+as\s+", re.IGNORECASE)

_DOUBLE_QUOTED_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "v": "\v",
    "e": "\x1b",
    "f": "\f",
    "\\": "\\",
    "$": "$",
    '"': '"',
}
_DOUBLE_QUOTED_ESCAPE_RE = re.compile(
    r"\\(?:u\{(?P<unicode>[0-9a-fA-F]+)\}|x(?P<hex>[0-9a-fA-F]{1,2})"
    r"|(?P<octal>[0-7]{1,3})|(?P<simple>[ntrvef\\$\"]))"
)
_INTERPOLATION_RE = re.compile(r"(?<!\\)\$(?:[A-Za-z_{])|\{\$")


def _get_parser() -> Parser:
    """Return a fresh parser; parsers are not shared between threads."""
    global _LANGUAGE
    if _LANGUAGE is None:
        _LANGUAGE = Language(tsphp.language_php())
    return Parser(_LANGUAGE)


def _text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf8", errors="replace")


@dataclass
class _Scope:
    """Namespace and imports in effect at a point of the file."""

    file: str | None
    namespace: tuple[str, ...] | None = None
    imports: dict[str, str] = field(default_factory=dict)


def _doc_comment(node: Node) -> str | None:
    previous = node.prev_sibling
    if previous is not None and previous.type == "comment":
        text = _text(previous)
        if text.startswith("/**"):
            return text
    return None


def _namespace_parts(name: str) -> tuple[str, ...] | None:
    parents, last = split_name(name)
    return (*parents, last) if last else None


def _parse_imports(node: Node) -> dict[str, str]:
    """Parse a `use` import statement into alias -> fully-qualified name."""
    body = _text(node).strip().rstrip(";").strip()
    body = body[3:].strip() if body.lower().startswith("use") else body
    if body.lower().startswith(("function ", "const ")):
        return {}

    if "{" in body:
        prefix, _, group = body.partition("{")
        prefix = prefix.strip().strip("\\")
        clauses = [
            f"{prefix}\\{clause.strip()}"
            for clause in group.rstrip("}").split(",")
            if clause.strip()
        ]
    else:
        clauses = [clause.strip() for clause in body.split(",") if clause.strip()]

    imports: dict[str, str] = {}
    for clause in clauses:
        if clause.lower().startswith(("function ", "const ")):
            continue
        parts = _IMPORT_ALIAS_RE.split(clause, maxsplit=1)
        target = parts[0].strip().lstrip("\\")
        alias = parts[1].strip() if len(parts) > 1 else target.rsplit("\\", 1)[-1]
        if target and alias:
            imports[alias] = target
    return imports


def _name_children(node: Node | None) -> tuple[str, ...]:
    if node is None:
        return ()
    return tuple(_text(child) for child in node.named_children if child.type in _NAME_TYPES)


def _child_of_type(node: Node, node_type: str) -> Node | None:
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def _has_child_type(node: Node, node_type: str) -> bool:
    return _child_of_type(node, node_type) is not None


def _visibility(node: Node) -> Visibility:
    modifier = _child_of_type(node, "visibility_modifier")
    text = _text(modifier).lower()
    if text in _VISIBILITIES:
        return text  # type: ignore[return-value]
    return "public"


def _parse_int(text: str) -> int:
    digits = text.replace("_", "").lower()
    if digits.startswith("0x"):
        return int(digits[2:], 16)
    if digits.startswith("0b"):
        return int(digits[2:], 2)
    if digits.startswith("0o"):
        return int(digits[2:], 8)
    if len(digits) > 1 and digits.startswith("0"):
        return int(digits[1:], 8)
    return int(digits)


def _decode_double_quoted(inner: str) -> str:
    def replace(match: re.Match[str]) -> str:
        if match.group("unicode"):
            return chr(int(match.group("unicode"), 16))
        if match.group("hex"):
            return chr(int(match.group("hex"), 16))
        if match.group("octal"):
            return chr(int(match.group("octal"), 8) & 0xFF)
        return _DOUBLE_QUOTED_ESCAPES[match.group("simple")]

    return _DOUBLE_QUOTED_ESCAPE_RE.sub(replace, inner)


def _string_expr(text: str) -> ConstExpr:
    if len(text) >= 2 and text[0] == "'" and text[-1] == "'":
        return ConstExpr.scalar(re.sub(r"\\([\\'])", r"\1", text[1:-1]), text)
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        inner = text[1:-1]
        if _INTERPOLATION_RE.search(inner):
            return ConstExpr.unsupported(text)
        return ConstExpr.scalar(_decode_double_quoted(inner), text)
    return ConstExpr.unsupported(text)


def _array_expr(node: Node, text: str) -> ConstExpr:
    items: list[ArrayItem] = []
    for element in node.named_children:
        if element.type != "array_element_initializer":
            continue
        if any(child.type == "..." for child in element.children):
            return ConstExpr.unsupported(text)
        values = element.named_children
        if not values:
            continue
        if any(child.type == "=>" for child in element.children) and len(values) >= 2:
            items.append(ArrayItem(key=_expr(values[0]), value=_expr(values[-1])))
        else:
            items.append(ArrayItem(value=_expr(values[-1])))
    return ConstExpr(kind="array", text=text, items=tuple(items))


def _expr(node: Node) -> ConstExpr:
    """Convert an initializer expression node into a ConstExpr."""
    node_type = node.type
    text = _text(node)

    if node_type == "integer":
        return ConstExpr.scalar(_parse_int(text), text)
    if node_type == "float":
        return ConstExpr.scalar(float(text.replace("_", "")), text)
    if node_type == "boolean":
        return ConstExpr.scalar(text.lower() == "true", text)
    if node_type == "null":
        return ConstExpr.scalar(None, text)
    if node_type in {"string", "encapsed_string"}:
        return _string_expr(text)
    if node_type == "array_creation_expression":
        return _array_expr(node, text)
    if node_type == "parenthesized_expression" and node.named_children:
        return _expr(node.named_children[0])
    if node_type == "unary_op_expression" and node.named_children:
        operator = _text(node.children[0])
        operand = _expr(node.named_children[-1])
        if operator == "-":
            return ConstExpr(kind="negate", text=text, operand=operand)
        if operator == "+":
            return operand
        return ConstExpr.unsupported(text)
    if node_type == "class_constant_access_expression" and len(node.named_children) >= 2:
        return ConstExpr(
            kind="class_constant",
            text=text,
            class_ref=_text(node.named_children[0]),
            name=_text(node.named_children[-1]),
        )
    if node_type in _NAME_TYPES:
        lowered = text.lower()
        if lowered in {"true", "false"}:
            return ConstExpr.scalar(lowered == "true", text)
        if lowered == "null":
            return ConstExpr.scalar(None, text)
        return ConstExpr(kind="constant", text=text, name=text)

    return ConstExpr.unsupported(text)


def _constants(node: Node) -> list[ConstantDecl]:
    visibility = _visibility(node)
    constants: list[ConstantDecl] = []
    for element in node.named_children:
        if element.type != "const_element":
            continue
        children = element.named_children
        if len(children) < 2:
            continue
        constants.append(
            ConstantDecl(
                name=_text(children[0]),
                value=_expr(children[-1]),
                visibility=visibility,
            )
        )
    return constants


def _property_default(element: Node) -> ConstExpr | None:
    default = element.child_by_field_name("default_value")
    if default is None:
        initializer = _child_of_type(element, "property_initializer")
        if initializer is not None and initializer.named_children:
            default = initializer.named_children[-1]
    return _expr(default) if default is not None else None


def _properties(node: Node) -> list[PropertyDecl]:
    visibility = _visibility(node)
    is_static = _has_child_type(node, "static_modifier")
    is_readonly = _has_child_type(node, "readonly_modifier")
    doc_comment = _doc_comment(node)

    properties: list[PropertyDecl] = []
    for element in node.named_children:
        if element.type != "property_element":
            continue
        variable = _child_of_type(element, "variable_name")
        if variable is None:
            continue
        properties.append(
            PropertyDecl(
                name=_text(variable).lstrip("$"),
                visibility=visibility,
                is_static=is_static,
                is_readonly=is_readonly,
                default=_property_default(element),
                doc_comment=doc_comment,
            )
        )
    return properties


def _promoted_properties(method: Node) -> list[PropertyDecl]:
    parameters = method.child_by_field_name("parameters")
    if parameters is None:
        return []

    promoted: list[PropertyDecl] = []
    for parameter in parameters.named_children:
        if parameter.type != "property_promotion_parameter":
            continue
        variable = parameter.child_by_field_name("name") or _child_of_type(
            parameter, "variable_name"
        )
        if variable is None:
            continue
        promoted.append(
            PropertyDecl(
                name=_text(variable).lstrip("$"),
                visibility=_visibility(parameter),
                is_readonly=_has_child_type(parameter, "readonly_modifier"),
                is_promoted=True,
            )
        )
    return promoted


def _method(node: Node, kind: SymbolKind) -> MethodDecl:
    is_abstract = _has_child_type(node, "abstract_modifier") or (
        kind is SymbolKind.INTERFACE
    )
    return MethodDecl(
        name=_text(node.child_by_field_name("name")),
        visibility=_visibility(node),
        is_static=_has_child_type(node, "static_modifier"),
        is_abstract=is_abstract,
        is_final=_has_child_type(node, "final_modifier"),
        start_line=node.start_point[0] + 1,
        end_line=node.end_point[0] + 1,
        doc_comment=_doc_comment(node),
    )


def _adaptation(clause: Node) -> TraitAdaptation | None:
    text = " ".join(_text(clause).split())

    if clause.type == "use_instead_of_clause":
        match = _INSTEADOF_RE.match(text)
        if match is None:
            return None
        excluded = tuple(
            name.strip() for name in match.group("excluded").split(",") if name.strip()
        )
        return TraitAdaptation(
            method=match.group("method"),
            from_trait=match.group("trait"),
            insteadof=excluded,
        )

    match = _USE_AS_RE.match(text)
    if match is None:
        return None
    visibility = match.group("visibility")
    return TraitAdaptation(
        method=match.group("method"),
        from_trait=match.group("trait"),
        alias=match.group("alias"),
        visibility=visibility.lower() if visibility else None,
    )


def _trait_use(node: Node) -> TraitUseStatement | None:
    traits = _name_children(node)
    if not traits:
        return None

    adaptations: list[TraitAdaptation] = []
    use_list = _child_of_type(node, "use_list")
    if use_list is not None:
        for clause in use_list.named_children:
            if clause.type not in {"use_as_clause", "use_instead_of_clause"}:
                continue
            adaptation = _adaptation(clause)
            if adaptation is None:
                logger.debug("Skipping unrecognized trait adaptation %r", _text(clause))
                continue
            adaptations.append(adaptation)

    return TraitUseStatement(traits=traits, adaptations=tuple(adaptations))


def _build_declaration(node: Node, kind: SymbolKind, scope: _Scope) -> Declaration:
    base_names = _name_children(_child_of_type(node, "base_clause"))
    parent: str | None = None
    interfaces: tuple[str, ...] = ()
    if kind is SymbolKind.CLASS:
        parent = base_names[0] if base_names else None
        interfaces = _name_children(_child_of_type(node, "class_interface_clause"))
    elif kind is SymbolKind.INTERFACE:
        interfaces = base_names

    methods: list[MethodDecl] = []
    properties: list[PropertyDecl] = []
    constants: list[ConstantDecl] = []
    trait_uses: list[TraitUseStatement] = []

    body = node.child_by_field_name("body")
    for member in body.named_children if body is not None else ():
        if member.type == "method_declaration":
            methods.append(_method(member, kind))
            if _text(member.child_by_field_name("name")).lower() == "__construct":
                properties.extend(_promoted_properties(member))
        elif member.type == "property_declaration":
            properties.extend(_properties(member))
        elif member.type == "const_declaration":
            constants.extend(_constants(member))
        elif member.type == "use_declaration":
            statement = _trait_use(member)
            if statement is not None:
                trait_uses.append(statement)

    return Declaration(
        kind=kind,
        short_name=_text(node.child_by_field_name("name")),
        namespace=scope.namespace,
        modifiers=Modifiers(
            is_abstract=_has_child_type(node, "abstract_modifier"),
            is_final=_has_child_type(node, "final_modifier"),
        ),
        parent=parent,
        interfaces=interfaces,
        trait_uses=tuple(trait_uses),
        methods=tuple(methods),
        properties=tuple(properties),
        constants=tuple(constants),
        imports=dict(scope.imports),
        location=SourceLocation(
            file=scope.file,
            start_line=node.start_point[0] + 1,
            end_line=node.end_point[0] + 1,
            doc_comment=_doc_comment(node),
        ),
    )


def _walk_statements(
    nodes: list[Node], scope: _Scope, declarations: list[Declaration]
) -> None:
    for node in nodes:
        if node.type == "namespace_definition":
            namespace = _namespace_parts(_text(node.child_by_field_name("name")))
            body = node.child_by_field_name("body")
            if body is None:
                scope.namespace = namespace
                scope.imports = {}
            else:
                block_scope = _Scope(file=scope.file, namespace=namespace)
                _walk_statements(body.children, block_scope, declarations)
        elif node.type == "namespace_use_declaration":
            scope.imports.update(_parse_imports(node))
        elif node.type in _DECLARATION_KINDS:
            if node.child_by_field_name("name") is None:
                continue
            declarations.append(
                _build_declaration(node, _DECLARATION_KINDS[node.type], scope)
            )


def extract_declarations(
    source: str | bytes, file: str | None = None
) -> list[Declaration]:
    """Extract class, interface and trait declarations from PHP source.

    Args:
        source: PHP source text, including the opening ``<?php`` tag
        file: File name recorded on each declaration's source location

    Returns:
        Declarations in source order.
    """
    source_bytes = source.encode("utf8") if isinstance(source, str) else source
    tree = _get_parser().parse(source_bytes)
    if tree.root_node.has_error:
        logger.debug("Syntax errors while parsing %s", file or "<string>")

    declarations: list[Declaration] = []
    _walk_statements(tree.root_node.children, _Scope(file=file), declarations)
    return declarations


def extract_declarations_from_file(file_path: Path) -> list[Declaration]:
    try:
        source_bytes = file_path.read_bytes()
    except OSError as exc:
        logger.warning("Cannot read %s: %s", file_path, exc)
        return []
    return extract_declarations(source_bytes, str(file_path))


__all__ = ["extract_declarations", "extract_declarations_from_file"]
