"""Command-line interface for phpreflect-core."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import orjson

from reflection.errors import EvaluationError, ReflectionError
from reflector.config import ConfigError, build_reflector

if TYPE_CHECKING:
    from reflection.symbol import SymbolReflection


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("name", help="Fully-qualified class, interface or trait name")
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Project root (default: .)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="phpreflect")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    show_parser = subparsers.add_parser("show", help="Show a reflected symbol")
    _add_common_args(show_parser)

    hierarchy_parser = subparsers.add_parser(
        "hierarchy", help="Show the inheritance chain and interfaces of a symbol"
    )
    _add_common_args(hierarchy_parser)

    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _constant_values(reflection: SymbolReflection) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name, constant in reflection.get_reflection_constants().items():
        try:
            values[name] = constant.get_value()
        except EvaluationError as exc:
            values[name] = {"error": str(exc)}
    return values


def _describe(reflection: SymbolReflection) -> dict[str, Any]:
    parent = reflection.get_parent_class()
    return {
        "name": reflection.get_name(),
        "kind": reflection.declaration.kind.value,
        "namespace": reflection.get_namespace_name(),
        "file": reflection.get_file_name(),
        "start_line": reflection.get_start_line(),
        "end_line": reflection.get_end_line(),
        "abstract": reflection.is_abstract(),
        "final": reflection.is_final(),
        "instantiable": reflection.is_instantiable(),
        "parent": parent.get_name() if parent is not None else None,
        "interfaces": reflection.get_interface_names(),
        "traits": reflection.get_trait_names(),
        "trait_aliases": reflection.get_trait_aliases(),
        "methods": [method.get_name() for method in reflection.get_methods()],
        "properties": list(reflection.get_properties()),
        "constants": _constant_values(reflection),
    }


def _describe_hierarchy(reflection: SymbolReflection) -> dict[str, Any]:
    return {
        "name": reflection.get_name(),
        "chain": [item.get_name() for item in reflection.get_inheritance_chain()],
        "interfaces": reflection.get_interface_names(),
    }


def _write_json(payload: dict[str, Any]) -> None:
    data = orjson.dumps(payload, option=orjson.OPT_INDENT_2 | orjson.OPT_NON_STR_KEYS)
    sys.stdout.write(data.decode("utf-8") + "\n")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    root = Path(args.root).expanduser().resolve()

    try:
        reflector = build_reflector(root)
    except ConfigError as exc:
        sys.stderr.write(f"config: {exc}\n")
        return 2

    try:
        reflection = reflector.resolve(args.name)
        if args.command == "show":
            _write_json(_describe(reflection))
            return 0
        if args.command == "hierarchy":
            _write_json(_describe_hierarchy(reflection))
            return 0
    except ReflectionError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
