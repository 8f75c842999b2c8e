"""AST-based dependency extraction for archfit."""

from __future__ import annotations

import ast

from errors import ParseError
from utils import join_path, split_path

# Compiler directives, not dependencies.
_IGNORED_MODULES = frozenset({"__future__"})


def resolve_relative_import(
    importing_module: str,
    relative_module: str,
    level: int,
    *,
    is_package: bool = False,
) -> str:
    """Resolve a relative import to an absolute module name.

    Args:
        importing_module: The module doing the import (e.g., "pkg.sub.mod")
        relative_module: The relative module name (e.g., "foo" from ".foo")
        level: Number of dots (1 for ".", 2 for "..", etc.)
        is_package: True when the importing module is a package ``__init__``,
            in which case one dot refers to the module itself.

    Returns:
        Absolute module name (e.g., "pkg.sub.foo")

    Raises:
        ValueError: If the import climbs above the top-level package.

    Examples:
        >>> resolve_relative_import("pkg.sub.mod", "foo", 1)
        'pkg.sub.foo'
        >>> resolve_relative_import("pkg.sub.mod", "", 1)
        'pkg.sub'
        >>> resolve_relative_import("pkg.sub.mod", "bar", 2)
        'pkg.bar'
        >>> resolve_relative_import("pkg.sub", "mod", 1, is_package=True)
        'pkg.sub.mod'
    """
    parts = list(split_path(importing_module))
    package_parts = parts if is_package else parts[:-1]

    climb = level - 1
    if level < 1 or climb >= len(package_parts):
        msg = (
            f"attempted relative import beyond top-level package "
            f"(level {level} from '{importing_module}')"
        )
        raise ValueError(msg)

    base_parts = package_parts[: len(package_parts) - climb]
    return join_path([*base_parts, *split_path(relative_module)])


def _parse(source: str, file_path: str) -> ast.Module:
    try:
        return ast.parse(source, filename=file_path)
    except SyntaxError as exc:
        raise ParseError(file_path, f"line {exc.lineno}: {exc.msg}") from exc
    except ValueError as exc:
        # e.g. "source code string cannot contain null bytes"
        raise ParseError(file_path, str(exc)) from exc


def _process_import_node(
    node: ast.Import, dependencies: set[str], bindings: dict[str, str]
) -> None:
    """Process a standard import node (import x.y [as z])."""
    for name in node.names:
        if split_path(name.name)[0] in _IGNORED_MODULES:
            continue
        dependencies.add(name.name)
        if name.asname:
            bindings[name.asname] = name.name
        else:
            root = split_path(name.name)[0]
            bindings[root] = root


def _process_import_from_node(
    node: ast.ImportFrom,
    dependencies: set[str],
    *,
    module: str,
    is_package: bool,
    file_path: str,
) -> None:
    """Process a from-import node (from x import y)."""
    base = node.module or ""
    if base in _IGNORED_MODULES:
        return

    if node.level > 0:
        try:
            base = resolve_relative_import(
                module, base, node.level, is_package=is_package
            )
        except ValueError as exc:
            raise ParseError(file_path, str(exc)) from exc

    for name in node.names:
        if name.name == "*":
            dependencies.add(base)
        else:
            dependencies.add(join_path([*split_path(base), name.name]))


def _attribute_chain(node: ast.Attribute) -> tuple[str, list[str]] | None:
    """Return (root name, trailing attributes) for a dotted Name.attr.attr chain."""
    attrs: list[str] = []
    current: ast.expr = node
    while isinstance(current, ast.Attribute):
        attrs.append(current.attr)
        current = current.value
    if not isinstance(current, ast.Name):
        return None
    attrs.reverse()
    return current.id, attrs


def _collect_attribute_paths(
    tree: ast.Module, bindings: dict[str, str], dependencies: set[str]
) -> None:
    """Record fully-qualified in-line references rooted at imported names."""
    if not bindings:
        return

    inner: set[int] = set()
    attributes: list[ast.Attribute] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Attribute):
            attributes.append(node)
            if isinstance(node.value, ast.Attribute):
                inner.add(id(node.value))

    for node in attributes:
        if id(node) in inner:
            continue
        chain = _attribute_chain(node)
        if chain is None:
            continue
        root, attrs = chain
        bound = bindings.get(root)
        if bound is None:
            continue
        dependencies.add(join_path([*split_path(bound), *attrs]))


def extract_dependencies(
    module: str,
    source: str,
    *,
    file_path: str | None = None,
    is_package: bool = False,
    track_attribute_paths: bool = True,
) -> frozenset[str]:
    """Extract the direct dependencies declared by one module.

    Args:
        module: Fully-qualified module name of the source (e.g. "shop.domain.order")
        source: Python source text
        file_path: Path used in parse diagnostics (defaults to the module name)
        is_package: True when the source is a package ``__init__`` module
        track_attribute_paths: Also record dotted attribute chains rooted at
            names bound by ``import`` statements (``import shop`` followed by
            ``shop.domain.Order`` yields ``shop.domain.Order``)

    Returns:
        Frozen set of fully-qualified dependency paths. ``from x import *``
        contributes the single path ``x``.

    Raises:
        ParseError: If the source cannot be parsed, or a relative import
            climbs above the top-level package.
    """
    location = file_path or module
    tree = _parse(source, location)

    dependencies: set[str] = set()
    bindings: dict[str, str] = {}

    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            _process_import_node(node, dependencies, bindings)
        elif isinstance(node, ast.ImportFrom):
            _process_import_from_node(
                node,
                dependencies,
                module=module,
                is_package=is_package,
                file_path=location,
            )

    if track_attribute_paths:
        _collect_attribute_paths(tree, bindings, dependencies)

    return frozenset(dependencies)


__all__ = ["extract_dependencies", "resolve_relative_import"]
