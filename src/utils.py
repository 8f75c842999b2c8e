"""Shared module-path utilities for archfit."""

from __future__ import annotations

from pathlib import Path

SEPARATOR = "."


def path_to_module(file_path: str | Path) -> str:
    """Convert a file path to a Python module name.

    Args:
        file_path: Relative file path (e.g., "src/shop/domain/order.py" or Path object)

    Returns:
        Module name (e.g., "shop.domain.order")

    Raises:
        ValueError: If the path collapses to an empty module name.

    Examples:
        >>> path_to_module("src/shop/domain/order.py")
        'shop.domain.order'
        >>> path_to_module("src/shop/__init__.py")
        'shop'
        >>> path_to_module(Path("foo/bar.py"))
        'foo.bar'
    """
    path_str = file_path.as_posix() if isinstance(file_path, Path) else str(file_path)
    normalized_parts = [part for part in path_str.replace("\\", "/").split("/") if part]

    # src/<package>/... maps to <package>.<submodules>
    module_parts = (
        normalized_parts[1:]
        if len(normalized_parts) >= 2 and normalized_parts[0] == "src"
        else normalized_parts
    )

    if module_parts and module_parts[-1].endswith(".py"):
        module_parts[-1] = module_parts[-1][:-3]

    if module_parts and module_parts[-1] == "__init__":
        module_parts = module_parts[:-1]

    if not module_parts:
        msg = f"Path '{path_str}' does not map to a non-empty module name"
        raise ValueError(msg)

    return SEPARATOR.join(module_parts)


def is_package_file(file_path: str | Path) -> bool:
    """Return True when the file is a package ``__init__`` module."""
    return Path(file_path).name == "__init__.py"


def split_path(path: str) -> tuple[str, ...]:
    """Split a dotted module path into its segments."""
    return tuple(segment for segment in path.split(SEPARATOR) if segment)


def join_path(segments: tuple[str, ...] | list[str]) -> str:
    return SEPARATOR.join(segments)


def is_child_of(path: str, parent: str) -> bool:
    """Return True when ``path`` equals ``parent`` or lies below it.

    Matching is on whole segments: ``shop.domain`` is not a parent of
    ``shop.domain_events``.

    Examples:
        >>> is_child_of("shop.domain.order", "shop.domain")
        True
        >>> is_child_of("shop.domain_events", "shop.domain")
        False
    """
    return path == parent or path.startswith(parent + SEPARATOR)
