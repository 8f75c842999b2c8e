"""Module dependency graph for archfit."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from errors import DuplicateModuleError
from parse.ast_imports import extract_dependencies

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from scan.files import SourceFile


@dataclass(frozen=True)
class Module:
    """A module and the direct dependencies it declares."""

    path: str
    dependencies: frozenset[str] = field(default_factory=frozenset)
    file_path: str | None = None


class ModuleGraph:
    """Mapping of module path -> Module, append-only until frozen."""

    def __init__(self) -> None:
        self._modules: dict[str, Module] = {}
        self._frozen = False

    def add(self, module: Module) -> None:
        """Register a module; self-dependencies are dropped."""
        if self._frozen:
            msg = "ModuleGraph is frozen; build a new graph for a new run"
            raise RuntimeError(msg)

        existing = self._modules.get(module.path)
        if existing is not None:
            raise DuplicateModuleError(
                module.path, existing.file_path, module.file_path
            )

        if module.path in module.dependencies:
            module = Module(
                path=module.path,
                dependencies=module.dependencies - {module.path},
                file_path=module.file_path,
            )
        self._modules[module.path] = module

    def freeze(self) -> ModuleGraph:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, path: str) -> Module | None:
        return self._modules.get(path)

    def modules(self) -> list[Module]:
        """Return all modules sorted lexicographically by path."""
        return [self._modules[path] for path in sorted(self._modules)]

    def edges(self) -> list[tuple[str, str]]:
        """Return every (source, dependency) edge, sorted."""
        return sorted(
            (module.path, dependency)
            for module in self._modules.values()
            for dependency in module.dependencies
        )

    def __contains__(self, path: object) -> bool:
        return path in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._modules))


def _extract_module(source: SourceFile, track_attribute_paths: bool) -> Module:
    dependencies = extract_dependencies(
        source.module,
        source.text,
        file_path=source.file_path,
        is_package=source.is_package,
        track_attribute_paths=track_attribute_paths,
    )
    return Module(
        path=source.module,
        dependencies=dependencies,
        file_path=source.file_path,
    )


def build_module_graph(
    sources: Iterable[SourceFile],
    *,
    workers: int = 1,
    track_attribute_paths: bool = True,
) -> ModuleGraph:
    """Extract every source and merge the results into a frozen graph.

    Extraction runs in a thread pool when ``workers`` > 1; modules are only
    registered after every worker has finished. The first ParseError or
    DuplicateModuleError aborts the build.
    """
    source_list = list(sources)

    if workers > 1 and len(source_list) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            extracted = list(
                pool.map(
                    lambda source: _extract_module(source, track_attribute_paths),
                    source_list,
                )
            )
    else:
        extracted = [
            _extract_module(source, track_attribute_paths) for source in source_list
        ]

    graph = ModuleGraph()
    for module in extracted:
        graph.add(module)
    return graph.freeze()


__all__ = ["Module", "ModuleGraph", "build_module_graph"]
