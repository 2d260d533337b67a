"""A database of build directories keyed by pkgbase, and their build order."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from .package_file_name import PackageFileName
from .srcinfo import SrcInfo
from .status import Code


@dataclass(frozen=True)
class DatabaseValue:
    """What the database knows about one pkgbase."""

    names: tuple[str, ...]
    dependencies: tuple[str, ...]
    srcinfo: SrcInfo
    directory: Path


@dataclass(frozen=True)
class RemovalInfo:
    """The entry that an insertion replaced."""

    pkgbase: str
    db_value: DatabaseValue


class InsertionError(ValueError):
    """The build information cannot be inserted because it has no pkgbase."""

    def __init__(self, message: str = "missing pkgbase") -> None:
        super().__init__(message)


class CyclicDependencyError(Exception):
    """The packages depend on each other in a cycle."""

    def __init__(self, pkgbase: str) -> None:
        self.pkgbase = pkgbase
        super().__init__(f"Dependency cycle detected at {pkgbase}")

    @property
    def code(self) -> Code:
        return Code.CYCLIC_DEPENDENCY


class PackageFileNameError(Exception):
    """The package file names of one pkgbase cannot be worked out."""

    def __init__(self, pkgbase: str, srcinfo: SrcInfo, message: str) -> None:
        self.pkgbase = pkgbase
        self.srcinfo = srcinfo
        self.message = message
        super().__init__(message)


class Database:
    """Build information indexed by pkgbase and by pkgname."""

    def __init__(self) -> None:
        self._pkgbase: dict[str, DatabaseValue] = {}
        self._pkgname: dict[str, str] = {}

    def pkgbase(self) -> Mapping[str, DatabaseValue]:
        """A read-only view of the entries, in insertion order."""
        return MappingProxyType(self._pkgbase)

    def insert_srcinfo(self, srcinfo: SrcInfo, directory: Path) -> RemovalInfo | None:
        """Add build information; return the entry it replaced, if any.

        Only dependencies on packages already known are recorded.
        Raise ``InsertionError`` when there is no pkgbase.
        """
        pkgbase = srcinfo.pkgbase()
        if pkgbase is None:
            raise InsertionError()
        names: dict[str, None] = {}
        dependencies: dict[str, None] = {}
        for pkgname in srcinfo.pkgname():
            names[pkgname] = None
            self._pkgname[pkgname] = pkgbase
            for dependency in srcinfo.all_required_dependencies():
                dependency_pkgbase = self._pkgname.get(dependency.name)
                if dependency_pkgbase is not None:
                    dependencies[dependency_pkgbase] = None
        previous = self._pkgbase.get(pkgbase)
        self._pkgbase[pkgbase] = DatabaseValue(
            tuple(names), tuple(dependencies), srcinfo, directory
        )
        return None if previous is None else RemovalInfo(pkgbase, previous)

    def build_order(self) -> list[str]:
        """Every pkgbase after the ones it depends on.

        Raise ``CyclicDependencyError`` when the dependencies form a cycle.
        """
        nodes = list(self._pkgbase)
        index = {pkgbase: position for position, pkgbase in enumerate(nodes)}
        outgoing: list[list[int]] = [[] for _ in nodes]
        incoming: list[list[int]] = [[] for _ in nodes]
        for dependant, value in self._pkgbase.items():
            for dependency in value.dependencies:
                outgoing[index[dependency]].append(index[dependant])
                incoming[index[dependant]].append(index[dependency])

        discovered: set[int] = set()
        finished: set[int] = set()
        finish_order: list[int] = []
        for start in reversed(range(len(nodes))):
            if start in discovered:
                continue
            stack = [start]
            while stack:
                node = stack[-1]
                if node not in discovered:
                    discovered.add(node)
                    for successor in reversed(outgoing[node]):
                        if successor == node:
                            raise CyclicDependencyError(nodes[node])
                        if successor not in discovered:
                            stack.append(successor)
                else:
                    stack.pop()
                    if node not in finished:
                        finished.add(node)
                        finish_order.append(node)
        finish_order.reverse()

        visited: set[int] = set()
        for node in finish_order:
            stack = [node]
            reached = 0
            while stack:
                current = stack.pop()
                if current in visited:
                    continue
                visited.add(current)
                if reached:
                    raise CyclicDependencyError(nodes[current])
                reached += 1
                for predecessor in reversed(incoming[current]):
                    if predecessor not in visited:
                        stack.append(predecessor)

        return [nodes[node] for node in finish_order]

    def package_file_base_names(
        self, filter_arch: Callable[[str], bool]
    ) -> Iterator[PackageFileName | PackageFileNameError]:
        """Yield the package file names of every entry.

        An entry whose names cannot be worked out yields a
        ``PackageFileNameError`` instead, and iteration goes on.
        """
        for pkgbase, value in self._pkgbase.items():
            try:
                names = value.srcinfo.package_file_base_names(filter_arch)
            except ValueError as error:
                yield PackageFileNameError(pkgbase, value.srcinfo, str(error))
            else:
                yield from names