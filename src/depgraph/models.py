"""Data models for the module dependency graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Tuple, Union

from constants import Constants

from .errors import GraphInvariantError
from .labels import MAIN_REPOSITORY, Label, RepositoryMapping, RepositoryName


@dataclass(frozen=True)
class RootModuleKey:
    """Key of the root module, the one whose module file started resolution."""

    def __str__(self) -> str:
        return "<root>"


@dataclass(frozen=True, order=True)
class NamedModuleKey:
    """Key of a non-root module: its name and selected version.

    An empty version denotes a module whose version was overridden by a
    non-registry source.
    """
    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name}@{self.version or '_'}"


# A module key is either the root or a (name, version) pair; nothing else.
ModuleKey = Union[RootModuleKey, NamedModuleKey]

ROOT = RootModuleKey()


def canonical_repo_name(key: ModuleKey) -> RepositoryName:
    """Derive the canonical repository name a module key is materialized as.

    Raises:
        LabelSyntaxError: the module name or version does not form a valid repository name.
    """
    if isinstance(key, RootModuleKey):
        return MAIN_REPOSITORY
    version = key.version or Constants.OVERRIDE_VERSION
    return RepositoryName.create(f"{key.name}{Constants.REPO_NAME_SEPARATOR}{version}")


@dataclass(frozen=True)
class Location:
    """Position of a declaration in a module file."""
    file: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass(frozen=True)
class ExtensionUsage:
    """One ``use_extension`` declaration, exactly as written."""
    extension_bzl_file: str
    extension_name: str
    location: Location


@dataclass(frozen=True, order=True)
class ExtensionId:
    """Cross-module identity of an extension: canonical bzl file label plus name."""
    bzl_file_label: Label
    extension_name: str

    def __str__(self) -> str:
        return f"{self.bzl_file_label}%{self.extension_name}"


@dataclass(frozen=True)
class Module:
    """A resolved module.

    Attributes:
        key: Identity within the graph.
        name: Module name as declared (may be empty for the root).
        version: Declared version (may be empty).
        canonical_repo_name: Repository the module is materialized as.
        repo_mapping: Apparent names of the module's direct module dependencies
            only. Repositories generated by extensions are deliberately absent.
        extension_usages: Extension usages in declaration order.
    """
    key: ModuleKey
    name: str
    version: str
    canonical_repo_name: RepositoryName
    repo_mapping: RepositoryMapping
    extension_usages: Tuple[ExtensionUsage, ...] = ()


@dataclass(frozen=True)
class AbridgedModule:
    """Reporting projection of a module."""
    key: ModuleKey
    name: str
    version: str

    @classmethod
    def from_module(cls, module: Module) -> "AbridgedModule":
        return cls(key=module.key, name=module.name, version=module.version)


class DepGraph(Mapping[ModuleKey, Module]):
    """Read-only, insertion-ordered mapping of module key to module."""

    def __init__(self, modules: Iterable[Module] = ()):
        entries: Dict[ModuleKey, Module] = {}
        for module in modules:
            if module.key in entries:
                raise GraphInvariantError(f"module {module.key} appears twice in the dependency graph")
            entries[module.key] = module
        self._entries = MappingProxyType(entries)

    def __getitem__(self, key: ModuleKey) -> Module:
        return self._entries[key]

    def __iter__(self) -> Iterator[ModuleKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __hash__(self) -> int:
        return hash(frozenset(self._entries.items()))

    def __repr__(self) -> str:
        return f"DepGraph({[str(k) for k in self._entries]})"


@dataclass(frozen=True)
class RootModuleFile:
    """The evaluated root module file and the hash of its content.

    ``bazel_deps`` maps the apparent repo name of each direct dependency to
    its module name; versions are only known after selection.
    """
    module: Module
    module_hash: str
    bazel_deps: Mapping[str, str] = field(default_factory=dict)


def freeze_mapping(entries: Mapping) -> Mapping:
    """Return a read-only view over a private copy of ``entries``."""
    return MappingProxyType(dict(entries))
