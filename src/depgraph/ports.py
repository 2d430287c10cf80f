"""Interfaces to the collaborators of the dependency-graph stage.

Every read through these ports may report ``NOT_READY`` when the value is
still being computed elsewhere. Callers must then stop without side effects
and expect to be invoked again once the value is available.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

from constants import Constants

from .models import DepGraph, RootModuleFile


class NotReady:
    """Marker type for a value that is not available yet."""
    _instance: Optional["NotReady"] = None

    def __new__(cls) -> "NotReady":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_READY"


NOT_READY = NotReady()


class InputKey(Enum):
    """Upstream values the stage reads from its environment."""
    ROOT_MODULE_FILE = "root_module_file"
    SETTINGS = "settings"


@dataclass(frozen=True)
class Settings:
    """Build settings relevant to this stage."""
    enable_lockfile: bool = Constants.ENABLE_LOCKFILE
    lockfile_path: str = Constants.LOCKFILE_NAME


class Environment(ABC):
    """Source of upstream inputs."""

    @abstractmethod
    def get_value(self, key: InputKey) -> Any:
        """Return the value for ``key`` or ``NOT_READY``."""


class StaticEnvironment(Environment):
    """Environment backed by a fixed mapping; absent keys are not ready."""

    def __init__(self, values: Mapping[InputKey, Any]):
        self._values = dict(values)

    def get_value(self, key: InputKey) -> Any:
        return self._values.get(key, NOT_READY)

    def provide(self, key: InputKey, value: Any) -> None:
        """Make ``value`` available under ``key``."""
        self._values[key] = value


@dataclass(frozen=True)
class LockfileRecord:
    """The persisted snapshot: root module file hash and the graph resolved for it."""
    module_file_hash: str
    module_dep_graph: DepGraph


class Lockfile(ABC):
    """Persistent store of a single ``LockfileRecord``."""

    @abstractmethod
    def read(self) -> Union[LockfileRecord, None, NotReady]:
        """Return the stored record, None when nothing is stored, or ``NOT_READY``."""

    @abstractmethod
    def write(self, module_file_hash: str, dep_graph: DepGraph) -> None:
        """Replace the stored record."""


class Resolver(ABC):
    """Module version selection."""

    @abstractmethod
    def resolve(self, root: RootModuleFile, env: Environment) -> Union[DepGraph, NotReady]:
        """Return the resolved graph for ``root`` or ``NOT_READY``.

        Raises:
            ResolutionError: the graph cannot be resolved.
        """
