"""Repository names, repo mappings and label canonicalization.

A label string as written in a module file is only meaningful relative to
the repository that declares it. ``LabelConverter`` turns such a string into
a ``Label`` whose repository is canonical, so that two modules referring to
the same file through different apparent names produce equal labels.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .errors import LabelSyntaxError

_REPO_NAME_RE = re.compile(r"^[A-Za-z0-9_.\-+~]*$")
_APPARENT_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_.\-]*$")


def _check_repo_name(name: str, apparent: bool = False) -> None:
    pattern = _APPARENT_NAME_RE if apparent else _REPO_NAME_RE
    if not pattern.match(name):
        raise LabelSyntaxError(f"invalid repository name '{name}'")
    if name.startswith("~"):
        raise LabelSyntaxError(f"invalid repository name '{name}': must not start with '~'")


@dataclass(frozen=True, order=True)
class RepositoryName:
    """Canonical repository name; the empty name denotes the main repository."""
    name: str

    @classmethod
    def create(cls, name: str) -> "RepositoryName":
        """Validate and build a canonical repository name."""
        _check_repo_name(name)
        return cls(name)

    @property
    def is_main(self) -> bool:
        return self.name == ""

    def __str__(self) -> str:
        return f"@@{self.name}"


MAIN_REPOSITORY = RepositoryName("")


@dataclass(frozen=True, eq=False)
class RepositoryMapping:
    """Maps the apparent repository names visible from ``owner`` to canonical names."""
    entries: Mapping[str, RepositoryName] = field(default_factory=dict)
    owner: RepositoryName = MAIN_REPOSITORY

    @classmethod
    def create(cls, entries: Mapping[str, str], owner: RepositoryName) -> "RepositoryMapping":
        """Build a read-only mapping from plain strings."""
        converted = {}
        for apparent, canonical in entries.items():
            converted[apparent] = RepositoryName.create(canonical)
        return cls(MappingProxyType(converted), owner)

    def get(self, apparent: str) -> Optional[RepositoryName]:
        """Return the canonical repository for ``apparent``, or None if not visible."""
        return self.entries.get(apparent)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RepositoryMapping):
            return NotImplemented
        return self.owner == other.owner and dict(self.entries) == dict(other.entries)

    def __hash__(self) -> int:
        return hash((self.owner, tuple(sorted((k, v.name) for k, v in self.entries.items()))))


@dataclass(frozen=True, order=True)
class Label:
    """Absolute, canonical label of a file: ``@@repo//package:name``."""
    repository: RepositoryName
    package: str
    name: str

    def __str__(self) -> str:
        return f"{self.repository}//{self.package}:{self.name}"


def _check_package(package: str) -> None:
    if package.startswith("/") or package.endswith("/") or "//" in package:
        raise LabelSyntaxError(f"invalid package name '{package}'")
    if any(ch in package for ch in ":@\\"):
        raise LabelSyntaxError(f"invalid package name '{package}': contains an illegal character")
    if package and any(seg in (".", "..") for seg in package.split("/")):
        raise LabelSyntaxError(f"invalid package name '{package}': contains up-level references")


def _check_target(name: str) -> None:
    if not name:
        raise LabelSyntaxError("empty target name")
    if name.startswith("/") or name.endswith("/") or "//" in name or ":" in name:
        raise LabelSyntaxError(f"invalid target name '{name}'")
    if any(seg in (".", "..") for seg in name.split("/")):
        raise LabelSyntaxError(f"invalid target name '{name}': contains up-level references")


def _split_package_and_target(path: str) -> Tuple[str, str]:
    """Split the part after ``//`` into (package, target)."""
    if ":" in path:
        package, target = path.split(":", 1)
    else:
        package = path
        target = path.rsplit("/", 1)[-1]
    _check_package(package)
    _check_target(target)
    return package, target


class LabelConverter:
    """Converts label strings written in one repository to canonical labels.

    Args:
        base_repo: Canonical repository the strings are written in.
        repo_mapping: Apparent names visible from ``base_repo``.
    """

    def __init__(self, base_repo: RepositoryName, repo_mapping: RepositoryMapping):
        self._base_repo = base_repo
        self._repo_mapping = repo_mapping

    def convert(self, raw: str) -> Label:
        """Parse ``raw`` into a canonical ``Label``.

        Raises:
            LabelSyntaxError: malformed label or a repository not visible from the base repo.
        """
        if not raw:
            raise LabelSyntaxError("empty label")

        if raw.startswith("@@"):
            repo_part, rest = self._split_repo(raw[2:], raw)
            repository = RepositoryName.create(repo_part)
        elif raw.startswith("@"):
            repo_part, rest = self._split_repo(raw[1:], raw)
            repository = self._lookup(repo_part)
        elif raw.startswith("//"):
            repository, rest = self._base_repo, raw[2:]
        else:
            # Relative to the repository root package.
            target = raw[1:] if raw.startswith(":") else raw
            _check_target(target)
            return Label(self._base_repo, "", target)

        if rest is None:
            # "@repo" is shorthand for "@repo//:repo".
            if not repo_part:
                raise LabelSyntaxError(f"invalid label '{raw}': missing target")
            return Label(repository, "", repo_part)
        package, target = _split_package_and_target(rest)
        return Label(repository, package, target)

    @staticmethod
    def _split_repo(text: str, raw: str) -> Tuple[str, Optional[str]]:
        if "//" in text:
            repo_part, rest = text.split("//", 1)
        elif ":" in text or "/" in text:
            raise LabelSyntaxError(f"invalid label '{raw}': expected '//' after repository name")
        else:
            repo_part, rest = text, None
        return repo_part, rest

    def _lookup(self, apparent: str) -> RepositoryName:
        if apparent == "":
            return MAIN_REPOSITORY
        _check_repo_name(apparent, apparent=True)
        repository = self._repo_mapping.get(apparent)
        if repository is None:
            raise LabelSyntaxError(
                f"no repository visible as '@{apparent}' from repository '{self._repo_mapping.owner}'"
            )
        return repository
