"""Unique, reproducible names for used extensions.

The names become the prefix of every repository an extension generates, so
they must be stable across runs with the same inputs and must never start
with the separator that marks extension-generated repositories.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping

from constants import Constants

from .errors import GraphInvariantError
from .extensions import UsageTable
from .models import ExtensionId, freeze_mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtensionNames:
    """Bijection between unique names and extension ids, stored as two paired maps."""
    by_name: Mapping[str, ExtensionId]
    by_id: Mapping[ExtensionId, str]

    def name_of(self, extension_id: ExtensionId) -> str:
        return self.by_id[extension_id]

    def id_of(self, name: str) -> ExtensionId:
        return self.by_name[name]

    def __len__(self) -> int:
        return len(self.by_name)


def best_name(extension_id: ExtensionId) -> str:
    """Collision-free-in-the-common-case name: ``<repo part>~<extension name>``."""
    repository = extension_id.bzl_file_label.repository
    repo_part = Constants.MAIN_REPO_EXTENSION_PREFIX if repository.is_main else repository.name
    if repo_part.startswith(Constants.REPO_NAME_SEPARATOR):
        raise GraphInvariantError(f"repository name '{repository.name}' starts with the reserved separator")
    return f"{repo_part}{Constants.REPO_NAME_SEPARATOR}{extension_id.extension_name}"


def allocate_names(extension_ids: Iterable[ExtensionId]) -> ExtensionNames:
    """Assign names in iteration order; later ids get ``2``, ``3``, ... suffixes on collision."""
    by_name: Dict[str, ExtensionId] = {}
    by_id: Dict[ExtensionId, str] = {}
    for extension_id in extension_ids:
        if extension_id in by_id:
            continue
        base = best_name(extension_id)
        candidate = base
        suffix = 2
        while candidate in by_name:
            candidate = f"{base}{suffix}"
            suffix += 1
        if candidate != base:
            logger.debug("Extension name %s already taken; using %s for %s", base, candidate, extension_id)
        by_name[candidate] = extension_id
        by_id[extension_id] = candidate
    return ExtensionNames(by_name=freeze_mapping(by_name), by_id=freeze_mapping(by_id))


def unique_extension_names(usages: UsageTable) -> ExtensionNames:
    """Name every extension id present as a row of ``usages``."""
    return allocate_names(usages.row_keys())
