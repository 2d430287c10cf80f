"""Lookup from canonical repository name to module key."""

from __future__ import annotations

from typing import Dict, Mapping

from .errors import GraphInvariantError
from .labels import RepositoryName
from .models import DepGraph, ModuleKey, freeze_mapping


def canonical_repo_name_lookup(dep_graph: DepGraph) -> Mapping[RepositoryName, ModuleKey]:
    """Project every module of ``dep_graph`` onto its canonical repository name.

    Raises:
        GraphInvariantError: two modules claim the same canonical repository.
    """
    lookup: Dict[RepositoryName, ModuleKey] = {}
    for key, module in dep_graph.items():
        previous = lookup.get(module.canonical_repo_name)
        if previous is not None:
            raise GraphInvariantError(
                f"modules {previous} and {key} share canonical repository "
                f"'{module.canonical_repo_name}'"
            )
        lookup[module.canonical_repo_name] = key
    return freeze_mapping(lookup)
