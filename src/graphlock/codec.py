"""Conversion between dependency graphs and their lockfile JSON form.

Module order and extension usage order are preserved: extension names are
allocated by iterating them, so a replayed graph must iterate identically.
"""

from __future__ import annotations

from typing import Any, Dict, List

from depgraph.labels import RepositoryMapping, RepositoryName
from depgraph.models import (
    ROOT,
    DepGraph,
    ExtensionUsage,
    Location,
    Module,
    ModuleKey,
    NamedModuleKey,
    RootModuleKey,
)


def _key_to_dict(key: ModuleKey) -> Dict[str, Any]:
    if isinstance(key, RootModuleKey):
        return {"root": True}
    return {"name": key.name, "version": key.version}


def _key_from_dict(data: Dict[str, Any]) -> ModuleKey:
    if data.get("root"):
        return ROOT
    return NamedModuleKey(data["name"], data.get("version", ""))


def _usage_to_dict(usage: ExtensionUsage) -> Dict[str, Any]:
    return {
        "extensionBzlFile": usage.extension_bzl_file,
        "extensionName": usage.extension_name,
        "location": {
            "file": usage.location.file,
            "line": usage.location.line,
            "column": usage.location.column,
        },
    }


def _usage_from_dict(data: Dict[str, Any]) -> ExtensionUsage:
    loc = data["location"]
    return ExtensionUsage(
        extension_bzl_file=data["extensionBzlFile"],
        extension_name=data["extensionName"],
        location=Location(loc["file"], int(loc["line"]), int(loc["column"])),
    )


def module_to_dict(module: Module) -> Dict[str, Any]:
    """Serialize one module."""
    return {
        "key": _key_to_dict(module.key),
        "name": module.name,
        "version": module.version,
        "repoName": module.canonical_repo_name.name,
        "repoMapping": {k: v.name for k, v in module.repo_mapping.entries.items()},
        "extensionUsages": [_usage_to_dict(u) for u in module.extension_usages],
    }


def module_from_dict(data: Dict[str, Any]) -> Module:
    """Deserialize one module; the input is expected to be schema-valid."""
    repo_name = RepositoryName.create(data["repoName"])
    return Module(
        key=_key_from_dict(data["key"]),
        name=data.get("name", ""),
        version=data.get("version", ""),
        canonical_repo_name=repo_name,
        repo_mapping=RepositoryMapping.create(data.get("repoMapping", {}), repo_name),
        extension_usages=tuple(_usage_from_dict(u) for u in data.get("extensionUsages", [])),
    )


def dep_graph_to_list(dep_graph: DepGraph) -> List[Dict[str, Any]]:
    """Serialize a graph as a list of modules in iteration order."""
    return [module_to_dict(m) for m in dep_graph.values()]


def dep_graph_from_list(data: List[Dict[str, Any]]) -> DepGraph:
    """Rebuild a graph from ``dep_graph_to_list`` output."""
    return DepGraph(module_from_dict(m) for m in data)
