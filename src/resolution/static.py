"""Resolver that replays a graph selected by an external tool.

The resolved graph file lists every non-root module at its selected version,
in the order the graph should be iterated. Version selection itself is not
performed here: each module name must appear exactly once.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Tuple

from common.logging_utils import extra_context, is_debug_enabled, Timer
from common.schema_validate import SchemaError, validate
from depgraph.errors import LabelSyntaxError, ResolutionError
from depgraph.labels import MAIN_REPOSITORY, RepositoryMapping, RepositoryName
from depgraph.models import ROOT, DepGraph, Module, ModuleKey, NamedModuleKey, RootModuleFile, canonical_repo_name
from depgraph.ports import Environment, Resolver

from .module_file import ModuleDeclaration, ModuleFileError, parse_declaration, parse_yaml, sequence_items, usage_marks
from .schemas import RESOLVED_GRAPH_SCHEMA

logger = logging.getLogger(__name__)


def load_resolved_graph(path: str) -> List[ModuleDeclaration]:
    """Parse the resolved graph file into module declarations, in file order.

    Raises:
        ResolutionError: the file is missing or malformed.
    """
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except FileNotFoundError as e:
        raise ResolutionError(f"Resolved graph file not found: {path}") from e
    except UnicodeDecodeError as e:
        raise ResolutionError(f"Resolved graph file {path} is not valid UTF-8: {e}") from e
    except IOError as e:
        raise ResolutionError(f"Failed to read resolved graph file {path}: {e}") from e

    try:
        data, node = parse_yaml(text, path)
        validate(RESOLVED_GRAPH_SCHEMA, data, what=f"resolved graph {path}")
    except (ModuleFileError, SchemaError) as e:
        raise ResolutionError(str(e)) from e

    module_nodes = sequence_items(node, "modules")
    declarations = []
    for index, entry in enumerate(data["modules"]):
        module_node = module_nodes[index] if index < len(module_nodes) else None
        declarations.append(parse_declaration(entry, path, usage_marks(module_node)))
    return declarations


class StaticResolver(Resolver):
    """Builds the dependency graph from a resolved graph file.

    Args:
        graph_path: Path of the resolved graph file (YAML or JSON).
    """

    def __init__(self, graph_path: str):
        self.graph_path = graph_path
        self._declarations: Optional[List[ModuleDeclaration]] = None

    def _load(self) -> List[ModuleDeclaration]:
        if self._declarations is None:
            self._declarations = load_resolved_graph(self.graph_path)
        return self._declarations

    def resolve(self, root: RootModuleFile, env: Environment) -> DepGraph:
        """Return root followed by every listed module.

        Raises:
            ResolutionError: duplicate module names, or a dependency missing from the graph.
        """
        with Timer() as t:
            declarations = self._load()
            selected = self._selected_versions(root, declarations)
            modules = [self._root_module(root, selected)]
            for decl in declarations:
                key = NamedModuleKey(decl.name, decl.version)
                try:
                    repo_name = canonical_repo_name(key)
                except LabelSyntaxError as e:
                    raise ResolutionError(f"invalid repository name for module {key}: {e}") from e
                modules.append(
                    Module(
                        key=key,
                        name=decl.name,
                        version=decl.version,
                        canonical_repo_name=repo_name,
                        repo_mapping=self._mapping(key, repo_name, decl.name, decl.repo_names(), selected),
                        extension_usages=decl.extension_usages,
                    )
                )
            dep_graph = DepGraph(modules)
        if is_debug_enabled(logger):
            logger.debug(
                "Resolved dependency graph",
                extra=extra_context(
                    event="function_exit",
                    component="resolution",
                    action="resolve",
                    outcome="success",
                    count=len(dep_graph),
                    duration_ms=t.duration_ms(),
                ),
            )
        return dep_graph

    @staticmethod
    def _selected_versions(root: RootModuleFile, declarations: List[ModuleDeclaration]) -> Dict[str, NamedModuleKey]:
        selected: Dict[str, NamedModuleKey] = {}
        for decl in declarations:
            if decl.name == root.module.name and decl.name:
                raise ResolutionError(f"resolved graph lists the root module '{decl.name}'")
            if decl.name in selected:
                raise ResolutionError(
                    f"resolved graph lists module '{decl.name}' at versions "
                    f"{selected[decl.name].version} and {decl.version}"
                )
            selected[decl.name] = NamedModuleKey(decl.name, decl.version)
        return selected

    def _root_module(self, root: RootModuleFile, selected: Mapping[str, NamedModuleKey]) -> Module:
        return Module(
            key=ROOT,
            name=root.module.name,
            version=root.module.version,
            canonical_repo_name=MAIN_REPOSITORY,
            repo_mapping=self._mapping(ROOT, MAIN_REPOSITORY, root.module.name, root.bazel_deps, selected),
            extension_usages=root.module.extension_usages,
        )

    @staticmethod
    def _mapping(
        key: ModuleKey,
        repo_name: RepositoryName,
        module_name: str,
        deps: Mapping[str, str],
        selected: Mapping[str, NamedModuleKey],
    ) -> RepositoryMapping:
        """Repo mapping of direct module dependencies (and the module itself) only."""
        entries: List[Tuple[str, str]] = []
        if module_name:
            entries.append((module_name, repo_name.name))
        try:
            for apparent, dep_name in deps.items():
                dep_key = selected.get(dep_name)
                if dep_key is None:
                    raise ResolutionError(f"module {key} depends on '{dep_name}', which is not in the resolved graph")
                entries.append((apparent, canonical_repo_name(dep_key).name))
            return RepositoryMapping.create(dict(entries), repo_name)
        except LabelSyntaxError as e:
            raise ResolutionError(f"invalid repository name in module {key}: {e}") from e
