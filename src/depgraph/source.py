"""Materialization of the module dependency graph.

Runs module resolution (or replays it from the lockfile), then derives the
lookups used by later stages: canonical repository names, extension usages
grouped by extension, and a unique name per used extension. Extensions are
not evaluated here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple, Union

from common.logging_utils import extra_context, is_debug_enabled, Timer

from .canonical import canonical_repo_name_lookup
from .extensions import UsageTable, extension_usages_by_id
from .labels import RepositoryName
from .models import AbridgedModule, DepGraph, ExtensionId, ModuleKey, RootModuleFile
from .naming import unique_extension_names
from .ports import NOT_READY, Environment, InputKey, Lockfile, NotReady, Resolver, Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DepGraphValue:
    """Published result of one materialization cycle."""
    dep_graph: DepGraph
    canonical_repo_name_lookup: Mapping[RepositoryName, ModuleKey]
    abridged_modules: Tuple[AbridgedModule, ...]
    extension_usages_table: UsageTable
    extension_unique_names: Mapping[str, ExtensionId]

    def __hash__(self) -> int:
        # Every other field is derived from the graph.
        return hash(self.dep_graph)


class DepGraphFunction:
    """Produces a ``DepGraphValue`` from the root module file.

    Args:
        resolver: Version selection, invoked only when the lockfile cannot be reused.
        lockfile: Store of the previously resolved graph.
    """

    def __init__(self, resolver: Resolver, lockfile: Lockfile):
        self._resolver = resolver
        self._lockfile = lockfile

    def compute(self, env: Environment) -> Union[DepGraphValue, NotReady]:
        """Run one cycle.

        Returns ``NOT_READY`` without side effects when any upstream value is
        missing; the caller re-enters once it is available.

        Raises:
            ExternalDepsError: resolution failed or an extension usage is invalid.
        """
        root = env.get_value(InputKey.ROOT_MODULE_FILE)
        if root is NOT_READY:
            return NOT_READY
        settings = env.get_value(InputKey.SETTINGS)
        if settings is NOT_READY:
            return NOT_READY

        dep_graph = self._load_dep_graph(root, settings, env)
        if dep_graph is NOT_READY:
            return NOT_READY

        with Timer() as t:
            lookup = canonical_repo_name_lookup(dep_graph)
            usages = extension_usages_by_id(dep_graph)
            names = unique_extension_names(usages)
        value = DepGraphValue(
            dep_graph=dep_graph,
            canonical_repo_name_lookup=lookup,
            abridged_modules=tuple(AbridgedModule.from_module(m) for m in dep_graph.values()),
            extension_usages_table=usages,
            extension_unique_names=names.by_name,
        )
        if is_debug_enabled(logger):
            logger.debug(
                "Dependency graph materialized",
                extra=extra_context(
                    event="function_exit",
                    component="depgraph",
                    action="compute",
                    outcome="success",
                    count=len(dep_graph),
                    extensions=len(names),
                    duration_ms=t.duration_ms(),
                ),
            )
        return value

    def _load_dep_graph(
        self, root: RootModuleFile, settings: Settings, env: Environment
    ) -> Union[DepGraph, NotReady]:
        """Reuse the locked graph when the root module is unchanged, else resolve."""
        dep_graph: Optional[DepGraph] = None
        if settings.enable_lockfile:
            record = self._lockfile.read()
            if record is NOT_READY:
                return NOT_READY
            if record is not None and record.module_file_hash == root.module_hash:
                logger.info("Module file unchanged; reusing dependency graph from lockfile.")
                dep_graph = record.module_dep_graph
            elif record is None:
                logger.debug("No lockfile present; resolving dependency graph.")
            else:
                logger.info("Module file changed since lockfile was written; resolving dependency graph.")

        if dep_graph is None:
            resolved = self._resolver.resolve(root, env)
            if resolved is NOT_READY:
                return NOT_READY
            dep_graph = resolved
            if settings.enable_lockfile:
                self._lockfile.write(root.module_hash, dep_graph)
                logger.info("Updated lockfile with %d modules.", len(dep_graph))
        return dep_graph
