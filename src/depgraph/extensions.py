"""Grouping of extension usages by their cross-module identity.

Each module writes the bzl file of an extension relative to its own
repository. Resolving those strings to canonical labels lets usages from
different modules that denote the same extension end up in the same row.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple

from common.logging_utils import extra_context, is_debug_enabled, Timer

from .errors import DuplicateExtensionUsageError, InvalidExtensionPathError, LabelSyntaxError
from .labels import LabelConverter
from .models import DepGraph, ExtensionId, ExtensionUsage, ModuleKey

logger = logging.getLogger(__name__)


class UsageTable:
    """Immutable table: row ``ExtensionId``, column ``ModuleKey``, cell ``ExtensionUsage``.

    Rows keep the order in which their id was first inserted and, within a
    row, columns keep insertion order.
    """

    def __init__(self, rows: Mapping[ExtensionId, Mapping[ModuleKey, ExtensionUsage]]):
        self._rows = MappingProxyType(
            {ext_id: MappingProxyType(dict(cells)) for ext_id, cells in rows.items()}
        )

    def row_keys(self) -> Tuple[ExtensionId, ...]:
        """Distinct extension ids in first-encounter order."""
        return tuple(self._rows)

    def row(self, extension_id: ExtensionId) -> Mapping[ModuleKey, ExtensionUsage]:
        """Usages of one extension keyed by the declaring module; empty if unused."""
        return self._rows.get(extension_id, MappingProxyType({}))

    def column(self, module_key: ModuleKey) -> Mapping[ExtensionId, ExtensionUsage]:
        """Usages declared by one module keyed by extension id."""
        return MappingProxyType(
            {ext_id: cells[module_key] for ext_id, cells in self._rows.items() if module_key in cells}
        )

    def get(self, extension_id: ExtensionId, module_key: ModuleKey) -> Optional[ExtensionUsage]:
        return self.row(extension_id).get(module_key)

    def cells(self) -> Iterator[Tuple[ExtensionId, ModuleKey, ExtensionUsage]]:
        for ext_id, cells in self._rows.items():
            for module_key, usage in cells.items():
                yield ext_id, module_key, usage

    def __contains__(self, extension_id: object) -> bool:
        return extension_id in self._rows

    def __len__(self) -> int:
        return sum(len(cells) for cells in self._rows.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UsageTable):
            return NotImplemented
        return list(self.cells()) == list(other.cells())

    def __hash__(self) -> int:
        return hash(tuple(self.cells()))

    def __repr__(self) -> str:
        return f"UsageTable(rows={len(self._rows)}, cells={len(self)})"


class UsageTableBuilder:
    """Accumulates cells and rejects a second cell for the same (row, column)."""

    def __init__(self) -> None:
        self._rows: Dict[ExtensionId, Dict[ModuleKey, ExtensionUsage]] = {}

    def put(self, extension_id: ExtensionId, module_key: ModuleKey, usage: ExtensionUsage) -> "UsageTableBuilder":
        cells = self._rows.setdefault(extension_id, {})
        existing = cells.get(module_key)
        if existing is not None:
            raise DuplicateExtensionUsageError(
                extension_id, module_key, existing.location, usage.location
            )
        cells[module_key] = usage
        return self

    def build(self) -> UsageTable:
        return UsageTable(self._rows)


def extension_usages_by_id(dep_graph: DepGraph) -> UsageTable:
    """Resolve every module's extension usages and group them by ``ExtensionId``.

    Labels are converted with each module's bazel-deps-only repo mapping, so a
    usage can never name a bzl file inside a repository generated by an
    extension.

    Raises:
        InvalidExtensionPathError: a usage's bzl file label cannot be converted.
        DuplicateExtensionUsageError: a module uses the same extension twice.
    """
    builder = UsageTableBuilder()
    with Timer() as t:
        for module in dep_graph.values():
            converter = LabelConverter(module.canonical_repo_name, module.repo_mapping)
            for usage in module.extension_usages:
                try:
                    label = converter.convert(usage.extension_bzl_file)
                except LabelSyntaxError as e:
                    raise InvalidExtensionPathError(usage.location, e) from e
                builder.put(ExtensionId(label, usage.extension_name), module.key, usage)
        table = builder.build()
    if is_debug_enabled(logger):
        logger.debug(
            "Indexed extension usages",
            extra=extra_context(
                event="decision",
                component="extensions",
                action="index_usages",
                count=len(table),
                extensions=len(table.row_keys()),
                duration_ms=t.duration_ms(),
            ),
        )
    return table
