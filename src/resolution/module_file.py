"""Loading of module declarations from YAML (or JSON) files.

Extension usages remember where they were declared. When a usage carries no
explicit ``location``, the line and column of its entry in the YAML document
are used.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import yaml

from common.schema_validate import SchemaError, validate
from depgraph.errors import ErrorCode, ExternalDepsError, LabelSyntaxError
from depgraph.labels import MAIN_REPOSITORY, RepositoryMapping
from depgraph.models import (
    ROOT,
    ExtensionUsage,
    Location,
    Module,
    NamedModuleKey,
    RootModuleFile,
    canonical_repo_name,
)

from .schemas import MODULE_DECLARATION_SCHEMA

logger = logging.getLogger(__name__)

Mark = Tuple[int, int]


class ModuleFileError(ExternalDepsError):
    """A module file or resolved graph file is malformed."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.BAD_MODULE, message)


@dataclass(frozen=True)
class BazelDep:
    """A direct module dependency and the apparent repo name it is visible as."""
    name: str
    version: str
    repo_name: str


@dataclass(frozen=True)
class ModuleDeclaration:
    """A module file's content, before version selection."""
    name: str
    version: str
    bazel_deps: Tuple[BazelDep, ...]
    extension_usages: Tuple[ExtensionUsage, ...]

    def repo_names(self) -> Dict[str, str]:
        """Apparent repo name -> module name of every direct dependency."""
        return {dep.repo_name: dep.name for dep in self.bazel_deps}


def _child(node: Optional[yaml.Node], key: str) -> Optional[yaml.Node]:
    if isinstance(node, yaml.MappingNode):
        for key_node, value_node in node.value:
            if isinstance(key_node, yaml.ScalarNode) and key_node.value == key:
                return value_node
    return None


def sequence_items(node: Optional[yaml.Node], key: str) -> List[yaml.Node]:
    """Item nodes of the sequence stored under ``key`` in a mapping node."""
    seq = _child(node, key)
    if isinstance(seq, yaml.SequenceNode):
        return list(seq.value)
    return []


def usage_marks(module_node: Optional[yaml.Node]) -> List[Mark]:
    """One-based (line, column) of every extension usage entry of a module node."""
    return [
        (item.start_mark.line + 1, item.start_mark.column + 1)
        for item in sequence_items(module_node, "extension_usages")
    ]


def parse_yaml(text: str, source: str) -> Tuple[Any, Optional[yaml.Node]]:
    """Load ``text`` as data and as a node tree (for positions).

    Raises:
        ModuleFileError: not valid YAML.
    """
    try:
        return yaml.safe_load(text), yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.YAMLError as e:
        raise ModuleFileError(f"Failed to parse {source}: {e}") from e


def parse_declaration(data: Dict[str, Any], source: str, marks: List[Mark]) -> ModuleDeclaration:
    """Build a ``ModuleDeclaration`` from schema-valid data."""
    header = data.get("module") or {}
    deps = []
    for dep in data.get("bazel_deps") or []:
        deps.append(
            BazelDep(
                name=dep["name"],
                version=str(dep.get("version", "")),
                repo_name=dep.get("repo_name", dep["name"]),
            )
        )
    usages = []
    for index, usage in enumerate(data.get("extension_usages") or []):
        if "location" in usage:
            loc = usage["location"]
            location = Location(loc["file"], loc["line"], loc["column"])
        elif index < len(marks):
            location = Location(source, *marks[index])
        else:
            location = Location(source, 0, 0)
        usages.append(ExtensionUsage(usage["bzl_file"], usage["name"], location))
    return ModuleDeclaration(
        name=str(header.get("name", "")),
        version=str(header.get("version", "")),
        bazel_deps=tuple(deps),
        extension_usages=tuple(usages),
    )


def load_root_module_file(path: str) -> RootModuleFile:
    """Read, hash and parse the root module file.

    Raises:
        OSError: the file cannot be read.
        ModuleFileError: the file is not a valid module declaration.
    """
    with open(path, "rb") as f:
        content = f.read()
    module_hash = hashlib.sha256(content).hexdigest()
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ModuleFileError(f"Module file {path} is not valid UTF-8: {e}") from e
    data, node = parse_yaml(text, path)
    if data is None:
        data = {}
    try:
        validate(MODULE_DECLARATION_SCHEMA, data, what=f"module file {path}")
    except SchemaError as e:
        raise ModuleFileError(str(e)) from e

    declaration = parse_declaration(data, path, usage_marks(node))
    try:
        mapping = {dep.repo_name: canonical_repo_name(NamedModuleKey(dep.name, dep.version)).name
                   for dep in declaration.bazel_deps}
        if declaration.name:
            mapping[declaration.name] = MAIN_REPOSITORY.name
        repo_mapping = RepositoryMapping.create(mapping, MAIN_REPOSITORY)
    except LabelSyntaxError as e:
        raise ModuleFileError(f"Invalid dependency in {path}: {e}") from e

    module = Module(
        key=ROOT,
        name=declaration.name,
        version=declaration.version,
        canonical_repo_name=MAIN_REPOSITORY,
        repo_mapping=repo_mapping,
        extension_usages=declaration.extension_usages,
    )
    logger.debug("Loaded root module file %s (hash %s)", path, module_hash)
    return RootModuleFile(module=module, module_hash=module_hash, bazel_deps=declaration.repo_names())
