"""Module dependency graph materialization."""

from .errors import (
    DuplicateExtensionUsageError,
    ExternalDepsError,
    GraphInvariantError,
    InvalidExtensionPathError,
    LabelSyntaxError,
    ResolutionError,
)
from .models import ROOT, DepGraph, ExtensionId, ExtensionUsage, Module, ModuleKey, NamedModuleKey
from .ports import NOT_READY, Environment, InputKey, Lockfile, LockfileRecord, Resolver, Settings
from .source import DepGraphFunction, DepGraphValue

__all__ = [
    "DepGraph",
    "DepGraphFunction",
    "DepGraphValue",
    "DuplicateExtensionUsageError",
    "Environment",
    "ExtensionId",
    "ExtensionUsage",
    "ExternalDepsError",
    "GraphInvariantError",
    "InputKey",
    "InvalidExtensionPathError",
    "LabelSyntaxError",
    "Lockfile",
    "LockfileRecord",
    "Module",
    "ModuleKey",
    "NOT_READY",
    "NamedModuleKey",
    "ROOT",
    "ResolutionError",
    "Resolver",
    "Settings",
]
