"""Inputs of the dependency-graph stage: the root module file and the resolved graph."""

from .module_file import ModuleFileError, load_root_module_file
from .static import StaticResolver

__all__ = ["ModuleFileError", "StaticResolver", "load_root_module_file"]
