"""Exception hierarchy for dependency-graph materialization."""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Failure categories surfaced to the caller."""
    BAD_MODULE = "bad_module"
    BAD_LOCKFILE = "bad_lockfile"
    RESOLUTION_FAILED = "resolution_failed"


class ExternalDepsError(Exception):
    """User-facing build configuration error.

    Attributes:
        code: Failure category.
        transient: False when replaying the same inputs cannot succeed.
    """

    def __init__(self, code: ErrorCode, message: str, transient: bool = False):
        super().__init__(message)
        self.code = code
        self.transient = transient


class InvalidExtensionPathError(ExternalDepsError):
    """An extension usage names a bzl file that cannot be canonicalized."""

    def __init__(self, location, cause: Exception):
        super().__init__(
            ErrorCode.BAD_MODULE,
            f"invalid label for module extension found at {location}: {cause}",
        )
        self.location = location
        self.cause = cause


class DuplicateExtensionUsageError(ExternalDepsError):
    """A module uses the same extension more than once."""

    def __init__(self, extension_id, module_key, first_location, second_location):
        super().__init__(
            ErrorCode.BAD_MODULE,
            f"module {module_key} uses extension {extension_id} more than once: "
            f"first at {first_location}, again at {second_location}",
        )
        self.extension_id = extension_id
        self.module_key = module_key
        self.first_location = first_location
        self.second_location = second_location


class ResolutionError(ExternalDepsError):
    """The resolver could not produce a dependency graph."""

    def __init__(self, message: str, transient: bool = False):
        super().__init__(ErrorCode.RESOLUTION_FAILED, message, transient)


class LockfileError(ExternalDepsError):
    """The lockfile exists but cannot be read back."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.BAD_LOCKFILE, message)


class LabelSyntaxError(ValueError):
    """Raised when a label string is malformed or not visible from its repository."""


class GraphInvariantError(RuntimeError):
    """An internal invariant of the dependency graph does not hold."""
