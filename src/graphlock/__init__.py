"""Persistence of the resolved dependency graph."""

from .store import InMemoryLockfile, JsonLockfile

__all__ = ["InMemoryLockfile", "JsonLockfile"]
