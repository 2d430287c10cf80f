"""Lockfile stores.

``JsonLockfile`` keeps the snapshot in a JSON file next to the root module
file; ``InMemoryLockfile`` keeps it in process, for embedding the stage in a
long-running evaluator.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Optional, Tuple

from common.schema_validate import SchemaError, validate
from constants import Constants
from depgraph.errors import GraphInvariantError, LabelSyntaxError, LockfileError
from depgraph.models import DepGraph
from depgraph.ports import Lockfile, LockfileRecord

from .codec import dep_graph_from_list, dep_graph_to_list
from .schema import LOCKFILE_SCHEMA

logger = logging.getLogger(__name__)


class InMemoryLockfile(Lockfile):
    """Lockfile held in memory; ``writes`` counts replacements."""

    def __init__(self, record: Optional[LockfileRecord] = None):
        self._record = record
        self.writes = 0

    def read(self) -> Optional[LockfileRecord]:
        return self._record

    def write(self, module_file_hash: str, dep_graph: DepGraph) -> None:
        self._record = LockfileRecord(module_file_hash, dep_graph)
        self.writes += 1


class JsonLockfile(Lockfile):
    """Lockfile stored as a JSON document.

    The last record read or written is kept and returned again as long as the
    file on disk is unchanged, so a graph written in one cycle is replayed as
    the very same object in the next.
    """

    def __init__(self, path: str):
        self.path = path
        self._record: Optional[LockfileRecord] = None
        self._stamp: Optional[Tuple[int, int]] = None

    def _file_stamp(self) -> Optional[Tuple[int, int]]:
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            return None
        return st.st_mtime_ns, st.st_size

    def read(self) -> Optional[LockfileRecord]:
        """Return the stored record, or None when the file is missing or from another format version.

        Raises:
            LockfileError: the file exists but is not a valid lockfile.
        """
        stamp = self._file_stamp()
        if stamp is None:
            logger.debug("Lockfile %s not found", self.path)
            return None
        if stamp == self._stamp and self._record is not None:
            return self._record

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise LockfileError(f"Failed to parse lockfile {self.path}: {e}") from e
        except UnicodeDecodeError as e:
            raise LockfileError(f"Failed to parse lockfile {self.path}: not valid UTF-8: {e}") from e
        except IOError as e:
            raise LockfileError(f"Failed to read lockfile {self.path}: {e}") from e

        if isinstance(data, dict) and data.get("lockFileVersion") != Constants.LOCKFILE_VERSION:
            logger.warning(
                "Lockfile %s has version %s, expected %s; ignoring it",
                self.path,
                data.get("lockFileVersion"),
                Constants.LOCKFILE_VERSION,
            )
            return None

        try:
            validate(LOCKFILE_SCHEMA, data, what="lockfile")
            dep_graph = dep_graph_from_list(data["moduleDepGraph"])
        except (SchemaError, LabelSyntaxError, GraphInvariantError) as e:
            raise LockfileError(f"Invalid lockfile {self.path}: {e}") from e

        self._record = LockfileRecord(data["moduleFileHash"], dep_graph)
        self._stamp = stamp
        return self._record

    def write(self, module_file_hash: str, dep_graph: DepGraph) -> None:
        """Replace the lockfile content atomically.

        Raises:
            LockfileError: the file cannot be written.
        """
        document = {
            "lockFileVersion": Constants.LOCKFILE_VERSION,
            "moduleFileHash": module_file_hash,
            "moduleDepGraph": dep_graph_to_list(dep_graph),
        }
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".lockfile-", suffix=".json", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise LockfileError(f"Failed to write lockfile {self.path}: {e}") from e

        self._record = LockfileRecord(module_file_hash, dep_graph)
        self._stamp = self._file_stamp()
        logger.debug("Wrote lockfile %s", self.path)
