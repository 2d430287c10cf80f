"""modgraph - materialize a module dependency graph and name its extensions.

Reads the root module file, reuses the lockfile when the module file is
unchanged (or replays the resolved graph file otherwise), and reports the
modules, the canonical repository lookup, the extension usages grouped by
extension and the unique name of every used extension.

    Returns:
        int: Exit code
"""
import json
import logging
import os
import sys
from typing import Any, Dict

from args import parse_args
from cli_config import ConfigError, build_settings, load_config_file
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import ExitCodes
from depgraph.errors import ExternalDepsError, GraphInvariantError
from depgraph.ports import NOT_READY, InputKey, StaticEnvironment
from depgraph.source import DepGraphFunction, DepGraphValue
from graphlock import JsonLockfile
from resolution import StaticResolver, load_root_module_file

logger = logging.getLogger(__name__)


def build_report(value: DepGraphValue) -> Dict[str, Any]:
    """Convert a ``DepGraphValue`` into a JSON-serializable report."""
    names_by_id = {ext_id: name for name, ext_id in value.extension_unique_names.items()}
    extensions = []
    for ext_id in value.extension_usages_table.row_keys():
        usages = value.extension_usages_table.row(ext_id)
        extensions.append({
            "name": names_by_id[ext_id],
            "bzl_file": str(ext_id.bzl_file_label),
            "extension_name": ext_id.extension_name,
            "usages": [
                {"module": str(module_key), "location": str(usage.location)}
                for module_key, usage in usages.items()
            ],
        })
    return {
        "modules": [
            {"key": str(m.key), "name": m.name, "version": m.version}
            for m in value.abridged_modules
        ],
        "canonical_repo_names": {
            str(repo): str(key) for repo, key in value.canonical_repo_name_lookup.items()
        },
        "extensions": extensions,
    }


def export_json(report: Dict[str, Any], path: str) -> None:
    """Write the report to ``path``, or to stdout when no path is given."""
    if not path:
        json.dump(report, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return
    try:
        with open(path, "w", encoding="utf-8") as file:
            json.dump(report, file, indent=2)
        logging.info("JSON file created successfully: %s", path)
    except OSError as e:
        logging.error("Error writing JSON file: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def run(args) -> int:
    """Run one materialization cycle for parsed CLI arguments; return the exit code."""
    try:
        settings = build_settings(args, load_config_file(args.CONFIG))
    except ConfigError as e:
        logging.error("%s", e)
        return ExitCodes.FILE_ERROR.value

    lockfile_path = settings.lockfile_path
    if not os.path.isabs(lockfile_path):
        lockfile_path = os.path.join(os.path.dirname(os.path.abspath(args.MODULE_FILE)), lockfile_path)

    try:
        root = load_root_module_file(args.MODULE_FILE)
    except OSError as e:
        logging.error("Cannot read module file: %s", e)
        return ExitCodes.FILE_ERROR.value
    except ExternalDepsError as e:
        logging.error("%s", e)
        return ExitCodes.BUILD_CONFIG_ERROR.value

    env = StaticEnvironment({InputKey.ROOT_MODULE_FILE: root, InputKey.SETTINGS: settings})
    function = DepGraphFunction(StaticResolver(args.RESOLVED_GRAPH), JsonLockfile(lockfile_path))
    try:
        value = function.compute(env)
    except ExternalDepsError as e:
        logging.error("%s", e)
        return ExitCodes.BUILD_CONFIG_ERROR.value
    except GraphInvariantError as e:
        logging.critical("Internal error: %s", e)
        return ExitCodes.INTERNAL_ERROR.value

    if value is NOT_READY:
        logging.error("Dependency graph inputs are not available.")
        return ExitCodes.NOT_READY.value

    export_json(build_report(value), args.OUTPUT)
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )
    code = run(args)
    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(event="function_exit", component="cli", action="main", outcome=code)
        )
    sys.exit(code)


if __name__ == "__main__":
    main()
