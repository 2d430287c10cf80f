"""Argument parsing functionality for modgraph."""

import argparse
from constants import Constants

def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="modgraph",
        description=(
            "modgraph - Materialize the module dependency graph and name its extensions"
        ),
        add_help=True,
    )

    parser.add_argument("-m", "--module-file",
                        dest="MODULE_FILE",
                        help="Root module file (YAML or JSON)",
                        action="store", type=str,
                        required=True)
    parser.add_argument("-g", "--resolved-graph",
                        dest="RESOLVED_GRAPH",
                        help="Resolved graph file listing the selected modules (YAML or JSON)",
                        action="store", type=str,
                        required=True)

    lock_group = parser.add_mutually_exclusive_group()
    lock_group.add_argument("--lockfile",
                            dest="ENABLE_LOCKFILE",
                            help="Reuse and update the lockfile (default unless configured otherwise)",
                            action="store_const", const=True,
                            default=None)
    lock_group.add_argument("--no-lockfile",
                            dest="ENABLE_LOCKFILE",
                            help="Ignore the lockfile and always resolve",
                            action="store_const", const=False)
    parser.add_argument("--lockfile-path",
                        dest="LOCKFILE_PATH",
                        help=f"Lockfile location; relative paths are taken from the module file directory (default: {Constants.LOCKFILE_NAME})",
                        action="store",
                        type=str)

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to the JSON report (default: stdout)",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=Constants.LOG_LEVELS,
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
