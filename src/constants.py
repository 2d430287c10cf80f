"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    BUILD_CONFIG_ERROR = 2
    INTERNAL_ERROR = 3
    NOT_READY = 4


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    # Prefix used for names derived from extensions declared in the main repository.
    MAIN_REPO_EXTENSION_PREFIX = "_main"
    # Separates the repo part from the extension name; reserved as a leading
    # character for extension-generated repository names.
    REPO_NAME_SEPARATOR = "~"
    # Version component used in canonical repo names for non-registry overrides.
    OVERRIDE_VERSION = "override"

    LOCKFILE_VERSION = 1
    LOCKFILE_NAME = "MODULE.lock.json"
    ENABLE_LOCKFILE = True

    ENV_LOG_LEVEL = "MODGRAPH_LOG_LEVEL"
    ENV_ENABLE_LOCKFILE = "MODGRAPH_ENABLE_LOCKFILE"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
