"""JSON Schemas of module files and resolved graph files."""

_LOCATION = {
    "type": "object",
    "required": ["file", "line", "column"],
    "properties": {
        "file": {"type": "string"},
        "line": {"type": "integer", "minimum": 0},
        "column": {"type": "integer", "minimum": 0},
    },
}

_BAZEL_DEP = {
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "version": {"type": "string"},
        "repo_name": {"type": "string", "minLength": 1},
    },
}

_EXTENSION_USAGE = {
    "type": "object",
    "required": ["bzl_file", "name"],
    "properties": {
        "bzl_file": {"type": "string"},
        "name": {"type": "string", "minLength": 1},
        "location": _LOCATION,
    },
}

MODULE_DECLARATION_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "module": {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "version": {"type": "string"},
            },
        },
        "bazel_deps": {"type": "array", "items": _BAZEL_DEP},
        "extension_usages": {"type": "array", "items": _EXTENSION_USAGE},
    },
}

RESOLVED_GRAPH_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["modules"],
    "properties": {
        "modules": {
            "type": "array",
            "items": {
                "allOf": [
                    MODULE_DECLARATION_SCHEMA,
                    {
                        "required": ["module"],
                        "properties": {
                            "module": {
                                "required": ["name", "version"],
                                "properties": {"name": {"minLength": 1}},
                            },
                        },
                    },
                ]
            },
        },
    },
}
