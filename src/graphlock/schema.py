"""JSON Schema of the lockfile document."""

LOCATION_SCHEMA = {
    "type": "object",
    "required": ["file", "line", "column"],
    "properties": {
        "file": {"type": "string"},
        "line": {"type": "integer", "minimum": 0},
        "column": {"type": "integer", "minimum": 0},
    },
}

MODULE_SCHEMA = {
    "type": "object",
    "required": ["key", "repoName"],
    "properties": {
        "key": {
            "oneOf": [
                {
                    "type": "object",
                    "required": ["root"],
                    "properties": {"root": {"const": True}},
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "required": ["name", "version"],
                    "properties": {
                        "name": {"type": "string", "minLength": 1},
                        "version": {"type": "string"},
                    },
                    "additionalProperties": False,
                },
            ]
        },
        "name": {"type": "string"},
        "version": {"type": "string"},
        "repoName": {"type": "string"},
        "repoMapping": {
            "type": "object",
            "additionalProperties": {"type": "string"},
        },
        "extensionUsages": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["extensionBzlFile", "extensionName", "location"],
                "properties": {
                    "extensionBzlFile": {"type": "string"},
                    "extensionName": {"type": "string", "minLength": 1},
                    "location": LOCATION_SCHEMA,
                },
            },
        },
    },
}

LOCKFILE_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["lockFileVersion", "moduleFileHash", "moduleDepGraph"],
    "properties": {
        "lockFileVersion": {"type": "integer"},
        "moduleFileHash": {"type": "string"},
        "moduleDepGraph": {"type": "array", "items": MODULE_SCHEMA},
    },
}
