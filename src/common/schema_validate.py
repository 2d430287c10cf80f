"""JSON Schema validation helpers for module, graph and lockfile documents.

This module wraps jsonschema Draft7 validation and reports the first error
with the path at which it occurred.
"""

from __future__ import annotations

from typing import Any, Dict

from jsonschema import Draft7Validator


class SchemaError(ValueError):
    """Raised when data fails to validate against a provided schema."""


def validate(schema: Dict[str, Any], data: Any, what: str = "input") -> None:
    """Validate ``data`` strictly and raise on the first error.

    Args:
        schema: Draft-07 JSON Schema dict.
        data:   Payload to validate.
        what:   Name of the document, used in the error message.
    """
    validator = Draft7Validator(schema)
    errs = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        msg = f"Invalid {what} at '{path}': {first.message}"
        raise SchemaError(msg)
