"""Shared helpers: logging and schema validation."""
