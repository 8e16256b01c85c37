"""Shared utilities: exceptions, knowledge loading and console rendering."""

__all__ = [
    "exceptions",
    "knowledge",
    "knowledge_cli",
    "knowledge_schema",
    "logger",
]
