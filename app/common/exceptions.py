"""Exception hierarchy for the fact conflict engine.

Only knowledge loading raises; detection and validation report problems as
returned conflicts instead.
"""

from __future__ import annotations


class FactEngineError(Exception):
    """Base error for the fact conflict engine."""

    pass


class ValidationError(FactEngineError):
    """Schema or business rule validation failed."""

    pass


class KnowledgeBaseError(FactEngineError):
    """Knowledge base loading or lookup error."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)
