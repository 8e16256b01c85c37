"""Public schema exports for relation facts and conflicts."""

from .relation import Intensity, RelationFact, RelationSource, RelationStatus, RelationType
from .conflict import (
    Conflict,
    ConflictSeverity,
    ConflictType,
    ResolutionStrategy,
    ReviewDecision,
    ValidationOutcome,
)

__all__ = [
    "RelationFact",
    "RelationType",
    "RelationStatus",
    "RelationSource",
    "Intensity",
    "Conflict",
    "ConflictType",
    "ConflictSeverity",
    "ResolutionStrategy",
    "ReviewDecision",
    "ValidationOutcome",
]
