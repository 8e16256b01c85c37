"""Conflict and review-gate models.

Conflicts are ephemeral: they are produced by the detector for one candidate
fact, surfaced to the caller, and never persisted.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .relation import RelationFact


class ConflictType(str, Enum):
    DIRECT_CONTRADICTION = "direct_contradiction"
    INGREDIENT_CONFLICT = "ingredient_conflict"
    LOGICAL_IMPLICATION = "logical_implication"


class ConflictSeverity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Numeric order, higher is more severe."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    ConflictSeverity.LOW: 0,
    ConflictSeverity.MEDIUM: 1,
    ConflictSeverity.HIGH: 2,
    ConflictSeverity.CRITICAL: 3,
}


class ResolutionStrategy(str, Enum):
    REJECT_NEW = "reject_new"
    REPLACE_OLD = "replace_old"
    MARK_OLD_AS_PAST = "mark_old_as_past"
    ADD_BOTH_WITH_CONTEXT = "add_both_with_context"
    USER_REVIEW_REQUIRED = "user_review_required"


class ReviewDecision(str, Enum):
    """What the caller should do with the candidate fact."""

    AUTO_SAVE = "auto_save"
    PENDING_REVIEW = "pending_review"
    REJECT = "reject"


class Conflict(BaseModel):
    """A detected incompatibility between a candidate and an existing fact."""

    model_config = ConfigDict(frozen=True)

    type: ConflictType
    severity: ConflictSeverity
    description: str
    reasoning: str = ""
    related_relation_id: Optional[str] = None

    existing_relation: Optional[RelationFact] = None
    new_relation: Optional[RelationFact] = None

    suggested_resolution: ResolutionStrategy = ResolutionStrategy.USER_REVIEW_REQUIRED
    auto_resolvable: bool = False

    @property
    def is_critical(self) -> bool:
        return self.severity == ConflictSeverity.CRITICAL


class ValidationOutcome(BaseModel):
    """Review-gate result for one candidate fact."""

    valid: bool = True
    conflicts: List[Conflict] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    requires_user_review: bool = False

    @property
    def decision(self) -> ReviewDecision:
        if not self.valid:
            return ReviewDecision.REJECT
        if self.requires_user_review:
            return ReviewDecision.PENDING_REVIEW
        return ReviewDecision.AUTO_SAVE

    @classmethod
    def from_conflicts(cls, conflicts: List[Conflict]) -> "ValidationOutcome":
        return cls(
            valid=not any(c.is_critical for c in conflicts),
            conflicts=list(conflicts),
            warnings=[c.description for c in conflicts if not c.is_critical],
            requires_user_review=bool(conflicts),
        )


__all__ = [
    "Conflict",
    "ConflictSeverity",
    "ConflictType",
    "ResolutionStrategy",
    "ReviewDecision",
    "ValidationOutcome",
]
