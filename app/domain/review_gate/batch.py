"""Batch review gate for quiz imports and multi-fact extractions."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Optional

from app.common.exceptions import ValidationError
from app.domain.food_knowledge.service import FoodKnowledgeBase
from config.settings import ConflictSettings
from fact_schemas import RelationFact, ReviewDecision, ValidationOutcome
from observability.logging_config import get_logger

from .validator import RelationInput, coerce_existing, coerce_relation, validate_relation

logger = get_logger("review_gate")


@dataclass(frozen=True)
class BatchItemResult:
    index: int
    relation: Optional[RelationFact]
    outcome: Optional[ValidationOutcome]
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.outcome is None


@dataclass
class BatchReport:
    """Per-item outcomes plus the counters shown in the import summary."""

    saved: int = 0
    pending_review: int = 0
    rejected: int = 0
    failed: int = 0
    items: list[BatchItemResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.saved + self.pending_review + self.rejected + self.failed

    def accepted(self) -> list[RelationFact]:
        """Facts the caller should persist (auto-saved or pending review)."""
        return [
            item.relation
            for item in self.items
            if item.outcome is not None and item.relation is not None and item.outcome.valid
        ]


def validate_batch(
    candidates: Iterable[RelationInput],
    existing_relations: Iterable[RelationInput],
    *,
    knowledge: Optional[FoodKnowledgeBase] = None,
    settings: Optional[ConflictSettings] = None,
) -> BatchReport:
    """Validate candidates in order.

    Each candidate is checked against the existing facts of its own subject
    and against earlier candidates of the same batch that were accepted.
    Malformed candidates are counted as failed.
    """
    known: dict[Optional[str], list[RelationFact]] = defaultdict(list)
    for fact in coerce_existing(existing_relations):
        known[fact.subject_id].append(fact)

    report = BatchReport()
    for index, raw in enumerate(candidates):
        try:
            candidate = coerce_relation(raw)
        except ValidationError as exc:
            report.failed += 1
            report.items.append(BatchItemResult(index=index, relation=None, outcome=None, error=str(exc)))
            continue
        if not candidate.is_well_formed:
            report.failed += 1
            report.items.append(
                BatchItemResult(
                    index=index,
                    relation=candidate,
                    outcome=None,
                    error="Missing relation type or object label",
                )
            )
            continue

        outcome = validate_relation(
            candidate, known[candidate.subject_id], knowledge=knowledge, settings=settings
        )
        decision = outcome.decision
        if decision == ReviewDecision.REJECT:
            report.rejected += 1
        else:
            if decision == ReviewDecision.PENDING_REVIEW:
                report.pending_review += 1
            else:
                report.saved += 1
            known[candidate.subject_id].append(candidate)
        report.items.append(BatchItemResult(index=index, relation=candidate, outcome=outcome))

    logger.info(
        "Batch validated",
        extra={
            "total": report.total,
            "saved": report.saved,
            "pending_review": report.pending_review,
            "rejected": report.rejected,
            "failed": report.failed,
        },
    )
    return report
