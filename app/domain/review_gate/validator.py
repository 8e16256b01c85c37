"""Review gate for a single candidate relation fact.

The gate turns detector output into a save decision. It never raises: a
candidate that cannot be parsed, or a fault inside detection, is logged and
treated as "no conflicts" so the caller's save transaction is not blocked.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from app.common.exceptions import ValidationError
from app.domain.conflict_rules.detector import detect_conflicts
from app.domain.food_knowledge.service import FoodKnowledgeBase
from config.settings import ConflictSettings
from fact_schemas import RelationFact, ValidationOutcome
from observability.logging_config import get_logger
from observability.metrics import get_metrics_client
from observability.timing import timed

logger = get_logger("review_gate")

RelationInput = Union[RelationFact, Mapping[str, Any]]


def coerce_relation(value: RelationInput) -> RelationFact:
    """Return *value* as a :class:`RelationFact`, validating mappings.

    Raises:
        ValidationError: if the payload is not a relation fact.
    """
    if isinstance(value, RelationFact):
        return value
    if isinstance(value, Mapping):
        try:
            return RelationFact.model_validate(dict(value))
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid relation fact ({exc.error_count()} error(s)): {exc}") from exc
    raise ValidationError(f"Unsupported relation payload: {type(value).__name__}")


def coerce_existing(values: Iterable[RelationInput]) -> list[RelationFact]:
    """Validate stored facts, skipping rows that do not parse."""
    facts: list[RelationFact] = []
    for value in values:
        try:
            facts.append(coerce_relation(value))
        except ValidationError as exc:
            logger.warning("Skipping unparseable existing relation", extra={"error": str(exc)})
    return facts


def validate_relation(
    new_relation: RelationInput,
    existing_relations: Iterable[RelationInput],
    *,
    knowledge: Optional[FoodKnowledgeBase] = None,
    settings: Optional[ConflictSettings] = None,
) -> ValidationOutcome:
    """Check a candidate fact against the subject's existing facts.

    ``valid`` is False only for critical conflicts; any conflict at all
    requires user review; non-critical descriptions become warnings.
    """
    with timed("review_gate.validate_relation") as timer:
        try:
            candidate = coerce_relation(new_relation)
            existing = coerce_existing(existing_relations)
            conflicts = detect_conflicts(candidate, existing, knowledge=knowledge, settings=settings)
        except ValidationError as exc:
            logger.warning("Candidate relation rejected by schema", extra={"error": str(exc)})
            outcome = ValidationOutcome()
        except Exception:  # noqa: BLE001
            logger.exception("Conflict detection failed; candidate passes without review")
            outcome = ValidationOutcome()
        else:
            outcome = ValidationOutcome.from_conflicts(conflicts)

    get_metrics_client().incr("review_gate.decision", {"decision": outcome.decision.value})
    logger.debug(
        "Relation validated",
        extra={
            "decision": outcome.decision.value,
            "conflicts": len(outcome.conflicts),
            "elapsed_ms": round(timer.elapsed_ms, 3),
        },
    )
    return outcome
