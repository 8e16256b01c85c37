"""Conflict detection between a candidate relation fact and existing facts.

Rules are evaluated independently for every existing fact and all matches
are accumulated:

A. Direct contradiction   opposing types (LIKES vs DISLIKES, WANTS_TO_ACHIEVE
                          vs STRUGGLES_WITH, ...) on the same label
B. Ingredient conflict    sensitivity vs a liked/consumed food containing it;
                          critical only when the food itself is eaten or drunk
C. Dietary implication    IS <restriction> vs a liked/consumed food it forbids
D. Identity exclusion     IS vs IS with mutually exclusive identities
E. Opposing beliefs       BELIEVES vs BELIEVES where exactly one is negated

Facts on different sides of the past/current boundary are never compared.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from app.domain.food_knowledge.service import FoodKnowledgeBase, get_food_knowledge
from config.settings import ConflictSettings
from fact_nlp import are_opposing_statements, extract_food_phrase, normalize_label, same_label, strip_activity
from fact_schemas import (
    Conflict,
    ConflictSeverity,
    ConflictType,
    RelationFact,
    RelationType,
    ResolutionStrategy,
)
from observability.logging_config import get_logger
from observability.metrics import get_metrics_client

from .roles import FOOD_ROLES, RelationRole, are_opposing, role_of

logger = get_logger("conflict_rules")

_FOOD_VERBS = {
    RelationType.LIKES: "like",
    RelationType.PREFERS_OVER: "prefer",
}


def detect_conflicts(
    new_relation: RelationFact,
    existing_relations: Iterable[RelationFact],
    *,
    knowledge: Optional[FoodKnowledgeBase] = None,
    settings: Optional[ConflictSettings] = None,
) -> list[Conflict]:
    """Return every conflict between *new_relation* and *existing_relations*.

    A malformed candidate (no type or blank label) yields no conflicts.
    """
    if not new_relation.is_well_formed:
        return []

    kb = knowledge or get_food_knowledge()
    cfg = settings or ConflictSettings()
    conflicts: list[Conflict] = []

    for existing in existing_relations:
        if not existing.is_well_formed:
            continue
        if new_relation.id is not None and existing.id == new_relation.id:
            continue
        if new_relation.is_past != existing.is_past:
            continue

        conflicts.extend(_check_pair(new_relation, existing, kb, cfg))

    if conflicts:
        metrics = get_metrics_client()
        for conflict in conflicts:
            metrics.incr(
                "conflicts.detected",
                {"type": conflict.type.value, "severity": conflict.severity.value},
            )
        logger.debug(
            "Conflicts detected",
            extra={
                "relation_type": new_relation.relation_type.value,
                "subject_id": new_relation.subject_id,
                "count": len(conflicts),
            },
        )
    return conflicts


def find_all_conflicts(
    relations: Sequence[RelationFact],
    *,
    knowledge: Optional[FoodKnowledgeBase] = None,
    settings: Optional[ConflictSettings] = None,
) -> list[Conflict]:
    """Audit one subject's facts: each fact is checked against every earlier one."""
    kb = knowledge or get_food_knowledge()
    cfg = settings or ConflictSettings()
    found: list[Conflict] = []
    for later in range(1, len(relations)):
        for earlier in range(later):
            found.extend(
                detect_conflicts(relations[later], [relations[earlier]], knowledge=kb, settings=cfg)
            )
    return found


def _check_pair(
    new: RelationFact,
    existing: RelationFact,
    kb: FoodKnowledgeBase,
    cfg: ConflictSettings,
) -> list[Conflict]:
    found: list[Conflict] = []

    contradiction = _direct_contradiction(new, existing)
    if contradiction:
        found.append(contradiction)

    ingredient = _ingredient_conflict(new, existing, kb)
    if ingredient:
        found.append(ingredient)

    dietary = _dietary_conflict(new, existing, kb)
    if dietary:
        found.append(dietary)

    if cfg.identity_rules_enabled:
        identity = _identity_conflict(new, existing, kb)
        if identity:
            found.append(identity)

    if cfg.belief_rules_enabled:
        belief = _belief_conflict(new, existing)
        if belief:
            found.append(belief)

    return found


def _conflict(
    new: RelationFact,
    existing: RelationFact,
    *,
    kind: ConflictType,
    severity: ConflictSeverity,
    description: str,
    reasoning: str,
) -> Conflict:
    return Conflict(
        type=kind,
        severity=severity,
        description=description,
        reasoning=reasoning,
        related_relation_id=existing.id,
        existing_relation=existing,
        new_relation=new,
        suggested_resolution=ResolutionStrategy.USER_REVIEW_REQUIRED,
        auto_resolvable=False,
    )


def _split_by_role(
    new: RelationFact, existing: RelationFact, role: RelationRole
) -> tuple[Optional[RelationFact], Optional[RelationFact]]:
    """Return ``(fact_with_role, food_fact)`` if one side has *role* and the other is a food preference."""
    if role_of(new.relation_type) == role and role_of(existing.relation_type) in FOOD_ROLES:
        return new, existing
    if role_of(existing.relation_type) == role and role_of(new.relation_type) in FOOD_ROLES:
        return existing, new
    return None, None


def _direct_contradiction(new: RelationFact, existing: RelationFact) -> Optional[Conflict]:
    if not are_opposing(new.relation_type, existing.relation_type):
        return None
    if not same_label(new.object_label, existing.object_label):
        return None
    return _conflict(
        new,
        existing,
        kind=ConflictType.DIRECT_CONTRADICTION,
        severity=ConflictSeverity.CRITICAL,
        description=(
            f'Contradiction: {new.relation_type.phrase} "{new.object_label.strip()}" '
            f'but {existing.relation_type.phrase} "{existing.object_label.strip()}"'
        ),
        reasoning="Direct contradiction: opposing relations cannot both hold for the same thing",
    )


def _ingredient_conflict(new: RelationFact, existing: RelationFact, kb: FoodKnowledgeBase) -> Optional[Conflict]:
    sensitivity, food_fact = _split_by_role(new, existing, RelationRole.SENSITIVITY)
    if sensitivity is None or food_fact is None:
        return None

    ingredient = normalize_label(sensitivity.object_label)
    food = extract_food_phrase(food_fact.object_label, kb.activity_verbs)
    if not food or not kb.food_contains_ingredient(food, ingredient):
        return None

    # Activities that only mention a food ("works at the pizza place") are not consumption.
    consumes = _is_consumption(food_fact, food, kb)
    trace = f"{food} contains {ingredient}"
    return _conflict(
        new,
        existing,
        kind=ConflictType.INGREDIENT_CONFLICT,
        severity=ConflictSeverity.CRITICAL if consumes else ConflictSeverity.HIGH,
        description=(
            f"Cannot {_food_action(food_fact, food, consumes)} "
            f'while being {sensitivity.relation_type.phrase} "{ingredient}" ({trace})'
        ),
        reasoning=f"Health concern: {trace}" if consumes else trace,
    )


def _is_consumption(food_fact: RelationFact, food: str, kb: FoodKnowledgeBase) -> bool:
    """True for REGULARLY_DOES facts that eat or drink the food itself."""
    if food_fact.relation_type != RelationType.REGULARLY_DOES:
        return False
    label = normalize_label(food_fact.object_label)
    return strip_activity(label, kb.activity_verbs) != label or kb.is_known_phrase(food)


def _food_action(food_fact: RelationFact, food: str, consumes: bool) -> str:
    label = food_fact.object_label.strip()
    if food_fact.relation_type == RelationType.REGULARLY_DOES:
        return f'regularly consume "{food}"' if consumes else f'regularly "{label}"'
    return f'{_FOOD_VERBS[food_fact.relation_type]} "{label}"'


def _dietary_conflict(new: RelationFact, existing: RelationFact, kb: FoodKnowledgeBase) -> Optional[Conflict]:
    identity, food_fact = _split_by_role(new, existing, RelationRole.IDENTITY)
    if identity is None or food_fact is None:
        return None

    rule = kb.get_restriction(identity.object_label)
    if rule is None:
        return None

    food = extract_food_phrase(food_fact.object_label, kb.activity_verbs)
    check = kb.is_food_compatible_with_restriction(food, rule.name)
    if check.compatible:
        return None

    return _conflict(
        new,
        existing,
        kind=ConflictType.LOGICAL_IMPLICATION,
        severity=ConflictSeverity.HIGH,
        description=(
            f"Cannot {_food_action(food_fact, food, _is_consumption(food_fact, food, kb))} "
            f"while being {rule.name} ({check.reason})"
        ),
        reasoning=f'Dietary restriction "{rule.name}" excludes {", ".join(check.violating_ingredients)}',
    )


def _identity_conflict(new: RelationFact, existing: RelationFact, kb: FoodKnowledgeBase) -> Optional[Conflict]:
    if new.relation_type != RelationType.IS or existing.relation_type != RelationType.IS:
        return None
    if not kb.are_exclusive_identities(new.object_label, existing.object_label):
        return None
    return _conflict(
        new,
        existing,
        kind=ConflictType.LOGICAL_IMPLICATION,
        severity=ConflictSeverity.MEDIUM,
        description=f'Cannot be both "{new.object_label.strip()}" and "{existing.object_label.strip()}"',
        reasoning="Mutually exclusive identities",
    )


def _belief_conflict(new: RelationFact, existing: RelationFact) -> Optional[Conflict]:
    if new.relation_type != RelationType.BELIEVES or existing.relation_type != RelationType.BELIEVES:
        return None
    if not are_opposing_statements(new.object_label, existing.object_label):
        return None
    return _conflict(
        new,
        existing,
        kind=ConflictType.LOGICAL_IMPLICATION,
        severity=ConflictSeverity.MEDIUM,
        description=f'Cannot believe both "{new.object_label.strip()}" and "{existing.object_label.strip()}"',
        reasoning="Mutually exclusive beliefs",
    )
