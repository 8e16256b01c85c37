"""Behavioral roles of relation types.

Every :class:`RelationType` maps to exactly one role. The detector dispatches
on roles, never on raw types, so adding a relation type without classifying
it fails at import time.
"""

from __future__ import annotations

from enum import Enum

from fact_schemas import RelationType


class RelationRole(str, Enum):
    PREFERENCE = "preference"
    CONSUMPTION = "consumption"
    AVERSION = "aversion"
    SENSITIVITY = "sensitivity"
    IDENTITY = "identity"
    PAST_IDENTITY = "past_identity"
    BELIEF = "belief"
    UNRELATED = "unrelated"


RELATION_ROLES: dict[RelationType, RelationRole] = {
    RelationType.LIKES: RelationRole.PREFERENCE,
    RelationType.PREFERS_OVER: RelationRole.PREFERENCE,
    RelationType.REGULARLY_DOES: RelationRole.CONSUMPTION,
    RelationType.DISLIKES: RelationRole.AVERSION,
    RelationType.SENSITIVE_TO: RelationRole.SENSITIVITY,
    RelationType.UNCOMFORTABLE_WITH: RelationRole.SENSITIVITY,
    RelationType.IS: RelationRole.IDENTITY,
    RelationType.USED_TO_BE: RelationRole.PAST_IDENTITY,
    RelationType.BELIEVES: RelationRole.BELIEF,
    RelationType.KNOWS: RelationRole.UNRELATED,
    RelationType.ASSOCIATED_WITH: RelationRole.UNRELATED,
    RelationType.EXPERIENCED: RelationRole.UNRELATED,
    RelationType.HAS_SKILL: RelationRole.UNRELATED,
    RelationType.OWNS: RelationRole.UNRELATED,
    RelationType.HAS_IMPORTANT_DATE: RelationRole.UNRELATED,
    RelationType.FEARS: RelationRole.UNRELATED,
    RelationType.WANTS_TO_ACHIEVE: RelationRole.UNRELATED,
    RelationType.STRUGGLES_WITH: RelationRole.UNRELATED,
    RelationType.CARES_FOR: RelationRole.UNRELATED,
    RelationType.DEPENDS_ON: RelationRole.UNRELATED,
}

_missing = set(RelationType) - set(RELATION_ROLES)
if _missing:
    raise RuntimeError(f"Relation types without a conflict role: {sorted(t.value for t in _missing)}")

# Pairs that contradict each other when they share an object label.
OPPOSING_TYPES: frozenset[frozenset[RelationType]] = frozenset(
    {
        frozenset({RelationType.LIKES, RelationType.DISLIKES}),
        frozenset({RelationType.LIKES, RelationType.UNCOMFORTABLE_WITH}),
        frozenset({RelationType.WANTS_TO_ACHIEVE, RelationType.STRUGGLES_WITH}),
    }
)

FOOD_ROLES = frozenset({RelationRole.PREFERENCE, RelationRole.CONSUMPTION})


def role_of(relation_type: RelationType | None) -> RelationRole:
    if relation_type is None:
        return RelationRole.UNRELATED
    return RELATION_ROLES[relation_type]


def are_opposing(left: RelationType | None, right: RelationType | None) -> bool:
    if left is None or right is None:
        return False
    return frozenset({left, right}) in OPPOSING_TYPES
