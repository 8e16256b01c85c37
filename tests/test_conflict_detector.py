"""Tests for conflict detection between relation facts.

Covers:
- Direct contradictions, ingredient conflicts and dietary implications
- Identity and belief rules, including settings toggles
- Temporal exemption, malformed input and same-fact updates
- Accumulation, idempotence, metrics and pairwise audits
"""

import pytest

from app.domain.conflict_rules import RELATION_ROLES, RelationRole, detect_conflicts, find_all_conflicts, role_of
from config.settings import ConflictSettings
from fact_schemas import ConflictSeverity, ConflictType, RelationFact, RelationStatus, RelationType


@pytest.fixture
def detect(kb):
    def _detect(new, existing, **kwargs):
        return detect_conflicts(new, existing, knowledge=kb, **kwargs)

    return _detect


# ============================================================================
# Role table
# ============================================================================

class TestRelationRoles:
    """Test the relation type to role mapping."""

    def test_every_relation_type_has_a_role(self):
        assert set(RELATION_ROLES) == set(RelationType)

    def test_food_and_sensitivity_roles(self):
        assert role_of(RelationType.LIKES) == RelationRole.PREFERENCE
        assert role_of(RelationType.REGULARLY_DOES) == RelationRole.CONSUMPTION
        assert role_of(RelationType.SENSITIVE_TO) == RelationRole.SENSITIVITY
        assert role_of(RelationType.HAS_SKILL) == RelationRole.UNRELATED
        assert role_of(None) == RelationRole.UNRELATED


# ============================================================================
# End-to-end scenarios
# ============================================================================

class TestScenarios:
    """Test the reference candidate/existing scenarios."""

    def test_likes_vs_dislikes_same_label(self, detect, make_fact):
        existing = make_fact("DISLIKES", "ice cream")
        conflicts = detect(make_fact("LIKES", "ice cream"), [existing])
        assert len(conflicts) == 1
        conflict = conflicts[0]
        assert conflict.type == ConflictType.DIRECT_CONTRADICTION
        assert conflict.severity == ConflictSeverity.CRITICAL
        assert conflict.related_relation_id == existing.id

    def test_sensitivity_vs_liked_food(self, detect, make_fact):
        conflicts = detect(make_fact("SENSITIVE_TO", "potato"), [make_fact("LIKES", "fries")])
        assert len(conflicts) == 1
        conflict = conflicts[0]
        assert conflict.type == ConflictType.INGREDIENT_CONFLICT
        assert conflict.severity == ConflictSeverity.HIGH
        assert "fries" in conflict.description
        assert "potato" in conflict.description
        assert conflict.reasoning == "fries contains potato"

    def test_vegan_vs_liked_cheese(self, detect, make_fact):
        conflicts = detect(make_fact("IS", "vegan"), [make_fact("LIKES", "cheese")])
        assert len(conflicts) == 1
        conflict = conflicts[0]
        assert conflict.type == ConflictType.LOGICAL_IMPLICATION
        assert conflict.severity == ConflictSeverity.HIGH
        assert conflict.description == 'Cannot like "cheese" while being vegan (Contains dairy (No animal products))'

    def test_drinks_milk_vs_lactose_intolerant(self, detect, make_fact):
        conflicts = detect(make_fact("REGULARLY_DOES", "drinks milk"), [make_fact("IS", "lactose intolerant")])
        assert len(conflicts) >= 1
        assert conflicts[0].type == ConflictType.LOGICAL_IMPLICATION

    def test_unrelated_likes(self, detect, make_fact):
        assert detect(make_fact("LIKES", "hiking"), [make_fact("LIKES", "nature")]) == []


# ============================================================================
# Rule details
# ============================================================================

class TestDirectContradiction:
    """Test opposing relation types on the same label."""

    @pytest.mark.parametrize(
        "left,right",
        [
            ("LIKES", "DISLIKES"),
            ("DISLIKES", "LIKES"),
            ("LIKES", "UNCOMFORTABLE_WITH"),
            ("WANTS_TO_ACHIEVE", "STRUGGLES_WITH"),
            ("STRUGGLES_WITH", "WANTS_TO_ACHIEVE"),
        ],
    )
    def test_opposing_types(self, detect, make_fact, left, right):
        conflicts = detect(make_fact(left, "Crowds"), [make_fact(right, "crowds")])
        assert ConflictType.DIRECT_CONTRADICTION in {c.type for c in conflicts}

    def test_label_normalization(self, detect, make_fact):
        conflicts = detect(make_fact("LIKES", "  Ice   CREAM "), [make_fact("DISLIKES", "ice cream")])
        assert [c.severity for c in conflicts] == [ConflictSeverity.CRITICAL]

    def test_different_labels(self, detect, make_fact):
        assert detect(make_fact("LIKES", "ice cream"), [make_fact("DISLIKES", "gelato")]) == []

    def test_same_type_same_label(self, detect, make_fact):
        assert detect(make_fact("LIKES", "ice cream"), [make_fact("LIKES", "ice cream")]) == []


class TestIngredientConflict:
    """Test sensitivity vs food preference rules."""

    def test_reverse_direction(self, detect, make_fact):
        conflicts = detect(make_fact("LIKES", "fries"), [make_fact("SENSITIVE_TO", "potato")])
        assert [c.type for c in conflicts] == [ConflictType.INGREDIENT_CONFLICT]

    def test_one_conflict_per_sensitized_ingredient(self, detect, make_fact):
        existing = [make_fact("SENSITIVE_TO", "wheat"), make_fact("SENSITIVE_TO", "dairy")]
        conflicts = detect(make_fact("LIKES", "pizza"), existing)
        assert len(conflicts) == 2
        assert {c.related_relation_id for c in conflicts} == {existing[0].id, existing[1].id}
        assert all(c.type == ConflictType.INGREDIENT_CONFLICT for c in conflicts)

    def test_regularly_does_is_critical(self, detect, make_fact):
        conflicts = detect(make_fact("REGULARLY_DOES", "eats peanut butter"), [make_fact("SENSITIVE_TO", "peanuts")])
        assert len(conflicts) == 1
        assert conflicts[0].severity == ConflictSeverity.CRITICAL
        assert conflicts[0].reasoning == "Health concern: peanut butter contains peanuts"

    @pytest.mark.parametrize("activity", ["works at the pizza place", "bakes bread"])
    def test_activity_mentioning_food_is_not_critical(self, detect, make_fact, activity):
        conflicts = detect(make_fact("REGULARLY_DOES", activity), [make_fact("SENSITIVE_TO", "wheat")])
        assert [(c.type, c.severity) for c in conflicts] == [
            (ConflictType.INGREDIENT_CONFLICT, ConflictSeverity.HIGH)
        ]
        assert conflicts[0].reasoning == f"{activity} contains wheat"
        assert conflicts[0].description.startswith(f'Cannot regularly "{activity}" while being sensitive to "wheat"')

    def test_known_food_without_verb_is_critical(self, detect, make_fact):
        conflicts = detect(make_fact("REGULARLY_DOES", "bread"), [make_fact("SENSITIVE_TO", "wheat")])
        assert [c.severity for c in conflicts] == [ConflictSeverity.CRITICAL]
        assert conflicts[0].reasoning == "Health concern: bread contains wheat"

    def test_prefers_over_uses_first_option(self, detect, make_fact):
        sensitivity = make_fact("UNCOMFORTABLE_WITH", "dairy")
        assert detect(make_fact("PREFERS_OVER", "cheese over tofu"), [sensitivity])
        assert detect(make_fact("PREFERS_OVER", "tofu over cheese"), [sensitivity]) == []

    def test_dislikes_is_not_a_food_preference(self, detect, make_fact):
        assert detect(make_fact("DISLIKES", "fries"), [make_fact("SENSITIVE_TO", "potato")]) == []

    def test_food_without_ingredient(self, detect, make_fact):
        assert detect(make_fact("LIKES", "salad"), [make_fact("SENSITIVE_TO", "potato")]) == []


class TestDietaryImplication:
    """Test restriction vs food preference rules."""

    def test_reverse_direction(self, detect, make_fact):
        conflicts = detect(make_fact("LIKES", "bacon"), [make_fact("IS", "Kosher")])
        assert [(c.type, c.severity) for c in conflicts] == [
            (ConflictType.LOGICAL_IMPLICATION, ConflictSeverity.HIGH)
        ]

    def test_compatible_food(self, detect, make_fact):
        assert detect(make_fact("LIKES", "tofu"), [make_fact("IS", "vegan")]) == []

    def test_non_restriction_identity(self, detect, make_fact):
        assert detect(make_fact("LIKES", "bacon"), [make_fact("IS", "nurse")]) == []

    def test_consumption_describes_food(self, detect, make_fact):
        conflicts = detect(make_fact("REGULARLY_DOES", "drinks milk"), [make_fact("IS", "lactose intolerant")])
        assert conflicts[0].description == (
            'Cannot regularly consume "milk" while being lactose intolerant (Contains milk (No dairy products))'
        )

    def test_reasoning_lists_violations(self, detect, make_fact):
        conflicts = detect(make_fact("LIKES", "omelette"), [make_fact("IS", "vegan")])
        assert conflicts[0].reasoning == 'Dietary restriction "vegan" excludes dairy, eggs'


class TestIdentityAndBeliefRules:
    """Test identity exclusions and opposing beliefs."""

    def test_exclusive_identities(self, detect, make_fact):
        conflicts = detect(make_fact("IS", "vegan"), [make_fact("IS", "vegetarian")])
        assert [(c.type, c.severity) for c in conflicts] == [
            (ConflictType.LOGICAL_IMPLICATION, ConflictSeverity.MEDIUM)
        ]
        assert conflicts[0].description == 'Cannot be both "vegan" and "vegetarian"'

    def test_opposing_beliefs(self, detect, make_fact):
        conflicts = detect(
            make_fact("BELIEVES", "not in astrology"), [make_fact("BELIEVES", "in astrology")]
        )
        assert [c.severity for c in conflicts] == [ConflictSeverity.MEDIUM]

    def test_agreeing_beliefs(self, detect, make_fact):
        assert detect(make_fact("BELIEVES", "in ghosts"), [make_fact("BELIEVES", "in ghosts")]) == []

    def test_identity_rules_can_be_disabled(self, detect, make_fact):
        settings = ConflictSettings(identity_rules_enabled=False)
        assert detect(make_fact("IS", "vegan"), [make_fact("IS", "vegetarian")], settings=settings) == []

    def test_belief_rules_can_be_disabled(self, detect, make_fact):
        settings = ConflictSettings(belief_rules_enabled=False)
        new = make_fact("BELIEVES", "not in astrology")
        assert detect(new, [make_fact("BELIEVES", "in astrology")], settings=settings) == []


# ============================================================================
# Exemptions and invariants
# ============================================================================

class TestExemptionsAndInvariants:
    """Test temporal exemption, malformed input and accumulation."""

    def test_past_identity_never_conflicts_with_current(self, detect, make_fact):
        past = make_fact("USED_TO_BE", "meat-eater", status=RelationStatus.PAST)
        assert detect(make_fact("IS", "vegan"), [past]) == []

    @pytest.mark.parametrize("new_status,old_status", [("current", "past"), ("past", "current")])
    def test_past_status_is_exempt_both_ways(self, detect, make_fact, new_status, old_status):
        new = make_fact("LIKES", "ice cream", status=new_status)
        old = make_fact("DISLIKES", "ice cream", status=old_status)
        assert detect(new, [old]) == []

    def test_used_to_be_counts_as_past(self, detect, make_fact):
        assert detect(make_fact("IS", "vegan"), [make_fact("USED_TO_BE", "vegetarian")]) == []

    def test_future_status_is_compared(self, detect, make_fact):
        assert detect(make_fact("LIKES", "cheese", status="future"), [make_fact("IS", "vegan")])

    @pytest.mark.parametrize("label", ["", "   ", None])
    def test_blank_candidate_label(self, detect, make_fact, label):
        assert detect(make_fact("LIKES", label), [make_fact("DISLIKES", "ice cream")]) == []

    def test_missing_candidate_type(self, detect, make_fact):
        candidate = RelationFact(subject_id="p1", object_label="ice cream")
        assert detect(candidate, [make_fact("DISLIKES", "ice cream")]) == []

    def test_blank_existing_label_skipped(self, detect, make_fact):
        assert detect(make_fact("SENSITIVE_TO", "potato"), [make_fact("LIKES", "  ")]) == []

    def test_update_of_same_fact_is_skipped(self, detect, make_fact):
        existing = make_fact("DISLIKES", "ice cream", id="r42")
        updated = make_fact("LIKES", "ice cream", id="r42")
        assert detect(updated, [existing]) == []

    def test_accumulates_across_rules_and_facts(self, detect, make_fact):
        existing = [
            make_fact("DISLIKES", "pizza"),
            make_fact("SENSITIVE_TO", "wheat"),
            make_fact("IS", "lactose intolerant"),
        ]
        conflicts = detect(make_fact("LIKES", "pizza"), existing)
        assert [c.type for c in conflicts] == [
            ConflictType.DIRECT_CONTRADICTION,
            ConflictType.INGREDIENT_CONFLICT,
            ConflictType.LOGICAL_IMPLICATION,
        ]

    def test_idempotent(self, detect, make_fact):
        new = make_fact("LIKES", "pizza")
        existing = [make_fact("SENSITIVE_TO", "wheat"), make_fact("IS", "vegan")]
        assert detect(new, existing) == detect(new, existing)

    def test_conflict_records_both_facts(self, detect, make_fact):
        new = make_fact("LIKES", "ice cream")
        old = make_fact("DISLIKES", "ice cream")
        conflict = detect(new, [old])[0]
        assert conflict.new_relation == new
        assert conflict.existing_relation == old
        assert conflict.auto_resolvable is False

    def test_metrics_counted(self, detect, make_fact, metrics):
        detect(make_fact("LIKES", "pizza"), [make_fact("SENSITIVE_TO", "wheat"), make_fact("DISLIKES", "pizza")])
        assert metrics.counter_total("conflicts.detected") == 2
        assert metrics.counter_value(
            "conflicts.detected", {"type": "direct_contradiction", "severity": "critical"}
        ) == 1

    def test_uses_default_knowledge(self, make_fact):
        conflicts = detect_conflicts(make_fact("SENSITIVE_TO", "potato"), [make_fact("LIKES", "hash browns")])
        assert len(conflicts) == 1


class TestFindAllConflicts:
    """Test the pairwise audit over one subject's facts."""

    def test_audit(self, kb, make_fact):
        facts = [
            make_fact("IS", "vegan"),
            make_fact("LIKES", "hiking"),
            make_fact("LIKES", "cheese"),
            make_fact("DISLIKES", "cheese"),
        ]
        conflicts = find_all_conflicts(facts, knowledge=kb)
        assert sorted(c.type.value for c in conflicts) == ["direct_contradiction", "logical_implication"]

    def test_empty_and_single(self, kb, make_fact):
        assert find_all_conflicts([], knowledge=kb) == []
        assert find_all_conflicts([make_fact("IS", "vegan")], knowledge=kb) == []
