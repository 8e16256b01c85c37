"""Food knowledge query service.

``FoodKnowledgeBase`` answers containment and dietary-compatibility
questions over a :class:`FoodKnowledgeRepository`. Unknown foods and
restrictions never raise; they simply produce no match.
"""

from __future__ import annotations

from threading import Lock
from typing import Iterable, Optional

from fact_nlp import label_forms, normalize_label
from observability.logging_config import get_logger

from .models import (
    DietRestrictionRule,
    FoodConflict,
    KnowledgeSnapshot,
    RestrictionCheck,
)
from .phrase_index import PhraseIndex
from .repository import FoodKnowledgeRepository

logger = get_logger("food_knowledge")


class FoodKnowledgeBase:
    """Read-only food/diet reasoning over a knowledge repository."""

    def __init__(self, repository: FoodKnowledgeRepository):
        self._repo = repository
        self._index = PhraseIndex(repository)
        self._restrictions: dict[str, DietRestrictionRule] = {}
        for name, rule in repository.restrictions().items():
            for form in label_forms(name):
                self._restrictions.setdefault(form, rule)
        self._identity_exclusions: dict[str, frozenset[str]] = {}
        for identity, excluded in repository.identity_exclusions().items():
            self._identity_exclusions[normalize_label(identity)] = frozenset(
                normalize_label(item) for item in excluded
            )
        logger.info(
            "Food knowledge index built",
            extra={
                "kb_version": repository.version,
                "foods": len(repository.foods()),
                "phrases": self._index.phrase_count,
            },
        )

    @property
    def version(self) -> str:
        return self._repo.version

    @property
    def activity_verbs(self) -> tuple[str, ...]:
        return self._repo.activity_verbs()

    # ------------------------------------------------------------------
    # Containment
    # ------------------------------------------------------------------
    def food_contains_ingredient(self, food_text: Optional[str], ingredient_tag: Optional[str]) -> bool:
        """Return True if *food_text* is, derives from, or contains *ingredient_tag*.

        Known phrases are resolved exactly so that "soy milk" is not read as
        "milk". Text the index does not know is scanned for known phrases.
        """
        food = normalize_label(food_text)
        target = label_forms(ingredient_tag)
        if not food or not target:
            return False
        if label_forms(food) & target:
            return True
        return any(self._contains(phrase, target, set()) for phrase in self._resolve(food))

    def ingredients_of(self, food_text: Optional[str]) -> tuple[str, ...]:
        """All ingredient tags reachable from *food_text*, sorted."""
        found: set[str] = set()
        pending = [phrase for phrase in self._resolve(normalize_label(food_text))]
        while pending:
            current = pending.pop()
            for parent in self._index.parents(self._index.expand(current)):
                if parent not in found:
                    found.add(parent)
                    pending.append(parent)
        return tuple(sorted(found))

    def is_known_phrase(self, text: Optional[str]) -> bool:
        """True if *text* is itself a dish, alias or ingredient phrase of the index."""
        food = normalize_label(text)
        return bool(food) and self._index.is_known(food)

    def _resolve(self, food: str) -> list[str]:
        if not food:
            return []
        if self._index.is_known(food):
            return [food]
        return self._index.find_phrases(food)

    def _contains(self, food: str, target: frozenset[str], seen: set[str]) -> bool:
        forms = self._index.expand(food)
        if forms & target:
            return True
        for parent in sorted(self._index.parents(forms)):
            if parent in seen:
                continue
            seen.add(parent)
            if self._contains(parent, target, seen):
                return True
        return False

    # ------------------------------------------------------------------
    # Restrictions
    # ------------------------------------------------------------------
    def get_restriction(self, name: Optional[str]) -> Optional[DietRestrictionRule]:
        for form in label_forms(name):
            rule = self._restrictions.get(form)
            if rule is not None:
                return rule
        return None

    def is_dietary_restriction(self, label: Optional[str]) -> bool:
        return self.get_restriction(label) is not None

    def get_dietary_implications(self, restriction: Optional[str]) -> tuple[str, ...]:
        rule = self.get_restriction(restriction)
        return rule.excluded_ingredients if rule else ()

    def is_food_compatible_with_restriction(
        self, food_text: Optional[str], restriction: Optional[str]
    ) -> RestrictionCheck:
        rule = self.get_restriction(restriction)
        if rule is None:
            return RestrictionCheck(compatible=True)
        violating = tuple(
            tag for tag in rule.excluded_ingredients if self.food_contains_ingredient(food_text, tag)
        )
        if not violating:
            return RestrictionCheck(compatible=True)
        return RestrictionCheck(
            compatible=False,
            violating_ingredients=violating,
            reason=f"Contains {violating[0]} ({rule.description})",
        )

    def find_conflicting_foods(
        self, constraint: Optional[str], foods: Iterable[str]
    ) -> list[FoodConflict]:
        """Return every food in *foods* that violates *constraint*.

        *constraint* is either a restriction name ("vegan") or a bare
        ingredient tag treated as an allergy ("peanuts").
        """
        conflicts: list[FoodConflict] = []
        tag = normalize_label(constraint)
        if not tag:
            return conflicts
        rule = self.get_restriction(tag)
        for food in foods:
            if rule is not None:
                check = self.is_food_compatible_with_restriction(food, rule.name)
                if not check.compatible:
                    conflicts.append(FoodConflict(food=food, reason=check.reason or ""))
            elif self.food_contains_ingredient(food, tag):
                conflicts.append(FoodConflict(food=food, reason=f"Contains {tag}"))
        return conflicts

    # ------------------------------------------------------------------
    # Identities
    # ------------------------------------------------------------------
    def are_exclusive_identities(self, first: Optional[str], second: Optional[str]) -> bool:
        left = normalize_label(first)
        right = normalize_label(second)
        if not left or not right or left == right:
            return False
        return right in self._identity_exclusions.get(left, frozenset()) or left in self._identity_exclusions.get(
            right, frozenset()
        )

    def snapshot(self) -> KnowledgeSnapshot:
        tags = set(self._repo.ingredient_derivatives())
        for entry in self._repo.foods().values():
            tags.update(entry.ingredients)
        return KnowledgeSnapshot(
            version=self.version,
            food_count=len(self._repo.foods()),
            ingredient_count=len(tags),
            restrictions=tuple(self._repo.restrictions().values()),
            identities=tuple(sorted(self._identity_exclusions)),
        )


_default: FoodKnowledgeBase | None = None
_default_lock = Lock()


def get_food_knowledge() -> FoodKnowledgeBase:
    """Return the process-wide knowledge base, building it on first use."""
    global _default
    with _default_lock:
        if _default is None:
            from app.adapters.persistence.json_food_kb_adapter import JsonFoodKnowledgeAdapter

            _default = FoodKnowledgeBase(JsonFoodKnowledgeAdapter())
        return _default


def reset_food_knowledge() -> None:
    global _default
    with _default_lock:
        _default = None


def food_contains_ingredient(food_text: Optional[str], ingredient_tag: Optional[str]) -> bool:
    return get_food_knowledge().food_contains_ingredient(food_text, ingredient_tag)


def is_food_compatible_with_restriction(food_text: Optional[str], restriction: Optional[str]) -> RestrictionCheck:
    return get_food_knowledge().is_food_compatible_with_restriction(food_text, restriction)


def find_conflicting_foods(constraint: Optional[str], foods: Iterable[str]) -> list[FoodConflict]:
    return get_food_knowledge().find_conflicting_foods(constraint, foods)


def ingredients_of(food_text: Optional[str]) -> tuple[str, ...]:
    return get_food_knowledge().ingredients_of(food_text)


def get_dietary_implications(restriction: Optional[str]) -> tuple[str, ...]:
    return get_food_knowledge().get_dietary_implications(restriction)


def is_dietary_restriction(label: Optional[str]) -> bool:
    return get_food_knowledge().is_dietary_restriction(label)


def are_exclusive_identities(first: Optional[str], second: Optional[str]) -> bool:
    return get_food_knowledge().are_exclusive_identities(first, second)
