"""Food knowledge domain models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FoodKnowledgeEntry:
    """A dish or food and the ingredient tags it is made of."""

    name: str
    ingredients: tuple[str, ...]
    categories: tuple[str, ...] = ()
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class DietRestrictionRule:
    """A named dietary restriction and the ingredient tags it forbids."""

    name: str
    excluded_ingredients: tuple[str, ...]
    excluded_categories: tuple[str, ...]
    description: str


@dataclass(frozen=True)
class RestrictionCheck:
    """Result of checking one food against one restriction."""

    compatible: bool
    violating_ingredients: tuple[str, ...] = ()
    reason: str | None = None


@dataclass(frozen=True)
class FoodConflict:
    """A food from a candidate list that conflicts with a constraint."""

    food: str
    reason: str


@dataclass(frozen=True)
class KnowledgeSnapshot:
    """Summary of the loaded knowledge base for display."""

    version: str
    food_count: int
    ingredient_count: int
    restrictions: tuple[DietRestrictionRule, ...]
    identities: tuple[str, ...]
