"""Food knowledge repository port (interface)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping

from .models import DietRestrictionRule, FoodKnowledgeEntry


class FoodKnowledgeRepository(ABC):
    """Port for accessing the food/diet knowledge tables.

    Keys of every mapping are normalized labels (lower-case, single-spaced).
    Implementations must be read-only once constructed.
    """

    @property
    @abstractmethod
    def version(self) -> str:
        """Return the version identifier for this knowledge base."""
        ...

    @abstractmethod
    def foods(self) -> Mapping[str, FoodKnowledgeEntry]:
        """Dish name -> entry."""
        ...

    @abstractmethod
    def ingredient_derivatives(self) -> Mapping[str, tuple[str, ...]]:
        """Ingredient tag -> phrases for things made from it."""
        ...

    @abstractmethod
    def ingredient_components(self) -> Mapping[str, tuple[str, ...]]:
        """Ingredient tag -> component tags it always carries (milk -> lactose)."""
        ...

    @abstractmethod
    def restrictions(self) -> Mapping[str, DietRestrictionRule]:
        """Restriction name -> rule."""
        ...

    @abstractmethod
    def identity_exclusions(self) -> Mapping[str, tuple[str, ...]]:
        """Identity -> identities it cannot coexist with."""
        ...

    @abstractmethod
    def activity_verbs(self) -> tuple[str, ...]:
        """Leading verbs stripped from consumption labels ("drinks milk")."""
        ...
