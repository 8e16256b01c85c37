"""Food knowledge adapter for the versioned JSON document.

Loads the food/diet knowledge document and implements the
FoodKnowledgeRepository interface. All keys and tags are normalized on load.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app.common.exceptions import KnowledgeBaseError
from app.common.knowledge import get_knowledge, validate_document
from app.domain.food_knowledge.models import DietRestrictionRule, FoodKnowledgeEntry
from app.domain.food_knowledge.repository import FoodKnowledgeRepository
from fact_nlp import DEFAULT_ACTIVITY_VERBS, normalize_label


def _tags(values: Any) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for value in values or ():
        tag = normalize_label(value)
        if tag:
            seen.setdefault(tag, None)
    return tuple(seen)


class JsonFoodKnowledgeAdapter(FoodKnowledgeRepository):
    """Adapter that reads ``food_knowledge_v*.json``.

    With ``raw_data`` the document is schema-validated in memory and no file
    is touched; otherwise it goes through the cached loader.
    """

    def __init__(self, data_path: str | Path | None = None, *, raw_data: dict | None = None):
        self._data_path = Path(data_path) if data_path else None
        self._version = ""
        self._foods: dict[str, FoodKnowledgeEntry] = {}
        self._derivatives: dict[str, tuple[str, ...]] = {}
        self._components: dict[str, tuple[str, ...]] = {}
        self._restrictions: dict[str, DietRestrictionRule] = {}
        self._identities: dict[str, tuple[str, ...]] = {}
        self._verbs: tuple[str, ...] = DEFAULT_ACTIVITY_VERBS

        if raw_data is not None:
            if not isinstance(raw_data, dict):
                raise KnowledgeBaseError("KB raw_data must be a dict")
            validate_document(raw_data)
            document = raw_data
        else:
            document = get_knowledge(self._data_path)

        self._load_data(document)

    @property
    def version(self) -> str:
        return self._version

    def _load_data(self, document: dict) -> None:
        self._version = str(document.get("version", "unknown"))
        self._derivatives = self._load_tag_map(document.get("ingredient_derivatives"))
        self._components = self._load_tag_map(document.get("ingredient_components"))
        self._identities = self._load_tag_map(document.get("identity_exclusions"))
        self._load_foods(document.get("foods") or {})
        self._load_restrictions(document.get("dietary_restrictions") or {})
        verbs = _tags(document.get("activity_verbs"))
        if verbs:
            self._verbs = verbs

    @staticmethod
    def _load_tag_map(section: Any) -> dict[str, tuple[str, ...]]:
        loaded: dict[str, tuple[str, ...]] = {}
        for key, values in (section or {}).items():
            name = normalize_label(key)
            if name:
                loaded[name] = _tags(values)
        return loaded

    def _load_foods(self, section: dict) -> None:
        for key, entry in section.items():
            name = normalize_label(key)
            if not name:
                continue
            self._foods[name] = FoodKnowledgeEntry(
                name=name,
                ingredients=_tags(entry.get("ingredients")),
                categories=_tags(entry.get("categories")),
                aliases=_tags(entry.get("aliases")),
            )

    def _load_restrictions(self, section: dict) -> None:
        for key, entry in section.items():
            name = normalize_label(key)
            if not name:
                continue
            self._restrictions[name] = DietRestrictionRule(
                name=name,
                excluded_ingredients=_tags(entry.get("excluded_ingredients")),
                excluded_categories=_tags(entry.get("excluded_categories")),
                description=str(entry.get("description", "")).strip(),
            )

    def foods(self) -> Mapping[str, FoodKnowledgeEntry]:
        return self._foods

    def ingredient_derivatives(self) -> Mapping[str, tuple[str, ...]]:
        return self._derivatives

    def ingredient_components(self) -> Mapping[str, tuple[str, ...]]:
        return self._components

    def restrictions(self) -> Mapping[str, DietRestrictionRule]:
        return self._restrictions

    def identity_exclusions(self) -> Mapping[str, tuple[str, ...]]:
        return self._identities

    def activity_verbs(self) -> tuple[str, ...]:
        return self._verbs
