"""Precomputed normalized-phrase index over the food knowledge tables.

Every label is stored under each of its forms (normalized and singular), so
lookups never touch the raw JSON and never re-normalize table entries.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from fact_nlp import label_forms, normalize_label

from .repository import FoodKnowledgeRepository


class PhraseIndex:
    """Form-keyed lookup tables built once from a repository."""

    def __init__(self, repository: FoodKnowledgeRepository):
        self._synonyms: dict[str, set[str]] = defaultdict(set)
        self._dish_ingredients: dict[str, set[str]] = defaultdict(set)
        self._bases: dict[str, set[str]] = defaultdict(set)
        self._components: dict[str, set[str]] = defaultdict(set)

        for entry in repository.foods().values():
            names = {entry.name, *entry.aliases}
            for name in names:
                for form in label_forms(name):
                    self._synonyms[form].update(names)
                    self._dish_ingredients[form].update(entry.ingredients)

        for base, derivatives in repository.ingredient_derivatives().items():
            for form in label_forms(base):
                self._synonyms[form].add(base)
            for phrase in derivatives:
                for form in label_forms(phrase):
                    self._bases[form].add(base)

        for tag, components in repository.ingredient_components().items():
            for form in label_forms(tag):
                self._components[form].update(components)

        self._known = (
            set(self._synonyms) | set(self._bases) | set(self._components)
        )
        self._max_tokens = max((len(form.split()) for form in self._known), default=0)

    def is_known(self, text: str) -> bool:
        return bool(label_forms(text) & self._known)

    def expand(self, text: str) -> frozenset[str]:
        """Forms of *text* plus the forms of every dish name it is an alias of."""
        forms = set(label_forms(text))
        for form in list(forms):
            for name in self._synonyms.get(form, ()):
                forms |= label_forms(name)
        return frozenset(forms)

    def parents(self, forms: Iterable[str]) -> set[str]:
        """Tags one step up the containment graph: dish ingredients, derivative bases, components."""
        found: set[str] = set()
        for form in forms:
            found |= self._dish_ingredients.get(form, set())
            found |= self._bases.get(form, set())
            found |= self._components.get(form, set())
        return found

    def find_phrases(self, text: str) -> list[str]:
        """Known phrases appearing as whole words in *text*, longest match first."""
        tokens = normalize_label(text).split()
        found: list[str] = []
        position = 0
        while position < len(tokens):
            for size in range(min(self._max_tokens, len(tokens) - position), 0, -1):
                candidate = " ".join(tokens[position : position + size])
                if self.is_known(candidate):
                    found.append(candidate)
                    position += size
                    break
            else:
                position += 1
        return found

    @property
    def phrase_count(self) -> int:
        return len(self._known)
