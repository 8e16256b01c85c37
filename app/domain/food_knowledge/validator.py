"""Semantic validator for food knowledge integrity.

The JSON schema guarantees shape; this validator checks meaning:
1) Referential integrity: restriction exclusions must name a known tag or food.
2) Derivative cycles: no ingredient may (transitively) derive from itself.
3) Alias consistency: an alias shared by two dishes must imply the same ingredients.
4) Empty entries: derivative lists, restrictions and identity exclusions must not be empty.

Dish ingredient tags are leaves (oil, salt, rice) and are not checked.
"""

from __future__ import annotations

from typing import Any

from fact_nlp import label_forms, normalize_label


class FoodKnowledgeValidator:
    """Run semantic integrity checks over a loaded knowledge document."""

    def __init__(self, kb_data: dict[str, Any]):
        self.data = kb_data
        self.derivatives: dict[str, list[str]] = self._tag_map("ingredient_derivatives")
        self.components: dict[str, list[str]] = self._tag_map("ingredient_components")
        self.identities: dict[str, list[str]] = self._tag_map("identity_exclusions")
        foods = kb_data.get("foods") or {}
        self.foods: dict[str, dict[str, Any]] = {
            normalize_label(name): entry for name, entry in foods.items() if isinstance(entry, dict)
        }
        self.issues: list[str] = []

    def validate(self) -> list[str]:
        """Run all semantic checks."""
        self.check_referential_integrity()
        self.check_derivative_cycles()
        self.check_alias_consistency()
        self.check_empty_entries()
        return self.issues

    def _fail(self, msg: str) -> None:
        self.issues.append(msg)

    def _tag_map(self, section: str) -> dict[str, list[str]]:
        raw = self.data.get(section) or {}
        if not isinstance(raw, dict):
            return {}
        return {
            normalize_label(key): [normalize_label(item) for item in (values or []) if normalize_label(item)]
            for key, values in raw.items()
        }

    def _known_forms(self) -> set[str]:
        known: set[str] = set()
        labels: list[str] = []
        for base, phrases in self.derivatives.items():
            labels.append(base)
            labels.extend(phrases)
        for tag, parts in self.components.items():
            labels.append(tag)
            labels.extend(parts)
        for name, entry in self.foods.items():
            labels.append(name)
            labels.extend(entry.get("aliases") or [])
        for label in labels:
            known |= label_forms(label)
        return known

    def check_referential_integrity(self) -> None:
        """Ensure restriction exclusions refer to something the index can resolve."""
        known = self._known_forms()
        restrictions = self.data.get("dietary_restrictions") or {}
        for name, rule in sorted(restrictions.items()):
            if not isinstance(rule, dict):
                continue
            for tag in rule.get("excluded_ingredients") or []:
                if not label_forms(tag) & known:
                    self._fail(
                        f"INTEGRITY: Unknown ingredient '{normalize_label(tag)}' "
                        f"excluded by restriction '{normalize_label(name)}'"
                    )

        for identity, excluded in sorted(self.identities.items()):
            if identity in excluded:
                self._fail(f"INTEGRITY: Identity '{identity}' excludes itself")

    def check_derivative_cycles(self) -> None:
        """Detect ingredients that derive from themselves."""
        graph = {base: {p for p in phrases if p in self.derivatives} for base, phrases in self.derivatives.items()}

        state: dict[str, int] = {}  # 0=unvisited, 1=visiting, 2=visited
        stack: list[str] = []
        cycles: set[tuple[str, ...]] = set()

        def _canonical_rotation(nodes: list[str]) -> tuple[str, ...]:
            rotations = [tuple(nodes[i:] + nodes[:i]) for i in range(len(nodes))]
            return min(rotations)

        def dfs(node: str) -> None:
            state[node] = 1
            stack.append(node)
            for neighbor in sorted(graph.get(node, set())):
                if neighbor not in state:
                    dfs(neighbor)
                elif state[neighbor] == 1:
                    cycles.add(_canonical_rotation(stack[stack.index(neighbor) :]))
            stack.pop()
            state[node] = 2

        for node in sorted(graph):
            if node not in state:
                dfs(node)

        for cycle in sorted(cycles):
            loop = " -> ".join([*cycle, cycle[0]])
            self._fail(f"CYCLE: Derivative cycle detected: {loop}")

    def check_alias_consistency(self) -> None:
        """An alias shared by several dishes must carry the same ingredients."""
        owners: dict[str, list[tuple[str, frozenset[str]]]] = {}
        for name, entry in self.foods.items():
            ingredients = frozenset(normalize_label(tag) for tag in entry.get("ingredients") or [])
            for alias in {name, *(normalize_label(a) for a in entry.get("aliases") or [])}:
                owners.setdefault(alias, []).append((name, ingredients))

        for alias, dishes in sorted(owners.items()):
            if len({ingredients for _, ingredients in dishes}) > 1:
                names = ", ".join(sorted(name for name, _ in dishes))
                self._fail(f"ALIAS: '{alias}' names dishes with different ingredients: {names}")

    def check_empty_entries(self) -> None:
        for base, phrases in sorted(self.derivatives.items()):
            if not phrases:
                self._fail(f"DATA: Ingredient '{base}' has no derivatives")
        restrictions = self.data.get("dietary_restrictions") or {}
        for name, rule in sorted(restrictions.items()):
            if isinstance(rule, dict) and not rule.get("excluded_ingredients"):
                self._fail(f"DATA: Restriction '{normalize_label(name)}' excludes nothing")
        for identity, excluded in sorted(self.identities.items()):
            if not excluded:
                self._fail(f"DATA: Identity '{identity}' has no exclusions")
