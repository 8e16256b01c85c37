"""Helpers for rendering knowledge metadata and conflicts in CLI contexts."""

from __future__ import annotations

from typing import Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from app.domain.food_knowledge.service import FoodKnowledgeBase, get_food_knowledge
from fact_schemas import Conflict, ConflictSeverity

from .knowledge import knowledge_hash

_SEVERITY_STYLES = {
    ConflictSeverity.CRITICAL: "bold red",
    ConflictSeverity.HIGH: "red",
    ConflictSeverity.MEDIUM: "yellow",
    ConflictSeverity.LOW: "dim",
}


def print_knowledge_info(console: Console, *, knowledge: Optional[FoodKnowledgeBase] = None) -> None:
    """Render the food knowledge metadata using Rich tables."""

    kb = knowledge or get_food_knowledge()
    snapshot = kb.snapshot()
    console.print(f"Knowledge version: {snapshot.version}")
    if knowledge is None:
        console.print(f"Knowledge SHA256: {knowledge_hash()}")
    console.print(f"Foods: {snapshot.food_count}  Ingredient tags: {snapshot.ingredient_count}")

    table = Table(title="Dietary restrictions", show_lines=False)
    table.add_column("Restriction", style="cyan", no_wrap=True)
    table.add_column("Excludes")
    table.add_column("Description")

    for rule in snapshot.restrictions:
        table.add_row(rule.name, ", ".join(rule.excluded_ingredients), rule.description)

    console.print(table)

    identity_display = ", ".join(snapshot.identities) or "-"
    console.print(f"Exclusive identities: {identity_display}")


def print_conflicts(console: Console, conflicts: Iterable[Conflict]) -> None:
    """Render detected conflicts as a table, most severe first."""

    ordered = sorted(conflicts, key=lambda c: c.severity.rank, reverse=True)
    if not ordered:
        console.print("No conflicts detected.")
        return

    table = Table(title=f"Conflicts ({len(ordered)})", show_lines=False)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Type", no_wrap=True)
    table.add_column("Description")
    table.add_column("Reasoning")

    for conflict in ordered:
        table.add_row(
            f"[{_SEVERITY_STYLES[conflict.severity]}]{conflict.severity.value}[/]",
            conflict.type.value,
            escape(conflict.description),
            escape(conflict.reasoning),
        )

    console.print(table)


__all__ = ["print_conflicts", "print_knowledge_info"]
