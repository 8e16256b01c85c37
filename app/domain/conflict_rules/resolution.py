"""Conflict resolution helpers.

Turn detected conflicts into suggested actions, triage them for the review
queue, filter extraction batches and render markdown explanations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Sequence

from app.domain.food_knowledge.service import FoodKnowledgeBase, get_food_knowledge
from config.settings import ConflictSettings
from fact_schemas import (
    Conflict,
    ConflictSeverity,
    ConflictType,
    RelationFact,
    ResolutionStrategy,
)

from .detector import detect_conflicts


class ResolutionActionType(str, Enum):
    REJECT = "reject"
    REPLACE = "replace"
    MARK_AS_PAST = "mark_as_past"
    ADD_WITH_WARNING = "add_with_warning"
    REQUIRE_USER_REVIEW = "require_user_review"


@dataclass(frozen=True)
class ResolutionAction:
    action: ResolutionActionType
    description: str
    affected_relation_ids: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class ConflictTriage:
    """Conflicts split into blocking and auto-resolvable, with display warnings."""

    critical_conflicts: list[Conflict] = field(default_factory=list)
    resolvable_conflicts: list[Conflict] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    suggested_actions: list[ResolutionAction] = field(default_factory=list)


@dataclass(frozen=True)
class BlockedRelation:
    relation: RelationFact
    conflict: Conflict


@dataclass(frozen=True)
class FilterResult:
    safe: list[RelationFact] = field(default_factory=list)
    blocked: list[BlockedRelation] = field(default_factory=list)


_SEVERITY_HEADINGS = {
    ConflictSeverity.CRITICAL: "Critical",
    ConflictSeverity.HIGH: "High",
    ConflictSeverity.MEDIUM: "Medium",
    ConflictSeverity.LOW: "Low",
}

_RESOLUTION_TEXT = {
    ResolutionStrategy.REJECT_NEW: "Reject the new information",
    ResolutionStrategy.REPLACE_OLD: "Replace the old information with the new",
    ResolutionStrategy.MARK_OLD_AS_PAST: "Mark the old information as past/no longer current",
    ResolutionStrategy.ADD_BOTH_WITH_CONTEXT: "Keep both with additional context",
    ResolutionStrategy.USER_REVIEW_REQUIRED: "Requires user review to resolve",
}


def _describe(relation: Optional[RelationFact]) -> str:
    if relation is None or relation.relation_type is None:
        return "(unknown)"
    return f'{relation.relation_type.value} "{(relation.object_label or "").strip()}"'


def _affected_ids(conflict: Conflict) -> tuple[str, ...]:
    return (conflict.related_relation_id,) if conflict.related_relation_id else ()


def suggest_resolution(conflict: Conflict) -> ResolutionAction:
    strategy = conflict.suggested_resolution
    if strategy == ResolutionStrategy.REJECT_NEW:
        return ResolutionAction(
            action=ResolutionActionType.REJECT,
            description=f"Rejecting new relation due to conflict: {conflict.description}",
            affected_relation_ids=_affected_ids(conflict),
            warnings=(conflict.reasoning,),
        )
    if strategy == ResolutionStrategy.REPLACE_OLD:
        return ResolutionAction(
            action=ResolutionActionType.REPLACE,
            description="Replacing old relation with new information",
            affected_relation_ids=_affected_ids(conflict),
            warnings=(
                f"Old: {_describe(conflict.existing_relation)}",
                f"New: {_describe(conflict.new_relation)}",
            ),
        )
    if strategy == ResolutionStrategy.MARK_OLD_AS_PAST:
        return ResolutionAction(
            action=ResolutionActionType.MARK_AS_PAST,
            description="Marking old relation as past, adding new as current",
            affected_relation_ids=_affected_ids(conflict),
            warnings=("This person's situation has changed over time",),
        )
    if strategy == ResolutionStrategy.ADD_BOTH_WITH_CONTEXT:
        return ResolutionAction(
            action=ResolutionActionType.ADD_WITH_WARNING,
            description="Adding both relations with context note",
            warnings=(conflict.description, conflict.reasoning),
        )
    return ResolutionAction(
        action=ResolutionActionType.REQUIRE_USER_REVIEW,
        description=f"Conflict requires user review: {conflict.description}",
        affected_relation_ids=_affected_ids(conflict),
        warnings=(conflict.reasoning,),
    )


def process_conflicts(conflicts: Iterable[Conflict]) -> ConflictTriage:
    conflicts = list(conflicts)
    triage = ConflictTriage(
        critical_conflicts=[c for c in conflicts if c.is_critical and not c.auto_resolvable],
        resolvable_conflicts=[c for c in conflicts if c.auto_resolvable],
    )
    for conflict in triage.resolvable_conflicts:
        action = suggest_resolution(conflict)
        triage.suggested_actions.append(action)
        triage.warnings.extend(action.warnings)
    for conflict in triage.critical_conflicts:
        triage.warnings.append(f"CRITICAL: {conflict.description}")
        triage.warnings.append(f"   Reason: {conflict.reasoning}")
    return triage


def filter_conflicting_relations(
    new_relations: Iterable[RelationFact],
    existing_relations: Sequence[RelationFact],
    *,
    knowledge: Optional[FoodKnowledgeBase] = None,
    settings: Optional[ConflictSettings] = None,
) -> FilterResult:
    """Hold back relations with a critical or high conflict against their subject's facts."""
    kb = knowledge or get_food_knowledge()
    result = FilterResult()
    for relation in new_relations:
        subject_facts = [r for r in existing_relations if r.subject_id == relation.subject_id]
        blocker = next(
            (
                c
                for c in detect_conflicts(relation, subject_facts, knowledge=kb, settings=settings)
                if c.severity.rank >= ConflictSeverity.HIGH.rank
            ),
            None,
        )
        if blocker is None:
            result.safe.append(relation)
        else:
            result.blocked.append(BlockedRelation(relation=relation, conflict=blocker))
    return result


def merge_conflict_sources(
    ai_conflicts: Iterable[Mapping[str, Any]],
    local_conflicts: Sequence[Conflict],
) -> list[Conflict]:
    """Append AI-reported conflicts whose description is not already covered locally."""
    merged = list(local_conflicts)
    known = [c.description.lower() for c in local_conflicts]
    for reported in ai_conflicts:
        description = str(reported.get("description") or "").strip()
        if not description:
            continue
        if any(description.lower() in text for text in known):
            continue
        try:
            kind = ConflictType(str(reported.get("type") or "").strip().lower())
        except ValueError:
            kind = ConflictType.LOGICAL_IMPLICATION
        merged.append(
            Conflict(
                type=kind,
                severity=ConflictSeverity.HIGH,
                description=description,
                reasoning=str(reported.get("reasoning") or "Detected by AI analysis"),
            )
        )
        known.append(description.lower())
    return merged


def explain_conflict(conflict: Conflict) -> str:
    """Markdown explanation of one conflict for the review screen."""
    lines = [
        f"**{conflict.severity.value.upper()} Conflict Detected**",
        "",
        f"**Issue:** {conflict.description}",
        "",
        "**Why this is a problem:**",
        conflict.reasoning,
        "",
        "**Existing information:**",
        f"- {_describe(conflict.existing_relation)}",
        "",
        "**New information:**",
        f"- {_describe(conflict.new_relation)}",
        "",
        f"**Suggested Resolution:** {_RESOLUTION_TEXT[conflict.suggested_resolution]}",
    ]
    if conflict.auto_resolvable:
        lines.append("This can be automatically resolved.")
    else:
        lines.append("**User input needed** to resolve this conflict.")
    return "\n".join(lines) + "\n"


def create_conflict_summary(conflicts: Sequence[Conflict]) -> str:
    if not conflicts:
        return "No conflicts detected. All relations are consistent."

    lines = ["## Conflict Detection Summary", "", f"**Total conflicts found:** {len(conflicts)}", ""]
    for severity in sorted(ConflictSeverity, key=lambda s: s.rank, reverse=True):
        group = [c for c in conflicts if c.severity == severity]
        if not group:
            continue
        lines.append(f"### {_SEVERITY_HEADINGS[severity]} ({len(group)})")
        lines.extend(f"{number}. {c.description}" for number, c in enumerate(group, start=1))
        lines.append("")
    return "\n".join(lines)
