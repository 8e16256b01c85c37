# Conflict rules domain module
from .detector import detect_conflicts, find_all_conflicts
from .resolution import (
    BlockedRelation,
    ConflictTriage,
    FilterResult,
    ResolutionAction,
    ResolutionActionType,
    create_conflict_summary,
    explain_conflict,
    filter_conflicting_relations,
    merge_conflict_sources,
    process_conflicts,
    suggest_resolution,
)
from .roles import RELATION_ROLES, RelationRole, role_of

__all__ = [
    "BlockedRelation",
    "ConflictTriage",
    "FilterResult",
    "RELATION_ROLES",
    "RelationRole",
    "ResolutionAction",
    "ResolutionActionType",
    "create_conflict_summary",
    "detect_conflicts",
    "explain_conflict",
    "filter_conflicting_relations",
    "find_all_conflicts",
    "merge_conflict_sources",
    "process_conflicts",
    "role_of",
    "suggest_resolution",
]
