"""Label normalization utilities shared by the knowledge base and conflict rules."""

from __future__ import annotations

from .normalize_label import (
    DEFAULT_ACTIVITY_VERBS,
    are_opposing_statements,
    extract_food_phrase,
    has_negation,
    label_forms,
    normalize_label,
    same_label,
    singularize,
    strip_activity,
    tokenize,
    topic_of,
)

__all__ = [
    "DEFAULT_ACTIVITY_VERBS",
    "are_opposing_statements",
    "extract_food_phrase",
    "has_negation",
    "label_forms",
    "normalize_label",
    "same_label",
    "singularize",
    "strip_activity",
    "tokenize",
    "topic_of",
]
