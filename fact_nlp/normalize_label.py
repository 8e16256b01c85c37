"""Rule-based normalization helpers for relation object labels."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional

_WHITESPACE_RE = re.compile(r"\s+")
_TOKEN_RE = re.compile(r"[a-z0-9]+(?:['\-][a-z0-9]+)*")
_PREFERENCE_SPLIT = " over "

DEFAULT_ACTIVITY_VERBS: tuple[str, ...] = (
    "eats",
    "eat",
    "eating",
    "drinks",
    "drink",
    "drinking",
    "has",
    "having",
)

_NEGATIONS = frozenset({"not", "don't", "dont", "never", "against", "anti", "no"})


def normalize_label(text: Optional[str]) -> str:
    """Lower-case *text* and collapse surrounding/internal whitespace."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", str(text)).strip().lower()


def singularize(word: str) -> str:
    """Strip a common English plural suffix from the end of *word*.

    Only the trailing word of a phrase is affected ("hash browns" -> "hash brown").
    """
    if len(word) <= 3:
        return word
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith("oes"):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def label_forms(text: Optional[str]) -> frozenset[str]:
    """Return the normalized and singular forms of *text* (empty for blank input)."""
    normalized = normalize_label(text)
    if not normalized:
        return frozenset()
    return frozenset({normalized, singularize(normalized)})


def same_label(left: Optional[str], right: Optional[str]) -> bool:
    normalized = normalize_label(left)
    return bool(normalized) and normalized == normalize_label(right)


def tokenize(text: Optional[str]) -> List[str]:
    return _TOKEN_RE.findall(normalize_label(text))


def strip_activity(text: Optional[str], verbs: Iterable[str] = DEFAULT_ACTIVITY_VERBS) -> str:
    """Drop a leading activity verb: "drinks milk" -> "milk"."""
    normalized = normalize_label(text)
    head, _, rest = normalized.partition(" ")
    if rest and head in set(verbs):
        return rest.strip()
    return normalized


def extract_food_phrase(text: Optional[str], verbs: Iterable[str] = DEFAULT_ACTIVITY_VERBS) -> str:
    """Return the food named by a preference/consumption label.

    Handles activity phrasing ("eats peanut butter") and comparative
    preferences ("tea over coffee" -> "tea").
    """
    phrase = strip_activity(text, verbs)
    if _PREFERENCE_SPLIT in phrase:
        phrase = phrase.split(_PREFERENCE_SPLIT, 1)[0].strip()
    return phrase


def has_negation(text: Optional[str]) -> bool:
    return any(token in _NEGATIONS for token in tokenize(text))


def topic_of(text: Optional[str]) -> str:
    """Return the label with negation words removed."""
    return " ".join(token for token in tokenize(text) if token not in _NEGATIONS)


def are_opposing_statements(left: Optional[str], right: Optional[str]) -> bool:
    """Heuristic: exactly one side is negated and the topics overlap."""
    if has_negation(left) == has_negation(right):
        return False
    left_topic = topic_of(left)
    right_topic = topic_of(right)
    if not left_topic or not right_topic:
        return False
    return left_topic in right_topic or right_topic in left_topic


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
