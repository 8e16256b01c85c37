"""Relation fact models.

A relation fact is a single statement about a person ("likes ice cream",
"is vegan"). Facts arrive from manual entry, quiz answers and AI extraction,
and are checked by the review gate before they are persisted.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class RelationType(str, Enum):
    KNOWS = "KNOWS"
    LIKES = "LIKES"
    DISLIKES = "DISLIKES"
    ASSOCIATED_WITH = "ASSOCIATED_WITH"
    EXPERIENCED = "EXPERIENCED"
    HAS_SKILL = "HAS_SKILL"
    OWNS = "OWNS"
    HAS_IMPORTANT_DATE = "HAS_IMPORTANT_DATE"
    IS = "IS"
    BELIEVES = "BELIEVES"
    FEARS = "FEARS"
    WANTS_TO_ACHIEVE = "WANTS_TO_ACHIEVE"
    STRUGGLES_WITH = "STRUGGLES_WITH"
    CARES_FOR = "CARES_FOR"
    DEPENDS_ON = "DEPENDS_ON"
    REGULARLY_DOES = "REGULARLY_DOES"
    PREFERS_OVER = "PREFERS_OVER"
    USED_TO_BE = "USED_TO_BE"
    SENSITIVE_TO = "SENSITIVE_TO"
    UNCOMFORTABLE_WITH = "UNCOMFORTABLE_WITH"

    @property
    def phrase(self) -> str:
        """Human phrasing, e.g. SENSITIVE_TO -> "sensitive to"."""
        return self.value.lower().replace("_", " ")


class RelationStatus(str, Enum):
    CURRENT = "current"
    PAST = "past"
    FUTURE = "future"
    ASPIRATION = "aspiration"


class RelationSource(str, Enum):
    MANUAL = "manual"
    AI_EXTRACTION = "ai_extraction"
    QUIZ = "quiz"
    QUESTION_MODE = "question_mode"
    VOICE_NOTE = "voice_note"
    IMPORT = "import"
    SEED = "seed"


class Intensity(str, Enum):
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"
    VERY_STRONG = "very_strong"


class RelationFact(BaseModel):
    """A statement about a person (the subject).

    ``relation_type`` and ``object_label`` are optional so that incomplete
    candidates can still be passed through the review gate; they simply
    produce no conflicts.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: Optional[str] = None
    subject_id: Optional[str] = None
    relation_type: Optional[RelationType] = None
    object_label: Optional[str] = None

    category: Optional[str] = None
    intensity: Optional[Intensity] = None
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    status: RelationStatus = RelationStatus.CURRENT
    source: RelationSource = RelationSource.MANUAL

    @field_validator("relation_type", mode="before")
    @classmethod
    def _upper_relation_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().upper()
            return value or None
        return value

    @field_validator("status", "source", "intensity", mode="before")
    @classmethod
    def _lower_enum_value(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        # Stored rows may carry a NULL status.
        if value is None and info.field_name == "status":
            return RelationStatus.CURRENT
        return value

    @property
    def is_past(self) -> bool:
        """True for facts describing a former state of the subject."""
        return self.status == RelationStatus.PAST or self.relation_type == RelationType.USED_TO_BE

    @property
    def is_well_formed(self) -> bool:
        return self.relation_type is not None and bool((self.object_label or "").strip())


__all__ = [
    "Intensity",
    "RelationFact",
    "RelationSource",
    "RelationStatus",
    "RelationType",
]
