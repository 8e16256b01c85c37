"""Configuration settings using pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings


_REPO_ROOT = Path(__file__).resolve().parents[1]


def _resolve_repo_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (_REPO_ROOT / path).resolve()


class KnowledgeSettings(BaseSettings):
    """Location of the food/diet knowledge document.

    Relative paths are resolved against the repository root so the same
    setting works from tests, scripts and the application.
    """

    food_kb_path: Path = Field(
        default=Path("data/knowledge/food_knowledge_v1_0.json"),
        validation_alias=AliasChoices("FOOD_KNOWLEDGE_FILE", "FOOD_KB_PATH"),
    )

    model_config = {"extra": "ignore"}

    @model_validator(mode="after")
    def _resolve_paths(self) -> "KnowledgeSettings":
        self.food_kb_path = _resolve_repo_path(self.food_kb_path)
        return self


class ConflictSettings(BaseSettings):
    """Toggles for the optional conflict rules.

    Direct contradiction, ingredient and dietary rules are always on; the
    identity and belief heuristics can be switched off for noisy imports.
    """

    identity_rules_enabled: bool = True
    belief_rules_enabled: bool = True

    model_config = {"env_prefix": "CONFLICT_", "extra": "ignore"}
