"""Pytest fixtures for the fact conflict engine tests."""

import copy
import itertools
from pathlib import Path

import pytest

from app.adapters.persistence.json_food_kb_adapter import JsonFoodKnowledgeAdapter
from app.common.knowledge import KNOWLEDGE_ALLOW_VERSION_MISMATCH_ENV_VAR, reset_cache
from app.domain.food_knowledge.service import FoodKnowledgeBase, reset_food_knowledge
from fact_schemas import RelationFact, RelationStatus, RelationType
from observability.metrics import RegistryMetricsClient, reset_metrics_client, set_metrics_client

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_KB_PATH = REPO_ROOT / "data" / "knowledge" / "food_knowledge_v1_0.json"

MINIMAL_KB = {
    "version": "1.0",
    "ingredient_derivatives": {
        "milk": ["cheese", "butter"],
        "potato": ["fries"],
    },
    "foods": {
        "  Poutine ": {
            "ingredients": ["Potato", "cheese", "gravy"],
            "categories": ["canadian"],
            "aliases": ["Disco Fries"],
        },
    },
    "dietary_restrictions": {
        "Lactose Intolerant": {
            "excluded_ingredients": ["milk"],
            "excluded_categories": ["dairy"],
            "description": "No dairy products",
        },
    },
    "identity_exclusions": {"night owl": ["early bird"]},
}


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Clear knowledge caches, metrics client and engine env vars around every test."""
    for name in (
        "FOOD_KNOWLEDGE_FILE",
        "FOOD_KB_PATH",
        KNOWLEDGE_ALLOW_VERSION_MISMATCH_ENV_VAR,
        "METRICS_BACKEND",
        "CONFLICT_IDENTITY_RULES_ENABLED",
        "CONFLICT_BELIEF_RULES_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_cache()
    reset_food_knowledge()
    reset_metrics_client()
    yield
    reset_cache()
    reset_food_knowledge()
    reset_metrics_client()


@pytest.fixture(scope="session")
def kb():
    """Query service over the shipped knowledge document."""
    return FoodKnowledgeBase(JsonFoodKnowledgeAdapter(DEFAULT_KB_PATH))


@pytest.fixture
def minimal_kb_data():
    return copy.deepcopy(MINIMAL_KB)


@pytest.fixture
def metrics():
    """Install an in-process metrics registry for the test."""
    client = RegistryMetricsClient()
    set_metrics_client(client)
    return client


@pytest.fixture
def make_fact():
    """Factory for relation facts with unique ids, defaulting to subject p1."""
    counter = itertools.count(1)

    def _make(relation_type, label, *, subject_id="p1", status=RelationStatus.CURRENT, **kwargs):
        kwargs.setdefault("id", f"r{next(counter)}")
        return RelationFact(
            subject_id=subject_id,
            relation_type=RelationType(relation_type) if isinstance(relation_type, str) else relation_type,
            object_label=label,
            status=status,
            **kwargs,
        )

    return _make
