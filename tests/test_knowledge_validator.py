"""Tests for semantic knowledge validation and the release validation script."""

import importlib.util
import json

import pytest

from app.domain.food_knowledge.validator import FoodKnowledgeValidator

from .conftest import DEFAULT_KB_PATH, REPO_ROOT


@pytest.fixture
def shipped_document():
    return json.loads(DEFAULT_KB_PATH.read_text(encoding="utf-8"))


class TestFoodKnowledgeValidator:
    """Test integrity checks over knowledge documents."""

    def test_shipped_document_has_no_issues(self, shipped_document):
        assert FoodKnowledgeValidator(shipped_document).validate() == []

    def test_minimal_document_has_no_issues(self, minimal_kb_data):
        assert FoodKnowledgeValidator(minimal_kb_data).validate() == []

    def test_unknown_excluded_ingredient(self, minimal_kb_data):
        minimal_kb_data["dietary_restrictions"]["Lactose Intolerant"]["excluded_ingredients"].append("Unobtainium")
        issues = FoodKnowledgeValidator(minimal_kb_data).validate()
        assert issues == [
            "INTEGRITY: Unknown ingredient 'unobtainium' excluded by restriction 'lactose intolerant'"
        ]

    def test_plural_exclusion_resolves(self, minimal_kb_data):
        minimal_kb_data["dietary_restrictions"]["Lactose Intolerant"]["excluded_ingredients"].append("cheeses")
        assert FoodKnowledgeValidator(minimal_kb_data).validate() == []

    def test_identity_excluding_itself(self, minimal_kb_data):
        minimal_kb_data["identity_exclusions"]["night owl"].append("Night Owl")
        issues = FoodKnowledgeValidator(minimal_kb_data).validate()
        assert "INTEGRITY: Identity 'night owl' excludes itself" in issues

    def test_derivative_cycle(self, minimal_kb_data):
        minimal_kb_data["ingredient_derivatives"]["cheese"] = ["milk"]
        issues = FoodKnowledgeValidator(minimal_kb_data).validate()
        assert "CYCLE: Derivative cycle detected: cheese -> milk -> cheese" in issues

    def test_alias_with_different_ingredients(self, minimal_kb_data):
        minimal_kb_data["foods"]["cheese fries"] = {"ingredients": ["potato", "cheese"], "aliases": ["disco fries"]}
        issues = FoodKnowledgeValidator(minimal_kb_data).validate()
        assert issues == ["ALIAS: 'disco fries' names dishes with different ingredients: cheese fries, poutine"]

    def test_empty_entries(self, minimal_kb_data):
        minimal_kb_data["ingredient_derivatives"]["gravy"] = []
        minimal_kb_data["identity_exclusions"]["early bird"] = []
        minimal_kb_data["dietary_restrictions"]["fruitarian"] = {"excluded_ingredients": [], "description": "?"}
        issues = FoodKnowledgeValidator(minimal_kb_data).validate()
        assert "DATA: Ingredient 'gravy' has no derivatives" in issues
        assert "DATA: Identity 'early bird' has no exclusions" in issues
        assert "DATA: Restriction 'fruitarian' excludes nothing" in issues


def _load_script():
    path = REPO_ROOT / "ops" / "tools" / "validate_food_knowledge.py"
    spec = importlib.util.spec_from_file_location("validate_food_knowledge", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestValidateFoodKnowledgeScript:
    """Test the release validation entry point."""

    def test_shipped_document_passes(self):
        assert _load_script().main(["--kb", str(DEFAULT_KB_PATH), "--info"]) == 0

    def test_missing_file_fails(self, tmp_path):
        assert _load_script().main(["--kb", str(tmp_path / "missing.json")]) == 2

    def test_semantic_issue_fails(self, tmp_path, minimal_kb_data):
        minimal_kb_data["ingredient_derivatives"]["cheese"] = ["milk"]
        target = tmp_path / "food_knowledge_v1_0.json"
        target.write_text(json.dumps(minimal_kb_data), encoding="utf-8")
        assert _load_script().main(["--kb", str(target)]) == 2

    def test_schema_issue_fails(self, tmp_path, minimal_kb_data):
        del minimal_kb_data["dietary_restrictions"]
        target = tmp_path / "food_knowledge_v1_0.json"
        target.write_text(json.dumps(minimal_kb_data), encoding="utf-8")
        assert _load_script().main(["--kb", str(target)]) == 2
