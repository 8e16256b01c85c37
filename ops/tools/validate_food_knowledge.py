#!/usr/bin/env python3
"""Validate a food knowledge release locally.

Backstops edits to the food/diet knowledge document:
- Parses the JSON and checks it against the Draft-07 knowledge schema
- Checks filename semver against the internal version
- Runs the semantic validator (referential integrity, derivative cycles, aliases)
- Builds the query service and resolves every dish to at least one ingredient tag
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.common.logger import get_logger  # noqa: E402

logger = get_logger("validate_food_knowledge")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser()
    ap.add_argument(
        "--kb",
        default=str(ROOT / "data/knowledge/food_knowledge_v1_0.json"),
        help="Path to food knowledge JSON (default: data/knowledge/food_knowledge_v1_0.json)",
    )
    ap.add_argument(
        "--allow-version-mismatch",
        action="store_true",
        help="Do not fail when the filename semver differs from the internal version.",
    )
    ap.add_argument(
        "--info",
        action="store_true",
        help="Print the knowledge summary tables after validation.",
    )
    return ap.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    kb_path = Path(args.kb)

    if not kb_path.is_file():
        logger.error("KB not found: %s", kb_path)
        return 2

    # 1) Basic JSON parse
    try:
        kb_json = json.loads(kb_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.error("KB is not valid JSON: %s (%s)", kb_path, exc)
        return 2

    if args.allow_version_mismatch:
        from app.common.knowledge import KNOWLEDGE_ALLOW_VERSION_MISMATCH_ENV_VAR

        os.environ[KNOWLEDGE_ALLOW_VERSION_MISMATCH_ENV_VAR] = "1"

    # 2) Schema + semver via the main loader
    try:
        from app.common.knowledge import get_knowledge

        get_knowledge(kb_path, force_reload=True)
    except Exception as exc:  # noqa: BLE001
        logger.error("KB failed knowledge schema validation: %s", exc)
        return 2

    # 3) Semantic validation
    logger.info("Running semantic validation...")
    from app.domain.food_knowledge.validator import FoodKnowledgeValidator

    issues = FoodKnowledgeValidator(kb_json).validate()
    if issues:
        logger.error("Found %d semantic issues in KB:", len(issues))
        for issue in issues:
            logger.error("  - %s", issue)
        return 2
    logger.info("OK: Semantic validation passed")

    # 4) Query service builds and every dish resolves
    try:
        from app.adapters.persistence.json_food_kb_adapter import JsonFoodKnowledgeAdapter
        from app.domain.food_knowledge.service import FoodKnowledgeBase

        kb = FoodKnowledgeBase(JsonFoodKnowledgeAdapter(kb_path))
    except Exception as exc:  # noqa: BLE001
        logger.error("KB adapter load failed: %s", exc)
        return 2

    unresolved = [name for name in kb_json.get("foods", {}) if not kb.ingredients_of(name)]
    if unresolved:
        logger.error("Dishes with no resolvable ingredients: %s", ", ".join(sorted(unresolved)))
        return 2

    if args.info:
        from rich.console import Console

        from app.common.knowledge_cli import print_knowledge_info

        print_knowledge_info(Console(), knowledge=kb)

    logger.info("OK: validate_food_knowledge passed (version %s)", kb.version)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
