# Food knowledge domain module
from .models import (
    DietRestrictionRule,
    FoodConflict,
    FoodKnowledgeEntry,
    KnowledgeSnapshot,
    RestrictionCheck,
)
from .repository import FoodKnowledgeRepository
from .service import (
    FoodKnowledgeBase,
    are_exclusive_identities,
    find_conflicting_foods,
    food_contains_ingredient,
    get_dietary_implications,
    get_food_knowledge,
    ingredients_of,
    is_dietary_restriction,
    is_food_compatible_with_restriction,
    reset_food_knowledge,
)
from .validator import FoodKnowledgeValidator

__all__ = [
    "DietRestrictionRule",
    "FoodConflict",
    "FoodKnowledgeBase",
    "FoodKnowledgeEntry",
    "FoodKnowledgeRepository",
    "FoodKnowledgeValidator",
    "KnowledgeSnapshot",
    "RestrictionCheck",
    "are_exclusive_identities",
    "find_conflicting_foods",
    "food_contains_ingredient",
    "get_dietary_implications",
    "get_food_knowledge",
    "ingredients_of",
    "is_dietary_restriction",
    "is_food_compatible_with_restriction",
    "reset_food_knowledge",
]
