from .json_food_kb_adapter import JsonFoodKnowledgeAdapter

__all__ = ["JsonFoodKnowledgeAdapter"]
