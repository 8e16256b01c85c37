"""JSON Schema for validating the food/diet knowledge document."""

from __future__ import annotations

_STRING_ARRAY_SCHEMA = {"type": "array", "items": {"type": "string", "minLength": 1}}

_TAG_MAP_SCHEMA = {
    "type": "object",
    "additionalProperties": _STRING_ARRAY_SCHEMA,
}

_FOOD_ENTRY_SCHEMA = {
    "type": "object",
    "required": ["ingredients"],
    "properties": {
        "ingredients": {**_STRING_ARRAY_SCHEMA, "minItems": 1},
        "categories": _STRING_ARRAY_SCHEMA,
        "aliases": _STRING_ARRAY_SCHEMA,
    },
    "additionalProperties": False,
}

_RESTRICTION_SCHEMA = {
    "type": "object",
    "required": ["excluded_ingredients", "description"],
    "properties": {
        "excluded_ingredients": _STRING_ARRAY_SCHEMA,
        "excluded_categories": _STRING_ARRAY_SCHEMA,
        "description": {"type": "string"},
    },
    "additionalProperties": False,
}


KNOWLEDGE_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Food Knowledge Base",
    "type": "object",
    "required": [
        "version",
        "ingredient_derivatives",
        "foods",
        "dietary_restrictions",
    ],
    "properties": {
        "version": {"type": "string"},
        "ingredient_derivatives": _TAG_MAP_SCHEMA,
        "ingredient_components": _TAG_MAP_SCHEMA,
        "foods": {
            "type": "object",
            "minProperties": 1,
            "additionalProperties": _FOOD_ENTRY_SCHEMA,
        },
        "dietary_restrictions": {
            "type": "object",
            "additionalProperties": _RESTRICTION_SCHEMA,
        },
        "identity_exclusions": _TAG_MAP_SCHEMA,
        "activity_verbs": _STRING_ARRAY_SCHEMA,
    },
    "additionalProperties": True,
}


__all__ = ["KNOWLEDGE_SCHEMA"]
