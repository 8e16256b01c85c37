# Review gate domain module
from .batch import BatchItemResult, BatchReport, validate_batch
from .validator import coerce_relation, validate_relation

__all__ = [
    "BatchItemResult",
    "BatchReport",
    "coerce_relation",
    "validate_batch",
    "validate_relation",
]
