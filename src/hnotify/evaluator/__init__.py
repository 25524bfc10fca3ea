"""Story evaluation: the notify/cache policy over a ranked list."""

from hnotify.evaluator.evaluator import StoryEvaluator
from hnotify.evaluator.models import (
    EvaluationResult,
    FetchFailurePolicy,
    ItemDecision,
)


__all__ = [
    "EvaluationResult",
    "FetchFailurePolicy",
    "ItemDecision",
    "StoryEvaluator",
]
