"""Category evaluation and deck-wide aggregation."""

from commanderlens.evaluation.aggregator import aggregate, format_deck_evaluation
from commanderlens.evaluation.categories import DEFAULT_RULES, CategoryRule, TextRule
from commanderlens.evaluation.evaluator import classify_card, evaluate_category
from commanderlens.evaluation.scoring import compute_score, rating_for_score, ten_point_rating

__all__ = [
    "DEFAULT_RULES",
    "CategoryRule",
    "TextRule",
    "aggregate",
    "classify_card",
    "compute_score",
    "evaluate_category",
    "format_deck_evaluation",
    "rating_for_score",
    "ten_point_rating",
]
