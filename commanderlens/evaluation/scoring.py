"""
Shared scoring for category evaluations.

All threshold math lives here so every category is scored the same way.

Two scales are in use and must not be mixed:
- 0-100 score with a named rating bucket, per category
- 0-10 rating, used by the deck-wide summary and its suggestions
"""

import math

from commanderlens.models.evaluation import CardEvaluation, Importance, Rating

# Copies beyond this multiple of the target add no score
SCORE_CAP_RATIO = 1.5

# Lower bound of each bucket, highest first
RATING_THRESHOLDS: tuple[tuple[int, Rating], ...] = (
    (90, Rating.EXCELLENT),
    (70, Rating.GOOD),
    (40, Rating.AVERAGE),
    (20, Rating.BELOW_AVERAGE),
)

WEAK_RATINGS = frozenset({Rating.POOR, Rating.BELOW_AVERAGE})


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def compute_score(actual: int, target: int) -> int:
    """
    Score a category from its match count.

    Linear up to the target, capped at 100. Matches beyond
    SCORE_CAP_RATIO x target are ignored.
    """
    if target <= 0:
        return 0
    effective = min(actual, target * SCORE_CAP_RATIO)
    return min(100, round_half_up(100 * effective / target))


def rating_for_score(score: int) -> Rating:
    """Map a 0-100 score to its rating bucket."""
    for threshold, rating in RATING_THRESHOLDS:
        if score >= threshold:
            return rating
    return Rating.POOR


def ten_point_rating(actual: int, target: int) -> int:
    """Rate a category 0-10: 10 once the target is met."""
    if target <= 0:
        return 0
    return min(10, round_half_up(10 * actual / target))


def build_findings(
    name: str,
    actual: int,
    target: int,
    cards: list[CardEvaluation],
) -> list[str]:
    """Diagnostic statements for a category."""
    label = name.lower()
    findings = [f"You have {actual} of the recommended {target} cards in this category."]

    if actual == 0:
        findings.append(f"No {label} cards found in the deck.")
        return findings

    high = sum(1 for c in cards if c.importance is Importance.HIGH)
    if high:
        findings.append(f"{high} high-confidence {label} cards identified.")

    tagged = sum(1 for c in cards if c.via_tag)
    findings.append(
        f"{tagged} matched by oracle tag, {len(cards) - tagged} by text heuristics."
    )
    return findings


def build_suggestions(
    name: str,
    advice: str,
    actual: int,
    target: int,
    rating: Rating,
) -> list[str]:
    """
    Count-driven suggestions for a category.

    Always in the same order: deficit, weakness, excess.
    """
    label = name.lower()
    suggestions: list[str] = []

    if actual < target:
        suggestions.append(
            f"Add {target - actual} more {label} cards to reach the recommended {target} "
            f"({advice})."
        )

    if rating in WEAK_RATINGS:
        suggestions.append(
            f"{name} is a significant weakness ({actual}/{target}). "
            f"Prioritize {advice} before other upgrades."
        )

    if target > 0 and actual >= target * SCORE_CAP_RATIO:
        suggestions.append(
            f"Very high {label} count ({actual}/{target}). "
            "Additional cards here add little; consider other roles."
        )

    return suggestions
