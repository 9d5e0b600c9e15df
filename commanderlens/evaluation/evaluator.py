"""
Category evaluation.

Applies a CategoryRule to a deck's mainboard. Pure and synchronous: the
same cards always produce the same evaluation, and sparse input yields
low scores rather than errors.
"""

import logging
from collections.abc import Sequence

from commanderlens.evaluation.categories import CategoryRule
from commanderlens.evaluation.scoring import (
    build_findings,
    build_suggestions,
    compute_score,
    rating_for_score,
    ten_point_rating,
)
from commanderlens.models.card import CardAggregate
from commanderlens.models.evaluation import CardEvaluation, CategoryEvaluation, Importance

logger = logging.getLogger(__name__)

PLACEHOLDER_TARGET = 10


def classify_card(rule: CategoryRule, card: CardAggregate) -> CardEvaluation | None:
    """
    Decide whether a card fills a category role.

    Oracle tags are checked first, then staple names, then text rules.

    Returns:
        CardEvaluation, or None if the card does not match
    """
    if rule.exclude is not None and rule.exclude(card):
        return None

    tag = rule.matching_tag(card)
    if tag is not None:
        reasoning = rule.describe(card, tag) if rule.describe else f"Oracle tag: {tag}"
        return CardEvaluation(card, Importance.HIGH, reasoning, via_tag=True)

    name = card.name.lower()
    if any(staple in name for staple in rule.staples):
        return CardEvaluation(card, Importance.HIGH, f"{rule.name} staple")

    if rule.text_guard is not None and not rule.text_guard(card):
        return None

    for text_rule in rule.text_rules:
        if text_rule.matches(card):
            return CardEvaluation(card, text_rule.importance, text_rule.reasoning)

    return None


def _placeholder(rule: CategoryRule) -> CategoryEvaluation:
    score = compute_score(0, PLACEHOLDER_TARGET)
    return CategoryEvaluation(
        key=rule.key,
        name=rule.name,
        actual_count=0,
        target_count=PLACEHOLDER_TARGET,
        score=score,
        rating=rating_for_score(score),
        ten_point_rating=0,
        findings=[f"{rule.name} is not evaluated yet."],
        suggestions=[f"{rule.name} evaluation coming soon."],
        placeholder=True,
    )


def evaluate_category(
    rule: CategoryRule,
    mainboard: Sequence[CardAggregate],
    commanders: Sequence[CardAggregate] = (),
) -> CategoryEvaluation:
    """
    Evaluate one category over a deck.

    Args:
        rule: Category descriptor
        mainboard: Mainboard cards; these are classified and counted
        commanders: Commander cards, available to rule hooks as context

    Returns:
        CategoryEvaluation with quantity-weighted counts
    """
    if rule.placeholder:
        return _placeholder(rule)

    deck_size = sum(card.quantity for card in mainboard)
    target = rule.target(deck_size)

    matches: list[CardEvaluation] = []
    for card in mainboard:
        match = classify_card(rule, card)
        if match is not None:
            matches.append(match)

    actual = sum(match.card.quantity for match in matches)
    score = compute_score(actual, target)
    rating = rating_for_score(score)

    suggestions = build_suggestions(rule.name, rule.advice, actual, target, rating)
    if rule.extra_suggestions is not None:
        suggestions.extend(rule.extra_suggestions(matches, target, mainboard, commanders))

    logger.debug(
        "%s: %d/%d matched, score %d (%s)", rule.key, actual, target, score, rating.value
    )

    return CategoryEvaluation(
        key=rule.key,
        name=rule.name,
        actual_count=actual,
        target_count=target,
        score=score,
        rating=rating,
        ten_point_rating=ten_point_rating(actual, target),
        findings=build_findings(rule.name, actual, target, matches),
        cards=matches,
        suggestions=suggestions,
    )
