"""
Deck-wide evaluation.

Runs every category rule over the mainboard (commanders passed as context),
then derives deck scalars, statistics and the prioritized suggestion list.
Sideboard and companion entries are ignored throughout.
"""

import logging
import re
from collections.abc import Iterable, Sequence

from commanderlens.config import (
    HIGH_AVERAGE_CMC,
    MANA_SOURCE_TARGET,
    MIN_BOARD_WIPES,
    MIN_TAG_COVERAGE,
)
from commanderlens.evaluation.categories import DEFAULT_RULES, CategoryRule
from commanderlens.evaluation.evaluator import evaluate_category
from commanderlens.evaluation.scoring import round_half_up
from commanderlens.models.card import Board, CardAggregate
from commanderlens.models.evaluation import CategoryEvaluation, DeckEvaluation, DeckStatistics

logger = logging.getLogger(__name__)

# Categories averaged into the overall 0-10 rating
OVERALL_RATING_KEYS = ("ramp", "card_advantage", "interaction", "win_conditions")

STRENGTH_MIN_RATING = 8
WEAKNESS_MAX_RATING = 3

COLORS = ("W", "U", "B", "R", "G")
CARD_TYPES = (
    "creature",
    "instant",
    "sorcery",
    "artifact",
    "enchantment",
    "planeswalker",
    "battle",
    "land",
)
# CMC 7 and above share one curve bucket
CURVE_CAP = 7

_COLOR_SYMBOL = re.compile(r"\{([WUBRG])\}")


def _is_land(card: CardAggregate) -> bool:
    return "land" in card.type_line.lower()


def _ten_point(categories: dict[str, CategoryEvaluation], key: str) -> int:
    category = categories.get(key)
    return category.ten_point_rating if category else 0


def _actual(categories: dict[str, CategoryEvaluation], key: str) -> int:
    category = categories.get(key)
    return category.actual_count if category else 0


def compute_tag_coverage(mainboard: Sequence[CardAggregate]) -> float:
    """Percent of mainboard entries carrying at least one oracle tag."""
    if not mainboard:
        return 0.0
    tagged = sum(1 for card in mainboard if card.oracle_tags)
    return tagged / len(mainboard) * 100


def compute_statistics(
    cards: Sequence[CardAggregate],
    commanders: Sequence[CardAggregate],
) -> DeckStatistics:
    """
    Composition statistics over mainboard and commander cards.

    Args:
        cards: Mainboard and commander cards
        commanders: Commander cards, for color identity

    Returns:
        DeckStatistics with quantity-weighted counts
    """
    card_types = {card_type: 0 for card_type in CARD_TYPES}
    mana_curve = {cmc: 0 for cmc in range(CURVE_CAP + 1)}
    devotion = {color: 0 for color in COLORS}
    highest_cmc = 0

    for card in cards:
        type_line = card.type_line.lower()
        for card_type in CARD_TYPES:
            if card_type in type_line:
                card_types[card_type] += card.quantity

        for symbol in _COLOR_SYMBOL.findall(card.mana_cost):
            devotion[symbol] += card.quantity

        if _is_land(card):
            continue
        cmc = int(card.cmc)
        mana_curve[min(cmc, CURVE_CAP)] += card.quantity
        highest_cmc = max(highest_cmc, cmc)

    active = [count for count in devotion.values() if count > 0]
    color_balance = "balanced"
    if len(active) == 1:
        color_balance = "mono"
    elif len(active) > 1 and max(active) > min(active) * 2:
        color_balance = "skewed"

    identity: set[str] = set()
    for commander in commanders:
        identity |= commander.color_identity

    return DeckStatistics(
        card_types=card_types,
        mana_curve=mana_curve,
        highest_cmc=highest_cmc,
        devotion=devotion,
        color_balance=color_balance,
        commander_colors=[color for color in COLORS if color in identity],
    )


def build_deck_suggestions(
    categories: dict[str, CategoryEvaluation],
    mana_sources: int,
    land_count: int,
    average_cmc: float,
    tag_coverage: float,
) -> list[str]:
    """
    Deck-wide suggestions.

    Every condition is checked independently and in this fixed order:
    mana sources, ramp, card advantage, interaction, win conditions,
    curve, board wipes, tag coverage.
    """
    suggestions: list[str] = []

    if mana_sources < MANA_SOURCE_TARGET:
        suggestions.append(
            f"Consider adding more mana sources. You have {mana_sources} "
            f"(including {land_count} lands and {_actual(categories, 'ramp')} ramp spells), "
            "aim for 45-50."
        )

    if _ten_point(categories, "ramp") < 6:
        suggestions.append(
            "Your ramp package could be stronger. "
            "Consider adding more efficient mana acceleration."
        )

    if _ten_point(categories, "card_advantage") < 6:
        suggestions.append("You might need more card draw and card advantage engines.")

    if _ten_point(categories, "interaction") < 6:
        suggestions.append("Consider adding more interaction to deal with opponents' threats.")

    if _ten_point(categories, "win_conditions") < 5:
        suggestions.append(
            "Your deck might struggle to close out games. Consider adding more win conditions."
        )

    if average_cmc > HIGH_AVERAGE_CMC:
        suggestions.append(
            f"Your average CMC is {average_cmc:.2f}, which is quite high. "
            "Consider adding more low-cost spells."
        )

    if _actual(categories, "board_wipes") < MIN_BOARD_WIPES:
        suggestions.append("Consider adding more board wipes to handle go-wide strategies.")

    if tag_coverage < MIN_TAG_COVERAGE:
        suggestions.append(
            f"Oracle tag coverage is low ({tag_coverage:.0f}%). "
            "Some cards may not be properly categorized."
        )

    return suggestions


def aggregate(
    cards: Iterable[CardAggregate],
    rules: Sequence[CategoryRule] = DEFAULT_RULES,
) -> DeckEvaluation:
    """
    Evaluate a whole deck.

    Args:
        cards: Every card in the deck, any board
        rules: Category rules to run, in output order

    Returns:
        DeckEvaluation with one entry per rule, placeholders included
    """
    cards = list(cards)
    mainboard = [card for card in cards if card.board is Board.MAINBOARD]
    commanders = [card for card in cards if card.board is Board.COMMANDER]
    counted = mainboard + commanders

    total_cards = sum(card.quantity for card in counted)
    total_cmc = sum(card.cmc * card.quantity for card in counted)
    average_cmc = total_cmc / total_cards if total_cards > 0 else 0.0

    land_count = sum(card.quantity for card in mainboard if _is_land(card))

    categories = {rule.key: evaluate_category(rule, mainboard, commanders) for rule in rules}
    mana_sources = land_count + _actual(categories, "ramp")

    overall_rating = sum(_ten_point(categories, key) for key in OVERALL_RATING_KEYS) / len(
        OVERALL_RATING_KEYS
    )

    scored = [c for c in categories.values() if not c.placeholder]
    overall_score = (
        round_half_up(sum(c.score for c in scored) / len(scored)) if scored else 0
    )

    tag_coverage = compute_tag_coverage(mainboard)

    strengths = [
        f"{c.name}: {c.actual_count}/{c.target_count} ({c.ten_point_rating}/10)"
        for c in scored
        if c.ten_point_rating >= STRENGTH_MIN_RATING
    ]
    weaknesses = [
        f"{c.name}: {c.actual_count}/{c.target_count} ({c.ten_point_rating}/10)"
        for c in scored
        if c.ten_point_rating <= WEAKNESS_MAX_RATING
    ]

    evaluation = DeckEvaluation(
        categories=categories,
        total_cards=total_cards,
        average_cmc=average_cmc,
        land_count=land_count,
        mana_sources=mana_sources,
        overall_rating=overall_rating,
        overall_score=overall_score,
        tag_coverage=tag_coverage,
        suggestions=build_deck_suggestions(
            categories, mana_sources, land_count, average_cmc, tag_coverage
        ),
        strengths=strengths,
        weaknesses=weaknesses,
        statistics=compute_statistics(counted, commanders),
    )

    logger.info(
        "Evaluated %d cards: overall %.1f/10, score %d, tag coverage %.0f%%",
        total_cards,
        overall_rating,
        overall_score,
        tag_coverage,
    )
    return evaluation


def format_deck_evaluation(evaluation: DeckEvaluation) -> str:
    """Plain-text report of a deck evaluation."""
    lines = [
        f"Overall rating: {evaluation.overall_rating:.1f}/10 (score {evaluation.overall_score})",
        f"Cards: {evaluation.total_cards}  Lands: {evaluation.land_count}  "
        f"Mana sources: {evaluation.mana_sources}  Average CMC: {evaluation.average_cmc:.2f}",
        f"Oracle tag coverage: {evaluation.tag_coverage:.0f}%",
        "",
        "Categories:",
    ]

    for category in evaluation.categories.values():
        if category.placeholder:
            lines.append(f"  {category.name}: coming soon")
            continue
        lines.append(
            f"  {category.name}: {category.actual_count}/{category.target_count} "
            f"score {category.score} ({category.rating.value}), "
            f"{category.ten_point_rating}/10"
        )
        for suggestion in category.suggestions:
            lines.append(f"    - {suggestion}")

    for title, items in (
        ("Strengths", evaluation.strengths),
        ("Weaknesses", evaluation.weaknesses),
        ("Suggestions", evaluation.suggestions),
    ):
        if items:
            lines.append("")
            lines.append(f"{title}:")
            lines.extend(f"  - {item}" for item in items)

    curve = evaluation.statistics.mana_curve
    if any(curve.values()):
        lines.append("")
        lines.append(
            "Mana curve: "
            + "  ".join(
                f"{cmc}{'+' if cmc == CURVE_CAP else ''}:{count}" for cmc, count in curve.items()
            )
        )

    return "\n".join(lines)
