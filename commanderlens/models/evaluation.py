from dataclasses import dataclass, field
from enum import Enum

from commanderlens.models.card import CardAggregate


class Rating(str, Enum):
    """Ordinal rating bucket for a 0-100 category score."""

    POOR = "poor"
    BELOW_AVERAGE = "below-average"
    AVERAGE = "average"
    GOOD = "good"
    EXCELLENT = "excellent"


class Importance(str, Enum):
    """How confidently a card fills a category role."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class CardEvaluation:
    """A card matched into a category, with the reason it matched."""

    card: CardAggregate
    importance: Importance
    reasoning: str
    via_tag: bool = False


@dataclass
class CategoryEvaluation:
    """
    Result of evaluating one functional category.

    Attributes:
        key: Category identifier (e.g., "ramp")
        name: Display name (e.g., "Ramp")
        actual_count: Quantity-weighted number of matching cards
        target_count: Recommended number for this deck size
        score: 0-100 score
        rating: Bucket derived from score
        ten_point_rating: 0-10 rating used by the deck-wide summary
        findings: Short diagnostic statements
        cards: Matched cards with importance and reasoning
        suggestions: Improvement suggestions, deterministic order
        placeholder: True for categories that are not evaluated yet
    """

    key: str
    name: str
    actual_count: int
    target_count: int
    score: int
    rating: Rating
    ten_point_rating: int
    findings: list[str] = field(default_factory=list)
    cards: list[CardEvaluation] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    placeholder: bool = False


@dataclass
class DeckStatistics:
    """Deck-wide composition data over mainboard and commander cards."""

    card_types: dict[str, int] = field(default_factory=dict)
    mana_curve: dict[int, int] = field(default_factory=dict)
    highest_cmc: int = 0
    devotion: dict[str, int] = field(default_factory=dict)
    color_balance: str = "balanced"  # mono, balanced, skewed
    commander_colors: list[str] = field(default_factory=list)


@dataclass
class DeckEvaluation:
    """Aggregate evaluation of a whole deck."""

    categories: dict[str, CategoryEvaluation]
    total_cards: int
    average_cmc: float
    land_count: int
    mana_sources: int
    overall_rating: float  # 0-10
    overall_score: int  # 0-100
    tag_coverage: float  # percent
    suggestions: list[str] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)
    statistics: DeckStatistics = field(default_factory=DeckStatistics)

    def category(self, key: str) -> CategoryEvaluation:
        """Get a category evaluation by key."""
        return self.categories[key]
