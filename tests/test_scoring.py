"""Tests for shared category scoring."""

import pytest

from commanderlens.evaluation.scoring import (
    build_findings,
    build_suggestions,
    compute_score,
    rating_for_score,
    round_half_up,
    ten_point_rating,
)
from commanderlens.models.card import CardAggregate
from commanderlens.models.evaluation import CardEvaluation, Importance, Rating


class TestRatingForScore:
    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (100, Rating.EXCELLENT),
            (90, Rating.EXCELLENT),
            (89, Rating.GOOD),
            (70, Rating.GOOD),
            (69, Rating.AVERAGE),
            (40, Rating.AVERAGE),
            (39, Rating.BELOW_AVERAGE),
            (20, Rating.BELOW_AVERAGE),
            (19, Rating.POOR),
            (0, Rating.POOR),
        ],
    )
    def test_bucket_boundaries(self, score: int, expected: Rating):
        assert rating_for_score(score) is expected


class TestComputeScore:
    def test_linear_below_target(self):
        assert compute_score(5, 10) == 50

    def test_target_met_scores_100(self):
        assert compute_score(10, 10) == 100

    def test_capped_at_100(self):
        assert compute_score(30, 10) == 100

    def test_zero_matches(self):
        assert compute_score(0, 10) == 0

    def test_zero_target_does_not_divide(self):
        assert compute_score(5, 0) == 0

    def test_rounds_half_up(self):
        # 100 * 1 / 8 = 12.5
        assert compute_score(1, 8) == 13

    @pytest.mark.parametrize("target", [1, 3, 5, 8, 10, 15, 36])
    def test_monotonic_and_bounded(self, target: int):
        scores = [compute_score(actual, target) for actual in range(3 * target)]

        assert scores == sorted(scores)
        assert all(0 <= s <= 100 for s in scores)


class TestTenPointRating:
    def test_scales_to_ten(self):
        assert ten_point_rating(5, 10) == 5
        assert ten_point_rating(10, 10) == 10

    def test_capped_at_ten(self):
        assert ten_point_rating(25, 10) == 10

    def test_rounds_half_up(self):
        # 10 * 1 / 4 = 2.5
        assert ten_point_rating(1, 4) == 3

    def test_zero_target(self):
        assert ten_point_rating(3, 0) == 0


class TestRoundHalfUp:
    def test_halves_round_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3

    def test_below_half_rounds_down(self):
        assert round_half_up(2.49) == 2


class TestFindings:
    def test_reports_count_against_target(self):
        findings = build_findings("Ramp", 0, 10, [])

        assert findings == [
            "You have 0 of the recommended 10 cards in this category.",
            "No ramp cards found in the deck.",
        ]

    def test_reports_tag_and_text_matches(self):
        cards = [
            CardEvaluation(CardAggregate(name="Sol Ring"), Importance.HIGH, "tag", via_tag=True),
            CardEvaluation(CardAggregate(name="Mind Stone"), Importance.MEDIUM, "text"),
        ]

        findings = build_findings("Ramp", 2, 10, cards)

        assert findings[1] == "1 high-confidence ramp cards identified."
        assert findings[2] == "1 matched by oracle tag, 1 by text heuristics."


class TestSuggestions:
    def test_deficit_and_weakness(self):
        suggestions = build_suggestions("Ramp", "mana rocks", 1, 10, Rating.POOR)

        assert suggestions == [
            "Add 9 more ramp cards to reach the recommended 10 (mana rocks).",
            "Ramp is a significant weakness (1/10). Prioritize mana rocks before other upgrades.",
        ]

    def test_deficit_without_weakness(self):
        suggestions = build_suggestions("Ramp", "mana rocks", 8, 10, Rating.GOOD)

        assert suggestions == ["Add 2 more ramp cards to reach the recommended 10 (mana rocks)."]

    def test_target_met_no_suggestions(self):
        assert build_suggestions("Ramp", "mana rocks", 10, 10, Rating.EXCELLENT) == []

    def test_excess(self):
        suggestions = build_suggestions("Ramp", "mana rocks", 15, 10, Rating.EXCELLENT)

        assert len(suggestions) == 1
        assert suggestions[0].startswith("Very high ramp count (15/10).")

    def test_deterministic(self):
        first = build_suggestions("Board Wipes", "board wipes", 0, 3, Rating.POOR)
        second = build_suggestions("Board Wipes", "board wipes", 0, 3, Rating.POOR)

        assert first == second
