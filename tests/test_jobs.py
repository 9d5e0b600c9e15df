"""Tests for the deck evaluation job."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from commanderlens.config import settings
from commanderlens.jobs.evaluate_deck import fetch_deck_tags, load_deck, run_evaluation
from commanderlens.models.card import Board, cards_from_records


@pytest.fixture
def deck_file(tmp_path: Path, sample_deck_records: list[dict]) -> Path:
    path = tmp_path / "deck.json"
    path.write_text(json.dumps(sample_deck_records))
    return path


class TestLoadDeck:
    def test_loads_records(self, deck_file: Path):
        cards = load_deck(deck_file)

        assert len(cards) == 5
        assert cards[0].board is Board.COMMANDER

    def test_rejects_non_list(self, tmp_path: Path):
        path = tmp_path / "deck.json"
        path.write_text(json.dumps({"name": "Sol Ring"}))

        with pytest.raises(ValueError, match="JSON array"):
            load_deck(path)


class TestRunEvaluation:
    @pytest.mark.asyncio
    async def test_without_tags(self, deck_file: Path):
        report = await run_evaluation(deck_file, fetch_tags=False, use_cache=True)

        assert report.startswith("Overall rating:")
        assert "Tag warnings" not in report

    @pytest.mark.asyncio
    @respx.mock
    async def test_tag_errors_become_warnings(self, deck_file: Path):
        respx.post(settings.tagger_url).mock(return_value=httpx.Response(500))

        with patch("commanderlens.tagging.fetcher.asyncio.sleep", new_callable=AsyncMock):
            report = await run_evaluation(deck_file, fetch_tags=True, use_cache=True)

        assert "Tag warnings:" in report
        assert "Tagger API error: HTTP 500" in report
        assert "Stopped fetching due to repeated errors." in report


class TestFetchDeckTags:
    @pytest.mark.asyncio
    @respx.mock
    async def test_enriches_scored_cards(self, sample_deck_records: list[dict]):
        respx.post(settings.tagger_url).mock(
            return_value=httpx.Response(
                200,
                json={
                    "data": {
                        "card": {
                            "name": "Sol Ring",
                            "taggings": [
                                {"tag": {"name": "mana-rock", "type": "ORACLE_CARD_TAG"}}
                            ],
                        }
                    }
                },
            )
        )
        # Only printed cards, so no name search is needed
        cards = [c for c in cards_from_records(sample_deck_records) if c.has_print_identity]

        with patch("commanderlens.tagging.fetcher.asyncio.sleep", new_callable=AsyncMock):
            enriched, warnings = await fetch_deck_tags(cards)

        assert warnings == []
        assert all(card.oracle_tags == ("mana-rock",) for card in enriched)

    @pytest.mark.asyncio
    @respx.mock
    async def test_sideboard_is_not_fetched(self, sample_deck_records: list[dict]):
        route = respx.post(settings.tagger_url).mock(
            return_value=httpx.Response(200, json={"data": {"card": None}})
        )
        cards = [c for c in cards_from_records(sample_deck_records) if c.board is Board.SIDEBOARD]

        enriched, warnings = await fetch_deck_tags(cards)

        assert route.call_count == 0
        assert enriched == cards
        assert warnings == []
