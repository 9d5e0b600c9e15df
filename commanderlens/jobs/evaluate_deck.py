"""
Evaluate a Commander deck from a JSON card list.

The input is a JSON array of card records using Scryfall keys, each with
optional `board` and `quantity`. With --fetch-tags, oracle tags are fetched
from Tagger before evaluation.

Usage:
    python -m commanderlens.jobs.evaluate_deck deck.json [--fetch-tags] [--no-cache]
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path

from commanderlens.evaluation import aggregate, format_deck_evaluation
from commanderlens.models.card import Board, CardAggregate, cards_from_records
from commanderlens.tagging import TagCache, TagFetcher, TaggerClient, enrich_cards

logger = logging.getLogger(__name__)


def load_deck(path: Path) -> list[CardAggregate]:
    """Read card records from a JSON file."""
    with path.open(encoding="utf-8") as f:
        records = json.load(f)
    if not isinstance(records, list):
        raise ValueError(f"{path} must contain a JSON array of card records")
    return cards_from_records(records)


async def fetch_deck_tags(
    cards: list[CardAggregate],
    use_cache: bool = True,
) -> tuple[list[CardAggregate], list[str]]:
    """
    Fetch oracle tags for mainboard and commander cards.

    Returns:
        (enriched cards, tag warnings)
    """
    scored = [card for card in cards if card.board in (Board.MAINBOARD, Board.COMMANDER)]
    cache = TagCache()

    def report(processed: int, total: int) -> None:
        if total and (processed == total or processed % 10 == 0):
            logger.info("Tagged %d/%d cards", processed, total)

    async with TaggerClient() as client:
        fetcher = TagFetcher(client, cache)
        result = await fetcher.fetch_tags(scored, on_progress=report, use_cache=use_cache)

    return enrich_cards(cards, result.tags), result.errors


async def run_evaluation(path: Path, fetch_tags: bool, use_cache: bool) -> str:
    """Load, optionally tag, and evaluate a deck. Returns the report."""
    cards = load_deck(path)
    logger.info("Loaded %d card entries from %s", len(cards), path)

    warnings: list[str] = []
    if fetch_tags:
        cards, warnings = await fetch_deck_tags(cards, use_cache=use_cache)

    report = format_deck_evaluation(aggregate(cards))
    if warnings:
        report += "\n\nTag warnings:\n" + "\n".join(f"  - {w}" for w in warnings)
    return report


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Evaluate a Commander deck")
    parser.add_argument("deck", type=Path, help="JSON file with card records")
    parser.add_argument(
        "--fetch-tags", action="store_true", help="Fetch oracle tags from Tagger first"
    )
    parser.add_argument(
        "--no-cache", action="store_true", help="Do not read or write the tag cache"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        report = asyncio.run(run_evaluation(args.deck, args.fetch_tags, not args.no_cache))
    except (OSError, ValueError) as e:
        logger.error("Failed to evaluate deck: %s", e)
        raise

    print(report)


if __name__ == "__main__":
    main()
