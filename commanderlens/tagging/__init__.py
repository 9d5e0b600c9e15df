"""
Oracle tag acquisition.

Functional tags come from Scryfall Tagger. They are optional enrichment:
every evaluator falls back to text heuristics when a card has no tags.
"""

from commanderlens.tagging.cache import TagCache
from commanderlens.tagging.client import (
    TaggerAuth,
    TaggerCard,
    TaggerClient,
    extract_oracle_tags,
)
from commanderlens.tagging.fetcher import (
    LegacyTagFetchResult,
    TagFetcher,
    TagFetchResult,
    TagResolution,
    TagStatus,
    enrich_cards,
)

__all__ = [
    "LegacyTagFetchResult",
    "TagCache",
    "TagFetchResult",
    "TagFetcher",
    "TagResolution",
    "TagStatus",
    "TaggerAuth",
    "TaggerCard",
    "TaggerClient",
    "enrich_cards",
    "extract_oracle_tags",
]
