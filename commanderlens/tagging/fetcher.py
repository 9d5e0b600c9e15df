"""
Sequential, rate-limited oracle tag acquisition.

Tagger is queried one card at a time with a fixed delay between network
requests. Requests are never issued concurrently, even though it would be
faster: the service's rate limit is the contract.

Loop policy:
- Cache hits cost no request and no delay.
- A successful lookup (including "not found") is cached and resets the
  consecutive-failure counter.
- A failed lookup is recorded (deduplicated) and not cached. After
  MAX_CONSECUTIVE_FAILURES in a row the loop stops issuing requests and
  every remaining card gets an empty tag list.
- A caller-supplied cancel event is checked before each card and ends the
  run the same way the circuit breaker does.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from commanderlens.config import MAX_CONSECUTIVE_FAILURES, settings
from commanderlens.models.card import CardAggregate
from commanderlens.models.failure import (
    DegradedModeError,
    FetchCancelledError,
    OperationAbortedError,
    TaggerError,
    TransientFetchError,
)
from commanderlens.tagging.cache import TagCache
from commanderlens.tagging.client import TaggerClient, extract_oracle_tags

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class TagStatus(str, Enum):
    """How a card's tag list was obtained."""

    CACHED = "cached"
    FETCHED = "fetched"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class TagResolution:
    """Outcome of resolving tags for one card."""

    name: str
    tags: list[str]
    status: TagStatus
    error: TaggerError | None = None
    # Set on the resolution that ended the run (abort or cancellation)
    stop: TaggerError | None = None


@dataclass
class TagFetchResult:
    """
    Tags for a batch of cards.

    Attributes:
        tags: Card name -> tag list for every input card
        errors: Distinct error messages, in first-seen order
        has_errors: True if any error was recorded
    """

    tags: dict[str, list[str]] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def add_error(self, message: str) -> None:
        if message not in self.errors:
            self.errors.append(message)


@dataclass
class LegacyTagFetchResult(TagFetchResult):
    """Result of the name-only path. Always flagged as having errors."""

    @property
    def has_errors(self) -> bool:
        return True


class TagFetcher:
    """Resolves oracle tags for cards through a TaggerClient and a TagCache."""

    def __init__(
        self,
        client: TaggerClient,
        cache: TagCache,
        *,
        delay: float | None = None,
        max_consecutive_failures: int = MAX_CONSECUTIVE_FAILURES,
        cache_aborted_as_empty: bool | None = None,
    ) -> None:
        """
        Args:
            client: Tagger client used for network lookups
            cache: Session cache, owned by the caller
            delay: Seconds to wait between network requests
            max_consecutive_failures: Failures in a row before giving up
            cache_aborted_as_empty: Cache skipped cards as confirmed empty
                (True) or mark them unresolved (False)
        """
        self.client = client
        self.cache = cache
        self.delay = settings.tagger_request_delay_seconds if delay is None else delay
        self.max_consecutive_failures = max_consecutive_failures
        self.cache_aborted_as_empty = (
            settings.cache_aborted_as_empty
            if cache_aborted_as_empty is None
            else cache_aborted_as_empty
        )

    async def _lookup(
        self,
        card: CardAggregate,
        throttle: Callable[[], Awaitable[None]],
    ) -> list[str] | None:
        """
        Look up one card over the network.

        Returns:
            Tag list, or None if Tagger has no record of the card

        Raises:
            TransientFetchError: If any request fails
        """
        if card.has_print_identity:
            set_code, number = card.set_code, card.collector_number
        else:
            await throttle()
            printing = await self.client.search_printing(card.name)
            if printing is None:
                return None
            set_code, number = printing

        await throttle()
        tagger_card = await self.client.fetch_card(set_code, number)
        if tagger_card is None:
            return None
        return extract_oracle_tags(tagger_card)

    def _skip(self, card: CardAggregate, use_cache: bool) -> None:
        """Record a card that was given empty tags because the run stopped."""
        if not use_cache:
            return
        if self.cache_aborted_as_empty:
            self.cache.put(card.name, [])
        else:
            self.cache.mark_unresolved(card.name)

    async def iter_tags(
        self,
        cards: Sequence[CardAggregate],
        *,
        use_cache: bool = True,
        cancel: asyncio.Event | None = None,
    ) -> AsyncIterator[TagResolution]:
        """
        Resolve tags card by card, yielding exactly one resolution per card.

        The resolution that ends the run carries the terminal condition in
        `stop`: the failure that trips the breaker, or the card where a
        cancellation was noticed.
        """
        consecutive_failures = 0
        stopped: TaggerError | None = None
        requests_made = 0

        async def throttle() -> None:
            nonlocal requests_made
            if requests_made and self.delay > 0:
                await asyncio.sleep(self.delay)
            requests_made += 1

        for card in cards:
            # Cancellation is reported on the card where it was noticed
            announce: TaggerError | None = None
            if stopped is None and cancel is not None and cancel.is_set():
                stopped = announce = FetchCancelledError()
                logger.warning("Tag fetching cancelled before %s", card.name)

            cached = self.cache.get(card.name) if use_cache else None
            if cached is not None:
                logger.debug("Tag cache hit for %s", card.name)
                yield TagResolution(card.name, cached, TagStatus.CACHED, stop=announce)
                continue

            if stopped is not None:
                self._skip(card, use_cache)
                yield TagResolution(card.name, [], TagStatus.SKIPPED, stop=announce)
                continue

            try:
                tags = await self._lookup(card, throttle)
            except TransientFetchError as e:
                consecutive_failures += 1
                logger.warning(
                    "Tagger error for %s (%d in a row): %s",
                    card.name,
                    consecutive_failures,
                    e.message,
                )
                if consecutive_failures >= self.max_consecutive_failures:
                    stopped = OperationAbortedError(consecutive_failures)
                    logger.warning(
                        "Stopping tag fetch after %d consecutive failures", consecutive_failures
                    )
                yield TagResolution(card.name, [], TagStatus.FAILED, e, stop=stopped)
                continue

            consecutive_failures = 0
            if use_cache:
                self.cache.put(card.name, tags or [])

            if tags is None:
                logger.debug("Tagger has no record of %s", card.name)
                yield TagResolution(card.name, [], TagStatus.NOT_FOUND)
            else:
                logger.debug("Fetched %d tags for %s", len(tags), card.name)
                yield TagResolution(card.name, tags, TagStatus.FETCHED)

    async def fetch_tags(
        self,
        cards: Sequence[CardAggregate],
        on_progress: ProgressCallback | None = None,
        use_cache: bool = True,
        cancel: asyncio.Event | None = None,
    ) -> TagFetchResult:
        """
        Fetch oracle tags for a batch of cards.

        A card without a set code and collector number costs two throttled
        requests (a name search, then the fetch) but counts as a single
        failure toward the circuit breaker.

        Args:
            cards: Cards to resolve, processed in order
            on_progress: Called with (processed, total): once with 0 up front,
                then after every card
            use_cache: Read from and write to the session cache
            cancel: Set to stop issuing requests; remaining cards get empty tags

        Returns:
            TagFetchResult covering every input card
        """
        result = TagFetchResult()
        total = len(cards)
        processed = 0

        logger.info("Fetching oracle tags for %d cards", total)
        if on_progress:
            on_progress(0, total)

        async for resolution in self.iter_tags(cards, use_cache=use_cache, cancel=cancel):
            if resolution.error is not None:
                result.add_error(resolution.error.message)
            if resolution.stop is not None:
                result.add_error(resolution.stop.message)

            result.tags[resolution.name] = resolution.tags
            processed += 1
            if on_progress:
                on_progress(processed, total)

        logger.info(
            "Resolved tags for %d cards with %d distinct errors", processed, len(result.errors)
        )
        return result

    def fetch_tags_by_name(
        self,
        names: Sequence[str],
        on_progress: ProgressCallback | None = None,
        use_cache: bool = True,
    ) -> TagFetchResult:
        """
        Legacy name-only lookup. Issues no requests.

        Kept for compatibility with callers that only have card names.
        Cached tags are returned when present; every other card gets an
        empty list. The result always reports errors, steering callers to
        fetch_tags.
        """
        logger.warning("Legacy name-only tag lookup used for %d cards", len(names))

        result = LegacyTagFetchResult()
        total = len(names)
        if on_progress:
            on_progress(0, total)

        for index, name in enumerate(names, start=1):
            cached = self.cache.get(name) if use_cache else None
            if cached is not None:
                result.tags[name] = cached
            else:
                result.tags[name] = []
                if use_cache:
                    self.cache.put(name, [])

            if on_progress:
                on_progress(index, total)

        if names:
            result.add_error(DegradedModeError().message)

        return result


def enrich_cards(
    cards: Iterable[CardAggregate],
    tags: dict[str, list[str]],
) -> list[CardAggregate]:
    """
    Attach fetched tags to cards.

    Returns new records; cards without an entry in `tags` are returned as-is.
    """
    return [card.with_tags(tags[card.name]) if card.name in tags else card for card in cards]
