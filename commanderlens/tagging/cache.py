"""
In-memory oracle tag cache.

One cache is created per import session and handed to the TagFetcher by
the caller. It never expires entries; its size is bounded only by the
number of distinct card names seen in the session.

A missing key and a key mapped to an empty list mean different things:
absent means "never resolved", empty means "confirmed no tags".
"""


class TagCache:
    """Mapping from card name to its resolved oracle tag list."""

    def __init__(self, initial: dict[str, list[str]] | None = None) -> None:
        """Initialize cache.

        Args:
            initial: Previously persisted entries to seed the cache with.
        """
        self._entries: dict[str, list[str]] = {
            name: list(tags) for name, tags in (initial or {}).items()
        }
        self._unresolved: set[str] = set()

    def get(self, name: str) -> list[str] | None:
        """Return cached tags for a card, or None if never resolved."""
        tags = self._entries.get(name)
        return list(tags) if tags is not None else None

    def put(self, name: str, tags: list[str]) -> None:
        """Store a resolved (possibly empty) tag list."""
        self._entries[name] = list(tags)
        self._unresolved.discard(name)

    def has(self, name: str) -> bool:
        """True if the card has a resolved entry, even an empty one."""
        return name in self._entries

    def mark_unresolved(self, name: str) -> None:
        """Record that a lookup was abandoned without a confirmed answer."""
        if name not in self._entries:
            self._unresolved.add(name)

    def is_unresolved(self, name: str) -> bool:
        """True if a lookup for this card was abandoned."""
        return name in self._unresolved

    def snapshot(self) -> dict[str, list[str]]:
        """Copy of all resolved entries, for callers that persist the cache."""
        return {name: list(tags) for name, tags in self._entries.items()}

    def clear(self) -> None:
        self._entries.clear()
        self._unresolved.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
