"""Tests for the oracle tag cache."""

from commanderlens.tagging.cache import TagCache


class TestTagCache:
    def test_missing_card_returns_none(self):
        cache = TagCache()

        assert cache.get("Sol Ring") is None
        assert not cache.has("Sol Ring")

    def test_empty_list_is_a_resolved_entry(self):
        """An empty tag list is distinct from a missing entry."""
        cache = TagCache()
        cache.put("Vanilla Bear", [])

        assert cache.get("Vanilla Bear") == []
        assert cache.has("Vanilla Bear")
        assert "Vanilla Bear" in cache

    def test_returns_copies(self):
        """Mutating a returned list does not change the cache."""
        cache = TagCache()
        cache.put("Sol Ring", ["mana-rock"])

        tags = cache.get("Sol Ring")
        assert tags is not None
        tags.append("ramp")

        assert cache.get("Sol Ring") == ["mana-rock"]

    def test_seeded_from_initial_entries(self):
        initial = {"Sol Ring": ["mana-rock"]}
        cache = TagCache(initial)
        initial["Sol Ring"].append("ramp")

        assert cache.get("Sol Ring") == ["mana-rock"]
        assert len(cache) == 1

    def test_unresolved_is_not_an_entry(self):
        cache = TagCache()
        cache.mark_unresolved("Sol Ring")

        assert cache.is_unresolved("Sol Ring")
        assert cache.get("Sol Ring") is None
        assert len(cache) == 0

    def test_put_clears_unresolved(self):
        cache = TagCache()
        cache.mark_unresolved("Sol Ring")
        cache.put("Sol Ring", ["mana-rock"])

        assert not cache.is_unresolved("Sol Ring")

    def test_mark_unresolved_keeps_resolved_entry(self):
        cache = TagCache()
        cache.put("Sol Ring", ["mana-rock"])
        cache.mark_unresolved("Sol Ring")

        assert not cache.is_unresolved("Sol Ring")
        assert cache.get("Sol Ring") == ["mana-rock"]

    def test_snapshot_and_clear(self):
        cache = TagCache()
        cache.put("Sol Ring", ["mana-rock"])
        cache.put("Forest", [])
        cache.mark_unresolved("Cultivate")

        assert cache.snapshot() == {"Sol Ring": ["mana-rock"], "Forest": []}

        cache.clear()
        assert len(cache) == 0
        assert not cache.is_unresolved("Cultivate")
