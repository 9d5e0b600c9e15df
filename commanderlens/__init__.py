"""CommanderLens: functional quality assessment for Commander decks."""
