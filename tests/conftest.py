import pytest

from commanderlens.models.card import Board, CardAggregate


@pytest.fixture
def sample_deck_records() -> list[dict]:
    """Small deck as importer records (Scryfall keys plus board/quantity)."""
    return [
        {
            "name": "Omnath, Locus of Creation",
            "type_line": "Legendary Creature — Elemental",
            "oracle_text": "When Omnath enters the battlefield, draw a card.",
            "mana_cost": "{R}{G}{W}{U}",
            "cmc": 4.0,
            "colors": ["R", "G", "W", "U"],
            "color_identity": ["R", "G", "W", "U"],
            "set": "znr",
            "collector_number": "232",
            "board": "commander",
        },
        {
            "name": "Sol Ring",
            "type_line": "Artifact",
            "oracle_text": "{T}: Add {C}{C}.",
            "mana_cost": "{1}",
            "cmc": 1.0,
            "set": "c21",
            "collector_number": "263",
        },
        {
            "name": "Cultivate",
            "type_line": "Sorcery",
            "oracle_text": (
                "Search your library for up to two basic land cards, reveal those cards, "
                "put one onto the battlefield tapped and the other into your hand, "
                "then shuffle."
            ),
            "mana_cost": "{2}{G}",
            "cmc": 3.0,
            "colors": ["G"],
        },
        {
            "name": "Forest",
            "type_line": "Basic Land — Forest",
            "oracle_text": "({T}: Add {G}.)",
            "quantity": 10,
        },
        {
            "name": "Lightning Bolt",
            "type_line": "Instant",
            "oracle_text": "Lightning Bolt deals 3 damage to any target.",
            "mana_cost": "{R}",
            "cmc": 1.0,
            "colors": ["R"],
            "board": "sideboard",
        },
    ]


@pytest.fixture
def basic_forest() -> CardAggregate:
    return CardAggregate(
        name="Forest",
        type_line="Basic Land — Forest",
        oracle_text="({T}: Add {G}.)",
        board=Board.MAINBOARD,
    )
