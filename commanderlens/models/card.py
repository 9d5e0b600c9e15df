import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Joins the rules text of multi-faced cards into one oracle text
FACE_SEPARATOR = "\n//\n"


class Board(str, Enum):
    """Which list a card belongs to within a deck."""

    MAINBOARD = "mainboard"
    COMMANDER = "commander"
    SIDEBOARD = "sideboard"
    COMPANION = "companion"


@dataclass(frozen=True, slots=True)
class CardAggregate:
    """
    One resolved card occurrence in a deck.

    Records are immutable. Tag enrichment produces a new record via
    `with_tags()` rather than editing this one.

    Attributes:
        name: Card name, unique per deck per board
        type_line: Full type line (e.g., "Legendary Creature — Elf Druid")
        oracle_text: Rules text; faces of multi-faced cards are merged
        mana_cost: Mana cost string (e.g., "{2}{G}")
        cmc: Converted mana cost
        colors: Color symbol codes (W, U, B, R, G)
        board: Which list the card belongs to
        quantity: Number of copies
        oracle_tags: Functional tags from the tagging service, possibly empty
        set_code: Set code of the printing (used to look up tags)
        collector_number: Collector number within set
        color_identity: Color identity codes (used for commanders)
        power: Printed power, if any
    """

    name: str
    type_line: str = ""
    oracle_text: str = ""
    mana_cost: str = ""
    cmc: float = 0.0
    colors: frozenset[str] = field(default_factory=frozenset)
    board: Board = Board.MAINBOARD
    quantity: int = 1
    oracle_tags: tuple[str, ...] = ()
    set_code: str = ""
    collector_number: str = ""
    color_identity: frozenset[str] = field(default_factory=frozenset)
    power: str = ""

    def __post_init__(self) -> None:
        # Frozen with slots, so coercion goes through object.__setattr__
        object.__setattr__(self, "board", Board(self.board))
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1 for {self.name!r}, got {self.quantity}")
        if self.cmc < 0:
            raise ValueError(f"cmc must be >= 0 for {self.name!r}, got {self.cmc}")

    @property
    def has_print_identity(self) -> bool:
        """True if set code and collector number are both known."""
        return bool(self.set_code and self.collector_number)

    def with_tags(self, tags: list[str] | tuple[str, ...]) -> "CardAggregate":
        """Return a copy of this card carrying the given oracle tags."""
        return dataclasses.replace(self, oracle_tags=tuple(tags))


def merge_face_text(card_data: dict[str, Any]) -> str:
    """
    Get oracle text for a card, merging faces of multi-faced cards.

    Scryfall omits top-level oracle_text for most double-faced layouts
    and puts it on each entry of card_faces instead.
    """
    text = card_data.get("oracle_text")
    if text:
        return str(text)

    faces = card_data.get("card_faces") or []
    face_texts = [face.get("oracle_text", "") for face in faces if face.get("oracle_text")]
    return FACE_SEPARATOR.join(face_texts)


def card_from_scryfall(
    card_data: dict[str, Any],
    board: Board | str = Board.MAINBOARD,
    quantity: int = 1,
    oracle_tags: list[str] | None = None,
) -> CardAggregate:
    """
    Build a CardAggregate from a Scryfall card object.

    Missing numeric fields default to zero and missing text to "".

    Args:
        card_data: Scryfall card JSON (or a record using the same keys)
        board: Deck board for this entry
        quantity: Number of copies in the deck
        oracle_tags: Tags already known for this card

    Returns:
        New CardAggregate
    """
    faces = card_data.get("card_faces") or []
    mana_cost = card_data.get("mana_cost")
    if not mana_cost and faces:
        mana_cost = faces[0].get("mana_cost", "")
    power = card_data.get("power")
    if power is None and faces:
        power = faces[0].get("power")

    return CardAggregate(
        name=card_data.get("name", ""),
        type_line=card_data.get("type_line") or "",
        oracle_text=merge_face_text(card_data),
        mana_cost=mana_cost or "",
        cmc=float(card_data.get("cmc") or 0),
        colors=frozenset(card_data.get("colors") or []),
        board=Board(board),
        quantity=quantity,
        oracle_tags=tuple(oracle_tags or card_data.get("oracle_tags") or ()),
        set_code=card_data.get("set") or "",
        collector_number=str(card_data.get("collector_number") or ""),
        color_identity=frozenset(card_data.get("color_identity") or []),
        power=str(power or ""),
    )


def cards_from_records(records: list[dict[str, Any]]) -> list[CardAggregate]:
    """
    Build cards from importer records.

    Each record is a Scryfall-style card object with optional `board`
    and `quantity` keys.
    """
    return [
        card_from_scryfall(
            record,
            board=record.get("board", Board.MAINBOARD),
            quantity=int(record.get("quantity", 1)),
        )
        for record in records
    ]
