"""
Category descriptors.

Each functional category is one CategoryRule: a tag vocabulary, staple
card names, ordered text rules and a target-count function. The evaluator
applies every rule the same way; nothing here does any scoring.

Matching order per card:
1. Oracle tag in the vocabulary (high importance)
2. Staple name fragment (high importance)
3. First matching text rule (its own importance, medium or low)
"""

import re
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from commanderlens.config import DEFAULT_DECK_SIZE
from commanderlens.evaluation.scoring import round_half_up
from commanderlens.models.card import CardAggregate
from commanderlens.models.evaluation import CardEvaluation, Importance

TargetFunction = Callable[[int], int]
CardPredicate = Callable[[CardAggregate], bool]
SuggestionHook = Callable[
    [list[CardEvaluation], int, Sequence[CardAggregate], Sequence[CardAggregate]],
    list[str],
]


def tiered_target(base: int) -> TargetFunction:
    """Target of `base` for a full deck, one lower per smaller size tier."""

    def target(deck_size: int) -> int:
        if deck_size >= 95:
            value = base
        elif deck_size >= 80:
            value = base - 1
        elif deck_size >= 60:
            value = base - 2
        else:
            value = base - 3
        return max(1, value)

    return target


def proportional_target(per_deck: int) -> TargetFunction:
    """Target that scales linearly with deck size, `per_deck` at 99 cards."""

    def target(deck_size: int) -> int:
        return max(1, round_half_up(deck_size * per_deck / DEFAULT_DECK_SIZE))

    return target


def fixed_target(value: int) -> TargetFunction:
    def target(deck_size: int) -> int:
        return value

    return target


@dataclass(frozen=True)
class TextRule:
    """
    Heuristic match against oracle text and type line.

    Attributes:
        pattern: Regex searched in lowercased oracle text; None matches any text
        importance: Importance assigned on match
        reasoning: Explanation shown for matched cards
        types: Card must have one of these words in its type line (if given)
        when: Extra condition on the card (if given)
    """

    pattern: re.Pattern[str] | None
    importance: Importance
    reasoning: str
    types: tuple[str, ...] = ()
    when: CardPredicate | None = None

    def matches(self, card: CardAggregate) -> bool:
        if self.types:
            type_line = card.type_line.lower()
            if not any(word in type_line for word in self.types):
                return False
        if self.pattern is not None and not self.pattern.search(card.oracle_text.lower()):
            return False
        return self.when is None or self.when(card)


@dataclass(frozen=True)
class CategoryRule:
    """
    Everything that distinguishes one category from another.

    Attributes:
        key: Identifier used in aggregate output
        name: Display name
        description: What the category measures
        advice: Short phrase naming what to add when the category is weak
        tags: Exact oracle tag vocabulary
        tag_fragments: Tag substrings that also count as a tag match
        staples: Lowercased name fragments of well-known cards
        text_rules: Heuristics tried in order when no tag or staple matched
        target: Target count as a function of mainboard size
        exclude: Cards never counted for this category
        text_guard: Text heuristics only apply to cards passing this check
        describe: Reasoning for a tag match, given the card and matched tag
        extra_suggestions: Category-specific suggestions after the shared ones
        placeholder: Category is listed but not evaluated yet
    """

    key: str
    name: str
    description: str
    advice: str = ""
    tags: frozenset[str] = frozenset()
    tag_fragments: tuple[str, ...] = ()
    staples: tuple[str, ...] = ()
    text_rules: tuple[TextRule, ...] = ()
    target: TargetFunction = field(default=fixed_target(10))
    exclude: CardPredicate | None = None
    text_guard: CardPredicate | None = None
    describe: Callable[[CardAggregate, str], str] | None = None
    extra_suggestions: SuggestionHook | None = None
    placeholder: bool = False

    def matching_tag(self, card: CardAggregate) -> str | None:
        """First of the card's tags that belongs to this category."""
        for tag in card.oracle_tags:
            if tag in self.tags or any(fragment in tag for fragment in self.tag_fragments):
                return tag
        return None


# =============================================================================
# SHARED PREDICATES
# =============================================================================


def is_land(card: CardAggregate) -> bool:
    return "land" in card.type_line.lower()


def is_basic_land(card: CardAggregate) -> bool:
    type_line = card.type_line.lower()
    return "basic" in type_line and "land" in type_line


def _power(card: CardAggregate) -> int:
    try:
        return int(card.power)
    except ValueError:
        return 0


def _names_any(card_evals: list[CardEvaluation], fragment: str) -> bool:
    return any(fragment in c.card.name.lower() for c in card_evals)


# =============================================================================
# RAMP
# =============================================================================

# Cards that text heuristics mistake for ramp
RAMP_FALSE_POSITIVES = (
    "path to exile",
    "beast within",
    "generous gift",
    "pongify",
    "rapid hybridization",
    "swan song",
    "krosan grip",
    "acidic slime",
    "satyr wayfinder",
    "craterhoof behemoth",
    "finale of devastation",
    "capsize",
    "life from the loam",
)


def _exclude_from_ramp(card: CardAggregate) -> bool:
    if is_basic_land(card):
        return True
    name = card.name.lower()
    return any(fragment in name for fragment in RAMP_FALSE_POSITIVES)


def _describe_ramp(card: CardAggregate, tag: str) -> str:
    tags = set(card.oracle_tags)
    if tags & {"mana-dork", "mana-dork-egg"}:
        return "Mana dork (vulnerable)"
    if "mana-rock" in tags:
        if card.cmc <= 1:
            return "Fast mana (0-1 CMC)"
        if card.cmc == 2:
            return "2 CMC rock (efficient)"
        return "3+ CMC rock (slower)"
    if "land-ramp" in tags:
        return "Land ramp (resilient)"
    if "ritual" in tags:
        return "Ritual (temporary)"
    if "cost-reduction" in tags:
        return "Cost reduction"
    if "adds-multiple-mana" in tags:
        return "Multi-mana source"
    return f"Oracle tag: {tag}"


def _ramp_suggestions(
    matches: list[CardEvaluation],
    target: int,
    mainboard: Sequence[CardAggregate],
    commanders: Sequence[CardAggregate],
) -> list[str]:
    suggestions: list[str] = []
    count = len(matches)

    if sum(c.card.quantity for c in matches) < target:
        if not _names_any(matches, "sol ring"):
            suggestions.append("Sol Ring is missing - include this Commander staple.")
        if commanders and not _names_any(matches, "arcane signet"):
            suggestions.append("Consider Arcane Signet for reliable color fixing.")

    if not count:
        return suggestions

    average_cmc = sum(c.card.cmc for c in matches) / count
    if average_cmc > 3.0:
        suggestions.append(
            f"High average ramp CMC ({average_cmc:.1f}) - "
            "add more 1-2 CMC options for faster starts."
        )

    artifacts = sum(1 for c in matches if "artifact" in c.card.type_line.lower())
    creatures = sum(1 for c in matches if "creature" in c.card.type_line.lower())
    if artifacts > count * 0.7:
        suggestions.append(
            "Heavy artifact ramp is vulnerable to artifact removal. Diversify with land ramp."
        )
    if creatures > count * 0.5:
        suggestions.append(
            "Many mana dorks are vulnerable to board wipes. Balance with rocks or land ramp."
        )
    return suggestions


_MANA_ABILITY = re.compile(r"\{t\}: add \{|\badd\b[^.]*\bmana\b|\{t\}:[^.]*\bmana\b")

RAMP = CategoryRule(
    key="ramp",
    name="Ramp",
    description="Mana acceleration and resource development",
    advice="mana rocks, mana dorks or land ramp",
    tags=frozenset(
        {
            "ramp",
            "mana-ramp",
            "mana-rock",
            "mana-dork",
            "mana-dork-egg",
            "land-ramp",
            "ritual",
            "cost-reduction",
            "adds-multiple-mana",
        }
    ),
    staples=(
        "sol ring",
        "arcane signet",
        "signet",
        "talisman of",
        "fellwar stone",
        "mind stone",
        "thought vessel",
        "commander's sphere",
        "chromatic lantern",
        "thran dynamo",
        "gilded lotus",
        "mana vault",
        "mana crypt",
        "birds of paradise",
        "llanowar elves",
        "elvish mystic",
        "noble hierarch",
        "cultivate",
        "kodama's reach",
        "rampant growth",
        "farseek",
        "nature's lore",
        "three visits",
        "skyshroud claim",
        "sakura-tribe elder",
        "wood elves",
        "ancient tomb",
        "dark ritual",
    ),
    text_rules=(
        TextRule(_MANA_ABILITY, Importance.MEDIUM, "Mana rock", types=("artifact",)),
        TextRule(_MANA_ABILITY, Importance.MEDIUM, "Mana dork (vulnerable)", types=("creature",)),
        TextRule(
            re.compile(
                r"search your library for [^.]*land[^.]*onto the battlefield"
                r"|put [^.]*land[^.]* onto the battlefield"
            ),
            Importance.MEDIUM,
            "Land ramp (resilient)",
            types=("instant", "sorcery"),
        ),
        TextRule(
            re.compile(r"costs? \{\d+\} less to cast|spells? you cast cost \{\d+\} less"),
            Importance.LOW,
            "Cost reduction",
        ),
        TextRule(re.compile(r"create[^.]*treasure token"), Importance.LOW, "Treasure generation"),
    ),
    target=tiered_target(10),
    exclude=_exclude_from_ramp,
    describe=_describe_ramp,
    extra_suggestions=_ramp_suggestions,
)


# =============================================================================
# CARD ADVANTAGE
# =============================================================================

CARD_ADVANTAGE = CategoryRule(
    key="card_advantage",
    name="Card Advantage",
    description="Card draw and card advantage engines",
    advice="card draw or card advantage engines",
    tags=frozenset(
        {
            "card-draw",
            "draw",
            "cantrip",
            "wheel",
            "card-advantage",
            "extra-cards",
            "impulse-draw",
        }
    ),
    staples=(
        "rhystic study",
        "mystic remora",
        "phyrexian arena",
        "sylvan library",
        "skullclamp",
        "esper sentinel",
        "guardian project",
        "beast whisperer",
        "the great henge",
        "necropotence",
        "fact or fiction",
        "harmonize",
        "night's whisper",
        "windfall",
    ),
    text_rules=(
        TextRule(re.compile(r"\bdraws? [^.]*\bcards?\b"), Importance.MEDIUM, "Draws cards"),
        TextRule(
            re.compile(r"exile[^.]*\.?[^.]*\bmay (play|cast)\b"),
            Importance.MEDIUM,
            "Impulse draw",
        ),
        TextRule(
            re.compile(r"(look at|reveal) the top[^.]*\.?[^.]*into your hand"),
            Importance.LOW,
            "Selects cards from the top of the library",
        ),
    ),
    target=tiered_target(10),
)


# =============================================================================
# INTERACTION
# =============================================================================

INTERACTION = CategoryRule(
    key="interaction",
    name="Interaction",
    description="Removal, counterspells and protection",
    advice="instant-speed removal, counterspells or protection",
    tags=frozenset(
        {
            "removal",
            "creature-removal",
            "spot-removal",
            "targeted-removal",
            "board-wipe",
            "counter",
            "counterspell",
            "protection",
            "hexproof",
            "indestructible",
            "bounce",
        }
    ),
    staples=(
        "swords to plowshares",
        "path to exile",
        "counterspell",
        "cyclonic rift",
        "beast within",
        "chaos warp",
        "heroic intervention",
        "teferi's protection",
        "fierce guardianship",
    ),
    text_rules=(
        TextRule(re.compile(r"counter target"), Importance.MEDIUM, "Counterspell"),
        TextRule(re.compile(r"(destroy|exile) (target|all|each)"), Importance.MEDIUM, "Removal"),
        TextRule(re.compile(r"return target [^.]*owner's hand"), Importance.MEDIUM, "Bounce"),
        TextRule(
            re.compile(r"deals? [^.]*damage to (any target|target creature|each creature)"),
            Importance.MEDIUM,
            "Damage-based removal",
        ),
        TextRule(
            re.compile(r"\b(hexproof|indestructible|protection from)\b"),
            Importance.LOW,
            "Protection",
        ),
        TextRule(
            re.compile(r"\bprevent\b"), Importance.LOW, "Damage prevention", types=("instant",)
        ),
        TextRule(re.compile(r"\b(destroy|exile)\b"), Importance.LOW, "Conditional removal"),
    ),
    target=tiered_target(15),
)


# =============================================================================
# WIN CONDITIONS
# =============================================================================


def _is_big_threat(card: CardAggregate) -> bool:
    if card.cmc < 6:
        return False
    text = card.oracle_text.lower()
    return _power(card) >= 6 or "double strike" in text or "infect" in text


WIN_CONDITIONS = CategoryRule(
    key="win_conditions",
    name="Win Conditions",
    description="Finishers and game-ending threats",
    advice="finishers or game-ending combos",
    tags=frozenset(
        {
            "win-condition",
            "combo-piece",
            "finisher",
            "game-ender",
            "infinite-combo",
            "alternate-win",
        }
    ),
    staples=(
        "craterhoof behemoth",
        "thassa's oracle",
        "laboratory maniac",
        "jace, wielder of mysteries",
        "torment of hailfire",
        "approach of the second sun",
        "triumph of the hordes",
        "insurrection",
        "expropriate",
    ),
    text_rules=(
        TextRule(re.compile(r"you win the game"), Importance.MEDIUM, "Alternate win condition"),
        TextRule(
            re.compile(r"loses the game"), Importance.MEDIUM, "Makes an opponent lose the game"
        ),
        TextRule(
            None, Importance.MEDIUM, "Large finisher", types=("creature",), when=_is_big_threat
        ),
        TextRule(
            re.compile(r"whenever [^.]*deals [^.]*damage[^.]*each opponent"),
            Importance.LOW,
            "Repeatable damage to each opponent",
        ),
        TextRule(
            re.compile(r"\binfinite\b|combat damage to a player"),
            Importance.LOW,
            "Possible finisher",
            when=lambda card: card.cmc >= 5,
        ),
    ),
    target=tiered_target(5),
)


# =============================================================================
# TARGETED REMOVAL
# =============================================================================

_MASS_EFFECT = re.compile(r"\b(all|each)\b")

TARGETED_REMOVAL = CategoryRule(
    key="targeted_removal",
    name="Targeted Removal",
    description="Spot removal for individual threats",
    advice="efficient spot removal",
    tags=frozenset({"removal", "creature-removal", "spot-removal", "targeted-removal"}),
    staples=(
        "swords to plowshares",
        "path to exile",
        "beast within",
        "generous gift",
        "chaos warp",
        "anguished unmaking",
        "assassin's trophy",
        "pongify",
        "rapid hybridization",
        "vindicate",
        "infernal grasp",
        "go for the throat",
        "nature's claim",
    ),
    text_rules=(
        TextRule(
            re.compile(r"(destroy|exile) target"),
            Importance.MEDIUM,
            "Destroys or exiles a target",
            types=("instant", "sorcery"),
        ),
        TextRule(
            re.compile(r"deals? [^.]*damage to [^.]*target"),
            Importance.MEDIUM,
            "Targeted damage",
            types=("instant", "sorcery"),
        ),
        TextRule(
            re.compile(r"return target [^.]*owner's hand"),
            Importance.LOW,
            "Targeted bounce (temporary)",
            types=("instant", "sorcery"),
        ),
    ),
    target=tiered_target(8),
    text_guard=lambda card: not _MASS_EFFECT.search(card.oracle_text.lower()),
)


# =============================================================================
# BOARD WIPES
# =============================================================================

BOARD_WIPES = CategoryRule(
    key="board_wipes",
    name="Board Wipes",
    description="Mass removal to reset the board",
    advice="board wipes",
    tags=frozenset({"board-wipe", "mass-removal", "sweeper", "wrath-effect"}),
    staples=(
        "wrath of god",
        "damnation",
        "toxic deluge",
        "blasphemous act",
        "cyclonic rift",
        "austere command",
        "vanquish the horde",
        "farewell",
        "evacuation",
        "merciless eviction",
    ),
    text_rules=(
        TextRule(re.compile(r"(destroy|exile) all"), Importance.MEDIUM, "Destroys or exiles all"),
        TextRule(
            re.compile(
                r"(destroy|exile|sacrifices?)[^.]*\beach\b[^.]*\b(creature|permanent)"
                r"|\beach\b[^.]*\b(creature|permanent)[^.]*\b(destroy|exile|sacrifices?)\b"
            ),
            Importance.MEDIUM,
            "Mass removal",
        ),
        TextRule(re.compile(r"damage to each"), Importance.MEDIUM, "Damage sweeper"),
        TextRule(
            re.compile(r"return all [^.]*owners?'? hands?"), Importance.LOW, "Mass bounce"
        ),
    ),
    target=tiered_target(3),
)


# =============================================================================
# MANA BASE
# =============================================================================

_FIXING = re.compile(r"add \{[wubrg]\} or \{[wubrg]\}|mana of any (color|type)|add one mana of")


def _mana_base_suggestions(
    matches: list[CardEvaluation],
    target: int,
    mainboard: Sequence[CardAggregate],
    commanders: Sequence[CardAggregate],
) -> list[str]:
    colors: set[str] = set()
    for commander in commanders:
        colors |= commander.color_identity
    if len(colors) < 3:
        return []

    fixing = sum(c.card.quantity for c in matches if c.importance is not Importance.LOW)
    if fixing < 5:
        return [
            f"Only {fixing} color-fixing lands for a {len(colors)}-color commander. "
            "Add more lands that produce multiple colors."
        ]
    return []


MANA_BASE = CategoryRule(
    key="mana_base",
    name="Mana Base",
    description="Land count and color fixing",
    advice="lands, especially ones that fix colors",
    tags=frozenset({"fixing", "mana-fixing", "dual-land", "fetchland", "tri-land"}),
    staples=(
        "command tower",
        "exotic orchard",
        "city of brass",
        "mana confluence",
        "reflecting pool",
        "path of ancestry",
    ),
    text_rules=(
        TextRule(_FIXING, Importance.MEDIUM, "Color-fixing land", types=("land",)),
        TextRule(
            re.compile(r"search your library for [^.]*land"),
            Importance.MEDIUM,
            "Fetch land",
            types=("land",),
        ),
        TextRule(None, Importance.LOW, "Land", types=("land",)),
    ),
    target=proportional_target(36),
    exclude=lambda card: not is_land(card),
    extra_suggestions=_mana_base_suggestions,
)


# =============================================================================
# SYNERGY
# =============================================================================

SYNERGY_TAG_FRAGMENTS = ("synergy-", "typal-", "trigger", "matters")


def _synergy_suggestions(
    matches: list[CardEvaluation],
    target: int,
    mainboard: Sequence[CardAggregate],
    commanders: Sequence[CardAggregate],
) -> list[str]:
    counts: Counter[str] = Counter()
    for match in matches:
        for tag in match.card.oracle_tags:
            if any(fragment in tag for fragment in SYNERGY_TAG_FRAGMENTS):
                counts[tag] += match.card.quantity

    shared = sorted(
        ((tag, count) for tag, count in counts.items() if count > 1),
        key=lambda item: (-item[1], item[0]),
    )
    if not shared:
        if matches:
            return ["No synergy is shared by more than one card. Build around a single theme."]
        return []

    tag, count = shared[0]
    return [f"Strongest shared synergy: {tag} ({count} cards)."]


SYNERGY = CategoryRule(
    key="synergy",
    name="Synergy",
    description="Cards that reward a shared theme",
    advice="cards that support the deck's main theme",
    tag_fragments=SYNERGY_TAG_FRAGMENTS,
    text_rules=(
        TextRule(
            re.compile(r"for each [^.]*you control|whenever (a|another) [^.]*you control"),
            Importance.LOW,
            "Rewards a board theme",
        ),
    ),
    target=tiered_target(15),
    extra_suggestions=_synergy_suggestions,
)


# =============================================================================
# NOT YET EVALUATED
# =============================================================================

CARD_SELECTION = CategoryRule(
    key="card_selection",
    name="Card Selection",
    description="Tutors and library manipulation",
    placeholder=True,
)

RECURSION = CategoryRule(
    key="recursion",
    name="Recursion",
    description="Graveyard recursion and reanimation",
    placeholder=True,
)


# Evaluation order; also the order of categories in aggregate output
DEFAULT_RULES: tuple[CategoryRule, ...] = (
    RAMP,
    CARD_ADVANTAGE,
    INTERACTION,
    WIN_CONDITIONS,
    TARGETED_REMOVAL,
    BOARD_WIPES,
    MANA_BASE,
    SYNERGY,
    CARD_SELECTION,
    RECURSION,
)
