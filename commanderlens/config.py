from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "CommanderLens"
    debug: bool = False

    tagger_url: str = "https://tagger.scryfall.com/graphql"
    tagger_user_agent: str = "CommanderLens/1.0"

    # Tagger session credentials. Empty means no auth headers are sent.
    tagger_csrf_token: str = ""
    tagger_cookie: str = ""

    tagger_timeout_seconds: float = 10.0

    # Scryfall asks for 50-100ms between requests; 150ms leaves headroom
    tagger_request_delay_seconds: float = 0.15

    # When the circuit breaker trips, cache the skipped cards as confirmed empty.
    # Set False to leave them unresolved so a later session retries them.
    cache_aborted_as_empty: bool = True


settings = Settings()


# =============================================================================
# TAG FETCHING LIMITS
# =============================================================================

# Consecutive tagger failures before the fetch loop gives up
MAX_CONSECUTIVE_FAILURES = 3


# =============================================================================
# DECK-WIDE THRESHOLDS (99-card singleton)
# =============================================================================

DEFAULT_DECK_SIZE = 99

# Lands + ramp pieces
MANA_SOURCE_TARGET = 45

HIGH_AVERAGE_CMC = 3.5

MIN_BOARD_WIPES = 2

# Percent of mainboard cards carrying at least one oracle tag
MIN_TAG_COVERAGE = 50.0
