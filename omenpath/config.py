from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="OMENPATH_")

    app_name: str = "Omenpath"
    debug: bool = False
    log_level: str = "INFO"

    scryfall_api_url: str = "https://api.scryfall.com"
    scryfall_user_agent: str = "Omenpath/1.0"
    scryfall_timeout: float = 30.0

    # Scryfall asks for 50-100ms between requests
    scryfall_rate_limit_delay: float = 0.1


settings = Settings()


# =============================================================================
# SCRYFALL LIMITS
# =============================================================================

# Hard maximum of identifiers accepted by POST /cards/collection
SCRYFALL_BATCH_SIZE = 75

# Scryfall ids are UUIDs; some exporters append a suffix
SCRYFALL_ID_LENGTH = 36


# =============================================================================
# CONVERSION
# =============================================================================

# Formats scoring below this are never reported as detected
MIN_DETECTION_SCORE = 0.3

# Row 1 of every input and output file is the header row
FIRST_DATA_ROW = 2

DEFAULT_CONDITION = "Near Mint"
