from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

# Application settings using pydantic-settings for structured configuration

class Settings(BaseSettings):
    # --- App ---
    app_name: str = "Text Mining - Word and Document Frequency"
    app_env: str = "development"          # e.g., development / staging / production
    debug: bool = True

    # --- Ranking ---
    # the chapter shows the 15 highest tf-idf words per book
    default_top_n: int = 15
    top_with_ties: bool = False

    # --- Counting ---
    lowercase_terms: bool = True

    # --- Zipf's law ---
    # middle section of the rank range, where the power law holds best
    zipf_min_rank: int = 10
    zipf_max_rank: int = 500

    # pydantic v2 / pydantic-settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",     # auto-load from your .env
        case_sensitive=False,  # .env keys can be upper/lower
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """Cache settings so we don’t re-parse .env on every request."""
    return Settings()
