from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Gemini (generateContent endpoint)
    # Empty key is sent as no key at all; the hosting environment may inject one
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash-preview-05-20"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # Transport timeout for a single attempt (seconds)
    request_timeout: float = 30.0

    # Retry budget shared by every action
    # Delay before retry n is retry_base_delay_ms * 2^n, so 2s, 4s, 8s by default
    retry_max_attempts: int = 3
    retry_base_delay_ms: int = 1000

    # Pause before the post-analysis hook fires, lets the UI render the result first
    result_reveal_delay_ms: int = 100

    # Ground credibility analysis with Google Search
    analyze_with_search: bool = True

    # Browser UI origins allowed by CORS
    cors_origins: list[str] = ["http://localhost:5173"]  # Vite default

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
