"""Configuration and environment settings for the MoneyWhisper API."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings for the MoneyWhisper API."""

    groq_api_key: str | None = None
    llm_model: str = "llama-3.3-70b-versatile"
    extraction_temperature: float = 0.1
    extraction_max_completion_tokens: int = 512
    projection_temperature: float = 0.2
    projection_max_completion_tokens: int = 1500
    llm_top_p: float = 0.95
    llm_stream: bool = True
    llm_timeout_seconds: float = 60.0
    categories_file: str = "categories.json"
    database_url: str = "sqlite:///money_whisper.db"
    log_file: str = "logs/money-whisper.log"
    log_level: str = "INFO"
    currency_symbol: str = "₹"
    server_host: str = "127.0.0.1"
    server_port: int = 8000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def get_settings() -> "Settings":
    """Return an instance of the application settings."""
    return Settings()
