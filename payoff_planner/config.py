"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Advisory process (OpenAI-compatible chat completions)
    advisory_endpoint: str = "http://localhost:1234/v1/chat/completions"
    advisory_model: str = "local-model"
    advisory_temperature: float = 0.2  # Low temperature for repeatable math
    advisory_api_key: str | None = None

    # Unset = no client-side timeout; callers impose their own deadline
    advisory_timeout_seconds: float | None = None

    # Planning
    default_horizon_months: int = 12

    # Service
    service_name: str = "payoff-planner"
    log_level: str = "INFO"


settings = Settings()
