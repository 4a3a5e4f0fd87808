"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # External Services
    records_api_base: str = "http://localhost:8001"

    # Service
    service_name: str = "pocket-cfo"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Presentation
    currency_symbol: str = "₹"

    # Purchase planner
    emi_affordability_limit_percent: float = 40.0  # strict: burden must be below this
    assumed_financing_rate_percent: float = 12.0
    comparison_tenure_months: int = 12
    savings_timeline_cap_months: int = 60


settings = Settings()
