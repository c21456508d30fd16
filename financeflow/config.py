"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Hosted data service (auth + tables)
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = ""
    transactions_table: str = "transactions"
    budgets_table: str = "budgets"

    # Service
    service_name: str = "financeflow"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Dashboard
    currency_symbol: str = "₹"
    monthly_goal: int = 100_000
    notification_history: int = 20


settings = Settings()
