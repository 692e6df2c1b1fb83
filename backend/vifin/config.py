"""
Application configuration using Pydantic settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # App
    app_name: str = "Vifin"
    environment: str = "development"  # development, production, test
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./vifin.sqlite"

    # Sepay aggregator
    sepay_api_key: Optional[str] = None
    sepay_webhook_secret: Optional[str] = None
    sepay_base_url: str = "https://my.sepay.vn/userapi"
    sepay_signature_header: str = "x-sepay-signature"
    sepay_timestamp_header: str = "x-sepay-timestamp"
    sepay_timeout_seconds: float = 10.0
    webhook_timestamp_tolerance_seconds: int = 300
    # Route unmatched webhooks to the first active account (demo only)
    webhook_fallback_to_any_account: bool = False

    # Alerts
    alerts_enabled: bool = True
    large_transaction_threshold: float = 5_000_000
    unusual_spending_multiplier: float = 3.0
    unusual_spending_min_history: int = 5
    category_spike_threshold: float = 150.0  # Percent of the 3-month average

    # Google Sheets import
    google_sheets_spreadsheet_id: Optional[str] = None
    google_sheets_range: str = "A1:J1000"

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    frontend_url: str = "http://localhost:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


# Global settings instance
settings = Settings()
