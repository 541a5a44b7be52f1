"""Configuration models for the application."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EventConnectConfig(BaseSettings):
    """Main configuration for the EventConnect admin client."""

    # Backend
    api_base_url: str = Field(default="http://localhost:8080/api", description="Base URL of the REST API")
    request_timeout: float = Field(default=10.0, gt=0, description="HTTP timeout in seconds")
    source_timeout: float = Field(default=10.0, gt=0, description="Per-source timeout for dashboard loads")

    # Session record
    session_path: str = Field(default="./cache/eventconnect_session.db")
    session_key: str = Field(default="currentUser")

    # Dashboard
    recent_items: int = Field(default=3, ge=0)
    daily_history_days: int = Field(default=7, ge=1)
    monthly_history_months: int = Field(default=12, ge=1)

    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="EVENTCONNECT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
