"""Configuration models for the application."""

from typing import Optional
from urllib.parse import urlparse

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_DATABASE_NAME = "eventsapp"


class EventsApiConfig(BaseSettings):
    """Main configuration for the Events API."""

    # Document store
    mongodb_url: str = Field(default="mongodb://localhost:27017/eventsapp", description="MongoDB connection string")
    mongodb_database: Optional[str] = Field(default=None, description="Database name, defaults to the one in the URL")
    events_collection: str = Field(default="events")
    db_pool_size: int = Field(default=10, ge=1)
    db_timeout_ms: int = Field(default=5000, ge=1, description="Server selection timeout")

    # HTTP Server configuration
    http_host: str = Field(default="0.0.0.0")
    http_port: int = Field(default=3000)

    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def database_name(self) -> str:
        """Name of the database holding the events collection."""
        if self.mongodb_database:
            return self.mongodb_database

        path = urlparse(self.mongodb_url).path.lstrip("/")
        return path or DEFAULT_DATABASE_NAME
