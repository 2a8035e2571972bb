from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/app.db"

    # Public API (used to build pagination links)
    public_api_host: str = "http://localhost:8000/api/public"

    # Schema discovery
    discover_mode: Literal["mock", "http"] = "mock"
    connector_runner_url: str = "http://localhost:8090"
    discover_timeout_seconds: float = 120.0

    # User assumed when a request carries no X-User-Id header
    default_user_id: str = "00000000-0000-0000-0000-000000000000"

    # Job history
    job_page_size_increment: int = 15


settings = Settings()
