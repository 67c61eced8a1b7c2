from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # Must include the database name, e.g. mongodb://localhost/synopsis
    database_timeout_ms: int = 8000  # Server selection timeout for the initial connection
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 5000
    debug: bool = False
    token_secret_key: str
    token_ttl_minutes: int = 15
    cors_origins: list[str] = ["http://localhost:5173"]
    rate_limit_requests: int = 100  # Max requests per client within the window
    rate_limit_window_seconds: int = 60

    model_config = {
        "env_file": [".env"],
        "env_prefix": "SYNOPSIS_",
        "extra": "ignore",
    }
