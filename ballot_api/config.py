"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic import SecretStr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration.

    Values are read from environment variables (or a `.env` file).
    """

    # Chain
    rpc_url: str
    contract_address: str
    private_key: SecretStr
    contract_abi_path: str | None = None
    chain_timeout_seconds: float = 120.0
    receipt_poll_latency_seconds: float = 0.5

    # App
    app_name: str = "Ballot API"
    app_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "*"
    host: str = "127.0.0.1"
    port: int = 3000

    # Performance tuning
    slow_request_log_threshold_ms: int = 0
    slow_chain_call_log_threshold_ms: int = 0

    @property
    def origins_list(self) -> list[str]:
        """Parse comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()  # type: ignore[call-arg]
