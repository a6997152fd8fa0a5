from pathlib import Path
from typing import Any, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=3001, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of origins allowed by CORS",
    )

    # Bundler
    bundler_url: str = Field(default="", description="ERC-4337 bundler JSON-RPC endpoint")
    bundler_api_key: str = Field(default="", description="Optional API key sent as x-api-key to the bundler")

    # Paymaster
    paymaster_service_url: str = Field(default="", description="Paymaster service JSON-RPC endpoint")
    paymaster_id: str = Field(default="", description="Paymaster identifier used in the sponsorship context")

    # Chain
    entry_point_address: str = Field(default="", description="EntryPoint contract address")
    chain_id: Optional[int] = Field(default=None, description="Target chain ID")

    # Upstream transport
    upstream_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Transport timeout for bundler and paymaster calls",
    )

    # Receipt polling (orchestration layer)
    receipt_poll_max_attempts: int = Field(
        default=10,
        ge=1,
        description="Maximum number of receipt lookups before giving up",
    )
    receipt_poll_interval_ms: int = Field(
        default=3000,
        ge=0,
        description="Delay between receipt lookups in milliseconds",
    )

    # API client / CLI
    backend_url: str = Field(
        default="http://localhost:3001",
        description="Base URL of this backend, used by the API client and CLI",
    )

    @field_validator("chain_id", mode="before")
    @classmethod
    def _blank_chain_id(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def is_bundler_configured(self) -> bool:
        return bool(self.bundler_url and self.entry_point_address and self.chain_id)

    @property
    def is_paymaster_configured(self) -> bool:
        return bool(self.paymaster_service_url and self.paymaster_id)

    @property
    def receipt_poll_interval_seconds(self) -> float:
        return self.receipt_poll_interval_ms / 1000


# Global settings instance
settings = Settings()
