"""Application configuration via pydantic-settings.

Reads from .env file or environment variables. All settings are validated
at startup — an unknown network name fails fast with a clear error message.

Usage:
    from escrow_orchestrator.config import get_settings
    settings = get_settings()
    print(settings.xrpl_url)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from escrow_orchestrator.domain.enums import LedgerNetwork

NETWORK_URLS: dict[LedgerNetwork, str] = {
    LedgerNetwork.TESTNET: "wss://s.altnet.rippletest.net:51233",
    LedgerNetwork.MAINNET: "wss://xrplcluster.com",
    LedgerNetwork.DEVNET: "wss://s.devnet.rippletest.net:51233",
}


class Settings(BaseSettings):
    """Central configuration for the Escrow Orchestrator."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False
    app_log_level: str = "INFO"
    app_host: str = "0.0.0.0"
    app_port: int = 10000
    app_version: str = "1.0.0"
    app_max_body_bytes: int = 10 * 1024

    # --- CORS ---
    allowed_origins: str = "*"

    # --- Ledger ---
    xrpl_network: LedgerNetwork = LedgerNetwork.TESTNET
    xrpl_server_url: str = ""  # overrides the network preset when set
    xrpl_connection_timeout_seconds: float = 10.0
    xrpl_request_timeout_seconds: float = 5.0

    # --- Escrow ---
    # Run the signer-list check for create and cancel too, not only finish.
    escrow_multisig_check_all_operations: bool = False

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def xrpl_url(self) -> str:
        """Explicit server URL if configured, otherwise the network preset."""
        return self.xrpl_server_url or NETWORK_URLS[self.xrpl_network]

    @property
    def allowed_origin_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        if not self.allowed_origins:
            return ["*"]
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton of the application settings."""
    return Settings()
