"""Configuration management using Pydantic Settings"""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from credit_relay.domain.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Chain connection
    rpc_url: Optional[str] = None
    private_key: Optional[str] = None

    # Deployed contracts
    credit_pool_address: Optional[str] = None
    tranche_manager_address: Optional[str] = None
    access_controller_address: Optional[str] = None
    usdc_address: Optional[str] = None
    senior_lp_token_address: Optional[str] = None
    junior_lp_token_address: Optional[str] = None

    # Metadata pinning service
    pinata_api_key: Optional[str] = None
    pinata_secret_api_key: Optional[str] = None
    pinata_api_base: str = "https://api.pinata.cloud"
    ipfs_gateway_url: str = "https://gateway.pinata.cloud"

    # Service
    service_name: str = "credit-relay"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: List[str] = ["*"]

    # Timeouts
    http_timeout_seconds: float = 10.0
    chain_confirmation_timeout_seconds: float = 120.0
    chain_poll_interval_seconds: float = 1.0

    def require(self, *names: str) -> tuple:
        """
        Return the values of the named settings, in order.

        Deployment values are checked at the point of use rather than at
        startup, so a relay with no chain configured still answers /health.

        Raises:
            ConfigurationError: If any named setting is unset or empty
        """
        missing = [name.upper() for name in names if not getattr(self, name)]
        if missing:
            raise ConfigurationError(f"Missing configuration: {', '.join(missing)}")
        return tuple(getattr(self, name) for name in names)


settings = Settings()
