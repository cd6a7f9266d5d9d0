"""Application configuration via pydantic-settings.

Reads from .env file or environment variables. All settings are validated
at startup. If a setting is malformed, the app fails fast with a clear
error message.

Usage:
    from atomic_exchange.config import get_settings
    settings = get_settings()
    print(settings.min_swap_amount)
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class ProtocolConstants:
    """Protocol parameters consumed by the engines.

    Engines take this value rather than Settings so the core never reads
    the environment.
    """

    min_swap_amount: int = 1000
    max_timeout_blocks: int = 1008
    max_participants_per_mixer: int = 100
    mixer_fee_bps: int = 5
    protocol_fee_bps: int = 2
    fee_denominator: int = 1000
    contract_version: str = "1.0.0"
    enforce_raw_timelock_bound: bool = True
    count_distinct_signers: bool = True


class Settings(BaseSettings):
    """Central configuration for the atomic exchange."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = True
    app_log_level: str = "DEBUG"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    cors_origins: list[str] = ["*"]

    # --- Protocol ---
    min_swap_amount: int = Field(default=1000, ge=1)
    max_timeout_blocks: int = Field(default=1008, ge=1)
    max_participants_per_mixer: int = Field(default=100, ge=1)
    mixer_fee_bps: int = Field(default=5, ge=0)  # 0.5% at denominator 1000
    protocol_fee_bps: int = Field(default=2, ge=0)  # 0.2%
    fee_denominator: int = Field(default=1000, ge=1)
    contract_version: str = "1.0.0"
    admin_identity: str = "deployer"
    # Claim also requires height < raw time_lock, not only < expiration height.
    enforce_raw_timelock_bound: bool = True
    # False restores counting every approval call, even from the same signer.
    count_distinct_signers: bool = True

    # --- Verifiers ---
    signature_verifier: str = "fixed_width"
    proof_verifier: str = "non_empty"
    signature_length: int = Field(default=65, ge=1)

    # --- Journal ---
    # Empty keeps the journal in memory; e.g. "sqlite:///ledger.db" to persist.
    journal_url: str = ""
    journal_echo_sql: bool = False
    journal_retry_attempts: int = Field(default=3, ge=1)

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    def protocol_constants(self) -> ProtocolConstants:
        """Project the protocol keys into the value the engines consume."""
        return ProtocolConstants(
            min_swap_amount=self.min_swap_amount,
            max_timeout_blocks=self.max_timeout_blocks,
            max_participants_per_mixer=self.max_participants_per_mixer,
            mixer_fee_bps=self.mixer_fee_bps,
            protocol_fee_bps=self.protocol_fee_bps,
            fee_denominator=self.fee_denominator,
            contract_version=self.contract_version,
            enforce_raw_timelock_bound=self.enforce_raw_timelock_bound,
            count_distinct_signers=self.count_distinct_signers,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton of the application settings."""
    return Settings()
