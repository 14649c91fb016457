"""Configuration loading utilities for the otcswap client.

This module loads YAML configuration files that store the RPC endpoint,
the escrow contract address, expiry defaults and event scanning
settings. A default `config.yaml` at the project root is used when no
path is provided.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config.yaml"


class RateLimitConfig(BaseModel):
    """Token bucket settings for RPC calls."""

    rate: float = Field(10.0, gt=0)
    capacity: int = Field(20, ge=1)
    # tokens charged per eth_getLogs request
    log_query_cost: float = Field(1.0, gt=0)

    @model_validator(mode="after")
    def _cost_fits_bucket(self) -> "RateLimitConfig":
        if self.log_query_cost > self.capacity:
            raise ValueError("log_query_cost cannot exceed capacity")
        return self


class LedgerConfig(BaseModel):
    """Schema for the escrow ledger connection."""

    rpc_url: str | None = None
    contract_address: str | None = None
    abi_path: str | None = None
    private_key: str | None = None
    confirmation_timeout: float = Field(120.0, gt=0)
    poll_latency: float = Field(0.5, gt=0)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)


class ExpiryConfig(BaseModel):
    """Fallback expiry constants used when the ledger cannot be read."""

    order_lifetime: int = Field(7 * 24 * 60 * 60, ge=0)
    grace_period: int = Field(7 * 24 * 60 * 60, ge=0)


class EventsConfig(BaseModel):
    """Event log scanning settings."""

    from_block: int = Field(0, ge=0)
    block_chunk_size: int = Field(5000, ge=1)


class ConfigModel(BaseModel):
    """Top-level configuration schema."""

    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    expiry: ExpiryConfig = Field(default_factory=ExpiryConfig)
    events: EventsConfig = Field(default_factory=EventsConfig)


def load_config(path: str | Path | None = None) -> Dict[str, Any]:
    """Load configuration from a YAML file with validation.

    Parameters
    ----------
    path : str | Path | None
        Optional path to a YAML file. If ``None`` the default project level
        ``config.yaml`` is used.

    Returns
    -------
    dict
        Parsed configuration dictionary validated against :class:`ConfigModel`.
    """

    cfg_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open() as f:
        data = yaml.safe_load(f) or {}
    try:
        model = ConfigModel.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc

    # Fill connection settings and the signing key from environment variables if not provided in config
    ledger = model.ledger
    ledger.rpc_url = ledger.rpc_url or os.getenv("OTC_RPC_URL")
    ledger.contract_address = ledger.contract_address or os.getenv("OTC_CONTRACT_ADDRESS")
    ledger.private_key = ledger.private_key or os.getenv("OTC_PRIVATE_KEY")

    return model.model_dump()


__all__ = ["load_config", "DEFAULT_CONFIG_PATH", "ConfigModel"]
