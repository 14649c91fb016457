"""Lazy-loading package exports to avoid importing web3 until it is needed."""

from importlib import import_module
from typing import Any

__all__ = [
    "OTCClient",
    "ExpiryPolicy",
    "TransactionSubmitter",
    "EventLogAggregator",
    "TokenMetadataResolver",
    "load_config",
    "models",
    "errors",
    "events",
]

_EXPORTS = {
    "OTCClient": "otcswap.client",
    "ExpiryPolicy": "otcswap.policy",
    "TransactionSubmitter": "otcswap.execution.submitter",
    "EventLogAggregator": "otcswap.data.aggregator",
    "TokenMetadataResolver": "otcswap.tokens",
    "load_config": "otcswap.config",
}


def __getattr__(name: str) -> Any:  # pragma: no cover - thin wrapper
    if name in _EXPORTS:
        return getattr(import_module(_EXPORTS[name]), name)
    if name in {"models", "errors", "events"}:
        return import_module(f"otcswap.{name}")
    raise AttributeError(name)
