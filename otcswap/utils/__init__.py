"""
Shared helpers for the otcswap client.

Modules
-------

* :mod:`logging` – JSON structured logging used by every component.
* :mod:`monitoring` – prometheus counters and histograms for ledger
  transactions, event queries and rate limiting.
"""

from .logging import get_logger, log_json

__all__ = ["get_logger", "log_json"]
