"""Ledger connectors.

:mod:`ledger` holds the transport-neutral interface; :mod:`web3_ledger`
implements it for EVM chains and is imported explicitly so the rest of
the package does not require a web3 import.
"""

from .ledger import EventLog, LedgerConnector, OrderRecord, Signer, TxReceipt

__all__ = ["EventLog", "LedgerConnector", "OrderRecord", "Signer", "TxReceipt"]
