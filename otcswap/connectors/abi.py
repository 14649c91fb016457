"""ABI fragments for the escrow contract and ERC20 tokens.

Only the functions and events the client touches are listed. A full ABI
can be supplied through the ``ledger.abi_path`` config option instead.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List


def _inputs(*pairs: tuple, indexed: tuple = ()) -> List[Dict[str, Any]]:
    return [
        {"name": name, "type": typ, "indexed": name in indexed}
        for name, typ in pairs
    ]


def _event(name: str, *pairs: tuple, indexed: tuple = ()) -> Dict[str, Any]:
    return {
        "type": "event",
        "name": name,
        "anonymous": False,
        "inputs": _inputs(*pairs, indexed=indexed),
    }


def _function(name: str, inputs=(), outputs=(), mutability: str = "view") -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "stateMutability": mutability,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
    }


ORDER_FIELDS = (
    ("maker", "address"),
    ("taker", "address"),
    ("sellToken", "address"),
    ("sellAmount", "uint256"),
    ("buyToken", "address"),
    ("buyAmount", "uint256"),
    ("timestamp", "uint256"),
    ("isActive", "bool"),
    ("orderCreationFee", "uint256"),
)

ESCROW_ABI: List[Dict[str, Any]] = [
    _function("orderCreationFee", outputs=[("", "uint256")]),
    _function("ORDER_EXPIRY", outputs=[("", "uint256")]),
    _function("GRACE_PERIOD", outputs=[("", "uint256")]),
    _function("orders", inputs=[("", "uint256")], outputs=ORDER_FIELDS),
    _function(
        "createOrder",
        inputs=[
            ("taker", "address"),
            ("sellToken", "address"),
            ("sellAmount", "uint256"),
            ("buyToken", "address"),
            ("buyAmount", "uint256"),
        ],
        outputs=[("", "uint256")],
        mutability="payable",
    ),
    _function("fillOrder", inputs=[("orderId", "uint256")], mutability="nonpayable"),
    _function("cancelOrder", inputs=[("orderId", "uint256")], mutability="nonpayable"),
    _function("cleanupExpiredOrders", mutability="nonpayable"),
    _event(
        "OrderCreated",
        ("orderId", "uint256"),
        ("maker", "address"),
        ("taker", "address"),
        ("sellToken", "address"),
        ("sellAmount", "uint256"),
        ("buyToken", "address"),
        ("buyAmount", "uint256"),
        ("timestamp", "uint256"),
        ("orderCreationFee", "uint256"),
        indexed=("orderId", "maker", "taker"),
    ),
    _event(
        "OrderFilled",
        ("orderId", "uint256"),
        ("maker", "address"),
        ("taker", "address"),
        ("sellToken", "address"),
        ("sellAmount", "uint256"),
        ("buyToken", "address"),
        ("buyAmount", "uint256"),
        ("timestamp", "uint256"),
        indexed=("orderId", "maker", "taker"),
    ),
    _event(
        "OrderCanceled",
        ("orderId", "uint256"),
        ("maker", "address"),
        ("timestamp", "uint256"),
        indexed=("orderId", "maker"),
    ),
    _event(
        "OrderCleanedUp",
        ("orderId", "uint256"),
        ("maker", "address"),
        ("timestamp", "uint256"),
        indexed=("orderId", "maker"),
    ),
    _event(
        "RetryOrder",
        ("oldOrderId", "uint256"),
        ("newOrderId", "uint256"),
        ("maker", "address"),
        ("tries", "uint256"),
        ("timestamp", "uint256"),
        indexed=("oldOrderId", "newOrderId", "maker"),
    ),
    _event(
        "CleanupError",
        ("orderId", "uint256"),
        ("reason", "string"),
        ("timestamp", "uint256"),
        indexed=("orderId",),
    ),
    _event(
        "CleanupFeesDistributed",
        ("recipient", "address"),
        ("amount", "uint256"),
        ("timestamp", "uint256"),
        indexed=("recipient",),
    ),
]

ERC20_ABI: List[Dict[str, Any]] = [
    _function("name", outputs=[("", "string")]),
    _function("symbol", outputs=[("", "string")]),
    _function("decimals", outputs=[("", "uint8")]),
    _function("balanceOf", inputs=[("owner", "address")], outputs=[("", "uint256")]),
    _function(
        "approve",
        inputs=[("spender", "address"), ("amount", "uint256")],
        outputs=[("", "bool")],
        mutability="nonpayable",
    ),
]

ESCROW_EVENT_NAMES = tuple(item["name"] for item in ESCROW_ABI if item["type"] == "event")


def load_abi(path: str | Path) -> List[Dict[str, Any]]:
    """Load an ABI from a JSON file (bare list or a ``{"abi": [...]}`` artifact)."""
    with Path(path).open() as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("abi", [])
    if not isinstance(data, list):
        raise ValueError(f"No ABI list found in {path}")
    return data


__all__ = ["ESCROW_ABI", "ERC20_ABI", "ESCROW_EVENT_NAMES", "ORDER_FIELDS", "load_abi"]
