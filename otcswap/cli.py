"""Command line front end for the otcswap client.

Examples
--------
otcswap --config config.yaml orders --maker 0xabc...
otcswap expiry
otcswap token 0xdef...
otcswap create --sell-token 0x.. --sell-amount 100 --buy-token 0x.. --buy-amount 50
otcswap cancel 42
otcswap cleanup
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys
from typing import Any, Optional, Sequence

from dotenv import load_dotenv

from .client import OTCClient
from .config import load_config
from .errors import OTCError
from .models import ZERO_ADDRESS, FillParams, OrderFilter, OrderParams
from .utils.monitoring import start_metrics_server


def _block(value: str) -> Any:
    return value if value == "latest" else int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="otcswap", description="Create, fill and inspect escrow swap orders")
    parser.add_argument(
        "--config", type=str, help="Path to configuration file")
    parser.add_argument(
        "--metrics-port", type=int,
        help="Expose prometheus metrics on this port while the command runs")
    sub = parser.add_subparsers(dest="command", required=True)

    orders = sub.add_parser("orders", help="List active orders")
    orders.add_argument("--from-block", type=int, help="First block to scan (default: config)")
    orders.add_argument("--to-block", type=_block, default="latest", help="Last block (default: latest)")
    orders.add_argument("--maker", help="Only orders created by this address")
    orders.add_argument("--sell-token", help="Only orders selling this token")
    orders.add_argument("--buy-token", help="Only orders buying this token")
    orders.add_argument("--offset", type=int, default=0)
    orders.add_argument("--limit", type=int)

    sub.add_parser("expiry", help="Show order lifetime and grace period")

    token = sub.add_parser("token", help="Show token metadata and signer balance")
    token.add_argument("address")

    create = sub.add_parser("create", help="Create an order")
    create.add_argument("--sell-token", required=True)
    create.add_argument("--sell-amount", type=int, required=True, help="Base units")
    create.add_argument("--buy-token", required=True)
    create.add_argument("--buy-amount", type=int, required=True, help="Base units")
    create.add_argument("--taker", default=ZERO_ADDRESS, help="Restrict the order to one taker")

    fill = sub.add_parser("fill", help="Fill an order")
    fill.add_argument("order_id", type=int)
    fill.add_argument("--buy-token", required=True)
    fill.add_argument("--buy-amount", type=int, required=True, help="Base units")

    cancel = sub.add_parser("cancel", help="Cancel one of your orders")
    cancel.add_argument("order_id", type=int)

    sub.add_parser("cleanup", help="Run ledger cleanup of expired orders")
    return parser


async def run_command(client: OTCClient, args: argparse.Namespace, from_block: int = 0) -> Any:
    """Execute the parsed command and return a JSON-serialisable result."""
    if args.command == "orders":
        page = await client.get_active_orders(
            OrderFilter(
                from_block=from_block if args.from_block is None else args.from_block,
                to_block=args.to_block,
                maker=args.maker,
                sell_token=args.sell_token,
                buy_token=args.buy_token,
                offset=args.offset,
                limit=args.limit,
            )
        )
        return {
            "orders": [order.to_dict() for order in page.orders],
            "pagination": dataclasses.asdict(page.pagination),
            "fromBlock": page.from_block,
            "toBlock": page.to_block,
        }
    if args.command == "expiry":
        return dataclasses.asdict(await client.get_expiry_info())
    if args.command == "token":
        return dataclasses.asdict(await client.get_token_details(args.address))
    if args.command == "create":
        params = OrderParams(
            sell_token=args.sell_token,
            sell_amount=args.sell_amount,
            buy_token=args.buy_token,
            buy_amount=args.buy_amount,
            taker=args.taker,
        )
        return dataclasses.asdict(await client.create_order(params))
    if args.command == "fill":
        params = FillParams(order_id=args.order_id, buy_token=args.buy_token, buy_amount=args.buy_amount)
        return dataclasses.asdict(await client.fill_order(params))
    if args.command == "cancel":
        return dataclasses.asdict(await client.cancel_order(args.order_id))
    if args.command == "cleanup":
        return dataclasses.asdict(await client.cleanup_expired_orders())
    raise ValueError(f"unknown command {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args.config)
        client = OTCClient.from_config(config)
    except (FileNotFoundError, ValueError) as exc:
        print(json.dumps({"error": "config", "message": str(exc)}), file=sys.stderr)
        return 1
    if args.metrics_port:
        start_metrics_server(args.metrics_port)
    try:
        result = asyncio.run(run_command(client, args, from_block=config["events"]["from_block"]))
    except OTCError as exc:
        print(json.dumps({"error": exc.kind, "operation": exc.operation, "step": exc.step, "message": exc.message}),
              file=sys.stderr)
        return 1
    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
