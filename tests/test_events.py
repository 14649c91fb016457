from otcswap.connectors.ledger import EventLog, TxReceipt
from otcswap.events import (
    CleanupErrorEvent,
    FeesDistributed,
    OrderCreated,
    OrderRetried,
    chain_order,
    decode_event,
    decode_events,
    is_terminal,
)

from conftest import MAKER, OTHER, T0, TOKEN_A, created, event


def test_decode_created() -> None:
    decoded = decode_event(created(5, block=12, log_index=3, fee=7))
    assert isinstance(decoded, OrderCreated)
    assert decoded.order_id == 5
    assert decoded.order.order_creation_fee == 7
    assert decoded.order.sell_token == TOKEN_A
    assert (decoded.block_number, decoded.log_index) == (12, 3)
    assert not is_terminal(decoded)


def test_retry_closes_old_id() -> None:
    decoded = decode_event(
        event("RetryOrder", 1, oldOrderId=4, newOrderId=9, maker=MAKER, tries=3, timestamp=T0)
    )
    assert isinstance(decoded, OrderRetried)
    assert decoded.order_id == 4
    assert is_terminal(decoded)


def test_maintenance_events_are_not_terminal() -> None:
    err = decode_event(event("CleanupError", 1, orderId=2, reason="boom", timestamp=T0))
    fee = decode_event(event("CleanupFeesDistributed", 1, recipient=OTHER, amount=1, timestamp=T0))
    assert isinstance(err, CleanupErrorEvent) and not is_terminal(err)
    assert isinstance(fee, FeesDistributed) and not is_terminal(fee)


def test_unknown_events_are_dropped() -> None:
    logs = [EventLog(name="Approval", args={}, block_number=1), created(1, block=1)]
    assert len(decode_events(logs)) == 1


def test_chain_order() -> None:
    events = decode_events([
        created(3, block=2, log_index=0),
        created(2, block=1, log_index=5),
        created(1, block=1, log_index=2),
    ])
    assert [e.order_id for e in chain_order(events)] == [1, 2, 3]


def test_receipt_events_by_name() -> None:
    receipt = TxReceipt(
        tx_hash="0x1",
        block_number=1,
        logs=(created(1, block=1), event("OrderFilled", 1, orderId=1), created(2, block=1)),
    )
    assert [log.args["orderId"] for log in receipt.events("OrderCreated")] == [1, 2]
    assert receipt.succeeded
    assert not TxReceipt(tx_hash="0x2", block_number=1, status=0).succeeded


def test_every_closing_stream_decodes_to_a_terminal_event() -> None:
    logs = [
        event("OrderFilled", 1, orderId=1, maker=MAKER, taker=OTHER, timestamp=T0),
        event("OrderCanceled", 1, 1, orderId=1, maker=MAKER, timestamp=T0),
        event("OrderCleanedUp", 1, 2, orderId=1, maker=MAKER, timestamp=T0),
        event("RetryOrder", 1, 3, oldOrderId=1, newOrderId=2, maker=MAKER, tries=1, timestamp=T0),
    ]
    decoded = decode_events(logs)
    assert len(decoded) == 4
    assert all(is_terminal(e) and e.order_id == 1 for e in decoded)
