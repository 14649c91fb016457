import pytest

from otcswap.client import OTCClient
from otcswap.models import ExpiryInfo, OrderParams

from conftest import MAKER, T0, TAKER, TOKEN_A, TOKEN_B, WEEK, FakeSigner, created


def test_with_signer_returns_new_client(ledger) -> None:
    client = OTCClient(ledger)
    signed = client.with_signer(FakeSigner(MAKER))
    assert client.signer is None
    assert signed.signer_address == MAKER
    assert signed.ledger is client.ledger
    with pytest.raises(Exception):
        client.signer = FakeSigner(TAKER)  # frozen


@pytest.mark.asyncio
async def test_creation_fee_falls_back_to_zero(ledger) -> None:
    client = OTCClient(ledger)
    assert await client.get_order_creation_fee() == ledger.fee
    ledger.fail_on.add("order_creation_fee")
    assert await client.get_order_creation_fee() == 0


@pytest.mark.asyncio
async def test_default_expiry_feeds_policy(ledger) -> None:
    ledger.fail_on.add("order_expiry")
    client = OTCClient(ledger, default_expiry=ExpiryInfo(order_lifetime=10, grace_period=5))
    assert await client.get_expiry_info() == ExpiryInfo(order_lifetime=10, grace_period=5)
    assert await client.is_order_expired(T0, now=T0 + 11)
    assert await client.is_in_grace_period(T0, now=T0 + 15)


@pytest.mark.asyncio
async def test_client_round_trip_through_components(ledger) -> None:
    client = OTCClient(ledger, clock=lambda: T0 + 1).with_signer(FakeSigner(MAKER))
    result = await client.create_order(
        OrderParams(sell_token=TOKEN_A, sell_amount=100, buy_token=TOKEN_B, buy_amount=50)
    )
    ledger.add(created(result.order_id, block=50))
    page = await client.get_active_orders()
    assert [o.order_id for o in page.orders] == [result.order_id]
    assert not await client.is_order_expired(T0, now=T0 + WEEK)


@pytest.mark.asyncio
async def test_token_details_use_signer_balance(ledger) -> None:
    ledger.set_balance(TOKEN_A, MAKER, 42)
    assert (await OTCClient(ledger).get_token_details(TOKEN_A)).balance == 0
    signed = OTCClient(ledger).with_signer(FakeSigner(MAKER))
    assert (await signed.get_token_details(TOKEN_A)).balance == 42
