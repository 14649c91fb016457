import pytest

from otcswap.execution.validators import fee_bounds, order_params_violation, validate_order_params
from otcswap.models import ZERO_ADDRESS, OrderParams

from conftest import TAKER, TOKEN_A, TOKEN_B


def test_fee_bounds() -> None:
    assert fee_bounds(100) == (90, 150)
    assert fee_bounds(0) == (0, 0)
    assert fee_bounds(10**18) == (9 * 10**17, 15 * 10**17)


def test_valid_params() -> None:
    params = OrderParams(sell_token=TOKEN_A, sell_amount=1, buy_token=TOKEN_B, buy_amount=1)
    assert validate_order_params(params)
    assert order_params_violation(params) is None


@pytest.mark.parametrize(
    "kwargs, reason",
    [
        ({"sell_token": ZERO_ADDRESS}, "invalid sell token"),
        ({"buy_token": ZERO_ADDRESS}, "invalid buy token"),
        ({"buy_token": TOKEN_A.lower()}, "cannot swap same token"),
        ({"sell_amount": 0}, "invalid sell amount"),
        ({"buy_amount": -5}, "invalid buy amount"),
        ({"sell_token": "0x1234"}, "invalid sell token"),
        ({"buy_token": "not-an-address"}, "invalid buy token"),
        ({"taker": "not-an-address"}, "invalid taker"),
        ({"taker": "0x" + "11" * 19}, "invalid taker"),
        ({"sell_amount": True}, "invalid sell amount"),
        ({"buy_amount": 1.5}, "invalid buy amount"),
        ({"buy_amount": "50"}, "invalid buy amount"),
    ],
)
def test_violations_name_the_rule(kwargs, reason) -> None:
    base = {"sell_token": TOKEN_A, "sell_amount": 100, "buy_token": TOKEN_B, "buy_amount": 50}
    base.update(kwargs)
    params = OrderParams(**base)
    assert order_params_violation(params) == reason
    assert not validate_order_params(params)


def test_addresses_accepted_in_any_casing() -> None:
    params = OrderParams(
        sell_token=TOKEN_A.lower(),
        sell_amount=1,
        buy_token=TOKEN_B.upper().replace("0X", "0x"),
        buy_amount=1,
        taker=TAKER,
    )
    assert order_params_violation(params) is None
