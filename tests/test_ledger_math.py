"""Pure functions of the trade engine: no database involved."""

from decimal import Decimal

import pytest

from services.errors import InsufficientFunds, InsufficientShares, InvalidOrder, NoSuchHolding
from services.ledger_types import HoldingState, Order
from services.trade_engine import plan_buy, plan_sell, weighted_avg_cost


def test_weighted_average_of_two_lots():
    assert weighted_avg_cost(10, Decimal("100"), 10, Decimal("200")) == Decimal("150")


def test_weighted_average_from_empty_position_is_price():
    assert weighted_avg_cost(0, Decimal("0"), 7, Decimal("12.5")) == Decimal("12.5")


def test_weighted_average_uneven_lots():
    # (10*100 + 20*130) / 30 = 120
    assert weighted_avg_cost(10, Decimal("100"), 20, Decimal("130")) == Decimal("120")


def test_weighted_average_rejects_non_positive_buy():
    with pytest.raises(ValueError):
        weighted_avg_cost(10, Decimal("100"), 0, Decimal("1"))


def test_plan_buy_new_position():
    cash, h = plan_buy(Decimal("1000"), None, Order("AAPL", 5, Decimal("100")))
    assert cash == Decimal("500")
    assert h == HoldingState("AAPL", 5, Decimal("100"))


def test_plan_buy_exact_cash_allowed():
    cash, _ = plan_buy(Decimal("500"), None, Order("AAPL", 5, Decimal("100")))
    assert cash == Decimal("0")


def test_plan_buy_insufficient_funds():
    with pytest.raises(InsufficientFunds) as ei:
        plan_buy(Decimal("499.99"), None, Order("AAPL", 5, Decimal("100")))
    assert ei.value.needed == Decimal("500")
    assert ei.value.available == Decimal("499.99")


def test_plan_sell_keeps_avg_cost():
    held = HoldingState("AAPL", 20, Decimal("150"))
    cash, h = plan_sell(Decimal("0"), held, Order("AAPL", 5, Decimal("300")))
    assert cash == Decimal("1500")
    assert h.quantity == 15
    assert h.avg_cost == Decimal("150")


def test_plan_sell_all_liquidates():
    cash, h = plan_sell(Decimal("10"), HoldingState("AAPL", 3, Decimal("1")), Order("AAPL", 3, Decimal("2")))
    assert h is None
    assert cash == Decimal("16")


def test_plan_sell_without_holding():
    with pytest.raises(NoSuchHolding):
        plan_sell(Decimal("0"), None, Order("AAPL", 1, Decimal("1")))


def test_plan_sell_more_than_held():
    with pytest.raises(InsufficientShares) as ei:
        plan_sell(Decimal("0"), HoldingState("AAPL", 2, Decimal("1")), Order("AAPL", 3, Decimal("1")))
    assert (ei.value.have, ei.value.want) == (2, 3)


def test_plan_sell_rejects_cash_beyond_column_capacity():
    from models.types import MONEY_MAX
    held = HoldingState("AAPL", 1000, Decimal("1"))
    with pytest.raises(InvalidOrder):
        plan_sell(Decimal("1000"), held, Order("AAPL", 1000, Decimal("1e13")))
    cash, _ = plan_sell(MONEY_MAX - 5, held, Order("AAPL", 5, Decimal("1")))
    assert cash == MONEY_MAX


def test_plan_buy_rejects_position_beyond_share_cap():
    from services.orders import MAX_QUANTITY
    held = HoldingState("AAPL", MAX_QUANTITY, Decimal("0.000001"))
    with pytest.raises(InvalidOrder):
        plan_buy(Decimal("100"), held, Order("AAPL", 1, Decimal("0.000001")))
