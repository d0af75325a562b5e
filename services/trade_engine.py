"""Trade engine: executes BUY/SELL orders against a LedgerStore.

Functions:
- weighted_avg_cost(old_qty, old_avg_cost, bought_qty, bought_price) -> Decimal
- plan_buy(cash, holding, order) -> (new_cash, new_holding)   (raises InsufficientFunds, InvalidOrder past the share cap)
- plan_sell(cash, holding, order) -> (new_cash, new_holding | None)   (raises NoSuchHolding / InsufficientShares, InvalidOrder past the cash cap)

TradeEngine.execute_buy / execute_sell validate the payload, run the plan inside
one store unit for the user and publish ``trade.executed`` once committed.
Only StoreUnavailable is retried.
"""
from __future__ import annotations
import logging
import time
from dataclasses import replace
from decimal import Decimal
from typing import Callable, Optional, Tuple

from event_bus import publish
from models.types import MONEY_MAX
from services.errors import InsufficientFunds, InvalidOrder, InsufficientShares, NoSuchHolding, StoreUnavailable, UserNotFound
from services.ledger_store import LedgerStore, LedgerUnit
from services.ledger_types import HoldingState, Order, TradeResult, TradeSide
from services.orders import MAX_QUANTITY, parse_order

logger = logging.getLogger(__name__)


def weighted_avg_cost(old_qty: int, old_avg_cost: Decimal, bought_qty: int, bought_price: Decimal) -> Decimal:
    new_qty = old_qty + bought_qty
    if old_qty < 0 or bought_qty <= 0:
        raise ValueError("quantities must be non-negative and the bought quantity positive")
    return (old_avg_cost * old_qty + bought_price * bought_qty) / new_qty


def plan_buy(cash: Decimal, holding: Optional[HoldingState], order: Order) -> Tuple[Decimal, HoldingState]:
    total_cost = order.price * order.quantity
    if cash < total_cost:
        raise InsufficientFunds(total_cost, cash)
    if holding is not None and holding.quantity + order.quantity > MAX_QUANTITY:
        raise InvalidOrder(f"position in {order.symbol} would exceed {MAX_QUANTITY} shares")
    if holding is None:
        new_holding = HoldingState(symbol=order.symbol, quantity=order.quantity, avg_cost=order.price)
    else:
        new_holding = HoldingState(
            symbol=order.symbol,
            quantity=holding.quantity + order.quantity,
            avg_cost=weighted_avg_cost(holding.quantity, holding.avg_cost, order.quantity, order.price),
        )
    return cash - total_cost, new_holding


def plan_sell(cash: Decimal, holding: Optional[HoldingState], order: Order) -> Tuple[Decimal, Optional[HoldingState]]:
    if holding is None:
        raise NoSuchHolding(order.symbol)
    if holding.quantity < order.quantity:
        raise InsufficientShares(order.symbol, holding.quantity, order.quantity)
    remaining = holding.quantity - order.quantity
    # avg_cost is left untouched by a sell
    new_holding = replace(holding, quantity=remaining) if remaining > 0 else None
    new_cash = cash + order.price * order.quantity
    if new_cash > MONEY_MAX:
        raise InvalidOrder(f"cash after this sale would exceed the ledger maximum of {MONEY_MAX}")
    return new_cash, new_holding


class TradeEngine:
    def __init__(self, store: LedgerStore, max_attempts: int = 3, backoff_seconds: float = 0.05, sleep: Callable[[float], None] = time.sleep):
        self.store = store
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep

    def execute_buy(self, user_id: int, symbol, quantity, price) -> TradeResult:
        return self._execute(TradeSide.BUY, user_id, parse_order(symbol, quantity, price))

    def execute_sell(self, user_id: int, symbol, quantity, price) -> TradeResult:
        return self._execute(TradeSide.SELL, user_id, parse_order(symbol, quantity, price))

    def _apply(self, side: TradeSide, unit: LedgerUnit, order: Order) -> TradeResult:
        user = unit.get_user()
        if user is None:
            raise UserNotFound(unit.user_id)
        holding = unit.get_holding(order.symbol)
        if side == TradeSide.BUY:
            cash, new_holding = plan_buy(user.cash, holding, order)
        else:
            cash, new_holding = plan_sell(user.cash, holding, order)
        user = unit.save_user(replace(user, cash=cash))
        if new_holding is None:
            unit.delete_holding(order.symbol)
        else:
            new_holding = unit.upsert_holding(new_holding)
        txn = unit.append_transaction(side, order.symbol, order.quantity, order.price)
        return TradeResult(user=user, holding=new_holding, transaction=txn)

    def _execute(self, side: TradeSide, user_id: int, order: Order) -> TradeResult:
        attempt = 0
        while True:
            attempt += 1
            try:
                with self.store.atomic(user_id) as unit:
                    result = self._apply(side, unit, order)
                break
            except StoreUnavailable as e:
                if attempt >= self.max_attempts:
                    logger.error("%s %s x%s for user %s failed after %d attempts: %s", side.value, order.symbol, order.quantity, user_id, attempt, e)
                    raise
                logger.warning("%s %s for user %s hit store fault (attempt %d/%d): %s", side.value, order.symbol, user_id, attempt, self.max_attempts, e)
                self._sleep(self.backoff_seconds * attempt)
        logger.info("Executed %s %s x%s @ %s for user %s", side.value, order.symbol, order.quantity, order.price, user_id)
        publish("trade.executed", {
            "user_id": user_id,
            "side": side.value,
            "symbol": order.symbol,
            "quantity": order.quantity,
            "price": str(order.price),
            "transaction_id": result.transaction.id,
            "cash": str(result.user.cash),
            "holding_quantity": result.holding.quantity if result.holding else 0,
        })
        return result
