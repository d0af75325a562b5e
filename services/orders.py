"""Coerce loosely typed trade payloads into a strict Order at the engine boundary."""
from __future__ import annotations
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from numbers import Integral

from models.types import MONEY_SCALE
from services.errors import InvalidOrder
from services.ledger_types import Order

PRICE_PLACES = MONEY_SCALE
MAX_PRICE = Decimal("1e13")
# Integer column on Postgres
MAX_QUANTITY = 2**31 - 1


def normalize_symbol(symbol) -> str:
    if not isinstance(symbol, str):
        raise InvalidOrder("symbol must be a string")
    s = symbol.strip().upper()
    if not s:
        raise InvalidOrder("symbol is required")
    return s


def _quantity(value) -> int:
    if isinstance(value, bool):
        raise InvalidOrder("quantity must be a positive integer")
    if isinstance(value, Integral):
        qty = int(value)
    elif isinstance(value, (float, Decimal, str)):
        try:
            d = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidOrder("quantity must be a positive integer")
        if not d.is_finite() or d != d.to_integral_value():
            raise InvalidOrder("quantity must be a whole number of shares")
        qty = int(d)
    else:
        raise InvalidOrder("quantity must be a positive integer")
    if qty <= 0:
        raise InvalidOrder("quantity must be a positive integer")
    if qty > MAX_QUANTITY:
        raise InvalidOrder("quantity is out of range")
    return qty


def _price(value) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (Integral, float, Decimal, str)):
        raise InvalidOrder("price must be a positive number")
    try:
        # str() first so floats keep their shortest decimal repr (0.1 -> "0.1")
        p = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidOrder("price must be a positive number")
    if not p.is_finite() or p <= 0:
        raise InvalidOrder("price must be a positive finite number")
    if p > MAX_PRICE:
        raise InvalidOrder("price is out of range")
    if p != p.quantize(Decimal(1).scaleb(-PRICE_PLACES), rounding=ROUND_DOWN):
        raise InvalidOrder(f"price supports at most {PRICE_PLACES} decimal places")
    return p


def parse_order(symbol, quantity, price) -> Order:
    return Order(symbol=normalize_symbol(symbol), quantity=_quantity(quantity), price=_price(price))
