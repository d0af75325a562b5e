from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

class TradeSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"

@dataclass(frozen=True)
class Order:
    """A validated order: symbol normalized, quantity a positive int, price a positive finite Decimal."""
    symbol: str
    quantity: int
    price: Decimal

@dataclass(frozen=True)
class HoldingState:
    symbol: str
    quantity: int
    avg_cost: Decimal

@dataclass(frozen=True)
class TransactionRecord:
    id: Optional[int]
    type: TradeSide
    symbol: str
    quantity: int
    price: Decimal
    executed_at: datetime

@dataclass(frozen=True)
class UserSnapshot:
    # No credential field: this is what leaves the ledger
    id: int
    username: str
    email: str
    cash: Decimal
    created_at: datetime

@dataclass(frozen=True)
class TradeResult:
    user: UserSnapshot
    holding: Optional[HoldingState]  # None when the position was fully liquidated
    transaction: TransactionRecord

@dataclass(frozen=True)
class Portfolio:
    user: UserSnapshot
    holdings: list[HoldingState]
    transactions: list[TransactionRecord]  # newest first
