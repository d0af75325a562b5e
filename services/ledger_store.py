"""Ledger store: durable storage for users, holdings and transactions.

The trade engine only talks to the ``LedgerStore`` / ``LedgerUnit`` protocols.
``SqlLedgerStore`` is the SQLAlchemy implementation:

- atomic(user_id) -> context manager yielding a LedgerUnit; every write made
  through the unit commits together or not at all. Units for the same user
  are serialized (in-process lock + SELECT ... FOR UPDATE on the user row).
- get_user / list_holdings / list_transactions -> plain reads for the
  portfolio view; no locks taken.
- create_user -> used when an account is opened.

Database connectivity problems, lock waits that exceed the configured timeout
and pool exhaustion all surface as StoreUnavailable.
"""
from __future__ import annotations
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Callable, ContextManager, Dict, Iterator, List, Optional, Protocol

from sqlalchemy.exc import IntegrityError, OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

import database
from config import settings
from models.holding import Holding
from models.transaction import Transaction
from models.user import User
from services.errors import AccountExists, StoreUnavailable
from services.ledger_types import HoldingState, TradeSide, TransactionRecord, UserSnapshot

logger = logging.getLogger(__name__)

AVG_COST_QUANT = Decimal("0.000001")


class LedgerUnit(Protocol):
    user_id: int
    def get_user(self) -> Optional[UserSnapshot]: ...
    def save_user(self, user: UserSnapshot) -> UserSnapshot: ...
    def get_holding(self, symbol: str) -> Optional[HoldingState]: ...
    def upsert_holding(self, holding: HoldingState) -> HoldingState: ...
    def delete_holding(self, symbol: str) -> None: ...
    def append_transaction(self, side: TradeSide, symbol: str, quantity: int, price: Decimal) -> TransactionRecord: ...


class LedgerStore(Protocol):
    def atomic(self, user_id: int) -> ContextManager[LedgerUnit]: ...
    def get_user(self, user_id: int) -> Optional[UserSnapshot]: ...
    def list_holdings(self, user_id: int) -> List[HoldingState]: ...
    def list_transactions(self, user_id: int) -> List[TransactionRecord]: ...


def _user_snapshot(row: User) -> UserSnapshot:
    return UserSnapshot(id=row.id, username=row.username, email=row.email, cash=Decimal(row.cash), created_at=row.created_at)


def _holding_state(row: Holding) -> HoldingState:
    return HoldingState(symbol=row.symbol, quantity=row.quantity, avg_cost=Decimal(row.avg_cost))


def _transaction_record(row: Transaction) -> TransactionRecord:
    return TransactionRecord(
        id=row.id,
        type=TradeSide(row.type),
        symbol=row.symbol,
        quantity=row.quantity,
        price=Decimal(row.price),
        executed_at=row.executed_at,
    )


class UserLockRegistry:
    """One lock per user id. Locks are never dropped; the set of users is bounded."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.Lock] = {}

    def get(self, user_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.Lock()
            return lock


class SqlLedgerUnit:
    def __init__(self, session: Session, user_id: int):
        self.session = session
        self.user_id = user_id
        self._user_row: Optional[User] = None

    def _holding_row(self, symbol: str) -> Optional[Holding]:
        return (
            self.session.query(Holding)
            .filter(Holding.user_id == self.user_id, Holding.symbol == symbol)
            .with_for_update()
            .first()
        )

    def get_user(self) -> Optional[UserSnapshot]:
        if self._user_row is None:
            self._user_row = (
                self.session.query(User).filter(User.id == self.user_id).with_for_update().first()
            )
        return _user_snapshot(self._user_row) if self._user_row is not None else None

    def save_user(self, user: UserSnapshot) -> UserSnapshot:
        if self._user_row is None:
            self.get_user()
        if self._user_row is None:
            raise ValueError(f"user {self.user_id} is not loaded in this unit")
        self._user_row.cash = user.cash
        self.session.flush()
        return _user_snapshot(self._user_row)

    def get_holding(self, symbol: str) -> Optional[HoldingState]:
        row = self._holding_row(symbol)
        return _holding_state(row) if row is not None else None

    def upsert_holding(self, holding: HoldingState) -> HoldingState:
        if holding.quantity < 1:
            raise ValueError("holding quantity must be >= 1; delete it instead")
        avg_cost = holding.avg_cost.quantize(AVG_COST_QUANT, rounding=ROUND_HALF_EVEN)
        row = self._holding_row(holding.symbol)
        if row is None:
            row = Holding(user_id=self.user_id, symbol=holding.symbol, quantity=holding.quantity, avg_cost=avg_cost, last_updated=datetime.utcnow())
            self.session.add(row)
        else:
            row.quantity = holding.quantity
            row.avg_cost = avg_cost
            row.last_updated = datetime.utcnow()
        self.session.flush()
        return HoldingState(symbol=holding.symbol, quantity=holding.quantity, avg_cost=avg_cost)

    def delete_holding(self, symbol: str) -> None:
        row = self._holding_row(symbol)
        if row is not None:
            self.session.delete(row)
            self.session.flush()

    def append_transaction(self, side: TradeSide, symbol: str, quantity: int, price: Decimal) -> TransactionRecord:
        row = Transaction(
            user_id=self.user_id,
            type=TradeSide(side).value,
            symbol=symbol,
            quantity=quantity,
            price=price,
            executed_at=datetime.utcnow(),
        )
        self.session.add(row)
        self.session.flush()
        return TransactionRecord(
            id=row.id, type=TradeSide(side), symbol=symbol, quantity=quantity, price=price, executed_at=row.executed_at
        )


class SqlLedgerStore:
    def __init__(self, session_factory: Callable[[], Session], lock_timeout: float = 5.0, locks: UserLockRegistry | None = None):
        self.session_factory = session_factory
        self.lock_timeout = lock_timeout
        self.locks = locks or UserLockRegistry()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self.session_factory()
        try:
            yield session
        except (OperationalError, PoolTimeoutError) as e:
            session.rollback()
            raise StoreUnavailable(f"ledger store unavailable: {e.__class__.__name__}") from e
        finally:
            session.close()

    @contextmanager
    def atomic(self, user_id: int) -> Iterator[SqlLedgerUnit]:
        lock = self.locks.get(user_id)
        if not lock.acquire(timeout=self.lock_timeout):
            logger.warning("Timed out after %.2fs waiting for ledger lock of user %s", self.lock_timeout, user_id)
            raise StoreUnavailable(f"timed out waiting for ledger lock of user {user_id}")
        try:
            with self._session() as session:
                try:
                    yield SqlLedgerUnit(session, user_id)
                    session.commit()
                except BaseException:
                    session.rollback()
                    raise
        finally:
            lock.release()

    def get_user(self, user_id: int) -> Optional[UserSnapshot]:
        with self._session() as session:
            row = session.get(User, user_id)
            return _user_snapshot(row) if row is not None else None

    def list_holdings(self, user_id: int) -> List[HoldingState]:
        with self._session() as session:
            rows = session.query(Holding).filter(Holding.user_id == user_id).order_by(Holding.symbol.asc()).all()
            return [_holding_state(r) for r in rows]

    def list_transactions(self, user_id: int) -> List[TransactionRecord]:
        """Newest first; equal timestamps fall back to reverse insertion order."""
        with self._session() as session:
            rows = (
                session.query(Transaction)
                .filter(Transaction.user_id == user_id)
                .order_by(Transaction.executed_at.desc(), Transaction.id.desc())
                .all()
            )
            return [_transaction_record(r) for r in rows]

    def create_user(self, username: str, email: str, password_hash: str, cash: Decimal) -> UserSnapshot:
        with self._session() as session:
            row = User(username=username, email=email, password=password_hash, cash=cash, created_at=datetime.utcnow())
            session.add(row)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise AccountExists(username, email) from e
            return _user_snapshot(row)


_default_store: SqlLedgerStore | None = None
_default_store_lock = threading.Lock()


def get_ledger_store() -> SqlLedgerStore:
    """FastAPI dependency returning the process-wide store bound to database.SessionLocal."""
    global _default_store
    with _default_store_lock:
        if _default_store is None:
            _default_store = SqlLedgerStore(database.SessionLocal, lock_timeout=settings.STORE_TIMEOUT_SECONDS)
        return _default_store
