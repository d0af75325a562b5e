from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint, Index, event
from database import Base
from models.types import Money


class ImmutableTransactionError(Exception):
	"""Raised when code tries to update or delete a stored Transaction row."""


class Transaction(Base):
	__tablename__ = "transactions"

	id = Column(Integer, primary_key=True, index=True)
	user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
	type = Column(String(4), nullable=False)  # 'BUY' or 'SELL'
	symbol = Column(String, nullable=False)
	quantity = Column(Integer, nullable=False)
	price = Column(Money(), nullable=False)
	executed_at = Column(DateTime, default=datetime.utcnow, nullable=False)

	__table_args__ = (
		CheckConstraint("type IN ('BUY', 'SELL')", name='ck_transactions_type'),
		CheckConstraint('quantity >= 1', name='ck_transactions_quantity_positive'),
		CheckConstraint('price >= 0', name='ck_transactions_price_non_negative'),
		Index('ix_transactions_user_executed', 'user_id', 'executed_at'),
	)


@event.listens_for(Transaction, "before_update")
def _reject_update(mapper, connection, target):
	raise ImmutableTransactionError(f"transaction {target.id} is append-only")


@event.listens_for(Transaction, "before_delete")
def _reject_delete(mapper, connection, target):
	raise ImmutableTransactionError(f"transaction {target.id} is append-only")
