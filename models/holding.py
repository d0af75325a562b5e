from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from database import Base
from models.types import Money


class Holding(Base):
	__tablename__ = "holdings"

	id = Column(Integer, primary_key=True, index=True)
	user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
	symbol = Column(String, nullable=False)
	# A row with quantity 0 is deleted, never stored
	quantity = Column(Integer, nullable=False)
	avg_cost = Column(Money(), nullable=False)
	last_updated = Column(DateTime, default=datetime.utcnow, nullable=False)

	__table_args__ = (
		UniqueConstraint('user_id', 'symbol', name='uq_user_symbol'),
		CheckConstraint('quantity >= 1', name='ck_holdings_quantity_positive'),
		CheckConstraint('avg_cost >= 0', name='ck_holdings_avg_cost_non_negative'),
	)
