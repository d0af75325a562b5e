from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from database import Base
from models.types import Money
from datetime import datetime

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)  # bcrypt hash, never serialized
    # Only trade execution mutates cash
    cash = Column(Money(), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint('cash >= 0', name='ck_users_cash_non_negative'),
    )
