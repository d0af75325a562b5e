from models.user import User
from models.holding import Holding
from models.transaction import Transaction, ImmutableTransactionError

__all__ = ["User", "Holding", "Transaction", "ImmutableTransactionError"]
