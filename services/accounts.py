"""Account provisioning for the signup flow: creates a user with the starting cash balance."""
from __future__ import annotations
import logging
from decimal import Decimal

from config import settings
from models.types import MONEY_MAX
from security import get_password_hash
from services.ledger_store import SqlLedgerStore
from services.ledger_types import UserSnapshot

logger = logging.getLogger(__name__)


def open_account(store: SqlLedgerStore, username: str, email: str, password: str, starting_cash: Decimal | None = None) -> UserSnapshot:
    username = (username or "").strip()
    email = (email or "").strip().lower()
    if not username or not email or not password:
        raise ValueError("username, email and password are required")
    cash = settings.STARTING_CASH if starting_cash is None else Decimal(starting_cash)
    if cash < 0 or cash > MONEY_MAX:
        raise ValueError(f"starting cash must be between 0 and {MONEY_MAX}")
    user = store.create_user(username, email, get_password_hash(password), cash)
    logger.info("Opened account %s (%s) with cash %s", user.id, username, cash)
    return user
