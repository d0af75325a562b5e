"""Read-only portfolio view."""
from __future__ import annotations
from services.errors import UserNotFound
from services.ledger_store import LedgerStore
from services.ledger_types import Portfolio


def get_portfolio(store: LedgerStore, user_id: int) -> Portfolio:
    user = store.get_user(user_id)
    if user is None:
        raise UserNotFound(user_id)
    return Portfolio(
        user=user,
        holdings=store.list_holdings(user_id),
        transactions=store.list_transactions(user_id),
    )
