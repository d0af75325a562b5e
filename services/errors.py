"""Ledger error taxonomy.

Every failure the ledger can report is a LedgerError subclass with a stable
``code`` (rendered to API clients) and an HTTP ``status_code``. Only
StoreUnavailable is ``retryable``; business rule violations never are.
"""
from __future__ import annotations


class LedgerError(Exception):
    code = "ledger_error"
    status_code = 400
    retryable = False

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidOrder(LedgerError):
    code = "INVALID_ORDER"
    status_code = 400


class UserNotFound(LedgerError):
    code = "USER_NOT_FOUND"
    status_code = 404

    def __init__(self, user_id):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class NoSuchHolding(LedgerError):
    code = "NO_SUCH_HOLDING"
    status_code = 400

    def __init__(self, symbol: str):
        super().__init__(f"No holding for {symbol}")
        self.symbol = symbol


class InsufficientFunds(LedgerError):
    code = "INSUFFICIENT_FUNDS"
    status_code = 400

    def __init__(self, needed, available):
        super().__init__(f"Insufficient funds: need {needed}, have {available}")
        self.needed = needed
        self.available = available


class InsufficientShares(LedgerError):
    code = "INSUFFICIENT_SHARES"
    status_code = 400

    def __init__(self, symbol: str, have: int, want: int):
        super().__init__(f"Insufficient shares for {symbol}: have {have}, want {want}")
        self.symbol = symbol
        self.have = have
        self.want = want


class StoreUnavailable(LedgerError):
    code = "STORE_UNAVAILABLE"
    status_code = 503
    retryable = True


class QuoteNotFound(LedgerError):
    code = "QUOTE_NOT_FOUND"
    status_code = 404

    def __init__(self, symbol: str):
        super().__init__(f"No quote for {symbol}")
        self.symbol = symbol


class QuoteUnavailable(LedgerError):
    code = "QUOTE_UNAVAILABLE"
    status_code = 503


class AccountExists(LedgerError):
    code = "ACCOUNT_EXISTS"
    status_code = 409

    def __init__(self, username: str, email: str):
        super().__init__(f"An account with username {username!r} or email {email!r} already exists")
        self.username = username
        self.email = email
