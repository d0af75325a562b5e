"""Test configuration and fixtures.

Every test gets its own file-backed SQLite database under tmp_path (file based
so that several threads/sessions see the same data), a SqlLedgerStore bound
to it, and a TestClient whose ledger store and quote source are overridden.
"""

import os
from decimal import Decimal
from typing import Generator

# Set env flags BEFORE importing application modules
os.environ.setdefault("DEBUG", "1")
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FILE", "")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from database import Base, make_engine
from main import app  # imports routers & models
from security import create_access_token
from services.ledger_store import SqlLedgerStore, get_ledger_store
from services.quotes import StaticQuoteSource, get_quote_source


@pytest.fixture()
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'ledger.db'}", timeout=5)
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture()
def store(session_factory) -> SqlLedgerStore:
    return SqlLedgerStore(session_factory, lock_timeout=5)


@pytest.fixture()
def make_user(store):
    counter = {"n": 0}

    def _make(cash="1000000", username=None):
        counter["n"] += 1
        name = username or f"trader{counter['n']}"
        return store.create_user(name, f"{name}@example.com", "not-a-real-hash", Decimal(cash))
    return _make


@pytest.fixture()
def client(store) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_ledger_store] = lambda: store
    app.dependency_overrides[get_quote_source] = lambda: StaticQuoteSource(jitter=0)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.pop(get_ledger_store, None)
    app.dependency_overrides.pop(get_quote_source, None)


@pytest.fixture()
def auth_headers():
    def _headers(user_id: int) -> dict:
        return {"Authorization": f"Bearer {create_access_token({'sub': str(user_id)})}"}
    return _headers
