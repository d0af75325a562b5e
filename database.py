import os
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from config import settings

# Allow tests to switch to an isolated SQLite database by setting TESTING=1
if os.environ.get("TESTING"):
    DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite:///./test_db.sqlite")
else:
    DATABASE_URL = settings.DATABASE_URL


def make_engine(url: str, timeout: float = settings.STORE_TIMEOUT_SECONDS):
    """Build an engine whose lock waits are bounded by ``timeout`` seconds.

    SQLite gets a busy timeout; Postgres gets lock_timeout/statement_timeout on
    every connection and a bounded pool checkout.
    """
    if url.startswith("sqlite"):
        eng = create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False, "timeout": timeout},
        )

        @event.listens_for(eng, "connect")
        def _sqlite_pragmas(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

        return eng
    ms = int(timeout * 1000)
    connect_args = {}
    if url.startswith("postgresql"):
        connect_args["options"] = f"-c lock_timeout={ms} -c statement_timeout={ms}"
    return create_engine(
        url,
        echo=settings.DEBUG and not os.environ.get("TESTING"),
        pool_pre_ping=True,
        pool_timeout=timeout,
        connect_args=connect_args,
    )


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)
Base = declarative_base()
