from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool
from config import settings
from security import get_current_user_id
from endpoints.logs import log_request, log_action, log_error
from schemas.portfolio import PortfolioOut
from schemas.trades import OrderIn, TradeResultOut, HoldingOut, TransactionOut
from schemas.user import UserOut
from services.errors import LedgerError, StoreUnavailable
from services.ledger_store import SqlLedgerStore, get_ledger_store
from services.ledger_types import HoldingState, TradeResult, TransactionRecord, UserSnapshot
from services.portfolio import get_portfolio
from services.trade_engine import TradeEngine

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


def get_trade_engine(store: SqlLedgerStore = Depends(get_ledger_store)) -> TradeEngine:
    return TradeEngine(
        store,
        max_attempts=settings.STORE_RETRY_ATTEMPTS,
        backoff_seconds=settings.STORE_RETRY_BACKOFF_SECONDS,
    )


def _user_out(u: UserSnapshot) -> UserOut:
    return UserOut(id=u.id, username=u.username, email=u.email, cash=u.cash, created_at=u.created_at)


def _holding_out(h: HoldingState) -> HoldingOut:
    return HoldingOut(symbol=h.symbol, quantity=h.quantity, avg_cost=h.avg_cost)


def _transaction_out(t: TransactionRecord) -> TransactionOut:
    return TransactionOut(id=t.id, type=t.type.value, symbol=t.symbol, quantity=t.quantity, price=t.price, executed_at=t.executed_at)


def _trade_out(msg: str, result: TradeResult) -> TradeResultOut:
    return TradeResultOut(
        msg=msg,
        user=_user_out(result.user),
        holding=_holding_out(result.holding) if result.holding else None,
        transaction=_transaction_out(result.transaction),
    )


def _log_failure(action: str, e: LedgerError, user_id: int, correlation_id: str, order: OrderIn):
    # Business rejections are expected traffic; store faults are not
    level = "ERROR" if isinstance(e, StoreUnavailable) else "WARNING"
    log_error(action, e, user_id, correlation_id, {"symbol": order.symbol, "quantity": order.quantity, "price": order.price}, level=level)


@router.get("/", response_model=PortfolioOut)
def read_portfolio(
    user_id: int = Depends(get_current_user_id),
    store: SqlLedgerStore = Depends(get_ledger_store),
):
    p = get_portfolio(store, user_id)
    return PortfolioOut(
        user=_user_out(p.user),
        holdings=[_holding_out(h) for h in p.holdings],
        transactions=[_transaction_out(t) for t in p.transactions],
    )


@router.post("/buy", response_model=TradeResultOut)
async def buy(
    order: OrderIn,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    engine: TradeEngine = Depends(get_trade_engine),
):
    correlation_id = await log_request(request, "portfolio_buy", user_id, {"symbol": order.symbol})
    try:
        result = await run_in_threadpool(engine.execute_buy, user_id, order.symbol, order.quantity, order.price)
    except LedgerError as e:
        _log_failure("portfolio_buy_failed", e, user_id, correlation_id, order)
        raise
    log_action("portfolio_buy_executed", user_id, correlation_id, {"transaction_id": result.transaction.id, "symbol": result.transaction.symbol})
    return _trade_out("Stock purchased successfully", result)


@router.post("/sell", response_model=TradeResultOut)
async def sell(
    order: OrderIn,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    engine: TradeEngine = Depends(get_trade_engine),
):
    correlation_id = await log_request(request, "portfolio_sell", user_id, {"symbol": order.symbol})
    try:
        result = await run_in_threadpool(engine.execute_sell, user_id, order.symbol, order.quantity, order.price)
    except LedgerError as e:
        _log_failure("portfolio_sell_failed", e, user_id, correlation_id, order)
        raise
    log_action("portfolio_sell_executed", user_id, correlation_id, {"transaction_id": result.transaction.id, "symbol": result.transaction.symbol})
    return _trade_out("Stock sold successfully", result)
