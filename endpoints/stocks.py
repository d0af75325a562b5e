from fastapi import APIRouter, Depends
from security import get_current_user_id
from schemas.stock import QuoteOut
from services.quotes import get_quote_source

router = APIRouter(prefix="/stocks", tags=["stocks"])


@router.get("/quote/{symbol}", response_model=QuoteOut)
def get_quote(symbol: str, user_id: int = Depends(get_current_user_id), source=Depends(get_quote_source)):
    """Current price for ``symbol``; 404 (QUOTE_NOT_FOUND) when the source does not know it."""
    q = source.quote(symbol)
    return QuoteOut(symbol=q.symbol, name=q.name, price=q.price, sector=q.sector, source=q.source)
