from pydantic import BaseModel
from decimal import Decimal
from typing import Optional

class QuoteOut(BaseModel):
    symbol: str
    name: Optional[str]
    price: Decimal
    sector: Optional[str]
    source: str
