from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union
from schemas.user import UserOut

class OrderIn(BaseModel):
    # Shape only; the trade engine does the semantic validation
    symbol: StrictStr
    quantity: Union[StrictInt, StrictFloat]
    # Strings let clients send prices a float cannot hold exactly
    price: Union[StrictInt, StrictFloat, StrictStr]

    model_config = ConfigDict(extra="ignore")

class HoldingOut(BaseModel):
    symbol: str
    quantity: int
    avg_cost: Decimal

class TransactionOut(BaseModel):
    id: Optional[int]
    type: str
    symbol: str
    quantity: int
    price: Decimal
    executed_at: datetime

class TradeResultOut(BaseModel):
    msg: str
    user: UserOut
    holding: Optional[HoldingOut]
    transaction: TransactionOut
