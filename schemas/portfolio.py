from pydantic import BaseModel
from typing import List
from schemas.user import UserOut
from schemas.trades import HoldingOut, TransactionOut

class PortfolioOut(BaseModel):
    user: UserOut
    holdings: List[HoldingOut]
    transactions: List[TransactionOut]  # newest first
