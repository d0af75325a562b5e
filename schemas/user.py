from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal

class UserOut(BaseModel):
    # Credential is deliberately absent
    id: int
    username: str
    email: str
    cash: Decimal
    created_at: datetime
