from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel
from typing import List, Optional


class UserCreate(BaseModel):
    email: Optional[str] = None
    wallet_address: Optional[str] = None
    balance: Optional[Decimal] = None # Falls back to DEFAULT_USER_BALANCE

class UserRead(BaseModel):
    id: str
    email: Optional[str] = None
    wallet_address: Optional[str] = None
    balance: Decimal
    created_at: datetime

    class Config:
        from_attributes = True

class UserList(BaseModel):
    success: bool = True
    users: List[UserRead]
    count: int
