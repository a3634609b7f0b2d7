from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from .db_models import TradeDirection, TradeStatus


class TradeCreate(BaseModel):
    # Value ranges are checked by the settlement engine so every caller
    # gets the same error kinds
    user_id: str
    coin: str
    direction: str = Field(..., description="UP or DOWN")
    amount: Decimal
    timeframe_seconds: int = Field(..., description="Between 30 and 3600 seconds")

class TradeResolve(BaseModel):
    trade_id: int
    manual_result: Optional[str] = Field(None, description="WON or LOST; admin only")

    @field_validator("manual_result", mode="before")
    @classmethod
    def blank_means_absent(cls, value):
        # Clients send "" for an unset form field
        if isinstance(value, str) and not value.strip():
            return None
        return value

class TradeRead(BaseModel):
    id: int
    user_id: str
    coin: str
    direction: TradeDirection
    amount: Decimal
    timeframe_seconds: int
    return_pct: int
    status: TradeStatus
    payout: Optional[Decimal] = None
    created_at: datetime
    resolved_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        use_enum_values = True

class TradeCreateResponse(BaseModel):
    success: bool = True
    trade: TradeRead
    message: str
    potential_return: Decimal

class TradeResolveResponse(BaseModel):
    success: bool = True
    trade: TradeRead
    result: TradeStatus
    payout: Decimal
    balance: Decimal
    message: str

    class Config:
        use_enum_values = True

class TradeList(BaseModel):
    success: bool = True
    trades: List[TradeRead]
    count: int
