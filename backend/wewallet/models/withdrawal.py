from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel
from typing import List, Optional

from .db_models import WithdrawStatus


class WithdrawCreate(BaseModel):
    user_id: str
    amount: Decimal
    proof_image: str
    tx_hash: Optional[str] = None

class WithdrawManage(BaseModel):
    request_id: int
    status: str # APPROVED or REJECTED

class WithdrawRead(BaseModel):
    id: int
    user_id: str
    amount: Decimal
    proof_image: str
    tx_hash: Optional[str] = None
    status: WithdrawStatus
    created_at: datetime
    resolved_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        use_enum_values = True

class WithdrawResponse(BaseModel):
    success: bool = True
    withdraw_request: WithdrawRead
    message: str

class WithdrawList(BaseModel):
    success: bool = True
    withdraw_requests: List[WithdrawRead]
    count: int
