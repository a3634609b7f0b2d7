from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from wewallet.models.db_models import Trade, TradeDirection, TradeStatus
from .exceptions import TradeNotFoundError


class TradeStore:
    def __init__(self, db: Session):
        self.db = db

    def add(self, trade: Trade) -> Trade:
        self.db.add(trade)
        self.db.flush() # Assigns the id inside the open transaction
        return trade

    def get(self, trade_id: int) -> Trade:
        trade = self.db.get(Trade, trade_id)
        if trade is None:
            raise TradeNotFoundError()
        return trade

    def mark_resolved(
        self,
        trade_id: int,
        status: TradeStatus,
        payout: Decimal,
        resolved_at: datetime
    ) -> bool:
        """Move a trade out of PENDING. False if it was no longer PENDING."""
        result = self.db.execute(
            update(Trade)
            .where(Trade.id == trade_id, Trade.status == TradeStatus.PENDING)
            .values(status=status, payout=payout, resolved_at=resolved_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def list(
        self,
        user_id: Optional[str] = None,
        status: Optional[TradeStatus] = None,
        direction: Optional[TradeDirection] = None,
        limit: Optional[int] = None
    ) -> List[Trade]:
        query = select(Trade)
        if user_id is not None:
            query = query.where(Trade.user_id == user_id)
        if status is not None:
            query = query.where(Trade.status == status)
        if direction is not None:
            query = query.where(Trade.direction == direction)
        query = query.order_by(Trade.created_at.desc(), Trade.id.desc())
        if limit is not None:
            query = query.limit(limit)
        return list(self.db.execute(query).scalars())

    def list_pending(self) -> List[Trade]:
        return self.list(status=TradeStatus.PENDING)

    def count(self, user_id: Optional[str] = None) -> int:
        query = select(func.count(Trade.id))
        if user_id is not None:
            query = query.where(Trade.user_id == user_id)
        return self.db.execute(query).scalar_one()
