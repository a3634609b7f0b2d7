# Import Base and all model classes from db_models
from .db_models import (
    Base,
    User,
    Trade,
    WithdrawRequest,
    TradeDirection,
    TradeStatus,
    WithdrawStatus
)


__all__ = [
    'Base',
    'User',
    'Trade',
    'WithdrawRequest',
    'TradeDirection',
    'TradeStatus',
    'WithdrawStatus',
]
