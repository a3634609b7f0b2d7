import abc
import random
from typing import Optional

from wewallet.models.db_models import Trade, TradeStatus


class OutcomeOracle(abc.ABC):
    """Decides whether a pending trade won or lost.

    A price-feed implementation would compare the coin's price at
    ``trade.created_at`` and after ``trade.timeframe_seconds`` against
    ``trade.direction``.
    """

    @abc.abstractmethod
    def decide(self, trade: Trade) -> TradeStatus:
        ...


class RandomOutcomeOracle(OutcomeOracle):
    """Unweighted coin flip."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def decide(self, trade: Trade) -> TradeStatus:
        return TradeStatus.WON if self.rng.random() < 0.5 else TradeStatus.LOST
