"""Binary trade lifecycle: open a trade against the user's balance, then
settle it exactly once.

Opening a trade debits the stake and inserts the PENDING trade in one
transaction. Settling flips the status with a conditional UPDATE (only
rows still PENDING match) and, for a win, credits principal plus return
in that same transaction. A caller that loses the race on either step
gets a terminal error; nothing is retried here.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_DOWN, Decimal
from typing import Optional, Union

from sqlalchemy.orm import Session

from wewallet.models.db_models import MONEY_QUANTUM, Trade, TradeDirection, TradeStatus
from .exceptions import (
    AlreadyResolvedError,
    InvalidManualResultError,
    ValidationError,
)
from .ledger_service import Amount, BalanceLedger, to_amount
from .outcome_oracle import OutcomeOracle, RandomOutcomeOracle
from .trade_store import TradeStore
from .unit_of_work import unit_of_work

logger = logging.getLogger(__name__)

MIN_TIMEFRAME_SECONDS = 30
MAX_TIMEFRAME_SECONDS = 3600

# (upper bound in seconds, return percentage); shorter timeframe pays more
RETURN_PCT_STEPS = (
    (60, 85),
    (300, 80),
    (900, 75),
    (1800, 70),
)
DEFAULT_RETURN_PCT = 65


def return_pct_for_timeframe(timeframe_seconds: int) -> int:
    for upper_bound, pct in RETURN_PCT_STEPS:
        if timeframe_seconds <= upper_bound:
            return pct
    return DEFAULT_RETURN_PCT


def compute_payout(amount: Decimal, return_pct: int, outcome: TradeStatus) -> Decimal:
    """Principal plus return for a win, nothing for a loss.

    Rounded down to whole minor units.
    """
    if outcome == TradeStatus.WON:
        return (amount + amount * return_pct / 100).quantize(MONEY_QUANTUM, rounding=ROUND_DOWN)
    return Decimal("0")


@dataclass
class Settlement:
    trade: Trade
    payout: Decimal
    balance: Decimal

    @property
    def result(self) -> TradeStatus:
        return self.trade.status


class SettlementEngine:
    def __init__(self, db: Session, oracle: Optional[OutcomeOracle] = None):
        self.db = db
        self.oracle = oracle or RandomOutcomeOracle()
        self.ledger = BalanceLedger(db)
        self.trades = TradeStore(db)

    def create_trade(
        self,
        user_id: str,
        coin: str,
        direction: Union[TradeDirection, str],
        amount: Amount,
        timeframe_seconds: int
    ) -> Trade:
        direction = self._parse_direction(direction)
        amount = to_amount(amount)
        self._check_timeframe(timeframe_seconds)
        if not coin or not str(coin).strip():
            raise ValidationError("coin is required")
        if not user_id:
            raise ValidationError("user_id is required")

        return_pct = return_pct_for_timeframe(timeframe_seconds)
        trade = Trade(
            user_id=user_id,
            coin=str(coin).strip().upper(),
            direction=direction,
            amount=amount,
            timeframe_seconds=timeframe_seconds,
            return_pct=return_pct,
            status=TradeStatus.PENDING,
            created_at=datetime.now(timezone.utc),
        )

        with unit_of_work(self.db, "create trade"):
            # Debit first: UserNotFound / InsufficientBalance abort before the insert
            self.ledger.debit(user_id, amount)
            self.trades.add(trade)

        self.db.refresh(trade)
        logger.info(
            "Trade %s opened: user=%s %s %s amount=%s timeframe=%ss return=%s%%",
            trade.id, user_id, trade.coin, direction.value, amount, timeframe_seconds, return_pct
        )
        return trade

    def resolve_trade(
        self,
        trade_id: int,
        manual_result: Optional[Union[TradeStatus, str]] = None
    ) -> Settlement:
        manual_outcome = self._parse_manual_result(manual_result)

        trade = self.trades.get(trade_id)
        if trade.status != TradeStatus.PENDING:
            logger.warning("Trade %s already resolved as %s", trade_id, trade.status.value)
            raise AlreadyResolvedError("Trade is already resolved")

        outcome = manual_outcome or self.oracle.decide(trade)
        if outcome not in (TradeStatus.WON, TradeStatus.LOST):
            raise ValueError(f"Outcome oracle returned {outcome!r}")
        payout = compute_payout(trade.amount, trade.return_pct, outcome)
        user_id = trade.user_id

        with unit_of_work(self.db, "resolve trade"):
            # The status check travels with the write; a concurrent
            # settlement that got there first leaves no PENDING row to match
            if not self.trades.mark_resolved(trade_id, outcome, payout, datetime.now(timezone.utc)):
                logger.warning("Trade %s lost a settlement race", trade_id)
                raise AlreadyResolvedError("Trade is already resolved")
            if outcome == TradeStatus.WON:
                self.ledger.credit(user_id, payout)

        self.db.refresh(trade)
        balance = self.ledger.get_balance(user_id)
        logger.info(
            "Trade %s resolved %s (%s): payout=%s balance=%s",
            trade_id, outcome.value, "manual" if manual_outcome else "oracle", payout, balance
        )
        return Settlement(trade=trade, payout=payout, balance=balance)

    @staticmethod
    def _parse_direction(direction) -> TradeDirection:
        if isinstance(direction, TradeDirection):
            return direction
        try:
            return TradeDirection(direction)
        except ValueError:
            raise ValidationError("Invalid trade direction. Must be UP or DOWN")

    @staticmethod
    def _check_timeframe(timeframe_seconds):
        if isinstance(timeframe_seconds, bool) or not isinstance(timeframe_seconds, int):
            raise ValidationError("timeframe_seconds must be an integer")
        if not MIN_TIMEFRAME_SECONDS <= timeframe_seconds <= MAX_TIMEFRAME_SECONDS:
            raise ValidationError(
                f"Timeframe must be between {MIN_TIMEFRAME_SECONDS} and {MAX_TIMEFRAME_SECONDS} seconds"
            )

    @staticmethod
    def _parse_manual_result(manual_result) -> Optional[TradeStatus]:
        if manual_result is None:
            return None
        try:
            outcome = TradeStatus(manual_result)
        except ValueError:
            raise InvalidManualResultError()
        if outcome == TradeStatus.PENDING:
            raise InvalidManualResultError()
        return outcome

