import logging
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from wewallet.models.db_models import MAX_AMOUNT, MAX_BALANCE, MONEY_QUANTUM, MONEY_SCALE, User
from .exceptions import InsufficientBalanceError, UserNotFoundError, ValidationError

logger = logging.getLogger(__name__)

Amount = Union[Decimal, int, str]


def to_amount(
    value: Amount,
    field: str = "amount",
    allow_zero: bool = False,
    limit: Optional[Decimal] = MAX_AMOUNT,
) -> Decimal:
    """Coerce to a finite Decimal that fits the money columns.

    Strictly positive unless ``allow_zero``; at most MONEY_SCALE decimal
    places and no larger than ``limit``.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, float):
        value = str(value) # Avoid binary float expansion
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if allow_zero and amount < 0:
        raise ValidationError(f"{field} must be zero or greater")
    if not allow_zero and amount <= 0:
        raise ValidationError(f"{field} must be greater than 0")
    if limit is not None and amount > limit:
        raise ValidationError(f"{field} must not exceed {limit}")
    if amount != amount.quantize(MONEY_QUANTUM):
        raise ValidationError(f"{field} must have at most {MONEY_SCALE} decimal places")
    return amount


class BalanceLedger:
    """Atomic balance mutations for a single user.

    Each mutation is one UPDATE statement doing the arithmetic in the
    database, so concurrent debits and credits always apply on top of the
    latest committed balance. The ledger never commits: it joins the
    caller's transaction, and the caller decides when the unit of work
    is complete.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_balance(self, user_id: str) -> Decimal:
        # Column select, not the identity map, so a stale User object in
        # the session cannot mask a newer balance
        balance = self.db.execute(
            select(User.balance).where(User.id == user_id)
        ).scalar_one_or_none()
        if balance is None:
            raise UserNotFoundError()
        return balance

    def user_exists(self, user_id: str) -> bool:
        return self.db.execute(
            select(User.id).where(User.id == user_id)
        ).scalar_one_or_none() is not None

    def debit(self, user_id: str, amount: Amount) -> Decimal:
        """Subtract ``amount`` only if the balance covers it. Returns the new balance."""
        amount = to_amount(amount, limit=MAX_BALANCE)
        result = self.db.execute(
            update(User)
            .where(User.id == user_id, User.balance >= amount)
            .values(balance=User.balance - amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            if not self.user_exists(user_id):
                raise UserNotFoundError()
            logger.warning("Debit of %s rejected for user %s: insufficient balance", amount, user_id)
            raise InsufficientBalanceError()
        logger.debug("Debited %s from user %s", amount, user_id)
        return self.get_balance(user_id)

    def credit(self, user_id: str, amount: Amount) -> Decimal:
        """Add ``amount`` to the balance. Returns the new balance."""
        amount = to_amount(amount, limit=MAX_BALANCE)
        result = self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(balance=User.balance + amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise UserNotFoundError()
        logger.debug("Credited %s to user %s", amount, user_id)
        return self.get_balance(user_id)
