import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from wewallet.models.db_models import User
from .exceptions import UserNotFoundError, ValidationError
from .ledger_service import to_amount
from .unit_of_work import unit_of_work

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session, default_balance: Decimal = Decimal("0")):
        self.db = db
        self.default_balance = default_balance

    def create_user(
        self,
        email: Optional[str] = None,
        wallet_address: Optional[str] = None,
        balance: Optional[Decimal] = None
    ) -> User:
        if not email and not wallet_address:
            raise ValidationError("Either email or wallet_address is required")
        balance = self._opening_balance(balance)
        if wallet_address:
            wallet_address = wallet_address.strip().lower()

        # Check if user already exists
        if email and self.db.execute(select(User.id).where(User.email == email)).first():
            raise ValidationError("Email already registered")
        if wallet_address and self.db.execute(
            select(User.id).where(User.wallet_address == wallet_address)
        ).first():
            raise ValidationError("Wallet address already registered")

        now = datetime.now(timezone.utc)
        db_user = User(
            id=str(uuid.uuid4()),
            email=email,
            wallet_address=wallet_address,
            balance=balance,
            created_at=now,
            updated_at=now
        )
        with unit_of_work(self.db, "create user"):
            self.db.add(db_user)
        self.db.refresh(db_user)

        logger.info("User %s created with opening balance %s", db_user.id, balance)
        return db_user

    def get_user(self, user_id: str) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    def list_users(self) -> List[User]:
        return list(self.db.execute(
            select(User).order_by(User.created_at.desc())
        ).scalars())

    def _opening_balance(self, balance) -> Decimal:
        if balance is None:
            return self.default_balance
        return to_amount(balance, "balance", allow_zero=True)
