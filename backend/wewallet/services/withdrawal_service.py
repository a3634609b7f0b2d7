import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from wewallet.models.db_models import WithdrawRequest, WithdrawStatus
from .exceptions import (
    AlreadyResolvedError,
    InsufficientBalanceError,
    ValidationError,
    WithdrawRequestNotFoundError,
)
from .ledger_service import Amount, BalanceLedger, to_amount
from .unit_of_work import unit_of_work

logger = logging.getLogger(__name__)


class WithdrawalService:
    """Withdraw requests: filed by users, approved or rejected once by an admin.

    Filing only checks the balance; the debit happens on approval, inside
    the same transaction as the status change.
    """

    def __init__(self, db: Session):
        self.db = db
        self.ledger = BalanceLedger(db)

    def create_request(
        self,
        user_id: str,
        amount: Amount,
        proof_image: str,
        tx_hash: Optional[str] = None
    ) -> WithdrawRequest:
        amount = to_amount(amount)
        if not proof_image:
            raise ValidationError("proof_image is required")

        if self.ledger.get_balance(user_id) < amount:
            raise InsufficientBalanceError("Insufficient balance for this withdrawal request")

        withdraw_request = WithdrawRequest(
            user_id=user_id,
            amount=amount,
            proof_image=proof_image,
            tx_hash=tx_hash or None,
            status=WithdrawStatus.PENDING,
            created_at=datetime.now(timezone.utc)
        )
        with unit_of_work(self.db, "create withdraw request"):
            self.db.add(withdraw_request)
        self.db.refresh(withdraw_request)

        logger.info("Withdraw request %s filed: user=%s amount=%s", withdraw_request.id, user_id, amount)
        return withdraw_request

    def get_request(self, request_id: int) -> WithdrawRequest:
        withdraw_request = self.db.get(WithdrawRequest, request_id)
        if withdraw_request is None:
            raise WithdrawRequestNotFoundError()
        return withdraw_request

    def list_requests(
        self,
        user_id: Optional[str] = None,
        status: Optional[WithdrawStatus] = None
    ) -> List[WithdrawRequest]:
        query = select(WithdrawRequest)
        if user_id is not None:
            query = query.where(WithdrawRequest.user_id == user_id)
        if status is not None:
            query = query.where(WithdrawRequest.status == status)
        query = query.order_by(WithdrawRequest.created_at.desc(), WithdrawRequest.id.desc())
        return list(self.db.execute(query).scalars())

    def process_request(
        self,
        request_id: int,
        status: Union[WithdrawStatus, str]
    ) -> WithdrawRequest:
        status = self._parse_decision(status)
        withdraw_request = self.get_request(request_id)
        if withdraw_request.status != WithdrawStatus.PENDING:
            raise AlreadyResolvedError("Withdraw request is already processed")

        with unit_of_work(self.db, "process withdraw request"):
            result = self.db.execute(
                update(WithdrawRequest)
                .where(WithdrawRequest.id == request_id, WithdrawRequest.status == WithdrawStatus.PENDING)
                .values(status=status, resolved_at=datetime.now(timezone.utc))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise AlreadyResolvedError("Withdraw request is already processed")
            if status == WithdrawStatus.APPROVED:
                # Balance may have moved since the request was filed
                self.ledger.debit(withdraw_request.user_id, withdraw_request.amount)

        self.db.refresh(withdraw_request)
        logger.info("Withdraw request %s %s", request_id, status.value.lower())
        return withdraw_request

    @staticmethod
    def _parse_decision(status) -> WithdrawStatus:
        try:
            status = WithdrawStatus(status)
        except ValueError:
            raise ValidationError("Invalid status. Must be APPROVED or REJECTED")
        if status == WithdrawStatus.PENDING:
            raise ValidationError("Invalid status. Must be APPROVED or REJECTED")
        return status
