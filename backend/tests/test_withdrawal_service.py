from decimal import Decimal

import pytest

from wewallet.models import WithdrawStatus
from wewallet.services.exceptions import (
    AlreadyResolvedError,
    InsufficientBalanceError,
    UserNotFoundError,
    ValidationError,
    WithdrawRequestNotFoundError,
)
from wewallet.services.ledger_service import BalanceLedger
from wewallet.services.settlement_service import SettlementEngine
from wewallet.services.withdrawal_service import WithdrawalService


def test_create_request_does_not_debit(db_session, make_user):
    user = make_user("500")
    service = WithdrawalService(db_session)

    request = service.create_request(user.id, Decimal("200"), "https://example.com/proof.png", "0xabc123")

    assert request.status == WithdrawStatus.PENDING
    assert request.tx_hash == "0xabc123"
    assert request.resolved_at is None
    assert BalanceLedger(db_session).get_balance(user.id) == Decimal("500")


def test_create_request_validation(db_session, make_user):
    user = make_user("500")
    service = WithdrawalService(db_session)

    with pytest.raises(ValidationError):
        service.create_request(user.id, Decimal("0"), "proof.png")
    with pytest.raises(ValidationError):
        service.create_request(user.id, Decimal("10"), "")
    with pytest.raises(InsufficientBalanceError):
        service.create_request(user.id, Decimal("500.01"), "proof.png")
    with pytest.raises(UserNotFoundError):
        service.create_request("ghost", Decimal("10"), "proof.png")

    assert service.list_requests() == []


def test_approve_debits_exactly_once(db_session, make_user):
    user = make_user("500")
    service = WithdrawalService(db_session)
    request = service.create_request(user.id, Decimal("200"), "proof.png")

    processed = service.process_request(request.id, "APPROVED")

    assert processed.status == WithdrawStatus.APPROVED
    assert processed.resolved_at is not None
    assert BalanceLedger(db_session).get_balance(user.id) == Decimal("300")

    with pytest.raises(AlreadyResolvedError):
        service.process_request(request.id, "APPROVED")
    with pytest.raises(AlreadyResolvedError):
        service.process_request(request.id, "REJECTED")
    assert BalanceLedger(db_session).get_balance(user.id) == Decimal("300")


def test_reject_never_debits(db_session, make_user):
    user = make_user("500")
    service = WithdrawalService(db_session)
    request = service.create_request(user.id, Decimal("200"), "proof.png")

    processed = service.process_request(request.id, WithdrawStatus.REJECTED)

    assert processed.status == WithdrawStatus.REJECTED
    assert BalanceLedger(db_session).get_balance(user.id) == Decimal("500")


def test_approval_after_balance_was_spent_keeps_request_pending(db_session, make_user, oracle):
    user = make_user("500")
    service = WithdrawalService(db_session)
    request = service.create_request(user.id, Decimal("300"), "proof.png")

    # Stake most of the balance on a trade before the admin gets to the request
    SettlementEngine(db_session, oracle).create_trade(user.id, "BTC", "UP", Decimal("400"), 60)

    with pytest.raises(InsufficientBalanceError):
        service.process_request(request.id, "APPROVED")

    assert service.get_request(request.id).status == WithdrawStatus.PENDING
    assert BalanceLedger(db_session).get_balance(user.id) == Decimal("100")


def test_process_request_errors(db_session, make_user):
    user = make_user("500")
    service = WithdrawalService(db_session)
    request = service.create_request(user.id, Decimal("100"), "proof.png")

    with pytest.raises(WithdrawRequestNotFoundError):
        service.process_request(999, "APPROVED")
    for bad in ("PENDING", "approved", "CANCELLED"):
        with pytest.raises(ValidationError):
            service.process_request(request.id, bad)
    assert service.get_request(request.id).status == WithdrawStatus.PENDING


def test_list_requests_newest_first_with_filters(db_session, make_user):
    alice = make_user("500")
    bob = make_user("500")
    service = WithdrawalService(db_session)
    first = service.create_request(alice.id, Decimal("10"), "a.png")
    second = service.create_request(bob.id, Decimal("20"), "b.png")
    third = service.create_request(alice.id, Decimal("30"), "c.png")
    service.process_request(third.id, "REJECTED")

    assert [r.id for r in service.list_requests()] == [third.id, second.id, first.id]
    assert [r.id for r in service.list_requests(user_id=alice.id)] == [third.id, first.id]
    assert [r.id for r in service.list_requests(status=WithdrawStatus.PENDING)] == [second.id, first.id]
