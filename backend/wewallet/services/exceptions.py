"""Error kinds raised by the trading services.

Every error carries a stable ``kind`` string and the HTTP status the API
layer answers with. Only ``PersistenceError`` is worth retrying.
"""


class TradingError(Exception):
    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str = None):
        super().__init__(message or self.__class__.__doc__ or self.kind)
        self.message = str(self.args[0])

    def to_dict(self) -> dict:
        return {"success": False, "kind": self.kind, "error": self.message}


class ValidationError(TradingError):
    """Invalid request"""
    kind = "validation_error"
    status_code = 400


class InvalidManualResultError(ValidationError):
    """Invalid manual_result. Must be WON or LOST"""
    kind = "invalid_manual_result"


class NotFoundError(TradingError):
    """Not found"""
    kind = "not_found"
    status_code = 404


class UserNotFoundError(NotFoundError):
    """User not found"""
    kind = "user_not_found"


class TradeNotFoundError(NotFoundError):
    """Trade not found"""
    kind = "trade_not_found"


class WithdrawRequestNotFoundError(NotFoundError):
    """Withdraw request not found"""
    kind = "withdraw_request_not_found"


class InsufficientBalanceError(TradingError):
    """Insufficient balance"""
    kind = "insufficient_balance"
    status_code = 400


class AlreadyResolvedError(TradingError):
    """Already resolved"""
    kind = "already_resolved"
    status_code = 409


class PersistenceError(TradingError):
    """Database operation failed"""
    kind = "persistence_error"
    status_code = 503
