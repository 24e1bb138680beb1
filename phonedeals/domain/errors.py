# phonedeals/domain/errors.py
from enum import Enum
from typing import Any, Dict


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    DUPLICATE_ITEM = "DUPLICATE_ITEM"
    UNAUTHORIZED = "UNAUTHORIZED"
    TRANSACTION_FAILURE = "TRANSACTION_FAILURE"


class MarketError(Exception):
    """
    Base class for every failure a service hands back to its caller.
    Routers never see anything else coming out of the service layer.
    """

    code: ErrorCode

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "message": self.message, **self.context}


class ValidationError(MarketError):
    code = ErrorCode.VALIDATION_ERROR


class NotFound(MarketError):
    code = ErrorCode.NOT_FOUND


class InsufficientStock(MarketError):
    code = ErrorCode.INSUFFICIENT_STOCK

    def __init__(self, phone_id: int, title: str | None, available: int, requested: int):
        super().__init__(
            f'Insufficient stock for phone "{title}". Available: {available}.',
            phone_id=phone_id,
            available=available,
            requested=requested,
        )


class DuplicateItem(MarketError):
    code = ErrorCode.DUPLICATE_ITEM


class Unauthorized(MarketError):
    code = ErrorCode.UNAUTHORIZED


class TransactionFailure(MarketError):
    code = ErrorCode.TRANSACTION_FAILURE


class ConcurrencyConflict(Exception):
    """
    Optimistic check lost a race (stock moved, cart version changed).
    Retried inside the service, turned into TransactionFailure when retries run out.
    """
