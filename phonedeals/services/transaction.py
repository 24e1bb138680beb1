# phonedeals/services/transaction.py
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from phonedeals.domain import errors
from phonedeals.domain.errors import ConcurrencyConflict
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def db_errors(db: Session, action: str, retryable: bool = False, **context: Any) -> Iterator[None]:
    """
    Rolls the session back on any failure inside the block and keeps
    SQLAlchemy exceptions from leaving the service layer.

    OperationalError (lock timeouts, serialization failures, dropped
    connections) becomes a ConcurrencyConflict when the caller sits under
    conflict_retry, otherwise it is a TransactionFailure like every other
    SQLAlchemyError.
    """
    try:
        yield
    except (errors.MarketError, ConcurrencyConflict):
        db.rollback()
        raise
    except OperationalError as e:
        db.rollback()
        if retryable:
            raise ConcurrencyConflict(str(e)) from e
        logger.error(f"{action} failed: {e}")
        raise errors.TransactionFailure(f"{action} failed.", **context) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{action} failed: {e}")
        raise errors.TransactionFailure(f"{action} failed.", **context) from e
