# phonedeals/utils/retry.py
import logging

import redis
import requests
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from phonedeals.domain.errors import ConcurrencyConflict, TransactionFailure
from phonedeals.utils.settings import CHECKOUT_MAX_ATTEMPTS, CONFLICT_RETRY_WAIT_SECONDS
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(requests.RequestException),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def _give_up(retry_state):
    exc = retry_state.outcome.exception()
    logger.error(f"Giving up after {retry_state.attempt_number} conflicting attempts: {exc}")
    raise TransactionFailure(
        "The operation could not be completed because of concurrent updates, please retry",
        attempts=retry_state.attempt_number,
    ) from exc


def conflict_retry(attempts: int | None = None):
    #the whole unit of work re-runs, so every attempt starts from a fresh read
    return retry(
        stop=stop_after_attempt(attempts or CHECKOUT_MAX_ATTEMPTS),
        wait=wait_exponential(multiplier=CONFLICT_RETRY_WAIT_SECONDS, max=1),
        retry=retry_if_exception_type(ConcurrencyConflict),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        retry_error_callback=_give_up,
    )
