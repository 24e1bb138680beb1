# phonedeals/api/errors.py
from typing import Dict

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from phonedeals.domain.errors import ErrorCode, MarketError
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)

# one entry per ErrorCode, tests check nothing is missing
STATUS_BY_CODE: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INSUFFICIENT_STOCK: status.HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_ITEM: status.HTTP_409_CONFLICT,
    ErrorCode.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorCode.TRANSACTION_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(code: ErrorCode) -> int:
    return STATUS_BY_CODE[code]


async def market_error_handler(request: Request, exc: MarketError) -> JSONResponse:
    status_code = status_for(exc.code)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code.value} {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status_code} {exc.code.value}")

    return JSONResponse(status_code=status_code, content={"detail": jsonable_encoder(exc.to_dict())})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": {
                "code": ErrorCode.VALIDATION_ERROR.value,
                "message": "Invalid request.",
                "errors": jsonable_encoder(exc.errors()),
            }
        },
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # services translate errors inside their units of work, this catches plain reads
    logger.error(f"{request.method} {request.url.path} database error: {exc}")
    return JSONResponse(
        status_code=status_for(ErrorCode.TRANSACTION_FAILURE),
        content={
            "detail": {
                "code": ErrorCode.TRANSACTION_FAILURE.value,
                "message": "The request could not be completed, please retry.",
            }
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MarketError, market_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
