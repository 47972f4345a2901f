import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong"


class FormsError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailure(FormsError):
    """Bad input, bad state transition or a broken business rule."""


class ConsistencyFailure(ValidationFailure):
    """A row that was just written could not be read back.

    Surfaces to callers like any other validation failure but is an internal
    fault, so it is logged at ERROR.
    """


class ConflictFailure(ValidationFailure):
    """A write collided with an existing row (duplicate respondent)."""


class StoreFailure(FormsError):
    def __init__(self, operation: str, cause: BaseException | None = None):
        super().__init__(f"Database query failed during {operation}")
        self.operation = operation
        self.cause = cause


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


async def validation_failure_handler(request: Request, exc: ValidationFailure):
    logger.debug(f"{request.method} {request.url.path} rejected: {exc.message}")
    return error_response(status.HTTP_400_BAD_REQUEST, exc.message)


async def consistency_failure_handler(request: Request, exc: ConsistencyFailure):
    logger.error(
        f"Internal consistency fault on {request.method} {request.url.path}: {exc.message}"
    )
    return error_response(status.HTTP_400_BAD_REQUEST, exc.message)


async def conflict_failure_handler(request: Request, exc: ConflictFailure):
    logger.info(f"{request.method} {request.url.path} conflict: {exc.message}")
    return error_response(status.HTTP_409_CONFLICT, exc.message)


async def store_failure_handler(request: Request, exc: StoreFailure):
    logger.error(
        f"{exc.message} ({request.method} {request.url.path})",
        exc_info=exc.cause or exc,
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)


async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        loc = list(first.get("loc", ()))
        if loc and loc[0] in ("body", "path", "query"):
            loc = loc[1:]
        location = ".".join(str(part) for part in loc)
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = "Invalid request"
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ConsistencyFailure, consistency_failure_handler)
    app.add_exception_handler(ConflictFailure, conflict_failure_handler)
    app.add_exception_handler(ValidationFailure, validation_failure_handler)
    app.add_exception_handler(StoreFailure, store_failure_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
