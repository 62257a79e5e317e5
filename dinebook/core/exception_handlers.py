from typing import Any, Callable, Coroutine

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.responses import Response
import structlog

from dinebook.core.exceptions import DomainError, PartialFailureError

logger = structlog.get_logger(__name__)

ExceptionHandler = Callable[[Request, Exception], Coroutine[Any, Any, Response]]


async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, DomainError) else DomainError(str(exc))
    if isinstance(error, PartialFailureError):
        logger.error(
            "Workflow aborted",
            step=error.step,
            reservation_id=str(error.reservation_id),
            cause=repr(error.cause),
        )
    return JSONResponse(status_code=error.status_code, content={"detail": error.message})


async def value_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


EXCEPTION_HANDLERS: dict[type[Exception], ExceptionHandler] = {
    DomainError: domain_error_handler,
    ValueError: value_error_handler,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
