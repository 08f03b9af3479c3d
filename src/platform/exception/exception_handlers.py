from typing import Any, Callable, Coroutine

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.responses import Response

from src.platform.exception.exceptions import CustomBaseError, LockBusyError
from src.platform.logging.loguru_io import Logger


ExceptionHandler = Callable[[Request, Exception], Coroutine[Any, Any, Response]]

LOCK_BUSY_RETRY_AFTER_SECONDS = 1


async def business_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, CustomBaseError) else CustomBaseError(str(exc), 500)
    headers = (
        {'Retry-After': str(LOCK_BUSY_RETRY_AFTER_SECONDS)}
        if isinstance(error, LockBusyError)
        else None
    )
    return JSONResponse(
        status_code=error.status_code, content=error.to_content(), headers=headers
    )


async def request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, RequestValidationError) else RequestValidationError([])
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'detail': jsonable_errors(error)},
    )


def jsonable_errors(error: RequestValidationError) -> list[dict[str, Any]]:
    # pydantic ctx may hold exception instances that JSONResponse cannot encode
    return [
        {key: value for key, value in err.items() if key in ('type', 'loc', 'msg')}
        for err in error.errors()
    ]


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    Logger.base.opt(exception=exc).error(
        f'💥 [HTTP] {request.method} {request.url.path} failed: {type(exc).__name__}'
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'detail': 'Internal server error'},
    )


EXCEPTION_HANDLERS: dict[type[Exception], ExceptionHandler] = {
    CustomBaseError: business_error_handler,
    RequestValidationError: request_validation_handler,
    Exception: unhandled_error_handler,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
