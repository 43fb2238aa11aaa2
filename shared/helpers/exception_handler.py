import logging

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import OperationalError

from shared.core.exceptions import AppException
from shared.core.schemas import JsonOutResult
from shared.utils.app_status_code import AppStatusCode

logger = logging.getLogger(__name__)


def _failure(status_code: str, message: str, http_status: int):
    wrapped = JsonOutResult(
        data=None,
        status="Failure",
        status_code=str(status_code),
        message=message
    ).model_dump()
    return JSONResponse(content=wrapped, status_code=http_status)


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        logger.warning("%s %s rejected: %s", request.method,
                       request.url.path, exc.message)
        return _failure(exc.status_code, exc.message, exc.http_status)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        # error_response() already built the envelope
        if isinstance(exc.detail, dict) and "status_code" in exc.detail:
            return JSONResponse(content=exc.detail, status_code=exc.status_code,
                                headers=getattr(exc, "headers", None))
        return _failure(exc.status_code or AppStatusCode.OPERATION_FAILED,
                        str(exc.detail), exc.status_code or 400)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _failure(AppStatusCode.INVALID_INPUT, str(exc.errors()), 422)

    @app.exception_handler(OperationalError)
    async def storage_exception_handler(request: Request, exc: OperationalError):
        logger.exception("Storage unavailable")
        return _failure(AppStatusCode.STORAGE_UNAVAILABLE,
                        "Storage is temporarily unavailable, retry later", 503)

    # Catch all unhandled exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s",
                         request.method, request.url.path)
        return _failure(AppStatusCode.OPERATION_FAILED, "Internal server error", 500)
