import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from errors import AppError, InternalError, ValidationError
from schemas import ApiResponse

logger = logging.getLogger(__name__)


def error_response(exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ApiResponse(success=False, error=exc.to_dict()).model_dump(),
    )


def validation_details(exc: RequestValidationError) -> list:
    """Flatten FastAPI validation errors into field/message pairs"""
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return details


def register_error_handlers(app: FastAPI) -> None:
    """Turn every failure into the standard error envelope"""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if isinstance(exc, InternalError):
            # Details stay in the log, the client gets the generic message
            logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc.message)
            return error_response(InternalError())
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(ValidationError(details=validation_details(exc)))

    @app.middleware("http")
    async def catch_unexpected_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return error_response(InternalError())
