import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

class ConflictError(ValueError):
    """Request is well-formed but clashes with current state (seat taken, name in use, ...)"""

def error_body(code: int, message: str) -> dict:
    return {"error": {"code": code, "message": message}}

def internal_error(action: str) -> HTTPException:
    """Log the active exception and return a generic 500 for the client"""
    logger.exception("Failed to %s", action)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error"
    )

def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    message = str(first.get("msg", "Invalid request"))
    # pydantic prefixes messages raised from validators
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if first.get("type") in ("missing", "json_invalid") and field:
        return f"{field}: {message}"
    return message

def register_exception_handlers(app: FastAPI):
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, message),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(status.HTTP_400_BAD_REQUEST, _validation_message(exc))
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
        )
