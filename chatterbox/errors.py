"""
Error taxonomy and the handlers that turn it into the response envelope.

Every failure leaves the API as ``{"success": false, "message": ..., "error": ...}``
with the status code of the matching error class.
"""

import logging
from contextlib import contextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ChatterBoxError(Exception):
    status_code = 500
    default_message = "Server Error"

    def __init__(self, message: Optional[str] = None, error: Optional[str] = None):
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)


class ValidationError(ChatterBoxError):
    status_code = 400
    default_message = "Invalid Request"


class AuthenticationError(ChatterBoxError):
    status_code = 401
    default_message = "Authentication failed!"


class AuthorizationError(ChatterBoxError):
    status_code = 403
    default_message = "Forbidden Request"


class NotFoundError(ChatterBoxError):
    status_code = 404
    default_message = "Not Found"


class StoreError(ChatterBoxError):
    status_code = 500
    default_message = "Server Error"


class PaymentError(ChatterBoxError):
    status_code = 502
    default_message = "Payment processor unavailable"


def envelope(message: str, error: Optional[str] = None) -> dict:
    body = {"success": False, "message": message}
    if error:
        body["error"] = error
    return body


@contextmanager
def store_errors(message: str):
    """Re-raise driver failures inside the block as StoreError(message)."""
    try:
        yield
    except PyMongoError as e:
        logger.exception(message)
        raise StoreError(message, error=str(e)) from e


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ChatterBoxError)
    async def handle_app_error(request: Request, exc: ChatterBoxError):
        return JSONResponse(status_code=exc.status_code, content=envelope(exc.message, exc.error))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
        return JSONResponse(
            status_code=400,
            content=envelope("Invalid Body Request", "invalid or missing: " + ", ".join(fields)),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=envelope(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(PyMongoError)
    async def handle_store_error(request: Request, exc: PyMongoError):
        logger.exception("Unhandled store failure on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=envelope("Server Error", str(exc)))
