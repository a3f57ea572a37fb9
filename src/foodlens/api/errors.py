"""Exception handlers rendering the shared error body."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from foodlens.errors import FoodLensError, ValidationError

logger = logging.getLogger(__name__)


async def _handle_app_error(request: Request, exc: FoodLensError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Request failed",
            extra={"path": request.url.path, "kind": exc.kind},
            exc_info=exc,
        )
    else:
        logger.info(
            "Request rejected",
            extra={"path": request.url.path, "kind": exc.kind, "reason": exc.message},
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def _handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    error = ValidationError(
        str(first.get("msg", "Invalid request")),
        field=".".join(location) or None,
    )
    error.details["errors"] = [
        {
            "loc": [str(part) for part in item.get("loc", ())],
            "msg": str(item.get("msg", "")),
        }
        for item in errors
    ]
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error", extra={"path": request.url.path}, exc_info=exc)
    error = FoodLensError("Internal server error")
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the application's exception handlers."""
    app.add_exception_handler(FoodLensError, _handle_app_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(Exception, _handle_unexpected)
