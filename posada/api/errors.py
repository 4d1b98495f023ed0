"""Response mapper: the single place that turns failures into status codes and bodies."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from posada.core.errors import AppError, InternalError
from posada.schemas.errors import ErrorItem, ErrorResponse

logger = logging.getLogger(__name__)


def _field_name(loc: tuple[Any, ...]) -> str:
    parts = [str(p) for p in loc if p not in ("body", "path", "query")]
    return parts[-1] if parts else "body"


def validation_message(error: dict[str, Any]) -> ErrorItem:
    """Map one pydantic error to the message for its validation tag."""
    field = _field_name(tuple(error.get("loc", ())))
    error_type = error.get("type", "")
    ctx = error.get("ctx") or {}

    if error_type == "missing":
        msg = f"the {field} field is required"
    elif error_type == "string_pattern_mismatch":
        msg = f"the {field} field must be of type alphanumeric"
    elif error_type == "string_too_short":
        msg = f"the {field} field must have a minimum value of {ctx.get('min_length')}"
    elif error_type == "greater_than_equal":
        if ctx.get("ge") == 1:
            msg = f"the {field} field value must be greater or equal to one"
        else:
            msg = f"the {field} field must have a minimum value of {ctx.get('ge')}"
    elif error_type == "value_error" and field == "email":
        msg = f"the {field} field is invalid"
    else:
        msg = error.get("msg", "invalid value")
    return ErrorItem(field=field, msg=msg)


def _error_response(status_code: int, items: list[ErrorItem]) -> JSONResponse:
    body = ErrorResponse(errors=items)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers so every failure, classified or not, gets the errors body."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        log_fn = logger.error if exc.status_code >= 500 else logger.info
        log_fn(
            "Request failed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "kind": exc.kind,
                "status_code": exc.status_code,
                "reason": exc.message[:500],
            },
        )
        return _error_response(exc.status_code, [ErrorItem(msg=exc.message)])

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        items = [validation_message(err) for err in exc.errors()]
        logger.info(
            "Request validation failed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "kind": "validation",
                "error_count": len(items),
            },
        )
        return _error_response(status.HTTP_400_BAD_REQUEST, items)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        # Routing failures (404, 405) raised by the framework itself.
        logger.info(
            "HTTP error",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": exc.status_code,
            },
        )
        response = _error_response(exc.status_code, [ErrorItem(msg=str(exc.detail))])
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error",
            extra={"path": request.url.path, "method": request.method},
        )
        error = InternalError()
        return _error_response(error.status_code, [ErrorItem(msg=error.message)])
