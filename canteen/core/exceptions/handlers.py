import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from canteen.core.exceptions.app_exception import AppHttpException, MethodNotAllowed, NotFound

VALUE_ERROR_PREFIX = "Value error, "

# Framework-level errors answered with the application exception of the same status.
HTTP_EXCEPTIONS = {
    status.HTTP_404_NOT_FOUND: NotFound,
    status.HTTP_405_METHOD_NOT_ALLOWED: MethodNotAllowed,
}


def format_validation_message(exc: RequestValidationError) -> str:
    """Turns the first pydantic error into a single readable sentence."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    error = errors[0]
    message = error.get("msg", "Invalid request")
    if message.startswith(VALUE_ERROR_PREFIX):
        return message[len(VALUE_ERROR_PREFIX):]

    field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
    return f"{field}: {message}" if field else message


def register_exception_handlers(app: FastAPI, expose_errors: bool = True) -> None:

    async def handle_app_exception(request: Request, exc: AppHttpException):
        return JSONResponse(status_code=exc.status_code, content=exc.content)

    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        exception_class = HTTP_EXCEPTIONS.get(exc.status_code)
        content = exception_class().content if exception_class else {"success": False, "message": str(exc.detail)}
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None),
        )

    async def handle_validation_error(request: Request, exc: RequestValidationError):
        message = format_validation_message(exc)
        logging.info(f"VALIDATION >>> {request.method} {request.url.path}: {message}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": message},
        )

    async def handle_unexpected_error(request: Request, exc: Exception):
        logging.exception(f"SYSTEM >>> Unhandled error on {request.method} {request.url.path}")
        message = str(exc) if expose_errors and str(exc) else "Internal server error"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": message},
        )

    app.add_exception_handler(AppHttpException, handle_app_exception)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_unexpected_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
