# lavanderia/core/exceptions.py

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException


class AppError(Exception):
    """Erro de aplicação com status HTTP associado."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "No token"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Sin membresía en la organización"


class BadRequest(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Solicitud inválida"


class InvalidRange(BadRequest):
    default_message = "rango inválido: desde > hasta"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "No encontrado"


class StoreError(AppError):
    default_message = "Error de base de datos"


LOC_SOURCES = ("body", "query", "path", "form")


def _error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def app_error_handler(request: Request, exc: AppError):
    log = logger.bind(path=request.url.path)
    if exc.status_code >= 500:
        log.error(f"{type(exc).__name__}: {exc.message}")
    else:
        log.warning(f"{type(exc).__name__}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return _error_response(exc.status_code, exc.message, headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(f"HTTP Exception Caught: {exc.detail}")
    return _error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning(f"Validation Error: {errors}")
    if errors:
        first = errors[0]
        # posições numéricas (índice de lista, offset do JSON) não ajudam o cliente
        parts = [p for p in first.get("loc", ()) if not isinstance(p, int) and p not in LOC_SOURCES]
        loc = ".".join(str(p) for p in parts)
        message = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))
    else:
        message = "Validation Error"
    return _error_response(status.HTTP_400_BAD_REQUEST, message)


async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled Exception: {exc}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "server error")


exception_handlers = {
    AppError: app_error_handler,
    StarletteHTTPException: http_exception_handler,
    RequestValidationError: validation_exception_handler,
    Exception: generic_exception_handler,
}
