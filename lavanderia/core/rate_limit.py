# lavanderia/core/rate_limit.py

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from lavanderia.core.config import get_settings

limiter = Limiter(key_func=get_remote_address)


def tracking_rate_limit() -> str:
    return get_settings().TRACKING_RATE_LIMIT


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)} on {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=429, content={"error": "Demasiadas solicitudes, intenta más tarde"})
