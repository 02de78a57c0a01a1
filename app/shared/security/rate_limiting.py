"""
Rate limiting configuration and setup.

Uses slowapi to limit login and registration attempts per client
address. The limit itself comes from ``settings.rate_limit_auth``;
``settings.rate_limit_enabled`` switches the limiter off.
"""

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

limiter = Limiter(key_func=get_remote_address)


async def rate_limit_exceeded_handler(
    _request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Handle rate limit exceeded errors with a clean JSON response.

    Args:
        _request: The incoming HTTP request.
        exc: The rate limit exceeded exception.

    Returns:
        A 429 JSON response in the standard error shape.
    """
    return JSONResponse(
        status_code=429,
        content={"error": "Too many attempts, try again later", "detail": str(exc.detail)},
    )
